"""Data models for winstall."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

DEFAULT_SUFFIX = "~"


class BackupMode(Enum):
    """How existing destination content is preserved."""

    NONE = "none"
    NUMBERED = "numbered"
    SIMPLE = "simple"
    EXISTING = "existing"


@dataclass(frozen=True)
class BackupPolicy:
    """A backup mode plus the suffix used for simple backups."""

    mode: BackupMode = BackupMode.NONE
    suffix: str = DEFAULT_SUFFIX

    @classmethod
    def none(cls) -> BackupPolicy:
        return cls(BackupMode.NONE)

    @classmethod
    def numbered(cls) -> BackupPolicy:
        return cls(BackupMode.NUMBERED)

    @classmethod
    def simple(cls, suffix: str = DEFAULT_SUFFIX) -> BackupPolicy:
        return cls(BackupMode.SIMPLE, suffix)

    @classmethod
    def existing(cls, suffix: str = DEFAULT_SUFFIX) -> BackupPolicy:
        return cls(BackupMode.EXISTING, suffix)


class OutcomeKind(Enum):
    REMOVED = "removed"
    BACKED_UP = "backed_up"


@dataclass(frozen=True)
class BackupOutcome:
    """What happened to a destination's previous content."""

    kind: OutcomeKind
    path: Path

    @classmethod
    def removed(cls, path: Path) -> BackupOutcome:
        return cls(OutcomeKind.REMOVED, path)

    @classmethod
    def backed_up(cls, path: Path) -> BackupOutcome:
        return cls(OutcomeKind.BACKED_UP, path)

    @property
    def backup_path(self) -> Optional[Path]:
        """Path of the created backup file, None when content was discarded."""
        return self.path if self.kind is OutcomeKind.BACKED_UP else None


@dataclass(frozen=True)
class Destination:
    """Where sources land.

    Either a directory (each source keeps its own name) or, in file-target
    mode, one explicit file whose parent is the directory.
    """

    directory: Path
    file_name: Optional[str] = None

    @classmethod
    def file(cls, path: Path) -> Destination:
        return cls(directory=path.parent, file_name=path.name)

    @property
    def is_file_target(self) -> bool:
        return self.file_name is not None

    def path_for(self, source: Path) -> Path:
        return self.directory / (self.file_name or source.name)


@dataclass(frozen=True)
class CopyDirective:
    """Validated instructions for one install run."""

    files: tuple[Path, ...]
    destination: Destination
    policy: BackupPolicy = field(default_factory=BackupPolicy.none)
    preserve_timestamps: bool = False
    make_all_directories: bool = False
    verbose: bool = False

    def __post_init__(self):
        if not self.files:
            raise ValueError("A copy directive needs at least one source file")
        if self.destination.is_file_target and len(self.files) > 1:
            raise ValueError(
                f"Target file '{self.destination.path_for(self.files[0])}' "
                f"cannot receive {len(self.files)} sources"
            )


class FileOutcome(Enum):
    """Per-file result tag."""

    SUCCESS = "success"
    SKIPPED_DIRECTORY = "skipped-directory"
    NOT_FOUND = "not-found"
    PERMISSION_DENIED = "permission-denied"
    FAILED = "failed"


@dataclass
class FileResult:
    """One source file's fate."""

    source: Path
    destination: Path
    outcome: FileOutcome
    backup: Optional[BackupOutcome] = None

    @property
    def ok(self) -> bool:
        return self.outcome is FileOutcome.SUCCESS


@dataclass
class ExecutionReport:
    """Summary of an install run."""

    results: list[FileResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return all(result.ok for result in self.results)

    @property
    def copied(self) -> int:
        return sum(1 for result in self.results if result.ok)

    @property
    def backed_up(self) -> int:
        return sum(
            1 for result in self.results
            if result.backup is not None and result.backup.backup_path is not None
        )

    @property
    def failed(self) -> int:
        return len(self.results) - self.copied
