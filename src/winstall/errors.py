"""Error kinds shared by every fallible install step."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional


class ErrorKind(Enum):
    """Classifies a failure; fatal kinds stop the whole run."""

    SOURCE_IS_DIRECTORY = "source_is_directory"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    UNAVAILABLE = "unavailable"
    BACKUP_FAILED = "backup_failed"
    COPY_FAILED = "copy_failed"
    TIMESTAMPS_FAILED = "timestamps_failed"

    @property
    def fatal(self) -> bool:
        return self in (
            ErrorKind.BACKUP_FAILED,
            ErrorKind.COPY_FAILED,
            ErrorKind.TIMESTAMPS_FAILED,
        )


class InstallError(Exception):
    """A failed step, with the path it concerns and a human-readable cause.

    ``action`` reads as the start of a diagnostic, e.g. "cannot open file to
    read"; ``reason`` is usually the OS message.
    """

    def __init__(
        self,
        kind: ErrorKind,
        action: str,
        path: Path,
        reason: Optional[str] = None,
    ):
        self.kind = kind
        self.action = action
        self.path = Path(path)
        self.reason = reason
        super().__init__(self.describe(str(self.path)))

    def describe(self, shown_path: str) -> str:
        message = f"{self.action} '{shown_path}'"
        if self.reason:
            message += f": {self.reason}"
        return message

    @classmethod
    def from_os_error(
        cls,
        exc: OSError,
        action: str,
        path: Path,
        kind: ErrorKind = ErrorKind.UNAVAILABLE,
    ) -> InstallError:
        """Build an error from an OSError.

        Missing files and permission problems get their own kinds; anything
        else takes ``kind``.
        """
        if isinstance(exc, FileNotFoundError):
            kind = ErrorKind.NOT_FOUND
        elif isinstance(exc, PermissionError):
            kind = ErrorKind.PERMISSION_DENIED
        return cls(kind, action, path, exc.strerror or str(exc))
