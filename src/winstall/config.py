"""Environment settings and backup-mode resolution."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .models import DEFAULT_SUFFIX, BackupMode, BackupPolicy

# Accepted spellings for each backup mode
BACKUP_MODE_NAMES = {
    "none": BackupMode.NONE,
    "off": BackupMode.NONE,
    "simple": BackupMode.SIMPLE,
    "never": BackupMode.SIMPLE,
    "existing": BackupMode.EXISTING,
    "nil": BackupMode.EXISTING,
    "numbered": BackupMode.NUMBERED,
    "t": BackupMode.NUMBERED,
}


class InvalidBackupMode(ValueError):
    """Raised for a backup control value that names no known mode."""

    def __init__(self, value: str, source: str):
        self.value = value
        self.source = source
        super().__init__(
            f"invalid argument '{value}' for '{source}'\n"
            "Valid arguments are:\n"
            "  - 'none', 'off'\n"
            "  - 'simple', 'never'\n"
            "  - 'existing', 'nil'\n"
            "  - 'numbered', 't'"
        )


@dataclass
class BackupSettings:
    """Backup defaults taken from the environment."""

    version_control: Optional[str] = None
    suffix: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> BackupSettings:
        env = os.environ if environ is None else environ
        return cls(
            version_control=env.get("VERSION_CONTROL") or None,
            suffix=env.get("SIMPLE_BACKUP_SUFFIX") or None,
        )


def parse_backup_mode(value: str, source: str = "backup type") -> BackupMode:
    """Parse a backup control word such as 'numbered' or 't'."""
    try:
        return BACKUP_MODE_NAMES[value]
    except KeyError:
        raise InvalidBackupMode(value, source) from None


def resolve_backup_policy(
    requested: Optional[str],
    suffix: Optional[str] = None,
    settings: Optional[BackupSettings] = None,
) -> BackupPolicy:
    """Turn command-line backup options into a BackupPolicy.

    ``requested`` is None when no backup was asked for, "" for a bare
    ``-b``/``--backup`` (mode from $VERSION_CONTROL, else existing), or an
    explicit control word. The suffix comes from ``suffix``, then
    $SIMPLE_BACKUP_SUFFIX, then "~".
    """
    settings = settings or BackupSettings()

    if requested is None:
        return BackupPolicy.none()

    if requested:
        mode = parse_backup_mode(requested)
    elif settings.version_control:
        mode = parse_backup_mode(settings.version_control, "$VERSION_CONTROL")
    else:
        mode = BackupMode.EXISTING

    effective_suffix = suffix or settings.suffix or DEFAULT_SUFFIX
    return BackupPolicy(mode, effective_suffix)
