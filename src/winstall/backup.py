"""Backup logic: move a destination's old content aside before overwrite."""

from __future__ import annotations

import logging
import os
import re
import shutil
from pathlib import Path
from typing import BinaryIO

from .errors import ErrorKind, InstallError
from .models import BackupMode, BackupOutcome, BackupPolicy

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"[0-9]+")


def numbered_backup_path(path: Path, number: int) -> Path:
    """``dest.txt`` -> ``dest.txt.~3~``"""
    return path.with_name(f"{path.name}.~{number}~")


def simple_backup_path(path: Path, suffix: str) -> Path:
    return path.with_name(f"{path.name}{suffix}")


def highest_numbered_backup(path: Path) -> int:
    """Return the largest N for which ``<path>.~N~`` exists, 0 if none.

    An unreadable directory counts as having no numbered backups; probing
    then starts at 1 and exclusive create still refuses to clobber.
    """
    prefix = f"{path.name}.~"
    try:
        names = os.listdir(path.parent)
    except OSError as e:
        logger.debug("Cannot list %s for numbered backups: %s", path.parent, e)
        return 0

    highest = 0
    for name in names:
        if not (name.startswith(prefix) and name.endswith("~")):
            continue
        digits = name[len(prefix):-1]
        if _NUMBER.fullmatch(digits):
            highest = max(highest, int(digits))
    return highest


def relocate(handle: BinaryIO, policy: BackupPolicy, destination: Path) -> BackupOutcome:
    """Preserve the content of an open destination according to ``policy``.

    ``handle`` must be open for reading and writing. Its bytes are copied to
    a new backup file (unless the policy is NONE), then it is truncated and
    rewound so the caller can write the new content from offset 0.

    Raises InstallError(BACKUP_FAILED) if the backup cannot be created.
    """
    if policy.mode is BackupMode.NONE:
        outcome = BackupOutcome.removed(destination)
    elif policy.mode is BackupMode.NUMBERED:
        outcome = BackupOutcome.backed_up(_numbered_backup(handle, destination))
    elif policy.mode is BackupMode.SIMPLE:
        outcome = BackupOutcome.backed_up(_simple_backup(handle, destination, policy.suffix))
    elif policy.mode is BackupMode.EXISTING:
        if highest_numbered_backup(destination) > 0:
            backup = _numbered_backup(handle, destination)
        else:
            backup = _simple_backup(handle, destination, policy.suffix)
        outcome = BackupOutcome.backed_up(backup)
    else:
        raise ValueError(f"Unknown backup mode: {policy.mode!r}")

    try:
        handle.seek(0)
        handle.truncate()
    except OSError as e:
        raise InstallError(
            ErrorKind.BACKUP_FAILED, "cannot truncate", destination, e.strerror,
        ) from e
    return outcome


def _numbered_backup(handle: BinaryIO, destination: Path) -> Path:
    number = highest_numbered_backup(destination) + 1
    while True:
        candidate = numbered_backup_path(destination, number)
        try:
            backup = open(candidate, "xb")
        except FileExistsError:
            number += 1
            continue
        except OSError as e:
            raise InstallError(
                ErrorKind.BACKUP_FAILED, "cannot create backup", candidate, e.strerror,
            ) from e
        with backup:
            _fill_backup(handle, backup, candidate)
        return candidate


def _simple_backup(handle: BinaryIO, destination: Path, suffix: str) -> Path:
    candidate = simple_backup_path(destination, suffix)
    try:
        backup = open(candidate, "xb")
    except OSError as e:
        raise InstallError(
            ErrorKind.BACKUP_FAILED, "cannot create backup", candidate, e.strerror,
        ) from e
    with backup:
        _fill_backup(handle, backup, candidate)
    return candidate


def _fill_backup(handle: BinaryIO, backup: BinaryIO, backup_path: Path) -> None:
    try:
        handle.seek(0)
        shutil.copyfileobj(handle, backup)
    except OSError as e:
        raise InstallError(
            ErrorKind.BACKUP_FAILED, "cannot write backup", backup_path, e.strerror,
        ) from e
    logger.debug("Backed up %s -> %s", handle.name, backup_path)
