"""Destination directory creation."""

from __future__ import annotations

import logging
from pathlib import Path

from .diagnostics import DiagnosticSink
from .errors import ErrorKind, InstallError

logger = logging.getLogger(__name__)


def ensure_directory(path: Path, recursive: bool = False) -> bool:
    """Make sure ``path`` exists as a directory.

    Non-recursive mode creates only the last segment and fails when a parent
    is missing. An existing directory is accepted as is; an existing
    non-directory is an error.

    Returns True if this call created the directory. Raises a recoverable
    InstallError otherwise.
    """
    try:
        path.mkdir(parents=recursive)
    except FileExistsError as e:
        if path.is_dir():
            return False
        raise InstallError(
            ErrorKind.UNAVAILABLE, "cannot create directory", path, "Not a directory",
        ) from e
    except OSError as e:
        raise InstallError.from_os_error(e, "cannot create directory", path) from e
    logger.debug("Created directory %s (recursive=%s)", path, recursive)
    return True


def install_directories(paths: list[Path], sink: DiagnosticSink, verbose: bool = False) -> bool:
    """Create each directory in ``paths`` with all its parents.

    Failures are reported and do not stop the remaining directories.
    Returns True if every directory exists afterwards.
    """
    ok = True
    for path in paths:
        try:
            created = ensure_directory(path, recursive=True)
        except InstallError as e:
            sink.error(e)
            ok = False
            continue
        if created and verbose:
            sink.created_directory(path)
    return ok
