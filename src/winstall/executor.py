"""Copy orchestrator: open, ensure directory, back up, stream, stamp, report."""

from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import BinaryIO, Optional

from .backup import relocate
from .diagnostics import DiagnosticSink
from .directories import ensure_directory
from .errors import ErrorKind, InstallError
from .models import (
    BackupOutcome,
    CopyDirective,
    ExecutionReport,
    FileOutcome,
    FileResult,
)

logger = logging.getLogger(__name__)

_OUTCOME_FOR_KIND = {
    ErrorKind.SOURCE_IS_DIRECTORY: FileOutcome.SKIPPED_DIRECTORY,
    ErrorKind.NOT_FOUND: FileOutcome.NOT_FOUND,
    ErrorKind.PERMISSION_DENIED: FileOutcome.PERMISSION_DENIED,
}


class CopyExecutor:
    """Runs a CopyDirective file by file, in order.

    Recoverable failures are reported through the sink and the batch moves
    on; fatal ones (backup creation, byte copy, timestamps) propagate as
    InstallError and end the run.
    """

    def __init__(self, sink: DiagnosticSink):
        self.sink = sink

    def execute(self, directive: CopyDirective) -> ExecutionReport:
        report = ExecutionReport()
        for source in directive.files:
            report.results.append(self._process(Path(source), directive))

        logger.debug(
            "Install summary: copied=%d backups=%d failed=%d",
            report.copied, report.backed_up, report.failed,
        )
        return report

    def _process(self, source: Path, directive: CopyDirective) -> FileResult:
        destination = directive.destination.path_for(source)
        try:
            backup = self._install_file(source, destination, directive)
        except InstallError as e:
            if e.kind.fatal:
                raise
            self.sink.error(e)
            outcome = _OUTCOME_FOR_KIND.get(e.kind, FileOutcome.FAILED)
            return FileResult(source, destination, outcome)

        if directive.verbose:
            self.sink.copied(
                source, destination, backup.backup_path if backup is not None else None,
            )
        return FileResult(source, destination, FileOutcome.SUCCESS, backup)

    def _install_file(
        self,
        source: Path,
        destination: Path,
        directive: CopyDirective,
    ) -> Optional[BackupOutcome]:
        """Copy one file. Returns the backup outcome if the destination existed."""
        if source.is_dir():
            raise InstallError(ErrorKind.SOURCE_IS_DIRECTORY, "skipping directory", source)

        try:
            reader = open(source, "rb")
        except OSError as e:
            raise InstallError.from_os_error(e, "cannot open file to read", source) from e

        with reader:
            times = _snapshot_times(reader, source) if directive.preserve_timestamps else None

            created = ensure_directory(destination.parent, recursive=directive.make_all_directories)
            if created and directive.verbose:
                self.sink.created_directory(destination.parent)

            if _same_file(source, destination):
                raise InstallError(
                    ErrorKind.UNAVAILABLE, "cannot overwrite", destination,
                    "source and destination are the same file",
                )

            writer, existed = _open_destination(destination)
            with writer:
                backup = relocate(writer, directive.policy, destination) if existed else None
                if directive.verbose and backup is not None and backup.backup_path is None:
                    self.sink.removed(destination)
                _stream(reader, writer, destination)
                if times is not None:
                    _apply_times(writer, destination, times)
        return backup


def _open_destination(path: Path) -> tuple[BinaryIO, bool]:
    """Open ``path`` read/write, creating it if absent.

    Returns the handle and whether the file already existed.
    """
    try:
        return open(path, "x+b"), False
    except FileExistsError:
        pass
    except OSError as e:
        raise InstallError.from_os_error(e, "cannot open file to write", path) from e

    try:
        return open(path, "r+b"), True
    except OSError as e:
        raise InstallError.from_os_error(e, "cannot open file to write", path) from e


def _same_file(source: Path, destination: Path) -> bool:
    try:
        return destination.exists() and os.path.samefile(source, destination)
    except OSError:
        return False


def _snapshot_times(reader: BinaryIO, source: Path) -> tuple[int, int]:
    """Access and modification times of the open source, in nanoseconds."""
    try:
        st = os.fstat(reader.fileno())
    except OSError as e:
        raise InstallError(
            ErrorKind.TIMESTAMPS_FAILED, "cannot read timestamps of", source, e.strerror,
        ) from e
    return st.st_atime_ns, st.st_mtime_ns


def _stream(reader: BinaryIO, writer: BinaryIO, destination: Path) -> None:
    try:
        shutil.copyfileobj(reader, writer)
        writer.flush()
    except OSError as e:
        raise InstallError(
            ErrorKind.COPY_FAILED, "cannot copy to", destination, e.strerror,
        ) from e
    logger.debug("Copied %d bytes to %s", writer.tell(), destination)


def _apply_times(writer: BinaryIO, destination: Path, times: tuple[int, int]) -> None:
    try:
        writer.flush()
        if os.utime in os.supports_fd:
            os.utime(writer.fileno(), ns=times)
        else:
            os.utime(destination, ns=times)
    except OSError as e:
        raise InstallError(
            ErrorKind.TIMESTAMPS_FAILED, "cannot set timestamps of", destination, e.strerror,
        ) from e
