"""Human-readable progress and error lines."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, TextIO

import click

from .errors import InstallError

PROGRAM = "winstall"


class DiagnosticSink:
    """Writes install diagnostics, showing paths relative to ``root``.

    Progress lines go to ``out`` and error lines to ``err``; when a stream
    is not given, click's stdout/stderr are used.
    """

    def __init__(
        self,
        root: Optional[Path] = None,
        out: Optional[TextIO] = None,
        err: Optional[TextIO] = None,
    ):
        self.root = Path.cwd() if root is None else Path(root)
        self.out = out
        self.err = err

    def display(self, path: Path) -> str:
        """Render ``path`` relative to the working root when it lies below it."""
        path = Path(path)
        if not path.is_absolute():
            return str(path)
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            # Outside the root: show it as given
            return str(path)
        return str(relative) if relative.parts else "."

    def _echo(self, line: str, err: bool = False) -> None:
        stream = self.err if err else self.out
        if stream is None:
            click.echo(line, err=err)
        else:
            click.echo(line, file=stream)

    def copied(self, source: Path, destination: Path, backup: Optional[Path] = None) -> None:
        line = f"'{self.display(source)}' -> '{self.display(destination)}'"
        if backup is not None:
            line += f" (backup: '{self.display(backup)}')"
        self._echo(line)

    def removed(self, path: Path) -> None:
        self._echo(f"removed '{self.display(path)}'")

    def created_directory(self, path: Path) -> None:
        self._echo(f"{PROGRAM}: creating directory '{self.display(path)}'")

    def error(self, error: InstallError) -> None:
        self._echo(f"{PROGRAM}: {error.describe(self.display(error.path))}", err=True)

    def usage_error(self, message: str) -> None:
        self._echo(f"{PROGRAM}: {message}", err=True)
        self._echo(f"Try '{PROGRAM} --help' for more information.", err=True)
