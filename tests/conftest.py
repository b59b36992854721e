"""Shared test fixtures for winstall."""

from __future__ import annotations

import io
import os
import shutil
import tempfile
from pathlib import Path

import pytest

from winstall.diagnostics import DiagnosticSink

running_as_root = hasattr(os, "geteuid") and os.geteuid() == 0

skip_if_root = pytest.mark.skipif(
    running_as_root or os.name == "nt",
    reason="permission bits are not enforced for this user/platform",
)


class RecordingSink(DiagnosticSink):
    """DiagnosticSink writing into in-memory buffers."""

    def __init__(self, root: Path):
        super().__init__(root=root, out=io.StringIO(), err=io.StringIO())

    @property
    def out_lines(self) -> list[str]:
        return self.out.getvalue().splitlines()

    @property
    def err_lines(self) -> list[str]:
        return self.err.getvalue().splitlines()


@pytest.fixture
def tmp_dir():
    """Create a temporary directory for tests."""
    d = tempfile.mkdtemp(prefix="winstall-test-")
    yield Path(d)
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def write_file(tmp_dir):
    """Factory fixture: write text content to a path below tmp_dir."""

    def _write(relative: str, content: str = "") -> Path:
        path = tmp_dir / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


@pytest.fixture
def sink(tmp_dir):
    return RecordingSink(tmp_dir)


@pytest.fixture
def locked_dir(tmp_dir):
    """A directory with no permissions; restored before cleanup."""
    path = tmp_dir / "locked"
    path.mkdir()
    path.chmod(0)
    yield path
    path.chmod(0o755)
