"""Shared test infrastructure for end to end tests"""

import pathlib
import shutil
from typing import Iterator

import pytest

from jobtail.helpers.curses_utils import Size
from tests.e2e.file_test_app import JobTestApp
from tests.infra.utils import jobtail_process

STARTUP_TEXT = "q/esc back"


@pytest.fixture(name="test_app")
def test_app_fixture(tmp_path: pathlib.Path) -> Iterator[JobTestApp]:
    """Run the app on a fresh pair of log files and capture its output"""
    if shutil.which("tail") is None:
        pytest.skip("needs tail")
    stdout_path = tmp_path / "job.out"
    stderr_path = tmp_path / "job.err"
    stdout_path.write_text("".join(f"compute step {i}\n" for i in range(30)))
    stderr_path.write_text("warning: low memory\n")

    terminal_size = Size(30, 120)
    with jobtail_process(stdout_path, stderr_path, terminal_size) as (fd, process):
        app = JobTestApp(fd, process, stdout_path, stderr_path, terminal_size)
        app.read_text_until(STARTUP_TEXT, timeout=5)
        yield app
