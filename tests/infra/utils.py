"""Test utilities"""

import contextlib
import fcntl
import os
import pathlib
import pty
import struct
import subprocess
import sys
import termios
from typing import Iterator

from jobtail.helpers.curses_utils import Size

DOWN_ARROW = "\x1b[B"
UP_ARROW = "\x1b[A"
TAB = "\t"
ESCAPE = "\x1b"


def set_terminal_size(slave: int, terminal_size: Size) -> None:
    """Set the terminal size"""
    fcntl.ioctl(
        slave,
        termios.TIOCSWINSZ,
        struct.pack(
            "HHHH",
            terminal_size.height,
            terminal_size.width,
            terminal_size.height,
            terminal_size.width,
        ),
    )


@contextlib.contextmanager
def jobtail_process(
    stdout_path: pathlib.Path,
    stderr_path: pathlib.Path,
    terminal_size: Size,
    *extra_args: str,
) -> Iterator[tuple[int, subprocess.Popen]]:
    """Context manager for running jobtail in a pseudo terminal."""
    master, slave = pty.openpty()
    set_terminal_size(slave, terminal_size)
    log_file = stdout_path.parent / "jobtail-test.log"
    with subprocess.Popen(
        [
            sys.executable,
            "-m",
            "jobtail",
            "--no-mouse",
            "--log-file",
            str(log_file),
            *extra_args,
            str(stdout_path),
            str(stderr_path),
        ],
        stdin=slave,
        stdout=slave,
        stderr=slave,
        close_fds=True,
        env=os.environ.copy() | {"TERM": "linux"},
    ) as process:
        os.close(slave)
        try:
            yield master, process
        finally:
            os.close(master)
            if process.poll() is None:
                process.terminate()
