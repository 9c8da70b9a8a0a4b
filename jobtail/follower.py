"""Follows a log file with an external `tail` process.

Every function here returns a task: a zero-argument callable that the task
runner executes off the UI loop and whose return value (a message or None) is
delivered back to the loop.
"""

import dataclasses
import logging
import subprocess
import threading
from typing import IO, Callable, Union

from jobtail.helpers.text import split_output
from jobtail.models.modes import PaneName

logger = logging.getLogger(__name__)

EMPTY_FILE_LINE = "(file exists but is empty)"
WAITING_LINE = "Waiting for file to appear (tail -F)..."


class StreamEnded(EOFError):
    """The follow process closed its output"""

    def __str__(self) -> str:
        return "Stream ended (tail exited)"


class ReaderNotInitialized(RuntimeError):
    """A read was requested for a pane that has no follow process"""

    def __str__(self) -> str:
        return "log reader not initialized"


class StreamHandle:
    """A running follow process and the pipe its output is read from"""

    def __init__(self, process: subprocess.Popen, path: str = "") -> None:
        self.process = process
        self.path = path
        self._lock = threading.Lock()
        self._released = False

    @property
    def pipe(self) -> IO[str] | None:
        """Get the merged stdout/stderr pipe of the process"""
        return self.process.stdout

    @property
    def released(self) -> bool:
        """Check if the process has been killed and its pipe closed"""
        return self._released

    def readline(self) -> str:
        """Block until the next line (or end of stream) arrives"""
        if self.pipe is None:
            raise ReaderNotInitialized()
        return self.pipe.readline()

    def release(self) -> None:
        """Kill the process, reap it and close the pipe, once"""
        with self._lock:
            if self._released:
                logger.debug("tail for %s already released", self.path)
                return
            self._released = True

        pid = self.process.pid
        if self.process.poll() is None:
            try:
                self.process.kill()
            except ProcessLookupError:
                logger.debug("tail[%d] already gone", pid)
        self.process.wait()
        if self.pipe is not None:
            self.pipe.close()
        logger.info("Released tail[%d] for %s", pid, self.path)


@dataclasses.dataclass
class TailStarted:
    """Initial history of a pane and the handle to follow it with"""

    pane: PaneName
    initial_lines: list[str]
    handle: StreamHandle | None = None
    start_error: Exception | None = None


@dataclasses.dataclass
class LineArrived:
    """A line (or a terminal error) read from a pane's follow process"""

    pane: PaneName
    line: str = ""
    error: Exception | None = None
    terminal: bool = False

    @property
    def has_content(self) -> bool:
        """Check if the message carries text to append"""
        return self.error is None or bool(self.line)


Message = Union[TailStarted, LineArrived]

Task = Callable[[], Message | None]


def unresolved_path_lines(archive_dir: str) -> list[str]:
    """Explain why a pane has no log path to follow"""
    if archive_dir:
        archive_hint = f"  • No archived log found in {archive_dir}"
    else:
        archive_hint = "  • No archived log found in the convention directory"
    archive = archive_dir or "<archive dir>"
    return [
        "⚠ No log path available",
        "",
        "This can happen when:",
        "  • Job is too old (purged from the accounting database)",
        "  • The scheduler couldn't resolve the output paths",
        archive_hint,
        "  • Job was submitted without output files",
        "",
        "Convention for finished jobs:",
        f"  • {archive}/<jobid>.out",
        f"  • {archive}/<jobid>.err",
        "  • Override dir with JOBTAIL_LOG_ARCHIVE_DIR",
    ]


def read_history(path: str, capacity: int) -> list[str]:
    """Read the last lines of a file in one shot"""
    command = ["tail", "-n", str(capacity) if capacity > 0 else "+1", path]
    try:
        result = subprocess.run(
            command,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
        )
    except OSError as e:
        logger.warning("Could not run %s: %s", command, e)
        return _cannot_read_lines(path, str(e))

    lines = split_output(result.stdout)
    if result.returncode == 0:
        return lines or [EMPTY_FILE_LINE]

    logger.info("History read of %s exited with %d", path, result.returncode)
    error = " ".join(lines) or f"exit status {result.returncode}"
    return _cannot_read_lines(path, error)


def _cannot_read_lines(path: str, error: str) -> list[str]:
    return [
        f"⚠ Cannot read: {path}",
        "",
        f"Error: {error}",
        "",
        WAITING_LINE,
    ]


def spawn_follower(path: str) -> StreamHandle:
    """Start following a file from its current end"""
    process = subprocess.Popen(  # pylint: disable=consider-using-with
        ["tail", "-n", "0", "-F", path],
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        stdin=subprocess.DEVNULL,
        text=True,
        encoding="utf-8",
        errors="replace",
        start_new_session=True,
    )
    logger.info("Started tail[%d] for %s", process.pid, path)
    return StreamHandle(process, path)


def start_tail_task(
    pane: PaneName, path: str, capacity: int, archive_dir: str = ""
) -> Task:
    """Create a task that loads a pane's history and starts following it"""

    def start() -> TailStarted:
        if not path:
            return TailStarted(
                pane,
                unresolved_path_lines(archive_dir),
                start_error=FileNotFoundError("no path provided"),
            )

        initial_lines = read_history(path, capacity)
        try:
            handle = spawn_follower(path)
        except OSError as e:
            logger.error("Could not start tail for %s: %s", path, e)
            return TailStarted(
                pane,
                [*initial_lines, f"Error starting tail: {e}"],
                start_error=e,
            )
        return TailStarted(pane, initial_lines, handle)

    return start


def wait_for_line_task(pane: PaneName, handle: StreamHandle | None) -> Task:
    """Create a task that blocks until the next line of a pane arrives"""

    def wait_for_line() -> LineArrived:
        if handle is None:
            return LineArrived(pane, error=ReaderNotInitialized(), terminal=True)
        try:
            raw = handle.readline()
        except (OSError, ValueError, ReaderNotInitialized) as e:
            logger.warning("Reading %s failed: %s", pane, e)
            return LineArrived(pane, error=e, terminal=True)

        if not raw:
            logger.info("tail for %s pane exited", pane)
            return LineArrived(pane, error=StreamEnded(), terminal=True)
        return LineArrived(pane, raw.rstrip("\r\n"))

    return wait_for_line


def cleanup_task(handle: StreamHandle | None) -> Task:
    """Create a task that releases a follow process"""

    def cleanup() -> None:
        if handle is not None:
            handle.release()

    return cleanup

