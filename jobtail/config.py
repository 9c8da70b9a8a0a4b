"""Settings of a viewer session, from the command line and the environment"""

import argparse
import dataclasses
import logging
import os
import tempfile
from pathlib import Path

from jobtail.models.modes import TailMode
from jobtail.models.pane import MAX_LOG_LINES

logger = logging.getLogger(__name__)

MAX_LINES_ENV = "JOBTAIL_MAX_LINES"
ARCHIVE_DIR_ENV = "JOBTAIL_LOG_ARCHIVE_DIR"
LOG_FILE_ENV = "JOBTAIL_LOG_FILE"

DEFAULT_ARCHIVE_DIR = "~/.jobtail/logs"


def env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment"""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive", name, raw)
        return default
    return value


def default_archive_dir() -> str:
    """Directory holding archived logs of finished jobs"""
    return os.path.expanduser(os.environ.get(ARCHIVE_DIR_ENV) or DEFAULT_ARCHIVE_DIR)


def default_log_file() -> Path:
    """File the viewer writes its own log to"""
    return Path(
        os.environ.get(LOG_FILE_ENV) or Path(tempfile.gettempdir()) / "jobtail.log"
    )


@dataclasses.dataclass
class TailConfig:  # pylint: disable=too-many-instance-attributes
    """Settings of a viewer session"""

    stdout_path: str = ""
    stderr_path: str = ""
    mode: TailMode = TailMode.BOTH
    stacked: bool = False
    max_lines: int = MAX_LOG_LINES
    job_id: str = ""
    mouse: bool = True
    archive_dir: str = dataclasses.field(default_factory=default_archive_dir)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "TailConfig":
        """Build the settings from parsed command line arguments"""
        max_lines = args.max_lines
        if max_lines is None:
            max_lines = env_int(MAX_LINES_ENV, MAX_LOG_LINES)
        return cls(
            stdout_path=args.stdout_path or "",
            stderr_path=args.stderr_path or "",
            mode=TailMode(args.mode),
            stacked=args.stacked,
            max_lines=max_lines,
            job_id=args.job_id or "",
            mouse=not args.no_mouse,
            archive_dir=os.path.expanduser(args.archive_dir or default_archive_dir()),
        )
