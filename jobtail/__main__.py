#!/usr/bin/env python3
"""
Job Log Tail TUI - live dual-pane viewer for the stdout and stderr of a batch job
"""
import argparse
import curses
import logging
import os

from jobtail.config import TailConfig, default_log_file
from jobtail.input_controller import CursesInputController
from jobtail.models.modes import TailMode
from jobtail.output_controller import CursesOutputController
from jobtail.views.app import App

logger = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return number


def _configure_logging(log_file: str | None) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(name)s[%(process)d]: %(levelname)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.FileHandler(
                log_file or default_log_file(), mode="a", encoding="utf-8"
            ),
        ],
    )


def _init_app(stdscr: curses.window, config: TailConfig) -> None:
    output_controller = CursesOutputController(stdscr)
    input_controller = CursesInputController(stdscr)
    logger.info("Starting viewer for job %r", config.job_id)
    viewer = App(output_controller, input_controller, config)
    try:
        viewer.run()
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt")
    except BaseException as e:
        logger.exception("An error occurred")
        raise e
    finally:
        logger.info("Exiting viewer")


def create_parser() -> argparse.ArgumentParser:
    """Build the command line parser"""
    parser = argparse.ArgumentParser(
        prog="jobtail",
        description="Job Log Tail TUI - follow the stdout and stderr of a job",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
    Examples:
      %(prog)s slurm-123.out slurm-123.err
      %(prog)s --mode stderr --job-id 123 "" slurm-123.err
      %(prog)s --stacked --max-lines 20000 job.out job.err

    Environment:
      JOBTAIL_MAX_LINES        - lines kept per pane (default 5000)
      JOBTAIL_LOG_ARCHIVE_DIR  - archived logs of finished jobs
      JOBTAIL_LOG_FILE         - where the viewer writes its own log
      PAGER                    - pager for 'v' (default: vim -R)
    """,
    )

    parser.add_argument(
        "stdout_path", nargs="?", default="", help="Path of the job's stdout file"
    )
    parser.add_argument(
        "stderr_path", nargs="?", default="", help="Path of the job's stderr file"
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in TailMode],
        default=TailMode.BOTH.value,
        help="Which streams to show (default: both)",
    )
    parser.add_argument(
        "--stacked",
        action="store_true",
        help="Stack the panes vertically instead of side by side",
    )
    parser.add_argument(
        "--max-lines",
        type=_positive_int,
        default=None,
        help="Lines kept in memory per pane",
    )
    parser.add_argument("--job-id", default="", help="Job id shown in the footer")
    parser.add_argument(
        "--no-mouse",
        action="store_true",
        help="Start with mouse reporting off",
    )
    parser.add_argument(
        "--archive-dir",
        default=None,
        help="Directory of archived logs, named in the hint for missing paths",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="File the viewer writes its own log to",
    )
    return parser


def main() -> None:
    """Main entry point"""
    parser = create_parser()
    args = parser.parse_args()

    for path in (args.stdout_path, args.stderr_path):
        if path and os.path.isdir(path):
            parser.error(f"'{path}' is a directory")

    _configure_logging(args.log_file)
    config = TailConfig.from_args(args)

    os.environ.setdefault("ESCDELAY", "25")
    curses.wrapper(_init_app, config)


if __name__ == "__main__":
    main()
