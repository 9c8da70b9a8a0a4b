"""Text helpers for log lines: control-sequence cleanup and word wrapping"""

import re
import textwrap

_CURSOR_MOVEMENT = re.compile(r"\x1b\[[0-9;]*[A-KSTf]")

# curses draws escape sequences literally, so colors are dropped as well
_SGR = re.compile(r"\x1b\[[0-9;]*m")


def clean_log_line(line: str) -> str:
    """Remove cursor movement codes and collapse carriage-return overwrites.

    A trailing carriage return terminates the line. A carriage return in the
    middle of the line means the terminal would have overwritten everything
    before it, so only the text after the last one is kept.
    """
    line = _CURSOR_MOVEMENT.sub("", line)
    line = _SGR.sub("", line)
    line = line.rstrip("\r")
    _, _, tail = line.rpartition("\r")
    return tail


def wrap_line(line: str, width: int) -> list[str]:
    """Word-wrap a logical line into visual lines of at most `width` columns"""
    if not line:
        return [""]
    if width <= 0:
        return [line]
    wrapped = textwrap.wrap(
        line,
        width,
        replace_whitespace=False,
        break_on_hyphens=False,
    )
    return wrapped or [""]


def split_output(output: str) -> list[str]:
    """Split command output into lines, dropping the final line terminator"""
    output = output.rstrip("\r\n")
    if not output:
        return []
    return [line.rstrip("\r") for line in output.split("\n")]
