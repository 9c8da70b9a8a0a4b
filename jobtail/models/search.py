"""Case-insensitive substring search over a pane's visual lines"""

import re
from typing import Sequence


def find_match(
    lines: Sequence[str], query: str, y_offset: int, forward: bool
) -> int | None:
    """Find the next line containing the query, wrapping around the buffer.

    Forward searches start on the line after the offset, backward searches on
    the line before it. Returns the matching line index or None.
    """
    if not query or not lines:
        return None
    needle = query.lower()
    count = len(lines)

    if forward:
        start = y_offset + 1
        if start >= count:
            start = 0
        order = [*range(start, count), *range(0, start)]
    else:
        start = y_offset - 1
        if start < 0:
            start = count - 1
        order = [*range(start, -1, -1), *range(count - 1, start, -1)]

    for index in order:
        if needle in lines[index].lower():
            return index
    return None


def match_spans(line: str, needle: str) -> list[tuple[int, int]]:
    """Get the (start, end) spans of every case-insensitive match in a line"""
    if not needle or not line.strip():
        return []
    pattern = re.compile(re.escape(needle), re.IGNORECASE)
    return [match.span() for match in pattern.finditer(line)]
