"""Decorated visual lines of a pane, rebuilt lazily"""

import itertools
from typing import Callable, Iterable, NamedTuple, Sequence

from jobtail.models.search import match_spans


class Segment(NamedTuple):
    """A run of text drawn in a single style category"""

    text: str
    style: str = "text"


StyledLine = tuple[Segment, ...]

Decorator = Callable[[int, str], StyledLine]


def plain_line(_index: int, line: str) -> StyledLine:
    """Decorate a visual line with no highlighting"""
    return (Segment(line),) if line else ()


def decorate_line(
    line: str, needle: str, bounds: tuple[int, int] | None
) -> StyledLine:
    """Split a visual line into styled segments.

    Search matches are drawn upper-cased in the "search" style, the selected
    span in the "selection" style, and matches inside the selected span in
    the "selection_search" style.
    """
    if not line:
        return ()

    chars = list(line)
    styles = ["text"] * len(line)
    if bounds is not None:
        start, end = bounds
        styles[start:end] = ["selection"] * (end - start)

    for start, end in match_spans(line, needle):
        upper = line[start:end].upper()
        if len(upper) == end - start:
            chars[start:end] = upper
        for i in range(start, end):
            styles[i] = "selection_search" if styles[i] == "selection" else "search"

    return tuple(
        Segment("".join(char for char, _ in group), style)
        for style, group in itertools.groupby(
            zip(chars, styles), key=lambda cell: cell[1]
        )
    )


class RenderCache:
    """Flattened, decorated visual lines of a pane"""

    def __init__(self, decorate: Decorator = plain_line) -> None:
        self._decorate = decorate
        self._lines: list[StyledLine] = []
        self._dirty = True

    @property
    def dirty(self) -> bool:
        """Check if the next read rebuilds every line"""
        return self._dirty

    def invalidate(self) -> None:
        """Mark the cache for a full rebuild before the next read"""
        self._dirty = True

    def append(self, block: Sequence[str], first_index: int) -> None:
        """Decorate a new block and append it, unless a rebuild is pending"""
        if self._dirty:
            return
        self._lines.extend(
            self._decorate(first_index + offset, line)
            for offset, line in enumerate(block)
        )

    def lines(self, blocks: Iterable[Sequence[str]]) -> list[StyledLine]:
        """Get the decorated lines, rebuilding them from the blocks if dirty"""
        if self._dirty:
            index = 0
            rebuilt = []
            for block in blocks:
                for line in block:
                    rebuilt.append(self._decorate(index, line))
                    index += 1
            self._lines = rebuilt
            self._dirty = False
        return self._lines
