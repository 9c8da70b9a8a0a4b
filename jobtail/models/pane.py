"""Bounded line buffer of a tailed stream with its wrapped view and scroll state"""

import collections
from typing import TYPE_CHECKING, Iterable

from jobtail.helpers.text import clean_log_line, wrap_line
from jobtail.models.modes import PaneName
from jobtail.models.render_cache import Decorator, RenderCache, StyledLine, plain_line

if TYPE_CHECKING:
    from jobtail.follower import StreamHandle

MAX_LOG_LINES = 5000


class Pane:
    """Raw logical lines, one wrapped block per line, and a scroll offset.

    The raw lines and the wrapped blocks always have the same length, which
    never exceeds the capacity; the oldest line is evicted first.
    """

    def __init__(
        self,
        name: PaneName,
        capacity: int = MAX_LOG_LINES,
        decorate: Decorator = plain_line,
    ) -> None:
        self.name = name
        self.capacity = max(capacity, 1)
        self.path = ""
        self.handle: "StreamHandle | None" = None
        self.width = 0
        self.height = 0
        self.y_offset = 0
        self._lines: collections.deque[str] = collections.deque(maxlen=self.capacity)
        self._blocks: collections.deque[list[str]] = collections.deque(
            maxlen=self.capacity
        )
        self._visual: list[str] = []
        self._visual_count = 0
        self._visual_dirty = False
        self._render_cache = RenderCache(decorate)

    @property
    def lines(self) -> list[str]:
        """Get the raw logical lines"""
        return list(self._lines)

    @property
    def blocks(self) -> list[list[str]]:
        """Get the wrapped blocks, one per logical line"""
        return list(self._blocks)

    @property
    def visual_count(self) -> int:
        """Get the number of visual lines"""
        return self._visual_count

    def _invalidate(self) -> None:
        self._visual_dirty = True
        self._render_cache.invalidate()

    def invalidate_render(self) -> None:
        """Re-decorate every visual line before the next frame"""
        self._render_cache.invalidate()

    def visual_lines(self) -> list[str]:
        """Get the flattened visual lines"""
        if self._visual_dirty:
            self._visual = [line for block in self._blocks for line in block]
            self._visual_dirty = False
        return self._visual

    def rendered(self) -> list[StyledLine]:
        """Get the decorated visual lines"""
        return self._render_cache.lines(self._blocks)

    def append_line(self, text: str, stick_to_bottom: bool) -> int:
        """Append a raw line and return the number of visual lines evicted"""
        was_at_bottom = self.at_bottom

        line = clean_log_line(text)
        block = wrap_line(line, self.width)
        removed = 0
        if len(self._blocks) == self.capacity:
            removed = len(self._blocks[0])
        self._lines.append(line)
        self._blocks.append(block)
        self._visual_count += len(block) - removed

        if removed:
            self._invalidate()
        else:
            # The flattened list and the render cache go stale independently
            if not self._visual_dirty:
                self._visual.extend(block)
            self._render_cache.append(block, self._visual_count - len(block))

        if stick_to_bottom and was_at_bottom:
            self.goto_bottom()
        elif removed and self.y_offset > 0:
            self.y_offset = max(self.y_offset - removed, 0)
        self.y_offset = min(self.y_offset, max(self._visual_count - 1, 0))
        return removed

    def set_lines(self, lines: Iterable[str]) -> None:
        """Replace the buffer with an initial batch of raw lines"""
        self._lines.clear()
        self._lines.extend(clean_log_line(line) for line in lines)
        self._rewrap()
        self._clamp()

    def resize(self, width: int, height: int) -> None:
        """Set the content size, re-wrapping every line if the width changed"""
        width_changed = width != self.width
        self.width = width
        self.height = height
        if width_changed:
            self._rewrap()
        self._clamp()

    def clear(self) -> None:
        """Drop every line"""
        self._lines.clear()
        self._blocks.clear()
        self._visual = []
        self._visual_count = 0
        self.y_offset = 0
        self._invalidate()

    def _rewrap(self) -> None:
        self._blocks.clear()
        self._blocks.extend(wrap_line(line, self.width) for line in self._lines)
        self._visual_count = sum(len(block) for block in self._blocks)
        self._invalidate()

    def _clamp(self) -> None:
        self.y_offset = min(max(self.y_offset, 0), self.max_y_offset)

    @property
    def max_y_offset(self) -> int:
        """Get the largest offset that still fills the viewport"""
        return max(self._visual_count - self.height, 0)

    @property
    def at_top(self) -> bool:
        """Check if the first line is visible"""
        return self.y_offset <= 0

    @property
    def at_bottom(self) -> bool:
        """Check if the last line is visible"""
        return self.y_offset >= self.max_y_offset

    @property
    def scroll_percent(self) -> float:
        """Get the scroll position as a fraction between 0 and 1"""
        if self.height >= self._visual_count:
            return 1.0
        return min(max(self.y_offset / self.max_y_offset, 0.0), 1.0)

    def goto_top(self) -> None:
        """Scroll to the first line"""
        self.y_offset = 0

    def goto_bottom(self) -> None:
        """Scroll to the last line"""
        self.y_offset = self.max_y_offset

    def scroll_to(self, line: int) -> None:
        """Put a visual line at the top of the viewport"""
        self.y_offset = line
        self._clamp()

    def jump_to(self, line: int) -> None:
        """Put a visual line at the top even if the viewport is left part empty"""
        self.y_offset = min(max(line, 0), max(self._visual_count - 1, 0))

    def scroll_up(self, count: int = 1) -> None:
        """Scroll up by a number of visual lines"""
        self.scroll_to(self.y_offset - count)

    def scroll_down(self, count: int = 1) -> None:
        """Scroll down by a number of visual lines"""
        self.scroll_to(self.y_offset + count)

    def page_up(self) -> None:
        """Scroll up one viewport height"""
        self.scroll_up(max(self.height, 1))

    def page_down(self) -> None:
        """Scroll down one viewport height"""
        self.scroll_down(max(self.height, 1))

    def half_page_up(self) -> None:
        """Scroll up half a viewport height"""
        self.scroll_up(max(self.height // 2, 1))

    def half_page_down(self) -> None:
        """Scroll down half a viewport height"""
        self.scroll_down(max(self.height // 2, 1))

    def visible_lines(self) -> list[StyledLine]:
        """Get the decorated lines inside the viewport"""
        return self.rendered()[self.y_offset : self.y_offset + self.height]
