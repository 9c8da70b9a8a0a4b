"""Drag selection over a pane's flattened visual lines"""

import dataclasses
from typing import NamedTuple, Sequence

from jobtail.helpers.curses_utils import Position
from jobtail.models.layout import PaneGeometry
from jobtail.models.modes import PaneName


class SelectionPoint(NamedTuple):
    """A (visual line, column) position inside a pane"""

    line: int
    col: int


ORIGIN = SelectionPoint(0, 0)


def selection_point_at(
    geometry: PaneGeometry,
    position: Position,
    y_offset: int,
    lines: Sequence[str],
    clamp: bool,
) -> SelectionPoint | None:
    """Map a screen position to a point in the pane's visual-line space.

    Without clamping, positions outside the content rectangle are rejected.
    With clamping they snap to the nearest content edge, so a drag that
    leaves the pane keeps extending the selection.
    """
    content = geometry.content
    if content.width <= 0 or content.height <= 0:
        return None

    local_x = position.x - content.x
    local_y = position.y - content.y

    if clamp:
        local_x = min(max(local_x, 0), content.width)
        local_y = min(max(local_y, 0), content.height - 1)
    elif not content.contains(position):
        return None

    if not lines:
        return ORIGIN

    line = min(max(y_offset + local_y, 0), len(lines) - 1)
    col = min(max(local_x, 0), len(lines[line]))
    return SelectionPoint(line, col)


def _clamp_span(start: int, end: int, length: int) -> tuple[int, int]:
    start = min(max(start, 0), length)
    end = min(max(end, 0), length)
    if end < start:
        start, end = end, start
    return start, end


@dataclasses.dataclass
class Selection:
    """Anchor/cursor selection that belongs to at most one pane"""

    pane: PaneName | None = None
    anchor: SelectionPoint = ORIGIN
    cursor: SelectionPoint = ORIGIN
    dragging: bool = False

    def begin(self, pane: PaneName, point: SelectionPoint) -> None:
        """Start a drag selection at a point"""
        self.pane = pane
        self.anchor = point
        self.cursor = point
        self.dragging = True

    def extend(self, point: SelectionPoint) -> bool:
        """Move the cursor while dragging, return True if it moved"""
        if not self.dragging or self.pane is None or point == self.cursor:
            return False
        self.cursor = point
        return True

    def finish(self, point: SelectionPoint | None) -> None:
        """Freeze the selection on release"""
        if point is not None and self.pane is not None:
            self.cursor = point
        self.dragging = False

    def clear(self) -> None:
        """Drop the selection"""
        self.pane = None
        self.anchor = ORIGIN
        self.cursor = ORIGIN
        self.dragging = False

    @property
    def is_empty(self) -> bool:
        """A selection with no extent that is not being dragged"""
        return self.pane is None or (
            not self.dragging and self.anchor == self.cursor
        )

    def has_selection_in(self, pane: PaneName) -> bool:
        """Check if the pane holds a non-empty or in-progress selection"""
        return self.pane == pane and not self.is_empty

    def normalized(self) -> tuple[SelectionPoint, SelectionPoint]:
        """Get (start, end) with start <= end"""
        if self.anchor > self.cursor:
            return self.cursor, self.anchor
        return self.anchor, self.cursor

    def bounds_for_line(
        self, pane: PaneName, index: int, line: str
    ) -> tuple[int, int] | None:
        """Get the selected column span of a visual line, if any"""
        if self.pane != pane:
            return None
        start, end = self.normalized()
        if not start.line <= index <= end.line:
            return None

        sel_start = start.col if index == start.line else 0
        sel_end = end.col if index == end.line else len(line)
        sel_start, sel_end = _clamp_span(sel_start, sel_end, len(line))
        if sel_end <= sel_start:
            return None
        return sel_start, sel_end

    def adjust_after_trim(self, pane: PaneName, removed: int) -> None:
        """Shift the selection after `removed` visual lines left the front"""
        if removed <= 0 or self.pane != pane:
            return

        anchor_line = self.anchor.line - removed
        cursor_line = self.cursor.line - removed
        if anchor_line < 0 and cursor_line < 0:
            self.clear()
            return
        self.anchor = SelectionPoint(max(anchor_line, 0), self.anchor.col)
        self.cursor = SelectionPoint(max(cursor_line, 0), self.cursor.col)

    def extract_text(self, lines: Sequence[str]) -> str:
        """Get the selected text, one line break between selected lines"""
        if self.pane is None or not lines:
            return ""

        start, end = self.normalized()
        first = max(start.line, 0)
        last = min(end.line, len(lines) - 1)
        if first > last:
            return ""

        parts = []
        for index in range(first, last + 1):
            line = lines[index]
            sel_start = start.col if index == start.line else 0
            sel_end = end.col if index == end.line else len(line)
            sel_start, sel_end = _clamp_span(sel_start, sel_end, len(line))
            parts.append(line[sel_start:sel_end])
        return "\n".join(parts)
