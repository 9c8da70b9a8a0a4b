"""Pane rectangles for the single, side-by-side and stacked layouts"""

from typing import NamedTuple

from jobtail.helpers.curses_utils import Position, Size, Viewport
from jobtail.models.modes import PaneName, TailMode

HEADER_HEIGHT = 1
BORDER_SIZE = 1
FOOTER_HEIGHT = 1
SEARCH_OVERLAY_HEIGHT = 4

MIN_CONTENT_WIDTH = 10
MIN_CONTENT_HEIGHT = 3


class PaneGeometry(NamedTuple):
    """Outer rectangle (with header and border) and content rectangle of a pane"""

    outer: Viewport
    content: Viewport


class LayoutRequest(NamedTuple):
    """Everything the pane rectangles depend on"""

    terminal_size: Size
    mode: TailMode
    stacked: bool = False
    copy_mode: bool = False
    searching: bool = False


def _framed(y: int, x: int, height: int, width: int) -> PaneGeometry:
    content_width = max(width - 2 * BORDER_SIZE, MIN_CONTENT_WIDTH)
    content_height = max(
        height - HEADER_HEIGHT - 2 * BORDER_SIZE, MIN_CONTENT_HEIGHT
    )
    outer = Viewport(
        Position(y, x),
        Size(
            content_height + HEADER_HEIGHT + 2 * BORDER_SIZE,
            content_width + 2 * BORDER_SIZE,
        ),
    )
    content = Viewport(
        Position(y + HEADER_HEIGHT + BORDER_SIZE, x + BORDER_SIZE),
        Size(content_height, content_width),
    )
    return PaneGeometry(outer, content)


def _bare(y: int, x: int, height: int, width: int) -> PaneGeometry:
    rect = Viewport(
        Position(y, x),
        Size(max(height, MIN_CONTENT_HEIGHT), max(width, MIN_CONTENT_WIDTH)),
    )
    return PaneGeometry(rect, rect)


def compute_layout(request: LayoutRequest) -> dict[PaneName, PaneGeometry]:
    """Compute the geometry of every visible pane"""
    height, width = request.terminal_size
    top = SEARCH_OVERLAY_HEIGHT if request.searching else 0

    if request.copy_mode:
        (pane,) = request.mode.panes[:1]
        return {pane: _bare(top, 0, height - top, width)}

    available = height - top - FOOTER_HEIGHT
    if request.mode is not TailMode.BOTH:
        (pane,) = request.mode.panes
        return {pane: _framed(top, 0, available, width)}

    if request.stacked:
        stdout_height = available // 2
        stdout = _framed(top, 0, stdout_height, width)
        stderr = _framed(
            stdout.outer.y + stdout.outer.height,
            0,
            available - stdout_height,
            width,
        )
    else:
        stdout_width = width // 2
        stdout = _framed(top, 0, available, stdout_width)
        stderr = _framed(
            top,
            stdout.outer.x + stdout.outer.width,
            available,
            width - stdout_width,
        )
    return {PaneName.STDOUT: stdout, PaneName.STDERR: stderr}


def pane_at(
    layout: dict[PaneName, PaneGeometry], position: Position
) -> PaneName | None:
    """Find the pane whose outer rectangle contains a screen position"""
    for pane, geometry in layout.items():
        if geometry.outer.contains(position):
            return pane
    return None
