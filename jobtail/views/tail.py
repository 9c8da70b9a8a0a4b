"""Draws the log tail screen: pane headers, borders, content, search overlay and footer"""

from jobtail.helpers.curses_utils import Position, get_style
from jobtail.models.layout import PaneGeometry
from jobtail.models.pane import Pane
from jobtail.models.render_cache import StyledLine
from jobtail.models.tail_state import TailState
from jobtail.output_controller import Window
from jobtail.viewmodels.tail import TailViewModel
from jobtail.views.help import HelpView

SHORT_HELP = (
    "q/esc back • o stdout • e stderr • l both • f follow • / search • "
    "n next match • N prev match • ^y copy sel • Y copy pane • ? more keys"
)

SEARCH_HINT = "Press Enter to jump, Esc to cancel"

ELLIPSIS = "…"


def scroll_label(pane: Pane) -> str:
    """Describe the scroll position of a pane"""
    if pane.at_top:
        return "Top"
    if pane.at_bottom:
        return "Bot"
    return f"{pane.scroll_percent * 100:.0f}%"


def truncate_path(path: str, available: int) -> str:
    """Shorten a path from the left so it fits the available width"""
    if available < 3:
        return ""
    if len(path) <= available:
        return path
    return ELLIPSIS + path[len(path) - available + 1 :]


def pane_header(
    pane: Pane, state: TailState, active: bool, has_selection: bool, width: int
) -> str:
    """Build the title line of a pane"""
    status = ""
    if state.paused:
        status = " [PAUSED]"
    elif state.following:
        status = " [FOLLOW]"
    if state.mouse_enabled:
        status += " [MOUSE]"
    if has_selection:
        status += " [SEL]"

    name = ("> " if active else "  ") + pane.name.label
    scroll = scroll_label(pane)
    fixed = len(f"{name}  ({scroll}){status}")
    path = truncate_path(pane.path, max(width, 20) - fixed)
    return f"{name} {path} ({scroll}){status}"


class TailView:
    """Draws the tail screen into a window"""

    def __init__(
        self, state: TailState, viewmodel: TailViewModel, window: Window
    ) -> None:
        self._state = state
        self._viewmodel = viewmodel
        self._window = window
        self._help = HelpView(state)

    def draw(self) -> None:
        """Draw the whole frame"""
        self._window.erase()
        if self._state.show_help:
            self._help.draw(self._window)
            self._window.refresh()
            return

        if self._state.searching:
            self._draw_search_overlay()

        active = self._viewmodel.active_pane.name
        for name, geometry in self._viewmodel.layout.items():
            pane = self._viewmodel.panes[name]
            if not self._state.copy_mode:
                self._draw_chrome(pane, geometry, name == active)
            self._draw_content(pane.visible_lines(), geometry)

        if not self._state.copy_mode:
            self._draw_footer()
        self._window.refresh()

    def _draw_text(self, position: Position, text: str, style: str) -> None:
        color, attributes = get_style(style)
        self._window.addstr(position, text, color=color, attributes=attributes)

    def _draw_search_overlay(self) -> None:
        value = self._state.search_input.strip() or "(type to search)"
        self._draw_text(Position(1, 0), f"/ Search: {value} ▍", "prompt")
        self._draw_text(Position(2, 0), SEARCH_HINT, "hint")

    def _draw_chrome(self, pane: Pane, geometry: PaneGeometry, active: bool) -> None:
        outer = geometry.outer
        header = pane_header(
            pane,
            self._state,
            active,
            self._viewmodel.selection.has_selection_in(pane.name),
            geometry.content.width,
        )
        self._draw_text(
            outer.pos, header[: outer.width], "title" if active else "title_inactive"
        )

        if not self._state.show_borders:
            return
        style = "border_active" if active else "border"
        top = outer.y + 1
        bottom = outer.y + outer.height - 1
        inner_width = outer.width - 2
        self._draw_text(Position(top, outer.x), "╭" + "─" * inner_width + "╮", style)
        for y in range(top + 1, bottom):
            self._draw_text(Position(y, outer.x), "│", style)
            self._draw_text(Position(y, outer.x + outer.width - 1), "│", style)
        self._draw_text(
            Position(bottom, outer.x), "╰" + "─" * inner_width + "╯", style
        )

    def _draw_content(self, lines: list[StyledLine], geometry: PaneGeometry) -> None:
        content = geometry.content
        for row, line in enumerate(lines[: content.height]):
            x = 0
            for segment in line:
                if x >= content.width:
                    break
                text = segment.text[: content.width - x]
                self._draw_text(
                    Position(content.y + row, content.x + x), text, segment.style
                )
                x += len(text)

    def _draw_footer(self) -> None:
        height, width = self._state.terminal_size
        parts = []
        if self._state.job_id:
            parts.append(f"Job {self._state.job_id}")
        if self._state.status:
            parts.append(self._state.status)
        parts.append(SHORT_HELP)
        self._draw_text(Position(height - 1, 0), " | ".join(parts)[:width], "hint")
