"""Handles help overlay drawing"""

from jobtail.helpers.curses_utils import Color, Position
from jobtail.models.tail_state import TailState
from jobtail.output_controller import Window

HELP_TEXT = [
    "JOB LOG TAIL - HELP",
    "",
    "Panes:",
    "  o         - Show stdout only",
    "  e         - Show stderr only",
    "  l         - Show both",
    "  Tab       - Switch active pane",
    "  s         - Toggle stacked / side-by-side",
    "  x         - Toggle borders",
    "",
    "Scrolling:",
    "  ↑/k ↓/j   - Scroll up/down",
    "  PgUp/PgDn - Page up/down",
    "  u/d       - Half page up/down",
    "  b/G       - Bottom (follow on)",
    "  t/g/Home  - Top (follow off)",
    "  f         - Toggle follow",
    "  p         - Pause auto-scroll",
    "  c         - Clear buffers",
    "",
    "Search:",
    "  /         - Search",
    "  n/N       - Next/previous match",
    "",
    "Copying:",
    "  m         - Toggle mouse (drag to select)",
    "  ^y        - Copy selection",
    "  Y         - Copy pane",
    "  y         - Toggle copy mode",
    "  v         - View in pager",
    "",
    "Other:",
    "  ?         - Toggle this help",
    "  q/Esc     - Quit",
    "",
    "Press any key to continue...",
]


class HelpView:  # pylint: disable=too-few-public-methods
    """Draws the key binding reference"""

    def __init__(self, state: TailState) -> None:
        self._state = state

    def draw(self, window: Window) -> None:
        """Draw help screen, in columns when it is taller than the terminal"""
        height, width = self._state.terminal_size
        rows = height - 1

        if len(HELP_TEXT) <= rows:
            start_row = max(0, (rows - len(HELP_TEXT)) // 2)
            x_pos = max(0, width // 4)
            for i, line in enumerate(HELP_TEXT):
                color = Color.HEADER if i == 0 else Color.DEFAULT
                window.addstr(Position(start_row + i, x_pos), line, color=color)
            return

        title, body, prompt = HELP_TEXT[0], HELP_TEXT[2:-2], HELP_TEXT[-1]
        column_height = max(rows - 4, 1)
        columns = [
            body[i : i + column_height] for i in range(0, len(body), column_height)
        ]
        column_width = max(width // len(columns), 1)

        window.addstr(Position(0, 0), title, color=Color.HEADER)
        for i, column in enumerate(columns):
            for row, line in enumerate(column):
                window.addstr(
                    Position(2 + row, i * column_width),
                    line[: column_width - 1],
                    color=Color.DEFAULT,
                )
        window.addstr(Position(rows - 1, 0), prompt, color=Color.DEFAULT)
