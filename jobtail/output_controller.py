"""Output controller for wrapping curses operations to enable testing"""

import contextlib
import curses
import logging
import sys
from abc import ABC, abstractmethod
from typing import Iterator

from jobtail.helpers.curses_utils import Color, Position, Size, TextAttribute

logger = logging.getLogger(__name__)

MOUSE_TRACKING_ON = "\x1b[?1002h"
MOUSE_TRACKING_OFF = "\x1b[?1002l"


class Window(ABC):
    """Abstract window interface for curses operations"""

    @abstractmethod
    def getmaxyx(self) -> Size:
        """Get the window size"""

    @abstractmethod
    def erase(self) -> None:
        """Blank the window without forcing a full repaint"""

    @abstractmethod
    def refresh(self) -> None:
        """Refresh the window"""

    @abstractmethod
    def addstr(
        self,
        position: Position,
        text: str,
        *,
        color: Color | None = None,
        attributes: tuple[TextAttribute, ...] | None = None,
    ) -> None:
        """Add a string to the window, clipped to its right edge"""


class OutputController(ABC):
    """Abstract output controller interface for curses module operations"""

    @abstractmethod
    def create_main_window(self) -> Window:
        """Get the window covering the whole terminal"""

    @abstractmethod
    def curs_set(self, visibility: int) -> None:
        """Set cursor visibility"""

    @abstractmethod
    def update_lines_cols(self) -> None:
        """Update LINES and COLS after terminal resize"""

    @abstractmethod
    def get_terminal_size(self) -> Size:
        """Get the terminal size as a Size tuple"""

    @abstractmethod
    def set_mouse_reporting(self, enabled: bool) -> None:
        """Turn terminal mouse reporting on or off"""

    @abstractmethod
    def write_raw(self, data: str) -> None:
        """Write an escape sequence straight to the terminal"""

    @abstractmethod
    def suspend(self) -> contextlib.AbstractContextManager[None]:
        """Hand the terminal to another program for the duration of the block"""


class CursesWindow(Window):
    """Concrete implementation of Window wrapping a curses window"""

    def __init__(self, curses_window, color_to_pair: dict[Color, int]) -> None:
        self._window = curses_window
        self._color_to_pair = color_to_pair

    def getmaxyx(self) -> Size:
        """Get the window size"""
        return Size(*self._window.getmaxyx())

    def erase(self) -> None:
        """Blank the window without forcing a full repaint"""
        self._window.erase()

    def refresh(self) -> None:
        """Refresh the window"""
        self._window.refresh()

    def addstr(
        self,
        position: Position,
        text: str,
        *,
        color: Color | None = None,
        attributes: tuple[TextAttribute, ...] | None = None,
    ) -> None:
        """Add a string to the window, clipped to its right edge"""
        height, width = self.getmaxyx()
        y, x = position
        if not text or not 0 <= y < height or not 0 <= x < width:
            return
        text = text[: width - x]

        attr = 0
        if color is not None:
            attr = self._color_to_pair.get(color, 0)
        for text_attr in attributes or ():
            attr |= text_attr.value

        if y == height - 1 and x + len(text) >= width:
            # curses fails after writing the bottom-right cell
            with contextlib.suppress(curses.error):
                self._window.addstr(y, x, text, attr)
        else:
            self._window.addstr(y, x, text, attr)


class CursesOutputController(OutputController):
    """Concrete implementation of OutputController wrapping the curses module"""

    def __init__(self, stdscr: curses.window) -> None:
        self._stdscr = stdscr
        self._color_to_pair: dict[Color, int] = {}
        self._mouse_enabled = False
        self._start_color()
        self._use_default_colors()

    @staticmethod
    def _start_color() -> None:
        """Initialize color support"""
        curses.start_color()

    def _use_default_colors(self) -> None:
        """Use default terminal colors"""
        curses.use_default_colors()
        for i, color in enumerate(Color):
            pair_num = i + 1
            curses.init_pair(pair_num, color.value, -1)
            self._color_to_pair[color] = curses.color_pair(pair_num)

    def create_main_window(self) -> Window:
        """Get the window covering the whole terminal"""
        return CursesWindow(self._stdscr, self._color_to_pair)

    def curs_set(self, visibility: int) -> None:
        """Set cursor visibility"""
        with contextlib.suppress(curses.error):
            curses.curs_set(visibility)

    def update_lines_cols(self) -> None:
        """Update LINES and COLS after terminal resize"""
        curses.update_lines_cols()

    def get_terminal_size(self) -> Size:
        """Get the terminal size as a Size tuple"""
        return Size(curses.LINES, curses.COLS)  # pylint: disable=no-member

    def set_mouse_reporting(self, enabled: bool) -> None:
        """Turn terminal mouse reporting on or off"""
        if enabled:
            curses.mousemask(curses.ALL_MOUSE_EVENTS | curses.REPORT_MOUSE_POSITION)
            curses.mouseinterval(0)
            self.write_raw(MOUSE_TRACKING_ON)
        else:
            curses.mousemask(0)
            self.write_raw(MOUSE_TRACKING_OFF)
        self._mouse_enabled = enabled
        logger.info("Mouse reporting %s", "enabled" if enabled else "disabled")

    def write_raw(self, data: str) -> None:
        """Write an escape sequence straight to the terminal"""
        sys.stdout.write(data)
        sys.stdout.flush()

    @contextlib.contextmanager
    def suspend(self) -> Iterator[None]:
        """Hand the terminal to another program for the duration of the block"""
        mouse_enabled = self._mouse_enabled
        if mouse_enabled:
            self.set_mouse_reporting(False)
        curses.def_prog_mode()
        curses.endwin()
        try:
            yield
        finally:
            curses.reset_prog_mode()
            self._stdscr.clear()
            self._stdscr.refresh()
            if mouse_enabled:
                self.set_mouse_reporting(True)
