"""Input controller: keys, mouse and resize events from the terminal"""

import curses
import enum
import logging
from abc import ABC, abstractmethod
from typing import NamedTuple, Union

from jobtail.helpers.curses_utils import Position, Size

logger = logging.getLogger(__name__)

INPUT_TIMEOUT_MS = 50


class MouseAction(enum.Enum):
    """What the mouse did"""

    PRESS = "press"
    MOTION = "motion"
    RELEASE = "release"
    WHEEL_UP = "wheel_up"
    WHEEL_DOWN = "wheel_down"


class MouseEvent(NamedTuple):
    """A mouse action at a screen position"""

    position: Position
    action: MouseAction


class ResizeEvent(NamedTuple):
    """The terminal changed size"""

    size: Size


InputEvent = Union[int, MouseEvent, ResizeEvent]


def _button(name: str) -> int:
    return getattr(curses, name, 0)


def mouse_action(bstate: int) -> MouseAction | None:
    """Map a curses button state to a mouse action"""
    if bstate & _button("BUTTON4_PRESSED"):
        return MouseAction.WHEEL_UP
    if bstate & _button("BUTTON5_PRESSED"):
        return MouseAction.WHEEL_DOWN
    if bstate & _button("BUTTON1_RELEASED"):
        return MouseAction.RELEASE
    if bstate & (_button("BUTTON1_PRESSED") | _button("BUTTON1_CLICKED")):
        return MouseAction.PRESS
    if bstate & _button("REPORT_MOUSE_POSITION"):
        return MouseAction.MOTION
    return None


class InputController(ABC):
    """Source of input events"""

    @abstractmethod
    def get_input(self) -> InputEvent | None:
        """Wait briefly for the next event, None if nothing happened"""


class CursesInputController(InputController):
    """Reads events from a curses window"""

    def __init__(
        self, stdscr: curses.window, timeout_ms: int = INPUT_TIMEOUT_MS
    ) -> None:
        self._stdscr = stdscr
        self._stdscr.keypad(True)
        self._stdscr.timeout(timeout_ms)

    def get_input(self) -> InputEvent | None:
        """Wait briefly for the next event, None if nothing happened"""
        key = self._stdscr.getch()
        if key == -1:
            return None
        if key == curses.KEY_RESIZE:
            return ResizeEvent(Size(*self._stdscr.getmaxyx()))
        if key == curses.KEY_MOUSE:
            return self._get_mouse()
        return key

    @staticmethod
    def _get_mouse() -> MouseEvent | None:
        try:
            _, x, y, _, bstate = curses.getmouse()
        except curses.error:
            logger.debug("Dropped unreadable mouse event")
            return None
        action = mouse_action(bstate)
        if action is None:
            return None
        return MouseEvent(Position(y, x), action)
