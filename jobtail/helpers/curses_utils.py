"""Curses utility types: geometry tuples, colors, text attributes and styles"""

import curses
import enum
from typing import NamedTuple

DEL = 127

ESC = 27

TAB = 9

CTRL_Y = 25

ENTER_KEYS = frozenset({ord("\n"), ord("\r"), curses.KEY_ENTER})

BACKSPACE_KEYS = frozenset({curses.KEY_BACKSPACE, DEL, 8})


class Position(NamedTuple):
    """A simple position class"""

    y: int
    x: int


class Size(NamedTuple):
    """A simple size class"""

    height: int
    width: int


class Viewport(NamedTuple):
    """A rectangle on the screen"""

    pos: Position
    size: Size

    @property
    def x(self):
        """Get the x position"""
        return self.pos.x

    @property
    def y(self):
        """Get the y position"""
        return self.pos.y

    @property
    def width(self):
        """Get the width"""
        return self.size.width

    @property
    def height(self):
        """Get the height"""
        return self.size.height

    def contains(self, position: Position) -> bool:
        """Check if a screen position falls inside the rectangle"""
        return (
            self.x <= position.x < self.x + self.width
            and self.y <= position.y < self.y + self.height
        )


class Color(enum.IntEnum):
    """Enumeration of colors"""

    DEFAULT = curses.COLOR_WHITE
    INFO = curses.COLOR_GREEN
    WARNING = curses.COLOR_YELLOW
    ERROR = curses.COLOR_RED
    BORDER = curses.COLOR_BLUE
    HEADER = curses.COLOR_CYAN
    SELECTED = curses.COLOR_MAGENTA


class TextAttribute(enum.IntEnum):
    """Enumeration of text attributes"""

    BOLD = curses.A_BOLD
    DIM = curses.A_DIM
    REVERSE = curses.A_REVERSE
    UNDERLINE = curses.A_UNDERLINE


class Style(NamedTuple):
    """Display attributes of a style category"""

    color: Color | None
    attributes: tuple[TextAttribute, ...] = ()


STYLES: dict[str, Style] = {
    "text": Style(None),
    "title": Style(Color.HEADER, (TextAttribute.BOLD,)),
    "title_inactive": Style(Color.DEFAULT, (TextAttribute.DIM,)),
    "border": Style(Color.BORDER),
    "border_active": Style(Color.SELECTED, (TextAttribute.BOLD,)),
    "search": Style(Color.WARNING, (TextAttribute.REVERSE, TextAttribute.BOLD)),
    "selection": Style(Color.SELECTED, (TextAttribute.REVERSE,)),
    "selection_search": Style(
        Color.WARNING, (TextAttribute.REVERSE, TextAttribute.UNDERLINE)
    ),
    "hint": Style(Color.INFO),
    "prompt": Style(Color.HEADER, (TextAttribute.BOLD,)),
}


def get_style(category: str) -> Style:
    """Look up the display attributes of a style category"""
    return STYLES.get(category, STYLES["text"])
