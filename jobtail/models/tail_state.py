"""Observable view state of the log tail screen"""

from jobtail.helpers.curses_utils import Size
from jobtail.helpers.state import Field, State
from jobtail.models.modes import PaneName, TailMode


class TailState(State):  # pylint: disable=too-few-public-methods
    """State of the log tail screen"""

    terminal_size = Field[Size](Size(0, 0))
    mode = Field[TailMode](TailMode.BOTH)
    active_pane = Field[PaneName](PaneName.STDOUT)
    following = Field[bool](True)
    paused = Field[bool](False)
    stacked = Field[bool](False)
    show_borders = Field[bool](True)
    mouse_enabled = Field[bool](True)
    copy_mode = Field[bool](False)
    searching = Field[bool](False)
    search_input = Field[str]("")
    last_search = Field[str]("")
    show_help = Field[bool](False)
    job_id = Field[str]("")
    status = Field[str]("")

    @property
    def stick_to_bottom(self) -> bool:
        """New lines scroll the view only while following and not paused"""
        return self.following and not self.paused

    @property
    def search_needle(self) -> str:
        """The query that highlights matches right now"""
        if self.searching and self.search_input.strip():
            return self.search_input.strip()
        return self.last_search.strip()
