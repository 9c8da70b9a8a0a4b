"""Tests for the tail screen view"""

from unittest.mock import Mock

import pytest

from jobtail.config import TailConfig
from jobtail.follower import StreamHandle, TailStarted
from jobtail.helpers.curses_utils import Color, Position, Size, TextAttribute
from jobtail.input_controller import MouseAction, MouseEvent
from jobtail.models.modes import PaneName
from jobtail.models.pane import Pane
from jobtail.models.tail_state import TailState
from jobtail.viewmodels.tail import TailViewModel
from jobtail.views.tail import SHORT_HELP, TailView, scroll_label, truncate_path
from tests.infra.mock_output_controller import MockOutputController

TERMINAL_SIZE = Size(24, 120)


@pytest.fixture(name="state")
def state_fixture() -> TailState:
    """Create a TailState instance for testing"""
    state = TailState()
    state.terminal_size = TERMINAL_SIZE
    return state


@pytest.fixture(name="output_controller")
def output_controller_fixture() -> MockOutputController:
    """Create a MockOutputController instance for testing"""
    return MockOutputController(TERMINAL_SIZE)


@pytest.fixture(name="viewmodel")
def viewmodel_fixture(state: TailState) -> TailViewModel:
    """Create a TailViewModel with a hundred stdout lines"""
    config = TailConfig(
        stdout_path="/logs/job.out",
        stderr_path="/logs/job.err",
        archive_dir="/archive",
    )
    viewmodel = TailViewModel(state, config, Mock())
    lines = [f"line {i}" for i in range(100)]
    lines[95] = "an error here"
    viewmodel.update(
        TailStarted(PaneName.STDOUT, lines, Mock(spec=StreamHandle))
    )
    return viewmodel


@pytest.fixture(name="view")
def view_fixture(
    state: TailState,
    viewmodel: TailViewModel,
    output_controller: MockOutputController,
) -> TailView:
    """Create a TailView instance for testing"""
    return TailView(state, viewmodel, output_controller.create_main_window())


def _press_keys(viewmodel: TailViewModel, keys: str) -> None:
    for key in keys:
        viewmodel.update(ord(key))


def test_headers_show_name_path_and_status(
    view: TailView, output_controller: MockOutputController
) -> None:
    """Test the title line of both panes"""
    # Act
    view.draw()

    # Assert
    header = output_controller.get_screen_line(0)
    assert header.startswith("> STDOUT /logs/job.out (Bot) [FOLLOW] [MOUSE]")
    assert "  STDERR /logs/job.err (Top) [FOLLOW] [MOUSE]" in header
    assert output_controller.get_cell(Position(0, 0)).color == Color.HEADER


def test_content_shows_bottom_of_buffer(
    view: TailView, output_controller: MockOutputController
) -> None:
    """Test that a following pane shows its last lines"""
    # Act
    view.draw()

    # Assert
    lines = output_controller.get_screen_lines()
    assert lines[2].startswith("│line 80")
    assert lines[21].startswith("│line 99")
    assert "│Initializing stderr tail..." in lines[2]


def test_borders_mark_active_pane(
    view: TailView, output_controller: MockOutputController
) -> None:
    """Test the rounded borders and their colors"""
    # Act
    view.draw()

    # Assert
    assert output_controller.get_screen_line(1).startswith("╭" + "─" * 58 + "╮╭")
    assert output_controller.get_screen_line(22).startswith("╰" + "─" * 58 + "╯╰")
    assert output_controller.get_cell(Position(1, 0)).color == Color.SELECTED
    assert output_controller.get_cell(Position(1, 60)).color == Color.BORDER


def test_borders_can_be_hidden(
    view: TailView,
    viewmodel: TailViewModel,
    output_controller: MockOutputController,
) -> None:
    """Test that the border toggle leaves the header but drops the frame"""
    # Arrange
    _press_keys(viewmodel, "x")

    # Act
    view.draw()

    # Assert
    assert output_controller.get_screen_line(1) == ""
    assert output_controller.get_screen_line(0).startswith("> STDOUT")


def test_footer_shows_job_and_status(
    view: TailView, state: TailState, output_controller: MockOutputController
) -> None:
    """Test the footer parts"""
    # Arrange
    state.job_id = "12345"
    state.status = "Copied 3 lines"

    # Act
    view.draw()

    # Assert
    footer = output_controller.get_screen_line(23)
    assert footer == f"Job 12345 | Copied 3 lines | {SHORT_HELP}"[:120].rstrip()


def test_search_overlay_above_panes(
    view: TailView,
    viewmodel: TailViewModel,
    output_controller: MockOutputController,
) -> None:
    """Test that the overlay shows the query and pushes the panes down"""
    # Arrange
    _press_keys(viewmodel, "/err")

    # Act
    view.draw()

    # Assert
    lines = output_controller.get_screen_lines()
    assert lines[1] == "/ Search: err ▍"
    assert lines[2] == "Press Enter to jump, Esc to cancel"
    assert lines[4].startswith("> STDOUT")


def test_empty_search_overlay_shows_placeholder(
    view: TailView,
    viewmodel: TailViewModel,
    output_controller: MockOutputController,
) -> None:
    """Test the overlay before anything is typed"""
    # Arrange
    _press_keys(viewmodel, "/")

    # Act
    view.draw()

    # Assert
    assert output_controller.get_screen_line(1) == "/ Search: (type to search) ▍"


def test_search_matches_are_highlighted(
    view: TailView,
    viewmodel: TailViewModel,
    output_controller: MockOutputController,
) -> None:
    """Test that after a search the match is upper-cased and colored"""
    # Arrange
    _press_keys(viewmodel, "/error\n")

    # Act
    view.draw()

    # Assert
    assert output_controller.get_screen_line(2).startswith("│an ERROR here")
    cell = output_controller.get_cell(Position(2, 4))
    assert cell.char == "E"
    assert cell.color == Color.WARNING
    assert output_controller.get_cell(Position(2, 1)).color is None


def test_selection_is_highlighted(
    view: TailView,
    viewmodel: TailViewModel,
    output_controller: MockOutputController,
) -> None:
    """Test the selected cells and the selection marker in the header"""
    # Arrange
    viewmodel.update(MouseEvent(Position(2, 1), MouseAction.PRESS))
    viewmodel.update(MouseEvent(Position(2, 5), MouseAction.RELEASE))

    # Act
    view.draw()

    # Assert
    header = output_controller.get_screen_line(0)
    assert header.startswith("> STDOUT /logs/job.out (Bot) [MOUSE] [SEL]")
    for x in range(1, 5):
        cell = output_controller.get_cell(Position(2, x))
        assert cell.color == Color.SELECTED
        assert cell.attributes == (TextAttribute.REVERSE,)
    assert output_controller.get_cell(Position(2, 5)).color is None


def test_help_replaces_screen(
    view: TailView,
    viewmodel: TailViewModel,
    output_controller: MockOutputController,
) -> None:
    """Test that the help screen is drawn alone"""
    # Arrange
    _press_keys(viewmodel, "?")

    # Act
    view.draw()

    # Assert
    screen = output_controller.get_screen()
    assert "JOB LOG TAIL - HELP" in screen
    assert "Press any key to continue..." in screen
    assert "STDOUT" not in screen


def test_copy_mode_draws_content_only(
    view: TailView,
    viewmodel: TailViewModel,
    output_controller: MockOutputController,
) -> None:
    """Test that copy mode shows the active pane without any chrome"""
    # Arrange
    _press_keys(viewmodel, "y")

    # Act
    view.draw()

    # Assert
    lines = output_controller.get_screen_lines()
    assert lines[0].startswith("line ")
    assert lines[-1] == "line 99"
    screen = output_controller.get_screen()
    assert "STDOUT" not in screen
    assert "╭" not in screen
    assert SHORT_HELP[:20] not in screen


def test_single_pane_uses_full_width(
    view: TailView,
    viewmodel: TailViewModel,
    output_controller: MockOutputController,
) -> None:
    """Test that showing one stream hides the other"""
    # Arrange
    _press_keys(viewmodel, "e")

    # Act
    view.draw()

    # Assert
    header = output_controller.get_screen_line(0)
    assert header.startswith("> STDERR /logs/job.err (Top) [FOLLOW]")
    assert "STDOUT" not in output_controller.get_screen()
    assert output_controller.get_screen_line(1) == "╭" + "─" * 118 + "╮"


def test_scroll_label() -> None:
    """Test the scroll position description"""
    # Arrange
    pane = Pane(PaneName.STDOUT)
    pane.resize(20, 10)
    pane.set_lines([f"line {i}" for i in range(110)])

    # Act / Assert
    assert scroll_label(pane) == "Top"
    pane.scroll_to(50)
    assert scroll_label(pane) == "50%"
    pane.goto_bottom()
    assert scroll_label(pane) == "Bot"


def test_truncate_path_keeps_the_end() -> None:
    """Test that long paths lose their beginning"""
    # Act / Assert
    assert truncate_path("/a/b/job.out", 20) == "/a/b/job.out"
    assert truncate_path("/long/dir/job.out", 8) == "…job.out"
    assert truncate_path("/long/dir/job.out", 2) == ""
