"""Tests for the application loop"""

from unittest.mock import Mock

import pytest

from jobtail.config import TailConfig
from jobtail.follower import TailStarted
from jobtail.helpers.curses_utils import Size
from jobtail.input_controller import InputController, ResizeEvent
from jobtail.models.modes import PaneName
from jobtail.task_runner import TaskRunner
from jobtail.views import app as app_module
from jobtail.views.app import App
from tests.infra.mock_output_controller import MockOutputController


@pytest.fixture(name="output_controller")
def output_controller_fixture() -> MockOutputController:
    """Create a MockOutputController instance for testing"""
    return MockOutputController(Size(24, 80))


@pytest.fixture(name="input_controller")
def input_controller_fixture() -> Mock:
    """Create an input controller with no pending input"""
    input_controller = Mock(spec=InputController)
    input_controller.get_input.return_value = None
    return input_controller


@pytest.fixture(name="runner")
def runner_fixture() -> Mock:
    """Create a task runner that never runs anything"""
    runner = Mock(spec=TaskRunner)
    runner.poll.return_value = []
    return runner


@pytest.fixture(name="app")
def app_fixture(output_controller, input_controller, runner) -> App:
    """Create a started App instance for testing"""
    config = TailConfig(
        stdout_path="/logs/job.out",
        stderr_path="/logs/job.err",
        job_id="4242",
        archive_dir="/archive",
    )
    app = App(output_controller, input_controller, config, runner)
    app.start()
    return app


def test_start_prepares_terminal_and_starts_tails(
    app: App, output_controller: MockOutputController, runner: Mock
) -> None:
    """Test that starting hides the cursor, enables the mouse and starts both panes"""
    # Assert
    assert output_controller.cursor_visibility == 0
    assert output_controller.mouse_reporting is True
    assert app.state.terminal_size == Size(24, 80)
    (tasks,) = runner.submit_all.call_args_list[0].args
    assert len(tasks) == 2


def test_step_draws_messages(
    app: App, output_controller: MockOutputController, runner: Mock
) -> None:
    """Test that follower messages are applied and drawn"""
    # Arrange
    runner.poll.return_value = [TailStarted(PaneName.STDOUT, ["hello world"])]

    # Act
    app.step()

    # Assert
    assert "hello world" in output_controller.get_screen()
    assert "Job 4242" in output_controller.get_screen_line(23)
    assert app.state.changes == set()


def test_resize_event_updates_size(
    app: App, input_controller: Mock, output_controller: MockOutputController
) -> None:
    """Test that a resize is applied to the state"""
    # Arrange
    input_controller.get_input.return_value = ResizeEvent(Size(30, 100))

    # Act
    app.step()

    # Assert
    assert app.state.terminal_size == Size(30, 100)


def test_mouse_toggle_changes_reporting(
    app: App, input_controller: Mock, output_controller: MockOutputController
) -> None:
    """Test that the mouse key turns terminal mouse reporting off"""
    # Arrange
    input_controller.get_input.return_value = ord("m")

    # Act
    app.step()

    # Assert
    assert output_controller.mouse_reporting is False


def test_copy_writes_osc52(
    app: App,
    input_controller: Mock,
    runner: Mock,
    output_controller: MockOutputController,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that copying a pane sends the clipboard sequence"""
    # Arrange
    monkeypatch.setenv("TERM", "xterm-256color")
    monkeypatch.delenv("TMUX", raising=False)
    runner.poll.return_value = [TailStarted(PaneName.STDOUT, ["hello"])]
    app.step()
    runner.poll.return_value = []
    input_controller.get_input.return_value = ord("Y")

    # Act
    app.step()

    # Assert
    assert output_controller.raw_output == ["\x1b]52;c;aGVsbG8=\x07"]
    assert "Copied 1 lines" in output_controller.get_screen_line(23)


def test_pager_suspends_terminal(
    app: App,
    input_controller: Mock,
    output_controller: MockOutputController,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that the pager runs while curses is suspended"""
    # Arrange
    monkeypatch.setenv("PAGER", "less")
    run = Mock()
    monkeypatch.setattr(app_module.subprocess, "run", run)
    input_controller.get_input.return_value = ord("v")

    # Act
    app.step()

    # Assert
    run.assert_called_once_with(["less", "/logs/job.out"], check=False)
    assert output_controller.suspended == 1


def test_pager_failure_is_reported(
    app: App,
    input_controller: Mock,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    """Test that a missing pager becomes a status message"""
    # Arrange
    monkeypatch.setenv("PAGER", "no-such-pager")
    monkeypatch.setattr(
        app_module.subprocess, "run", Mock(side_effect=FileNotFoundError("missing"))
    )
    input_controller.get_input.return_value = ord("v")

    # Act
    app.step()

    # Assert
    assert app.state.status == "Could not open pager: missing"


def test_run_until_quit(
    app: App,
    input_controller: Mock,
    runner: Mock,
    output_controller: MockOutputController,
) -> None:
    """Test that quitting ends the loop and shuts everything down"""
    # Arrange
    input_controller.get_input.side_effect = [None, ord("q")]

    # Act
    app.run()

    # Assert
    assert app.viewmodel.closed is True
    runner.drain.assert_called_once()
    runner.shutdown.assert_called_once()
    assert output_controller.mouse_reporting is False
