"""Main application loop: input, follower messages, terminal requests and drawing"""

import logging
import os
import subprocess

from jobtail.clipboard import osc52_sequence, pager_command
from jobtail.config import TailConfig
from jobtail.follower import Message
from jobtail.input_controller import InputController, InputEvent, ResizeEvent
from jobtail.models.tail_state import TailState
from jobtail.output_controller import OutputController
from jobtail.task_runner import TaskRunner
from jobtail.viewmodels.tail import CopyToClipboard, OpenPager, TailViewModel
from jobtail.views.tail import TailView

logger = logging.getLogger(__name__)


class App:  # pylint: disable=too-many-instance-attributes
    """Log tail application"""

    def __init__(
        self,
        output_controller: OutputController,
        input_controller: InputController,
        config: TailConfig,
        runner: TaskRunner | None = None,
    ) -> None:
        self._output = output_controller
        self._input = input_controller
        self._runner = runner or TaskRunner()
        self._state = TailState()
        self._needs_redraw = True
        self._viewmodel = TailViewModel(self._state, config, self._set_needs_redraw)
        self._view = TailView(
            self._state, self._viewmodel, output_controller.create_main_window()
        )
        self._state.register_watcher("mouse_enabled", self._mouse_changed)

    @property
    def state(self) -> TailState:
        """Get the view state"""
        return self._state

    @property
    def viewmodel(self) -> TailViewModel:
        """Get the view controller"""
        return self._viewmodel

    def _set_needs_redraw(self) -> None:
        self._needs_redraw = True

    def _mouse_changed(self) -> None:
        self._output.set_mouse_reporting(self._state.mouse_enabled)

    def run(self) -> None:
        """Run until the user quits"""
        self.start()
        try:
            while not self._viewmodel.closed:
                self.step()
        finally:
            self.shutdown()

    def start(self) -> None:
        """Prepare the terminal and start following the visible panes"""
        self._output.curs_set(0)
        self._state.terminal_size = self._output.get_terminal_size()
        if self._state.mouse_enabled:
            self._output.set_mouse_reporting(True)
        self._runner.submit_all(self._viewmodel.start())

    def step(self) -> None:
        """Handle one input event and every ready message, then redraw"""
        event = self._input.get_input()
        if event is not None:
            if isinstance(event, ResizeEvent):
                self._output.update_lines_cols()
            self._dispatch(event)
        for message in self._runner.poll():
            self._dispatch(message)

        self._handle_requests()

        if self._needs_redraw and not self._viewmodel.closed:
            self._view.draw()
            self._needs_redraw = False
        self._state.clear_changes()

    def _dispatch(self, event: InputEvent | Message) -> None:
        self._runner.submit_all(self._viewmodel.update(event))

    def _handle_requests(self) -> None:
        for request in self._viewmodel.take_requests():
            if isinstance(request, CopyToClipboard):
                self._output.write_raw(
                    osc52_sequence(
                        request.text,
                        os.environ.get("TERM", ""),
                        bool(os.environ.get("TMUX")),
                    )
                )
            elif isinstance(request, OpenPager):
                self._open_pager(request.path)

    def _open_pager(self, path: str) -> None:
        command = pager_command(path, os.environ.get("PAGER"))
        logger.info("Opening pager: %s", command)
        with self._output.suspend():
            try:
                subprocess.run(command, check=False)
            except OSError as e:
                logger.error("Could not run pager %s: %s", command, e)
                self._state.status = f"Could not open pager: {e}"
        self._needs_redraw = True

    def shutdown(self) -> None:
        """Release every follow process and stop the task runner"""
        self._runner.submit_all(self._viewmodel.quit())
        self._runner.drain(self._viewmodel.update)
        self._runner.shutdown()
        if self._state.mouse_enabled:
            self._output.set_mouse_reporting(False)
