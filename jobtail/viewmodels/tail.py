"""ViewModel of the log tail screen: turns input and follower messages into state"""

import curses
import dataclasses
import logging
from typing import Callable, NamedTuple, Union

from jobtail.config import TailConfig
from jobtail.follower import (
    LineArrived,
    StreamEnded,
    TailStarted,
    Task,
    cleanup_task,
    start_tail_task,
    wait_for_line_task,
)
from jobtail.helpers.curses_utils import (
    BACKSPACE_KEYS,
    CTRL_Y,
    ENTER_KEYS,
    ESC,
    TAB,
    Position,
    Size,
)
from jobtail.input_controller import InputEvent, MouseAction, MouseEvent, ResizeEvent
from jobtail.models.layout import LayoutRequest, PaneGeometry, compute_layout, pane_at
from jobtail.models.modes import PaneName, TailMode
from jobtail.models.pane import Pane
from jobtail.models.render_cache import Decorator, StyledLine, decorate_line
from jobtail.models.search import find_match
from jobtail.models.selection import Selection, SelectionPoint, selection_point_at
from jobtail.models.tail_state import TailState

logger = logging.getLogger(__name__)

WHEEL_DELTA = 3
SEARCH_CHAR_LIMIT = 156
DEFAULT_SIZE = Size(24, 80)


class CopyToClipboard(NamedTuple):
    """Put text on the system clipboard"""

    text: str


class OpenPager(NamedTuple):
    """Open a file in the external pager"""

    path: str


Request = Union[CopyToClipboard, OpenPager]


@dataclasses.dataclass
class SavedView:
    """View settings to restore when copy mode ends"""

    mode: TailMode
    show_borders: bool
    stacked: bool
    mouse_enabled: bool
    active_pane: PaneName


class TailViewModel:  # pylint: disable=too-many-instance-attributes,too-many-public-methods
    """Owns both panes and the selection, and reacts to every event"""

    def __init__(
        self,
        state: TailState,
        config: TailConfig,
        needs_redraw: Callable[[], None],
    ) -> None:
        self._state = state
        self._config = config
        self._needs_redraw = needs_redraw
        self.selection = Selection()
        self.requests: list[Request] = []
        self.closed = False
        self._saved: SavedView | None = None
        self._started: set[PaneName] = set()
        self._layout: dict[PaneName, PaneGeometry] = {}
        self._needs_layout = True

        self.panes = {
            name: Pane(name, config.max_lines, self._decorator(name))
            for name in PaneName
        }
        self.panes[PaneName.STDOUT].path = config.stdout_path
        self.panes[PaneName.STDERR].path = config.stderr_path
        for pane in self.panes.values():
            pane.set_lines([f"Initializing {pane.name} tail..."])

        self._state.mode = config.mode
        self._state.active_pane = config.mode.panes[0]
        self._state.stacked = config.stacked
        self._state.mouse_enabled = config.mouse
        self._state.job_id = config.job_id

        for field in [
            "terminal_size",
            "mode",
            "stacked",
            "copy_mode",
            "searching",
        ]:
            self._state.register_watcher(field, self._layout_changed)
        for field in ["search_input", "last_search", "searching"]:
            self._state.register_watcher(field, self._search_changed)
        for field in [
            "terminal_size",
            "mode",
            "active_pane",
            "following",
            "paused",
            "stacked",
            "show_borders",
            "mouse_enabled",
            "copy_mode",
            "searching",
            "search_input",
            "last_search",
            "show_help",
            "status",
        ]:
            self._state.register_watcher(field, needs_redraw)

    def _decorator(self, name: PaneName) -> Decorator:
        def decorate(index: int, line: str) -> StyledLine:
            return decorate_line(
                line,
                self._state.search_needle,
                self.selection.bounds_for_line(name, index, line),
            )

        return decorate

    def _layout_changed(self) -> None:
        self._needs_layout = True

    def _search_changed(self) -> None:
        for pane in self.panes.values():
            pane.invalidate_render()

    @property
    def layout(self) -> dict[PaneName, PaneGeometry]:
        """Get the geometry of the visible panes"""
        if self._needs_layout:
            self._sync_layout()
        return self._layout

    def _sync_layout(self) -> None:
        size = self._state.terminal_size
        if size.height <= 0 or size.width <= 0:
            size = DEFAULT_SIZE
        self._layout = compute_layout(
            LayoutRequest(
                size,
                self._state.mode,
                stacked=self._state.stacked,
                copy_mode=self._state.copy_mode,
                searching=self._state.searching,
            )
        )
        for name, geometry in self._layout.items():
            pane = self.panes[name]
            if name == self.selection.pane and geometry.content.width != pane.width:
                self._clear_selection()
            pane.resize(geometry.content.width, geometry.content.height)
            if self._state.stick_to_bottom:
                pane.goto_bottom()
        self._needs_layout = False

    @property
    def active_pane(self) -> Pane:
        """Get the pane that keys act on"""
        visible = self._state.mode.panes
        name = self._state.active_pane
        if name not in visible:
            name = visible[0]
        return self.panes[name]

    def start(self) -> list[Task]:
        """Get the tasks that start following the visible panes"""
        return self._start_visible()

    def _start_visible(self) -> list[Task]:
        tasks = []
        for name in self._state.mode.panes:
            if name in self._started:
                continue
            self._started.add(name)
            pane = self.panes[name]
            logger.info("Starting %s tail of %r", name, pane.path)
            tasks.append(
                start_tail_task(
                    name, pane.path, pane.capacity, self._config.archive_dir
                )
            )
        return tasks

    def quit(self) -> list[Task]:
        """Detach both follow processes and get the tasks that release them"""
        if self.closed:
            return []
        self.closed = True
        tasks = []
        for pane in self.panes.values():
            handle, pane.handle = pane.handle, None
            if handle is not None:
                tasks.append(cleanup_task(handle))
        return tasks

    def update(self, event: InputEvent | TailStarted | LineArrived) -> list[Task]:
        """Apply an event and get the tasks it asks for"""
        if self._needs_layout:
            self._sync_layout()
        if isinstance(event, TailStarted):
            return self._on_tail_started(event)
        if isinstance(event, LineArrived):
            return self._on_line(event)
        if isinstance(event, ResizeEvent):
            self._on_resize(event.size)
            return []
        if isinstance(event, MouseEvent):
            self._on_mouse(event)
            return []
        return self._on_key(event)

    def _on_tail_started(self, message: TailStarted) -> list[Task]:
        if self.closed:
            return [cleanup_task(message.handle)] if message.handle else []

        pane = self.panes[message.pane]
        pane.set_lines(message.initial_lines)
        if self.selection.pane == pane.name:
            self.selection.clear()
        if self._state.stick_to_bottom:
            pane.goto_bottom()
        self._needs_redraw()

        if message.start_error is not None or message.handle is None:
            logger.info("Not following %s: %s", pane.name, message.start_error)
            return []

        tasks = []
        if pane.handle is not None:
            tasks.append(cleanup_task(pane.handle))
        pane.handle = message.handle
        tasks.append(wait_for_line_task(pane.name, pane.handle))
        return tasks

    def _on_line(self, message: LineArrived) -> list[Task]:
        pane = self.panes[message.pane]
        if pane.handle is None:
            return []

        if message.has_content:
            self._append(pane, message.line)
        if message.error is not None:
            self._append(pane, self._describe_error(message.error))
        self._needs_redraw()

        if not message.terminal:
            return [wait_for_line_task(pane.name, pane.handle)]
        handle, pane.handle = pane.handle, None
        return [cleanup_task(handle)]

    @staticmethod
    def _describe_error(error: Exception) -> str:
        if isinstance(error, StreamEnded):
            return str(error)
        return f"Read error: {error}"

    def _append(self, pane: Pane, text: str) -> None:
        removed = pane.append_line(text, self._state.stick_to_bottom)
        if removed:
            self.selection.adjust_after_trim(pane.name, removed)

    def _on_resize(self, size: Size) -> None:
        previous = self._state.terminal_size
        height = size.height if size.height > 0 else previous.height
        width = size.width if size.width > 0 else previous.width
        size = Size(height or DEFAULT_SIZE.height, width or DEFAULT_SIZE.width)
        if size != previous:
            self._clear_selection()
        self._state.terminal_size = size

    def _selection_changed(self, *names: PaneName | None) -> None:
        for name in names:
            if name is not None:
                self.panes[name].invalidate_render()
        self._needs_redraw()

    def _clear_selection(self) -> None:
        name = self.selection.pane
        self.selection.clear()
        self._selection_changed(name)

    def _point_at(
        self, name: PaneName, position: Position, clamp: bool
    ) -> SelectionPoint | None:
        geometry = self.layout.get(name)
        if geometry is None:
            return None
        pane = self.panes[name]
        return selection_point_at(
            geometry, position, pane.y_offset, pane.visual_lines(), clamp
        )

    def _on_mouse(self, event: MouseEvent) -> None:
        if self._state.searching or self._state.show_help:
            return

        name = pane_at(self.layout, event.position)
        if name is not None:
            self._state.active_pane = name

        if event.action in (MouseAction.WHEEL_UP, MouseAction.WHEEL_DOWN):
            self._on_wheel(event, name)
        elif event.action is MouseAction.PRESS:
            self._on_press(event.position, name)
        elif event.action is MouseAction.MOTION:
            self._extend_selection(event.position)
        elif event.action is MouseAction.RELEASE and self.selection.dragging:
            selected = self.selection.pane
            point = None
            if selected is not None:
                point = self._point_at(selected, event.position, clamp=True)
            self.selection.finish(point)
            self._selection_changed(selected)

    def _on_wheel(self, event: MouseEvent, name: PaneName | None) -> None:
        pane = self.panes[name] if name is not None else self.active_pane
        if event.action is MouseAction.WHEEL_UP:
            self._state.following = False
            pane.scroll_up(WHEEL_DELTA)
        else:
            pane.scroll_down(WHEEL_DELTA)
        self._needs_redraw()
        self._extend_selection(event.position)

    def _on_press(self, position: Position, name: PaneName | None) -> None:
        if name is None:
            return
        point = self._point_at(name, position, clamp=False)
        if point is None:
            return
        previous = self.selection.pane
        self._state.following = False
        self.selection.begin(name, point)
        self._selection_changed(previous, name)

    def _extend_selection(self, position: Position) -> None:
        name = self.selection.pane
        if not self.selection.dragging or name is None:
            return
        point = self._point_at(name, position, clamp=True)
        if point is not None and self.selection.extend(point):
            self._selection_changed(name)

    def _on_key(self, key: int) -> list[Task]:
        if self._state.status:
            self._state.status = ""

        if self._state.show_help:
            self._state.show_help = False
            return []
        if self._state.searching:
            self._handle_search_input(key)
            return []

        if key in (ord("q"), ESC):
            return self.quit()
        if key == ord("?"):
            self._state.show_help = True
        elif key == ord("p"):
            self._state.paused = not self._state.paused
        elif key == ord("f"):
            self._toggle_follow()
        elif key == ord("c"):
            self._clear_buffers()
        elif key in (ord("b"), ord("G")):
            self._state.following = True
            self.active_pane.goto_bottom()
        elif key in (ord("t"), ord("g"), curses.KEY_HOME):
            self._state.following = False
            self.active_pane.goto_top()
        elif key in (ord("o"), ord("e")):
            self._show_single(PaneName.STDOUT if key == ord("o") else PaneName.STDERR)
        elif key == ord("l"):
            self._show_both()
        elif key == TAB:
            self._switch_pane()
        elif key == ord("s"):
            if not self._state.copy_mode:
                self._state.stacked = not self._state.stacked
        elif key == ord("x"):
            if not self._state.copy_mode:
                self._state.show_borders = not self._state.show_borders
        elif key == ord("m"):
            self._state.mouse_enabled = not self._state.mouse_enabled
        elif key == ord("y"):
            self._toggle_copy_mode()
        elif key == ord("/"):
            self._state.search_input = ""
            self._state.searching = True
        elif key in (ord("n"), ord("N")):
            if self._state.last_search:
                self.perform_search(self._state.last_search, key == ord("n"))
        elif key == CTRL_Y:
            self._copy_selection()
        elif key == ord("Y"):
            self._copy_pane()
        elif key == ord("v"):
            if self.active_pane.path:
                self.requests.append(OpenPager(self.active_pane.path))
        else:
            self._handle_scroll(key)
        self._needs_redraw()
        return self._start_visible()

    def _handle_scroll(self, key: int) -> None:
        pane = self.active_pane
        if key in (curses.KEY_UP, ord("k")):
            self._state.following = False
            pane.scroll_up()
        elif key in (curses.KEY_DOWN, ord("j")):
            pane.scroll_down()
        elif key == curses.KEY_PPAGE:
            self._state.following = False
            pane.page_up()
        elif key in (curses.KEY_NPAGE, ord(" ")):
            pane.page_down()
        elif key == ord("u"):
            self._state.following = False
            pane.half_page_up()
        elif key == ord("d"):
            pane.half_page_down()

    def _handle_search_input(self, key: int) -> None:
        if key in ENTER_KEYS:
            self._state.last_search = self._state.search_input
            self._state.searching = False
            self.perform_search(self._state.last_search, True)
        elif key == ESC:
            self._state.searching = False
        elif key in BACKSPACE_KEYS:
            self._state.search_input = self._state.search_input[:-1]
        elif 0 <= key < 0x110000 and chr(key).isprintable():
            if len(self._state.search_input) < SEARCH_CHAR_LIMIT:
                self._state.search_input += chr(key)

    def perform_search(self, query: str, forward: bool) -> None:
        """Scroll the active pane to the next line containing the query"""
        if not query:
            return
        if self._needs_layout:
            self._sync_layout()
        pane = self.active_pane
        lines = pane.visual_lines()
        index = find_match(lines, query, pane.y_offset, forward)
        if index is None:
            self._state.status = f"Not found: {query}"
            return
        self._state.following = False
        pane.jump_to(index)
        self._needs_redraw()

    def _toggle_follow(self) -> None:
        self._state.following = not self._state.following
        if self._state.following:
            for pane in self.panes.values():
                pane.goto_bottom()

    def _clear_buffers(self) -> None:
        for pane in self.panes.values():
            pane.clear()
        self._clear_selection()

    def _show_single(self, name: PaneName) -> None:
        self._state.mode = TailMode.single(name)
        self._state.active_pane = name
        if self._state.mouse_enabled:
            self._state.mouse_enabled = False

    def _show_both(self) -> None:
        if self._state.copy_mode:
            self._exit_copy_mode()
        self._state.mode = TailMode.BOTH

    def _switch_pane(self) -> None:
        if self._state.mode is not TailMode.BOTH:
            return
        self._state.active_pane = self.active_pane.name.other
        self._clear_selection()

    def _toggle_copy_mode(self) -> None:
        if self._state.copy_mode:
            self._exit_copy_mode()
        else:
            self._enter_copy_mode()

    def _enter_copy_mode(self) -> None:
        self._clear_selection()
        active = self.active_pane.name
        self._saved = SavedView(
            mode=self._state.mode,
            show_borders=self._state.show_borders,
            stacked=self._state.stacked,
            mouse_enabled=self._state.mouse_enabled,
            active_pane=self._state.active_pane,
        )
        self._state.following = False
        self._state.mode = TailMode.single(active)
        self._state.show_borders = False
        self._state.copy_mode = True
        if self._saved.mouse_enabled:
            self._state.mouse_enabled = False

    def _exit_copy_mode(self) -> None:
        saved = self._saved
        self._state.copy_mode = False
        if saved is None:
            return
        self._state.mode = saved.mode
        self._state.show_borders = saved.show_borders
        self._state.stacked = saved.stacked
        self._state.active_pane = saved.active_pane
        if saved.mouse_enabled:
            self._state.mouse_enabled = True
        self._saved = None

    def selected_text(self) -> str:
        """Get the text under the selection"""
        name = self.selection.pane
        if name is None:
            return ""
        return self.selection.extract_text(self.panes[name].visual_lines())

    def _copy_selection(self) -> None:
        text = self.selected_text()
        if text:
            self.requests.append(CopyToClipboard(text))
            self._state.status = f"Copied {len(text)} characters"

    def _copy_pane(self) -> None:
        lines = self.active_pane.lines
        if lines:
            self.requests.append(CopyToClipboard("\n".join(lines)))
            self._state.status = f"Copied {len(lines)} lines"

    def take_requests(self) -> list[Request]:
        """Get and forget the pending terminal requests"""
        requests, self.requests = self.requests, []
        return requests
