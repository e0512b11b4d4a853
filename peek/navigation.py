"""Keystroke-driven navigation state machine and the interactive loop.

State is ``(view.path, view.selected_index)``. Each key either moves the
selection, changes directory, hands the selection to another program, or
quits. Selection and directory changes are followed by a re-render; hand-offs
and quits end the loop.
"""

from __future__ import annotations

import enum
import logging
import sys

from . import input as keyinput
from .config import BrowserOptions
from .handoff import HandoffRequest, editor_command, opener_command, replace_process, spawn_detached
from .keys import KeyBinding, KeyRegistry
from .layout import LayoutRenderer
from .paths import change_directory, resolve_path
from .state import DirectoryView
from .terminal import TerminalSession

logger = logging.getLogger(__name__)


class Action(enum.Enum):
    RENDER = "render"
    QUIT = "quit"


class BrowserSession:
    """Context object tying options, terminal, renderer and view together."""

    def __init__(
        self,
        options: BrowserOptions,
        terminal: TerminalSession,
        start_path: str,
        renderer: LayoutRenderer | None = None,
    ) -> None:
        self.options = options
        self.terminal = terminal
        self.terminal.clear_on_exit = options.clear_on_exit
        self.renderer = renderer if renderer is not None else LayoutRenderer(terminal, options)
        self.view = DirectoryView(path=change_directory(None, start_path))
        self.keys: KeyRegistry[Action] = KeyRegistry[Action]().register(
            KeyBinding(("K", "k", keyinput.UP), self.go_parent),
            KeyBinding(("J", "j", keyinput.ENTER, keyinput.DOWN), self.go_selected),
            KeyBinding(("H", "h", keyinput.LEFT), lambda: self.move_selection(-1)),
            KeyBinding(("L", "l", keyinput.RIGHT), lambda: self.move_selection(1)),
            KeyBinding(("E", "e"), self.edit_selection),
            KeyBinding(("O", "o"), self.open_selection),
            KeyBinding(("X", "x"), self.execute_selection),
            KeyBinding(("Q", "q", keyinput.ESC, keyinput.EOF), lambda: Action.QUIT),
        )

    def selected_path(self) -> str:
        return resolve_path(self.view.path, self.view.selected_name)

    def enter_directory(self, requested: str) -> Action:
        """Canonicalize ``requested`` and commit it only on success."""
        self.view.enter(change_directory(self.view.path, requested))
        return Action.RENDER

    def go_parent(self) -> Action:
        return self.enter_directory("..")

    def go_selected(self) -> Action:
        return self.enter_directory(self.view.selected_name)

    def move_selection(self, delta: int) -> Action:
        self.view.selected_index += delta
        return Action.RENDER

    def _restore_for_exec(self) -> None:
        sys.stdout.flush()
        sys.stderr.flush()
        self.terminal.exit_raw_mode()

    def handoff(self, request: HandoffRequest) -> Action:
        logger.debug("hand-off %s (fork=%s)", request.argv, request.fork)
        if request.fork:
            spawn_detached(request.argv)
        else:
            replace_process(request.argv, self._restore_for_exec)
        return Action.QUIT

    def edit_selection(self) -> Action:
        return self.handoff(HandoffRequest(editor_command(self.options.editor), self.selected_path()))

    def open_selection(self) -> Action:
        return self.handoff(
            HandoffRequest(opener_command(self.options.opener), self.selected_path(), fork=True)
        )

    def execute_selection(self) -> Action:
        return self.handoff(HandoffRequest(None, self.selected_path()))

    def handle_key(self, key: str) -> Action | None:
        """Apply one key; ``None`` means the key is ignored."""
        return self.keys.dispatch(key)

    def run(self) -> int:
        """Render, then process keys until a quit or hand-off; return exit status."""
        with self.terminal.raw_mode():
            self.renderer.render(self.view)
            while True:
                action = self.handle_key(keyinput.read_key(self.terminal.stdin_fd))
                if action is Action.QUIT:
                    return 0
                if action is Action.RENDER:
                    self.renderer.render(self.view)
