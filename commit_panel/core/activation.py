"""Activation of the commit panel inside its host tool window."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

from commit_panel.core.interfaces import (
    ChangesTreeView,
    CommitActionLayer,
    ContentRegistry,
    FocusManager,
    HostToolWindow,
    PanelSurface,
    ToolWindowResolver,
)

_log = logging.getLogger("commit_panel.activation")

COMMIT_TOOL_WINDOW_ID = "Commit"
LOCAL_CHANGES_CONTENT_ID = "Local Changes"


class ActivationState(Enum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class ToolWindowActivationStateMachine:
    """
    Makes the panel the active commit surface and puts the host back the way
    it was found.

    ``hide_host_on_deactivate`` is captured on the first ``activate()`` only.
    A duplicate ``activate()`` while already active leaves it untouched, so
    ``deactivate(restore_host=True)`` hides the host only if this panel was
    the one that opened it.
    """

    def __init__(
        self,
        *,
        resolve_tool_window: ToolWindowResolver,
        content_registry: ContentRegistry,
        focus_manager: FocusManager,
        tree: ChangesTreeView,
        surface: PanelSurface,
        action_layer: CommitActionLayer,
        focus_target: Callable[[], Any],
        tool_window_id: str = COMMIT_TOOL_WINDOW_ID,
        content_id: str = LOCAL_CHANGES_CONTENT_ID,
    ) -> None:
        self._resolve_tool_window = resolve_tool_window
        self._content_registry = content_registry
        self._focus_manager = focus_manager
        self._tree = tree
        self._surface = surface
        self._action_layer = action_layer
        self._focus_target = focus_target
        self._tool_window_id = tool_window_id
        self._content_id = content_id

        self._state = ActivationState.INACTIVE
        self._hide_host_on_deactivate = False

    @property
    def state(self) -> ActivationState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is ActivationState.ACTIVE

    @property
    def hide_host_on_deactivate(self) -> bool:
        return self._hide_host_on_deactivate

    def _host(self) -> HostToolWindow | None:
        return self._resolve_tool_window(self._tool_window_id)

    def activate(self) -> bool:
        host = self._host()
        if host is None:
            _log.debug("Activation skipped: tool window %r is not available", self._tool_window_id)
            return False

        self._save_host_state(host)
        self._tree.set_show_checkboxes(True)
        self._surface.set_visible(True)
        self._state = ActivationState.ACTIVE
        self._action_layer.set_active(True)

        self._content_registry.select_content(self._content_id)
        host.activate(self._focus_message)
        _log.debug("Commit panel activated (hide host on deactivate: %s)", self._hide_host_on_deactivate)
        return True

    def deactivate(self, restore_host: bool) -> None:
        if restore_host:
            self._restore_host_state()
        self._hide_host_on_deactivate = False
        self._tree.set_show_checkboxes(False)
        self._surface.set_visible(False)
        self._state = ActivationState.INACTIVE
        self._action_layer.set_active(False)
        _log.debug("Commit panel deactivated (restore host: %s)", restore_host)

    def _save_host_state(self, host: HostToolWindow) -> None:
        if self.is_active:
            return
        self._hide_host_on_deactivate = not host.is_visible()

    def _restore_host_state(self) -> None:
        if not self._hide_host_on_deactivate:
            return
        host = self._host()
        if host is not None:
            host.hide()

    def _focus_message(self) -> None:
        self._focus_manager.request_focus(self._focus_target())
