"""Host-side adapters: dock tool windows, tab content registry and focus."""

from __future__ import annotations

import logging
from typing import Callable

from PySide6.QtCore import QObject, Qt, QTimer
from PySide6.QtWidgets import QApplication, QDockWidget, QMainWindow, QTabWidget, QWidget

_log = logging.getLogger("commit_panel.ui.tool_window")


class DockToolWindow:
    """``HostToolWindow`` over a ``QDockWidget``."""

    def __init__(self, main_window: QMainWindow, dock: QDockWidget, *, area=Qt.LeftDockWidgetArea) -> None:
        self._main_window = main_window
        self._dock = dock
        self._area = area

    @property
    def dock(self) -> QDockWidget:
        return self._dock

    def is_visible(self) -> bool:
        return bool(self._dock.isVisible())

    def show(self) -> None:
        try:
            if self._main_window.dockWidgetArea(self._dock) == Qt.NoDockWidgetArea:
                self._main_window.addDockWidget(self._area, self._dock)
        except RuntimeError:
            return
        self._dock.show()

    def hide(self) -> None:
        self._dock.hide()

    def activate(self, on_complete: Callable[[], None] | None = None) -> None:
        self.show()
        self._dock.raise_()
        self._dock.activateWindow()
        if on_complete is not None:
            # Run once the dock has been laid out and shown.
            QTimer.singleShot(0, on_complete)


class ToolWindowRegistry:
    def __init__(self) -> None:
        self._windows: dict[str, DockToolWindow] = {}

    def register(self, tool_window_id: str, window: DockToolWindow) -> None:
        self._windows[str(tool_window_id)] = window

    def resolve(self, tool_window_id: str) -> DockToolWindow | None:
        return self._windows.get(str(tool_window_id))


class TabContentRegistry:
    """``ContentRegistry`` over a ``QTabWidget``; content ids are tab titles."""

    def __init__(self, tabs: QTabWidget) -> None:
        self._tabs = tabs
        self._ids: dict[str, QWidget] = {}

    def add_content(self, content_id: str, widget: QWidget) -> None:
        self._ids[str(content_id)] = widget
        self._tabs.addTab(widget, str(content_id))

    def select_content(self, content_id: str) -> bool:
        widget = self._ids.get(str(content_id))
        if widget is None:
            return False
        index = self._tabs.indexOf(widget)
        if index < 0:
            return False
        self._tabs.setCurrentIndex(index)
        return True


class QtFocusManager(QObject):
    def request_focus(self, component) -> None:
        if not isinstance(component, QWidget):
            return
        QTimer.singleShot(0, lambda: self._focus_now(component))

    @staticmethod
    def _focus_now(component: QWidget) -> None:
        try:
            component.setFocus(Qt.OtherFocusReason)
        except RuntimeError:
            # Widget was deleted before the deferred focus ran.
            _log.debug("Focus target vanished before focus request ran")

    def has_focus_within(self, component) -> bool:
        if not isinstance(component, QWidget):
            return False
        focused = QApplication.focusWidget()
        while focused is not None:
            if focused is component:
                return True
            focused = focused.parentWidget()
        return False
