from __future__ import annotations

from typing import Callable, Sequence

from PySide6.QtCore import Qt, Signal
from PySide6.QtGui import QAction, QKeySequence, QShortcut, QTextCursor
from PySide6.QtWidgets import (
    QCheckBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QPushButton,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from commit_panel.core.changes import ChangeList, VcsUser
from commit_panel.ui.widgets.changes_tree import ChangesTree


def _detach_from_layout(widget: QWidget) -> None:
    parent = widget.parentWidget()
    layout = parent.layout() if parent is not None else None
    if layout is not None:
        layout.removeWidget(widget)


class CommitMessageEditor(QPlainTextEdit):
    """Commit message box with word completion from change list names and paths."""

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setPlaceholderText("Commit message")
        self.setTabChangesFocus(True)
        self._change_lists: list[ChangeList] = []

    @property
    def focus_target(self) -> QWidget:
        return self

    def text(self) -> str:
        return str(self.toPlainText() or "")

    def set_text(self, text: str) -> None:
        self.setPlainText(str(text or ""))
        self.moveCursor(QTextCursor.End)

    def set_change_lists(self, change_lists: list[ChangeList]) -> None:
        self._change_lists = list(change_lists)

    def completion_candidates(self, prefix: str) -> list[str]:
        words: list[str] = []
        for change_list in self._change_lists:
            words.append(change_list.name)
            for change in change_list.changes:
                words.append(change.rel_path.rsplit("/", 1)[-1])
                words.append(change.rel_path)
        needle = str(prefix or "").lower()
        out: list[str] = []
        for word in words:
            if word and word.lower().startswith(needle) and word not in out:
                out.append(word)
        return out

    def complete_word_under_cursor(self) -> bool:
        cursor = self.textCursor()
        cursor.select(QTextCursor.WordUnderCursor)
        prefix = cursor.selectedText()
        if not prefix:
            return False
        candidates = [word for word in self.completion_candidates(prefix) if word != prefix]
        if not candidates:
            return False
        cursor.insertText(candidates[0])
        self.setTextCursor(cursor)
        return True

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Space and event.modifiers() & Qt.ControlModifier:
            if self.complete_word_under_cursor():
                event.accept()
                return
        super().keyPressEvent(event)


class CommitAuthorField(QWidget):
    def __init__(self, parent=None):
        super().__init__(parent)
        self._author: VcsUser | None = None
        self._changed_callback: Callable[[], None] | None = None

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(6)
        layout.addWidget(QLabel("Author:"), 0)
        self.author_edit = QLineEdit()
        self.author_edit.setPlaceholderText("Name <email> (optional)")
        layout.addWidget(self.author_edit, 1)

        self.author_edit.editingFinished.connect(self._on_editing_finished)

    def commit_author(self) -> VcsUser | None:
        return self._author

    def set_commit_author(self, author: VcsUser | None) -> None:
        self.author_edit.setText(str(author) if author is not None else "")
        self._store(author)

    def set_author_changed_callback(self, callback: Callable[[], None] | None) -> None:
        self._changed_callback = callback

    def _on_editing_finished(self) -> None:
        self._store(VcsUser.parse(self.author_edit.text()))

    def _store(self, author: VcsUser | None) -> None:
        if author == self._author:
            return
        self._author = author
        if self._changed_callback is not None:
            self._changed_callback()


class CommitProgressPanel(QLabel):
    def __init__(self, parent=None):
        super().__init__(parent)
        self.setWordWrap(True)
        self._busy = False

    @property
    def is_dumb_mode(self) -> bool:
        return self._busy

    def set_busy(self, busy: bool, text: str = "") -> None:
        self._busy = bool(busy)
        self._set_text(text, error=False)

    def set_error(self, text: str) -> None:
        self._busy = False
        self._set_text(text, error=True)

    def set_info(self, text: str) -> None:
        self._busy = False
        self._set_text(text, error=False)

    def clear(self) -> None:
        self._busy = False
        self.setText("")

    def _set_text(self, text: str, *, error: bool) -> None:
        message = str(text or "")
        if not message:
            self.setText("")
            return
        color = "#d46a6a" if error else "#a4bf7a"
        self.setText(f"<span style='color:{color};'>{message}</span>")


class CommitActionsPanel(QWidget):
    commitRequested = Signal()
    cancelRequested = Signal()
    amendToggled = Signal(bool)

    def __init__(self, parent=None):
        super().__init__(parent)
        self._active = False
        self._shortcuts: list[QShortcut] = []
        self._is_default_predicate: Callable[[], bool] | None = None

        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self.amend_chk = QCheckBox("Amend")
        layout.addWidget(self.amend_chk)
        layout.addStretch(1)
        self.cancel_btn = QPushButton("Cancel")
        self.commit_btn = QPushButton("Commit")
        layout.addWidget(self.cancel_btn)
        layout.addWidget(self.commit_btn)

        self.commit_btn.clicked.connect(self._request_commit)
        self.cancel_btn.clicked.connect(self.cancelRequested.emit)
        self.amend_chk.toggled.connect(self.amendToggled.emit)
        self.set_active(False)

    @property
    def is_active(self) -> bool:
        return self._active

    def set_active(self, active: bool) -> None:
        self._active = bool(active)
        self.cancel_btn.setEnabled(self._active)
        for shortcut in self._shortcuts:
            shortcut.setEnabled(self._active)

    def set_commit_enabled(self, enabled: bool) -> None:
        self.commit_btn.setEnabled(bool(enabled))

    def set_is_default_predicate(self, predicate: Callable[[], bool] | None) -> None:
        self._is_default_predicate = predicate
        self.refresh_default()

    def refresh_default(self) -> None:
        predicate = self._is_default_predicate
        self.commit_btn.setDefault(bool(predicate()) if predicate is not None else False)

    def setup_shortcuts(self, root_component: QWidget, sequences: Sequence[str]) -> None:
        for shortcut in self._shortcuts:
            shortcut.setEnabled(False)
            shortcut.deleteLater()
        self._shortcuts = []
        for text in sequences:
            sequence = QKeySequence(str(text or "").strip())
            if sequence.isEmpty():
                continue
            shortcut = QShortcut(sequence, root_component)
            shortcut.setContext(Qt.WidgetWithChildrenShortcut)
            shortcut.setEnabled(self._active)
            shortcut.activated.connect(self._request_commit)
            self._shortcuts.append(shortcut)

    def _request_commit(self) -> None:
        if self.commit_btn.isEnabled():
            self.commitRequested.emit()


class CommitToolbar:
    """``ToolbarSurface`` over a ``QToolBar``."""

    def __init__(self, parent=None) -> None:
        self.toolbar = QToolBar(parent)
        self.toolbar.setMovable(False)
        self.toolbar.setFloatable(False)
        self.reserves_auto_popup_icon = False

    @property
    def component(self) -> QToolBar:
        return self.toolbar

    def add_action(self, text: str, callback: Callable[[], None], *, tooltip: str = "") -> QAction:
        action = QAction(text, self.toolbar)
        if tooltip:
            action.setToolTip(tooltip)
        action.triggered.connect(lambda _checked=False: callback())
        self.toolbar.addAction(action)
        return action

    def set_horizontal(self, horizontal: bool) -> None:
        self.toolbar.setOrientation(Qt.Horizontal if horizontal else Qt.Vertical)

    def set_reserve_auto_popup_icon(self, reserve: bool) -> None:
        self.reserves_auto_popup_icon = bool(reserve)
        self.toolbar.setProperty("reserveAutoPopupIcon", self.reserves_auto_popup_icon)


class StatusStripWidget(QWidget):
    """Strip under the changes tree; the horizontal toolbar lives here."""

    def __init__(self, parent=None):
        super().__init__(parent)
        layout = QHBoxLayout(self)
        layout.setContentsMargins(1, 0, 0, 0)
        layout.setSpacing(6)
        self.branch_label = QLabel("")
        layout.addWidget(self.branch_label, 0)
        layout.addStretch(1)

    def add_to_left(self, component: QWidget) -> None:
        _detach_from_layout(component)
        self.layout().insertWidget(0, component, 0)
        component.show()

    def set_branch(self, branch: str) -> None:
        self.branch_label.setText(f"Branch: {branch}" if branch else "")


class CommitPanelWidget(QWidget):
    """Message, author, progress and commit actions; vertical toolbar slot on the left."""

    def __init__(self, parent=None):
        super().__init__(parent)
        root = QHBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(0)

        self.toolbar_slot = QWidget(self)
        slot_layout = QVBoxLayout(self.toolbar_slot)
        slot_layout.setContentsMargins(0, 0, 0, 0)
        root.addWidget(self.toolbar_slot, 0)

        self.center = QWidget(self)
        self.center.setObjectName("commitPanelCenter")
        center_layout = QVBoxLayout(self.center)
        center_layout.setContentsMargins(6, 6, 6, 6)
        center_layout.setSpacing(6)
        root.addWidget(self.center, 1)

        self.message_editor = CommitMessageEditor(self.center)
        self.message_editor.setMinimumHeight(80)
        center_layout.addWidget(self.message_editor, 1)

        self.progress_panel = CommitProgressPanel(self.center)
        center_layout.addWidget(self.progress_panel)

        self.author_field = CommitAuthorField(self.center)
        center_layout.addWidget(self.author_field)

        self.actions_panel = CommitActionsPanel(self.center)
        center_layout.addWidget(self.actions_panel)

        self._content_border = False

    def add_to_left(self, component: QWidget) -> None:
        _detach_from_layout(component)
        self.toolbar_slot.layout().addWidget(component)
        component.show()

    def set_content_border(self, visible: bool) -> None:
        self._content_border = bool(visible)
        if self._content_border:
            self.center.setStyleSheet("#commitPanelCenter { border-left: 1px solid palette(mid); }")
        else:
            self.center.setStyleSheet("")

    def set_visible(self, visible: bool) -> None:
        self.setVisible(bool(visible))

    def is_visible(self) -> bool:
        return not self.isHidden()


class ChangesViewPanel(QWidget):
    """Local Changes content: tree, status strip slot and the commit panel below."""

    def __init__(self, parent=None, *, include_new_changes: bool = True):
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        self.tree = ChangesTree(self, include_new_changes=include_new_changes)
        layout.addWidget(self.tree, 3)

        self.status_slot = QWidget(self)
        status_layout = QVBoxLayout(self.status_slot)
        status_layout.setContentsMargins(0, 0, 0, 0)
        layout.addWidget(self.status_slot, 0)

        self._status_component: QWidget | None = None

    @property
    def changes_view(self) -> ChangesTree:
        return self.tree

    @property
    def status_component(self) -> QWidget | None:
        return self._status_component

    def set_status_component(self, component: QWidget | None) -> None:
        if component is self._status_component:
            return
        previous = self._status_component
        if previous is not None:
            self.status_slot.layout().removeWidget(previous)
            previous.hide()
        self._status_component = component
        if component is not None:
            self.status_slot.layout().addWidget(component)
            component.show()

    def add_bottom_widget(self, widget: QWidget) -> None:
        self.layout().addWidget(widget, 2)
