"""Main window hosting the Commit tool window and the diff preview."""

from __future__ import annotations

import logging
from pathlib import Path

from PySide6.QtCore import QPoint, Qt
from PySide6.QtGui import QAction, QCursor, QKeySequence
from PySide6.QtWidgets import (
    QDockWidget,
    QInputDialog,
    QLineEdit,
    QMainWindow,
    QMenu,
    QPlainTextEdit,
    QTabWidget,
    QWidget,
)

from commit_panel.core.activation import COMMIT_TOOL_WINDOW_ID, LOCAL_CHANGES_CONTENT_ID
from commit_panel.core.changes import ChangeList, VcsUser
from commit_panel.core.coordinator import (
    DEFAULT_COMMIT_SHORTCUTS,
    CommitPanelEnvironment,
    CommitPanelParts,
    CommitReviewCoordinator,
)
from commit_panel.git.git_service import GitChangesStatus, GitService, GitServiceError
from commit_panel.settings_manager import SettingsManager
from commit_panel.ui.controllers import ChangesViewController, CommitWorkflowController
from commit_panel.ui.tool_window import DockToolWindow, QtFocusManager, TabContentRegistry, ToolWindowRegistry
from commit_panel.ui.widgets.commit_panel_widget import (
    ChangesViewPanel,
    CommitMessageEditor,
    CommitPanelWidget,
    CommitToolbar,
    StatusStripWidget,
)

_log = logging.getLogger("commit_panel.ui.main_window")


class CommitOptionsPopup:
    """``Popup`` over a ``QMenu``."""

    def __init__(self, menu: QMenu) -> None:
        self.menu = menu

    def show_above(self, component: QWidget) -> None:
        height = self.menu.sizeHint().height()
        pos = component.mapToGlobal(QPoint(0, 0))
        self.menu.popup(QPoint(pos.x(), pos.y() - height))

    def show_in_best_position_for(self, context) -> None:
        if isinstance(context, QWidget):
            self.menu.popup(context.mapToGlobal(context.rect().center()))
            return
        self.menu.popup(QCursor.pos())


def _install_subject_hint(editor: CommitMessageEditor) -> None:
    editor.setPlaceholderText("Commit message (first line is the subject)")


class CommitPanelWindow(QMainWindow):
    APP_NAME = "Commit Panel"

    def __init__(self, project_root: str, settings_manager: SettingsManager, parent=None):
        super().__init__(parent)
        self.project_root = str(Path(project_root).expanduser().resolve())
        self.settings_manager = settings_manager
        self.git_service = GitService(
            command_timeout_seconds=settings_manager.git_timeout_seconds,
            exclude_untracked_predicate=self._exclude_untracked if settings_manager.get("git.hide_pycache", default=True) else None,
        )
        self.setWindowTitle(f"{self.APP_NAME} [{Path(self.project_root).name}]")
        self.resize(1100, 720)

        self.preview = QPlainTextEdit(self)
        self.preview.setReadOnly(True)
        self.preview.setPlaceholderText("Select a change to preview its diff.")
        self.setCentralWidget(self.preview)

        self._build_commit_tool_window()
        self._build_coordinator()
        self._build_toolbar_actions()
        self._build_menus()

        self.changes_controller.statusChanged.connect(self._on_status_changed)
        self.changes_controller.refreshFailed.connect(lambda msg: self.statusBar().showMessage(msg, 4000))
        self.workflow.committed.connect(self._on_committed)
        self.workflow.commitFailed.connect(lambda msg: self.statusBar().showMessage(msg, 4000))

        if not settings_manager.show_diff_preview:
            self.changes_controller.close_editor_preview()
        self.changes_controller.refresh_immediately()
        self.changes_controller.start_polling(settings_manager.poll_interval_ms)
        self.statusBar().showMessage("Ready")

    # ---------- Construction ----------

    def _build_commit_tool_window(self) -> None:
        self.dock_commit = QDockWidget(COMMIT_TOOL_WINDOW_ID, self)
        self.dock_commit.setObjectName("dock_commit")
        self.dock_commit.setAllowedAreas(Qt.LeftDockWidgetArea | Qt.RightDockWidgetArea)
        self.dock_commit.setFeatures(
            QDockWidget.DockWidgetMovable
            | QDockWidget.DockWidgetFloatable
            | QDockWidget.DockWidgetClosable
        )
        self.dock_commit.setMinimumWidth(320)

        self.commit_tabs = QTabWidget(self.dock_commit)
        self.commit_tabs.setDocumentMode(True)
        self.dock_commit.setWidget(self.commit_tabs)
        self.content_registry = TabContentRegistry(self.commit_tabs)

        self.changes_panel = ChangesViewPanel(
            self.commit_tabs,
            include_new_changes=self.settings_manager.include_new_changes,
        )
        self.commit_panel = CommitPanelWidget(self.changes_panel)
        self.changes_panel.add_bottom_widget(self.commit_panel)
        self.content_registry.add_content(LOCAL_CHANGES_CONTENT_ID, self.changes_panel)

        self.addDockWidget(Qt.LeftDockWidgetArea, self.dock_commit)
        self.tool_windows = ToolWindowRegistry()
        self.tool_windows.register(
            COMMIT_TOOL_WINDOW_ID,
            DockToolWindow(self, self.dock_commit, area=Qt.LeftDockWidgetArea),
        )

        self.changes_controller = ChangesViewController(
            git_service=self.git_service,
            project_root=self.project_root,
            tree=self.changes_panel.tree,
            preview=self.preview,
            edited_commit_provider=lambda: self.coordinator.edited_commit,
            parent=self,
        )

    def _build_coordinator(self) -> None:
        self.toolbar = CommitToolbar(self.commit_panel)
        self.status_strip = StatusStripWidget(self.changes_panel)
        self.focus_manager = QtFocusManager(self)

        shortcuts = self.settings_manager.action_sequences("commit.execute") or list(DEFAULT_COMMIT_SHORTCUTS)
        environment = CommitPanelEnvironment(
            host=self.changes_panel,
            resolve_tool_window=self.tool_windows.resolve,
            content_registry=self.content_registry,
            focus_manager=self.focus_manager,
            changes_view_manager=self.changes_controller,
            message_augmentations=(_install_subject_hint,),
            commit_shortcuts=tuple(shortcuts),
            toolbar_horizontal=self.settings_manager.toolbar_horizontal,
        )
        parts = CommitPanelParts(
            surface=self.commit_panel,
            toolbar=self.toolbar,
            status_strip=self.status_strip,
            message_editor=self.commit_panel.message_editor,
            action_layer=self.commit_panel.actions_panel,
            progress_ui=self.commit_panel.progress_panel,
            author_component=self.commit_panel.author_field,
            root_component=self.commit_panel,
        )
        self.coordinator = CommitReviewCoordinator(environment, parts)
        # Hidden until a commit is started.
        self.commit_panel.set_visible(False)

        self.workflow = CommitWorkflowController(
            coordinator=self.coordinator,
            git_service=self.git_service,
            repo_root_provider=lambda: self.changes_controller.repo_root,
            actions_panel=self.commit_panel.actions_panel,
            message_changed_signal=self.commit_panel.message_editor.textChanged,
            parent=self,
        )
        self.coordinator.add_commit_author_listener(self._on_author_changed)

    def _build_toolbar_actions(self) -> None:
        self.toolbar.add_action("Refresh", self.changes_controller.refresh_immediately, tooltip="Refresh changes")
        self.toolbar.add_action(
            "Options",
            lambda: self.show_commit_options(from_toolbar=True),
            tooltip="Commit options",
        )
        self.toolbar.add_action(
            "Layout",
            self.toggle_toolbar_orientation,
            tooltip="Move the toolbar between the panel and the status strip",
        )

        self.options_menu = QMenu(self)
        self.amend_action = self.options_menu.addAction("Amend Commit")
        self.amend_action.setCheckable(True)
        self.amend_action.toggled.connect(self.commit_panel.actions_panel.amend_chk.setChecked)
        self.commit_panel.actions_panel.amend_chk.toggled.connect(self.amend_action.setChecked)
        self.options_menu.addAction("Set Author...", self.prompt_commit_author)
        self.options_menu.addAction("Clear Author", lambda: self.coordinator.set_commit_author(None))
        self.options_menu.addSeparator()
        self.horizontal_action = self.options_menu.addAction("Horizontal Toolbar")
        self.horizontal_action.setCheckable(True)
        self.horizontal_action.setChecked(self.coordinator.is_toolbar_horizontal)
        self.horizontal_action.toggled.connect(self.set_toolbar_horizontal)
        self.options_popup = CommitOptionsPopup(self.options_menu)

    def _build_menus(self) -> None:
        vcs_menu = self.menuBar().addMenu("&Git")

        commit_action = QAction("Commit...", self)
        commit_action.setShortcut(QKeySequence("Ctrl+K"))
        commit_action.triggered.connect(self.start_commit)
        vcs_menu.addAction(commit_action)

        refresh_action = QAction("Refresh Changes", self)
        refresh_action.setShortcuts(
            [QKeySequence(text) for text in self.settings_manager.action_sequences("commit.refresh")]
        )
        refresh_action.triggered.connect(self.changes_controller.refresh_immediately)
        vcs_menu.addAction(refresh_action)

        cancel_action = QAction("Cancel Commit", self.commit_panel)
        cancel_action.setShortcuts(
            [QKeySequence(text) for text in self.settings_manager.action_sequences("commit.cancel")]
        )
        cancel_action.setShortcutContext(Qt.WidgetWithChildrenShortcut)
        cancel_action.triggered.connect(self.workflow.cancel)
        self.commit_panel.addAction(cancel_action)

        preview_action = QAction("Toggle Diff Preview", self)
        preview_action.triggered.connect(self.toggle_diff_preview)
        vcs_menu.addAction(preview_action)

        options_action = QAction("Commit Options...", self)
        options_action.triggered.connect(lambda: self.show_commit_options(from_toolbar=False))
        vcs_menu.addAction(options_action)

        vcs_menu.addSeparator()
        vcs_menu.addAction(self.dock_commit.toggleViewAction())

    # ---------- Actions ----------

    def start_commit(self) -> None:
        if self.workflow.start():
            _log.debug("Commit panel activated")

    def show_commit_options(self, *, from_toolbar: bool) -> None:
        context = None if from_toolbar else self.changes_panel.tree
        self.coordinator.show_commit_options(self.options_popup, from_toolbar, context)

    def toggle_diff_preview(self) -> None:
        if self.changes_controller.is_editor_preview():
            self.changes_controller.close_editor_preview()
        else:
            self.changes_controller.open_editor_preview()

    def toggle_toolbar_orientation(self) -> None:
        self.set_toolbar_horizontal(not self.coordinator.is_toolbar_horizontal)

    def set_toolbar_horizontal(self, horizontal: bool) -> None:
        self.coordinator.set_toolbar_horizontal(horizontal)
        self.horizontal_action.setChecked(self.coordinator.is_toolbar_horizontal)
        self.settings_manager.set_toolbar_horizontal(self.coordinator.is_toolbar_horizontal)

    def prompt_commit_author(self) -> None:
        current = self.coordinator.commit_author
        repo_root = self.changes_controller.repo_root
        if current is None and repo_root:
            try:
                current = self.git_service.read_configured_user(repo_root)
            except GitServiceError:
                current = None
        text, ok = QInputDialog.getText(
            self,
            "Commit Author",
            "Author (Name <email>):",
            QLineEdit.Normal,
            str(current) if current is not None else "",
        )
        if not ok:
            return
        author = VcsUser.parse(text)
        if str(text or "").strip() and author is None:
            self.statusBar().showMessage("Author must look like 'Name <email>'.", 3000)
            return
        self.coordinator.set_commit_author(author)

    # ---------- Callbacks ----------

    def _on_status_changed(self, status: GitChangesStatus) -> None:
        if not status.is_repo:
            self.status_strip.set_branch("")
            self.statusBar().showMessage("Project is not inside a Git repository.", 4000)
            return
        self.status_strip.set_branch(status.current_branch or "")
        self.coordinator.set_completion_context([ChangeList("Changes", list(status.changes))])
        self.workflow.refresh_commit_enabled()

    def _on_author_changed(self) -> None:
        author = self.coordinator.commit_author
        if author is not None:
            self.statusBar().showMessage(f"Committing as {author}", 2500)

    def _on_committed(self, output: str) -> None:
        first_line = output.splitlines()[0] if output else "Commit completed."
        self.statusBar().showMessage(first_line, 4000)

    @staticmethod
    def _exclude_untracked(abs_path: str) -> bool:
        return "__pycache__" in Path(abs_path).parts

    def closeEvent(self, event):
        self.workflow.shutdown()
        self.changes_controller.shutdown()
        self.coordinator.dispose()
        super().closeEvent(event)
