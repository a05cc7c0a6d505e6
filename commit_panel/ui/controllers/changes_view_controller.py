"""Qt-aware controller for change refreshes, polling and the diff preview."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtWidgets import QPlainTextEdit

from commit_panel.core.changes import Change, EditedCommitDetails, UnversionedFile
from commit_panel.git.git_service import GitChangesStatus, GitService, GitServiceError
from commit_panel.ui.widgets.changes_tree import ChangesTree

_log = logging.getLogger("commit_panel.ui.changes_view")


class ChangesViewController(QObject):
    """
    Reads ``git status`` off the UI thread and repopulates the changes tree.

    A refresh requested while another one is in flight is remembered and run
    once the current one lands, so only the latest request matters. Also owns
    the editor-style diff preview for the selected change.
    """

    statusChanged = Signal(object)  # GitChangesStatus
    refreshFailed = Signal(str)

    def __init__(
        self,
        *,
        git_service: GitService,
        project_root: str,
        tree: ChangesTree,
        preview: QPlainTextEdit | None = None,
        edited_commit_provider: Callable[[], EditedCommitDetails | None] | None = None,
        parent=None,
    ):
        super().__init__(parent)
        self.git_service = git_service
        self.project_root = str(project_root)
        self.tree = tree
        self.preview = preview
        self._edited_commit_provider = edited_commit_provider

        self._repo_root: str | None = None
        self._current_branch = ""
        self._refresh_inflight = False
        self._refresh_requested = False
        self._preview_open = preview is not None
        self._preview_item: Change | UnversionedFile | None = None
        self._close_preview_if_empty = False

        self._debounce_timer = QTimer(self)
        self._debounce_timer.setSingleShot(True)
        self._debounce_timer.timeout.connect(self._request_refresh)

        self._poll_timer = QTimer(self)
        self._poll_timer.timeout.connect(lambda: self.schedule_refresh(delay_ms=0))

        self._executor = concurrent.futures.ThreadPoolExecutor(max_workers=1, thread_name_prefix="commit-panel-git")
        self._pending: dict[concurrent.futures.Future, tuple[str, object | None]] = {}

        self._result_pump = QTimer(self)
        self._result_pump.setInterval(40)
        self._result_pump.timeout.connect(self._drain_tasks)

        self.tree.itemSelectionChanged.connect(self._on_selection_changed)

    @property
    def repo_root(self) -> str | None:
        return self._repo_root

    @property
    def current_branch(self) -> str:
        return self._current_branch

    def start_polling(self, interval_ms: int) -> None:
        if interval_ms <= 0:
            self._poll_timer.stop()
            return
        self._poll_timer.setInterval(int(interval_ms))
        self._poll_timer.start()

    # ---------- Refresh ----------

    def refresh_immediately(self) -> None:
        self._debounce_timer.stop()
        self._request_refresh()

    def schedule_refresh(self, *, delay_ms: int = 320) -> None:
        wait = max(0, int(delay_ms))
        if wait == 0:
            self._request_refresh()
            return
        self._debounce_timer.start(wait)

    def _request_refresh(self) -> None:
        if self._refresh_inflight:
            self._refresh_requested = True
            return
        self._refresh_inflight = True
        _log.debug("Refreshing changes for %s", self.project_root)

        def _run() -> GitChangesStatus:
            return self.git_service.read_status(self.project_root)

        self.submit_task("status", _run)

    def submit_task(self, kind: str, fn: Callable[[], Any], context: object | None = None) -> None:
        try:
            future = self._executor.submit(fn)
        except RuntimeError as exc:
            _log.warning("Git task %s failed to start: %s", kind, exc)
            if kind == "status":
                self._refresh_inflight = False
                self._close_preview_once_settled()
            return
        self._pending[future] = (kind, context)
        if not self._result_pump.isActive():
            self._result_pump.start()

    def _drain_tasks(self) -> None:
        if not self._pending:
            self._result_pump.stop()
            return

        done: list[concurrent.futures.Future] = []
        for future, payload in list(self._pending.items()):
            if not future.done():
                continue
            done.append(future)
            kind, context = payload
            try:
                result = future.result()
                error = None
            except Exception as exc:
                result = None
                error = exc
            self._handle_task_result(kind, context, result, error)

        for future in done:
            self._pending.pop(future, None)

        if not self._pending:
            self._result_pump.stop()

    def _handle_task_result(self, kind: str, context: object | None, result: object, error: Exception | None) -> None:
        if kind == "status":
            self._refresh_inflight = False
            if error is None and isinstance(result, GitChangesStatus):
                self._apply_status(result)
            else:
                message = str(error) if isinstance(error, GitServiceError) else "Failed to read changes."
                _log.warning("Change refresh failed: %s", error)
                self.refreshFailed.emit(message)
            if self._refresh_requested:
                self._refresh_requested = False
                self.schedule_refresh(delay_ms=140)
            else:
                self._close_preview_once_settled()
            return

        if kind == "diff":
            if context is not self._preview_item:
                return
            if error is None:
                self._show_preview_text(str(result or ""))
            elif isinstance(error, GitServiceError):
                self._show_preview_text(str(error))
            else:
                self._show_preview_text("Failed to load diff.")

    def _apply_status(self, status: GitChangesStatus) -> None:
        self._repo_root = status.repo_root
        self._current_branch = str(status.current_branch or "")
        edited = self._edited_commit_provider() if self._edited_commit_provider is not None else None
        self.tree.set_changes(status.changes, status.unversioned, edited_commit=edited)
        self.statusChanged.emit(status)

    # ---------- Preview ----------

    def is_editor_preview(self) -> bool:
        return self.preview is not None and self._preview_open

    def open_editor_preview(self) -> None:
        if self.preview is None:
            return
        self._preview_open = True
        self.preview.show()
        self._on_selection_changed()

    def close_editor_preview(self, only_if_empty: bool = False) -> None:
        if self.preview is None:
            return
        if only_if_empty:
            if self._refresh_inflight or self._refresh_requested or self._debounce_timer.isActive():
                # Decided when the pending refresh lands.
                self._close_preview_if_empty = True
                return
            if self.tree.selected_objects():
                return
        self._close_preview_if_empty = False
        self._preview_open = False
        self._preview_item = None
        self.preview.clear()
        self.preview.hide()

    def _close_preview_once_settled(self) -> None:
        if not self._close_preview_if_empty:
            return
        self._close_preview_if_empty = False
        if self.is_editor_preview() and not self.tree.selected_objects():
            _log.debug("Closing diff preview: selection is empty after refresh")
            self.close_editor_preview()

    def _on_selection_changed(self) -> None:
        if not self.is_editor_preview():
            return
        selected = self.tree.selected_objects()
        item = selected[0] if selected else None
        self._preview_item = item
        if item is None or not self._repo_root:
            self._show_preview_text("")
            return
        repo_root = self._repo_root
        self.submit_task("diff", lambda: self.git_service.read_diff(repo_root, item), context=item)

    def _show_preview_text(self, text: str) -> None:
        if self.preview is not None:
            self.preview.setPlainText(text)

    # ---------- Lifecycle ----------

    def shutdown(self) -> None:
        self._poll_timer.stop()
        self._debounce_timer.stop()
        self._result_pump.stop()
        for future in list(self._pending.keys()):
            future.cancel()
        self._pending.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)
