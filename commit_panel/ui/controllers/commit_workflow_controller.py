"""Controller that validates the selection and submits the commit."""

from __future__ import annotations

import concurrent.futures
import logging
from typing import Any, Callable

from PySide6.QtCore import QObject, QTimer, Signal

from commit_panel.core.changes import Change, UnversionedFile
from commit_panel.core.coordinator import CommitReviewCoordinator
from commit_panel.git.git_service import GitService, GitServiceError
from commit_panel.ui.widgets.commit_panel_widget import CommitActionsPanel

_log = logging.getLogger("commit_panel.ui.commit_workflow")


def commit_paths(changes: list[Change], unversioned: list[UnversionedFile]) -> list[str]:
    """Paths handed to ``git add``; renames stage both sides."""
    paths: list[str] = []
    for change in changes:
        if change.original_rel_path:
            paths.append(change.original_rel_path)
        paths.append(change.rel_path)
    for item in unversioned:
        paths.append(item.rel_path)
    return list(dict.fromkeys(paths))


class CommitWorkflowController(QObject):
    committed = Signal(str)
    commitFailed = Signal(str)

    def __init__(
        self,
        *,
        coordinator: CommitReviewCoordinator,
        git_service: GitService,
        repo_root_provider: Callable[[], str | None],
        actions_panel: CommitActionsPanel,
        message_changed_signal=None,
        parent=None,
    ):
        super().__init__(parent)
        self.coordinator = coordinator
        self.git_service = git_service
        self._repo_root_provider = repo_root_provider
        self.actions_panel = actions_panel
        self._amend = False

        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="commit-panel-commit"
        )
        self._pending: dict[concurrent.futures.Future, str] = {}
        self._result_pump = QTimer(self)
        self._result_pump.setInterval(40)
        self._result_pump.timeout.connect(self._drain_pending)

        self._inclusion_handle = coordinator.add_inclusion_listener(self.refresh_commit_enabled)
        actions_panel.commitRequested.connect(self.commit)
        actions_panel.cancelRequested.connect(self.cancel)
        actions_panel.amendToggled.connect(self.set_amend)
        actions_panel.set_is_default_predicate(coordinator.is_commit_button_default)
        if message_changed_signal is not None:
            message_changed_signal.connect(self.refresh_commit_enabled)
        self.refresh_commit_enabled()

    @property
    def is_busy(self) -> bool:
        return bool(self._pending)

    @property
    def is_amend(self) -> bool:
        return self._amend

    # ---------- Entry points ----------

    def start(self) -> bool:
        """Bring the commit panel up; ``False`` when there is no host window."""
        if not self.coordinator.activate():
            self.coordinator.commit_progress_ui.set_error("Commit tool window is not available.")
            return False
        self.coordinator.refresh_data()
        self.refresh_commit_enabled()
        return True

    def cancel(self) -> None:
        if self._pending:
            return
        self.coordinator.deactivate(restore_host=True)

    def set_amend(self, amend: bool) -> None:
        self._amend = bool(amend)
        if not self._amend:
            self.coordinator.set_edited_commit(None)
            self.refresh_commit_enabled()
            return
        repo_root = self._repo_root_provider()
        if not repo_root:
            self.coordinator.commit_progress_ui.set_error("Git repository is not available.")
            return

        def _run() -> dict[str, Any]:
            return {
                "details": self.git_service.read_head_commit(repo_root),
                "message": self.git_service.read_head_message(repo_root),
            }

        self._submit_task("amend", _run)

    def commit(self) -> None:
        if self._pending:
            return
        progress = self.coordinator.commit_progress_ui
        message = str(self.coordinator.message or "").strip()
        if not message:
            progress.set_error("Commit message is required.")
            return

        changes = self.coordinator.included_changes()
        unversioned = self.coordinator.included_unversioned_files()
        paths = commit_paths(changes, unversioned)
        if not paths and not self._amend:
            progress.set_error("Select at least one file.")
            return

        repo_root = self._repo_root_provider()
        if not repo_root:
            progress.set_error("Git repository is not available.")
            return

        amend = self._amend
        author = self.coordinator.commit_author
        progress.set_busy(True, "Amending commit..." if amend else "Committing changes...")
        self.refresh_commit_enabled()

        def _run() -> str:
            return self.git_service.commit_files(repo_root, paths, message, amend=amend, author=author)

        self._submit_task("commit", _run)

    # ---------- Task pump ----------

    def _submit_task(self, kind: str, fn: Callable[[], Any]) -> None:
        try:
            future = self._executor.submit(fn)
        except RuntimeError:
            self.coordinator.commit_progress_ui.set_error("Failed to start git operation.")
            return
        self._pending[future] = kind
        if not self._result_pump.isActive():
            self._result_pump.start()
        self.refresh_commit_enabled()

    def _drain_pending(self) -> None:
        if not self._pending:
            self._result_pump.stop()
            return

        done: list[concurrent.futures.Future] = []
        for future, kind in list(self._pending.items()):
            if not future.done():
                continue
            done.append(future)
            try:
                result = future.result()
                error = None
            except Exception as exc:
                result = None
                error = exc
            self._pending.pop(future, None)
            self._handle_result(kind, result, error)

        for future in done:
            self._pending.pop(future, None)

        if not self._pending:
            self._result_pump.stop()
            self.refresh_commit_enabled()

    def _handle_result(self, kind: str, result: Any, error: Exception | None) -> None:
        progress = self.coordinator.commit_progress_ui
        if kind == "amend":
            if error is not None:
                progress.set_error(str(error) if isinstance(error, GitServiceError) else "Failed to read last commit.")
                return
            payload = result if isinstance(result, dict) else {}
            details = payload.get("details")
            if details is None:
                progress.set_error("There is no commit to amend.")
                return
            if not self._amend:
                return
            if not str(self.coordinator.message or "").strip():
                self.coordinator.set_message(str(payload.get("message") or ""))
            self.coordinator.set_edited_commit(details)
            progress.set_info(f"Amending {details.short_hash}.")
            return

        if kind == "commit":
            self.coordinator.end_execution()
            if error is not None:
                text = str(error) if isinstance(error, GitServiceError) else "Commit failed."
                _log.warning("Commit failed: %s", error)
                progress.set_error(text)
                self.commitFailed.emit(text)
                return

            output = str(result or "").strip()
            first_line = output.splitlines()[0] if output else "Commit completed."
            progress.set_info(first_line)
            self.coordinator.set_message("")
            if self._amend:
                self.actions_panel.amend_chk.setChecked(False)
            self.coordinator.deactivate(restore_host=True)
            self.coordinator.refresh_data()
            self.committed.emit(output)

    def refresh_commit_enabled(self) -> None:
        if self._pending:
            self.actions_panel.set_commit_enabled(False)
            return
        has_message = bool(str(self.coordinator.message or "").strip())
        has_files = bool(self.coordinator.included_items())
        self.actions_panel.set_commit_enabled(has_message and (has_files or self._amend))
        self.actions_panel.refresh_default()

    def shutdown(self) -> None:
        self._result_pump.stop()
        self._inclusion_handle.dispose()
        for future in list(self._pending.keys()):
            future.cancel()
        self._pending.clear()
        self._executor.shutdown(wait=False, cancel_futures=True)
