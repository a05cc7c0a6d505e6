from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from commit_panel.core.changes import Change, EditedCommitDetails, UnversionedFile, VcsUser
from commit_panel.git.git_runner import GitCommandRunner, GitRunError

_log = logging.getLogger("commit_panel.git")

_PREVIEW_LIMIT_BYTES = 256 * 1024
_NOTHING_TO_COMMIT_MARKERS = ("nothing to commit", "nothing added to commit", "no changes added to commit")


@dataclass(slots=True)
class GitChangesStatus:
    project_root: str
    repo_root: str | None
    current_branch: str | None
    changes: list[Change] = field(default_factory=list)
    unversioned: list[UnversionedFile] = field(default_factory=list)

    @property
    def is_repo(self) -> bool:
        return self.repo_root is not None


class GitServiceError(RuntimeError):
    def __init__(self, message: str, *, kind: str = "git_error") -> None:
        super().__init__(message)
        self.kind = kind


class GitService:
    def __init__(
        self,
        *,
        canonicalize: Callable[[str], str] | None = None,
        command_timeout_seconds: int = 120,
        exclude_untracked_predicate: Callable[[str], bool] | None = None,
    ) -> None:
        self._canonicalize = canonicalize
        self._exclude_untracked_predicate = exclude_untracked_predicate
        self._runner = GitCommandRunner(timeout_seconds=max(20, int(command_timeout_seconds)))

    # ---------- Detection / Status ----------

    def find_repo_root(self, path: str) -> str | None:
        base = self._canonical(path)
        if not os.path.isdir(base):
            return None
        try:
            out = self._run_git(base, ["rev-parse", "--show-toplevel"], check=True)
        except GitServiceError:
            return None
        text = str(out).strip()
        if not text:
            return None
        return self._canonical(text)

    def read_status(self, project_root: str, *, include_untracked: bool = True) -> GitChangesStatus:
        project = self._canonical(project_root)
        repo_root = self.find_repo_root(project)
        if not repo_root:
            return GitChangesStatus(project_root=project, repo_root=None, current_branch=None)

        args = ["status", "--porcelain=1", "-z", "-uall" if include_untracked else "-uno"]
        out = self._run_git(repo_root, args, check=True)
        changes, unversioned = self._parse_porcelain_status(out)
        if self._exclude_untracked_predicate is not None:
            unversioned = [
                item
                for item in unversioned
                if not self._excluded(os.path.join(repo_root, item.rel_path))
            ]
        return GitChangesStatus(
            project_root=project,
            repo_root=repo_root,
            current_branch=self._read_current_branch(repo_root),
            changes=sorted(changes, key=lambda item: item.rel_path.lower()),
            unversioned=sorted(unversioned, key=lambda item: item.rel_path.lower()),
        )

    def _excluded(self, abs_path: str) -> bool:
        try:
            return bool(self._exclude_untracked_predicate(abs_path))
        except Exception:
            _log.warning("Untracked-file filter failed for %s", abs_path, exc_info=True)
            return False

    @staticmethod
    def _parse_porcelain_status(out: str) -> tuple[list[Change], list[UnversionedFile]]:
        tokens = str(out).split("\x00")
        changes: list[Change] = []
        unversioned: list[UnversionedFile] = []
        idx = 0

        while idx < len(tokens):
            entry = tokens[idx]
            idx += 1
            if len(entry) < 4:
                continue

            code = entry[:2]
            rel_path = entry[3:]
            original: str | None = None

            # With -z the rename source follows the destination.
            if code[0] in {"R", "C"} and idx < len(tokens):
                original = tokens[idx] or None
                idx += 1

            if not rel_path.strip() or code == "!!":
                continue
            if code == "??":
                unversioned.append(UnversionedFile(rel_path))
                continue
            changes.append(Change(rel_path=rel_path, code=code, original_rel_path=original))
        return changes, unversioned

    def _read_current_branch(self, repo_root: str) -> str:
        try:
            out = self._run_git(repo_root, ["branch", "--show-current"], check=True)
        except GitServiceError:
            return ""
        return str(out).strip()

    # ---------- Commit metadata ----------

    def read_head_commit(self, repo_root: str) -> EditedCommitDetails | None:
        root = self._require_repo(repo_root)
        try:
            out = self._run_git(root, ["log", "-1", "--format=%H%x00%s%x00%an%x00%ae"], check=True)
        except GitServiceError:
            # Repositories without an initial commit do not have HEAD yet.
            return None
        parts = str(out).strip("\n").split("\x00")
        if len(parts) < 4 or not parts[0].strip():
            return None
        commit_hash, subject, name, email = (part.strip() for part in parts[:4])
        try:
            files_out = self._run_git(
                root,
                ["diff-tree", "--no-commit-id", "--name-only", "-r", "-z", "--root", commit_hash],
                check=True,
            )
        except GitServiceError:
            files_out = ""
        rel_paths = tuple(item for item in str(files_out).split("\x00") if item.strip())
        author = VcsUser(name=name, email=email) if name and email else None
        return EditedCommitDetails(commit_hash=commit_hash, subject=subject, author=author, rel_paths=rel_paths)

    def read_head_message(self, repo_root: str) -> str:
        root = self._require_repo(repo_root)
        try:
            out = self._run_git(root, ["log", "-1", "--format=%B"], check=True)
        except GitServiceError:
            return ""
        return str(out).strip()

    def read_configured_user(self, repo_root: str) -> VcsUser | None:
        root = self._require_repo(repo_root)
        values: list[str] = []
        for key in ("user.name", "user.email"):
            try:
                values.append(str(self._run_git(root, ["config", "--get", key], check=True)).strip())
            except GitServiceError:
                return None
        name, email = values
        if not name or not email:
            return None
        return VcsUser(name=name, email=email)

    # ---------- Preview ----------

    def read_diff(self, repo_root: str, item: Change | UnversionedFile) -> str:
        root = self._require_repo(repo_root)
        if isinstance(item, UnversionedFile):
            return self._read_untracked_preview(root, item.rel_path)
        try:
            return self._run_git(root, ["diff", "HEAD", "--", item.rel_path], check=True)
        except GitServiceError:
            # No HEAD yet: show what the index knows.
            return self._run_git(root, ["diff", "--cached", "--", item.rel_path], check=False)

    @staticmethod
    def _read_untracked_preview(repo_root: str, rel_path: str) -> str:
        path = Path(repo_root) / rel_path
        try:
            with path.open("rb") as handle:
                raw = handle.read(_PREVIEW_LIMIT_BYTES)
        except OSError as exc:
            raise GitServiceError(f"Could not read {rel_path}: {exc}", kind="io_error") from exc
        if b"\x00" in raw:
            return f"Binary file {rel_path}"
        text = raw.decode("utf-8", errors="replace")
        lines = [f"+{line}" for line in text.splitlines()]
        return "\n".join(["--- /dev/null", f"+++ b/{rel_path}", *lines])

    # ---------- Commit ----------

    def commit_files(
        self,
        repo_root: str,
        rel_paths: Iterable[str],
        message: str,
        *,
        amend: bool = False,
        author: VcsUser | None = None,
    ) -> str:
        root = self._require_repo(repo_root)
        commit_message = str(message or "").strip()
        if not commit_message:
            raise GitServiceError("Commit message is required.", kind="validation")
        files = _dedupe_paths(rel_paths)
        if not files and not amend:
            raise GitServiceError("Select at least one file to commit.", kind="validation")

        # Deterministic transaction: clear index first to avoid stale staged leftovers.
        try:
            self._run_git(root, ["reset", "-q"], check=True)
        except GitServiceError as exc:
            detail = str(exc).lower()
            if "ambiguous argument 'head'" not in detail and "bad revision 'head'" not in detail:
                raise
            self._run_git(root, ["rm", "-r", "-q", "--cached", "--ignore-unmatch", "--", "."], check=True)

        if files:
            self._run_git(root, ["add", "-A", "--", *files], check=True)

        args = ["commit", "-m", commit_message]
        if amend:
            args.append("--amend")
        if author is not None:
            args.append(f"--author={author}")
        try:
            out = self._run_git(root, args, check=True)
        except GitServiceError as exc:
            text = str(exc).lower()
            if any(marker in text for marker in _NOTHING_TO_COMMIT_MARKERS):
                raise GitServiceError("Nothing to commit.", kind="nothing_to_commit") from None
            if "please tell me who you are" in text or "unable to auto-detect email address" in text:
                raise GitServiceError("Git user.name/user.email is not configured.", kind="identity_missing") from None
            raise
        _log.debug("Committed %d path(s) in %s (amend: %s)", len(files), root, amend)
        return str(out).strip()

    # ---------- Internals ----------

    def _require_repo(self, repo_root: str) -> str:
        root = self._canonical(repo_root)
        if not root or not os.path.isdir(root):
            raise GitServiceError("Git repository is not available.", kind="not_repo")
        return root

    def _run_git(self, cwd: str, args: list[str], *, check: bool) -> str:
        try:
            proc = self._runner.run(cwd, args)
        except GitRunError as exc:
            raise GitServiceError(str(exc), kind=str(exc.kind or "git_error")) from exc

        if check and not proc.ok:
            detail = proc.error_detail()
            raise GitServiceError(detail, kind=self._infer_error_kind(detail))
        # Preserve exact stdout content for parsers that depend on leading
        # whitespace and NUL separators (for example: `git status -z`).
        return str(proc.stdout or "")

    @staticmethod
    def _infer_error_kind(detail: str) -> str:
        text = str(detail or "").lower()
        if "not a git repository" in text:
            return "not_repo"
        if "timed out" in text:
            return "timeout"
        return "git_error"

    def _canonical(self, path: str) -> str:
        if self._canonicalize is not None:
            try:
                return self._canonicalize(path)
            except Exception:
                _log.debug("Custom canonicalize failed for %r", path, exc_info=True)
        try:
            return str(Path(path).expanduser().resolve())
        except (OSError, RuntimeError):
            return os.path.abspath(os.path.expanduser(path))


def _dedupe_paths(rel_paths: Iterable[str]) -> list[str]:
    files: list[str] = []
    seen: set[str] = set()
    for item in rel_paths:
        text = str(item or "").strip()
        if not text or text in seen:
            continue
        seen.add(text)
        files.append(text)
    return files
