"""Subprocess wrapper around the ``git`` executable."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass

_log = logging.getLogger("commit_panel.git.runner")

# Status polling runs in the background; it must not take the index lock
# away from a commit started in another tool.
_GIT_ENV = {
    "GIT_TERMINAL_PROMPT": "0",
    "GIT_OPTIONAL_LOCKS": "0",
    "LC_ALL": "C",
}


@dataclass(slots=True)
class GitRunResult:
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def error_detail(self) -> str:
        """The ``fatal:``/``error:`` line if git printed one, else its last line."""
        lines = [line.strip() for line in f"{self.stderr}\n{self.stdout}".splitlines() if line.strip()]
        if not lines:
            return "Git command failed."
        for line in lines:
            low = line.lower()
            if low.startswith(("fatal:", "error:")):
                return line
        return lines[-1]


class GitRunError(RuntimeError):
    """git could not be run at all (missing binary or timeout)."""

    def __init__(self, message: str, *, kind: str) -> None:
        super().__init__(message)
        self.kind = kind


class GitCommandRunner:
    def __init__(self, *, timeout_seconds: int = 120, git_bin: str | None = None) -> None:
        self.timeout_seconds = max(10, int(timeout_seconds))
        self._git_bin = git_bin

    @property
    def git_bin(self) -> str | None:
        if self._git_bin is None:
            self._git_bin = shutil.which("git")
        return self._git_bin

    def run(self, cwd: str, args: list[str]) -> GitRunResult:
        git_bin = self.git_bin
        if not git_bin:
            raise GitRunError("Git is not installed or not in PATH.", kind="git_not_installed")
        env = {**os.environ, **_GIT_ENV}
        _log.debug("git %s (in %s)", " ".join(args), cwd)
        try:
            proc = subprocess.run(
                [git_bin, *args],
                cwd=str(cwd),
                env=env,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=False,
                timeout=self.timeout_seconds,
            )
        except subprocess.TimeoutExpired as exc:
            raise GitRunError(f"git {args[0]} timed out after {self.timeout_seconds}s.", kind="timeout") from exc
        except OSError as exc:
            raise GitRunError(f"Could not start git: {exc}", kind="git_not_installed") from exc
        return GitRunResult(proc.returncode, proc.stdout or "", proc.stderr or "")
