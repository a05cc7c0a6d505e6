from .git_runner import GitCommandRunner, GitRunError, GitRunResult
from .git_service import GitChangesStatus, GitService, GitServiceError

__all__ = [
    "GitCommandRunner",
    "GitRunError",
    "GitRunResult",
    "GitChangesStatus",
    "GitService",
    "GitServiceError",
]
