"""Qt-aware controllers used by the commit panel window."""

from .changes_view_controller import ChangesViewController
from .commit_workflow_controller import CommitWorkflowController, commit_paths

__all__ = [
    "ChangesViewController",
    "CommitWorkflowController",
    "commit_paths",
]
