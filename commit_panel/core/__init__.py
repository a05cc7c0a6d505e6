from .activation import (
    COMMIT_TOOL_WINDOW_ID,
    LOCAL_CHANGES_CONTENT_ID,
    ActivationState,
    ToolWindowActivationStateMachine,
)
from .changes import (
    Change,
    ChangeList,
    EditedCommitDetails,
    ItemKind,
    UnversionedFile,
    VcsUser,
    kind_of,
)
from .coordinator import (
    CommitAuthorListener,
    CommitPanelEnvironment,
    CommitPanelParts,
    CommitReviewCoordinator,
    InclusionListener,
)
from .inclusion import InclusionModel, InclusionTracker
from .listeners import ListenerHandle, ListenerList
from .toolbar_layout import (
    TOOLBAR_HORIZONTAL_KEY,
    AnchorKind,
    AnchorSpec,
    ToolbarLayoutManager,
    ToolbarOrientation,
    resolve_popup_anchor,
)
from .tree_navigation import TreeNavigationAdapter

__all__ = [
    "COMMIT_TOOL_WINDOW_ID",
    "LOCAL_CHANGES_CONTENT_ID",
    "ActivationState",
    "ToolWindowActivationStateMachine",
    "Change",
    "ChangeList",
    "EditedCommitDetails",
    "ItemKind",
    "UnversionedFile",
    "VcsUser",
    "kind_of",
    "CommitAuthorListener",
    "CommitPanelEnvironment",
    "CommitPanelParts",
    "CommitReviewCoordinator",
    "InclusionListener",
    "InclusionModel",
    "InclusionTracker",
    "ListenerHandle",
    "ListenerList",
    "TOOLBAR_HORIZONTAL_KEY",
    "AnchorKind",
    "AnchorSpec",
    "ToolbarLayoutManager",
    "ToolbarOrientation",
    "resolve_popup_anchor",
    "TreeNavigationAdapter",
]
