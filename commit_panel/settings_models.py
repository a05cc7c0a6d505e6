from __future__ import annotations

from copy import deepcopy
from typing import Any, TypedDict

from commit_panel.core.keybindings import default_keybindings


class CommitSettings(TypedDict, total=False):
    toolbar_horizontal: bool
    show_diff_preview: bool
    include_new_changes: bool
    poll_interval_ms: int


class GitSettings(TypedDict, total=False):
    command_timeout_seconds: int
    hide_pycache: bool


class PanelSettings(TypedDict, total=False):
    commit: CommitSettings
    git: GitSettings
    keybindings: dict[str, dict[str, list[str]]]


_DEFAULT_SETTINGS: PanelSettings = {
    "commit": {
        "toolbar_horizontal": False,
        "show_diff_preview": True,
        "include_new_changes": True,
        "poll_interval_ms": 3500,
    },
    "git": {
        "command_timeout_seconds": 120,
        "hide_pycache": True,
    },
    "keybindings": {},
}


def default_settings() -> dict[str, Any]:
    defaults = deepcopy(dict(_DEFAULT_SETTINGS))
    defaults["keybindings"] = default_keybindings()
    return defaults
