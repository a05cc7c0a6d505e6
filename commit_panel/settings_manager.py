from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from commit_panel.core.keybindings import action_shortcuts, normalize_keybindings
from commit_panel.core.toolbar_layout import TOOLBAR_HORIZONTAL_KEY
from commit_panel.settings_models import default_settings
from commit_panel.settings_store import JsonSettingsStore


class SettingsManager:
    SETTINGS_FILENAME = "settings.json"

    def __init__(self, settings_path: str | Path | None = None, *, persistent: bool = True) -> None:
        path: Path | None = None
        if persistent:
            path = Path(settings_path) if settings_path else self.default_settings_path()
        self.store = JsonSettingsStore(path, default_settings())

    @classmethod
    def default_settings_path(cls) -> Path:
        base = os.environ.get("XDG_CONFIG_HOME") or os.path.join(os.path.expanduser("~"), ".config")
        return Path(base) / "commit-panel" / cls.SETTINGS_FILENAME

    @property
    def path(self) -> Path | None:
        return self.store.path

    @property
    def load_error(self) -> str | None:
        return self.store.last_error

    def load(self) -> None:
        self.store.load()
        self._normalize()
        # Never overwrite a malformed file with regenerated defaults.
        if self.store.dirty and not self.store.last_error:
            self.store.save()

    def save(self) -> None:
        if self.store.last_error:
            return
        self.store.save()

    def get(self, key: str, *, default: Any = None) -> Any:
        return self.store.get(key, default)

    def set(self, key: str, value: Any) -> bool:
        return self.store.set(key, value)

    @property
    def toolbar_horizontal(self) -> bool:
        return bool(self.store.get(TOOLBAR_HORIZONTAL_KEY, False))

    def set_toolbar_horizontal(self, horizontal: bool) -> None:
        if self.store.set(TOOLBAR_HORIZONTAL_KEY, bool(horizontal)):
            self.save()

    @property
    def show_diff_preview(self) -> bool:
        return bool(self.store.get("commit.show_diff_preview", True))

    @property
    def include_new_changes(self) -> bool:
        return bool(self.store.get("commit.include_new_changes", True))

    @property
    def poll_interval_ms(self) -> int:
        try:
            return max(0, int(self.store.get("commit.poll_interval_ms", 3500)))
        except (TypeError, ValueError):
            return 3500

    @property
    def git_timeout_seconds(self) -> int:
        try:
            return max(20, int(self.store.get("git.command_timeout_seconds", 120)))
        except (TypeError, ValueError):
            return 120

    def action_sequences(self, action_id: str) -> list[str]:
        return action_shortcuts(self.store.get("keybindings", {}), action_id)

    def _normalize(self) -> None:
        keybindings = normalize_keybindings(self.store.get("keybindings", {}))
        self.store.set("keybindings", keybindings)
        raw = self.store.get(TOOLBAR_HORIZONTAL_KEY, False)
        if not isinstance(raw, bool):
            self.store.set(TOOLBAR_HORIZONTAL_KEY, str(raw).strip().lower() in {"1", "true", "yes", "on"})
