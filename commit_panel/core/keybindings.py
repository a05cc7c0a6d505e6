"""Shortcuts of the commit panel actions, stored under ``keybindings.commit``."""

from __future__ import annotations

from typing import Any, Mapping

from PySide6.QtGui import QKeySequence

KEYBINDING_SCOPE = "commit"

COMMIT_ACTION_SHORTCUTS: dict[str, tuple[str, ...]] = {
    "commit.execute": ("Ctrl+Return", "Ctrl+Enter"),
    "commit.refresh": ("Ctrl+R",),
    "commit.cancel": ("Esc",),
}


def default_keybindings() -> dict[str, dict[str, list[str]]]:
    return {KEYBINDING_SCOPE: {action: list(keys) for action, keys in COMMIT_ACTION_SHORTCUTS.items()}}


def portable_shortcut(text: str) -> str:
    """``"ctrl+shift+r"`` -> ``"Ctrl+Shift+R"``; empty when Qt cannot parse it."""
    return QKeySequence(str(text or "").strip()).toString(QKeySequence.PortableText).strip()


def shortcut_list(value: Any) -> list[str]:
    """Accepts ``"Ctrl+R, F5"`` or ``["Ctrl+R", "F5"]``; one chord per entry."""
    if isinstance(value, str):
        value = value.split(",")
    if not isinstance(value, (list, tuple)):
        return []
    out: list[str] = []
    for entry in value:
        if not isinstance(entry, str):
            continue
        for part in entry.split(","):
            shortcut = portable_shortcut(part)
            if shortcut and shortcut not in out:
                out.append(shortcut)
    return out


def normalize_keybindings(raw: Any) -> dict[str, dict[str, list[str]]]:
    """Defaults overlaid with every commit action the user rebound to something valid."""
    merged = default_keybindings()
    stored = raw.get(KEYBINDING_SCOPE) if isinstance(raw, Mapping) else None
    if not isinstance(stored, Mapping):
        return merged
    for action in COMMIT_ACTION_SHORTCUTS:
        shortcuts = shortcut_list(stored.get(action))
        if shortcuts:
            merged[KEYBINDING_SCOPE][action] = shortcuts
    return merged


def action_shortcuts(keybindings: Any, action: str) -> list[str]:
    return list(normalize_keybindings(keybindings)[KEYBINDING_SCOPE].get(action, ()))
