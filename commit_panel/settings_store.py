"""JSON file holding the panel settings, addressed with dotted keys."""

from __future__ import annotations

import json
import logging
import os
from copy import deepcopy
from pathlib import Path
from typing import Any, Mapping

_log = logging.getLogger("commit_panel.settings")

_MISSING = object()


class SettingsStoreError(RuntimeError):
    """Raised when a settings file cannot be saved."""


def with_defaults(values: Mapping[str, Any], defaults: Mapping[str, Any]) -> dict[str, Any]:
    """Copy of ``values`` where every key missing at any depth comes from ``defaults``."""
    out = {key: deepcopy(value) for key, value in defaults.items() if key not in values}
    for key, value in values.items():
        fallback = defaults.get(key)
        if isinstance(value, dict) and isinstance(fallback, dict):
            out[key] = with_defaults(value, fallback)
        else:
            out[key] = deepcopy(value)
    return out


def lookup(data: Mapping[str, Any], key: str, default: Any = None) -> Any:
    node: Any = data
    for part in key.split(".") if key else ():
        if not isinstance(node, Mapping):
            return default
        node = node.get(part, _MISSING)
        if node is _MISSING:
            return default
    return node


def assign(data: dict[str, Any], key: str, value: Any) -> None:
    if not key:
        raise ValueError("Key cannot be empty.")
    *parents, leaf = key.split(".")
    node = data
    for part in parents:
        child = node.get(part)
        if not isinstance(child, dict):
            child = node[part] = {}
        node = child
    node[leaf] = value


class JsonSettingsStore:
    """
    Settings kept in memory as nested dicts and mirrored to one JSON file.

    A store without a path never touches disk. A file that exists but cannot
    be parsed is reported through ``last_error`` and left as it is; the
    in-memory values fall back to the defaults.
    """

    def __init__(self, path: Path | None, defaults: Mapping[str, Any]) -> None:
        self.path = Path(path) if path is not None else None
        self._defaults: dict[str, Any] = deepcopy(dict(defaults))
        self.data: dict[str, Any] = with_defaults({}, self._defaults)
        self.dirty = False
        self.last_error: str | None = None

    @property
    def persistent(self) -> bool:
        return self.path is not None

    def load(self) -> dict[str, Any]:
        self.last_error = None
        stored, exists = self._read()
        self.data = with_defaults(stored, self._defaults)
        # First run: write the defaults out on the next save.
        self.dirty = self.path is not None and not exists
        return self.data

    def _read(self) -> tuple[dict[str, Any], bool]:
        if self.path is None or not self.path.exists():
            return {}, False
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            self._record_error(f"Could not read settings file '{self.path}': {exc}")
            return {}, True
        if not isinstance(raw, dict):
            self._record_error(
                f"Settings root in '{self.path}' must be a JSON object, found {type(raw).__name__}."
            )
            return {}, True
        return raw, True

    def _record_error(self, message: str) -> None:
        self.last_error = message
        _log.warning("%s", message)

    def save(self) -> None:
        if self.path is None:
            self.dirty = False
            return
        staging = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            staging.write_text(json.dumps(self.data, indent=2, sort_keys=True), encoding="utf-8")
            os.replace(staging, self.path)
        except OSError as exc:
            raise SettingsStoreError(f"Could not write settings file '{self.path}': {exc}") from exc
        _log.debug("Settings saved to %s", self.path)
        self.dirty = False
        self.last_error = None

    def get(self, key: str, default: Any = None) -> Any:
        return lookup(self.data, key, default)

    def set(self, key: str, value: Any) -> bool:
        if self.get(key, _MISSING) == value:
            return False
        assign(self.data, key, value)
        self.dirty = True
        return True

    def has(self, key: str) -> bool:
        return self.get(key, _MISSING) is not _MISSING
