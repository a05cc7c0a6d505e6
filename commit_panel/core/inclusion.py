"""Inclusion state: which displayed items go into the next commit."""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from commit_panel.core.changes import ItemKind, kind_of
from commit_panel.core.interfaces import ChangesTreeView
from commit_panel.core.listeners import ListenerHandle, ListenerList

_log = logging.getLogger("commit_panel.inclusion")


class InclusionModel:
    """Set-backed inclusion store. Listeners fire once per effective mutation."""

    def __init__(self, items: Iterable[Any] = ()) -> None:
        self._included: set[Any] = set(items)
        self._listeners = ListenerList()

    def __contains__(self, item: Any) -> bool:
        return self.is_included(item)

    def __len__(self) -> int:
        return len(self._included)

    def is_included(self, item: Any) -> bool:
        try:
            return item in self._included
        except TypeError:
            return False

    def included(self) -> frozenset[Any]:
        return frozenset(self._included)

    def add_listener(self, listener: Callable[[], None]) -> ListenerHandle:
        return self._listeners.add(listener)

    def remove_listener(self, listener: Callable[[], None]) -> bool:
        return self._listeners.remove(listener)

    def add(self, items: Iterable[Any]) -> bool:
        fresh = {item for item in items if not self.is_included(item)}
        if not fresh:
            return False
        self._included |= fresh
        self._listeners.fire()
        return True

    def remove(self, items: Iterable[Any]) -> bool:
        stale = {item for item in items if self.is_included(item)}
        if not stale:
            return False
        self._included -= stale
        self._listeners.fire()
        return True

    def set_included(self, items: Iterable[Any]) -> bool:
        target = set(items)
        if target == self._included:
            return False
        self._included = target
        self._listeners.fire()
        return True

    def retain(self, universe: Iterable[Any]) -> bool:
        """Drop members that are no longer displayed."""
        keep = self._included & set(universe)
        if keep == self._included:
            return False
        _log.debug("Pruning %d stale included item(s)", len(self._included) - len(keep))
        self._included = keep
        self._listeners.fire()
        return True

    def clear(self) -> bool:
        return self.set_included(())


def _filter_kind(items: Iterable[Any], kind: ItemKind | None) -> tuple[Any, ...]:
    if kind is None:
        return tuple(items)
    return tuple(item for item in items if kind_of(item) is kind)


class InclusionTracker:
    """
    Read/write view of the tree's inclusion state.

    Reads are tree-ordered snapshots. Writes go through the tree so the tree
    and its checkboxes stay the single owner of the projection; the tree's
    inclusion callback is re-raised to this tracker's listeners.
    """

    def __init__(self, tree: ChangesTreeView) -> None:
        self._tree = tree
        self._listeners = ListenerList()
        self._installed = False

    def install(self) -> None:
        if self._installed:
            return
        self._tree.set_inclusion_listener(self._on_tree_inclusion_changed)
        self._installed = True

    def dispose(self) -> None:
        if self._installed:
            self._tree.set_inclusion_listener(None)
            self._installed = False
        self._listeners.clear()

    def _on_tree_inclusion_changed(self) -> None:
        self._listeners.fire()

    def add_inclusion_listener(self, listener: Callable[[], None]) -> ListenerHandle:
        return self._listeners.add(listener)

    def displayed_items(self, kind: ItemKind | None = None) -> tuple[Any, ...]:
        return _filter_kind(self._tree.all_objects(), kind)

    def included_items(self, kind: ItemKind | None = None) -> tuple[Any, ...]:
        model = self._tree.inclusion_model
        if model is None:
            return ()
        # Filtering the displayed universe keeps stale members invisible even
        # before the tree prunes them on its next repopulation.
        return _filter_kind(
            (item for item in self._tree.all_objects() if model.is_included(item)),
            kind,
        )

    def include_items(self, items: Iterable[Any]) -> None:
        if self._tree.inclusion_model is None:
            return
        universe = set(self._tree.all_objects())
        present = [item for item in items if _safe_member(item, universe)]
        if not present:
            return
        self._tree.include_objects(present)

    @property
    def inclusion_model(self) -> InclusionModel | None:
        return self._tree.inclusion_model

    def set_inclusion_model(self, model: InclusionModel | None) -> InclusionModel | None:
        previous = self._tree.inclusion_model
        if model is previous:
            return previous
        self._tree.set_inclusion_model(model)
        return previous


def _safe_member(item: Any, universe: set[Any]) -> bool:
    try:
        return item in universe
    except TypeError:
        return False
