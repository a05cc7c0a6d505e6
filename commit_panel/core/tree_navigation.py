"""Expand/select helpers over the changes tree."""

from __future__ import annotations

from typing import Any, Collection

from commit_panel.core.interfaces import ChangesTreeView


class TreeNavigationAdapter:
    """Items missing from the tree are ignored; the tree may not have caught up yet."""

    def __init__(self, tree: ChangesTreeView) -> None:
        self._tree = tree

    def expand(self, item: Any) -> None:
        node = self._tree.find_node_for_object(item)
        if node is not None:
            self._tree.expand_node(node)

    def select(self, item: Any) -> None:
        path = self._tree.find_path_for_object(item)
        if path is not None:
            self._tree.select_path(path, scroll=False)

    def select_first(self, candidates: Collection[Any]) -> None:
        if not candidates:
            return
        for path in self._tree.iter_paths_preorder():
            obj = self._tree.last_user_object(path)
            if obj is None:
                continue
            try:
                hit = obj in candidates
            except TypeError:
                hit = False
            if hit:
                self._tree.select_path(path, scroll=False)
                return
