from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Iterable, Iterator

from PySide6.QtCore import Qt
from PySide6.QtGui import QBrush, QColor
from PySide6.QtWidgets import QAbstractItemView, QApplication, QStyle, QTreeWidget, QTreeWidgetItem

from commit_panel.core.changes import Change, EditedCommitDetails, UnversionedFile
from commit_panel.core.inclusion import InclusionModel
from commit_panel.core.listeners import ListenerHandle

TreePath = tuple[QTreeWidgetItem, ...]

_GROUP_ROLE = Qt.UserRole + 1


class ChangesGroup(Enum):
    EDITED_COMMIT = "edited_commit"
    CHANGES = "changes"
    UNVERSIONED = "unversioned"


_GROUP_TITLES = {
    ChangesGroup.CHANGES: "Changes",
    ChangesGroup.UNVERSIONED: "Unversioned Files",
}


class ChangesTree(QTreeWidget):
    """
    Tree of pending changes with per-item inclusion checkboxes.

    Layout:
      - optional "Amend ..." node for the commit being edited
      - "Changes" group with tracked modifications, grouped by folder
      - "Unversioned Files" group with untracked files, grouped by folder

    Leaf nodes carry their ``Change``/``UnversionedFile`` in ``Qt.UserRole``.
    The installed ``InclusionModel`` is the source of truth for check states;
    folder and group check states are aggregated from their leaves.
    """

    def __init__(self, parent=None, *, include_new_changes: bool = True):
        super().__init__(parent)
        self.setColumnCount(1)
        self.setHeaderHidden(True)
        self.setSelectionMode(QAbstractItemView.ExtendedSelection)
        self.setUniformRowHeights(True)

        self._include_new_changes = bool(include_new_changes)
        self._show_checkboxes = False
        self._is_syncing_tree_checks = False
        self._known_objects: set[Any] = set()
        self._populated_once = False
        self._inclusion_listener: Callable[[], None] | None = None
        self._inclusion_model: InclusionModel | None = None
        self._model_handle: ListenerHandle | None = None

        self.itemChanged.connect(self._on_item_changed)
        self.set_inclusion_model(InclusionModel())

    # ---------- Population ----------

    def set_changes(
        self,
        changes: Iterable[Change],
        unversioned: Iterable[UnversionedFile],
        *,
        edited_commit: EditedCommitDetails | None = None,
    ) -> None:
        changes = list(changes)
        unversioned = list(unversioned)
        selected = set(self.selected_objects())

        self._is_syncing_tree_checks = True
        self.blockSignals(True)
        try:
            self.clear()
            if edited_commit is not None:
                self._add_edited_commit_node(edited_commit)
            if changes:
                self._add_group(ChangesGroup.CHANGES, [(item.rel_path, item) for item in changes])
            if unversioned:
                self._add_group(ChangesGroup.UNVERSIONED, [(item.rel_path, item) for item in unversioned])
            self.expandAll()
            for item in self._iter_items():
                obj = item.data(0, Qt.UserRole)
                if obj is not None and obj in selected:
                    item.setSelected(True)
        finally:
            self.blockSignals(False)
            self._is_syncing_tree_checks = False

        universe = [*changes, *unversioned]
        fresh = [item for item in changes if item not in self._known_objects]
        self._known_objects = set(universe)
        model = self._inclusion_model
        if model is not None:
            target = set(model.included()) & self._known_objects
            if self._include_new_changes or not self._populated_once:
                target.update(fresh)
            if not model.set_included(target):
                self._sync_check_states()
        self._populated_once = True
        self._apply_checkbox_flags()

    def _add_edited_commit_node(self, commit: EditedCommitDetails) -> None:
        node = QTreeWidgetItem([f"Amend {commit.short_hash}: {commit.subject}"])
        node.setData(0, Qt.UserRole, commit)
        node.setData(0, _GROUP_ROLE, ChangesGroup.EDITED_COMMIT.value)
        node.setFlags(node.flags() & ~Qt.ItemIsUserCheckable)
        for rel_path in commit.rel_paths:
            child = QTreeWidgetItem([rel_path])
            child.setData(0, _GROUP_ROLE, ChangesGroup.EDITED_COMMIT.value)
            child.setFlags(child.flags() & ~Qt.ItemIsUserCheckable)
            node.addChild(child)
        self.addTopLevelItem(node)
        self.collapseItem(node)

    def _add_group(self, group: ChangesGroup, entries: list[tuple[str, Any]]) -> None:
        style = QApplication.style()
        folder_icon = style.standardIcon(QStyle.StandardPixmap.SP_DirIcon) if style is not None else None
        file_icon = style.standardIcon(QStyle.StandardPixmap.SP_FileIcon) if style is not None else None

        root = QTreeWidgetItem([f"{_GROUP_TITLES[group]} ({len(entries)})"])
        root.setData(0, _GROUP_ROLE, group.value)
        self.addTopLevelItem(root)

        dir_nodes: dict[str, QTreeWidgetItem] = {}
        for rel_path, obj in entries:
            parts = [part for part in rel_path.split("/") if part]
            if not parts:
                continue
            parent = root
            current = ""
            for part in parts[:-1]:
                current = part if not current else f"{current}/{part}"
                node = dir_nodes.get(current)
                if node is None:
                    node = QTreeWidgetItem([part])
                    node.setData(0, _GROUP_ROLE, group.value)
                    if folder_icon is not None:
                        node.setIcon(0, folder_icon)
                    parent.addChild(node)
                    dir_nodes[current] = node
                parent = node

            leaf = QTreeWidgetItem([parts[-1]])
            leaf.setData(0, Qt.UserRole, obj)
            leaf.setData(0, _GROUP_ROLE, group.value)
            if isinstance(obj, Change):
                leaf.setToolTip(0, f"{obj.display_name}\n[{obj.code.strip() or 'M'}]")
            else:
                leaf.setToolTip(0, f"{rel_path}\n[untracked]")
                leaf.setForeground(0, QBrush(QColor("#8a8f98")))
            if file_icon is not None:
                leaf.setIcon(0, file_icon)
            parent.addChild(leaf)

    # ---------- Lookup / traversal ----------

    def _iter_items(self) -> Iterator[QTreeWidgetItem]:
        for path in self.iter_paths_preorder():
            yield path[-1]

    def iter_paths_preorder(self) -> Iterator[TreePath]:
        root = self.invisibleRootItem()
        stack: list[TreePath] = [(root.child(idx),) for idx in reversed(range(root.childCount()))]
        while stack:
            path = stack.pop()
            yield path
            node = path[-1]
            for idx in reversed(range(node.childCount())):
                stack.append((*path, node.child(idx)))

    @staticmethod
    def last_user_object(path: TreePath) -> Any | None:
        if not path:
            return None
        return path[-1].data(0, Qt.UserRole)

    def find_path_for_object(self, obj: Any) -> TreePath | None:
        if obj is None:
            return None
        for path in self.iter_paths_preorder():
            if self.last_user_object(path) == obj:
                return path
        return None

    def find_node_for_object(self, obj: Any) -> QTreeWidgetItem | None:
        path = self.find_path_for_object(obj)
        return path[-1] if path else None

    def expand_node(self, node: QTreeWidgetItem) -> None:
        parent = node.parent()
        while parent is not None:
            parent.setExpanded(True)
            parent = parent.parent()
        self.expandRecursively(self.indexFromItem(node))

    def select_path(self, path: TreePath, *, scroll: bool = False) -> None:
        if not path:
            return
        for ancestor in path[:-1]:
            ancestor.setExpanded(True)
        node = path[-1]
        # setCurrentItem would autoscroll; plain selection keeps the viewport.
        self.clearSelection()
        node.setSelected(True)
        if scroll:
            self.scrollToItem(node)

    def selected_objects(self) -> list[Any]:
        out: list[Any] = []
        for item in self.selectedItems():
            obj = item.data(0, Qt.UserRole)
            if isinstance(obj, (Change, UnversionedFile)):
                out.append(obj)
        return out

    def all_objects(self) -> list[Any]:
        out: list[Any] = []
        for item in self._iter_items():
            obj = item.data(0, Qt.UserRole)
            if isinstance(obj, (Change, UnversionedFile)):
                out.append(obj)
        return out

    # ---------- Inclusion ----------

    @property
    def inclusion_model(self) -> InclusionModel | None:
        return self._inclusion_model

    def set_inclusion_model(self, model: InclusionModel | None) -> None:
        if model is self._inclusion_model:
            return
        if self._model_handle is not None:
            self._model_handle.dispose()
            self._model_handle = None
        self._inclusion_model = model
        if model is not None:
            self._model_handle = model.add_listener(self._on_model_changed)
        self._on_model_changed()

    def set_inclusion_listener(self, listener: Callable[[], None] | None) -> None:
        self._inclusion_listener = listener

    def included_objects(self) -> list[Any]:
        model = self._inclusion_model
        if model is None:
            return []
        return [obj for obj in self.all_objects() if model.is_included(obj)]

    def include_objects(self, items: Iterable[Any]) -> None:
        if self._inclusion_model is not None:
            self._inclusion_model.add(items)

    def exclude_objects(self, items: Iterable[Any]) -> None:
        if self._inclusion_model is not None:
            self._inclusion_model.remove(items)

    def _on_model_changed(self) -> None:
        self._sync_check_states()
        if self._inclusion_listener is not None:
            self._inclusion_listener()

    # ---------- Checkboxes ----------

    @property
    def show_checkboxes(self) -> bool:
        return self._show_checkboxes

    def set_show_checkboxes(self, show: bool) -> None:
        show = bool(show)
        if show == self._show_checkboxes:
            return
        self._show_checkboxes = show
        self._apply_checkbox_flags()

    def _is_checkable(self, item: QTreeWidgetItem) -> bool:
        return item.data(0, _GROUP_ROLE) in {ChangesGroup.CHANGES.value, ChangesGroup.UNVERSIONED.value}

    def _apply_checkbox_flags(self) -> None:
        self._is_syncing_tree_checks = True
        try:
            for item in self._iter_items():
                if not self._is_checkable(item):
                    continue
                if self._show_checkboxes:
                    item.setFlags(item.flags() | Qt.ItemIsUserCheckable)
                else:
                    item.setFlags(item.flags() & ~Qt.ItemIsUserCheckable)
                    item.setData(0, Qt.CheckStateRole, None)
        finally:
            self._is_syncing_tree_checks = False
        if self._show_checkboxes:
            self._sync_check_states()

    def _sync_check_states(self) -> None:
        if not self._show_checkboxes:
            return
        self._is_syncing_tree_checks = True
        try:
            root = self.invisibleRootItem()
            for idx in range(root.childCount()):
                child = root.child(idx)
                if self._is_checkable(child):
                    self._refresh_check_states_recursive(child)
        finally:
            self._is_syncing_tree_checks = False

    def _refresh_check_states_recursive(self, item: QTreeWidgetItem) -> tuple[int, int]:
        obj = item.data(0, Qt.UserRole)
        if obj is not None:
            model = self._inclusion_model
            checked = 1 if model is not None and model.is_included(obj) else 0
            item.setCheckState(0, Qt.Checked if checked else Qt.Unchecked)
            return (checked, 1)

        checked_total = 0
        item_total = 0
        for idx in range(item.childCount()):
            child_checked, child_total = self._refresh_check_states_recursive(item.child(idx))
            checked_total += child_checked
            item_total += child_total

        if item_total == 0 or checked_total == 0:
            item.setCheckState(0, Qt.Unchecked)
        elif checked_total == item_total:
            item.setCheckState(0, Qt.Checked)
        else:
            item.setCheckState(0, Qt.PartiallyChecked)
        return (checked_total, item_total)

    def _leaf_objects_under(self, item: QTreeWidgetItem) -> list[Any]:
        out: list[Any] = []
        stack = [item]
        while stack:
            node = stack.pop()
            obj = node.data(0, Qt.UserRole)
            if obj is not None:
                out.append(obj)
            for idx in range(node.childCount()):
                stack.append(node.child(idx))
        return out

    def _on_item_changed(self, item: QTreeWidgetItem, _column: int) -> None:
        if self._is_syncing_tree_checks or not self._is_checkable(item):
            return
        objects = self._leaf_objects_under(item)
        model = self._inclusion_model
        if model is None or not objects:
            self._sync_check_states()
            return
        if item.checkState(0) == Qt.Unchecked:
            changed = model.remove(objects)
        else:
            changed = model.add(objects)
        if not changed:
            self._sync_check_states()
