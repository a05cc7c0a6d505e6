"""Composition root of the commit review panel."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Collection, Iterable, Protocol, Sequence

from commit_panel.core.activation import ToolWindowActivationStateMachine
from commit_panel.core.changes import (
    Change,
    ChangeList,
    EditedCommitDetails,
    ItemKind,
    UnversionedFile,
    VcsUser,
)
from commit_panel.core.inclusion import InclusionModel, InclusionTracker
from commit_panel.core.interfaces import (
    ChangesViewHost,
    ChangesViewManager,
    CommitActionLayer,
    CommitAuthorComponent,
    CommitProgressUi,
    ContentRegistry,
    FocusManager,
    MessageAugmentation,
    MessageEditor,
    PanelSurface,
    Popup,
    StatusStrip,
    ToolbarSurface,
    ToolWindowResolver,
)
from commit_panel.core.listeners import ListenerHandle, ListenerList
from commit_panel.core.toolbar_layout import AnchorKind, ToolbarLayoutManager
from commit_panel.core.tree_navigation import TreeNavigationAdapter

_log = logging.getLogger("commit_panel.coordinator")

DEFAULT_COMMIT_SHORTCUTS: tuple[str, ...] = ("Ctrl+Return", "Ctrl+Enter")


class InclusionListener(Protocol):
    def on_inclusion_changed(self) -> None: ...


class CommitAuthorListener(Protocol):
    def on_commit_author_changed(self) -> None: ...


@dataclass(slots=True)
class CommitPanelParts:
    """Widgets the panel is made of."""

    surface: PanelSurface
    toolbar: ToolbarSurface
    status_strip: StatusStrip
    message_editor: MessageEditor
    action_layer: CommitActionLayer
    progress_ui: CommitProgressUi
    author_component: CommitAuthorComponent
    root_component: Any


@dataclass(slots=True)
class CommitPanelEnvironment:
    """Host-side capabilities handed to the panel at construction."""

    host: ChangesViewHost
    resolve_tool_window: ToolWindowResolver
    content_registry: ContentRegistry
    focus_manager: FocusManager
    changes_view_manager: ChangesViewManager
    message_augmentations: Sequence[MessageAugmentation] = ()
    commit_shortcuts: Sequence[str] = DEFAULT_COMMIT_SHORTCUTS
    toolbar_horizontal: bool = False


def _as_callback(listener: Any, method_name: str) -> Callable[[], None]:
    method = getattr(listener, method_name, None)
    if callable(method):
        return method
    if callable(listener):
        return listener
    raise TypeError(f"listener must be callable or define {method_name}()")


class CommitReviewCoordinator:
    def __init__(self, environment: CommitPanelEnvironment, parts: CommitPanelParts) -> None:
        self._env = environment
        self._parts = parts
        self._host = environment.host
        self._tree = environment.host.changes_view
        self._changes_view_manager = environment.changes_view_manager
        self._focus_manager = environment.focus_manager
        self._disposed = False
        self._edited_commit: EditedCommitDetails | None = None
        self._author_listeners = ListenerList()

        self._inclusion = InclusionTracker(self._tree)
        self._navigation = TreeNavigationAdapter(self._tree)
        self._toolbar_layout = ToolbarLayoutManager(
            toolbar=parts.toolbar,
            status_strip=parts.status_strip,
            panel=parts.surface,
            horizontal=environment.toolbar_horizontal,
        )
        self._activation = ToolWindowActivationStateMachine(
            resolve_tool_window=environment.resolve_tool_window,
            content_registry=environment.content_registry,
            focus_manager=environment.focus_manager,
            tree=self._tree,
            surface=parts.surface,
            action_layer=parts.action_layer,
            focus_target=lambda: parts.message_editor.focus_target,
        )

        self._inclusion.install()
        self._tree.set_show_checkboxes(True)
        for augmentation in environment.message_augmentations:
            augmentation(parts.message_editor)
        self._toolbar_layout.apply_initial()
        self._host.set_status_component(parts.status_strip)
        parts.author_component.set_author_changed_callback(self._author_listeners.fire)
        parts.action_layer.setup_shortcuts(parts.root_component, tuple(environment.commit_shortcuts))

    # ---------- Inclusion ----------

    def included_items(self, kind: ItemKind | None = None) -> tuple[Any, ...]:
        return self._inclusion.included_items(kind)

    def displayed_items(self, kind: ItemKind | None = None) -> tuple[Any, ...]:
        return self._inclusion.displayed_items(kind)

    def included_changes(self) -> list[Change]:
        return list(self._inclusion.included_items(ItemKind.CHANGE))

    def included_unversioned_files(self) -> list[UnversionedFile]:
        return list(self._inclusion.included_items(ItemKind.UNVERSIONED_FILE))

    def displayed_changes(self) -> list[Change]:
        return list(self._inclusion.displayed_items(ItemKind.CHANGE))

    def displayed_unversioned_files(self) -> list[UnversionedFile]:
        return list(self._inclusion.displayed_items(ItemKind.UNVERSIONED_FILE))

    def include_into_commit(self, items: Iterable[Any]) -> None:
        self._inclusion.include_items(items)

    @property
    def inclusion_model(self) -> InclusionModel | None:
        return self._inclusion.inclusion_model

    def set_inclusion_model(self, model: InclusionModel | None) -> InclusionModel | None:
        return self._inclusion.set_inclusion_model(model)

    def add_inclusion_listener(self, listener: InclusionListener | Callable[[], None]) -> ListenerHandle:
        return self._inclusion.add_inclusion_listener(_as_callback(listener, "on_inclusion_changed"))

    # ---------- Activation ----------

    @property
    def is_active(self) -> bool:
        return self._activation.is_active

    def activate(self) -> bool:
        return self._activation.activate()

    def deactivate(self, restore_host: bool) -> None:
        self._activation.deactivate(restore_host)

    # ---------- Tree navigation ----------

    def expand(self, item: Any) -> None:
        self._navigation.expand(item)

    def select(self, item: Any) -> None:
        self._navigation.select(item)

    def select_first(self, items: Collection[Any]) -> None:
        self._navigation.select_first(items)

    # ---------- Toolbar ----------

    @property
    def is_toolbar_horizontal(self) -> bool:
        return self._toolbar_layout.is_horizontal

    def set_toolbar_horizontal(self, horizontal: bool) -> None:
        self._toolbar_layout.set_orientation(horizontal)

    def show_commit_options(self, popup: Popup, from_toolbar: bool, context: Any = None) -> None:
        anchor = self._toolbar_layout.resolve_popup_anchor(from_toolbar, context)
        if anchor.kind is AnchorKind.ABOVE_TOOLBAR:
            popup.show_above(self._parts.toolbar.component)
        elif anchor.kind is AnchorKind.ABOVE_PANEL:
            popup.show_above(self._parts.surface)
        else:
            popup.show_in_best_position_for(anchor.context)

    # ---------- Commit context ----------

    @property
    def edited_commit(self) -> EditedCommitDetails | None:
        return self._edited_commit

    def set_edited_commit(self, commit: EditedCommitDetails | None) -> None:
        self._edited_commit = commit
        self.refresh_data()
        if commit is not None:
            self.expand(commit)

    @property
    def commit_author(self) -> VcsUser | None:
        return self._parts.author_component.commit_author()

    def set_commit_author(self, author: VcsUser | None) -> None:
        self._parts.author_component.set_commit_author(author)

    def add_commit_author_listener(
        self, listener: CommitAuthorListener | Callable[[], None]
    ) -> ListenerHandle:
        return self._author_listeners.add(_as_callback(listener, "on_commit_author_changed"))

    @property
    def message(self) -> str:
        return self._parts.message_editor.text()

    def set_message(self, text: str) -> None:
        self._parts.message_editor.set_text(text)

    def set_completion_context(self, change_lists: list[ChangeList]) -> None:
        self._parts.message_editor.set_change_lists(list(change_lists))

    @property
    def commit_progress_ui(self) -> CommitProgressUi:
        return self._parts.progress_ui

    def is_commit_button_default(self) -> bool:
        if self._parts.progress_ui.is_dumb_mode:
            return False
        return self._focus_manager.has_focus_within(self._parts.root_component)

    # ---------- Lifecycle ----------

    def refresh_data(self) -> None:
        self._changes_view_manager.refresh_immediately()

    def end_execution(self) -> None:
        manager = self._changes_view_manager
        if not manager.is_editor_preview():
            return
        self.refresh_data()
        manager.close_editor_preview(only_if_empty=True)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._inclusion.dispose()
        self._parts.author_component.set_author_changed_callback(None)
        self._author_listeners.clear()
        self._host.set_status_component(None)
        self._tree.set_show_checkboxes(False)
        _log.debug("Commit panel disposed (active: %s)", self._activation.is_active)
