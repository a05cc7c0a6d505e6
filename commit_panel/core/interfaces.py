"""Collaborator contracts used by the commit review core.

The Qt layer in ``commit_panel.ui`` implements these; tests use in-memory
fakes.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Iterator, Protocol, Sequence

from commit_panel.core.changes import ChangeList


class ChangesTreeView(Protocol):
    """Externally owned hierarchical data source of changes."""

    def find_node_for_object(self, obj: Any) -> Any | None: ...

    def find_path_for_object(self, obj: Any) -> Any | None: ...

    def iter_paths_preorder(self) -> Iterator[Any]: ...

    def last_user_object(self, path: Any) -> Any | None: ...

    def expand_node(self, node: Any) -> None: ...

    def select_path(self, path: Any, *, scroll: bool = False) -> None: ...

    def selected_objects(self) -> list[Any]: ...

    def all_objects(self) -> list[Any]: ...

    def included_objects(self) -> list[Any]: ...

    def include_objects(self, items: Iterable[Any]) -> None: ...

    @property
    def inclusion_model(self) -> Any | None: ...

    def set_inclusion_model(self, model: Any | None) -> None: ...

    def set_inclusion_listener(self, listener: Callable[[], None] | None) -> None: ...

    def set_show_checkboxes(self, show: bool) -> None: ...


class HostToolWindow(Protocol):
    def is_visible(self) -> bool: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def activate(self, on_complete: Callable[[], None] | None = None) -> None: ...


ToolWindowResolver = Callable[[str], "HostToolWindow | None"]


class ContentRegistry(Protocol):
    def select_content(self, content_id: str) -> bool: ...


class FocusManager(Protocol):
    def request_focus(self, component: Any) -> None: ...

    def has_focus_within(self, component: Any) -> bool: ...


class ChangesViewManager(Protocol):
    def refresh_immediately(self) -> None: ...

    def is_editor_preview(self) -> bool: ...

    def close_editor_preview(self, only_if_empty: bool = False) -> None:
        """With ``only_if_empty``, close once the pending refresh has landed and the selection is empty."""


class ChangesViewHost(Protocol):
    """Surface that shows the changes tree and carries one status contributor slot."""

    @property
    def changes_view(self) -> ChangesTreeView: ...

    def set_status_component(self, component: Any | None) -> None: ...


class ToolbarSurface(Protocol):
    @property
    def component(self) -> Any: ...

    def set_horizontal(self, horizontal: bool) -> None: ...

    def set_reserve_auto_popup_icon(self, reserve: bool) -> None: ...


class StatusStrip(Protocol):
    def add_to_left(self, component: Any) -> None: ...


class PanelSurface(Protocol):
    """The commit panel's own widget: toolbar slot, content border and visibility."""

    def add_to_left(self, component: Any) -> None: ...

    def set_content_border(self, visible: bool) -> None: ...

    def set_visible(self, visible: bool) -> None: ...

    def is_visible(self) -> bool: ...


class CommitActionLayer(Protocol):
    def set_active(self, active: bool) -> None: ...

    def setup_shortcuts(self, root_component: Any, sequences: Sequence[str]) -> None: ...


class MessageEditor(Protocol):
    @property
    def focus_target(self) -> Any: ...

    def text(self) -> str: ...

    def set_text(self, text: str) -> None: ...

    def set_change_lists(self, change_lists: list[ChangeList]) -> None: ...


class CommitProgressUi(Protocol):
    @property
    def is_dumb_mode(self) -> bool: ...

    def set_busy(self, busy: bool, text: str = "") -> None: ...

    def set_error(self, text: str) -> None: ...

    def set_info(self, text: str) -> None: ...

    def clear(self) -> None: ...


class CommitAuthorComponent(Protocol):
    def commit_author(self) -> Any | None: ...

    def set_commit_author(self, author: Any | None) -> None: ...

    def set_author_changed_callback(self, callback: Callable[[], None] | None) -> None: ...


class Popup(Protocol):
    def show_above(self, component: Any) -> None: ...

    def show_in_best_position_for(self, context: Any) -> None: ...


MessageAugmentation = Callable[[MessageEditor], None]
