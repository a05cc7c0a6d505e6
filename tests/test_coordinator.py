"""Tests for commit_panel.core.coordinator."""

import pytest

import fakes
from commit_panel.core.changes import ChangeList, EditedCommitDetails, ItemKind, VcsUser
from commit_panel.core.coordinator import DEFAULT_COMMIT_SHORTCUTS
from commit_panel.core.inclusion import InclusionModel


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------

class TestConstruction:
    def test_wires_collaborators(self, make_rig):
        rig = make_rig()
        assert rig.tree.show_checkboxes
        assert rig.tree.inclusion_listener is not None
        assert rig.host.status_component is rig.status_strip
        assert rig.action_layer.shortcuts == [(rig.root, DEFAULT_COMMIT_SHORTCUTS)]
        assert rig.surface.left == [rig.toolbar.component]
        assert not rig.coordinator.is_active

    def test_runs_message_augmentations(self, make_rig):
        def augment(editor):
            editor.augmented.append("hint")

        rig = make_rig(augmentations=[augment])
        assert rig.editor.augmented == ["hint"]

    def test_horizontal_toolbar_from_environment(self, make_rig):
        rig = make_rig(horizontal=True)
        assert rig.coordinator.is_toolbar_horizontal
        assert rig.status_strip.left == [rig.toolbar.component]


# ---------------------------------------------------------------------------
# Inclusion
# ---------------------------------------------------------------------------

class TestInclusion:
    def test_typed_accessors(self, make_rig, items):
        rig = make_rig()
        rig.coordinator.include_into_commit([items["a"], items["u"]])
        assert rig.coordinator.included_changes() == [items["a"]]
        assert rig.coordinator.included_unversioned_files() == [items["u"]]
        assert rig.coordinator.displayed_changes() == [items["a"], items["b"], items["r"]]
        assert rig.coordinator.displayed_unversioned_files() == [items["u"]]
        assert rig.coordinator.included_items(ItemKind.CHANGE) == (items["a"],)

    def test_listener_object_and_callable_forms(self, make_rig, items):
        rig = make_rig()
        seen = []

        class Listener:
            def on_inclusion_changed(self):
                seen.append(("object", rig.coordinator.included_items()))

        rig.coordinator.add_inclusion_listener(Listener())
        rig.coordinator.add_inclusion_listener(lambda: seen.append(("callable", rig.coordinator.included_items())))
        rig.coordinator.include_into_commit([items["b"]])
        assert seen == [("object", (items["b"],)), ("callable", (items["b"],))]

    def test_listener_rejects_garbage(self, make_rig):
        rig = make_rig()
        with pytest.raises(TypeError):
            rig.coordinator.add_inclusion_listener(object())

    def test_listener_may_reenter_include(self, make_rig, items):
        rig = make_rig()
        rounds = []

        def listener():
            rounds.append(rig.coordinator.included_items())
            if items["b"] not in rounds[-1]:
                rig.coordinator.include_into_commit([items["b"]])

        rig.coordinator.add_inclusion_listener(listener)
        rig.coordinator.include_into_commit([items["a"]])
        assert rounds == [(items["a"],), (items["a"], items["b"])]

    def test_set_inclusion_model(self, make_rig, items):
        rig = make_rig()
        replacement = InclusionModel([items["r"]])
        previous = rig.coordinator.set_inclusion_model(replacement)
        assert previous is not replacement
        assert rig.coordinator.inclusion_model is replacement
        assert rig.coordinator.included_items() == (items["r"],)


# ---------------------------------------------------------------------------
# Activation passthrough
# ---------------------------------------------------------------------------

class TestActivation:
    def test_activate_without_host_returns_false(self, make_rig):
        rig = make_rig()
        assert rig.coordinator.activate() is False
        assert not rig.coordinator.is_active

    def test_activate_then_restore(self, make_rig):
        host = fakes.FakeHostWindow(visible=False)
        rig = make_rig(host_window=host)
        assert rig.coordinator.activate()
        assert rig.surface.visible
        assert rig.focus_manager.requests == [rig.editor.focus_target]
        rig.coordinator.deactivate(restore_host=True)
        assert not host.visible
        assert not rig.surface.visible


# ---------------------------------------------------------------------------
# Commit context
# ---------------------------------------------------------------------------

class TestCommitContext:
    def test_set_edited_commit_refreshes_and_expands(self, make_rig):
        details = EditedCommitDetails("0123456789abcdef", "Fix parser")
        tree = fakes.FakeTree([("Edited Commit", details)])
        rig = make_rig(tree=tree)
        rig.coordinator.set_edited_commit(details)
        assert rig.coordinator.edited_commit is details
        assert rig.manager.refreshes == 1
        assert tree.expanded == [("Edited Commit", details)]

    def test_clearing_edited_commit_only_refreshes(self, make_rig):
        rig = make_rig()
        rig.coordinator.set_edited_commit(None)
        assert rig.coordinator.edited_commit is None
        assert rig.manager.refreshes == 1
        assert rig.tree.expanded == []

    def test_commit_author_listeners(self, make_rig):
        rig = make_rig()
        seen = []
        handle = rig.coordinator.add_commit_author_listener(lambda: seen.append(rig.coordinator.commit_author))
        author = VcsUser("Ada", "ada@example.com")
        rig.coordinator.set_commit_author(author)
        rig.coordinator.set_commit_author(author)
        assert seen == [author]
        handle.dispose()
        rig.coordinator.set_commit_author(None)
        assert seen == [author]

    def test_message_and_completion_context(self, make_rig, items):
        rig = make_rig()
        rig.coordinator.set_message("Add feature")
        assert rig.coordinator.message == "Add feature"
        lists = [ChangeList("Changes", [items["a"]])]
        rig.coordinator.set_completion_context(lists)
        assert rig.editor.change_lists == lists

    def test_commit_button_default_needs_focus_and_idle_progress(self, make_rig):
        rig = make_rig()
        assert not rig.coordinator.is_commit_button_default()
        rig.focus_manager.focus_within = True
        assert rig.coordinator.is_commit_button_default()
        rig.progress.set_busy(True)
        assert not rig.coordinator.is_commit_button_default()
        assert rig.coordinator.commit_progress_ui is rig.progress


# ---------------------------------------------------------------------------
# Toolbar and popups
# ---------------------------------------------------------------------------

class TestCommitOptions:
    def test_popup_above_toolbar_when_horizontal(self, make_rig):
        rig = make_rig(horizontal=True)
        popup = fakes.FakePopup()
        rig.coordinator.show_commit_options(popup, True)
        assert popup.calls == [("above", rig.toolbar.component)]

    def test_popup_above_panel_when_vertical(self, make_rig):
        rig = make_rig()
        popup = fakes.FakePopup()
        rig.coordinator.show_commit_options(popup, True)
        assert popup.calls == [("above", rig.surface)]

    def test_popup_best_position_elsewhere(self, make_rig):
        rig = make_rig()
        popup = fakes.FakePopup()
        ctx = object()
        rig.coordinator.show_commit_options(popup, False, ctx)
        assert popup.calls == [("best", ctx)]

    def test_set_toolbar_horizontal_reparents(self, make_rig):
        rig = make_rig()
        rig.coordinator.set_toolbar_horizontal(True)
        rig.coordinator.set_toolbar_horizontal(True)
        assert rig.coordinator.is_toolbar_horizontal
        assert rig.status_strip.left == [rig.toolbar.component]
        assert rig.surface.left == []


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

class TestEndExecution:
    def test_without_preview_does_nothing(self, make_rig):
        rig = make_rig(preview=False)
        rig.coordinator.end_execution()
        assert rig.manager.refreshes == 0
        assert rig.manager.closed == 0

    def test_empty_selection_closes_preview_after_refresh(self, make_rig):
        rig = make_rig(preview=True)
        rig.coordinator.end_execution()
        assert rig.manager.refreshes == 1
        assert rig.manager.closed == 1

    def test_selection_keeps_preview_open(self, make_rig, items):
        rig = make_rig(preview=True)
        rig.coordinator.select(items["a"])
        rig.coordinator.end_execution()
        assert rig.manager.refreshes == 1
        assert rig.manager.closed == 0
        assert rig.manager.selection_at_refresh == [[items["a"]]]


class TestDispose:
    def test_dispose_unwires_and_is_idempotent(self, make_rig, items):
        host = fakes.FakeHostWindow(visible=False)
        rig = make_rig(host_window=host)
        fired = []
        rig.coordinator.add_inclusion_listener(lambda: fired.append(1))
        rig.coordinator.activate()
        rig.coordinator.dispose()
        rig.coordinator.dispose()
        assert rig.coordinator.disposed
        assert rig.host.status_component is None
        assert rig.tree.inclusion_listener is None
        assert rig.author.callback is None
        assert not rig.tree.show_checkboxes
        rig.tree.inclusion_model.add([items["a"]])
        assert fired == []
