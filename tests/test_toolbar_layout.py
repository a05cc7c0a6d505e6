"""Tests for commit_panel.core.toolbar_layout."""

import fakes
from commit_panel.core.toolbar_layout import (
    AnchorKind,
    ToolbarLayoutManager,
    ToolbarOrientation,
    resolve_popup_anchor,
)


def _manager(horizontal=False):
    toolbar = fakes.FakeToolbar()
    strip = fakes.FakeStatusStrip()
    panel = fakes.FakePanelSurface()
    manager = ToolbarLayoutManager(toolbar=toolbar, status_strip=strip, panel=panel, horizontal=horizontal)
    manager.apply_initial()
    return manager, toolbar, strip, panel


class TestToolbarLayoutManager:
    def test_vertical_toolbar_lives_in_panel(self):
        manager, toolbar, strip, panel = _manager(horizontal=False)
        assert manager.orientation is ToolbarOrientation.VERTICAL
        assert panel.left == [toolbar.component]
        assert panel.adds == 1
        assert strip.adds == 0
        assert strip.left == []
        assert panel.content_border
        assert toolbar.reserve_auto_popup_icon
        assert not toolbar.horizontal

    def test_horizontal_toolbar_lives_in_status_strip(self):
        manager, toolbar, strip, panel = _manager(horizontal=True)
        assert strip.left == [toolbar.component]
        assert panel.left == []
        assert not panel.content_border
        assert not toolbar.reserve_auto_popup_icon
        assert toolbar.horizontal

    def test_switching_moves_toolbar_between_parents(self):
        manager, toolbar, strip, panel = _manager(horizontal=False)
        assert manager.set_orientation(True)
        assert strip.left == [toolbar.component]
        assert strip.adds == 1
        assert panel.left == []
        assert manager.set_orientation(False)
        assert panel.left == [toolbar.component]
        assert panel.adds == 2
        assert strip.left == []

    def test_repeated_orientation_is_idempotent(self):
        manager, toolbar, strip, panel = _manager(horizontal=False)
        manager.set_orientation(True)
        assert strip.adds == 1
        assert manager.set_orientation(True) is False
        assert strip.adds == 1
        assert panel.adds == 1
        assert strip.left == [toolbar.component]
        assert toolbar.component.parent is strip
        assert panel.left == []


class TestPopupAnchor:
    def test_toolbar_horizontal_anchors_above_toolbar(self):
        assert resolve_popup_anchor(True, True).kind is AnchorKind.ABOVE_TOOLBAR

    def test_toolbar_vertical_anchors_above_panel(self):
        assert resolve_popup_anchor(True, False).kind is AnchorKind.ABOVE_PANEL

    def test_elsewhere_uses_best_position_with_context(self):
        ctx = object()
        for horizontal in (True, False):
            spec = resolve_popup_anchor(False, horizontal, ctx)
            assert spec.kind is AnchorKind.BEST_POSITION
            assert spec.context is ctx

    def test_manager_uses_current_orientation(self):
        manager, *_ = _manager(horizontal=False)
        assert manager.resolve_popup_anchor(True).kind is AnchorKind.ABOVE_PANEL
        manager.set_orientation(True)
        assert manager.resolve_popup_anchor(True).kind is AnchorKind.ABOVE_TOOLBAR
