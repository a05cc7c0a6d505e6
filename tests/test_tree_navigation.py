"""Tests for commit_panel.core.tree_navigation."""

import fakes
from commit_panel.core.changes import Change
from commit_panel.core.tree_navigation import TreeNavigationAdapter


class TestTreeNavigation:
    def test_select_first_takes_first_match_in_preorder(self):
        a, b, c = Change("a.py"), Change("b.py"), Change("c.py")
        tree = fakes.FakeTree([("root", b), ("root", a), ("root", c), ("other", a)])
        TreeNavigationAdapter(tree).select_first({a, c})
        assert tree.select_calls == [(("root", a), False)]

    def test_select_first_ignores_candidate_order(self):
        a, b = Change("a.py"), Change("b.py")
        tree = fakes.FakeTree([("root", b), ("root", a)])
        TreeNavigationAdapter(tree).select_first([a, b])
        assert tree.selected_objects() == [b]

    def test_select_first_empty_is_noop(self, tree):
        TreeNavigationAdapter(tree).select_first([])
        assert tree.select_calls == []

    def test_select_first_without_match_is_noop(self, tree):
        TreeNavigationAdapter(tree).select_first([Change("missing.py")])
        assert tree.select_calls == []

    def test_select_does_not_scroll(self, tree, items):
        TreeNavigationAdapter(tree).select(items["b"])
        assert tree.select_calls == [(("Changes", "src", items["b"]), False)]

    def test_expand_and_select_ignore_missing(self, tree):
        nav = TreeNavigationAdapter(tree)
        nav.expand(Change("missing.py"))
        nav.select(Change("missing.py"))
        assert tree.expanded == []
        assert tree.select_calls == []

    def test_expand_found_node(self, tree, items):
        TreeNavigationAdapter(tree).expand(items["r"])
        assert tree.expanded == [("Changes", "docs", items["r"])]
