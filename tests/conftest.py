"""Shared test setup for commit_panel tests."""

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from commit_panel.core.changes import Change, UnversionedFile  # noqa: E402
from commit_panel.core.coordinator import (  # noqa: E402
    CommitPanelEnvironment,
    CommitPanelParts,
    CommitReviewCoordinator,
)
from commit_panel.core.inclusion import InclusionModel  # noqa: E402

import fakes  # noqa: E402


@pytest.fixture
def items():
    return {
        "a": Change("src/a.py"),
        "b": Change("src/b.py"),
        "r": Change("docs/new.md", "R ", original_rel_path="docs/old.md"),
        "u": UnversionedFile("notes.txt"),
    }


@pytest.fixture
def tree(items):
    return fakes.FakeTree(
        [
            ("Changes",),
            ("Changes", "src"),
            ("Changes", "src", items["a"]),
            ("Changes", "src", items["b"]),
            ("Changes", "docs", items["r"]),
            ("Unversioned Files",),
            ("Unversioned Files", items["u"]),
        ],
        model=InclusionModel(),
    )


class PanelRig:
    """Coordinator plus every fake it was built from."""

    def __init__(self, tree, *, host_window=None, preview=False, augmentations=(), horizontal=False, manager=None):
        self.tree = tree
        self.host_window = host_window
        self.windows = {"Commit": host_window} if host_window is not None else {}
        self.host = fakes.FakeChangesViewHost(tree)
        self.content_registry = fakes.FakeContentRegistry()
        self.focus_manager = fakes.FakeFocusManager()
        self.manager = manager if manager is not None else fakes.FakeChangesViewManager(tree, preview=preview)
        self.surface = fakes.FakePanelSurface()
        self.toolbar = fakes.FakeToolbar()
        self.status_strip = fakes.FakeStatusStrip()
        self.editor = fakes.FakeMessageEditor()
        self.action_layer = fakes.FakeActionLayer()
        self.progress = fakes.FakeProgressUi()
        self.author = fakes.FakeAuthorComponent()
        self.root = object()
        self.environment = CommitPanelEnvironment(
            host=self.host,
            resolve_tool_window=self.windows.get,
            content_registry=self.content_registry,
            focus_manager=self.focus_manager,
            changes_view_manager=self.manager,
            message_augmentations=tuple(augmentations),
            toolbar_horizontal=horizontal,
        )
        self.parts = CommitPanelParts(
            surface=self.surface,
            toolbar=self.toolbar,
            status_strip=self.status_strip,
            message_editor=self.editor,
            action_layer=self.action_layer,
            progress_ui=self.progress,
            author_component=self.author,
            root_component=self.root,
        )
        self.coordinator = CommitReviewCoordinator(self.environment, self.parts)


@pytest.fixture
def make_rig(tree):
    def _make(**kwargs):
        return PanelRig(kwargs.pop("tree", tree), **kwargs)

    return _make
