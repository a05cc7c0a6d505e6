"""Toolbar placement and popup anchoring for the commit panel."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from commit_panel.core.interfaces import PanelSurface, StatusStrip, ToolbarSurface

_log = logging.getLogger("commit_panel.toolbar")

TOOLBAR_HORIZONTAL_KEY = "commit.toolbar_horizontal"


class ToolbarOrientation(Enum):
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"

    @staticmethod
    def from_flag(horizontal: bool) -> "ToolbarOrientation":
        return ToolbarOrientation.HORIZONTAL if horizontal else ToolbarOrientation.VERTICAL


class AnchorKind(Enum):
    ABOVE_TOOLBAR = "above_toolbar"
    ABOVE_PANEL = "above_panel"
    BEST_POSITION = "best_position"


@dataclass(frozen=True, slots=True)
class AnchorSpec:
    kind: AnchorKind
    context: Any = None


def resolve_popup_anchor(from_toolbar: bool, horizontal: bool, context: Any = None) -> AnchorSpec:
    if from_toolbar and horizontal:
        return AnchorSpec(AnchorKind.ABOVE_TOOLBAR)
    if from_toolbar:
        return AnchorSpec(AnchorKind.ABOVE_PANEL)
    return AnchorSpec(AnchorKind.BEST_POSITION, context)


class ToolbarLayoutManager:
    def __init__(
        self,
        *,
        toolbar: ToolbarSurface,
        status_strip: StatusStrip,
        panel: PanelSurface,
        horizontal: bool = False,
    ) -> None:
        self._toolbar = toolbar
        self._status_strip = status_strip
        self._panel = panel
        self._orientation = ToolbarOrientation.from_flag(horizontal)

    @property
    def orientation(self) -> ToolbarOrientation:
        return self._orientation

    @property
    def is_horizontal(self) -> bool:
        return self._orientation is ToolbarOrientation.HORIZONTAL

    def apply_initial(self) -> None:
        self._attach(self.is_horizontal)

    def set_orientation(self, horizontal: bool) -> bool:
        target = ToolbarOrientation.from_flag(bool(horizontal))
        if target is self._orientation:
            return False
        self._orientation = target
        self._attach(self.is_horizontal)
        return True

    def resolve_popup_anchor(self, from_toolbar: bool, context: Any = None) -> AnchorSpec:
        return resolve_popup_anchor(from_toolbar, self.is_horizontal, context)

    def _attach(self, horizontal: bool) -> None:
        # Attaching to a new parent takes the toolbar out of the old one.
        self._toolbar.set_horizontal(horizontal)
        if horizontal:
            self._toolbar.set_reserve_auto_popup_icon(False)
            self._panel.set_content_border(False)
            self._status_strip.add_to_left(self._toolbar.component)
        else:
            self._toolbar.set_reserve_auto_popup_icon(True)
            self._panel.set_content_border(True)
            self._panel.add_to_left(self._toolbar.component)
        _log.debug("Toolbar attached (%s)", self._orientation.value)
