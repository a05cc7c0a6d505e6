"""Value types shown in the changes tree and consumed by the commit workflow."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from collections.abc import Hashable
from typing import Any, Union


class ItemKind(Enum):
    CHANGE = "change"
    UNVERSIONED_FILE = "unversioned"


@dataclass(frozen=True, slots=True)
class Change:
    rel_path: str
    code: str = " M"  # porcelain XY code
    original_rel_path: str | None = None

    @property
    def is_rename(self) -> bool:
        return self.original_rel_path is not None

    @property
    def display_name(self) -> str:
        if self.original_rel_path:
            return f"{self.original_rel_path} -> {self.rel_path}"
        return self.rel_path


@dataclass(frozen=True, slots=True)
class UnversionedFile:
    rel_path: str


Item = Union[Change, UnversionedFile, Hashable]


def kind_of(item: Any) -> ItemKind | None:
    if isinstance(item, Change):
        return ItemKind.CHANGE
    if isinstance(item, UnversionedFile):
        return ItemKind.UNVERSIONED_FILE
    return None


_AUTHOR_RE = re.compile(r"^\s*(?P<name>[^<>]*?)\s*<(?P<email>[^<>\s]+)>\s*$")


@dataclass(frozen=True, slots=True)
class VcsUser:
    name: str
    email: str

    @staticmethod
    def parse(text: str | None) -> "VcsUser | None":
        """Parse ``Name <email>``; anything else yields ``None``."""
        raw = str(text or "").strip()
        if not raw:
            return None
        match = _AUTHOR_RE.match(raw)
        if match is None:
            return None
        name = match.group("name").strip()
        if not name:
            return None
        return VcsUser(name=name, email=match.group("email").strip())

    def __str__(self) -> str:
        return f"{self.name} <{self.email}>"


@dataclass(frozen=True, slots=True)
class EditedCommitDetails:
    commit_hash: str
    subject: str
    author: VcsUser | None = None
    rel_paths: tuple[str, ...] = ()

    @property
    def short_hash(self) -> str:
        return self.commit_hash[:8]


@dataclass(slots=True)
class ChangeList:
    name: str
    changes: list[Change] = field(default_factory=list)
    comment: str = ""
