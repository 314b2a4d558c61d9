from __future__ import annotations

"""Shared value objects used across the editor core.

This package exposes keys, selection points and command identifiers. It is
intentionally free of store / replication code so that the contained objects
can be reused in any context (unit-tests, transport, rendering, etc.).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

__all__ = [
    "ROOT_KEY",
    "Key",
    "Index",
    "IndexPath",
    "is_key",
    "is_non_root_key",
    "Point",
    "Cursor",
    "Command",
    "Direction",
]

ROOT_KEY = "root"

# A key is either ROOT_KEY or the decimal string of a store-scoped counter.
Key = str

# Position of a child within its parent: list position (array), property
# name (object) or None for kinds with at most one child. For the leaf of a
# path it is the point's own offset.
Index = Union[int, str, None]
IndexPath = List[Index]


def is_non_root_key(value: Any) -> bool:
    return isinstance(value, str) and value.isdigit()


def is_key(value: Any) -> bool:
    return value == ROOT_KEY or is_non_root_key(value)


@dataclass(frozen=True)
class Point:
    """A reference into the tree: a key plus an optional character offset."""

    key: Key
    index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"key": self.key}
        if self.index is not None:
            d["index"] = self.index
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Point:
        index = d.get("index")
        # Numbers may come back from the replicated map as floats.
        return cls(key=str(d["key"]), index=int(index) if index is not None else None)


@dataclass(frozen=True)
class Cursor:
    """A pair of points describing a selection or a collapsed caret."""

    start: Point
    end: Point

    @classmethod
    def caret(cls, point: Point) -> Cursor:
        return cls(start=point, end=point)

    @property
    def is_collapsed(self) -> bool:
        return self.start == self.end

    def to_dict(self) -> Dict[str, Any]:
        return {"start": self.start.to_dict(), "end": self.end.to_dict()}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> Cursor:
        return cls(start=Point.from_dict(d["start"]), end=Point.from_dict(d["end"]))


class Command(str, Enum):
    """Editing commands understood by node type handlers."""

    INSERT_TEXT = "insertText"
    DELETE = "delete"
    # Internal: collapses a non-collapsed selection before another command runs.
    DELETE_BETWEEN = "deleteBetween"


class Direction(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"
