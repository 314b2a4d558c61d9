from __future__ import annotations

"""Translate selection points into tree paths.

A path is a list of :class:`PathFrame` objects ordered from the root side to
the leaf. Each frame pairs a key on the path with the index its child on the
path occupies within it; the leaf frame carries the point's own offset. The
root key itself is never part of a path.

Paths are recomputed on every call: the tree may change between calls, and
walking the parent chain costs no more than the tree depth.
"""

from dataclasses import dataclass
from typing import List

from structured_editor.core.models import ROOT_KEY, Index, IndexPath, Key, Point
from structured_editor.core.nodes import NodeTypeRegistry
from structured_editor.core.store import FlatStore

__all__ = [
    "PathFrame",
    "Path",
    "path_to_root",
    "index_path",
    "common_ancestor_path",
    "local_index_path",
]


@dataclass(frozen=True)
class PathFrame:
    key: Key
    index: Index = None


Path = List[PathFrame]


def path_to_root(store: FlatStore, registry: NodeTypeRegistry, point: Point) -> Path:
    """Return the frames from below the root down to ``point``.

    Raises
    ------
    MissingParent
        If a non-root key on the way up has no parent.
    NotFound
        If a key on the way up has no type name or value.
    """
    if point.key == ROOT_KEY:
        return []

    path: Path = [PathFrame(point.key, point.index)]
    parent_key = registry.for_key(store, point.key).get_parent_key(store, point.key)

    while parent_key is not None and parent_key != ROOT_KEY:
        parent_type = registry.for_key(store, parent_key)
        index = parent_type.get_index_within(store, parent_key, path[0].key)
        path.insert(0, PathFrame(parent_key, index))
        parent_key = parent_type.get_parent_key(store, parent_key)

    return path


def index_path(store: FlatStore, registry: NodeTypeRegistry, point: Point) -> IndexPath:
    """Return only the indices of :func:`path_to_root`, root side first."""
    return [frame.index for frame in path_to_root(store, registry, point)]


def common_ancestor_path(start: Path, end: Path) -> Path:
    """Return the longest prefix of frames naming the same keys in both paths.

    The indices of the last common frame may differ; it is where the two
    paths diverge. The frames of ``start`` are returned.
    """
    common: Path = []
    for start_frame, end_frame in zip(start, end):
        if start_frame.key != end_frame.key:
            break
        common.append(start_frame)
    return common


def local_index_path(path: Path, depth: int) -> IndexPath:
    """Return the indices of ``path`` from frame ``depth - 1`` to the leaf.

    ``depth`` is the length of the common ancestor path; including its last
    frame keeps the divergence at that level visible.
    """
    return [frame.index for frame in path[max(depth - 1, 0):]]
