from __future__ import annotations

"""Explicit mapping from stored type names to node kind instances."""

import logging
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List

from structured_editor.core.exceptions import UnknownNodeType
from structured_editor.core.models import Key
from structured_editor.core.nodes.base import NodeType

if TYPE_CHECKING:
    from structured_editor.core.store import FlatStore

__all__ = ["NodeTypeRegistry"]

logger = logging.getLogger(__name__)


class NodeTypeRegistry:
    """Registry of the node kinds used by one document schema.

    Built once at start-up, usually with :meth:`from_root`, and then used to
    recover which node kind governs a key from the type name the store
    recorded for it.
    """

    def __init__(self, node_types: Iterable[NodeType] = ()) -> None:
        self._types: Dict[str, NodeType] = {}
        for node_type in node_types:
            self.register(node_type)

    @classmethod
    def from_root(cls, root_type: NodeType) -> NodeTypeRegistry:
        """Collect every node kind reachable from ``root_type``."""
        registry = cls()
        pending: List[NodeType] = [root_type]
        while pending:
            node_type = pending.pop()
            if registry._types.get(node_type.type_name) is node_type:
                continue
            registry.register(node_type)
            pending.extend(node_type.child_types())

        logger.debug("Registry built with %d node types: %s", len(registry), ", ".join(sorted(registry._types)))
        return registry

    def register(self, node_type: NodeType) -> None:
        existing = self._types.get(node_type.type_name)
        if existing is not None and existing is not node_type:
            raise ValueError(
                f"Type name '{node_type.type_name}' is already registered for {existing!r}"
            )
        self._types[node_type.type_name] = node_type

    def get(self, type_name: str) -> NodeType:
        try:
            return self._types[type_name]
        except KeyError:
            raise UnknownNodeType(type_name) from None

    def for_key(self, store: FlatStore, key: Key) -> NodeType:
        try:
            return self.get(store.get_type_name(key))
        except UnknownNodeType as exc:
            raise UnknownNodeType(exc.type_name, key) from None

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._types

    def __iter__(self) -> Iterator[NodeType]:
        return iter(self._types.values())

    def __len__(self) -> int:
        return len(self._types)
