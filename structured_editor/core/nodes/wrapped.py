from __future__ import annotations

"""Wrapped node kind: a named box around exactly one child.

JSON shape is ``{"type": <type_name>, "value": <child json>}``; the flat value
is the child's key.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional, Sequence

from lxml import etree as ET

from structured_editor.core.models import Key, is_non_root_key
from structured_editor.core.nodes.base import NodeType, NonRootNodeType

if TYPE_CHECKING:
    from structured_editor.core.store import FlatStore, Transaction

__all__ = ["WrappedNode"]


class WrappedNode(NonRootNodeType):
    def __init__(self, type_name: str, child: NonRootNodeType, tag: str = "div") -> None:
        super().__init__(type_name)
        self.child = child
        self.tag = tag

    def is_valid_flat_value(self, value: Any) -> bool:
        return is_non_root_key(value)

    def to_json_value(self, store: FlatStore, key: Key) -> Dict[str, Any]:
        child_key = self.get_flat_value(store, key)
        return {"type": self.type_name, "value": self.child.to_json_value(store, child_key)}

    def store(self, tx: Transaction, json: Dict[str, Any], parent_key: Key) -> Key:
        return tx.insert(
            self.type_name,
            parent_key,
            lambda key: self.child.store(tx, json["value"], key),
        )

    def child_types(self) -> Sequence[NodeType]:
        return (self.child,)

    def text_key(self, store: FlatStore, key: Key) -> Optional[Key]:
        return self.child.text_key(store, self.get_flat_value(store, key))

    def _render_children(self, store: FlatStore, key: Key) -> Sequence[ET._Element]:
        rendered = self.child.render(store, self.get_flat_value(store, key))
        return [rendered] if rendered is not None else []
