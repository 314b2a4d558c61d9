from __future__ import annotations

"""Root node kind: binds the store's root key to the document's top node."""

from typing import TYPE_CHECKING, Any, Optional, Sequence

from lxml import etree as ET

from structured_editor.core.models import ROOT_KEY, Key, is_non_root_key
from structured_editor.core.nodes.base import NodeType, NonRootNodeType

if TYPE_CHECKING:
    from structured_editor.core.store import FlatStore, Transaction

__all__ = ["RootNode"]


class RootNode(NodeType):
    tag = "article"

    def __init__(self, child: NonRootNodeType, type_name: str = ROOT_KEY) -> None:
        super().__init__(type_name)
        self.child = child

    def is_valid_flat_value(self, value: Any) -> bool:
        return is_non_root_key(value)

    def to_json_value(self, store: FlatStore, key: Key = ROOT_KEY) -> Any:
        return self.child.to_json_value(store, self.get_flat_value(store, key))

    def attach_root(self, tx: Transaction, root_key: Key, json: Any) -> Key:
        """Encode ``json`` as the child and bind ``root_key`` to it."""
        return tx.attach_root(root_key, self.child.store(tx, json, root_key))

    def child_types(self) -> Sequence[NodeType]:
        return (self.child,)

    def render(self, store: FlatStore, key: Key = ROOT_KEY) -> Optional[ET._Element]:
        element = self._element(self.tag, key, contenteditable="true", spellcheck="false")
        rendered = self.child.render(store, self.get_flat_value(store, key))
        if rendered is not None:
            element.append(rendered)
        return element
