from __future__ import annotations

"""Object node kind: a fixed set of named properties, each its own child node.

The flat value is an ordered list of ``[property_name, child_key]`` pairs in
the declared key order. The index of a child is its property name.
"""

from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Sequence

from lxml import etree as ET

from structured_editor.core.exceptions import NotFound
from structured_editor.core.guards import is_list_of, is_one_of, is_pair_of
from structured_editor.core.models import Index, Key, is_non_root_key
from structured_editor.core.nodes.base import NodeType, NonRootNodeType

if TYPE_CHECKING:
    from structured_editor.core.store import FlatStore, Transaction

__all__ = ["ObjectNode"]


class ObjectNode(NonRootNodeType):
    """Node kind for JSON objects with a closed set of properties.

    Parameters
    ----------
    type_name
        Name recorded for keys of this kind.
    props
        Mapping of property name to the node kind of its value.
    key_order
        Order in which properties are inserted and stored. Defaults to the
        mapping's own order; must name every property exactly once.
    tag
        HTML tag used when rendering.
    """

    def __init__(
        self,
        type_name: str,
        props: Mapping[str, NonRootNodeType],
        key_order: Optional[Sequence[str]] = None,
        tag: str = "div",
    ) -> None:
        super().__init__(type_name)
        self.props: Dict[str, NonRootNodeType] = dict(props)
        self.key_order: List[str] = list(key_order) if key_order is not None else list(self.props)
        if sorted(self.key_order) != sorted(self.props):
            raise ValueError(f"Key order of {type_name} must list every property exactly once")
        self.tag = tag
        self._validator = is_list_of(is_pair_of(is_one_of(self.props), is_non_root_key))

    def is_valid_flat_value(self, value: Any) -> bool:
        return self._validator(value)

    def to_json_value(self, store: FlatStore, key: Key) -> Dict[str, Any]:
        return {
            prop: self.props[prop].to_json_value(store, child_key)
            for prop, child_key in self.get_flat_value(store, key)
        }

    def store(self, tx: Transaction, json: Mapping[str, Any], parent_key: Key) -> Key:
        def create_value(key: Key) -> List[List[str]]:
            return [[prop, self.props[prop].store(tx, json[prop], key)] for prop in self.key_order]

        return tx.insert(self.type_name, parent_key, create_value)

    def get_prop_key(self, store: FlatStore, key: Key, prop: str) -> Key:
        for name, child_key in self.get_flat_value(store, key):
            if name == prop:
                return child_key

        raise NotFound(f"Property {prop} not found in object {key}", key)

    def get_index_within(self, store: FlatStore, key: Key, child_key: Key) -> Index:
        for name, k in self.get_flat_value(store, key):
            if k == child_key:
                return name

        raise NotFound(f"Child key {child_key} not found in object {key}", key)

    def child_types(self) -> Sequence[NodeType]:
        return tuple(self.props.values())

    def _render_children(self, store: FlatStore, key: Key) -> Sequence[ET._Element]:
        children = []
        for prop, child_key in self.get_flat_value(store, key):
            rendered = self.props[prop].render(store, child_key)
            if rendered is not None:
                children.append(rendered)
        return children
