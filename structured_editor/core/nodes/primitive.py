from __future__ import annotations

"""Primitive and literal node kinds (raw strings, numbers and booleans)."""

from typing import TYPE_CHECKING, Any, Optional

from lxml import etree as ET

from structured_editor.core.exceptions import TypeMismatch
from structured_editor.core.guards import Validator, is_equal_to
from structured_editor.core.models import Key
from structured_editor.core.nodes.base import NonRootNodeType

if TYPE_CHECKING:
    from structured_editor.core.store import FlatStore, Transaction

__all__ = ["PrimitiveNode", "LiteralNode"]


class PrimitiveNode(NonRootNodeType):
    """Stores a raw value accepted by ``validator`` directly as the flat value."""

    tag = "span"

    def __init__(self, type_name: str, validator: Validator) -> None:
        super().__init__(type_name)
        self._validator = validator

    def is_valid_flat_value(self, value: Any) -> bool:
        return self._validator(value)

    def to_json_value(self, store: FlatStore, key: Key) -> Any:
        return self.get_flat_value(store, key)

    def store(self, tx: Transaction, json: Any, parent_key: Key) -> Key:
        if not self._validator(json):
            raise TypeMismatch(f"Value {json!r} is not valid for {self.type_name}", value=json)
        return tx.insert(self.type_name, parent_key, lambda key: json)

    def update_value(self, tx: Transaction, key: Key, new_value: Any) -> None:
        """Replace the stored value of ``key`` with ``new_value``."""
        if not self._validator(new_value):
            raise TypeMismatch(f"Value {new_value!r} is not valid for {self.type_name}", key, new_value)
        tx.update(self.is_valid_flat_value, key, new_value)

    def render(self, store: FlatStore, key: Key) -> Optional[ET._Element]:
        element = self._element(self.tag, key, data_type="value")
        element.text = str(self.get_flat_value(store, key))
        return element


class LiteralNode(PrimitiveNode):
    """Primitive that only ever holds one fixed value."""

    def __init__(self, type_name: str, value: Any) -> None:
        super().__init__(type_name, is_equal_to(value))
        self.value = value

    def to_json_value(self, store: FlatStore, key: Key) -> Any:
        return self.value

    def render(self, store: FlatStore, key: Key) -> Optional[ET._Element]:
        return None
