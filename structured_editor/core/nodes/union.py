from __future__ import annotations

"""Union node kind: one child whose kind is picked among fixed variants.

On encode the variant is chosen by ``discriminator(json)``; on decode it is
recovered from the type name the store recorded for the child key. Both are
matched against each variant's own ``type_name``.
"""

from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from lxml import etree as ET

from structured_editor.core.exceptions import UnknownVariant
from structured_editor.core.models import Key, is_non_root_key
from structured_editor.core.nodes.base import NodeType, NonRootNodeType

if TYPE_CHECKING:
    from structured_editor.core.store import FlatStore, Transaction

__all__ = ["UnionNode"]


class UnionNode(NonRootNodeType):
    def __init__(
        self,
        type_name: str,
        variants: Sequence[NonRootNodeType],
        discriminator: Callable[[Any], str],
    ) -> None:
        super().__init__(type_name)
        if len(variants) < 2:
            raise ValueError(f"Union {type_name} needs at least two variants")
        self.variants = tuple(variants)
        self._discriminator = discriminator

    def variant_for(self, type_name: str, key: Optional[Key] = None) -> NonRootNodeType:
        for variant in self.variants:
            if variant.type_name == type_name:
                return variant

        raise UnknownVariant(
            f"No variant of {self.type_name} matches type name '{type_name}'",
            key,
            type_name=type_name,
            available=[v.type_name for v in self.variants],
        )

    def is_valid_flat_value(self, value: Any) -> bool:
        return is_non_root_key(value)

    def to_json_value(self, store: FlatStore, key: Key) -> Any:
        child_key, variant = self._resolve(store, key)
        return variant.to_json_value(store, child_key)

    def store(self, tx: Transaction, json: Any, parent_key: Key) -> Key:
        variant = self.variant_for(self._discriminator(json))
        return tx.insert(self.type_name, parent_key, lambda key: variant.store(tx, json, key))

    def child_types(self) -> Sequence[NodeType]:
        return self.variants

    def text_key(self, store: FlatStore, key: Key) -> Optional[Key]:
        child_key, variant = self._resolve(store, key)
        return variant.text_key(store, child_key)

    def render(self, store: FlatStore, key: Key) -> Optional[ET._Element]:
        child_key, variant = self._resolve(store, key)
        return variant.render(store, child_key)

    def _resolve(self, store: FlatStore, key: Key) -> tuple[Key, NonRootNodeType]:
        child_key = self.get_flat_value(store, key)
        return child_key, self.variant_for(store.get_type_name(child_key), child_key)
