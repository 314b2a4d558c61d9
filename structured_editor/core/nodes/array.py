from __future__ import annotations

"""Array node kind: an ordered list of children of one kind.

Besides encode/decode the array resolves edits that cross its children:

- When both local index paths end at the array itself (the selection
  boundary addresses the array's own children), ``delete`` and
  ``deleteBetween`` remove whole children. A collapsed ``delete`` is widened
  by one child in the deletion direction; out-of-bounds or empty ranges are
  declined.
- When the paths reach into two text-bearing children, the array joins them:
  the text after the end point is moved to the start point and the children
  in between are removed. A collapsed ``delete`` at the start (backward) or
  end (forward) of a child joins it with its neighbour. With no neighbour the
  array declines so that bubbling continues.

Removed child keys stay in the flat store; only the references go away.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from lxml import etree as ET

from structured_editor.core.exceptions import NotFound
from structured_editor.core.guards import is_list_of, is_text
from structured_editor.core.models import Command, Direction, Index, IndexPath, Key, Point, is_non_root_key
from structured_editor.core.nodes.base import CommandHandler, NodeType, NonRootNodeType, as_offset
from structured_editor.core.store.transaction import text_length

if TYPE_CHECKING:
    from structured_editor.core.store import FlatStore, Transaction

__all__ = ["ArrayNode"]

logger = logging.getLogger(__name__)

_is_key_list = is_list_of(is_non_root_key)


class ArrayNode(NonRootNodeType):
    def __init__(self, type_name: str, child: NonRootNodeType, tag: str = "div") -> None:
        super().__init__(type_name)
        self.child = child
        self.tag = tag

    def is_valid_flat_value(self, value: Any) -> bool:
        return _is_key_list(value)

    def to_json_value(self, store: FlatStore, key: Key) -> List[Any]:
        return [self.child.to_json_value(store, child_key) for child_key in self.get_flat_value(store, key)]

    def store(self, tx: Transaction, json: Sequence[Any], parent_key: Key) -> Key:
        return tx.insert(
            self.type_name,
            parent_key,
            lambda key: [self.child.store(tx, item, key) for item in json],
        )

    def get_index_within(self, store: FlatStore, key: Key, child_key: Key) -> Index:
        child_keys = self.get_flat_value(store, key)
        if child_key not in child_keys:
            raise NotFound(f"Child key {child_key} not found in array {key}", key)
        return child_keys.index(child_key)

    def child_types(self) -> Sequence[NodeType]:
        return (self.child,)

    def _render_children(self, store: FlatStore, key: Key) -> Sequence[ET._Element]:
        children = []
        for child_key in self.get_flat_value(store, key):
            rendered = self.child.render(store, child_key)
            if rendered is not None:
                children.append(rendered)
        return children

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def command_handlers(self) -> Dict[Command, CommandHandler]:
        return {
            Command.DELETE: self._on_delete,
            Command.DELETE_BETWEEN: self._on_delete_between,
        }

    def _on_delete(
        self,
        tx: Transaction,
        store: FlatStore,
        key: Key,
        start: IndexPath,
        end: IndexPath,
        direction: Direction,
    ) -> bool:
        if len(start) <= 1 and len(end) <= 1:
            return self._remove_children(tx, store, key, start, end, direction)
        if start != end:
            return False
        return self._join_at_boundary(tx, store, key, start, direction)

    def _on_delete_between(
        self,
        tx: Transaction,
        store: FlatStore,
        key: Key,
        start: IndexPath,
        end: IndexPath,
    ) -> bool:
        if len(start) <= 1 and len(end) <= 1:
            return self._remove_children(tx, store, key, start, end, None)
        return self._join_range(tx, store, key, start, end)

    # --------------------------------------------------------------- Internals

    def _remove_children(
        self,
        tx: Transaction,
        store: FlatStore,
        key: Key,
        start: IndexPath,
        end: IndexPath,
        direction: Optional[Direction],
    ) -> bool:
        child_keys: List[Key] = self.get_flat_value(store, key)

        first = as_offset(start[0]) if start and start[0] is not None else 0
        last = as_offset(end[0]) if end and end[0] is not None else len(child_keys)
        if first is None or last is None:
            return False
        first, last = min(first, last), max(first, last)

        if first == last:
            if direction == Direction.BACKWARD:
                first -= 1
            elif direction == Direction.FORWARD:
                last += 1

        if first < 0 or last > len(child_keys) or first >= last:
            return False

        tx.update(self.is_valid_flat_value, key, child_keys[:first] + child_keys[last:])
        tx.set_caret(Point(key, first))
        logger.debug("Removed children key=%s [%d, %d)", key, first, last)
        return True

    def _join_at_boundary(
        self,
        tx: Transaction,
        store: FlatStore,
        key: Key,
        path: IndexPath,
        direction: Direction,
    ) -> bool:
        index = as_offset(path[0])
        offset = _leaf_offset(path[1:])
        child_keys: List[Key] = self.get_flat_value(store, key)
        if index is None or offset is None or not 0 <= index < len(child_keys):
            return False

        if direction == Direction.BACKWARD:
            if offset != 0 or index == 0:
                return False
            previous = self._child_text(store, child_keys[index - 1])
            if previous is None:
                return False
            return self._join(tx, store, key, child_keys, index - 1, text_length(previous), index, 0)

        current = self._child_text(store, child_keys[index])
        if current is None or offset != text_length(current) or index >= len(child_keys) - 1:
            return False
        return self._join(tx, store, key, child_keys, index, offset, index + 1, 0)

    def _join_range(
        self,
        tx: Transaction,
        store: FlatStore,
        key: Key,
        start: IndexPath,
        end: IndexPath,
    ) -> bool:
        if not start or not end:
            return False
        first, last = as_offset(start[0]), as_offset(end[0])
        first_offset, last_offset = _leaf_offset(start[1:]), _leaf_offset(end[1:])
        if None in (first, last, first_offset, last_offset) or first == last:
            return False
        if first > last:
            first, last = last, first
            first_offset, last_offset = last_offset, first_offset

        child_keys: List[Key] = self.get_flat_value(store, key)
        if first < 0 or last >= len(child_keys):
            return False
        return self._join(tx, store, key, child_keys, first, first_offset, last, last_offset)

    def _join(
        self,
        tx: Transaction,
        store: FlatStore,
        key: Key,
        child_keys: List[Key],
        first: int,
        first_offset: int,
        last: int,
        last_offset: int,
    ) -> bool:
        """Keep child ``first`` up to ``first_offset`` followed by child ``last`` from ``last_offset``."""
        first_text_key = self.child.text_key(store, child_keys[first])
        last_text_key = self.child.text_key(store, child_keys[last])
        if first_text_key is None or last_text_key is None:
            return False

        first_text = store.get_value(is_text, first_text_key)
        last_text = store.get_value(is_text, last_text_key)
        if not 0 <= first_offset <= text_length(first_text) or not 0 <= last_offset <= text_length(last_text):
            return False

        tail = str(last_text)[last_offset:]
        tx.delete_text(first_text, first_offset, text_length(first_text) - first_offset)
        tx.insert_text(first_text, first_offset, tail)
        tx.update(self.is_valid_flat_value, key, child_keys[:first + 1] + child_keys[last + 1:])
        tx.set_caret(Point(first_text_key, first_offset))

        logger.debug("Joined children key=%s first=%d last=%d", key, first, last)
        return True

    def _child_text(self, store: FlatStore, child_key: Key) -> Optional[Any]:
        text_key = self.child.text_key(store, child_key)
        if text_key is None:
            return None
        return store.get_value(is_text, text_key)


def _leaf_offset(rest: IndexPath) -> Optional[int]:
    """Return the text offset of a path that only passes through single-child kinds."""
    if not rest or any(index is not None for index in rest[:-1]):
        return None
    return as_offset(rest[-1])
