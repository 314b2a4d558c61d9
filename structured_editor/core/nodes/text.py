from __future__ import annotations

"""Text leaf node backed by a replicated text.

The text node is where most edits land. Its handlers only accept ranges that
lie entirely inside the text (a single-component index path); anything else
is declined so that an ancestor can resolve it.
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

from lxml import etree as ET
from pycrdt import Text

from structured_editor.core.exceptions import TypeMismatch
from structured_editor.core.guards import is_string, is_text
from structured_editor.core.models import Command, Direction, IndexPath, Key, Point
from structured_editor.core.nodes.base import (
    CommandHandler,
    NonRootNodeType,
    as_offset,
    collapsed_offset,
)
from structured_editor.core.store.transaction import text_length

if TYPE_CHECKING:
    from structured_editor.core.store import FlatStore, Transaction

__all__ = ["TextNode"]

logger = logging.getLogger(__name__)


class TextNode(NonRootNodeType):
    tag = "span"

    def __init__(self, type_name: str = "text") -> None:
        super().__init__(type_name)

    def is_valid_flat_value(self, value: Any) -> bool:
        return is_text(value)

    def to_json_value(self, store: FlatStore, key: Key) -> str:
        return str(self.get_flat_value(store, key))

    def store(self, tx: Transaction, json: str, parent_key: Key) -> Key:
        if not is_string(json):
            raise TypeMismatch(f"Value {json!r} is not valid for {self.type_name}", value=json)
        return tx.insert(self.type_name, parent_key, lambda key: Text(json))

    def text_key(self, store: FlatStore, key: Key) -> Optional[Key]:
        return key

    def render(self, store: FlatStore, key: Key) -> Optional[ET._Element]:
        element = self._element(self.tag, key, data_type="text")
        element.text = self.to_json_value(store, key)
        return element

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def command_handlers(self) -> Dict[Command, CommandHandler]:
        return {
            Command.INSERT_TEXT: self._on_insert_text,
            Command.DELETE: self._on_delete,
            Command.DELETE_BETWEEN: self._on_delete_between,
        }

    def _on_insert_text(
        self,
        tx: Transaction,
        store: FlatStore,
        key: Key,
        start: IndexPath,
        end: IndexPath,
        chunk: str,
    ) -> bool:
        offset = collapsed_offset(start, end)
        if offset is None:
            return False

        text: Text = self.get_flat_value(store, key)
        if not 0 <= offset <= text_length(text):
            return False

        tx.insert_text(text, offset, chunk)
        tx.set_caret(Point(key, offset + len(chunk)))
        return True

    def _on_delete(
        self,
        tx: Transaction,
        store: FlatStore,
        key: Key,
        start: IndexPath,
        end: IndexPath,
        direction: Direction,
    ) -> bool:
        offset = collapsed_offset(start, end)
        if offset is None:
            return False

        text: Text = self.get_flat_value(store, key)
        if direction == Direction.BACKWARD:
            if not 0 < offset <= text_length(text):
                return False
            offset -= 1
        elif not 0 <= offset < text_length(text):
            return False

        tx.delete_text(text, offset, 1)
        tx.set_caret(Point(key, offset))
        return True

    def _on_delete_between(
        self,
        tx: Transaction,
        store: FlatStore,
        key: Key,
        start: IndexPath,
        end: IndexPath,
    ) -> bool:
        if len(start) != 1 or len(end) != 1:
            return False
        first, last = as_offset(start[0]), as_offset(end[0])
        if first is None or last is None:
            return False
        first, last = min(first, last), max(first, last)

        text: Text = self.get_flat_value(store, key)
        if first < 0 or last > text_length(text):
            return False

        tx.delete_text(text, first, last - first)
        tx.set_caret(Point(key, first))
        logger.debug("Deleted text range key=%s [%d, %d)", key, first, last)
        return True
