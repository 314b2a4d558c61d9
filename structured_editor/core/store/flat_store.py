from __future__ import annotations

"""Flat, replicated storage for the document tree.

A recursively nested document is kept in four parallel replicated maps of a
:class:`pycrdt.Doc`:

``values``
    key -> flat value (primitive, text handle, child key(s) or property pairs)
``parentKeys``
    key -> parent key (``None`` only for the root)
``typeNames``
    key -> node type name
``state``
    store metadata: ``updateCount``, ``lastKeyNumber`` and ``cursor``

Scope and guarantees:
- Reads never return an invalid value silently; they raise instead.
- All writes happen inside :meth:`FlatStore.update` through a
  :class:`Transaction`.
- ``updateCount`` grows by exactly one per committed top-level update.

Examples
--------
Basic usage:

    store = FlatStore()
    store.update(lambda tx: RootType.attach_root(tx, ROOT_KEY, json_document))
    print(store.update_count)

"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from pycrdt import Doc, Map

from structured_editor.core.exceptions import NotFound, TypeMismatch
from structured_editor.core.guards import Validator
from structured_editor.core.models import Cursor, Key
from structured_editor.core.store.transaction import Transaction

__all__ = ["FlatStore", "UpdateListener"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

UpdateListener = Callable[[bytes], None]


class FlatStore:
    """Tree store backed by the maps of a replicated document.

    Parameters
    ----------
    doc : pycrdt.Doc, optional
        Replicated document to build on. A fresh one is created when omitted;
        pass a shared document to attach to replicated state.
    """

    def __init__(self, doc: Optional[Doc] = None) -> None:
        self._doc = doc if doc is not None else Doc()
        self._values: Map = self._doc.get("values", type=Map)
        self._parent_keys: Map = self._doc.get("parentKeys", type=Map)
        self._type_names: Map = self._doc.get("typeNames", type=Map)
        self._state: Map = self._doc.get("state", type=Map)
        self._transaction: Optional[Transaction] = None
        self._subscriptions: Dict[UpdateListener, Any] = {}

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    @property
    def doc(self) -> Doc:
        return self._doc

    def get_cursor(self) -> Optional[Cursor]:
        raw = self._state.get("cursor")
        if raw is None:
            return None
        return Cursor.from_dict(raw)

    def get_value(self, validator: Validator, key: Key) -> Any:
        """Return the flat value of ``key``.

        Raises
        ------
        NotFound
            If ``key`` has no value.
        TypeMismatch
            If the stored value does not satisfy ``validator``.
        """
        value = self._values.get(key)

        if value is None:
            raise NotFound(f"Value for key {key} not found", key)
        if not validator(value):
            raise TypeMismatch(f"Value for key {key} has unexpected type", key, value)

        return value

    def get_type_name(self, key: Key) -> str:
        type_name = self._type_names.get(key)

        if type_name is None:
            raise NotFound(f"Type name for key {key} not found", key)

        return type_name

    def get_parent_key(self, key: Key) -> Optional[Key]:
        return self._parent_keys.get(key)

    def has(self, key: Key) -> bool:
        return key in self._values

    def get_value_entries(self) -> List[Tuple[Key, Any]]:
        return list(self._values.items())

    @property
    def update_count(self) -> int:
        # The replicated map may hand numbers back as floats.
        return int(self._state.get("updateCount") or 0)

    # ------------------------------------------------------------------
    # Change notification and transport
    # ------------------------------------------------------------------
    def add_update_listener(self, listener: UpdateListener) -> None:
        """Call ``listener`` with the binary update of every committed change."""
        if listener in self._subscriptions:
            return

        def on_transaction(event: Any) -> None:
            listener(event.update)

        self._subscriptions[listener] = self._doc.observe(on_transaction)

    def remove_update_listener(self, listener: UpdateListener) -> None:
        subscription = self._subscriptions.pop(listener, None)
        if subscription is not None:
            self._doc.unobserve(subscription)

    def encode_state(self) -> bytes:
        """Return the full document state as a binary update."""
        return self._doc.get_update()

    def apply_update(self, update: bytes) -> None:
        """Merge a binary update produced by another replica."""
        self._doc.apply_update(update)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def update(self, update_fn: Callable[[Transaction], T]) -> T:
        """Run ``update_fn`` with a transaction and commit it atomically.

        Re-entrant: a call made while a transaction is open reuses it instead
        of opening a second atomic scope. The outermost call increments
        ``updateCount`` once on normal completion. When the body raises, every
        write it made is reverted and the counter is left untouched.
        """
        if self._transaction is not None:
            return update_fn(self._transaction)

        with self._doc.transaction():
            tx = Transaction(
                self._values,
                self._parent_keys,
                self._type_names,
                self._state,
                self._generate_next_key,
            )
            self._transaction = tx
            try:
                result = update_fn(tx)
            except Exception as exc:
                logger.warning("Update aborted, rolling back: %s", exc)
                tx.rollback()
                raise
            finally:
                self._transaction = None

            self._increment_update_count()

        logger.debug("Update committed update_count=%d", self.update_count)
        return result

    # --------------------------------------------------------------- Internals

    def _increment_update_count(self) -> None:
        self._state["updateCount"] = self.update_count + 1

    def _generate_next_key(self) -> Key:
        current = int(self._state.get("lastKeyNumber") or 0)
        next_number = current + 1
        self._state["lastKeyNumber"] = next_number

        return str(next_number)
