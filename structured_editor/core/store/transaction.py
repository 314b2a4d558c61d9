from __future__ import annotations

"""Write capability handed to the body of :meth:`FlatStore.update`.

A :class:`Transaction` is valid only while the enclosing ``update`` call runs.
It is the sole writer of the store's maps during its lifetime and keeps an
in-memory journal of every write so that a failing body can be rolled back
before the replicated transaction commits.

Design principles
-----------------
- Every write goes through :meth:`Transaction._set` or the text helpers, which
  record how to revert it.
- Key generation is not journalled: keys handed out by a rolled back
  transaction are never reissued.
- Reads made after a write inside the same transaction observe that write.
"""

import logging
from typing import Any, Callable, List, Optional, Union

from pycrdt import Map, Text

from structured_editor.core.exceptions import NotFound, RootAlreadyExists, TypeMismatch
from structured_editor.core.guards import Validator
from structured_editor.core.models import ROOT_KEY, Cursor, Key, Point

__all__ = ["Transaction", "text_length"]

logger = logging.getLogger(__name__)

_MISSING = object()


class Transaction:
    """Atomic batch of writes against a :class:`FlatStore`.

    Parameters
    ----------
    values, parent_keys, type_names, state
        The four replicated maps of the store.
    generate_key
        Callable allocating the next non-root key.
    """

    def __init__(
        self,
        values: Map,
        parent_keys: Map,
        type_names: Map,
        state: Map,
        generate_key: Callable[[], Key],
    ) -> None:
        self._values = values
        self._parent_keys = parent_keys
        self._type_names = type_names
        self._state = state
        self._generate_key = generate_key
        self._undo_log: List[Callable[[], None]] = []

    # --------------------------------------------------------------------- API

    def insert(
        self,
        type_name: str,
        parent_key: Key,
        create_value: Callable[[Key], Any],
    ) -> Key:
        """Allocate a key, build its value and record value, parent and type name.

        ``create_value`` receives the new key so that it can insert children
        with the new key as their parent before the value itself is stored.
        """
        key = self._generate_key()
        value = create_value(key)

        self._set(self._values, key, value)
        self._set(self._parent_keys, key, parent_key)
        self._set(self._type_names, key, type_name)

        logger.debug("Insert %s key=%s parent=%s", type_name, key, parent_key)
        return key

    def update(
        self,
        validator: Validator,
        key: Key,
        update_fn: Union[Any, Callable[[Any], Any]],
    ) -> None:
        """Replace the value of ``key`` with a literal or the result of ``update_fn``.

        Raises
        ------
        NotFound
            If ``key`` has no value.
        TypeMismatch
            If the current value does not satisfy ``validator``.
        """
        current = self._values.get(key)
        if current is None:
            raise NotFound(f"Value for key {key} not found", key)
        if not validator(current):
            raise TypeMismatch(f"Value for key {key} has unexpected type", key, current)

        new_value = update_fn(current) if callable(update_fn) else update_fn
        self._set(self._values, key, new_value)

    def attach_root(self, root_key: Key, child_key: Key) -> Key:
        """Bind ``root_key`` to ``child_key`` with a null parent and type name ``root``."""
        if root_key in self._values:
            raise RootAlreadyExists(f"Root key {root_key} already exists in the store", root_key)

        self._set(self._values, root_key, child_key)
        self._set(self._parent_keys, root_key, None)
        self._set(self._type_names, root_key, ROOT_KEY)

        logger.debug("Attach root key=%s child=%s", root_key, child_key)
        return root_key

    def set_cursor(self, cursor: Optional[Cursor]) -> None:
        self._set(self._state, "cursor", cursor.to_dict() if cursor is not None else None)

    def set_caret(self, point: Point) -> None:
        self.set_cursor(Cursor.caret(point))

    def insert_text(self, text: Text, index: int, chunk: str) -> None:
        """Insert ``chunk`` into a replicated text at character ``index``."""
        if not chunk:
            return
        start = _byte_offset(text, index)
        text.insert(start, chunk)
        stop = start + len(chunk.encode("utf-8"))

        def undo() -> None:
            del text[start:stop]

        self._undo_log.append(undo)

    def delete_text(self, text: Text, index: int, length: int) -> None:
        """Delete ``length`` characters of a replicated text starting at character ``index``."""
        if length <= 0:
            return
        content = str(text)
        removed = content[index:index + length]
        start = len(content[:index].encode("utf-8"))
        del text[start:start + len(removed.encode("utf-8"))]

        def undo() -> None:
            text.insert(start, removed)

        self._undo_log.append(undo)

    # --------------------------------------------------------------- Internals

    def rollback(self) -> None:
        """Revert every journalled write, newest first."""
        count = len(self._undo_log)
        while self._undo_log:
            undo = self._undo_log.pop()
            undo()
        logger.debug("Rolled back %d write(s)", count)

    def _set(self, ymap: Map, key: str, value: Any) -> None:
        previous: Any = ymap[key] if key in ymap else _MISSING
        snapshot_text = isinstance(previous, Text)
        if snapshot_text:
            # An integrated text cannot be re-inserted; keep its content instead.
            previous = str(previous)

        def restore() -> Any:
            return Text(previous) if snapshot_text else previous

        ymap[key] = value

        def undo() -> None:
            if previous is _MISSING:
                if key in ymap:
                    del ymap[key]
            else:
                ymap[key] = restore()

        self._undo_log.append(undo)


def text_length(text: Text) -> int:
    """Return the length of a replicated text in characters.

    ``len()`` of a :class:`pycrdt.Text` counts UTF-8 bytes; points and
    handlers work in characters.
    """
    return len(str(text))


def _byte_offset(text: Text, index: int) -> int:
    return len(str(text)[:index].encode("utf-8"))
