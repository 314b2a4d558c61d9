from __future__ import annotations

"""Cursor-driven command dispatch with ancestor bubbling.

This module turns an editing command (insert text, delete) plus the store's
current cursor into a call on the node kind best placed to perform it.

Scope and guarantees:
- Runs inside one store update; handlers receive the open transaction.
- Handlers return True when they performed the edit (and moved the cursor)
  and False when the edit does not apply at their level. A declined command
  is retried on the next ancestor with its index prepended to the local
  index paths, until the root is exhausted.
- A command no node accepts makes :meth:`CommandDispatcher.dispatch` return
  False; it never raises for that case.
- Precondition violations (:class:`EditorError`) propagate and roll back the
  update.

Examples
--------
Basic usage:

    dispatcher = CommandDispatcher(DOCUMENT_REGISTRY)
    if not dispatcher.insert_text(store, "x"):
        logger.info("Nothing to insert into")

"""

import logging
from typing import TYPE_CHECKING, Any, Optional, Sequence

from structured_editor.core.exceptions import EditorError
from structured_editor.core.models import Command, Direction, IndexPath
from structured_editor.core.nodes import NodeTypeRegistry
from structured_editor.core.path import Path, common_ancestor_path, local_index_path, path_to_root
from structured_editor.core.store import FlatStore, Transaction

if TYPE_CHECKING:
    from structured_editor.core.models.command_journal import CommandJournal

__all__ = ["CommandDispatcher"]

logger = logging.getLogger(__name__)


class CommandDispatcher:
    """Dispatch editing commands to node kinds using the store's cursor.

    Parameters
    ----------
    registry
        Registry resolving stored type names to node kinds.
    journal
        Optional journal recording every top-level dispatch for later replay.
    """

    def __init__(self, registry: NodeTypeRegistry, journal: Optional[CommandJournal] = None) -> None:
        self._registry = registry
        self._journal = journal

    @property
    def registry(self) -> NodeTypeRegistry:
        return self._registry

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def dispatch(self, store: FlatStore, command: Command, *payload: Any) -> bool:
        """Apply ``command`` at the current cursor.

        Returns
        -------
        bool
            True if some node handled the command (or there is no cursor),
            False if the command bubbled past the root unhandled.
        """
        command = Command(command)
        logger.info("Edit: %s payload=%r", command.value, payload)

        if self._journal is not None:
            self._journal.record(command, payload, store.get_cursor())

        try:
            handled = store.update(lambda tx: self._dispatch(tx, store, command, payload))
        except EditorError as exc:
            logger.error("Edit FAIL: %s error=%s", command.value, exc, exc_info=True)
            raise

        if handled:
            logger.info("Edit OK: %s", command.value)
        else:
            logger.info("Edit noop: %s not handled by any node", command.value)
        return handled

    def insert_text(self, store: FlatStore, chunk: str) -> bool:
        return self.dispatch(store, Command.INSERT_TEXT, chunk)

    def delete_backward(self, store: FlatStore) -> bool:
        return self.dispatch(store, Command.DELETE, Direction.BACKWARD)

    def delete_forward(self, store: FlatStore) -> bool:
        return self.dispatch(store, Command.DELETE, Direction.FORWARD)

    def delete_selection(self, store: FlatStore) -> bool:
        return self.dispatch(store, Command.DELETE_BETWEEN)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _dispatch(
        self,
        tx: Transaction,
        store: FlatStore,
        command: Command,
        payload: Sequence[Any],
    ) -> bool:
        cursor = store.get_cursor()
        if cursor is None:
            return True

        if not cursor.is_collapsed and command != Command.DELETE_BETWEEN:
            if not self._dispatch(tx, store, Command.DELETE_BETWEEN, ()):
                return False
            if command == Command.DELETE:
                return True
            cursor = store.get_cursor()
            if cursor is None:
                return True

        start_path = path_to_root(store, self._registry, cursor.start)
        end_path = path_to_root(store, self._registry, cursor.end)
        common = common_ancestor_path(start_path, end_path)

        if common:
            target_key = common[-1].key
            start_index = local_index_path(start_path, len(common))
            end_index = local_index_path(end_path, len(common))
            ancestors: Path = common[:-1]
        elif start_path:
            target_key = start_path[0].key
            start_index = [frame.index for frame in start_path]
            end_index = [frame.index for frame in end_path]
            ancestors = []
        else:
            return False

        while True:
            if self._try_handler(tx, store, command, target_key, start_index, end_index, payload):
                return True
            if not ancestors:
                return False

            frame = ancestors.pop()
            start_index = [frame.index, *start_index]
            end_index = [frame.index, *end_index]
            target_key = frame.key

    def _try_handler(
        self,
        tx: Transaction,
        store: FlatStore,
        command: Command,
        key: str,
        start: IndexPath,
        end: IndexPath,
        payload: Sequence[Any],
    ) -> bool:
        node_type = self._registry.for_key(store, key)
        handler = node_type.get_command_handler(command)
        if handler is None:
            return False

        handled = handler(tx, store, key, list(start), list(end), *payload)
        logger.debug(
            "Command %s at %s key=%s start=%r end=%r handled=%s",
            command.value, node_type.type_name, key, start, end, handled,
        )
        return handled
