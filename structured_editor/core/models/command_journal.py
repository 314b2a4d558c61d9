from __future__ import annotations

"""Command journaling model for cursor-driven edits.

This module defines a minimal, in-memory journal of dispatched editing
commands that can be recorded during a session and later replayed against
another store (for example a replica rebuilt from the same initial document).

Scope:
- Pure core model (no I/O).
- Conservative and robust: failures during replay are collected, not raised.
- JSON-serializable serialization format for persistence by callers.

Supported commands:
- "insertText":    payload ``[chunk: str]``
- "delete":        payload ``["forward" | "backward"]``
- "deleteBetween": payload ``[]``

Each entry also keeps the cursor that was current when the command was
dispatched; replay restores it before dispatching again.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

import time

from structured_editor.core.exceptions import EditorError
from structured_editor.core.models import Command, Cursor, Direction

if TYPE_CHECKING:
    # Import only for type checking to avoid runtime circular import
    from structured_editor.core.services.command_dispatcher import CommandDispatcher
    from structured_editor.core.store import FlatStore

__all__ = ["JournalEntry", "CommandJournal"]

_DEFAULT_MAX_ENTRIES = 500


@dataclass
class JournalEntry:
    """Single journal entry representing one dispatched command.

    Attributes
    ----------
    command
        Command value, one of: "insertText", "delete", "deleteBetween".
    payload
        Command payload. Must be JSON-serializable.
    cursor
        Serialized cursor at dispatch time, or None if no cursor was set.
    timestamp
        Unix epoch seconds when the entry was recorded.
    """
    command: str
    payload: List[Any]
    cursor: Optional[Dict[str, Any]]
    timestamp: float


class CommandJournal:
    """In-memory journal of editing commands with record/replay capabilities.

    Parameters
    ----------
    max_entries : int, optional
        Maximum number of entries to keep; oldest entries are discarded when
        the capacity is exceeded. Defaults to ``journal.max_entries`` of the
        editor configuration. Values lower than 1 are coerced to 1.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        if max_entries is None:
            max_entries = _configured_max_entries()
        self._max_entries: int = max(1, int(max_entries))
        self._entries: List[JournalEntry] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> List[JournalEntry]:
        return list(self._entries)

    def record(self, command: Command, payload: Sequence[Any], cursor: Optional[Cursor]) -> None:
        """Record a command with its payload and the cursor it applies to."""
        entry = JournalEntry(
            command=Command(command).value,
            payload=[p.value if isinstance(p, Direction) else p for p in payload],
            cursor=cursor.to_dict() if cursor is not None else None,
            timestamp=time.time(),
        )
        self._entries.append(entry)
        # Enforce capacity
        overflow = len(self._entries) - self._max_entries
        if overflow > 0:
            del self._entries[0:overflow]

    def replay(self, store: FlatStore, dispatcher: CommandDispatcher) -> Dict[str, Any]:
        """Replay all recorded commands against ``store``.

        Returns
        -------
        dict
            Structured report:
            {
              "applied": int,   # number of commands some node handled
              "skipped": int,   # number of commands skipped, declined or failed
              "errors": List[str],  # collected error messages
            }

        Behavior
        --------
        - Iterates a snapshot of the entries in order, so a dispatcher that
          records into this same journal does not extend the replay.
        - Restores each entry's cursor, then dispatches its command.
        - Does not raise for routine errors; collects messages and continues.
        """
        applied = 0
        skipped = 0
        errors: List[str] = []

        for idx, entry in enumerate(list(self._entries)):
            try:
                command = Command(entry.command)
                payload = _decode_payload(command, entry.payload)
            except ValueError:
                skipped += 1
                errors.append(f"[{idx}] {entry.command}: invalid payload {entry.payload!r}")
                continue

            try:
                cursor = Cursor.from_dict(entry.cursor) if entry.cursor is not None else None
                store.update(lambda tx: tx.set_cursor(cursor))
                if dispatcher.dispatch(store, command, *payload):
                    applied += 1
                else:
                    skipped += 1
                    errors.append(f"[{idx}] {entry.command} not handled")
            except (EditorError, KeyError) as exc:
                skipped += 1
                errors.append(f"[{idx}] {entry.command} exception: {exc}")

        return {"applied": applied, "skipped": skipped, "errors": errors}

    def clear(self) -> None:
        """Remove all entries from the journal."""
        self._entries.clear()

    def serialize(self) -> List[Dict[str, Any]]:
        """Serialize journal entries to a JSON-compatible list of dicts."""
        return [
            {
                "command": e.command,
                "payload": list(e.payload),
                "cursor": e.cursor,
                "timestamp": e.timestamp,
            }
            for e in self._entries
        ]

    @classmethod
    def deserialize(cls, data: List[Dict[str, Any]], max_entries: Optional[int] = None) -> CommandJournal:
        """Create a CommandJournal from serialized data.

        Malformed items are dropped; a malformed container yields an empty
        journal.
        """
        journal = cls(max_entries)
        if not isinstance(data, list):
            return journal
        for item in data:
            if not isinstance(item, dict):
                continue
            command = item.get("command")
            payload = item.get("payload")
            cursor = item.get("cursor")
            ts = item.get("timestamp")
            if (
                not isinstance(command, str)
                or not isinstance(payload, list)
                or not (cursor is None or isinstance(cursor, dict))
                or not isinstance(ts, (int, float))
            ):
                continue
            journal._entries.append(
                JournalEntry(command=command, payload=payload, cursor=cursor, timestamp=float(ts))
            )
        return journal


def _decode_payload(command: Command, payload: List[Any]) -> List[Any]:
    """Validate a stored payload and convert it back to dispatch arguments."""
    if command == Command.INSERT_TEXT:
        if len(payload) != 1 or not isinstance(payload[0], str):
            raise ValueError(f"insertText expects one string, got {payload!r}")
        return list(payload)
    if command == Command.DELETE:
        if len(payload) != 1:
            raise ValueError(f"delete expects a direction, got {payload!r}")
        return [Direction(payload[0])]
    if payload:
        raise ValueError(f"{command.value} takes no payload, got {payload!r}")
    return []


def _configured_max_entries() -> int:
    from structured_editor.config import ConfigManager

    journal_cfg = ConfigManager().get_editor_config().get("journal", {})
    return int(journal_cfg.get("max_entries", _DEFAULT_MAX_ENTRIES))
