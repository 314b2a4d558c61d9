from __future__ import annotations

"""High-level editing services built on the store, node kinds and paths."""

from .command_dispatcher import CommandDispatcher  # noqa: F401

__all__: list[str] = [
    "CommandDispatcher",
]
