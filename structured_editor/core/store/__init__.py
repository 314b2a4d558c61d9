from __future__ import annotations

"""Flat replicated tree store and its transaction capability."""

from .flat_store import FlatStore  # noqa: F401
from .transaction import Transaction  # noqa: F401

__all__: list[str] = [
    "FlatStore",
    "Transaction",
]
