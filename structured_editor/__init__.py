"""Top-level package of the structured editor core.

The document tree lives in a flat, replicated store (:class:`FlatStore`),
is described by a closed set of node kinds (:mod:`structured_editor.core.nodes`)
and is edited through cursor-driven commands (:class:`CommandDispatcher`).
Front-ends should only depend on the public API exposed here rather than
importing internal modules directly.
"""

from .core.models import ROOT_KEY, Command, Cursor, Direction, Point
from .core.nodes.schema import DOCUMENT_REGISTRY, ROOT
from .core.services import CommandDispatcher
from .core.store import FlatStore, Transaction

__all__: list[str] = [
    "ROOT_KEY",
    "Command",
    "Cursor",
    "Direction",
    "Point",
    "DOCUMENT_REGISTRY",
    "ROOT",
    "CommandDispatcher",
    "FlatStore",
    "Transaction",
]
