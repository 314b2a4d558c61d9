from __future__ import annotations

"""Shared interface of all node kinds.

Every node kind implements the same capability set over a
:class:`FlatStore` and a :class:`Transaction`:

- validate its flat value (:meth:`NodeType.is_valid_flat_value`)
- encode JSON into the store (:meth:`NonRootNodeType.store`)
- decode the stored subtree back to JSON (:meth:`NodeType.to_json_value`)
- locate a child's index (:meth:`NodeType.get_index_within`)
- optionally handle editing commands (:meth:`NodeType.get_command_handler`)
- render a display representation (:meth:`NodeType.render`)

Kinds are composed by construction: a wrapping kind holds a reference to its
child kind instead of merging behaviour at runtime.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Sequence

from lxml import etree as ET

from structured_editor.core.exceptions import MissingParent
from structured_editor.core.models import Command, Index, IndexPath, Key

if TYPE_CHECKING:
    from structured_editor.core.store import FlatStore, Transaction

__all__ = ["CommandHandler", "NodeType", "NonRootNodeType"]

# (tx, store, key, start, end, *payload) -> handled
CommandHandler = Callable[..., bool]


class NodeType(ABC):
    """Base class of the closed set of node kinds.

    Attributes
    ----------
    type_name
        Identifier recorded in the store's ``typeNames`` map for every key of
        this kind.
    tag
        HTML tag used by the default rendering hook.
    """

    tag: str = "div"

    def __init__(self, type_name: str) -> None:
        self.type_name = type_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.type_name!r})"

    # ------------------------------------------------------------------
    # Flat value access
    # ------------------------------------------------------------------
    @abstractmethod
    def is_valid_flat_value(self, value: Any) -> bool:
        """Return True if ``value`` has the flat shape of this kind."""

    def get_flat_value(self, store: FlatStore, key: Key) -> Any:
        return store.get_value(self.is_valid_flat_value, key)

    def get_parent_key(self, store: FlatStore, key: Key) -> Optional[Key]:
        return store.get_parent_key(key)

    @abstractmethod
    def to_json_value(self, store: FlatStore, key: Key) -> Any:
        """Decode the subtree rooted at ``key`` into a plain JSON value."""

    def get_index_within(self, store: FlatStore, key: Key, child_key: Key) -> Index:
        """Return the position of ``child_key`` inside ``key``.

        Kinds with at most one child have no index and return None.
        """
        return None

    def child_types(self) -> Sequence[NodeType]:
        return ()

    def text_key(self, store: FlatStore, key: Key) -> Optional[Key]:
        """Return the key of the single text this node edits as, if any.

        Used by containers to join adjacent children. Kinds that are not
        backed by exactly one text return None.
        """
        return None

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def command_handlers(self) -> Dict[Command, CommandHandler]:
        return {}

    def get_command_handler(self, command: Command) -> Optional[CommandHandler]:
        return self.command_handlers().get(command)

    # ------------------------------------------------------------------
    # Rendering hook
    # ------------------------------------------------------------------
    def render(self, store: FlatStore, key: Key) -> Optional[ET._Element]:
        """Return a display element for ``key``, tagged with its key.

        The default renders the node's tag with the rendered children appended.
        """
        element = self._element(self.tag, key)
        for child in self._render_children(store, key):
            element.append(child)
        return element

    def _render_children(self, store: FlatStore, key: Key) -> Sequence[ET._Element]:
        return ()

    def _element(self, tag: str, key: Key, **attrib: str) -> ET._Element:
        element = ET.Element(tag, id=key)
        element.set("data-key", key)
        for name, value in attrib.items():
            element.set(name.replace("_", "-"), value)
        return element


class NonRootNodeType(NodeType):
    """Node kind that always lives below some parent key."""

    def get_parent_key(self, store: FlatStore, key: Key) -> Key:
        parent_key = super().get_parent_key(store, key)

        if parent_key is None:
            raise MissingParent(f"Non-root node {key} has no parent", key)

        return parent_key

    @abstractmethod
    def store(self, tx: Transaction, json: Any, parent_key: Key) -> Key:
        """Encode ``json`` below ``parent_key`` and return the new key."""


def collapsed_offset(start: IndexPath, end: IndexPath) -> Optional[int]:
    """Return the offset of a collapsed single-level range, or None."""
    if len(start) != 1 or start != end:
        return None
    return as_offset(start[0])


def as_offset(index: Index) -> Optional[int]:
    if isinstance(index, int) and not isinstance(index, bool):
        return index
    return None
