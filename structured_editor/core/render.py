from __future__ import annotations

"""Serialise the rendering hook's output for a presentation layer."""

from lxml import etree as ET

from structured_editor.core.models import ROOT_KEY, Key
from structured_editor.core.nodes import NodeTypeRegistry
from structured_editor.core.store import FlatStore

__all__ = ["render_document"]


def render_document(store: FlatStore, registry: NodeTypeRegistry, key: Key = ROOT_KEY) -> str:
    """Render the subtree at ``key`` and return it as an HTML string.

    Every element carries ``id`` and ``data-key`` attributes with its store
    key; text leaves additionally carry ``data-type="text"`` so that a
    selection layer can map positions back to points.
    """
    element = registry.for_key(store, key).render(store, key)
    if element is None:
        return ""
    return ET.tostring(element, encoding="unicode", method="html")
