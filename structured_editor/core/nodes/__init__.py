from __future__ import annotations

"""Node kinds describing how JSON-shaped documents map to the flat store.

The set of kinds is closed: primitive, literal, text, wrapped, array, object,
union and root. Concrete schemas compose them by construction (see
:mod:`structured_editor.core.nodes.schema`).
"""

from .base import NodeType, NonRootNodeType  # noqa: F401
from .primitive import PrimitiveNode, LiteralNode  # noqa: F401
from .text import TextNode  # noqa: F401
from .wrapped import WrappedNode  # noqa: F401
from .array import ArrayNode  # noqa: F401
from .object import ObjectNode  # noqa: F401
from .union import UnionNode  # noqa: F401
from .root import RootNode  # noqa: F401
from .registry import NodeTypeRegistry  # noqa: F401

__all__: list[str] = [
    "NodeType",
    "NonRootNodeType",
    "PrimitiveNode",
    "LiteralNode",
    "TextNode",
    "WrappedNode",
    "ArrayNode",
    "ObjectNode",
    "UnionNode",
    "RootNode",
    "NodeTypeRegistry",
]
