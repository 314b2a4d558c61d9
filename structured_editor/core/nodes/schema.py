from __future__ import annotations

"""Concrete document schema: paragraphs and multiple-choice exercises.

JSON example::

    [
        {"type": "paragraph", "value": "Hello"},
        {
            "type": "multipleChoiceExercise",
            "exercise": [{"type": "paragraph", "value": "2 + 2 = ?"}],
            "answers": [
                {"isCorrect": True, "text": "4"},
                {"isCorrect": False, "text": "5"},
            ],
        },
    ]
"""

from typing import TYPE_CHECKING, Any, Optional

from lxml import etree as ET

from structured_editor.core.guards import is_boolean
from structured_editor.core.models import Key
from structured_editor.core.nodes.array import ArrayNode
from structured_editor.core.nodes.object import ObjectNode
from structured_editor.core.nodes.primitive import LiteralNode, PrimitiveNode
from structured_editor.core.nodes.registry import NodeTypeRegistry
from structured_editor.core.nodes.root import RootNode
from structured_editor.core.nodes.text import TextNode
from structured_editor.core.nodes.union import UnionNode
from structured_editor.core.nodes.wrapped import WrappedNode

if TYPE_CHECKING:
    from structured_editor.core.store import FlatStore

__all__ = [
    "TEXT",
    "BOOLEAN",
    "PARAGRAPH",
    "CONTENT",
    "MULTIPLE_CHOICE_ANSWER",
    "MULTIPLE_CHOICE_ANSWERS",
    "MULTIPLE_CHOICE_EXERCISE",
    "DOCUMENT_ITEM",
    "DOCUMENT",
    "ROOT",
    "DOCUMENT_REGISTRY",
]


class BooleanNode(PrimitiveNode):
    """Boolean primitive rendered as a checkbox."""

    tag = "input"

    def __init__(self, type_name: str = "boolean") -> None:
        super().__init__(type_name, is_boolean)

    def render(self, store: FlatStore, key: Key) -> Optional[ET._Element]:
        element = self._element(self.tag, key, type="checkbox")
        if self.get_flat_value(store, key):
            element.set("checked", "checked")
        return element


class ExerciseNode(ObjectNode):
    """Multiple-choice exercise rendered as a fieldset with a legend."""

    def _render_children(self, store: FlatStore, key: Key) -> Any:
        legend = ET.Element("legend")
        ET.SubElement(legend, "strong").text = "Multiple Choice Exercise"
        return [legend, *super()._render_children(store, key)]


TEXT = TextNode("text")

BOOLEAN = BooleanNode("boolean")

PARAGRAPH = WrappedNode("paragraph", TEXT, tag="p")

CONTENT = ArrayNode("content", PARAGRAPH)

MULTIPLE_CHOICE_ANSWER = ObjectNode(
    "multipleChoiceAnswer",
    {"isCorrect": BOOLEAN, "text": TEXT},
    key_order=["isCorrect", "text"],
    tag="li",
)

MULTIPLE_CHOICE_ANSWERS = ArrayNode("multipleChoiceAnswers", MULTIPLE_CHOICE_ANSWER, tag="ul")

MULTIPLE_CHOICE_EXERCISE = ExerciseNode(
    "multipleChoiceExercise",
    {
        "type": LiteralNode("literal:multipleChoiceExercise", "multipleChoiceExercise"),
        "exercise": CONTENT,
        "answers": MULTIPLE_CHOICE_ANSWERS,
    },
    key_order=["type", "exercise", "answers"],
    tag="fieldset",
)

DOCUMENT_ITEM = UnionNode(
    "documentItem",
    [PARAGRAPH, MULTIPLE_CHOICE_EXERCISE],
    lambda json: json["type"],
)

DOCUMENT = ArrayNode("document", DOCUMENT_ITEM)

ROOT = RootNode(DOCUMENT)

DOCUMENT_REGISTRY = NodeTypeRegistry.from_root(ROOT)
