"""Shared builders and key lookups for the test-suite."""

from typing import List, Optional

from structured_editor.core.models import ROOT_KEY, Cursor, Point
from structured_editor.core.nodes import NodeTypeRegistry, RootNode
from structured_editor.core.nodes.schema import CONTENT, DOCUMENT, DOCUMENT_ITEM, ROOT
from structured_editor.core.store import FlatStore

# Schema with a content array directly under the root
CONTENT_ROOT = RootNode(CONTENT)
CONTENT_REGISTRY = NodeTypeRegistry.from_root(CONTENT_ROOT)


def paragraph(text: str) -> dict:
    return {"type": "paragraph", "value": text}


def exercise(question: str, answers: List[tuple]) -> dict:
    return {
        "type": "multipleChoiceExercise",
        "exercise": [paragraph(question)],
        "answers": [{"isCorrect": correct, "text": text} for correct, text in answers],
    }


def document_key(store: FlatStore) -> str:
    return ROOT.get_flat_value(store, ROOT_KEY)


def item_keys(store: FlatStore) -> List[str]:
    return list(DOCUMENT.get_flat_value(store, document_key(store)))


def item_text_key(store: FlatStore, index: int) -> str:
    """Return the text key of the paragraph at ``index`` of the document."""
    return DOCUMENT_ITEM.text_key(store, item_keys(store)[index])


def content_text_key(store: FlatStore, index: int) -> str:
    content_key = CONTENT_ROOT.get_flat_value(store, ROOT_KEY)
    paragraph_key = CONTENT.get_flat_value(store, content_key)[index]
    return CONTENT.child.text_key(store, paragraph_key)


def set_cursor(store: FlatStore, start: Point, end: Optional[Point] = None) -> None:
    cursor = Cursor(start, end if end is not None else start)
    store.update(lambda tx: tx.set_cursor(cursor))


def document_json(store: FlatStore) -> list:
    return ROOT.to_json_value(store)
