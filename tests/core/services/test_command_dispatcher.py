import logging

import pytest

from structured_editor.core.exceptions import TypeMismatch
from structured_editor.core.guards import is_string
from structured_editor.core.models import ROOT_KEY, Command, Cursor, Direction, Point
from structured_editor.core.models.command_journal import CommandJournal
from structured_editor.core.nodes.schema import TEXT
from structured_editor.core.services import CommandDispatcher

from tests.helpers import (
    CONTENT_REGISTRY,
    CONTENT_ROOT,
    content_text_key,
    document_json,
    document_key,
    exercise,
    item_keys,
    item_text_key,
    paragraph,
    set_cursor,
)


# ---------------------------------------------------------------------------
# Text edits
# ---------------------------------------------------------------------------

def test_insert_text_at_caret(make_document, dispatcher):
    store = make_document([paragraph("ab")])
    text_key = item_text_key(store, 0)
    set_cursor(store, Point(text_key, 1))

    assert dispatcher.insert_text(store, "X") is True

    assert document_json(store) == [paragraph("aXb")]
    assert store.get_cursor() == Cursor.caret(Point(text_key, 2))


def test_insert_text_into_bare_text_under_root(store, dispatcher):
    key = store.update(lambda tx: TEXT.store(tx, "ab", ROOT_KEY))
    set_cursor(store, Point(key, 1))

    assert dispatcher.dispatch(store, Command.INSERT_TEXT, "X") is True

    assert TEXT.to_json_value(store, key) == "aXb"
    assert store.get_cursor() == Cursor.caret(Point(key, 2))


def test_dispatch_without_cursor_is_a_handled_noop(make_document, dispatcher):
    store = make_document([paragraph("ab")])
    count = store.update_count

    assert dispatcher.insert_text(store, "X") is True

    assert document_json(store) == [paragraph("ab")]
    assert store.update_count == count + 1


def test_delete_backward_and_forward_inside_text(make_document, dispatcher):
    store = make_document([paragraph("abc")])
    text_key = item_text_key(store, 0)

    set_cursor(store, Point(text_key, 2))
    assert dispatcher.delete_backward(store) is True
    assert document_json(store) == [paragraph("ac")]
    assert store.get_cursor() == Cursor.caret(Point(text_key, 1))

    assert dispatcher.delete_forward(store) is True
    assert document_json(store) == [paragraph("a")]
    assert store.get_cursor() == Cursor.caret(Point(text_key, 1))


def test_delete_selection_inside_one_text(make_document, dispatcher):
    store = make_document([paragraph("abcdef")])
    text_key = item_text_key(store, 0)
    set_cursor(store, Point(text_key, 4), Point(text_key, 1))

    assert dispatcher.delete_selection(store) is True

    assert document_json(store) == [paragraph("aef")]
    assert store.get_cursor() == Cursor.caret(Point(text_key, 1))


def test_insert_replaces_selection(make_document, dispatcher):
    store = make_document([paragraph("abcd")])
    text_key = item_text_key(store, 0)
    set_cursor(store, Point(text_key, 1), Point(text_key, 3))

    assert dispatcher.insert_text(store, "X") is True

    assert document_json(store) == [paragraph("aXd")]
    assert store.get_cursor() == Cursor.caret(Point(text_key, 2))


def test_delete_with_selection_only_removes_selection(make_document, dispatcher):
    store = make_document([paragraph("abcd")])
    text_key = item_text_key(store, 0)
    set_cursor(store, Point(text_key, 1), Point(text_key, 3))

    assert dispatcher.delete_backward(store) is True

    assert document_json(store) == [paragraph("ad")]


# ---------------------------------------------------------------------------
# Bubbling
# ---------------------------------------------------------------------------

def test_backward_delete_at_first_character_is_unhandled(make_document, dispatcher):
    store = make_document([paragraph("abc"), paragraph("def")])
    set_cursor(store, Point(item_text_key(store, 0), 0))

    assert dispatcher.delete_backward(store) is False

    assert document_json(store) == [paragraph("abc"), paragraph("def")]


def test_forward_delete_at_end_of_last_paragraph_is_unhandled(make_document):
    store = make_document([paragraph("a"), paragraph("b")], root=CONTENT_ROOT)
    dispatcher = CommandDispatcher(CONTENT_REGISTRY)
    cursor = Cursor.caret(Point(content_text_key(store, 1), 1))
    store.update(lambda tx: tx.set_cursor(cursor))

    assert dispatcher.delete_forward(store) is False

    assert CONTENT_ROOT.to_json_value(store) == [paragraph("a"), paragraph("b")]
    assert store.get_cursor() == cursor


def test_backward_delete_joins_with_previous_paragraph(make_document, dispatcher):
    store = make_document([paragraph("ab"), paragraph("cd")])
    first_text = item_text_key(store, 0)
    set_cursor(store, Point(item_text_key(store, 1), 0))

    assert dispatcher.delete_backward(store) is True

    assert document_json(store) == [paragraph("abcd")]
    assert store.get_cursor() == Cursor.caret(Point(first_text, 2))


def test_forward_delete_joins_with_next_paragraph(make_document, dispatcher):
    store = make_document([paragraph("ab"), paragraph("cd"), paragraph("ef")])
    first_text = item_text_key(store, 0)
    set_cursor(store, Point(first_text, 2))

    assert dispatcher.delete_forward(store) is True

    assert document_json(store) == [paragraph("abcd"), paragraph("ef")]
    assert store.get_cursor() == Cursor.caret(Point(first_text, 2))


def test_join_inside_content_array(make_document):
    store = make_document([paragraph("a"), paragraph("b")], root=CONTENT_ROOT)
    dispatcher = CommandDispatcher(CONTENT_REGISTRY)
    set_cursor(store, Point(content_text_key(store, 1), 0))

    assert dispatcher.delete_backward(store) is True

    assert CONTENT_ROOT.to_json_value(store) == [paragraph("ab")]


def test_selection_across_paragraphs_is_merged(make_document, dispatcher):
    store = make_document([paragraph("abc"), paragraph("middle"), paragraph("xyz")])
    first_text = item_text_key(store, 0)
    set_cursor(store, Point(item_text_key(store, 2), 1), Point(first_text, 1))

    assert dispatcher.delete_selection(store) is True

    assert document_json(store) == [paragraph("ayz")]
    assert store.get_cursor() == Cursor.caret(Point(first_text, 1))


def test_typing_over_selection_across_paragraphs(make_document, dispatcher):
    store = make_document([paragraph("ab"), paragraph("cd")])
    first_text = item_text_key(store, 0)
    set_cursor(store, Point(first_text, 1), Point(item_text_key(store, 1), 1))

    assert dispatcher.insert_text(store, "X") is True

    assert document_json(store) == [paragraph("aXd")]
    assert store.get_cursor() == Cursor.caret(Point(first_text, 2))


def test_backward_delete_does_not_join_paragraph_into_exercise(make_document, dispatcher):
    json = [exercise("Q", [(True, "A")]), paragraph("after")]
    store = make_document(json)
    set_cursor(store, Point(item_text_key(store, 1), 0))

    assert dispatcher.delete_backward(store) is False

    assert document_json(store) == json


def test_backward_delete_at_start_of_answer_is_unhandled(make_document, dispatcher):
    json = [exercise("Q", [(True, "A"), (False, "B")])]
    store = make_document(json)
    answer_text = [k for k, v in store.get_value_entries() if str(v) == "B"][0]
    set_cursor(store, Point(answer_text, 0))

    assert dispatcher.delete_backward(store) is False

    assert document_json(store) == json


def test_insert_into_answer_text(make_document, dispatcher):
    store = make_document([exercise("Q", [(True, "A")])])
    answer_text = [k for k, v in store.get_value_entries() if str(v) == "A"][0]
    set_cursor(store, Point(answer_text, 1))

    assert dispatcher.insert_text(store, "nswer") is True

    assert document_json(store)[0]["answers"] == [{"isCorrect": True, "text": "Answer"}]


# ---------------------------------------------------------------------------
# Whole children
# ---------------------------------------------------------------------------

def test_backward_delete_between_children_removes_previous(make_document, dispatcher):
    store = make_document([paragraph("a"), paragraph("b"), paragraph("c")])
    doc = document_key(store)
    set_cursor(store, Point(doc, 1))

    assert dispatcher.delete_backward(store) is True

    assert document_json(store) == [paragraph("b"), paragraph("c")]
    assert store.get_cursor() == Cursor.caret(Point(doc, 0))


def test_forward_delete_past_last_child_is_unhandled(make_document, dispatcher):
    store = make_document([paragraph("a")])
    set_cursor(store, Point(document_key(store), 1))

    assert dispatcher.delete_forward(store) is False

    assert document_json(store) == [paragraph("a")]


def test_selection_of_children_is_removed(make_document, dispatcher):
    store = make_document([paragraph("a"), paragraph("b"), paragraph("c")])
    doc = document_key(store)
    kept = item_keys(store)[2]
    set_cursor(store, Point(doc, 0), Point(doc, 2))

    assert dispatcher.delete_selection(store) is True

    assert item_keys(store) == [kept]
    assert store.get_cursor() == Cursor.caret(Point(doc, 0))


# ---------------------------------------------------------------------------
# Failures and journalling
# ---------------------------------------------------------------------------

def test_precondition_violation_propagates_and_rolls_back(store, dispatcher, caplog):
    key = store.update(lambda tx: tx.insert("text", ROOT_KEY, lambda k: "not a text"))
    set_cursor(store, Point(key, 0))
    count = store.update_count

    with caplog.at_level(logging.ERROR):
        with pytest.raises(TypeMismatch):
            dispatcher.insert_text(store, "X")

    assert store.get_value(is_string, key) == "not a text"
    assert store.update_count == count
    assert any("Edit FAIL" in record.getMessage() for record in caplog.records)


def test_dispatch_logs_outcome(make_document, dispatcher, caplog):
    store = make_document([paragraph("a")])
    set_cursor(store, Point(item_text_key(store, 0), 0))

    with caplog.at_level(logging.INFO, logger="structured_editor.core.services.command_dispatcher"):
        dispatcher.delete_backward(store)

    messages = [record.getMessage() for record in caplog.records]
    assert any(m.startswith("Edit: delete") for m in messages)
    assert any(m.startswith("Edit noop") for m in messages)


def test_dispatcher_records_into_journal(make_document, registry):
    journal = CommandJournal(max_entries=10)
    dispatcher = CommandDispatcher(registry, journal)
    store = make_document([paragraph("ab")])
    text_key = item_text_key(store, 0)
    set_cursor(store, Point(text_key, 2))

    dispatcher.insert_text(store, "c")
    dispatcher.dispatch(store, Command.DELETE, Direction.BACKWARD)

    entries = journal.entries
    assert [e.command for e in entries] == ["insertText", "delete"]
    assert entries[0].payload == ["c"]
    assert entries[1].payload == ["backward"]
    assert entries[0].cursor == Cursor.caret(Point(text_key, 2)).to_dict()


# ---------------------------------------------------------------------------
# Non-ASCII text (offsets are characters, not UTF-8 bytes)
# ---------------------------------------------------------------------------

def test_insert_after_multibyte_characters(make_document, dispatcher):
    store = make_document([paragraph("é😀b")])
    text_key = item_text_key(store, 0)
    set_cursor(store, Point(text_key, 2))

    assert dispatcher.insert_text(store, "X") is True

    assert document_json(store) == [paragraph("é😀Xb")]
    assert store.get_cursor() == Cursor.caret(Point(text_key, 3))


def test_delete_backward_and_forward_over_emoji(make_document, dispatcher):
    store = make_document([paragraph("a😀b😀c")])
    text_key = item_text_key(store, 0)

    set_cursor(store, Point(text_key, 2))
    assert dispatcher.delete_backward(store) is True
    assert document_json(store) == [paragraph("ab😀c")]
    assert store.get_cursor() == Cursor.caret(Point(text_key, 1))

    set_cursor(store, Point(text_key, 2))
    assert dispatcher.delete_forward(store) is True
    assert document_json(store) == [paragraph("abc")]


def test_forward_delete_at_end_of_non_ascii_text_joins(make_document, dispatcher):
    store = make_document([paragraph("éé"), paragraph("x")])
    first_text = item_text_key(store, 0)
    set_cursor(store, Point(first_text, 2))

    assert dispatcher.delete_forward(store) is True

    assert document_json(store) == [paragraph("ééx")]
    assert store.get_cursor() == Cursor.caret(Point(first_text, 2))


def test_backward_delete_joins_after_emoji(make_document, dispatcher):
    store = make_document([paragraph("a😀"), paragraph("ü")])
    first_text = item_text_key(store, 0)
    set_cursor(store, Point(item_text_key(store, 1), 0))

    assert dispatcher.delete_backward(store) is True

    assert document_json(store) == [paragraph("a😀ü")]
    assert store.get_cursor() == Cursor.caret(Point(first_text, 2))


def test_selection_across_non_ascii_paragraphs(make_document, dispatcher):
    store = make_document([paragraph("ñandú"), paragraph("日本語")])
    first_text = item_text_key(store, 0)
    set_cursor(store, Point(first_text, 2), Point(item_text_key(store, 1), 1))

    assert dispatcher.delete_selection(store) is True

    assert document_json(store) == [paragraph("ña本語")]
    assert store.get_cursor() == Cursor.caret(Point(first_text, 2))


def test_insert_past_end_of_multibyte_text_is_unhandled(make_document, dispatcher):
    store = make_document([paragraph("é")])
    set_cursor(store, Point(item_text_key(store, 0), 2))

    assert dispatcher.insert_text(store, "X") is False

    assert document_json(store) == [paragraph("é")]
