from __future__ import annotations

"""Validators for flat values.

A validator is a plain predicate ``(value) -> bool``. Node types compose them
to describe the flat value shape they expect in the store.
"""

from typing import Any, Callable, Collection

from pycrdt import Text

from structured_editor.core.models import is_non_root_key

__all__ = [
    "Validator",
    "is_boolean",
    "is_string",
    "is_number",
    "is_text",
    "is_non_root_key",
    "is_list_of",
    "is_pair_of",
    "is_one_of",
    "is_equal_to",
]

Validator = Callable[[Any], bool]


def is_boolean(value: Any) -> bool:
    return isinstance(value, bool)


def is_string(value: Any) -> bool:
    return isinstance(value, str)


def is_number(value: Any) -> bool:
    # bool is an int subclass; booleans are not numbers here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_text(value: Any) -> bool:
    return isinstance(value, Text)


def is_list_of(item_validator: Validator) -> Validator:
    def validator(value: Any) -> bool:
        return isinstance(value, list) and all(item_validator(item) for item in value)

    return validator


def is_pair_of(first: Validator, second: Validator) -> Validator:
    def validator(value: Any) -> bool:
        return (
            isinstance(value, (list, tuple))
            and len(value) == 2
            and first(value[0])
            and second(value[1])
        )

    return validator


def is_one_of(allowed: Collection[Any]) -> Validator:
    def validator(value: Any) -> bool:
        return value in allowed

    return validator


def is_equal_to(expected: Any) -> Validator:
    def validator(value: Any) -> bool:
        # True == 1 in Python; keep literal booleans and numbers apart
        return isinstance(value, bool) == isinstance(expected, bool) and value == expected

    return validator
