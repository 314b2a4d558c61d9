from __future__ import annotations

"""Exception classes raised by the editor core.

Every exception here signals a precondition violation (caller logic error or
a store that diverged from the schema). They are raised synchronously and
abort the enclosing transaction. Expected, recoverable outcomes such as a
command handler declining an edit are plain ``False`` returns and never show
up in this module.
"""

from typing import Optional


__all__ = [
    "EditorError",
    "NotFound",
    "TypeMismatch",
    "MissingParent",
    "RootAlreadyExists",
    "UnknownVariant",
    "UnknownNodeType",
]


class EditorError(Exception):
    """Base exception for all editor core errors.

    All core exceptions inherit from this base class so that callers can
    guard a whole editing session with a single ``except`` clause.
    """

    def __init__(self, message: str, key: Optional[str] = None) -> None:
        super().__init__(message)
        self.key = key

    def __str__(self) -> str:
        if self.key is not None:
            return f"[Key: {self.key}] {super().__str__()}"
        return super().__str__()


class NotFound(EditorError):
    """Raised when a key has no value (or type name) where one was expected."""
    pass


class TypeMismatch(EditorError):
    """Raised when a stored flat value does not satisfy the expected validator."""

    def __init__(self, message: str, key: Optional[str] = None,
                 value: object = None) -> None:
        super().__init__(message, key)
        self.value = value


class MissingParent(EditorError):
    """Raised when a non-root node has no parent key.

    Violates the tree invariant that every non-root key is created with a
    parent.
    """
    pass


class RootAlreadyExists(EditorError):
    """Raised when ``attach_root`` targets a root key that already has a value."""
    pass


class UnknownVariant(EditorError):
    """Raised when a union's child carries a type name none of its variants declare.

    This means the store and the schema have diverged.
    """

    def __init__(self, message: str, key: Optional[str] = None,
                 type_name: Optional[str] = None,
                 available: Optional[list[str]] = None) -> None:
        super().__init__(message, key)
        self.type_name = type_name
        self.available = available or []


class UnknownNodeType(EditorError):
    """Raised when a type name is not present in the node type registry."""

    def __init__(self, type_name: str, key: Optional[str] = None) -> None:
        self.type_name = type_name
        super().__init__(f"No node type registered for '{type_name}'", key)
