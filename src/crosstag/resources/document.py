"""
Typed access to nested managed-resource documents.

Kubernetes returns custom objects as plain JSON trees. Document wraps one
node of such a tree and tags it with its DocumentKind, so traversal code can
ask for "the string under spec.forProvider.host" without checking types at
every level. Missing keys and type mismatches yield an empty (NULL)
Document instead of raising.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum
from typing import Any


class DocumentKind(str, Enum):
    """Kinds of JSON values a Document can hold."""

    MAP = "map"
    LIST = "list"
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    NULL = "null"


def _kind_of(value: Any) -> DocumentKind:
    if value is None:
        return DocumentKind.NULL
    # bool is a subclass of int, so it has to be checked first
    if isinstance(value, bool):
        return DocumentKind.BOOL
    if isinstance(value, (int, float)):
        return DocumentKind.NUMBER
    if isinstance(value, str):
        return DocumentKind.STRING
    if isinstance(value, dict):
        return DocumentKind.MAP
    if isinstance(value, (list, tuple)):
        return DocumentKind.LIST
    return DocumentKind.NULL


class Document:
    """A node in a JSON-like document tree."""

    __slots__ = ("_value", "kind")

    def __init__(self, value: Any = None):
        self.kind = _kind_of(value)
        self._value = value if self.kind is not DocumentKind.NULL else None

    def __repr__(self) -> str:
        return f"Document({self.kind.value}: {self._value!r})"

    def __bool__(self) -> bool:
        return self.kind is not DocumentKind.NULL

    @property
    def raw(self) -> Any:
        """The wrapped value, unchanged."""
        return self._value

    @property
    def is_map(self) -> bool:
        return self.kind is DocumentKind.MAP

    @property
    def is_list(self) -> bool:
        return self.kind is DocumentKind.LIST

    @property
    def is_string(self) -> bool:
        return self.kind is DocumentKind.STRING

    def get(self, key: str) -> Document:
        """Child under key, or an empty Document if this is not a map."""
        if self.kind is not DocumentKind.MAP:
            return Document()
        return Document(self._value.get(key))

    def path(self, *keys: str) -> Document:
        """Follow a sequence of map keys, e.g. path("spec", "forProvider")."""
        node = self
        for key in keys:
            node = node.get(key)
            if not node:
                break
        return node

    def as_str(self) -> str | None:
        """The string value, or None for any other kind."""
        return self._value if self.kind is DocumentKind.STRING else None

    def as_map(self) -> dict[str, Document]:
        """Map children wrapped as Documents (empty for non-maps)."""
        if self.kind is not DocumentKind.MAP:
            return {}
        return {str(k): Document(v) for k, v in self._value.items()}

    def as_list(self) -> list[Document]:
        """List elements wrapped as Documents (empty for non-lists)."""
        if self.kind is not DocumentKind.LIST:
            return []
        return [Document(v) for v in self._value]

    def items(self) -> Iterator[tuple[str, Document]]:
        """Iterate map entries in document order."""
        yield from self.as_map().items()

    def string_map(self) -> dict[str, str]:
        """Map entries whose values are strings, e.g. a label map."""
        return {key: child.as_str() for key, child in self.items() if child.is_string}  # type: ignore[misc]

    def str_at(self, *keys: str) -> str | None:
        """Shorthand for path(*keys).as_str()."""
        return self.path(*keys).as_str()
