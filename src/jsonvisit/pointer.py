"""Pointers: slash-delimited paths addressing a node by position.

The root is ``/`` and acts as an empty prefix, so the child of the root at
key ``a`` is ``/a`` and its first element is ``/a/0``. Segments are escaped
per RFC 6901 (``~`` becomes ``~0``, ``/`` becomes ``~1``) unless the caller
asks for plain concatenation.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from jsonvisit.errors import PointerResolutionError
from jsonvisit.json_types import JsonKind, JsonValue, kind_of

__all__ = [
    "ROOT_POINTER",
    "build_pointer",
    "escape_segment",
    "join_pointer",
    "resolve_pointer",
    "split_pointer",
    "unescape_segment",
]

ROOT_POINTER = "/"

# RFC 6901 array-index: "0" or a number without leading zeros, ASCII only.
ARRAY_INDEX_PATTERN = re.compile(r"0|[1-9][0-9]*")


def escape_segment(segment: str) -> str:
    """Escape one pointer segment.

    >>> escape_segment("a/b~c")
    'a~1b~0c'
    """
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    """Reverse ``escape_segment()``; ``~1`` is decoded before ``~0``.

    >>> unescape_segment("a~1b~0c")
    'a/b~c'
    >>> unescape_segment("~01")
    '~1'
    """
    return segment.replace("~1", "/").replace("~0", "~")


def join_pointer(parent: str, segment: str | int, *, escape: bool = True) -> str:
    """Address a child of ``parent`` by key or index.

    >>> join_pointer("/", "a")
    '/a'
    >>> join_pointer("/a", 0)
    '/a/0'
    >>> join_pointer("/", "x/y", escape=False)
    '/x/y'
    """
    text = str(segment)
    if escape:
        text = escape_segment(text)
    if parent == ROOT_POINTER:
        return ROOT_POINTER + text
    return f"{parent}/{text}"


def build_pointer(segments: Iterable[str | int], *, escape: bool = True) -> str:
    """Build a pointer from root-relative segments.

    >>> build_pointer([])
    '/'
    >>> build_pointer(["a", 1, "b"])
    '/a/1/b'
    """
    pointer = ROOT_POINTER
    for segment in segments:
        pointer = join_pointer(pointer, segment, escape=escape)
    return pointer


def split_pointer(pointer: str) -> list[str]:
    """Split an escaped pointer into unescaped segments.

    Both ``/`` and the empty string denote the root.

    >>> split_pointer("/")
    []
    >>> split_pointer("/a~1b/0")
    ['a/b', '0']
    """
    if pointer in ("", ROOT_POINTER):
        return []
    if not pointer.startswith("/"):
        raise PointerResolutionError(pointer, "pointer must start with '/'")
    return [unescape_segment(part) for part in pointer[1:].split("/")]


def resolve_pointer(document: JsonValue, pointer: str) -> JsonValue:
    """Return the value addressed by ``pointer`` inside ``document``.

    >>> resolve_pointer({"a": [10, {"b": True}]}, "/a/1/b")
    True

    Raises:
        PointerResolutionError: If any segment does not exist.
    """
    current = document
    for segment in split_pointer(pointer):
        kind = kind_of(current)
        if kind is JsonKind.OBJECT:
            if segment not in current:
                raise PointerResolutionError(pointer, f"missing key {segment!r}")
            current = current[segment]
        elif kind is JsonKind.ARRAY:
            if not ARRAY_INDEX_PATTERN.fullmatch(segment):
                raise PointerResolutionError(pointer, f"invalid index {segment!r}")
            index = int(segment)
            if index >= len(current):
                raise PointerResolutionError(pointer, f"index {index} out of range")
            current = current[index]
        else:
            raise PointerResolutionError(
                pointer, f"cannot descend into {kind.value} at {segment!r}"
            )
    return current
