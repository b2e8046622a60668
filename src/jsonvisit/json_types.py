"""JSON value types and shape classification.

The engine branches on a value's shape through ``kind_of()``, which maps
every JSON value onto exactly one ``JsonKind``. Anything else is rejected.
"""

from __future__ import annotations

from enum import Enum
from typing import TypeAlias

from jsonvisit.errors import NotJsonValueError

__all__ = [
    "JsonArray",
    "JsonKind",
    "JsonObject",
    "JsonScalar",
    "JsonValue",
    "is_container",
    "kind_of",
]

JsonScalar: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonScalar | list["JsonValue"] | dict[str, "JsonValue"]
JsonObject: TypeAlias = dict[str, JsonValue]
JsonArray: TypeAlias = list[JsonValue]


class JsonKind(Enum):
    """The six shapes a JSON value can take."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"

    @property
    def is_container(self) -> bool:
        return self in (JsonKind.ARRAY, JsonKind.OBJECT)


def kind_of(value: object, pointer: str = "/") -> JsonKind:
    """Classify a value by JSON shape.

    ``bool`` is checked before numbers since it subclasses ``int``. Tuples
    count as arrays. Object keys must be strings.

    >>> kind_of(True)
    <JsonKind.BOOLEAN: 'boolean'>
    >>> kind_of({"a": [1, 2]}).is_container
    True
    >>> kind_of(object())
    Traceback (most recent call last):
    ...
    jsonvisit.errors.NotJsonValueError: Value of type object at '/' is not a JSON value
    """
    if value is None:
        return JsonKind.NULL
    if isinstance(value, bool):
        return JsonKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, (list, tuple)):
        return JsonKind.ARRAY
    if isinstance(value, dict):
        for key in value:
            if not isinstance(key, str):
                raise NotJsonValueError(key, pointer)
        return JsonKind.OBJECT
    raise NotJsonValueError(value, pointer)


def is_container(value: object) -> bool:
    """Return True for arrays and objects."""
    return kind_of(value).is_container
