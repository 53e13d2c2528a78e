"""Tagged representation of parsed JSON and structural containment.

Parsed documents are converted once into a closed set of frozen
dataclasses (``JsonObject``, ``JsonArray``, ``JsonString``, ``JsonNumber``,
``JsonBool``, ``JsonNull``).  ``contains()`` then matches on those variants
only, so it never has to guess what a raw Python value means (``True`` is
an ``int`` in Python, but a JSON boolean is never equal to a JSON number).

Usage::

    from request_reconciler.compare.json_value import contains, parse_object

    live = parse_object('{"id": 1, "email": "a@b.com"}')
    desired = parse_object('{"email": "a@b.com"}')
    assert contains(live, desired)
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class ArrayMode(str, Enum):
    """How arrays are compared during containment.

    ``ORDERED``: arrays must have the same length and each desired element
    must be contained in the observed element at the same index.

    ``UNORDERED``: each desired element must be contained in a distinct
    observed element, in any order; the observed array may be longer.
    """

    ORDERED = "ordered"
    UNORDERED = "unordered"


@dataclass(frozen=True)
class JsonObject:
    members: dict[str, JsonValue]


@dataclass(frozen=True)
class JsonArray:
    items: tuple[JsonValue, ...]


@dataclass(frozen=True)
class JsonString:
    value: str


@dataclass(frozen=True)
class JsonNumber:
    value: int | float


@dataclass(frozen=True)
class JsonBool:
    value: bool


@dataclass(frozen=True)
class JsonNull:
    pass


JsonValue = Union[
    JsonObject, JsonArray, JsonString, JsonNumber, JsonBool, JsonNull
]


# Deepest container nesting accepted by ``loads``; from_python() and
# contains() recurse once per level.
MAX_DEPTH = 256


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant: {name}")


def _check_depth(obj: Any) -> None:
    stack = [(obj, 1)]
    while stack:
        value, depth = stack.pop()
        if isinstance(value, dict):
            children = value.values()
        elif isinstance(value, list):
            children = value
        else:
            continue
        if depth > MAX_DEPTH:
            raise ValueError(
                f"JSON nesting is deeper than {MAX_DEPTH} levels"
            )
        stack.extend((child, depth + 1) for child in children)


def loads(text: str) -> Any:
    """Decode JSON text into plain Python values.

    Raises:
        ValueError: If *text* is not valid JSON, uses ``NaN`` or
            ``Infinity``, or nests containers deeper than ``MAX_DEPTH``.
    """
    try:
        obj = json.loads(text, parse_constant=_reject_constant)
    except RecursionError as e:
        raise ValueError("JSON nesting is too deep to decode") from e
    _check_depth(obj)
    return obj


def from_python(obj: Any) -> JsonValue:
    """Convert the output of ``json.loads`` into a ``JsonValue``."""
    match obj:
        case None:
            return JsonNull()
        case bool():
            return JsonBool(obj)
        case int() | float():
            return JsonNumber(obj)
        case str():
            return JsonString(obj)
        case list():
            return JsonArray(tuple(from_python(item) for item in obj))
        case dict():
            return JsonObject({k: from_python(v) for k, v in obj.items()})
        case _:
            raise TypeError(
                f"unsupported JSON value type: {type(obj).__name__}"
            )


def parse(text: str) -> JsonValue:
    """Parse JSON text into a ``JsonValue``.

    Raises:
        ValueError: If *text* is rejected by ``loads()``.
    """
    return from_python(loads(text))


def parse_object(text: str) -> JsonObject | None:
    """Parse *text* as a JSON object, returning ``None`` if it is not one."""
    try:
        value = parse(text)
    except ValueError:
        return None
    if isinstance(value, JsonObject):
        return value
    return None


def is_json_object(text: str) -> bool:
    """Return True if *text* parses to a JSON object (a key/value document)."""
    return parse_object(text) is not None


def contains(
    observed: JsonValue,
    desired: JsonValue,
    array_mode: ArrayMode = ArrayMode.ORDERED,
) -> bool:
    """Return True if *desired* is structurally contained in *observed*.

    Every key of a desired object must exist in the observed object with a
    contained value.  Scalars must carry the same tag and an equal value.
    Arrays follow *array_mode*.
    """
    match desired, observed:
        case JsonObject(members=want), JsonObject(members=have):
            return all(
                key in have and contains(have[key], value, array_mode)
                for key, value in want.items()
            )
        case JsonArray(items=want), JsonArray(items=have):
            if array_mode is ArrayMode.UNORDERED:
                return _contains_unordered(have, want, array_mode)
            return len(want) == len(have) and all(
                contains(h, w, array_mode) for h, w in zip(have, want)
            )
        case (JsonObject() | JsonArray()), _:
            return False
        case _:
            return desired == observed


def _contains_unordered(
    have: tuple[JsonValue, ...],
    want: tuple[JsonValue, ...],
    array_mode: ArrayMode,
) -> bool:
    # Greedy: each desired element claims the first unclaimed match.
    claimed: set[int] = set()
    for w in want:
        for index, h in enumerate(have):
            if index not in claimed and contains(h, w, array_mode):
                claimed.add(index)
                break
        else:
            return False
    return True
