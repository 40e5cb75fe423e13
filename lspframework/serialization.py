"""Conversion between Python values and JSON values.

Classes take part in serialization by defining a ``to_json()`` method and a
``from_json(value)`` classmethod. A class may also list the keys that a JSON
object must contain to be read as it in ``required_properties``; this decides
which alternative of a union an object becomes.
"""

from __future__ import annotations

import types
from collections.abc import Mapping
from enum import Enum
from typing import Any, Union, get_args, get_origin

from .fileuri import FileURI
from .jsonvalue import JsonTypeError, number

_INTEGER_MIN = -(2**31)
_INTEGER_MAX = 2**31 - 1

_NONE_TYPE = type(None)
_UNION_ORIGINS = (Union, types.UnionType)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _map_key(key: Any) -> str:
    if isinstance(key, FileURI):
        return key.path
    if isinstance(key, str):
        return key
    raise JsonTypeError(f"Object key must be a string, not {type(key).__name__}")


def to_json(value: Any) -> Any:
    """Convert a Python value to a JSON value.

    Integers outside the 32-bit range become decimals, file URIs become their
    encoded text, tuples become arrays and mappings keyed by file URIs are
    keyed by their paths.
    """
    if value is None or isinstance(value, (bool, str)):
        return value

    if isinstance(value, Enum):
        return to_json(value.value)

    if isinstance(value, int):
        if _INTEGER_MIN <= value <= _INTEGER_MAX:
            return value
        return float(value)

    if isinstance(value, float):
        return value

    if isinstance(value, FileURI):
        return value.to_string()

    if isinstance(value, Mapping):
        return {_map_key(k): to_json(v) for k, v in value.items()}

    if isinstance(value, (list, tuple)):
        return [to_json(item) for item in value]

    method = getattr(value, "to_json", None)

    if callable(method):
        return method()

    raise JsonTypeError(f"Cannot convert {type(value).__name__} to json")


def _expect(value: Any, kind: type | tuple[type, ...]) -> Any:
    if not isinstance(value, kind):
        raise JsonTypeError()
    return value


def _is_enum(target: Any) -> bool:
    return isinstance(target, type) and issubclass(target, Enum)


def _enum_from_json(value: Any, target: type[Enum]) -> Enum:
    if isinstance(value, (dict, list)):
        raise JsonTypeError(f"Invalid value for '{target.__name__}'")
    try:
        return target(value)
    except ValueError:
        raise JsonTypeError(f"Invalid value for '{target.__name__}'") from None


def _tuple_from_json(value: Any, element_types: tuple[Any, ...]) -> tuple:
    array = _expect(value, list)

    if len(element_types) == 2 and element_types[1] is Ellipsis:
        return tuple(from_json(item, element_types[0]) for item in array)

    if len(array) < len(element_types):
        raise JsonTypeError()

    return tuple(from_json(item, t) for item, t in zip(array, element_types))


def _matches_directly(value: Any, alternative: Any) -> bool:
    if alternative is Any:
        return True
    if alternative is _NONE_TYPE:
        return value is None
    if alternative is bool:
        return isinstance(value, bool)
    if alternative in (int, float):
        return _is_number(value)
    if alternative in (str, FileURI):
        return isinstance(value, str)
    if _is_enum(alternative):
        try:
            _enum_from_json(value, alternative)
        except JsonTypeError:
            return False
        return True
    container = get_origin(alternative) or alternative
    return container in (list, tuple) and isinstance(value, list)


def _is_object_type(alternative: Any) -> bool:
    if alternative is dict or get_origin(alternative) is dict:
        return True
    return isinstance(alternative, type) and not _is_enum(alternative) and callable(
        getattr(alternative, "from_json", None)
    )


def _variant_from_json(value: Any, alternatives: tuple[Any, ...]) -> Any:
    best = None
    best_count = 0

    for alternative in alternatives:
        if _matches_directly(value, alternative):
            return from_json(value, alternative)

        if isinstance(value, dict) and _is_object_type(alternative):
            required = tuple(getattr(alternative, "required_properties", ()))

            if all(name in value for name in required):
                count = len(required) + 1
                if count >= best_count:
                    best, best_count = alternative, count

    if best_count:
        return from_json(value, best)

    raise JsonTypeError()


def _union_from_json(value: Any, alternatives: tuple[Any, ...]) -> Any:
    if _NONE_TYPE in alternatives:
        if value is None:
            return None

        alternatives = tuple(a for a in alternatives if a is not _NONE_TYPE)

        if len(alternatives) == 1:
            return from_json(value, alternatives[0])

    return _variant_from_json(value, alternatives)


def from_json(value: Any, target_type: Any = Any) -> Any:
    """Read a JSON value as ``target_type``, raising JsonTypeError on a mismatch.

    Supported targets are the JSON scalar types, FileURI, enums, ``list``,
    ``dict`` and ``tuple`` (plain or parameterised), unions and optionals, and
    classes with a ``from_json`` classmethod.
    """
    if target_type is Any:
        return value

    if target_type is None or target_type is _NONE_TYPE:
        return None

    origin = get_origin(target_type)

    if origin in _UNION_ORIGINS:
        return _union_from_json(value, get_args(target_type))

    if origin is list:
        (element_type,) = get_args(target_type)
        return [from_json(item, element_type) for item in _expect(value, list)]

    if origin is dict:
        key_type, value_type = get_args(target_type)
        return {
            from_json(k, key_type): from_json(v, value_type)
            for k, v in _expect(value, dict).items()
        }

    if origin is tuple:
        return _tuple_from_json(value, get_args(target_type))

    if target_type is bool:
        return _expect(value, bool)

    if target_type is int:
        return int(number(value))

    if target_type is float:
        return number(value)

    if target_type is str:
        return _expect(value, str)

    if target_type is FileURI:
        return FileURI(_expect(value, str))

    if target_type is dict:
        return _expect(value, dict)

    if target_type is list:
        return _expect(value, list)

    if target_type is tuple:
        return tuple(_expect(value, list))

    if _is_enum(target_type):
        return _enum_from_json(value, target_type)

    reader = getattr(target_type, "from_json", None)

    if callable(reader):
        return reader(value)

    raise TypeError(f"Unsupported target type: {target_type!r}")