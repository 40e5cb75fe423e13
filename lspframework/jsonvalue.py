"""JSON values as plain Python objects, with a strict parser and a stringifier.

JSON values map onto Python as follows: null is ``None``, booleans are
``bool``, integers are ``int``, decimals are ``float``, strings are ``str``,
objects are ``dict`` and arrays are ``list``.
"""

from __future__ import annotations

import string
from collections.abc import Mapping
from typing import Any

from .strutil import escape, quote, unescape

_WHITESPACE = frozenset(" \t\n\v\f\r")
_DIGITS = frozenset(string.digits)
_ALPHA = frozenset(string.ascii_letters)
_ALNUM = _DIGITS | _ALPHA
_NUMBER_CHARS = _ALNUM | frozenset("-.")
_DECIMAL_MARKERS = frozenset(".eE")

_INTEGER_MIN = -(2**31)
_INTEGER_MAX = 2**31 - 1
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1

_MAX_INDENT = 32


class JsonTypeError(TypeError):
    """Raised when a JSON value does not have the expected type or key."""

    def __init__(self, message: str = "Unexpected json value") -> None:
        super().__init__(message)


class ParseError(ValueError):
    """Raised when JSON text cannot be parsed; ``text_pos`` is the offset of the problem."""

    def __init__(self, message: str, text_pos: int) -> None:
        super().__init__(message)
        self.text_pos = text_pos


class _Parser:
    def __init__(self, text: str) -> None:
        self._text = text
        self._end = len(text)
        self._pos = 0

    def parse(self) -> Any:
        return self._value()

    def _error(self, message: str, pos: int | None = None) -> ParseError:
        return ParseError(message, self._pos if pos is None else pos)

    def _skip_whitespace(self) -> None:
        while self._pos < self._end and self._text[self._pos] in _WHITESPACE:
            self._pos += 1

    def _next(self) -> str:
        """Skip whitespace and return the current character, which must exist."""
        self._skip_whitespace()

        if self._pos >= self._end:
            raise self._error("Unexpected end of input")

        return self._text[self._pos]

    def _value(self) -> Any:
        c = self._next()

        if c == "{":
            self._pos += 1
            return self._object()

        if c == "[":
            self._pos += 1
            return self._array()

        return self._simple_value()

    def _object(self) -> dict[str, Any]:
        obj: dict[str, Any] = {}

        while True:
            c = self._next()

            if c == "}":
                self._pos += 1
                return obj

            if obj:
                self._expect_separator(c, "}")

            self._next()
            key_pos = self._pos
            key = self._string()

            if key in obj:
                raise self._error(f"Duplicate key '{key}'", key_pos)

            self._skip_whitespace()

            if self._pos < self._end and self._text[self._pos] != ":":
                raise self._error("Expected ':'")

            self._pos += 1
            obj[key] = None
            obj[key] = self._value()

    def _array(self) -> list[Any]:
        array: list[Any] = []

        while True:
            c = self._next()

            if c == "]":
                self._pos += 1
                return array

            if array:
                self._expect_separator(c, "]")

            array.append(self._value())

    def _expect_separator(self, c: str, closing: str) -> None:
        if c != ",":
            raise self._error("Expected ','")

        comma_pos = self._pos
        self._pos += 1
        self._skip_whitespace()

        if self._pos < self._end and self._text[self._pos] == closing:
            raise self._error("Trailing ','", comma_pos)

    def _string(self) -> str:
        if self._pos >= self._end or self._text[self._pos] != '"':
            raise self._error("String expected")

        self._pos += 1
        start = self._pos
        escaping = False

        while True:
            if self._pos >= self._end:
                raise self._error("Unmatched '\"'")

            c = self._text[self._pos]

            if c == '"' and not escaping:
                break

            escaping = not escaping and c == "\\"
            self._pos += 1

            if self._pos >= self._end or self._text[self._pos] == "\n":
                raise self._error("Unmatched '\"'")

        stop = self._pos
        self._pos += 1
        return unescape(self._text[start:stop])

    def _number(self) -> int | float:
        start = self._pos

        while self._pos < self._end and self._text[self._pos] in _NUMBER_CHARS:
            self._pos += 1

        token = self._text[start:self._pos]
        invalid = self._error(f"Invalid number value: '{token}'", start)

        if any(c in _DECIMAL_MARKERS for c in token):
            try:
                return float(token)
            except ValueError:
                raise invalid from None

        try:
            value = int(token)
        except ValueError:
            raise invalid from None

        if not _INT64_MIN <= value <= _INT64_MAX:
            raise invalid

        if not _INTEGER_MIN <= value <= _INTEGER_MAX:
            return float(value)

        return value

    def _identifier(self) -> bool | None:
        start = self._pos

        while self._pos < self._end and self._text[self._pos] in _ALNUM:
            self._pos += 1

        identifier = self._text[start:self._pos]

        if identifier == "true":
            return True
        if identifier == "false":
            return False
        if identifier == "null":
            return None

        raise self._error(f"Unexpected '{identifier}'")

    def _simple_value(self) -> Any:
        c = self._text[self._pos]

        if c == '"':
            return self._string()

        if c in _DIGITS or c == "-":
            return self._number()

        if c in _ALPHA:
            return self._identifier()

        raise self._error("Unexpected token")


def parse(text: str) -> Any:
    """Parse JSON text into Python values.

    Text following the first complete value is ignored.
    """
    return _Parser(text).parse()


def _indent(level: int, format: bool) -> str:
    return "\t" * min(level, _MAX_INDENT) if format else ""


def _wrap(opening: str, closing: str, items: list[str], level: int, format: bool) -> str:
    if not items:
        return opening + closing

    list_edge = "\n" if format else ""
    value_sep = ",\n" if format else ","
    inner = _indent(level + 1, format)

    return (
        opening
        + list_edge
        + inner
        + (value_sep + inner).join(items)
        + list_edge
        + _indent(level, format)
        + closing
    )


def _stringify(value: Any, level: int, format: bool) -> str:
    if value is None:
        return "null"

    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, int):
        return str(value)

    if isinstance(value, float):
        return f"{value:f}"

    if isinstance(value, str):
        return quote(escape(value))

    if isinstance(value, Mapping):
        key_sep = ": " if format else ":"
        items = []

        for key, item in value.items():
            if not isinstance(key, str):
                raise JsonTypeError(f"Object key must be a string, not {type(key).__name__}")
            items.append(quote(escape(key)) + key_sep + _stringify(item, level + 1, format))

        return _wrap("{", "}", items, level, format)

    if isinstance(value, (list, tuple)):
        items = [_stringify(item, level + 1, format) for item in value]
        return _wrap("[", "]", items, level, format)

    raise JsonTypeError(f"Cannot convert {type(value).__name__} to json")


def stringify(value: Any, format: bool = False) -> str:
    """Convert a JSON value to text; ``format`` adds newlines and tab indentation."""
    return _stringify(value, 0, format)


def get_key(obj: Any, key: str) -> Any:
    """Return ``obj[key]`` for a JSON object, raising JsonTypeError if it is missing."""
    if not isinstance(obj, Mapping):
        raise JsonTypeError()

    try:
        return obj[key]
    except KeyError:
        raise JsonTypeError(f"Missing key '{key}'") from None


def number(value: Any) -> float:
    """Return a JSON integer or decimal as a float."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float(value)

    raise JsonTypeError()