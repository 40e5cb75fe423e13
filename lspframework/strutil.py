"""String helpers used throughout the framework."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping, MutableMapping
from typing import Any

# Characters that the C locale treats as whitespace.
_WHITESPACE = " \t\n\v\f\r"

_ASCII_LOWER = "abcdefghijklmnopqrstuvwxyz"
_ASCII_UPPER = _ASCII_LOWER.upper()
_TO_UPPER = str.maketrans(_ASCII_LOWER, _ASCII_UPPER)
_TO_LOWER = str.maketrans(_ASCII_UPPER, _ASCII_LOWER)

_ESCAPES = {
    "\0": "\\0",
    "\a": "\\a",
    "\b": "\\b",
    "\t": "\\t",
    "\n": "\\n",
    "\v": "\\v",
    "\f": "\\f",
    "\r": "\\r",
    '"': '\\"',
    "\\": "\\\\",
}

_UNESCAPES = {
    "0": "\0",
    "a": "\a",
    "b": "\b",
    "t": "\t",
    "n": "\n",
    "v": "\v",
    "f": "\f",
    "r": "\r",
}


def trim_left(text: str) -> str:
    """Remove leading whitespace."""
    return text.lstrip(_WHITESPACE)


def trim_right(text: str) -> str:
    """Remove trailing whitespace."""
    return text.rstrip(_WHITESPACE)


def trim(text: str) -> str:
    """Remove leading and trailing whitespace."""
    return text.strip(_WHITESPACE)


def split(text: str, separator: str, skip_empty: bool = False) -> list[str]:
    """Split ``text`` at ``separator``.

    Empty parts between separators are kept unless ``skip_empty`` is set;
    an empty part after the last separator is always dropped.
    """
    if not separator:
        raise ValueError("separator must not be empty")

    *parts, last = text.split(separator)
    result = [part for part in parts if part or not skip_empty]

    if last:
        result.append(last)

    return result


def join(
    strings: Iterable[str],
    separator: str,
    transform: Callable[[str], str] | None = None,
) -> str:
    """Join ``strings`` with ``separator``, optionally transforming each one."""
    if transform is None:
        return separator.join(strings)

    return separator.join(transform(s) for s in strings)


def replace(text: str, pattern: str, replacement: str) -> str:
    """Replace every occurrence of ``pattern`` in ``text``."""
    if not pattern:
        raise ValueError("pattern must not be empty")

    return text.replace(pattern, replacement)


def lower(text: str) -> str:
    """Lower-case the ASCII letters of ``text``."""
    return text.translate(_TO_LOWER)


def upper(text: str) -> str:
    """Upper-case the ASCII letters of ``text``."""
    return text.translate(_TO_UPPER)


def capitalize(text: str) -> str:
    """Upper-case the first character, leaving the rest unchanged."""
    return upper(text[:1]) + text[1:]


def uncapitalize(text: str) -> str:
    """Lower-case the first character, leaving the rest unchanged."""
    return lower(text[:1]) + text[1:]


def quote(text: str) -> str:
    """Surround ``text`` with double quotes."""
    return f'"{text}"'


def escape(text: str) -> str:
    """Replace control characters, quotes and backslashes with escape sequences."""
    return "".join(_ESCAPES.get(c, c) for c in text)


def unescape(text: str) -> str:
    """Resolve backslash escape sequences.

    Unknown escapes yield the escaped character; a trailing lone backslash is kept.
    """
    result: list[str] = []
    chars = iter(text)

    for c in chars:
        if c != "\\":
            result.append(c)
            continue

        following = next(chars, None)

        if following is None:
            result.append(c)
        else:
            result.append(_UNESCAPES.get(following, following))

    return "".join(result)


def _fold_key(key: Any) -> str:
    text = key if isinstance(key, str) else key.path
    return upper(text)


class CaseInsensitiveDict(MutableMapping):
    """Mapping whose string keys compare without regard to ASCII case.

    Keys may also be objects with a ``path`` attribute, which is used for lookup.
    The first spelling of a key that was stored is the one reported by iteration.
    """

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        self._items: dict[str, tuple[Any, Any]] = {}
        self.update(*args, **kwargs)

    def __getitem__(self, key: Any) -> Any:
        return self._items[_fold_key(key)][1]

    def __setitem__(self, key: Any, value: Any) -> None:
        folded = _fold_key(key)
        existing = self._items.get(folded)
        original = existing[0] if existing is not None else key
        self._items[folded] = (original, value)

    def __delitem__(self, key: Any) -> None:
        folded = _fold_key(key)
        if folded not in self._items:
            raise KeyError(key)
        self._items.pop(folded)

    def __iter__(self) -> Iterator[Any]:
        return (original for original, _ in self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CaseInsensitiveDict):
            return {k: v for k, (_, v) in self._items.items()} == {
                k: v for k, (_, v) in other._items.items()
            }
        if isinstance(other, Mapping):
            return self == CaseInsensitiveDict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"