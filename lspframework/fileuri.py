"""Minimal URI type supporting only the file scheme."""

from __future__ import annotations

import os
import re
from pathlib import PureWindowsPath

from .strutil import trim

SCHEME = "file://"

_IS_WINDOWS = os.name == "nt"
_UNRESERVED = frozenset(
    b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789/_"
)
_ESCAPE = re.compile(rb"%(..)", re.DOTALL)
_HEX_PAIR = re.compile(rb"[0-9A-Fa-f]{2}")


def encode_path(decoded: str) -> str:
    """Percent-encode every byte that is not an ASCII letter, digit, '/' or '_'."""
    raw = decoded.encode("utf-8", "surrogateescape")
    return "".join(chr(b) if b in _UNRESERVED else f"%{b:02X}" for b in raw)


def decode_path(encoded: str) -> str:
    """Resolve percent escapes; return an empty string if one is malformed."""
    raw = encoded.encode("utf-8", "surrogateescape")

    if any(not _HEX_PAIR.fullmatch(m.group(1)) for m in _ESCAPE.finditer(raw)):
        return ""

    decoded = _ESCAPE.sub(lambda m: bytes([int(m.group(1), 16)]), raw)
    return decoded.decode("utf-8", "surrogateescape")


def _path_from_string(text: str) -> str:
    text = trim(text)

    if text.startswith(SCHEME):
        text = text[len(SCHEME):]

    if _IS_WINDOWS and text.startswith("/"):
        text = text[1:]

    return decode_path(text)


class FileURI:
    """A file URI, stored as its decoded path."""

    SCHEME = SCHEME

    def __init__(self, uri: str = "") -> None:
        self._path = _path_from_string(uri)

    @property
    def path(self) -> str:
        """The decoded file path."""
        return self._path

    def to_string(self) -> str:
        """Return the encoded URI text."""
        if _IS_WINDOWS and PureWindowsPath(self._path).is_absolute():
            return SCHEME + "/" + encode_path(self._path)

        return SCHEME + encode_path(self._path)

    def is_valid(self) -> bool:
        """True if the URI holds a non-empty path."""
        return bool(self._path)

    def clear(self) -> None:
        """Reset to an empty path."""
        self._path = ""

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FileURI):
            return self._path == other._path
        if isinstance(other, str):
            return self._path == other
        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, FileURI):
            return self._path < other._path
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._path)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"FileURI({self.to_string()!r})"