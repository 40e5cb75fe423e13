"""Errors raised while handling requests or reading responses."""

from __future__ import annotations

from typing import Any

from .serialization import to_json


class Error(RuntimeError):
    """Base for errors that carry a JSON-RPC error code and optional data."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(message)
        self.code = int(code)
        self.message = message
        self.data = data


class RequestError(Error):
    """Raised by a request handler when it cannot process a request.

    The data, if given, is converted to a JSON value.
    """

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(code, message, None if data is None else to_json(data))


class ResponseError(Error):
    """Raised when a request's result is wanted but an error response arrived."""

    def __init__(self, code: int, message: str, data: Any = None) -> None:
        super().__init__(code, message, data)