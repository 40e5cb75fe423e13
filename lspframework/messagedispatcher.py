"""Sending of outgoing requests and matching of incoming responses to them."""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any

from .connection import Connection, ResponseHandlerInterface
from .error import Error, ResponseError
from .jsonrpc import ABSENT, MessageId, Response, create_notification, create_request
from .jsonvalue import JsonTypeError
from .serialization import from_json, to_json

_request_ids = itertools.count(1)
_request_ids_lock = threading.Lock()


def _next_unique_request_id() -> int:
    with _request_ids_lock:
        return next(_request_ids)


@dataclass
class FutureResponse:
    """The id of a sent request and a future that holds its result once it arrives.

    Do not wait on the future in the thread that handles incoming messages.
    """

    message_id: MessageId
    result: Future


class _FutureResult:
    def __init__(self, result_type: Any) -> None:
        self._result_type = result_type
        self.future: Future = Future()

    def set_value_from_json(self, value: Any) -> None:
        self.future.set_result(from_json(value, self._result_type))

    def set_exception(self, exc: BaseException) -> None:
        self.future.set_exception(exc)


class _CallbackResult:
    def __init__(
        self,
        result_type: Any,
        then: Callable[[Any], Any],
        error: Callable[[Error], Any],
    ) -> None:
        self._result_type = result_type
        self._then = then
        self._error = error

    def set_value_from_json(self, value: Any) -> None:
        self._then(from_json(value, self._result_type))

    def set_exception(self, exc: BaseException) -> None:
        if not isinstance(exc, Error):
            raise exc
        self._error(exc)


class MessageDispatcher(ResponseHandlerInterface):
    """Sends requests and notifications and resolves requests when their responses arrive."""

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._pending: dict[MessageId, _FutureResult | _CallbackResult] = {}
        self._pending_lock = threading.Lock()

    def send_request(
        self, method: str, params: Any = None, result_type: Any = Any
    ) -> FutureResponse:
        """Send a request; the returned future receives the result as ``result_type``."""
        pending = _FutureResult(result_type)
        message_id = self._send_request(method, pending, params)
        return FutureResponse(message_id, pending.future)

    def send_request_with_callbacks(
        self,
        method: str,
        params: Any,
        result_type: Any,
        then: Callable[[Any], Any],
        error: Callable[[Error], Any] | None = None,
    ) -> MessageId:
        """Send a request; ``then`` gets the result, ``error`` gets an error response."""
        pending = _CallbackResult(result_type, then, error or (lambda e: None))
        return self._send_request(method, pending, params)

    def send_notification(self, method: str, params: Any = None) -> None:
        """Send a notification."""
        json_params = None if params is None else to_json(params)
        self._connection.send_request(create_notification(method, json_params))

    def on_response(self, response: Response) -> None:
        with self._pending_lock:
            pending = self._pending.pop(response.id, None)

        # A response without a matching request is ignored.
        if pending is None:
            return

        if response.result is not ABSENT:
            try:
                pending.set_value_from_json(response.result)
            except JsonTypeError as e:
                pending.set_exception(e)
        else:
            error = response.error
            pending.set_exception(ResponseError(error.code, error.message, error.data))

    def on_response_batch(self, batch: list[Response]) -> None:
        for response in batch:
            self.on_response(response)

    def _send_request(
        self, method: str, pending: _FutureResult | _CallbackResult, params: Any
    ) -> MessageId:
        json_params = None if params is None else to_json(params)

        with self._pending_lock:
            message_id = _next_unique_request_id()
            self._pending[message_id] = pending
            self._connection.send_request(create_request(message_id, method, json_params))

        return message_id