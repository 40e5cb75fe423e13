"""Dispatch of incoming requests and notifications to registered handlers."""

from __future__ import annotations

import functools
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any

from .connection import Connection, RequestHandlerInterface
from .error import RequestError
from .jsonrpc import (
    ABSENT,
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    MessageId,
    Request,
    Response,
    create_error_response,
    create_response,
)
from .jsonvalue import JsonTypeError
from .serialization import from_json, to_json

_Handler = Callable[[MessageId, Any, bool], "Response | None"]


def _response_from_future(message_id: MessageId, future: Future) -> Response:
    try:
        return create_response(message_id, to_json(future.result()))
    except RequestError as e:
        return create_error_response(message_id, e.code, e.message)
    except Exception as e:
        return create_error_response(message_id, INTERNAL_ERROR, str(e))


class RequestHandler(RequestHandlerInterface):
    """Calls registered handlers for incoming requests and sends their responses.

    A request handler is called as ``handler(message_id, params)``, or as
    ``handler(message_id)`` when it was registered without a params type. It
    returns the result, or a ``concurrent.futures.Future`` of the result when
    the work is done elsewhere; the response is then sent once the future is
    done. A notification handler is called as ``handler(params)`` or
    ``handler()`` and returns nothing. Pass ``typing.Any`` as the params type
    to receive the raw JSON params. Handlers raise RequestError to answer with
    an error response.
    """

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._handlers: dict[str, _Handler] = {}
        self._handlers_lock = threading.Lock()
        self._pending: dict[MessageId, Future] = {}
        self._pending_lock = threading.Lock()
        self._running = True

    def add_request(
        self,
        method: str,
        handler: Callable[..., Any],
        params_type: Any = None,
    ) -> RequestHandler:
        """Register the handler for a request method."""

        def wrapper(message_id: MessageId, params: Any, allow_async: bool) -> Response | None:
            if params_type is None:
                result = handler(message_id)
            else:
                result = handler(message_id, from_json(params, params_type))

            if isinstance(result, Future):
                if allow_async:
                    self._add_response_result(message_id, result)
                    return None

                result = result.result()

            return create_response(message_id, to_json(result))

        self._add_handler(method, wrapper)
        return self

    def add_notification(
        self,
        method: str,
        handler: Callable[..., Any],
        params_type: Any = None,
    ) -> RequestHandler:
        """Register the handler for a notification method."""

        def wrapper(message_id: MessageId, params: Any, allow_async: bool) -> Response | None:
            if params_type is None:
                handler()
            else:
                handler(from_json(params, params_type))

            return None

        self._add_handler(method, wrapper)
        return self

    def remove(self, method: str) -> None:
        """Unregister the handler for a method, if there is one."""
        with self._handlers_lock:
            self._handlers.pop(method, None)

    def on_request(self, request: Request) -> None:
        response = self._process_request(request, allow_async=True)

        if response is not None:
            self._connection.send_response(response)

    def on_request_batch(self, batch: list[Request]) -> None:
        responses = [
            response
            for response in (self._process_request(r, allow_async=False) for r in batch)
            if response is not None
        ]
        self._connection.send_response_batch(responses)

    def close(self) -> None:
        """Stop sending responses; results that are still pending are dropped."""
        with self._pending_lock:
            self._running = False
            self._pending.clear()

    def __enter__(self) -> RequestHandler:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def _add_handler(self, method: str, handler: _Handler) -> None:
        with self._handlers_lock:
            self._handlers[method] = handler

    def _process_request(self, request: Request, allow_async: bool) -> Response | None:
        with self._handlers_lock:
            handler = self._handlers.get(request.method)

        if handler is None:
            if request.is_notification():
                return None
            return create_error_response(
                request.id, METHOD_NOT_FOUND, f"Unsupported method: {request.method}"
            )

        message_id = None if request.id is ABSENT else request.id

        try:
            return handler(message_id, request.params, allow_async)
        except RequestError as e:
            code, message, data = e.code, e.message, e.data
        except JsonTypeError as e:
            code, message, data = INVALID_PARAMS, str(e), None
        except Exception as e:
            code, message, data = INTERNAL_ERROR, str(e), None

        if request.is_notification():
            return None

        return create_error_response(request.id, code, message, data)

    def _add_response_result(self, message_id: MessageId, future: Future) -> None:
        with self._pending_lock:
            if message_id in self._pending:
                raise RequestError(INVALID_REQUEST, "Request id is not unique")

            if not self._running:
                return

            self._pending[message_id] = future

        future.add_done_callback(functools.partial(self._on_future_done, message_id))

    def _on_future_done(self, message_id: MessageId, future: Future) -> None:
        with self._pending_lock:
            if self._pending.get(message_id) is not future:
                return

            del self._pending[message_id]
            self._connection.send_response(_response_from_future(message_id, future))