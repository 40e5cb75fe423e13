"""Combined handling of incoming and outgoing messages on one connection."""

from __future__ import annotations

from typing import Any

from .connection import Connection
from .messagedispatcher import MessageDispatcher
from .requesthandler import RequestHandler


class MessageHandler:
    """Owns a request handler and a message dispatcher for a connection."""

    def __init__(self, connection: Connection) -> None:
        self._connection = connection
        self._request_handler = RequestHandler(connection)
        self._message_dispatcher = MessageDispatcher(connection)

    def process_incoming_messages(self) -> None:
        """Read the next message and hand it to the request handler or dispatcher."""
        self._connection.receive_next_message(self._request_handler, self._message_dispatcher)

    @property
    def request_handler(self) -> RequestHandler:
        """The handler for incoming requests and notifications."""
        return self._request_handler

    @property
    def message_dispatcher(self) -> MessageDispatcher:
        """The sender of outgoing requests and notifications."""
        return self._message_dispatcher

    def close(self) -> None:
        """Stop sending responses to pending asynchronous requests."""
        self._request_handler.close()

    def __enter__(self) -> MessageHandler:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()