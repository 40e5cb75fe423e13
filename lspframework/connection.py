"""Framed message transport between a language server and its client."""

from __future__ import annotations

import logging
import re
import sys
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, BinaryIO

from .jsonrpc import (
    Request,
    Response,
    message_batch_from_json,
    message_from_json,
    request_batch_to_json,
    request_to_json,
    response_batch_to_json,
    response_to_json,
)
from .jsonvalue import parse, stringify
from .strutil import trim

_logger = logging.getLogger(__name__)

_DEFAULT_CONTENT_TYPE = "application/vscode-jsonrpc; charset=utf-8"
_CONTENT_TYPE_PREFIX = "application/vscode-jsonrpc"
_CHARSET_KEY = "charset="
_LEADING_DIGITS = re.compile(r"[0-9]+")


class RequestHandlerInterface(ABC):
    """Receives incoming requests and notifications."""

    @abstractmethod
    def on_request(self, request: Request) -> None:
        """Handle a single request."""

    @abstractmethod
    def on_request_batch(self, batch: list[Request]) -> None:
        """Handle a batch of requests."""


class ResponseHandlerInterface(ABC):
    """Receives incoming responses."""

    @abstractmethod
    def on_response(self, response: Response) -> None:
        """Handle a single response."""

    @abstractmethod
    def on_response_batch(self, batch: list[Response]) -> None:
        """Handle a batch of responses."""


class LSPConnectionError(ConnectionError):
    """Raised when the connection is lost or a message cannot be processed."""


class ProtocolError(ValueError):
    """Raised when the header of an incoming message is invalid."""


@dataclass
class _MessageHeader:
    content_length: int = 0
    content_type: str = _DEFAULT_CONTENT_TYPE


def _log_message(direction: str, value: Any) -> None:
    if _logger.isEnabledFor(logging.DEBUG):
        _logger.debug("%s: %s", direction, stringify(value, True))


class Connection:
    """A connection over a pair of binary streams, such as stdio or a socket."""

    def __init__(self, input_stream: BinaryIO, output_stream: BinaryIO) -> None:
        self._in = input_stream
        self._out = output_stream
        self._read_lock = threading.Lock()
        self._write_lock = threading.Lock()

    def receive_next_message(
        self,
        request_handler: RequestHandlerInterface,
        response_handler: ResponseHandlerInterface,
    ) -> None:
        """Read one message and pass it to the matching handler."""
        with self._read_lock:
            header = self._read_message_header()
            content = self._read_exactly(header.content_length)

            # Checked only after the whole message is read so none of it is left in the stream.
            _verify_content_type(header.content_type)

            try:
                value = parse(content.decode("utf-8"))
                _log_message("incoming", value)

                if isinstance(value, dict):
                    message = message_from_json(value)

                    if isinstance(message, Request):
                        request_handler.on_request(message)
                    else:
                        response_handler.on_response(message)
                elif isinstance(value, list):
                    batch = message_batch_from_json(value)

                    if isinstance(batch[0], Request):
                        request_handler.on_request_batch(batch)
                    else:
                        response_handler.on_response_batch(batch)
            except Exception as e:
                raise LSPConnectionError(str(e)) from e

    def send_request(self, request: Request) -> None:
        """Send a request or notification."""
        self._write_json_message(request_to_json(request))

    def send_response(self, response: Response) -> None:
        """Send a response."""
        self._write_json_message(response_to_json(response))

    def send_request_batch(self, batch: list[Request]) -> None:
        """Send a batch of requests."""
        self._write_json_message(request_batch_to_json(batch))

    def send_response_batch(self, batch: list[Response]) -> None:
        """Send a batch of responses."""
        self._write_json_message(response_batch_to_json(batch))

    def _read_message_header(self) -> _MessageHeader:
        header = _MessageHeader()

        while True:
            line = self._in.readline()

            if not line:
                raise LSPConnectionError("Connection lost")

            if line.startswith(b"\r"):
                if line[1:2] != b"\n":
                    raise ProtocolError("Invalid message header format")
                return header

            _read_header_field(line, header)

    def _read_exactly(self, size: int) -> bytes:
        chunks: list[bytes] = []
        remaining = size

        while remaining > 0:
            chunk = self._in.read(remaining)
            if not chunk:
                break
            chunks.append(chunk)
            remaining -= len(chunk)

        return b"".join(chunks)

    def _write_json_message(self, value: Any) -> None:
        _log_message("outgoing", value)
        self._write_message(stringify(value).encode("utf-8"))

    def _write_message(self, content: bytes) -> None:
        header = f"Content-Length: {len(content)}\r\n\r\n".encode("ascii")

        with self._write_lock:
            self._out.write(header)
            self._out.write(content)
            self._out.flush()


def _read_header_field(line: bytes, header: _MessageHeader) -> None:
    text = line.decode("latin-1")

    if text.endswith("\n"):
        text = text[:-1]

    key, separator, value = text.partition(":")

    if not separator:
        return

    key = trim(key)
    value = trim(value)

    if key == "Content-Length":
        match = _LEADING_DIGITS.match(value)
        if match:
            header.content_length = int(match.group())
    elif key == "Content-Type":
        header.content_type = value


def _verify_content_type(content_type: str) -> None:
    if not content_type.startswith(_CONTENT_TYPE_PREFIX):
        raise ProtocolError(f"Unsupported or invalid content type: {content_type}")

    index = content_type.find(_CHARSET_KEY)

    if index != -1:
        charset = trim(content_type[index + len(_CHARSET_KEY):].split(";", 1)[0])

        if charset not in ("utf-8", "utf8"):
            raise ProtocolError(f"Unsupported or invalid character encoding: {charset}")


def standard_input() -> BinaryIO:
    """The process's standard input as a binary stream."""
    return sys.stdin.buffer


def standard_output() -> BinaryIO:
    """The process's standard output as a binary stream."""
    return sys.stdout.buffer