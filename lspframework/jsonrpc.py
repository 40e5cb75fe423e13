"""JSON-RPC 2.0 messages and their conversion to and from JSON values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Union

from .jsonvalue import JsonTypeError, get_key, number

JSONRPC_VERSION = "2.0"

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class _Absent:
    """Marker for a field that is not present at all, as opposed to JSON null."""

    _instance: _Absent | None = None

    def __new__(cls) -> _Absent:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()

MessageId = Union[str, int, None]


class ProtocolError(ValueError):
    """Raised when a message does not have a valid JSON-RPC structure."""


@dataclass
class Request:
    """A request, or a notification when it has no id."""

    method: str = ""
    id: MessageId | _Absent = ABSENT
    params: Any = None
    jsonrpc: str = JSONRPC_VERSION

    def is_notification(self) -> bool:
        """True if the request carries no id and expects no response."""
        return self.id is ABSENT


@dataclass
class ResponseError:
    """The error member of an error response."""

    code: int
    message: str
    data: Any = None


@dataclass
class Response:
    """A response carrying either a result or an error."""

    id: MessageId = None
    result: Any = ABSENT
    error: ResponseError | None = None
    jsonrpc: str = JSONRPC_VERSION


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _as_string(value: Any) -> str:
    if not isinstance(value, str):
        raise JsonTypeError()
    return value


def _as_object(value: Any) -> dict:
    if not isinstance(value, dict):
        raise JsonTypeError()
    return value


def _verify_protocol_version(obj: dict) -> None:
    if "jsonrpc" not in obj:
        raise ProtocolError("jsonrpc property is missing")

    version = obj["jsonrpc"]

    if not isinstance(version, str):
        raise ProtocolError("jsonrpc property expected to be a string")

    if version != JSONRPC_VERSION:
        raise ProtocolError("Invalid or unsupported jsonrpc version")


def _message_id_from_json(value: Any) -> MessageId:
    if isinstance(value, str):
        return value

    if _is_number(value):
        return int(number(value))

    if value is None:
        return None

    raise ProtocolError("Request id type must be string, number or null")


def _request_from_json(obj: Any) -> Request:
    obj = _as_object(obj)
    _verify_protocol_version(obj)

    request = Request(
        method=_as_string(get_key(obj, "method")),
        jsonrpc=_as_string(obj["jsonrpc"]),
    )

    if "id" in obj:
        request.id = _message_id_from_json(obj["id"])

    if "params" in obj:
        params = obj["params"]

        if not isinstance(params, (dict, list)):
            raise ProtocolError("Params type must be object or array")

        request.params = params

    return request


def _response_error_from_json(value: Any) -> ResponseError:
    error = _as_object(value)

    if "code" not in error:
        raise ProtocolError("Response error is missing the error code")

    code = error["code"]

    if not _is_number(code):
        raise ProtocolError("Response error code must be a number")

    if "message" not in error:
        raise ProtocolError("Response error is missing the error message")

    message = error["message"]

    if not isinstance(message, str):
        raise ProtocolError("Response error message must be a string")

    return ResponseError(code=int(number(code)), message=message, data=error.get("data"))


def _response_from_json(obj: Any) -> Response:
    obj = _as_object(obj)
    _verify_protocol_version(obj)

    response = Response()

    if "id" in obj:
        response.id = _message_id_from_json(obj["id"])

    if "result" in obj:
        response.result = obj["result"]

    if "error" in obj:
        response.error = _response_error_from_json(obj["error"])

    if (response.result is ABSENT) == (response.error is None):
        raise ProtocolError("Response must have either 'result' or 'error'")

    return response


def message_from_json(obj: dict) -> Request | Response:
    """Convert a JSON object to a Request if it has a method, else to a Response."""
    if "method" in obj:
        return _request_from_json(obj)

    return _response_from_json(obj)


def message_batch_from_json(array: list) -> list[Request] | list[Response]:
    """Convert a JSON array to a batch whose kind is set by its first message."""
    if not array:
        raise ProtocolError("Message batch must not be empty")

    first, *rest = array
    first_message = message_from_json(_as_object(first))

    if isinstance(first_message, Request):
        return [first_message, *(_request_from_json(item) for item in rest)]

    return [first_message, *(_response_from_json(item) for item in rest)]


def request_to_json(request: Request) -> dict[str, Any]:
    """Convert a request to a JSON object."""
    obj: dict[str, Any] = {"jsonrpc": request.jsonrpc}

    if request.id is not ABSENT:
        obj["id"] = request.id

    obj["method"] = request.method

    if request.params is not None:
        obj["params"] = request.params

    return obj


def response_to_json(response: Response) -> dict[str, Any]:
    """Convert a response to a JSON object.

    Error data is written as a top-level ``data`` member.
    """
    obj: dict[str, Any] = {"jsonrpc": response.jsonrpc, "id": response.id}

    if response.result is not ABSENT:
        obj["result"] = response.result

    if response.error is not None:
        error = response.error

        if error.data is not None:
            obj["data"] = error.data

        obj["error"] = {"code": error.code, "message": error.message}

    return obj


def request_batch_to_json(batch: list[Request]) -> list[dict[str, Any]]:
    """Convert a batch of requests to a JSON array."""
    return [request_to_json(request) for request in batch]


def response_batch_to_json(batch: list[Response]) -> list[dict[str, Any]]:
    """Convert a batch of responses to a JSON array."""
    return [response_to_json(response) for response in batch]


def create_request(message_id: MessageId, method: str, params: Any = None) -> Request:
    """Create a request with an id."""
    return Request(method=method, id=message_id, params=params)


def create_notification(method: str, params: Any = None) -> Request:
    """Create a request without an id."""
    return Request(method=method, params=params)


def create_response(message_id: MessageId, result: Any) -> Response:
    """Create a successful response."""
    return Response(id=message_id, result=result)


def create_error_response(
    message_id: MessageId, code: int, message: str, data: Any = None
) -> Response:
    """Create an error response."""
    return Response(id=message_id, error=ResponseError(code=code, message=message, data=data))