import pytest

from lspframework.error import ResponseError
from lspframework.fileuri import FileURI
from lspframework.jsonrpc import (
    INTERNAL_ERROR,
    METHOD_NOT_FOUND,
    create_error_response,
    create_response,
    request_to_json,
)
from lspframework.jsonvalue import JsonTypeError
from lspframework.messagedispatcher import MessageDispatcher


class RecordingConnection:
    def __init__(self):
        self.requests = []

    def send_request(self, request):
        self.requests.append(request)


@pytest.fixture
def connection():
    return RecordingConnection()


@pytest.fixture
def dispatcher(connection):
    return MessageDispatcher(connection)


def test_send_request_writes_request(dispatcher, connection):
    response = dispatcher.send_request("textDocument/hover", {"uri": FileURI("file:///a")})
    (request,) = connection.requests
    assert request.method == "textDocument/hover"
    assert request.id == response.message_id
    assert request.params == {"uri": "file:///a"}
    assert not request.is_notification()


def test_request_without_params_omits_them(dispatcher, connection):
    dispatcher.send_request("shutdown")
    assert "params" not in request_to_json(connection.requests[0])


def test_ids_are_unique_and_increasing(dispatcher):
    first = dispatcher.send_request("a").message_id
    second = dispatcher.send_request("b").message_id
    assert second > first


def test_result_resolves_future(dispatcher):
    response = dispatcher.send_request("m", result_type=list[int])
    dispatcher.on_response(create_response(response.message_id, [1, 2]))
    assert response.result.result(timeout=1) == [1, 2]


def test_error_response_sets_response_error(dispatcher):
    response = dispatcher.send_request("m")
    dispatcher.on_response(
        create_error_response(response.message_id, METHOD_NOT_FOUND, "missing", {"k": 1})
    )
    exc = response.result.exception(timeout=1)
    assert isinstance(exc, ResponseError)
    assert exc.code == METHOD_NOT_FOUND
    assert str(exc) == "missing"
    assert exc.data == {"k": 1}


def test_result_type_mismatch_sets_type_error(dispatcher):
    response = dispatcher.send_request("m", result_type=str)
    dispatcher.on_response(create_response(response.message_id, 5))
    with pytest.raises(JsonTypeError):
        response.result.result(timeout=1)


def test_unknown_response_is_ignored(dispatcher):
    response = dispatcher.send_request("m")
    dispatcher.on_response(create_response("unrelated", 1))
    assert not response.result.done()


def test_response_is_consumed_once(dispatcher):
    response = dispatcher.send_request("m")
    dispatcher.on_response(create_response(response.message_id, "first"))
    dispatcher.on_response(create_response(response.message_id, "second"))
    assert response.result.result(timeout=1) == "first"


def test_callbacks_receive_result(dispatcher):
    results = []
    message_id = dispatcher.send_request_with_callbacks("m", None, int, results.append)
    dispatcher.on_response(create_response(message_id, 3))
    assert results == [3]


def test_callbacks_receive_error(dispatcher):
    errors = []
    message_id = dispatcher.send_request_with_callbacks(
        "m", {"a": 1}, int, lambda v: None, errors.append
    )
    dispatcher.on_response(create_error_response(message_id, INTERNAL_ERROR, "failed"))
    (error,) = errors
    assert isinstance(error, ResponseError)
    assert error.code == INTERNAL_ERROR


def test_callback_type_mismatch_propagates(dispatcher):
    message_id = dispatcher.send_request_with_callbacks("m", None, int, lambda v: None)
    with pytest.raises(JsonTypeError):
        dispatcher.on_response(create_response(message_id, "text"))


def test_notification_has_no_id(dispatcher, connection):
    dispatcher.send_notification("exit")
    dispatcher.send_notification("note", [1, 2])
    assert [request_to_json(r) for r in connection.requests] == [
        {"jsonrpc": "2.0", "method": "exit"},
        {"jsonrpc": "2.0", "method": "note", "params": [1, 2]},
    ]


def test_response_batch_resolves_all(dispatcher):
    a = dispatcher.send_request("a")
    b = dispatcher.send_request("b")
    dispatcher.on_response_batch(
        [create_response(a.message_id, "x"), create_response(b.message_id, "y")]
    )
    assert (a.result.result(timeout=1), b.result.result(timeout=1)) == ("x", "y")