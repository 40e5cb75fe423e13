import io

import pytest

from lspframework.connection import (
    Connection,
    LSPConnectionError,
    ProtocolError,
    RequestHandlerInterface,
    ResponseHandlerInterface,
)
from lspframework.jsonrpc import (
    create_error_response,
    create_notification,
    create_request,
    create_response,
)


class Recorder(RequestHandlerInterface, ResponseHandlerInterface):
    def __init__(self, fail=False):
        self.fail = fail
        self.requests = []
        self.request_batches = []
        self.responses = []
        self.response_batches = []

    def on_request(self, request):
        if self.fail:
            raise RuntimeError("boom")
        self.requests.append(request)

    def on_request_batch(self, batch):
        self.request_batches.append(batch)

    def on_response(self, response):
        self.responses.append(response)

    def on_response_batch(self, batch):
        self.response_batches.append(batch)


def _frame(body, content_type=None):
    header = b"Content-Length: " + str(len(body)).encode() + b"\r\n"
    if content_type is not None:
        header += b"Content-Type: " + content_type.encode() + b"\r\n"
    return header + b"\r\n" + body


def _written(send):
    out = io.BytesIO()
    send(Connection(io.BytesIO(), out))
    return out.getvalue()


def _receive(data, recorder=None):
    recorder = recorder or Recorder()
    Connection(io.BytesIO(data), io.BytesIO()).receive_next_message(recorder, recorder)
    return recorder


def test_send_request_writes_framed_json():
    data = _written(lambda c: c.send_request(create_request(1, "initialize")))
    header, body = data.split(b"\r\n\r\n", 1)
    assert body == b'{"jsonrpc":"2.0","id":1,"method":"initialize"}'
    assert header == b"Content-Length: " + str(len(body)).encode()


def test_content_length_counts_bytes():
    data = _written(lambda c: c.send_request(create_notification("x", {"text": "\u00e9\u00e9"})))
    header, body = data.split(b"\r\n\r\n", 1)
    assert int(header.split(b":")[1]) == len(body)
    assert len(body) > len(body.decode("utf-8"))


def test_request_round_trip():
    request = create_request(7, "textDocument/hover", {"a": [1, 2], "t": "\u00e9"})
    recorder = _receive(_written(lambda c: c.send_request(request)))
    assert recorder.requests == [request]
    assert recorder.responses == []


def test_response_round_trip():
    response = create_response(3, {"ok": True})
    error = create_error_response(4, -32601, "nope")
    assert _receive(_written(lambda c: c.send_response(response))).responses == [response]
    assert _receive(_written(lambda c: c.send_response(error))).responses == [error]


def test_batch_round_trips():
    requests = [create_request(1, "a"), create_notification("b", [1])]
    responses = [create_response(1, None), create_response("two", [3])]
    assert _receive(_written(lambda c: c.send_request_batch(requests))).request_batches == [requests]
    assert _receive(_written(lambda c: c.send_response_batch(responses))).response_batches == [responses]


def test_consecutive_messages_are_read_in_order():
    first = create_request(1, "first")
    second = create_notification("second")
    data = _written(lambda c: (c.send_request(first), c.send_request(second)))
    recorder = Recorder()
    connection = Connection(io.BytesIO(data), io.BytesIO())
    connection.receive_next_message(recorder, recorder)
    connection.receive_next_message(recorder, recorder)
    assert recorder.requests == [first, second]
    with pytest.raises(LSPConnectionError, match="Connection lost"):
        connection.receive_next_message(recorder, recorder)


def test_empty_input_is_connection_lost():
    with pytest.raises(LSPConnectionError, match="Connection lost"):
        _receive(b"")


def test_invalid_content_type_leaves_stream_at_next_message():
    good = create_request(2, "good")
    data = _frame(b"{}", "text/plain") + _written(lambda c: c.send_request(good))
    recorder = Recorder()
    connection = Connection(io.BytesIO(data), io.BytesIO())
    with pytest.raises(ProtocolError):
        connection.receive_next_message(recorder, recorder)
    connection.receive_next_message(recorder, recorder)
    assert recorder.requests == [good]


def test_charset_check():
    body = b'{"jsonrpc":"2.0","method":"m"}'
    with pytest.raises(ProtocolError):
        _receive(_frame(body, "application/vscode-jsonrpc; charset=latin1"))
    recorder = _receive(_frame(body, "application/vscode-jsonrpc; charset=utf8; x=y"))
    assert [r.method for r in recorder.requests] == ["m"]


def test_bad_header_terminator():
    with pytest.raises(ProtocolError):
        _receive(b"Content-Length: 2\r\n\rx\n{}")


def test_malformed_json_is_connection_error():
    with pytest.raises(LSPConnectionError):
        _receive(_frame(b'{"jsonrpc":'))


def test_invalid_message_is_connection_error():
    with pytest.raises(LSPConnectionError, match="jsonrpc property is missing"):
        _receive(_frame(b'{"method":"m"}'))


def test_handler_exception_is_wrapped():
    with pytest.raises(LSPConnectionError, match="boom"):
        _receive(_frame(b'{"jsonrpc":"2.0","method":"m"}'), Recorder(fail=True))


def test_scalar_message_is_ignored():
    recorder = _receive(_frame(b"5"))
    assert (recorder.requests, recorder.responses) == ([], [])


def test_interfaces_are_abstract():
    with pytest.raises(TypeError):
        RequestHandlerInterface()