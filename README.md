# lspframework

Pieces for writing Language Server Protocol servers and clients in Python.
It has no dependencies outside the standard library.

## Modules

- `lspframework.jsonvalue`: a strict JSON parser (`parse`) and serializer
  (`stringify`). JSON values are plain Python objects: `None`, `bool`,
  `int`, `float`, `str`, `dict` and `list`. A `ParseError` carries the
  offset of the problem in `text_pos`. A wrong type or a missing key raises
  `JsonTypeError` (see `get_key` and `number`). `stringify(value, True)`
  indents with tabs.
- `lspframework.jsonrpc`: JSON-RPC 2.0 `Request`, `Response` and
  `ResponseError` dataclasses. `message_from_json` and
  `message_batch_from_json` read them from JSON values, and
  `request_to_json`, `response_to_json` and the batch variants write them
  back. `create_request`, `create_notification`, `create_response` and
  `create_error_response` build messages. An invalid structure raises
  `ProtocolError`. A request without an id is a notification
  (`Request.is_notification()`).
- `lspframework.connection`: `Connection` reads and writes messages framed
  with `Content-Length` headers over any pair of binary streams.
  `standard_input()` and `standard_output()` return the process's stdio as
  binary streams. A lost connection, or a message that cannot be processed,
  raises `LSPConnectionError`. A bad header or content type raises
  `connection.ProtocolError`. Messages are logged at DEBUG level through
  the `lspframework.connection` logger.
- `lspframework.requesthandler`: `RequestHandler` passes incoming requests
  and notifications to the callbacks you register with `add_request` and
  `add_notification`. It sends the responses back over the connection.
- `lspframework.messagedispatcher`: `MessageDispatcher` sends outgoing
  requests and notifications and matches each response to its request.
  `send_request` returns a `FutureResponse`, which holds the message id and
  a `concurrent.futures.Future`. `send_request_with_callbacks` calls `then`
  with the result, or `error` with a `ResponseError`.
- `lspframework.messagehandler`: `MessageHandler` ties a connection, a
  request handler and a dispatcher together.
- `lspframework.serialization`: `to_json` and `from_json` convert between
  Python values and JSON values. They cover enums, `FileURI`, lists, dicts,
  tuples, unions and optionals, and classes with a `to_json()` method and a
  `from_json` classmethod.
- `lspframework.error`: `Error`, `RequestError` and `ResponseError`, each
  with a `code`, a `message` and optional `data`.
- `lspframework.fileuri`: `FileURI`, a minimal `file://` URI kept as its
  decoded path.
- `lspframework.strutil`: string helpers and `CaseInsensitiveDict`.

## Installation

```
pip install .
```

## Example

```python
from lspframework.connection import (
    Connection,
    LSPConnectionError,
    standard_input,
    standard_output,
)
from lspframework.messagehandler import MessageHandler

connection = Connection(standard_input(), standard_output())

def on_hover(message_id, params):
    return {"contents": "hello"}

def on_initialized(params):
    pass

with MessageHandler(connection) as handler:
    handler.request_handler.add_request("textDocument/hover", on_hover, dict)
    handler.request_handler.add_notification("initialized", on_initialized, dict)

    try:
        while True:
            handler.process_incoming_messages()
    except LSPConnectionError:
        pass
```

How request handlers are called:

- A request handler is called as `handler(message_id, params)`. If it was
  registered without a params type, it is called as `handler(message_id)`.
- Pass `typing.Any` as the params type to get the raw JSON params.
- A notification handler is called as `handler(params)`, or as `handler()`
  without a params type.

How request handlers answer:

- A handler that raises `lspframework.error.RequestError` sends an error
  response with the code, message and data that the error carries.
- A params type mismatch answers with the invalid-params code.
- Any other exception answers with the internal-error code.
- A request for a method with no registered handler gets a method-not-found
  error.
- A handler may return a `concurrent.futures.Future`. The response is then
  sent when the future is done, from the thread that completes it.
- In a batch, futures are waited on at once.
- `close()` stops responses to results that are still pending.

## What this package does not do

- It has no typed classes for the Language Server Protocol's messages and
  structures. Methods are named by their strings, such as
  `"textDocument/hover"`, and params and results are plain JSON values or
  your own classes, converted through `lspframework.serialization`.
- It has no command-line program and runs no server loop of its own. You
  write the loop, as in the example above.

## Tests

```
pip install .[test]
pytest
```