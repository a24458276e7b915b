"""Deferred-head response writer.

Controllers build the response imperatively: ``set_status`` and
``add_headers`` are buffered until the first ``write`` or ``end``, which
sends the head irrevocably. Any later attempt to change the head is a
programming error and raises ``ResponseStateError``.

The writer never touches the transport directly. It queues ASGI
messages on an anyio memory stream which the driver drains into
``send`` (see ``bough.server.sender``), so controllers can write from
plain synchronous callbacks.
"""

import math
from collections.abc import Mapping

import anyio
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from bough._internal.asgi import Message
from bough.errors import ResponseStateError


class ResponseWriter:
    """Imperative response builder with a buffered head.

    Usage::

        context.response.set_status(200)
        context.response.add_headers({"Content-Type": "text/plain"})
        context.response.write("hello")
        context.response.end()
    """

    __slots__ = ("_finished", "_head_sent", "_headers", "_outbox", "_status", "receive_stream")

    def __init__(self) -> None:
        self._status = 200
        # lower-cased name -> (name as given, value)
        self._headers: dict[str, tuple[str, str]] = {}
        self._head_sent = False
        self._finished = False
        send, receive = anyio.create_memory_object_stream[Message](math.inf)
        self._outbox: MemoryObjectSendStream[Message] = send
        self.receive_stream: MemoryObjectReceiveStream[Message] = receive

    # -- State --

    @property
    def status(self) -> int:
        return self._status

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        """Headers set so far, in insertion order."""
        return tuple(self._headers.values())

    @property
    def head_sent(self) -> bool:
        """True once status and headers have been flushed."""
        return self._head_sent

    @property
    def finished(self) -> bool:
        """True once ``end()`` has been called."""
        return self._finished

    # -- Head --

    def set_status(self, status: int) -> None:
        """Set the status code. Only valid before the first write."""
        self._check_head_open("status")
        self._status = status

    def add_headers(self, headers: Mapping[str, str] | tuple[tuple[str, str], ...]) -> None:
        """Add headers, replacing any already set under the same name."""
        self._check_head_open("headers")
        items = headers.items() if isinstance(headers, Mapping) else headers
        for name, value in items:
            self._headers[name.lower()] = (name, str(value))

    def remove_header(self, name: str) -> None:
        """Drop a header if it was set. Only valid before the first write."""
        self._check_head_open("headers")
        self._headers.pop(name.lower(), None)

    # -- Body --

    def write(self, data: str | bytes) -> None:
        """Write a body chunk, sending the head first if needed."""
        if self._finished:
            msg = "Cannot write to a response that has already ended."
            raise ResponseStateError(msg)
        self._send_head()
        chunk = data.encode("utf-8") if isinstance(data, str) else data
        if chunk:
            self._outbox.send_nowait(
                {"type": "http.response.body", "body": chunk, "more_body": True}
            )

    def end(self, data: str | bytes | None = None) -> None:
        """Finish the response, optionally with a last chunk."""
        if self._finished:
            msg = "Response has already ended."
            raise ResponseStateError(msg)
        self._send_head()
        chunk = b""
        if data is not None:
            chunk = data.encode("utf-8") if isinstance(data, str) else data
        self._finished = True
        self._outbox.send_nowait({"type": "http.response.body", "body": chunk, "more_body": False})
        self._outbox.close()

    def close(self) -> None:
        """Stop accepting messages without finishing the response."""
        self._outbox.close()

    # -- Internal --

    def _check_head_open(self, what: str) -> None:
        if self._head_sent:
            msg = f"Cannot set the response {what} after content has been sent."
            raise ResponseStateError(msg)

    def _send_head(self) -> None:
        if self._head_sent:
            return
        self._head_sent = True
        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in self._headers.values()
        ]
        self._outbox.send_nowait(
            {"type": "http.response.start", "status": self._status, "headers": raw_headers}
        )
