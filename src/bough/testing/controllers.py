"""Helpers for exercising controllers without an app or a server.

Usage::

    context = make_context("GET", "/foo/")
    err = await run_controller(router, context)
    assert err is None
    assert read_response(context.response).text == "foo"
"""

import asyncio
from collections.abc import Mapping

from anyio import ClosedResourceError, EndOfStream, WouldBlock

from bough._internal.invoke import call_controller
from bough.context import Context
from bough.http.headers import Headers
from bough.http.request import Request
from bough.http.response import ResponseWriter
from bough.protocol import Controller
from bough.testing.client import TestResponse


def make_context(
    method: str = "GET",
    path: str = "/",
    *,
    headers: Mapping[str, str] | None = None,
    body: bytes = b"",
) -> Context:
    """A root context for a request that was never on the wire."""
    body_sent = False

    async def receive() -> dict[str, object]:
        nonlocal body_sent
        if not body_sent:
            body_sent = True
            return {"type": "http.request", "body": body, "more_body": False}
        return {"type": "http.disconnect"}

    path_part, _, query_string = path.partition("?")
    request = Request(
        method=method.upper(),
        path=path_part,
        headers=Headers.from_mapping(headers or {}),
        query_string=query_string.encode("latin-1"),
        _receive=receive,
    )
    return Context.for_request(request, ResponseWriter())


async def run_controller(
    controller: Controller,
    context: Context,
    *,
    timeout: float = 5.0,
) -> BaseException | None:
    """Invoke *controller* and wait for its completion.

    Returns the error it signalled, or ``None`` on success. Fails the
    test with ``TimeoutError`` if it never completes.
    """
    outcome: asyncio.Future[BaseException | None] = asyncio.get_running_loop().create_future()

    def on_complete(err: BaseException | None) -> None:
        outcome.set_result(err)

    call_controller(controller, context, on_complete)
    return await asyncio.wait_for(outcome, timeout)


def read_response(response: ResponseWriter) -> TestResponse:
    """Collect everything *response* has queued so far."""
    status = 0
    raw_headers: list[tuple[bytes, bytes]] = []
    parts: list[bytes] = []
    while True:
        try:
            message = response.receive_stream.receive_nowait()
        except WouldBlock:
            break
        except (EndOfStream, ClosedResourceError):
            response.receive_stream.close()
            break
        if message["type"] == "http.response.start":
            status = message["status"]
            raw_headers = list(message["headers"])
        else:
            parts.append(message.get("body", b""))
    return TestResponse(status=status, headers=Headers(raw_headers), body=b"".join(parts))
