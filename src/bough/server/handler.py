"""Transport driver: runs one controller tree traversal per request.

The only component that touches raw ASGI for HTTP requests. Builds a
``Request``, ``ResponseWriter`` and ``Context``, invokes the root
controller, waits for its completion signal, and turns whatever error
reaches the root into an error page.
"""

import asyncio
import logging

import anyio

from bough._internal.asgi import Receive, Scope, Send
from bough._internal.invoke import call_controller
from bough.context import Context
from bough.errors import HTTPError, UpstreamIncomplete, as_http_error
from bough.http.request import Request
from bough.http.response import ResponseWriter
from bough.protocol import Completion, Controller
from bough.server.errors import render_error_page
from bough.server.sender import pump_response

logger = logging.getLogger("bough.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    root: Controller,
    debug: bool = False,
    request_timeout: float | None = None,
) -> HTTPError | None:
    """Process a single HTTP request through the controller tree.

    Returns the error reported to the client, or ``None`` when the tree
    produced a complete response on its own. The caller decides what an
    unhandled error means for the server (see ``AppConfig.quit_on_error``).
    """
    request = Request.from_asgi(scope, receive)
    logger.info('"%s %s HTTP/%s"', request.method, request.url, request.http_version)

    response = ResponseWriter()
    context = Context.for_request(request, response)

    async with anyio.create_task_group() as tg:
        tg.start_soon(pump_response, response.receive_stream, send)
        try:
            err = await run_tree(root, context, timeout=request_timeout)
            return finish_response(context, err, debug=debug)
        finally:
            # Unblock the pump whatever happened above
            response.close()


async def run_tree(
    root: Controller,
    context: Context,
    *,
    timeout: float | None = None,
) -> BaseException | None:
    """Invoke *root* and wait for its completion signal.

    Returns the error it reported, or ``None`` on success. When *timeout*
    elapses first an ``UpstreamIncomplete`` is returned and the
    completion is closed, so a late ``done`` is ignored.
    """
    loop = asyncio.get_running_loop()
    outcome: asyncio.Future[BaseException | None] = loop.create_future()

    def on_complete(err: BaseException | None) -> None:
        if not outcome.done():
            outcome.set_result(err)

    completion = Completion(on_complete, label="root controller")
    try:
        call_controller(root, context, completion)
    except Exception:
        # Raised after the tree had already completed: a bug below the
        # root, but the request itself has an outcome.
        logger.exception("Controller raised after signalling completion")

    try:
        with anyio.fail_after(timeout):
            return await outcome
    except TimeoutError:
        completion.close()
        return UpstreamIncomplete(message=f"Controller tree did not complete within {timeout}s")


def finish_response(context: Context, err: BaseException | None, *, debug: bool = False) -> HTTPError | None:
    """Make sure the client gets a complete response.

    Success with an unfinished response becomes a 504. Errors are
    rendered as an error page unless the head is already on the wire,
    in which case the response is just closed off.
    """
    request = context.request
    response = context.response

    if err is None:
        if response.finished:
            return None
        err = UpstreamIncomplete(message="Controller tree succeeded without finishing the response")

    http_err = as_http_error(err)
    if http_err is err:
        logger.info("%d %s %s: %s", http_err.status, request.method, request.path, http_err.description)
    else:
        logger.error("500 %s %s", request.method, request.path, exc_info=err)

    if response.head_sent:
        logger.error("Cannot report %s for %s %s: response already started", http_err, request.method, request.path)
        if not response.finished:
            response.end()
    else:
        render_error_page(response, http_err, show_message=debug)
    return http_err


async def send_error(send: Send, err: HTTPError) -> None:
    """Answer a request with an error page without running any controller."""
    response = ResponseWriter()
    render_error_page(response, err)
    await pump_response(response.receive_stream, send)
