"""ASGI response sending: drains a ResponseWriter into ``send()``.

The writer queues ready-made ASGI messages; this module is the only
place they reach the transport.
"""

import logging

from anyio.streams.memory import MemoryObjectReceiveStream

from bough._internal.asgi import Message, Send

logger = logging.getLogger("bough.server")


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    # RFC: 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def pump_response(stream: MemoryObjectReceiveStream[Message], send: Send) -> None:
    """Forward every queued message to *send* until the writer closes.

    Body bytes written for a status that forbids a body are dropped.
    """
    body_allowed = True
    async with stream:
        async for message in stream:
            if message["type"] == "http.response.start":
                body_allowed = _body_allowed(message["status"])
            elif not body_allowed and message.get("body"):
                logger.debug("Dropped %d body bytes: status forbids a body", len(message["body"]))
                message = {**message, "body": b""}
            await send(message)
