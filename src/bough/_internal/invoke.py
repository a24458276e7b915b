"""Invoke helpers: call any controller under the completion protocol.

Controllers can complete synchronously, complete later, raise, or
return an awaitable. Every composing controller calls its children
through ``call_controller`` so that handling lives in exactly one place.

Usage::

    from bough._internal.invoke import call_controller

    call_controller(sub, context, on_complete)
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from bough.protocol import Completion, Controller

if TYPE_CHECKING:
    from bough.context import Context

logger = logging.getLogger("bough.controllers")

# Tasks for awaitable controllers; held until they finish so they
# are not garbage collected mid-flight.
_background: set[asyncio.Task[None]] = set()


def call_controller(
    controller: Controller,
    context: "Context",
    done: Callable[[BaseException | None], None],
) -> Completion:
    """Invoke *controller* so that it reports through *done* exactly once.

    A synchronous raise before completion becomes ``done(exc)``. A raise
    after completion belongs to whatever ran inside the callback and is
    re-raised. Awaitable results are scheduled on the running loop.
    """
    completion = done if isinstance(done, Completion) else Completion(done, _label(controller))
    try:
        result = controller(context, completion)
    except Exception as exc:
        if completion.called or completion.closed:
            raise
        completion(exc)
        return completion
    if inspect.isawaitable(result):
        spawn(result, completion)
    return completion


def spawn(awaitable: Awaitable[object], completion: Completion) -> asyncio.Task[None]:
    """Run *awaitable* in the background, reporting escapes through *completion*."""

    async def run() -> None:
        try:
            await awaitable
        except Exception as exc:
            if completion.called or completion.closed:
                logger.exception("Controller task failed after it had completed")
                return
            completion(exc)

    task = asyncio.get_running_loop().create_task(run())
    _background.add(task)
    task.add_done_callback(_background.discard)
    return task


def _label(controller: Controller) -> str:
    return getattr(controller, "__qualname__", None) or type(controller).__name__
