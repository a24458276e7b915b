"""Controller protocol and the completion callback.

A controller is any callable matching::

    def my_controller(context: Context, done: Done) -> object: ...

No base class required. The controller must eventually call
``done()`` on success or ``done(err)`` on failure, exactly once. It may
complete synchronously, before returning, or later from a task or
callback; composing controllers handle both the same way.

A controller may also be a coroutine function (or return any other
awaitable). The composing layer schedules the awaitable on the running
loop; an exception escaping it is reported through ``done``.
"""

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, TypeAlias

from bough.errors import CompletionError

if TYPE_CHECKING:
    from bough.context import Context

logger = logging.getLogger("bough.controllers")


class Done(Protocol):
    """The completion callback handed to every controller."""

    def __call__(self, err: BaseException | None = None, /) -> None: ...


# The single capability shape every controller shares
Controller: TypeAlias = Callable[["Context", Done], object]


class Completion:
    """A completion callback that fires at most once.

    A second call means a controller broke the protocol. With
    assertions enabled (the default) that raises ``CompletionError``;
    under ``python -O`` it is logged and dropped.

    The driver ``close()``s a completion once it has stopped waiting
    (e.g. after a timeout). Calls after that are silently ignored.
    """

    __slots__ = ("_callback", "_called", "_closed", "_label")

    def __init__(self, callback: Callable[[BaseException | None], None], label: str = "") -> None:
        self._callback = callback
        self._label = label
        self._called = False
        self._closed = False

    @property
    def called(self) -> bool:
        return self._called

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def __call__(self, err: BaseException | None = None, /) -> None:
        if self._closed:
            logger.debug("Ignoring completion of %s after it was closed", self._label or "controller")
            return
        if self._called:
            msg = f"{self._label or 'Controller'} signalled completion more than once."
            if __debug__:
                raise CompletionError(msg)
            logger.error(msg)
            return
        self._called = True
        self._callback(err)

    def __repr__(self) -> str:
        state = "closed" if self._closed else "called" if self._called else "pending"
        return f"<Completion {self._label or 'controller'} {state}>"


def async_controller(func: Callable[["Context"], Awaitable[object]]) -> Controller:
    """Adapt ``async def handler(context)`` to the controller protocol.

    Returning normally signals success; raising signals the exception::

        @async_controller
        async def profile(context):
            user = await store.get(context.pattern_groups[0])
            if user is None:
                raise NotFound()
            context.response.end(user["name"])
    """

    @functools.wraps(func)
    async def controller(context: "Context", done: Done) -> None:
        try:
            await func(context)
        except Exception as exc:
            done(exc)
            return
        done()

    return controller
