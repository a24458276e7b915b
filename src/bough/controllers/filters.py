"""Filters that guard access to a controller."""

from collections.abc import Iterable

from bough._internal.invoke import call_controller
from bough.context import Context
from bough.errors import MethodNotAllowed
from bough.protocol import Controller, Done


def ensure_valid_method(methods: Iterable[str], controller: Controller) -> Controller:
    """Only let requests made with one of *methods* through.

    Anything else fails with ``MethodNotAllowed``.
    """
    valid = frozenset(method.upper() for method in methods)

    def valid_method(context: Context, done: Done) -> None:
        if context.request.method not in valid:
            done(MethodNotAllowed(valid))
            return
        call_controller(controller, context, done)

    return valid_method


def ensure_get(controller: Controller) -> Controller:
    """Only allow GET requests through."""
    return ensure_valid_method(["GET"], controller)


def ensure_post(controller: Controller) -> Controller:
    """Only allow POST requests through."""
    return ensure_valid_method(["POST"], controller)
