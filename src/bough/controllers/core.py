"""Core composing controllers: the boughs of most controller trees.

Each factory returns a controller that delegates to sub-controllers and
decides what their completion means: the router and method map pick one
child, the error handler absorbs failures into an error page, the
fallback tries children in turn, and the subtree-data overlay scopes
``context.data`` to its child.

All children are invoked through ``call_controller`` so synchronous
raises and awaitable controllers follow the same completion path.
"""

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from bough._internal.invoke import call_controller
from bough.context import Context
from bough.errors import ConfigurationError, MethodNotAllowed, NotFound, status_of
from bough.protocol import Controller, Done
from bough.server.errors import render_error_page


@dataclass(frozen=True, slots=True)
class Route:
    """A router entry: a pattern anchored at the start of the remaining path."""

    pattern: re.Pattern[str]
    view: Controller

    @classmethod
    def coerce(cls, entry: "Route | tuple[str | re.Pattern[str], Controller]") -> "Route":
        """Accept a ``Route`` or a ``(pattern, view)`` pair."""
        if isinstance(entry, Route):
            return entry
        try:
            pattern, view = entry
        except (TypeError, ValueError) as exc:
            msg = f"Router entries must be Route or (pattern, view) pairs, got {entry!r}"
            raise ConfigurationError(msg) from exc
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        return cls(pattern=pattern, view=view)


def create_router(routes: Iterable[Route | tuple[str | re.Pattern[str], Controller]]) -> Controller:
    """Dispatch to the first route whose pattern matches the remaining path.

    Patterns are tried in declaration order with ``re.match``, so they
    are anchored at the start of ``context.remaining_path`` but may
    match only a prefix. On a match, captured groups are appended to
    ``context.pattern_groups`` and the matched text is consumed from
    ``remaining_path`` before the view runs. No match fails with
    ``NotFound``. Methods play no part in matching.

    Usage::

        router = create_router([
            (r"foo/$", display_foo),
            (r"bar/", display_bar),
            (r"media/", create_file_server("media")),
        ])
    """
    table = tuple(Route.coerce(entry) for entry in routes)

    def router(context: Context, done: Done) -> None:
        path = context.remaining_path
        for route in table:
            match = route.pattern.match(path)
            if match is None:
                continue
            groups = match.groups()
            if groups:
                context.pattern_groups.extend(groups)
            context.remaining_path = path[match.end() :]
            call_controller(route.view, context, done)
            return
        done(NotFound(message=f"No route matches {path!r}"))

    return router


def create_method_map(
    mapping: Mapping[str, Controller],
    default: Controller | None = None,
) -> Controller:
    """Dispatch on ``context.request.method``.

    Method names are matched upper-case. Unmapped methods go to
    *default* when given, else fail with ``MethodNotAllowed`` carrying an
    ``Allow`` header for the mapped methods.
    """
    table = {method.upper(): controller for method, controller in mapping.items()}
    allowed = frozenset(table)

    def method_map(context: Context, done: Done) -> None:
        sub = table.get(context.request.method)
        if sub is None:
            sub = default
        if sub is None:
            done(MethodNotAllowed(allowed))
            return
        call_controller(sub, context, done)

    return method_map


def create_error_handler(*args: Any) -> Controller:
    """Wrap a controller and absorb its errors into an error page.

    Call as ``create_error_handler(sub)`` to handle every error, or
    ``create_error_handler(unhandled, sub)`` to let errors whose status
    is in *unhandled* propagate unchanged. Errors without a status count
    as 500. An absorbed error is rendered into ``context.response`` and
    reported upward as success. If the response head has already been
    sent the error cannot be rendered and propagates as-is.
    """
    unhandled, sub = _split_optional(args, "create_error_handler")
    unhandled_codes = None if unhandled is None else frozenset(unhandled)

    def error_handler(context: Context, done: Done) -> None:
        def on_complete(err: BaseException | None) -> None:
            if err is None:
                done()
                return
            if unhandled_codes is not None and status_of(err) in unhandled_codes:
                done(err)
                return
            if context.response.head_sent:
                done(err)
                return
            render_error_page(context.response, err)
            done()

        call_controller(sub, context, on_complete)

    return error_handler


def create_fallback(*args: Any) -> Controller:
    """Try controllers in order until one succeeds.

    Call as ``create_fallback(subs)`` to absorb every error, or
    ``create_fallback(valid, subs)`` to absorb only errors whose status
    is in *valid*; any other error escalates at once without trying the
    rest. When every controller fails with an absorbable error the
    **last** error is reported. An empty list fails with ``NotFound``.

    Attempts share the same context, so routing state accumulates
    across them. Synchronous failures are retried in a loop rather than
    by recursion, so the chain may be arbitrarily long.
    """
    valid, subs = _split_optional(args, "create_fallback")
    valid_codes = None if valid is None else frozenset(valid)
    chain = tuple(subs)

    def absorbable(err: BaseException) -> bool:
        return valid_codes is None or status_of(err) in valid_codes

    def fallback(context: Context, done: Done) -> None:
        if not chain:
            done(NotFound(message="Fallback has no controllers"))
            return

        index = 0
        running = False
        advance_pending = False

        def on_complete(err: BaseException | None) -> None:
            nonlocal index
            if err is None:
                done()
                return
            if not absorbable(err) or index + 1 >= len(chain):
                done(err)
                return
            index += 1
            advance()

        def advance() -> None:
            nonlocal running, advance_pending
            if running:
                # A child completed synchronously: let the loop below
                # pick up the next attempt instead of nesting a call.
                advance_pending = True
                return
            running = True
            try:
                while True:
                    advance_pending = False
                    call_controller(chain[index], context, on_complete)
                    if not advance_pending:
                        break
            finally:
                running = False

        advance()

    return fallback


def create_subtree_data(overlay: Mapping[str, Any], sub: Controller) -> Controller:
    """Expose *overlay* in ``context.data`` for the duration of *sub*.

    Overlay keys shadow the keys already visible; writes inside the
    subtree land in the overlay. The previous ``context.data`` object is
    restored before the completion is forwarded, whatever the outcome,
    including a synchronous raise from *sub*.
    """
    frozen_overlay = dict(overlay)

    def subtree_data(context: Context, done: Done) -> None:
        saved = context.data
        context.data = saved.new_child(dict(frozen_overlay))

        def on_complete(err: BaseException | None) -> None:
            context.data = saved
            done(err)

        call_controller(sub, context, on_complete)

    return subtree_data


def _split_optional(args: tuple[Any, ...], name: str) -> tuple[Iterable[int] | None, Any]:
    """Handle the ``(sub)`` / ``(codes, sub)`` calling convention."""
    if len(args) == 1:
        return None, args[0]
    if len(args) == 2:
        return args[0], args[1]
    msg = f"{name}() takes 1 or 2 positional arguments but {len(args)} were given"
    raise TypeError(msg)
