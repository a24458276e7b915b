"""Bough exception hierarchy.

Shared across controllers, the driver, and the collaborators so every
module raises and signals the same types. ``HTTPError`` values are
plain data: controllers hand them to ``done()`` rather than relying on
them unwinding the tree.
"""

from collections.abc import Iterable
from dataclasses import dataclass

from bough.http.status import describe


class BoughError(Exception):
    """Base for all bough-specific errors."""


class ConfigurationError(BoughError):
    """Raised when a controller tree or app configuration is invalid.

    Typically raised while the tree is being built, before any request.
    """


class CompletionError(BoughError):
    """A controller signalled completion more than once."""


class ResponseStateError(BoughError):
    """The response head was modified after it had been sent."""


class StoreError(BoughError):
    """An object store operation violated the store's invariants."""


@dataclass(frozen=True, slots=True)
class HTTPError(BoughError):
    """An error that maps directly to an HTTP status code.

    Signalled through ``done(err)`` by controllers, absorbed by error
    handlers and fallbacks, and rendered by the driver when it reaches
    the root. ``description`` defaults from the status table.
    """

    status: int
    description: str = ""
    headers: tuple[tuple[str, str], ...] = ()
    message: str = ""

    def __post_init__(self) -> None:
        if not self.description:
            object.__setattr__(self, "description", describe(self.status))

    def __str__(self) -> str:
        if self.message:
            return f"{self.status} {self.description}: {self.message}"
        return f"{self.status} {self.description}"


class Unauthorized(HTTPError):  # noqa: N818
    """401: the request lacks valid credentials."""

    def __init__(self, description: str = "", *, headers: tuple[tuple[str, str], ...] = ()) -> None:
        super().__init__(status=401, description=description, headers=headers)


class Forbidden(HTTPError):  # noqa: N818
    """403: the request is understood but refused."""

    def __init__(self, description: str = "") -> None:
        super().__init__(status=403, description=description)


class NotFound(HTTPError):  # noqa: N818
    """404: nothing in the tree could handle the remaining path."""

    def __init__(self, description: str = "", *, message: str = "") -> None:
        super().__init__(status=404, description=description, message=message)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: the path is handled but not for this method.

    When *allowed* is given an ``Allow`` header listing the valid
    methods is attached.
    """

    def __init__(self, allowed: Iterable[str] | None = None, description: str = "") -> None:
        headers: tuple[tuple[str, str], ...] = ()
        if allowed:
            headers = (("Allow", ", ".join(sorted(allowed))),)
        super().__init__(status=405, description=description, headers=headers)


class ServerError(HTTPError):  # noqa: N818
    """500: an unexpected failure inside a controller."""

    def __init__(self, description: str = "", *, message: str = "") -> None:
        super().__init__(status=500, description=description, message=message)


class UpstreamIncomplete(HTTPError):  # noqa: N818
    """504: the tree reported success but never finished the response,
    or did not complete before the request timeout."""

    def __init__(self, description: str = "", *, message: str = "") -> None:
        super().__init__(status=504, description=description, message=message)


def status_of(exc: BaseException) -> int:
    """Return the HTTP status carried by *exc* (500 for anything else)."""
    if isinstance(exc, HTTPError):
        return exc.status
    return 500


def as_http_error(exc: BaseException) -> HTTPError:
    """Normalise any exception into an ``HTTPError``.

    Non-HTTP errors become a ``ServerError`` whose message names the
    original exception type.
    """
    if isinstance(exc, HTTPError):
        return exc
    return ServerError(message=f"{type(exc).__name__}: {exc}")


_KINDS: dict[int, type[HTTPError]] = {
    401: Unauthorized,
    403: Forbidden,
    404: NotFound,
    405: MethodNotAllowed,
    500: ServerError,
    504: UpstreamIncomplete,
}


def error_for_status(status: int, description: str = "") -> HTTPError:
    """Build the most specific ``HTTPError`` kind for *status*.

    Statuses without a dedicated kind give a plain ``HTTPError``.
    """
    kind = _KINDS.get(status)
    if kind is None:
        return HTTPError(status, description)
    return kind(description=description)
