"""Error page rendering.

The one place an error turns into response bytes. Used by
``create_error_handler`` when it absorbs an error and by the driver when
an error reaches the root of the tree.
"""

import html

from bough.errors import as_http_error
from bough.http.response import ResponseWriter


def error_page(status: int, description: str, message: str = "") -> str:
    """Minimal HTML body for an error response."""
    body = f"<h1>{status} {html.escape(description)}</h1>"
    if message:
        body += f"\n<p>{html.escape(message)}</p>"
    return body


def render_error_page(
    response: ResponseWriter,
    err: BaseException,
    *,
    show_message: bool = False,
) -> None:
    """Write *err* into *response* as a complete error page.

    The response head must not have been sent yet. The error's own
    headers (e.g. ``Allow`` for a 405) are included. ``message`` is only
    shown when *show_message* is set, so exception details stay out of
    production responses.
    """
    http_err = as_http_error(err)
    response.set_status(http_err.status)
    # a length set by the failed controller does not fit the error body
    response.remove_header("Content-Length")
    response.add_headers({"Content-Type": "text/html; charset=utf-8"})
    if http_err.headers:
        response.add_headers(http_err.headers)
    message = http_err.message if show_message else ""
    response.end(error_page(http_err.status, http_err.description, message))
