"""Generic leaf controllers for common output use-cases."""

from collections.abc import Mapping
from typing import Any

from bough.context import Context
from bough.errors import error_for_status
from bough.protocol import Controller, Done, async_controller
from bough.templating import TemplateRenderer


def respond(context: Context, content: str | bytes, content_type: str = "text/plain") -> None:
    """Write a complete 200 response in one call."""
    response = context.response
    response.set_status(200)
    response.add_headers({"Content-Type": content_type})
    response.end(content)


def create_static_content(content: str | bytes, content_type: str = "text/plain") -> Controller:
    """A controller that outputs *content* verbatim."""

    def static_content(context: Context, done: Done) -> None:
        respond(context, content, content_type)
        done()

    return static_content


def create_template_renderer(
    template_name: str,
    data: Mapping[str, Any] | None = None,
    content_type: str = "text/html",
    *,
    renderer: TemplateRenderer | None = None,
) -> Controller:
    """A controller that renders a template.

    The template sees ``context.data`` with *data* layered on top. *data*
    is read when the controller runs, so a mutable mapping may change
    between requests. Render failures are signalled through ``done``.
    """

    @async_controller
    async def template_renderer(context: Context) -> None:
        active = renderer or TemplateRenderer.default()
        merged = {**context.data, **(data or {})}
        respond(context, await active.render(template_name, merged), content_type)

    return template_renderer


def create_error_generator(status: int, description: str = "") -> Controller:
    """A controller that always fails with the given status.

    Handy for stubbing branches of a tree while building it.
    """

    def error_generator(context: Context, done: Done) -> None:
        done(error_for_status(status, description))

    return error_generator
