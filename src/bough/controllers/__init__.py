"""Controllers: protocol-based, no inheritance required.

A controller is any callable matching:
    def controller(context: Context, done: Done) -> object

Composing controllers:
    create_router -- Dispatch on a prefix of the remaining path
    create_method_map -- Dispatch on the request method
    create_error_handler -- Absorb errors into an error page
    create_fallback -- Try children in turn until one succeeds
    create_subtree_data -- Scope extra ``context.data`` to a subtree

Leaf controllers:
    create_static_content -- Fixed body
    create_template_renderer -- Render a kida template (requires kida)
    create_error_generator -- Always fail with a given status
    create_file_server -- Serve files from a directory

Filters:
    ensure_valid_method, ensure_get, ensure_post -- Reject other methods
"""

from bough.controllers.core import (
    Route,
    create_error_handler,
    create_fallback,
    create_method_map,
    create_router,
    create_subtree_data,
)
from bough.controllers.files import create_file_server
from bough.controllers.filters import ensure_get, ensure_post, ensure_valid_method
from bough.controllers.generic import (
    create_error_generator,
    create_static_content,
    create_template_renderer,
    respond,
)
from bough.protocol import Completion, Controller, Done, async_controller

__all__ = [
    "Completion",
    "Controller",
    "Done",
    "Route",
    "async_controller",
    "create_error_generator",
    "create_error_handler",
    "create_fallback",
    "create_file_server",
    "create_method_map",
    "create_router",
    "create_static_content",
    "create_subtree_data",
    "create_template_renderer",
    "ensure_get",
    "ensure_post",
    "ensure_valid_method",
    "respond",
]
