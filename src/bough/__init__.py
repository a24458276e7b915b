"""Bough: a Python web framework built from composable controllers.

An app is a tree of small controllers. Each one either handles the
request or hands it to a child, and reports back exactly once through
a completion callback.

Basic usage::

    from bough import App, create_error_handler, create_router
    from bough import create_static_content

    root = create_error_handler(
        create_router([
            (r"$", create_static_content("Hello, World!")),
        ])
    )
    app = App(root)
    app.run()

Templates (``pip install bough[templates]``)::

    from bough import create_template_renderer
    page = create_template_renderer("index.html", {"title": "Home"})
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BoughError",
    "Completion",
    "CompletionError",
    "ConfigurationError",
    "Context",
    "Controller",
    "Done",
    "Forbidden",
    "HTTPError",
    "MethodNotAllowed",
    "NotFound",
    "ResponseStateError",
    "ServerError",
    "Unauthorized",
    "UpstreamIncomplete",
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
]

# name -> module that defines it
_LAZY_IMPORTS: dict[str, str] = {
    "App": "bough.app",
    "AppConfig": "bough.config",
    "Context": "bough.context",
    # Errors
    "BoughError": "bough.errors",
    "CompletionError": "bough.errors",
    "ConfigurationError": "bough.errors",
    "Forbidden": "bough.errors",
    "HTTPError": "bough.errors",
    "MethodNotAllowed": "bough.errors",
    "NotFound": "bough.errors",
    "ResponseStateError": "bough.errors",
    "ServerError": "bough.errors",
    "Unauthorized": "bough.errors",
    "UpstreamIncomplete": "bough.errors",
    # Controller protocol
    "Completion": "bough.protocol",
    "Controller": "bough.protocol",
    "Done": "bough.protocol",
    "async_controller": "bough.protocol",
    # Controllers
    "create_error_handler": "bough.controllers.core",
    "create_fallback": "bough.controllers.core",
    "create_method_map": "bough.controllers.core",
    "create_router": "bough.controllers.core",
    "create_subtree_data": "bough.controllers.core",
    "create_error_generator": "bough.controllers.generic",
    "create_static_content": "bough.controllers.generic",
    "create_template_renderer": "bough.controllers.generic",
    "create_file_server": "bough.controllers.files",
    "ensure_get": "bough.controllers.filters",
    "ensure_post": "bough.controllers.filters",
    "ensure_valid_method": "bough.controllers.filters",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import bough`` fast while providing a clean top-level API.
    """
    module_name = _LAZY_IMPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
