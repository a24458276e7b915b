"""Run a bough App under the pounce ASGI server.

Two modes: a single-worker development server that reloads on file
changes, and a multi-worker production server. Both take the live App
object rather than an import string.

Requires ``pounce`` (``pip install bough[server]``).
"""

import logging
from typing import TYPE_CHECKING, Any

from bough.errors import ConfigurationError

if TYPE_CHECKING:
    from bough.app import App

logger = logging.getLogger("bough.server")


def run_dev_server(
    app: "App",
    host: str,
    port: int,
    *,
    reload: bool = True,
    reload_include: tuple[str, ...] = (),
    reload_dirs: tuple[str, ...] = (),
    app_path: str | None = None,
) -> None:
    """Serve *app* with one worker, reloading when watched files change.

    *reload_include* adds file extensions to watch (e.g. ``(".html",)``)
    and *reload_dirs* adds directories besides the cwd. With *app_path*
    (``"module:attribute"``) pounce re-imports the app on every reload,
    so controller changes on disk take effect.
    """
    server = _build_server(
        app,
        {
            "host": host,
            "port": port,
            "workers": 1,
            "reload": reload,
            "reload_include": reload_include,
            "reload_dirs": reload_dirs,
        },
        app_path=app_path,
    )
    logger.info("Development server at http://%s:%d/ (reload %s)", host, port, "on" if reload else "off")
    server.run()


def run_production_server(
    app: "App",
    host: str = "0.0.0.0",
    port: int = 8000,
    workers: int = 0,  # 0 = auto-detect from CPU count
    *,
    log_level: str = "info",
    max_connections: int = 1000,
    keep_alive_timeout: float = 5.0,
) -> None:
    """Serve *app* with several workers and no reloading.

    The app's own ``request_timeout`` bounds how long a controller tree
    may run; pounce's request timeout is left at its default.
    """
    server = _build_server(
        app,
        {
            "host": host,
            "port": port,
            "workers": workers,
            "log_level": log_level,
            "max_connections": max_connections,
            "keep_alive_timeout": keep_alive_timeout,
        },
    )
    logger.info("Production server at http://%s:%d/ (%s workers)", host, port, workers or "auto")
    server.run()


def _build_server(app: "App", options: dict[str, Any], *, app_path: str | None = None) -> Any:
    try:
        from pounce.config import ServerConfig
        from pounce.server import Server
    except ImportError:
        msg = (
            "Running a server requires the 'pounce' package. "
            "Install it with: pip install bough[server]"
        )
        raise ConfigurationError(msg) from None
    if app_path is None:
        return Server(ServerConfig(**options), app)
    return Server(ServerConfig(**options), app, app_path=app_path)
