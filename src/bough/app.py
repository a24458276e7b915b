"""Bough application class.

Wraps a root controller as an ASGI 3.0 application. The controller tree
is built up front by composing controllers; the app only drives it.
"""

import inspect
import logging
import signal
from collections.abc import Callable
from typing import Any

from bough._internal.asgi import Receive, Scope, Send
from bough.config import AppConfig
from bough.errors import HTTPError
from bough.protocol import Controller
from bough.server.handler import handle_request, send_error
from bough.templating import TemplateRenderer

logger = logging.getLogger("bough.server")


def _interrupt_process() -> None:
    """Ask the hosting server to shut down, as Ctrl-C would."""
    signal.raise_signal(signal.SIGINT)


class App:
    """A bough application: one controller tree behind an ASGI interface.

    Usage::

        from bough import App
        from bough.controllers import create_error_handler, create_router

        root = create_error_handler([500], create_router([...]))
        app = App(root)
        app.run()

    When ``config.quit_on_error`` is set, the first error that reaches
    the root stops the server: the app calls *on_quit* (by default it
    interrupts its own process) and answers 503 until it is gone.
    """

    __slots__ = ("_halted", "_on_quit", "_shutdown_hooks", "_startup_hooks", "config", "root")

    def __init__(
        self,
        root: Controller,
        config: AppConfig | None = None,
        *,
        on_quit: Callable[[], None] | None = None,
    ) -> None:
        self.root = root
        self.config: AppConfig = config or AppConfig()
        self._on_quit = on_quit or _interrupt_process
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._halted = False
        TemplateRenderer.configure_default(self.config.template_dir)

    @property
    def halted(self) -> bool:
        """True once an unhandled error has stopped the app."""
        return self._halted

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook to run at ASGI lifespan startup."""
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook to run at ASGI lifespan shutdown."""
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start a pounce server for this app.

        Debug configs get the single-worker reloading dev server,
        everything else the multi-worker production server.
        """
        host = host or self.config.host
        port = port or self.config.port
        if self.config.debug:
            from bough.server.serve import run_dev_server

            run_dev_server(
                self,
                host,
                port,
                reload_include=self.config.reload_include,
                reload_dirs=self.config.reload_dirs,
            )
        else:
            from bough.server.serve import run_production_server

            run_production_server(
                self,
                host=host,
                port=port,
                workers=self.config.workers,
                log_level=self.config.log_level,
                max_connections=self.config.max_connections,
                keep_alive_timeout=self.config.keep_alive_timeout,
            )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        if scope["type"] != "http":
            return

        if self._halted:
            await send_error(send, HTTPError(503, message="Server is shutting down"))
            return

        err = await handle_request(
            scope,
            receive,
            send,
            root=self.root,
            debug=self.config.debug,
            request_timeout=self.config.request_timeout,
        )
        if err is not None and self.config.quit_on_error and not self._halted:
            self._halted = True
            logger.warning("Quitting (unhandled error and quit_on_error=True): %s", err)
            self._on_quit()

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol with the registered hooks."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                except Exception as exc:
                    logger.exception("Startup hook failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return
