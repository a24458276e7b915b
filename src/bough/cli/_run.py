"""``bough run``: resolve the target, apply driver policy, start pounce."""

import argparse
import logging
import sys
from typing import Any

from bough.app import App
from bough.cli._resolve import load_target, resolve_app

logger = logging.getLogger("bough.server")

# AppConfig fields the driver policy flags may override
POLICY_FIELDS = ("debug", "quit_on_error", "request_timeout")


def config_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """The policy flags actually given on the command line."""
    return {name: getattr(args, name) for name in POLICY_FIELDS if hasattr(args, name)}


def run_server(args: argparse.Namespace) -> None:
    """Serve ``args.target`` under pounce.

    Debug apps get the reloading dev server unless ``--production`` is
    given. The dev server re-imports the target on reload only when it
    names an App and no policy flags were given, since a re-import would
    lose both the controller wrapping and the overrides.
    """
    overrides = config_overrides(args)
    try:
        app = resolve_app(args.target, overrides)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    config = app.config
    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info(
        "Serving %s (debug=%s, quit_on_error=%s, request_timeout=%s)",
        args.target,
        config.debug,
        config.quit_on_error,
        config.request_timeout,
    )

    host = args.host or config.host
    port = args.port or config.port

    if args.production or not config.debug:
        from bough.server.serve import run_production_server

        run_production_server(
            app,
            host=host,
            port=port,
            workers=config.workers if args.workers is None else args.workers,
            log_level=config.log_level,
            max_connections=config.max_connections,
            keep_alive_timeout=config.keep_alive_timeout,
        )
        return

    from bough.server.serve import run_dev_server

    reimportable = not overrides and isinstance(load_target(args.target), App)
    run_dev_server(
        app,
        host,
        port,
        reload=True,
        reload_include=config.reload_include,
        reload_dirs=config.reload_dirs,
        app_path=args.target if reimportable else None,
    )
