"""The ``bough`` command: serve a controller tree under pounce.

::

    bough run myapp:app --production
    bough run myapp:root --debug --quit-on-error --timeout 10

The target may name an App, a zero-argument factory, or a bare root
controller. Driver policy flags override the matching ``AppConfig``
fields for this run only; flags left out keep the app's own values.
"""

import argparse
import sys


def _timeout(value: str) -> float | None:
    """Parse ``--timeout``: seconds, or ``none``/``0`` to wait forever."""
    if value.lower() in {"none", "0"}:
        return None
    try:
        seconds = float(value)
    except ValueError:
        msg = f"expected seconds or 'none', got {value!r}"
        raise argparse.ArgumentTypeError(msg) from None
    if seconds < 0:
        msg = "timeout cannot be negative"
        raise argparse.ArgumentTypeError(msg)
    return seconds


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bough",
        description="Serve an HTTP app composed from small controllers.",
    )
    commands = parser.add_subparsers(dest="command")

    run = commands.add_parser("run", help="Serve an app under pounce")
    run.add_argument(
        "target",
        metavar="app",
        help="module:attribute naming an App, an app factory, or a root controller",
    )

    server = run.add_argument_group("server")
    server.add_argument("--host", default=None, help="Bind host address")
    server.add_argument("--port", type=int, default=None, help="Bind port number")
    server.add_argument(
        "--production",
        action="store_true",
        help="Multi-worker server without reload, even for debug apps",
    )
    server.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count for production (0 = one per CPU)",
    )

    # dest names are AppConfig fields; SUPPRESS keeps absent flags out of args
    policy = run.add_argument_group("driver policy")
    policy.add_argument(
        "--debug",
        dest="debug",
        action=argparse.BooleanOptionalAction,
        default=argparse.SUPPRESS,
        help="Show error messages on error pages and use the reloading dev server",
    )
    policy.add_argument(
        "--quit-on-error",
        dest="quit_on_error",
        action=argparse.BooleanOptionalAction,
        default=argparse.SUPPRESS,
        help="Stop the server on the first error that reaches the root",
    )
    policy.add_argument(
        "--timeout",
        dest="request_timeout",
        type=_timeout,
        default=argparse.SUPPRESS,
        metavar="SECONDS",
        help="Answer 504 when the tree has not completed in time ('none' waits forever)",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``bough`` console script."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    from bough.cli._run import run_server

    run_server(args)
