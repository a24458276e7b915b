"""Test utilities for bough applications.

A test client that drives the ASGI app in-process, and helpers for
running single controllers against a hand-built context::

    from bough.testing import TestClient, make_context, run_controller
"""

from bough.testing.client import TestClient, TestResponse
from bough.testing.controllers import make_context, read_response, run_controller

__all__ = [
    "TestClient",
    "TestResponse",
    "make_context",
    "read_response",
    "run_controller",
]
