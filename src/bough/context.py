"""Per-request context threaded through the controller tree.

A ``Context`` is created once per inbound request by the driver and
mutated in place as it travels down the tree: the router consumes
``remaining_path`` and appends to ``pattern_groups``, scoped-data
overlays swap ``data``. Exactly one controller is active at a time, so
no locking is needed.

``data`` is a ``ChainMap``. Overlays push a new mapping in front with
``new_child()`` and restore the saved chain on exit, so lookups check
the newest overlay first and fall back through the parents.
"""

from collections import ChainMap
from dataclasses import dataclass, field
from typing import Any

from bough.http.request import Request
from bough.http.response import ResponseWriter


@dataclass(slots=True)
class Context:
    """Mutable request state handed to every controller.

    Attributes:
        request: The inbound request.
        response: Deferred-head writer for the outbound response.
        remaining_path: Path suffix not yet consumed by routing. Never
            starts with ``/`` at the root.
        pattern_groups: Sub-matches captured by every router on the
            path to the active controller, in capture order.
        data: Scoped key-value view; see ``create_subtree_data``.
    """

    request: Request
    response: ResponseWriter
    remaining_path: str = ""
    pattern_groups: list[str | None] = field(default_factory=list)
    data: ChainMap[str, Any] = field(default_factory=ChainMap)

    @classmethod
    def for_request(cls, request: Request, response: ResponseWriter) -> "Context":
        """Build the root context: the path loses its leading separator."""
        return cls(
            request=request,
            response=response,
            remaining_path=request.path.removeprefix("/"),
        )
