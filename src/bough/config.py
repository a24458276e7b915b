"""Application configuration.

AppConfig is a frozen dataclass, immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(debug=True, port=3000, quit_on_error=True)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False

    # Error policy: stop the server on the first error that reaches the
    # root (fail fast while developing) instead of serving on.
    quit_on_error: bool = False

    # Seconds to wait for the tree to complete before answering 504.
    # None waits forever.
    request_timeout: float | None = 30.0

    # Reload (development mode, requires debug=True)
    reload_include: tuple[str, ...] = ()  # Extra extensions to watch (e.g. ".html", ".css")
    reload_dirs: tuple[str, ...] = ()  # Extra directories to watch alongside cwd

    # Templates
    template_dir: str | Path = "templates"

    # Production settings
    workers: int = 0  # 0 = auto-detect from CPU count
    log_level: str = "info"
    max_connections: int = 1000
    keep_alive_timeout: float = 5.0
