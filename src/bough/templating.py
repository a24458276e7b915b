"""Template rendering backed by kida.

A ``TemplateRenderer`` owns a kida ``Environment`` and a cache of
compiled templates. The cache lives on the renderer instance, is
filled on first use, and is emptied with ``flush_cache()``, so tests can
start from a clean slate.

Requires ``kida`` (``pip install bough[templates]``, Python 3.14+).
"""

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import anyio

from bough.errors import ConfigurationError, NotFound


class TemplateRenderer:
    """Loads, caches and renders templates from a directory.

    Usage::

        renderer = TemplateRenderer("templates")
        html = await renderer.render("index.html", {"title": "Hello"})

    A prepared kida ``Environment`` may be passed instead of a directory,
    e.g. one using a ``DictLoader`` in tests.
    """

    __slots__ = ("_cache", "_env", "_owns_env", "autoescape", "template_dir")

    _default: "TemplateRenderer | None" = None
    _default_dir: Path = Path("templates")

    def __init__(
        self,
        template_dir: str | Path = "templates",
        *,
        autoescape: bool = True,
        env: Any = None,
    ) -> None:
        self.template_dir = Path(template_dir)
        self.autoescape = autoescape
        self._env = env
        self._owns_env = env is None
        self._cache: dict[str, Any] = {}

    @classmethod
    def default(cls) -> "TemplateRenderer":
        """Process-wide renderer, created on first use.

        Reads from ``./templates`` unless an app configured another
        directory (see ``configure_default``).
        """
        if cls._default is None:
            cls._default = cls(cls._default_dir)
        return cls._default

    @classmethod
    def configure_default(cls, template_dir: str | Path) -> None:
        """Point the process-wide renderer at *template_dir*."""
        cls._default_dir = Path(template_dir)
        cls._default = None

    @classmethod
    def reset_default(cls) -> None:
        """Drop the process-wide renderer; the next ``default()`` builds a new one."""
        cls._default = None

    def environment(self) -> Any:
        """The kida Environment, created on first use."""
        if self._env is None:
            try:
                from kida import Environment, FileSystemLoader
            except ImportError:
                msg = (
                    "Template rendering requires the 'kida' package. "
                    "Install it with: pip install bough[templates] (Python 3.14+)"
                )
                raise ConfigurationError(msg) from None
            self._env = Environment(
                loader=FileSystemLoader(str(self.template_dir)),
                autoescape=self.autoescape,
            )
        return self._env

    def get(self, name: str) -> Any:
        """Return the compiled template *name*, loading it if not cached.

        Raises ``NotFound`` if the loader has no such template.
        """
        template = self._cache.get(name)
        if template is not None:
            return template
        env = self.environment()
        from kida.environment.exceptions import TemplateNotFoundError

        try:
            template = env.get_template(name)
        except TemplateNotFoundError as exc:
            raise NotFound(message=f"Template {name!r} not found") from exc
        self._cache[name] = template
        return template

    async def render(self, name: str, data: Mapping[str, Any] | None = None) -> str:
        """Render template *name* with *data*.

        Loading runs in a worker thread so a cold cache does not block
        the event loop.
        """
        template = self._cache.get(name)
        if template is None:
            template = await anyio.to_thread.run_sync(self.get, name)
        return template.render(dict(data or {}))

    def flush_cache(self) -> None:
        """Forget every compiled template.

        An environment this renderer built itself is dropped as well, so
        templates are read from disk again.
        """
        self._cache.clear()
        if self._owns_env:
            self._env = None

    def __len__(self) -> int:
        return len(self._cache)
