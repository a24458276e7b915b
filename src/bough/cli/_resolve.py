"""Turn a ``"module:attribute"`` string into a runnable App.

The attribute may be:

- an ``App``, used as is;
- a zero-argument factory, called once, returning an App or a controller;
- a root controller (anything callable as ``controller(context, done)``),
  wrapped in a new App.

Config overrides from the command line are applied in every case.
"""

import importlib
import inspect
from collections.abc import Mapping
from dataclasses import replace
from typing import Any

from bough.app import App
from bough.config import AppConfig


def load_target(import_string: str) -> object:
    """Import ``module:attribute`` (attribute defaults to ``app``)."""
    module_path, _, attr_name = import_string.partition(":")
    module = importlib.import_module(module_path)
    return getattr(module, attr_name or "app")


def _accepts(obj: object, *args: object) -> bool:
    try:
        inspect.signature(obj).bind(*args)  # type: ignore[arg-type]
    except TypeError:
        return False
    return True


def _is_factory(obj: object) -> bool:
    if isinstance(obj, App) or not callable(obj):
        return False
    try:
        return _accepts(obj)
    except ValueError:
        # no introspectable signature
        return False


def _is_controller(obj: object) -> bool:
    if not callable(obj):
        return False
    try:
        return _accepts(obj, None, None)
    except ValueError:
        return False


def resolve_app(import_string: str, overrides: Mapping[str, Any] | None = None) -> App:
    """Resolve *import_string* to an App, applying *overrides* to its config.

    *overrides* maps ``AppConfig`` field names to values. An existing
    App gets a copy of its config with the overrides applied; a bare
    controller gets ``AppConfig(**overrides)``.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If a factory raised, or the target is neither an App,
            a factory, nor a controller.
    """
    overrides = dict(overrides or {})
    target = load_target(import_string)

    if _is_factory(target):
        try:
            target = target()  # type: ignore[operator]
        except Exception as exc:
            msg = f"Factory {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if isinstance(target, App):
        if overrides:
            target.config = replace(target.config, **overrides)
        return target

    if _is_controller(target):
        return App(target, AppConfig(**overrides))  # type: ignore[arg-type]

    msg = (
        f"{import_string!r} resolved to {type(target).__name__}, "
        "not a bough.App, an app factory, or a controller"
    )
    raise TypeError(msg)
