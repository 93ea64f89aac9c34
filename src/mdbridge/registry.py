"""Process-wide lookup of services, components and functions by name."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from .errors import ServiceNotFoundError

_LOCK = threading.Lock()
_SERVICES: dict[str, Any] = {}
_COMPONENTS: dict[str, Any] = {}
_FUNCTIONS: dict[str, Callable[..., Any]] = {}


def register_service(name: str, service: Any) -> None:
    """Register a service (last write wins)."""

    with _LOCK:
        _SERVICES[name] = service


def unregister_service(name: str) -> None:
    with _LOCK:
        _SERVICES.pop(name, None)


def get_service(name: str) -> Any:
    try:
        return _SERVICES[name]
    except KeyError:
        raise ServiceNotFoundError(f"No service registered as '{name}'.") from None


def register_component(name: str, component: Any) -> None:
    """Register a body component (last write wins)."""

    with _LOCK:
        _COMPONENTS[name] = component


def unregister_component(name: str) -> None:
    with _LOCK:
        _COMPONENTS.pop(name, None)


def get_component(name: str) -> Any:
    try:
        return _COMPONENTS[name]
    except KeyError:
        raise ServiceNotFoundError(f"No component registered as '{name}'.") from None


def register_function(name: str, function: Callable[..., Any]) -> None:
    """Register a script-callable function (last write wins)."""

    with _LOCK:
        _FUNCTIONS[name] = function


def unregister_function(name: str) -> None:
    with _LOCK:
        _FUNCTIONS.pop(name, None)


def get_function(name: str) -> Callable[..., Any]:
    try:
        return _FUNCTIONS[name]
    except KeyError:
        raise ServiceNotFoundError(f"No function registered as '{name}'.") from None


def clear_registry() -> None:
    """Clear every registry (intended for tests)."""

    with _LOCK:
        _SERVICES.clear()
        _COMPONENTS.clear()
        _FUNCTIONS.clear()
