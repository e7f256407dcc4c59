"""Application-wide service registry.

Holds the shared collaborators the editor window and view-model look up by
name: ``event_bus``, ``logging_service``, ``theme_library``,
``widget_previews`` and ``app_config``. Tests swap entries with
``override_context``.

    from gui.services.service_locator import services
    services.register("theme_library", ThemeLibrary(tmp_path))
    library = services.get_typed("theme_library", ThemeLibrary)
"""

from __future__ import annotations

from contextlib import contextmanager
from threading import RLock
from typing import Any, Dict, Generator, List, Type, TypeVar

T = TypeVar("T")

__all__ = ["ServiceLocator", "services", "ServiceAlreadyRegisteredError", "ServiceNotFoundError"]

_MISSING = object()


class ServiceAlreadyRegisteredError(RuntimeError):
    """Raised when a key is registered twice without ``allow_override``."""


class ServiceNotFoundError(KeyError):
    """Raised when a requested service key is not present."""


class ServiceLocator:
    def __init__(self) -> None:
        self._lock = RLock()
        self._services: Dict[str, Any] = {}

    def register(self, key: str, value: Any, *, allow_override: bool = False) -> None:
        with self._lock:
            if key in self._services and not allow_override:
                raise ServiceAlreadyRegisteredError(f"Service '{key}' already registered")
            self._services[key] = value

    def get(self, key: str) -> Any:
        with self._lock:
            value = self._services.get(key, _MISSING)
        if value is _MISSING:
            raise ServiceNotFoundError(key)
        return value

    def get_typed(self, key: str, expected_type: Type[T]) -> T:
        """Like ``get`` but raises ``TypeError`` when the instance type differs."""
        value = self.get(key)
        if not isinstance(value, expected_type):
            raise TypeError(
                f"Service '{key}' expected type {expected_type!r} but got {type(value)!r}"
            )
        return value

    def try_get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._services.get(key, default)

    def override(self, key: str, value: Any) -> None:
        with self._lock:
            if key not in self._services:
                raise ServiceNotFoundError(key)
            self._services[key] = value

    @contextmanager
    def override_context(self, **overrides: Any) -> Generator[None, None, None]:
        """Temporarily replace (or add) services; previous state restored on exit."""
        with self._lock:
            previous = {key: self._services.get(key, _MISSING) for key in overrides}
            self._services.update(overrides)
        try:
            yield
        finally:
            with self._lock:
                for key, prior in previous.items():
                    if prior is _MISSING:
                        self._services.pop(key, None)
                    else:
                        self._services[key] = prior

    def unregister(self, key: str) -> None:
        with self._lock:
            self._services.pop(key, None)

    def list_keys(self) -> List[str]:
        with self._lock:
            return list(self._services)

    def clear(self) -> None:
        with self._lock:
            self._services.clear()


services = ServiceLocator()
