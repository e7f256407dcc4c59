"""Synchronous publish/subscribe bus for the editor shell.

Producers (editor view-model, logging service) publish ``GUIEvent`` values;
the Qt window subscribes to refresh itself and show status messages. A
failing handler is recorded in ``errors`` and does not stop dispatch to the
remaining handlers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from threading import RLock
from time import perf_counter
from typing import Any, Dict, List, Protocol

__all__ = [
    "GUIEvent",
    "Event",
    "EventBus",
    "EventHandler",
    "Subscription",
]


class GUIEvent(str, Enum):
    STARTUP_COMPLETE = "startup_complete"
    THEMES_LOADED = "themes_loaded"
    THEME_SELECTED = "theme_selected"
    SUB_THEME_SELECTED = "sub_theme_selected"
    DOCUMENT_CHANGED = "document_changed"
    DOCUMENT_SAVED = "document_saved"
    ERROR_OCCURRED = "error_occurred"
    LOG_RECORD_ADDED = "log_record_added"


@dataclass
class Event:
    name: str
    payload: Any
    timestamp: float


class EventHandler(Protocol):
    def __call__(self, event: Event) -> None: ...  # pragma: no cover - structural


@dataclass
class Subscription:
    event: str
    handler: EventHandler
    once: bool
    active: bool = True

    def cancel(self) -> None:
        self.active = False


def _key(name: str | GUIEvent) -> str:
    return name.value if isinstance(name, GUIEvent) else name


class EventBus:
    """Handlers run outside the lock, so they may (un)subscribe re-entrantly."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._subs: Dict[str, List[Subscription]] = {}
        self._errors: List[tuple[Event, BaseException]] = []

    def subscribe(
        self, name: str | GUIEvent, handler: EventHandler, *, once: bool = False
    ) -> Subscription:
        sub = Subscription(event=_key(name), handler=handler, once=once)
        with self._lock:
            self._subs.setdefault(sub.event, []).append(sub)
        return sub

    def unsubscribe(self, sub: Subscription) -> None:
        with self._lock:
            bucket = self._subs.get(sub.event, [])
            if sub in bucket:
                bucket.remove(sub)
            if not bucket:
                self._subs.pop(sub.event, None)
        sub.active = False

    def publish(self, name: str | GUIEvent, payload: Any = None) -> Event:
        key = _key(name)
        evt = Event(name=key, payload=payload, timestamp=perf_counter())
        with self._lock:
            subs = list(self._subs.get(key, ()))
        for sub in subs:
            if not sub.active:
                continue
            if sub.once:
                self.unsubscribe(sub)
            try:
                sub.handler(evt)
            except Exception as exc:  # noqa: BLE001 - isolate handler failures
                with self._lock:
                    self._errors.append((evt, exc))
        return evt

    def subscriber_count(self, name: str | GUIEvent) -> int:
        with self._lock:
            return len(self._subs.get(_key(name), ()))

    def clear(self) -> None:
        with self._lock:
            self._subs.clear()
            self._errors.clear()

    @property
    def errors(self) -> list[tuple[Event, BaseException]]:
        with self._lock:
            return list(self._errors)
