"""Logging setup and in-process log capture for the editor.

``configure_logging`` installs the console handler used by the launcher.
``LoggingService`` keeps the most recent records in a ring buffer and
re-publishes each one as ``GUIEvent.LOG_RECORD_ADDED`` so the window can
surface parser warnings (for example a widget definition without ``type``)
in its status bar.
"""

from __future__ import annotations

import json
import logging
import os
from collections import deque
from dataclasses import asdict, dataclass
from threading import RLock
from typing import Deque, List, Optional

from config import settings

from .event_bus import EventBus, GUIEvent
from .service_locator import services

__all__ = [
    "LogEntry",
    "LoggingService",
    "configure_logging",
    "get_logging_service",
]

LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"


def configure_logging(level: str | int | None = None) -> None:
    """Attach a console handler to the root logger (idempotent)."""
    root = logging.getLogger()
    resolved = level if level is not None else settings.LOG_LEVEL
    if isinstance(resolved, str):
        resolved = logging.getLevelName(resolved.upper())
        if not isinstance(resolved, int):
            resolved = logging.INFO
    if root.level == logging.NOTSET or root.level > resolved:
        root.setLevel(resolved)
    if not any(getattr(h, "_themeselector_console", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setLevel(resolved)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, "%H:%M:%S"))
        handler._themeselector_console = True  # type: ignore[attr-defined]
        root.addHandler(handler)


@dataclass(frozen=True)
class LogEntry:
    level: str
    name: str
    message: str
    created: float
    lineno: int


class _RingBufferHandler(logging.Handler):
    def __init__(self, svc: "LoggingService") -> None:
        super().__init__(logging.DEBUG)
        self._svc = svc

    def emit(self, record: logging.LogRecord) -> None:
        self._svc._ingest_record(record)


class LoggingService:
    def __init__(self, capacity: int = 500, *, event_bus: EventBus | None = None) -> None:
        self._lock = RLock()
        self._entries: Deque[LogEntry] = deque(maxlen=capacity)
        self._handler = _RingBufferHandler(self)
        self._event_bus = event_bus
        self._attached = False

    def attach_root(self) -> None:
        if self._attached:
            return
        root = logging.getLogger()
        root.addHandler(self._handler)
        if root.level > logging.DEBUG:
            root.setLevel(logging.DEBUG)
        self._attached = True

    def detach_root(self) -> None:
        if not self._attached:
            return
        logging.getLogger().removeHandler(self._handler)
        self._attached = False

    def _bus(self) -> EventBus | None:
        if self._event_bus is not None:
            return self._event_bus
        bus = services.try_get("event_bus")
        return bus if isinstance(bus, EventBus) else None

    def _ingest_record(self, record: logging.LogRecord) -> None:
        entry = LogEntry(
            level=record.levelname,
            name=record.name,
            message=record.getMessage(),
            created=record.created,
            lineno=record.lineno,
        )
        with self._lock:
            self._entries.append(entry)
        bus = self._bus()
        if bus is not None:
            bus.publish(
                GUIEvent.LOG_RECORD_ADDED,
                {"level": entry.level, "name": entry.name, "message": entry.message[:120]},
            )

    def recent(self, limit: Optional[int] = None) -> List[LogEntry]:
        with self._lock:
            data = list(self._entries)
        return data[-limit:] if limit is not None else data

    def filter(self, *, level: str | None = None, name_contains: str | None = None) -> List[LogEntry]:
        return [
            e
            for e in self.recent()
            if (not level or e.level == level) and (not name_contains or name_contains in e.name)
        ]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def export_jsonl(self, path: str | None = None, *, level: str | None = None) -> int:
        """Write (filtered) entries as JSON Lines; returns the number written."""
        entries = self.filter(level=level)
        file_path = path or os.path.join(settings.DATA_DIR, "logs.jsonl")
        dir_part = os.path.dirname(file_path)
        if dir_part:
            os.makedirs(dir_part, exist_ok=True)
        with open(file_path, "w", encoding="utf-8") as f:
            for e in entries:
                f.write(json.dumps(asdict(e), sort_keys=True) + "\n")
        return len(entries)


def get_logging_service() -> LoggingService:
    return services.get_typed("logging_service", LoggingService)
