"""Application bootstrap for the theme editor.

Responsibilities:
 - Optional headless bootstrap (for tests / environments without PyQt6)
 - Logging setup and registration of the core services
 - Single-instance guard backed by a PID lock file (stale locks detected
   with psutil)

The bootstrap avoids importing PyQt6 at module import time so tests can run
without a display.
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

import psutil

from config import settings
from gui.app.config_store import AppConfig, load_config, save_config
from gui.services.event_bus import EventBus, GUIEvent
from gui.services.logging_service import LoggingService, configure_logging
from gui.services.service_locator import ServiceLocator, services
from gui.services.widget_preview import WidgetPreviewRegistry
from services.theme_library import ThemeLibrary

try:  # Lazy / optional Qt import
    from PyQt6.QtWidgets import QApplication  # type: ignore

    _QT_AVAILABLE = True
except Exception:  # noqa: BLE001
    QApplication = None  # type: ignore
    _QT_AVAILABLE = False

_logger = logging.getLogger(__name__)

LOCK_NAME = "yasb-theme-selector.lock"


@dataclass
class AppContext:
    """References created during bootstrap.

    Attributes
    ----------
    qt_app: The QApplication instance (None if headless or Qt missing)
    headless: Whether headless bootstrap was used
    services: Global service locator (post-initialization state)
    app_config: Persisted editor state loaded at startup
    duration_s: Elapsed seconds for bootstrap
    metadata: Free-form diagnostics
    """

    qt_app: Optional[Any]
    headless: bool
    services: ServiceLocator
    app_config: AppConfig
    duration_s: float
    metadata: dict[str, Any] = field(default_factory=dict)


def create_app(
    *,
    headless: bool | None = None,
    themes_dir: str | None = None,
    data_dir: str | None = None,
    persist_on_exit: bool = True,
) -> AppContext:
    """Create the application context and register services.

    ``event_bus``, ``logging_service``, ``theme_library`` and
    ``widget_previews`` are replaced on every call (test isolation);
    ``app_config`` too. ``themes_dir`` wins over the persisted folder, which
    wins over ``settings.THEMES_DIR``.
    """
    started = time.perf_counter()
    if headless is None:
        headless = not _QT_AVAILABLE
    configure_logging()

    qt_app = None
    if not headless and _QT_AVAILABLE:
        qt_app = QApplication.instance() or QApplication(sys.argv[:1])

    app_config = load_config(data_dir)
    resolved_themes = themes_dir or app_config.themes_dir or settings.THEMES_DIR

    previous = services.try_get("logging_service")
    if isinstance(previous, LoggingService):
        previous.detach_root()
    bus = EventBus()
    log_service = LoggingService(event_bus=bus)
    log_service.attach_root()
    services.register("event_bus", bus, allow_override=True)
    services.register("logging_service", log_service, allow_override=True)
    services.register(
        "theme_library",
        ThemeLibrary(resolved_themes, legacy_dir=settings.LEGACY_THEMES_DIR),
        allow_override=True,
    )
    services.register("widget_previews", WidgetPreviewRegistry(), allow_override=True)
    services.register("app_config", app_config, allow_override=True)

    duration = time.perf_counter() - started
    _logger.info("Bootstrap complete in %.3fs (themes: %s)", duration, resolved_themes)
    bus.publish(GUIEvent.STARTUP_COMPLETE, {"themes_dir": str(resolved_themes)})

    if persist_on_exit:

        def _persist_config() -> None:  # pragma: no cover - atexit not easily covered
            try:
                save_config(app_config, data_dir)
            except OSError as exc:
                _logger.warning("Could not persist app state: %s", exc)

        atexit.register(_persist_config)

    return AppContext(
        qt_app=qt_app,
        headless=headless,
        services=services,
        app_config=app_config,
        duration_s=duration,
        metadata={
            "qt_available": _QT_AVAILABLE,
            "themes_dir": str(resolved_themes),
            "app_config": app_config.to_dict(),
        },
    )


# --------------------------------------------------------------------------------------
# Single-instance guard (file lock) utilities
# --------------------------------------------------------------------------------------

_LOCK_FD: int | None = None
_LOCK_PATH: str | None = None


def _default_lock_path(name: str = LOCK_NAME) -> str:
    return os.path.join(tempfile.gettempdir(), name)


def _pid_alive(pid: int) -> bool:
    try:
        return psutil.pid_exists(pid)
    except (psutil.Error, OSError):  # pragma: no cover - best effort
        return True


def _read_lock_pid(path: str) -> Optional[int]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            contents = f.read().strip()
    except OSError:
        return None
    return int(contents) if contents.isdigit() else None


def _create_lock(path: str) -> int:
    fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_RDWR, 0o644)
    os.write(fd, str(os.getpid()).encode("utf-8"))
    return fd


def acquire_single_instance(
    lock_name: str = LOCK_NAME, *, force_reclaim_stale: bool = True
) -> bool:
    """Try to take the single-instance lock file.

    Returns True if this process holds the lock, False if another live
    instance does. A lock whose PID no longer exists is reclaimed.
    """
    global _LOCK_FD, _LOCK_PATH
    if _LOCK_FD is not None:
        return True
    path = _default_lock_path(lock_name)
    try:
        _LOCK_FD = _create_lock(path)
        _LOCK_PATH = path
        return True
    except FileExistsError:
        stale_pid = _read_lock_pid(path)
        if stale_pid is None or _pid_alive(stale_pid) or not force_reclaim_stale:
            return False
        try:
            os.unlink(path)
            _LOCK_FD = _create_lock(path)
            _LOCK_PATH = path
            _logger.info("Reclaimed stale lock from PID %d", stale_pid)
            return True
        except OSError:  # pragma: no cover - race or permission
            return False


def release_single_instance() -> None:
    global _LOCK_FD, _LOCK_PATH
    if _LOCK_FD is None:
        return
    try:
        os.close(_LOCK_FD)
        if _LOCK_PATH and os.path.exists(_LOCK_PATH):
            os.unlink(_LOCK_PATH)
    except OSError as exc:  # pragma: no cover
        _logger.debug("Lock cleanup failed: %s", exc)
    finally:
        _LOCK_FD = None
        _LOCK_PATH = None


@contextmanager
def single_instance(lock_name: str = LOCK_NAME) -> Iterator[bool]:
    """Yield True if the lock was acquired, else False."""
    acquired = acquire_single_instance(lock_name)
    try:
        yield acquired
    finally:
        if acquired:
            release_single_instance()


__all__ = [
    "AppContext",
    "create_app",
    "single_instance",
    "acquire_single_instance",
    "release_single_instance",
]
