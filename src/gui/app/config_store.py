"""Persisted editor UI state.

Remembers window geometry, the themes folder in use and the last edited
theme/sub-theme so the editor reopens where the user left off.

- Pure logic (no Qt import) so it can be unit-tested headless.
- Explicit ``version`` field; a mismatched version resets to defaults while
  keeping ``themes_dir``.
- Corrupt files produce defaults instead of raising.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from config import settings

_logger = logging.getLogger(__name__)

__all__ = ["AppConfig", "load_config", "save_config", "CONFIG_VERSION"]

CONFIG_VERSION = 1

DEFAULT_FILENAME = "app_state.json"


@dataclass(slots=True)
class AppConfig:
    """Serializable editor state.

    Attributes
    ----------
    version: Schema version for migration handling.
    window_x, window_y: Last top-left window coordinates (None if unknown).
    window_w, window_h: Last window size.
    maximized: Whether the window was maximized at shutdown.
    themes_dir: Themes folder chosen by the user, or None for the default.
    last_theme, last_sub: Theme and sub-theme open at shutdown.
    """

    version: int = CONFIG_VERSION
    window_x: Optional[int] = None
    window_y: Optional[int] = None
    window_w: Optional[int] = None
    window_h: Optional[int] = None
    maximized: bool = False
    themes_dir: Optional[str] = None
    last_theme: Optional[str] = None
    last_sub: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AppConfig":
        return cls(
            version=int(data.get("version", CONFIG_VERSION)),
            window_x=data.get("window_x"),
            window_y=data.get("window_y"),
            window_w=data.get("window_w"),
            window_h=data.get("window_h"),
            maximized=bool(data.get("maximized", False)),
            themes_dir=data.get("themes_dir"),
            last_theme=data.get("last_theme"),
            last_sub=data.get("last_sub"),
        )

    def is_geometry_complete(self) -> bool:
        return (
            self.window_x is not None
            and self.window_y is not None
            and self.window_w is not None
            and self.window_h is not None
        )


def _resolve_path(base_dir: str | Path | None) -> Path:
    base = Path(base_dir) if base_dir else Path(settings.DATA_DIR)
    return base / DEFAULT_FILENAME


def load_config(base_dir: str | Path | None = None) -> AppConfig:
    """Load editor state from ``base_dir`` (defaults to ``settings.DATA_DIR``)."""
    path = _resolve_path(base_dir)
    if not path.exists():
        return AppConfig()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        cfg = AppConfig.from_dict(data)
    except Exception as exc:  # noqa: BLE001
        _logger.warning("Ignoring unreadable %s: %s", path, exc)
        return AppConfig()
    if cfg.version != CONFIG_VERSION:
        return AppConfig(themes_dir=cfg.themes_dir)
    return cfg


def save_config(cfg: AppConfig, base_dir: str | Path | None = None) -> Path:
    """Persist editor state; returns the path written."""
    path = _resolve_path(base_dir)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(cfg.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)
    return path
