"""Application layer for GUI bootstrap and persisted editor state."""

from .bootstrap import create_app, AppContext, single_instance  # noqa: F401
from .config_store import (  # noqa: F401
    AppConfig,
    load_config,
    save_config,
    CONFIG_VERSION,
)

__all__ = [
    "create_app",
    "AppContext",
    "single_instance",
    "AppConfig",
    "load_config",
    "save_config",
    "CONFIG_VERSION",
]
