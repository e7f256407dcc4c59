"""Global configuration and constants for the theme selector."""

from __future__ import annotations

import os
from typing import Final

THEMES_DIR: Final = os.environ.get("THEMESELECTOR_THEMES_DIR", "yasb-themes")
LEGACY_THEMES_DIR: Final = os.environ.get("THEMESELECTOR_LEGACY_THEMES_DIR", "themes")
USER_STATE_DIR: Final = os.environ.get("THEMESELECTOR_USER_STATE_DIR", "user-state")
DATA_DIR: Final = os.environ.get("THEMESELECTOR_DATA_DIR", "data")
LOG_LEVEL: Final = os.environ.get("THEMESELECTOR_LOG_LEVEL", "INFO")

# Theme folder conventions
CONFIG_FILENAME: Final = "config.yaml"
MANIFEST_FILENAME: Final = "manifest.json"
META_FILENAME: Final = "meta.json"
SUB_THEMES_DIRNAME: Final = "sub-themes"
WALLPAPER_STEM: Final = "wallpaper"
WALLPAPER_EXTENSIONS: Final = (".png", ".jpg", ".jpeg", ".gif", ".webp", ".bmp", ".svg")
SKIP_WORKSHOP_SUFFIX: Final = "skip-workshop.txt"
