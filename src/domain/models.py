"""Domain models for status-bar themes and their config documents."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

POSITIONS: tuple[str, ...] = ("left", "center", "right")

# Decoded option value: plain string, decoded list, or "" for unparsed/empty.
OptionValue = Union[str, List[str]]


@dataclass(slots=True)
class Bar:
    """One bar block under ``bars:`` with its three widget slots.

    Widget names are kept in visual order (first entry is leftmost/topmost).
    Names need not exist in the widget definitions map.
    """

    name: str
    widgets: Dict[str, List[str]] = field(
        default_factory=lambda: {pos: [] for pos in POSITIONS}
    )

    def position(self, pos: str) -> List[str]:
        return self.widgets.setdefault(pos, [])


@dataclass(slots=True)
class WidgetDefinition:
    type: str = ""
    options: Dict[str, OptionValue] = field(default_factory=dict)

    @property
    def renderable(self) -> bool:
        return bool(self.type)


@dataclass(slots=True)
class SubTheme:
    name: str
    manifest: Optional[Dict[str, Any]] = None
    meta: Optional[Dict[str, Any]] = None
    wallpaper_preview: Optional[str] = None

    @property
    def display_name(self) -> str:
        if self.meta and self.meta.get("name"):
            return str(self.meta["name"])
        return self.name


@dataclass(slots=True)
class ThemeEntry:
    name: str
    manifest: Dict[str, Any] = field(default_factory=dict)
    base_path: Optional[str] = None
    subs: List[SubTheme] = field(default_factory=list)
    representative_sub: Optional[str] = None
    error: Optional[str] = None

    @property
    def display_name(self) -> str:
        meta = self.manifest.get("meta") if isinstance(self.manifest, dict) else None
        if isinstance(meta, dict) and meta.get("name"):
            return str(meta["name"])
        return self.name

    def find_sub(self, name: str) -> Optional[SubTheme]:
        for sub in self.subs:
            if sub.name == name:
                return sub
        return None
