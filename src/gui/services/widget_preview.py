"""Widget preview registry for the status bar preview strip.

Maps a widget ``type`` identifier (``yasb.cpu.CpuWidget`` ...) to a renderer
callable producing a ``WidgetPreview``: plain text plus an optional accented
value, which the Qt view lays out in the bar's left/center/right slots.
Types without a registered renderer fall back to showing the widget name;
references to names with no definition render nothing.

Renderers receive a ``PreviewContext`` holding the full definitions map (for
grouper widgets) and the sub-theme ``root-variables`` colors.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from domain.models import POSITIONS, Bar, OptionValue, WidgetDefinition

from .service_locator import services

_logger = logging.getLogger(__name__)

__all__ = [
    "WidgetPreview",
    "PreviewContext",
    "WidgetRenderer",
    "WidgetPreviewRegistry",
    "bar_palette",
    "fill_label",
    "get_widget_previews",
]

MAX_GROUP_DEPTH = 4

# Sample values substituted into label templates for the preview.
_SAMPLE_VALUES: Dict[str, str] = {
    "{win[title]}": "Active Window",
    "{win[class_name]}": "WindowClass",
    "{win[process][name]}": "app.exe",
    "{title}": "Song Title",
    "{artist}": "Artist Name",
    "{wifi_name}": "WiFi Network",
    "{wifi_strength}": "75",
    "{ip_addr}": "192.168.1.100",
    "{percent}": "85",
    "{time_remaining}": "2:30",
    "{info[utilization]}": "45",
    "{info[percent][total]}": "35",
    "{virtual_mem_percent}": "60",
    "{swap_mem_percent}": "20",
    "{level}": "50",
    "{volume_label}": "C",
    "{space[used][gb]}": "250",
    "{space[total][gb]}": "500",
    "{data}": "",
    "{count}": "3",
    "{device_count}": "2",
    "{device_name}": "Device",
    "{items_count}": "5",
    "{items_size}": "1.2 GB",
    "{index}": "1",
}
_TIME_PLACEHOLDER_RE = re.compile(r"\{%[^}]*\}")
_LABEL_KEYS = ("label", "label_alt", "label_collapsed", "label_offline", "label_workspace_btn")

_PALETTE_DEFAULTS: Dict[str, str] = {
    "background": "rgba(15, 15, 28, 0.85)",
    "widget_background": "rgba(22, 22, 38, 0.65)",
    "border": "rgba(255,255,255,0.06)",
    "text": "#eaeaff",
    "muted": "#b0b0c8",
    "accent": "#00dfff",
}
_PALETTE_VARS: Dict[str, str] = {
    "background": "--bg-panel",
    "widget_background": "--bg-widget",
    "border": "--border-soft",
    "text": "--text-light",
    "muted": "--text-gray",
    "accent": "--accent2",
}


@dataclass(frozen=True)
class WidgetPreview:
    name: str
    text: str
    accent_text: str = ""
    expand: bool = False
    children: Tuple["WidgetPreview", ...] = ()


@dataclass(frozen=True)
class PreviewContext:
    definitions: Mapping[str, WidgetDefinition] = field(default_factory=dict)
    root_variables: Mapping[str, str] = field(default_factory=dict)
    depth: int = 0

    def color(self, var: str, default: str) -> str:
        value = self.root_variables.get(var)
        return value if isinstance(value, str) and value else default


WidgetRenderer = Callable[[str, WidgetDefinition, PreviewContext], WidgetPreview]


def bar_palette(root_variables: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Resolve the preview colors from sub-theme ``root-variables``."""
    ctx = PreviewContext(root_variables=root_variables or {})
    return {key: ctx.color(_PALETTE_VARS[key], default) for key, default in _PALETTE_DEFAULTS.items()}


def _first_str(value: OptionValue | None) -> str:
    if isinstance(value, list):
        return value[0] if value else ""
    return value or ""


def _middle(options: Mapping[str, OptionValue], *keys: str) -> str:
    for key in keys:
        value = options.get(key)
        if isinstance(value, list) and value:
            return value[len(value) // 2]
    return ""


def fill_label(label: str, options: Optional[Mapping[str, OptionValue]] = None) -> str:
    """Replace label placeholders with sample data.

    ``{wifi_icon}`` and ``{icon}`` take the middle entry of the matching icon
    list option; strftime placeholders become the current time.
    """
    options = options or {}
    text = label
    wifi_icon = _middle(options, "wifi_icons", "wifi_icons_secured", "wifi_icons_unsecured")
    text = text.replace("{wifi_icon}", wifi_icon)
    text = text.replace("{icon}", _middle(options, "volume_icons", "volume_icons_list"))
    for placeholder, sample in _SAMPLE_VALUES.items():
        text = text.replace(placeholder, sample)
    return _TIME_PLACEHOLDER_RE.sub(lambda _m: datetime.now().strftime("%H:%M"), text)


def _label(definition: WidgetDefinition, default: str) -> str:
    for key in _LABEL_KEYS:
        value = _first_str(definition.options.get(key))
        if value:
            return fill_label(value, definition.options)
    return default


def _labelled(default_label: str, value: str) -> WidgetRenderer:
    def render(name: str, definition: WidgetDefinition, context: PreviewContext) -> WidgetPreview:
        return WidgetPreview(name=name, text=_label(definition, default_label), accent_text=value)

    return render


def _icon(glyph: str) -> WidgetRenderer:
    def render(name: str, definition: WidgetDefinition, context: PreviewContext) -> WidgetPreview:
        return WidgetPreview(name=name, text=glyph)

    return render


def _render_clock(name: str, definition: WidgetDefinition, context: PreviewContext) -> WidgetPreview:
    return WidgetPreview(name=name, text="⏰ " + datetime.now().strftime("%H:%M"))


def _render_disk(name: str, definition: WidgetDefinition, context: PreviewContext) -> WidgetPreview:
    volume = _first_str(definition.options.get("volume_label")) or "C"
    return WidgetPreview(name=name, text="\U0001f4be " + volume)


def _render_notifications(
    name: str, definition: WidgetDefinition, context: PreviewContext
) -> WidgetPreview:
    return WidgetPreview(name=name, text="\U0001f514 " + _label(definition, "3"))


def _render_active_window(
    name: str, definition: WidgetDefinition, context: PreviewContext
) -> WidgetPreview:
    return WidgetPreview(name=name, text="\U0001f4c4 Active Window", expand=True)


def _render_workspaces(
    name: str, definition: WidgetDefinition, context: PreviewContext
) -> WidgetPreview:
    buttons = tuple(WidgetPreview(name=f"{name}:{i}", text=str(i)) for i in range(1, 6))
    return WidgetPreview(name=name, text="", accent_text="1", children=buttons)


def _render_custom(name: str, definition: WidgetDefinition, context: PreviewContext) -> WidgetPreview:
    return WidgetPreview(name=name, text=_label(definition, "⚡"))


class WidgetPreviewRegistry:
    """Type identifier -> renderer map with a name-only fallback."""

    def __init__(self, *, builtins: bool = True) -> None:
        self._renderers: Dict[str, WidgetRenderer] = {}
        if builtins:
            self._register_builtins()

    def _register_builtins(self) -> None:
        self.register("yasb.clock.ClockWidget", _render_clock)
        self.register("yasb.cpu.CpuWidget", _labelled("CPU", "45%"))
        self.register("yasb.memory.MemoryWidget", _labelled("MEM", "62%"))
        self.register("yasb.gpu.GpuWidget", _labelled("GPU", "38%"))
        self.register("yasb.disk.DiskWidget", _render_disk)
        self.register("yasb.volume.VolumeWidget", _icon("\U0001f50a"))
        self.register("yasb.microphone.MicrophoneWidget", _icon("\U0001f3a4"))
        self.register("yasb.battery.BatteryWidget", _icon("\U0001f50b 85%"))
        self.register("yasb.wifi.WifiWidget", _icon("\U0001f4f6"))
        self.register("yasb.bluetooth.BluetoothWidget", _icon("\U0001f535"))
        self.register("yasb.media.MediaWidget", _icon("▶ Now Playing"))
        self.register("yasb.notifications.NotificationsWidget", _render_notifications)
        self.register("yasb.active_window.ActiveWindowWidget", _render_active_window)
        self.register("komorebi.workspaces.WorkspaceWidget", _render_workspaces)
        self.register("yasb.systray.SystrayWidget", _icon("⚙ \U0001f514 \U0001f4ca"))
        self.register("yasb.power_menu.PowerMenuWidget", _icon("⏻"))
        self.register("yasb.home.HomeWidget", _icon("\U0001f3e0"))
        self.register("yasb.applications.ApplicationsWidget", _icon("\U0001f4f1"))
        self.register("yasb.recycle_bin.RecycleBinWidget", _icon("\U0001f5d1"))
        self.register("yasb.custom.CustomWidget", _render_custom)
        self.register("yasb.grouper.GrouperWidget", self._render_grouper)

    def register(self, type_id: str, renderer: WidgetRenderer) -> None:
        """Register ``renderer`` for ``type_id``; replaces an existing entry."""
        self._renderers[type_id] = renderer

    def unregister(self, type_id: str) -> None:
        self._renderers.pop(type_id, None)

    def types(self) -> List[str]:
        return sorted(self._renderers)

    def has(self, type_id: str) -> bool:
        return type_id in self._renderers

    def render(
        self, name: str, definition: Optional[WidgetDefinition], context: PreviewContext
    ) -> Optional[WidgetPreview]:
        """Preview for one widget reference; None when it has no definition."""
        if definition is None:
            _logger.debug("No definition for widget %s", name)
            return None
        renderer = self._renderers.get(definition.type)
        if renderer is None:
            if definition.type:
                _logger.debug("No preview renderer for type %s (widget %s)", definition.type, name)
            return WidgetPreview(name=name, text=name)
        return renderer(name, definition, context)

    def _render_grouper(
        self, name: str, definition: WidgetDefinition, context: PreviewContext
    ) -> WidgetPreview:
        members = definition.options.get("widgets")
        if context.depth >= MAX_GROUP_DEPTH or not isinstance(members, list):
            if context.depth >= MAX_GROUP_DEPTH:
                _logger.warning("Grouper nesting too deep at %s", name)
            return WidgetPreview(name=name, text="")
        nested = replace(context, depth=context.depth + 1)
        children: List[WidgetPreview] = []
        for member in members:
            preview = self.render(member, context.definitions.get(member), nested)
            if preview is not None:
                children.append(preview)
        return WidgetPreview(name=name, text="", children=tuple(children))

    def render_bar(
        self,
        bar: Bar,
        definitions: Mapping[str, WidgetDefinition],
        root_variables: Optional[Mapping[str, str]] = None,
    ) -> Dict[str, List[WidgetPreview]]:
        """Previews per position (``left``/``center``/``right``) for one bar."""
        context = PreviewContext(definitions=definitions, root_variables=root_variables or {})
        out: Dict[str, List[WidgetPreview]] = {}
        for pos in POSITIONS:
            previews: List[WidgetPreview] = []
            for widget_name in bar.widgets.get(pos, []):
                preview = self.render(widget_name, definitions.get(widget_name), context)
                if preview is not None:
                    previews.append(preview)
            out[pos] = previews
        return out


def get_widget_previews() -> WidgetPreviewRegistry:
    """Registered registry, or a fresh built-in one when none is registered."""
    registry = services.try_get("widget_previews")
    if isinstance(registry, WidgetPreviewRegistry):
        return registry
    return WidgetPreviewRegistry()
