"""ViewModel for the theme editor window.

Headless bridge between the Qt window and the editor's collaborators
(``ThemeLibrary`` for disk access, ``EditorSession`` for the open document,
``WidgetPreviewRegistry`` for the preview strip). Every state change is
published on the event bus so views and status bars stay in sync:

 - ``THEMES_LOADED``       after ``refresh``
 - ``THEME_SELECTED``      / ``SUB_THEME_SELECTED`` after a load
 - ``DOCUMENT_CHANGED``    after any successful edit
 - ``DOCUMENT_SAVED``      after a successful save
 - ``ERROR_OCCURRED``      when disk access fails
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from domain.models import ThemeEntry
from gui.services.editor_session import EditorSession
from gui.services.event_bus import EventBus, GUIEvent
from gui.services.service_locator import services
from gui.services.widget_preview import WidgetPreview, WidgetPreviewRegistry, bar_palette
from services.theme_library import ThemeLibrary, ThemeLibraryError

_logger = logging.getLogger(__name__)

__all__ = ["ThemeEditorViewModel", "ThemeRow", "sub_count_text"]

BarPreview = Tuple[str, Dict[str, List[WidgetPreview]]]


def sub_count_text(count: int) -> str:
    return f"{count} sub-theme{'' if count == 1 else 's'}"


@dataclass(frozen=True)
class ThemeRow:
    name: str
    display_name: str
    detail: str
    selected: bool = False


class ThemeEditorViewModel:
    def __init__(
        self,
        library: ThemeLibrary | None = None,
        *,
        event_bus: EventBus | None = None,
        previews: WidgetPreviewRegistry | None = None,
    ) -> None:
        self.library = library or services.get_typed("theme_library", ThemeLibrary)
        self._bus = event_bus if event_bus is not None else services.try_get("event_bus")
        self.previews = previews or services.try_get("widget_previews") or WidgetPreviewRegistry()
        self.session = EditorSession()
        self._themes: Dict[str, ThemeEntry] = {}

    def _publish(self, event: GUIEvent, payload: object = None) -> None:
        if isinstance(self._bus, EventBus):
            self._bus.publish(event, payload)

    def _fail(self, action: str, exc: Exception) -> None:
        _logger.error("%s failed: %s", action, exc)
        self._publish(GUIEvent.ERROR_OCCURRED, {"action": action, "message": str(exc)})

    # Theme list -------------------------------------------------------
    def refresh(self) -> List[ThemeRow]:
        try:
            self._themes = self.library.discover()
        except OSError as exc:
            self._fail("discover", exc)
            self._themes = {}
        self._publish(GUIEvent.THEMES_LOADED, {"count": len(self._themes)})
        return self.theme_rows()

    @property
    def themes(self) -> Dict[str, ThemeEntry]:
        return dict(self._themes)

    def theme_rows(self) -> List[ThemeRow]:
        """Sidebar rows; themes without sub-themes are not editable and skipped."""
        return [
            ThemeRow(
                name=name,
                display_name=entry.display_name,
                detail=sub_count_text(len(entry.subs)),
                selected=name == self.session.theme,
            )
            for name, entry in self._themes.items()
            if entry.subs
        ]

    def sub_names(self) -> List[str]:
        entry = self._themes.get(self.session.theme or "")
        if entry is None:
            return []
        return [s.name for s in entry.subs]

    def wallpaper_preview(self) -> Optional[str]:
        entry = self._themes.get(self.session.theme or "")
        sub = entry.find_sub(self.session.sub) if entry and self.session.sub else None
        return sub.wallpaper_preview if sub else None

    # Selection --------------------------------------------------------
    def select_theme(self, name: str, sub: Optional[str] = None) -> bool:
        try:
            self.session.load(self.library, name, sub)
        except ThemeLibraryError as exc:
            self._fail("load theme", exc)
            return False
        self._publish(GUIEvent.THEME_SELECTED, {"theme": name, "sub": self.session.sub})
        return True

    def select_sub(self, sub: str) -> bool:
        if not self.session.loaded:
            return False
        try:
            self.session.select_sub(self.library, sub)
        except ThemeLibraryError as exc:
            self._fail("load sub-theme", exc)
            return False
        self._publish(GUIEvent.SUB_THEME_SELECTED, {"theme": self.session.theme, "sub": sub})
        return True

    # Preview ----------------------------------------------------------
    def bar_previews(self) -> List[BarPreview]:
        definitions = self.session.widget_definitions()
        root_vars = self.session.root_variables()
        return [
            (bar.name, self.previews.render_bar(bar, definitions, root_vars))
            for bar in self.session.bars()
        ]

    def palette(self) -> Dict[str, str]:
        return bar_palette(self.session.root_variables())

    # Edits ------------------------------------------------------------
    def _changed(self, ok: bool, action: str) -> bool:
        if ok:
            self._publish(
                GUIEvent.DOCUMENT_CHANGED,
                {"theme": self.session.theme, "sub": self.session.sub, "action": action},
            )
        return ok

    def move_widget_up(self, bar: str, position: str, index: int) -> bool:
        return self._changed(self.session.move_widget_up(bar, position, index), "move_up")

    def move_widget_down(self, bar: str, position: str, index: int) -> bool:
        return self._changed(self.session.move_widget_down(bar, position, index), "move_down")

    def remove_widget(self, bar: str, position: str, index: int) -> bool:
        return self._changed(self.session.remove_widget(bar, position, index), "remove")

    def add_widget(self, bar: str, position: str, widget_name: str) -> bool:
        return self._changed(self.session.add_widget(bar, position, widget_name), "add")

    def set_meta(self, name: str, version: str) -> bool:
        return self._changed(self.session.set_meta(name, version), "meta")

    def set_root_variable(self, var: str, value: str) -> bool:
        return self._changed(self.session.set_root_variable(var, value), "color")

    def set_wallpaper(self, link: str, workshop_id: str = "", enabled: bool = True) -> bool:
        return self._changed(self.session.set_wallpaper(link, workshop_id, enabled), "wallpaper")

    # Persistence ------------------------------------------------------
    @property
    def has_unsaved_changes(self) -> bool:
        return self.session.unsaved_changes

    def save(self) -> bool:
        try:
            saved = self.session.save(self.library)
        except ThemeLibraryError as exc:
            self._fail("save", exc)
            return False
        if saved:
            self._publish(
                GUIEvent.DOCUMENT_SAVED, {"theme": self.session.theme, "sub": self.session.sub}
            )
        return saved
