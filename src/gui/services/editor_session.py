"""Editing session for one theme's ``config.yaml`` and one sub-theme manifest.

The session owns the raw document text. Every structural widget edit parses
the current text, mutates the bar list and rewrites the text, so the
document is the single source of truth and everything outside the bars'
widget blocks is preserved byte-for-byte.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from domain.models import Bar, WidgetDefinition
from parsing import bar_edits
from parsing.bar_parser import parse_bars
from parsing.bar_rewriter import rewrite_bars
from parsing.errors import ParseDiagnostic
from parsing.widget_parser import list_available_widget_names, parse_widget_definitions
from services.theme_library import ThemeLibrary, extract_workshop_id

_logger = logging.getLogger(__name__)

__all__ = ["EditorSession"]

ROOT_VARIABLES_KEY = "root-variables"
WALLPAPER_ENGINE_KEY = "wallpaper-engine"


@dataclass
class EditorSession:
    theme: Optional[str] = None
    sub: Optional[str] = None
    config_text: Optional[str] = None
    manifest: Dict[str, Any] = field(default_factory=dict)
    unsaved_changes: bool = False

    # Loading ----------------------------------------------------------
    @property
    def loaded(self) -> bool:
        return self.theme is not None

    def load(self, library: ThemeLibrary, theme: str, sub: Optional[str] = None) -> None:
        """Load ``config.yaml`` of ``theme`` plus a sub-theme manifest.

        Without ``sub`` the first sub-theme (by folder name) is used. A theme
        without ``config.yaml`` loads with ``config_text`` set to None.
        """
        config_text = library.read_theme_file(theme)
        if config_text is None:
            _logger.warning("Theme %s has no config file", theme)
        if sub is None:
            subs = library.list_subs(theme)
            sub = subs[0] if subs else None
        self.theme = theme
        self.config_text = config_text
        self.sub = None
        self.manifest = {}
        self.unsaved_changes = False
        if sub is not None:
            self.select_sub(library, sub)
        _logger.info("Loaded theme %s (sub-theme %s)", theme, self.sub)

    def select_sub(self, library: ThemeLibrary, sub: str) -> None:
        """Switch sub-theme; only the manifest is reloaded."""
        if self.theme is None:
            raise RuntimeError("No theme loaded")
        if library.manifest_path(self.theme, sub).is_file():
            self.manifest = library.read_sub_manifest(self.theme, sub)
        else:
            _logger.warning("Sub-theme %s/%s has no manifest", self.theme, sub)
            self.manifest = {}
        self.sub = sub

    # Views of the document ------------------------------------------------
    def bars(self) -> List[Bar]:
        return parse_bars(self.config_text)

    def widget_definitions(
        self, diagnostics: Optional[List[ParseDiagnostic]] = None
    ) -> Dict[str, WidgetDefinition]:
        return parse_widget_definitions(self.config_text, diagnostics)

    def available_widgets(self) -> List[str]:
        return list_available_widget_names(self.config_text)

    def root_variables(self) -> Dict[str, str]:
        data = self.manifest.get(ROOT_VARIABLES_KEY)
        return dict(data) if isinstance(data, dict) else {}

    def color_variables(self) -> Dict[str, str]:
        """``--`` root variables whose value is a hex or rgb(a) color."""
        return {
            k: v
            for k, v in self.root_variables().items()
            if k.startswith("--") and isinstance(v, str) and v.startswith(("#", "rgb"))
        }

    def meta(self) -> Dict[str, Any]:
        data = self.manifest.get("meta")
        return dict(data) if isinstance(data, dict) else {}

    def wallpaper_settings(self) -> Dict[str, Any]:
        """Enabled flag, link and workshop id as shown in the wallpaper form."""
        engine = self.manifest.get(WALLPAPER_ENGINE_KEY)
        engine = engine if isinstance(engine, dict) else {}
        link = engine.get("link") or ""
        return {
            "enabled": engine.get("enabled") is not False,
            "link": link,
            "workshop_id": extract_workshop_id(link) or "",
        }

    # Structural widget edits --------------------------------------------
    def _edit(self, mutate: Callable[[List[Bar]], bool], what: str) -> bool:
        if self.config_text is None:
            _logger.debug("Ignoring %s: no document loaded", what)
            return False
        bars = parse_bars(self.config_text)
        if not mutate(bars):
            return False
        rewritten = rewrite_bars(self.config_text, bars)
        if rewritten == self.config_text:
            _logger.warning("Ignoring %s: bar has no widgets block to rewrite", what)
            return False
        self.config_text = rewritten
        self.unsaved_changes = True
        _logger.debug("Applied %s", what)
        return True

    def move_widget_up(self, bar: str, position: str, index: int) -> bool:
        return self._edit(
            lambda bars: bar_edits.move_widget_up(bars, bar, position, index), "move up"
        )

    def move_widget_down(self, bar: str, position: str, index: int) -> bool:
        return self._edit(
            lambda bars: bar_edits.move_widget_down(bars, bar, position, index), "move down"
        )

    def remove_widget(self, bar: str, position: str, index: int) -> bool:
        return self._edit(
            lambda bars: bar_edits.remove_widget(bars, bar, position, index) is not None,
            "remove widget",
        )

    def add_widget(self, bar: str, position: str, widget_name: str) -> bool:
        return self._edit(
            lambda bars: bar_edits.add_widget(bars, bar, position, widget_name), "add widget"
        )

    # Manifest edits -----------------------------------------------------
    def _manifest_section(self, key: str) -> Dict[str, Any]:
        section = self.manifest.get(key)
        if not isinstance(section, dict):
            section = self.manifest[key] = {}
        return section

    def set_meta(self, name: str, version: str) -> bool:
        if self.sub is None:
            return False
        meta = self._manifest_section("meta")
        name, version = name.strip(), version.strip()
        if meta.get("name") == name and meta.get("version") == version:
            return False
        meta["name"] = name
        meta["version"] = version
        self.unsaved_changes = True
        return True

    def set_root_variable(self, var: str, value: str) -> bool:
        if self.sub is None or not var.startswith("--"):
            return False
        root_vars = self._manifest_section(ROOT_VARIABLES_KEY)
        value = value.strip()
        if root_vars.get(var) == value:
            return False
        root_vars[var] = value
        self.unsaved_changes = True
        return True

    def set_wallpaper(self, link: str, workshop_id: str = "", enabled: bool = True) -> bool:
        """Update ``wallpaper-engine``; the file id falls back to the link's ``id=``."""
        if self.sub is None:
            return False
        engine = self._manifest_section(WALLPAPER_ENGINE_KEY)
        before = dict(engine)
        link = link.strip()
        engine["enabled"] = bool(enabled)
        engine["link"] = link
        file_id = workshop_id.strip() or extract_workshop_id(link)
        if file_id:
            engine["file"] = file_id
        if engine == before:
            return False
        self.unsaved_changes = True
        return True

    # Persistence ------------------------------------------------------
    def save(self, library: ThemeLibrary) -> bool:
        """Write config then manifest; False when there is nothing to save.

        ``ThemeLibraryError`` from either write propagates and leaves the
        unsaved flag set.
        """
        if not self.unsaved_changes:
            _logger.info("No changes to save")
            return False
        if self.theme is None:
            _logger.error("No theme selected")
            return False
        if self.config_text is not None:
            library.write_theme_file(self.theme, self.config_text)
        if self.sub is not None:
            library.write_sub_manifest(self.theme, self.sub, self.manifest)
        self.unsaved_changes = False
        _logger.info("Saved %s/%s", self.theme, self.sub)
        return True
