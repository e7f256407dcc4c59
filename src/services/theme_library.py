"""On-disk theme library: discovery plus theme file and manifest I/O.

Layout::

    <themes_dir>/<theme>/config.yaml
    <themes_dir>/<theme>/manifest.json | meta.json          (optional)
    <themes_dir>/<theme>/sub-themes/<sub>/manifest.json
    <themes_dir>/<theme>/sub-themes/<sub>/wallpaper.<ext>   (optional)
    <legacy_dir>/<theme>/manifest.json                      (legacy themes)

Config documents are handed out as raw text; parsing happens elsewhere.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

from config import settings
from core import filesystem
from domain.models import SubTheme, ThemeEntry

_logger = logging.getLogger(__name__)

__all__ = ["ThemeLibrary", "ThemeLibraryError", "extract_workshop_id"]

_WORKSHOP_ID_RE = re.compile(r"id=(\d+)")
_META_FIELDS = ("name", "version", "repository", "tags", "authors")


class ThemeLibraryError(RuntimeError):
    """Raised for missing themes/manifests and failed writes."""


def extract_workshop_id(link: str) -> Optional[str]:
    """Workshop file id from a ``...?id=123456`` link, if present."""
    m = _WORKSHOP_ID_RE.search(link or "")
    return m.group(1) if m else None


def _check_segment(value: str, what: str) -> str:
    if not value or value in (".", "..") or "/" in value or "\\" in value:
        raise ThemeLibraryError(f"Invalid {what}: {value!r}")
    return value


def _shape_meta(meta: Dict[str, Any]) -> Dict[str, Any]:
    """Wrap a ``meta.json`` payload into the manifest shape used for cards."""
    shaped: Dict[str, Any] = {}
    for key in _META_FIELDS:
        if meta.get(key):
            shaped[key] = meta[key]
    short = meta.get("short-description")
    long_ = meta.get("long-description")
    if short:
        shaped["short-description"] = short
        shaped["description"] = short
    if long_:
        shaped["long-description"] = long_
        shaped.setdefault("description", long_)
    return {"meta": shaped}


class ThemeLibrary:
    def __init__(
        self,
        themes_dir: str | Path | None = None,
        *,
        legacy_dir: str | Path | None = None,
        user_state_dir: str | Path | None = None,
    ) -> None:
        self.themes_dir = Path(themes_dir or settings.THEMES_DIR)
        self.legacy_dir = Path(legacy_dir) if legacy_dir else None
        self.user_state_dir = Path(user_state_dir or settings.USER_STATE_DIR)

    # Paths ------------------------------------------------------------
    def theme_path(self, theme: str) -> Path:
        return self.themes_dir / _check_segment(theme, "theme name")

    def sub_path(self, theme: str, sub: str) -> Path:
        return (
            self.theme_path(theme) / settings.SUB_THEMES_DIRNAME / _check_segment(sub, "sub-theme")
        )

    def manifest_path(self, theme: str, sub: str) -> Path:
        return self.sub_path(theme, sub) / settings.MANIFEST_FILENAME

    def skip_file_path(self, theme: str, sub: str) -> Path:
        return self.user_state_dir / f"{theme}---{sub}---{settings.SKIP_WORKSHOP_SUFFIX}"

    # Discovery --------------------------------------------------------
    def discover(self) -> Dict[str, ThemeEntry]:
        """Scan legacy and current theme folders (sorted by folder name)."""
        out: Dict[str, ThemeEntry] = {}
        if self.legacy_dir is not None and self.legacy_dir.is_dir():
            for folder in sorted(p for p in self.legacy_dir.iterdir() if p.is_dir()):
                manifest = folder / settings.MANIFEST_FILENAME
                if manifest.is_file():
                    out[folder.name] = self._entry_from_manifest(folder, manifest)
        if self.themes_dir.is_dir():
            for folder in sorted(p for p in self.themes_dir.iterdir() if p.is_dir()):
                out[folder.name] = self._discover_theme(folder)
        for entry in out.values():
            if entry.base_path and entry.error is None:
                entry.subs = self._discover_subs(Path(entry.base_path))
        _logger.debug("Discovered %d themes under %s", len(out), self.themes_dir)
        return out

    def _entry_from_manifest(self, folder: Path, manifest: Path) -> ThemeEntry:
        try:
            data = filesystem.read_json(str(manifest))
        except (OSError, ValueError) as exc:
            _logger.warning("Manifest parse error for %s: %s", folder.name, exc)
            return ThemeEntry(name=folder.name, error=f"manifest parse error: {exc}")
        if not isinstance(data, dict):
            return ThemeEntry(name=folder.name, error="manifest root must be an object")
        return ThemeEntry(name=folder.name, manifest=data, base_path=str(folder))

    def _discover_theme(self, folder: Path) -> ThemeEntry:
        manifest = folder / settings.MANIFEST_FILENAME
        if manifest.is_file():
            return self._entry_from_manifest(folder, manifest)
        meta_path = folder / settings.META_FILENAME
        if meta_path.is_file():
            try:
                meta = filesystem.read_json(str(meta_path))
                if isinstance(meta, dict):
                    return ThemeEntry(
                        name=folder.name, manifest=_shape_meta(meta), base_path=str(folder)
                    )
            except (OSError, ValueError) as exc:
                _logger.debug("Ignoring unreadable %s: %s", meta_path, exc)
        fallback = ThemeEntry(
            name=folder.name, manifest={"meta": {"name": folder.name}}, base_path=str(folder)
        )
        sub_root = folder / settings.SUB_THEMES_DIRNAME
        subs = sorted(p for p in sub_root.iterdir() if p.is_dir()) if sub_root.is_dir() else []
        if not subs:
            return fallback
        rep_manifest = subs[0] / settings.MANIFEST_FILENAME
        if not rep_manifest.is_file():
            return fallback
        try:
            data = filesystem.read_json(str(rep_manifest))
        except (OSError, ValueError):
            return fallback
        if not isinstance(data, dict):
            return fallback
        return ThemeEntry(
            name=folder.name,
            manifest=data,
            base_path=str(folder),
            representative_sub=subs[0].name,
        )

    def _discover_subs(self, base: Path) -> List[SubTheme]:
        sub_root = base / settings.SUB_THEMES_DIRNAME
        if not sub_root.is_dir():
            return []
        subs: List[SubTheme] = []
        for folder in sorted(p for p in sub_root.iterdir() if p.is_dir()):
            manifest: Optional[Dict[str, Any]] = None
            meta: Optional[Dict[str, Any]] = None
            manifest_path = folder / settings.MANIFEST_FILENAME
            if manifest_path.is_file():
                try:
                    manifest = filesystem.read_json(str(manifest_path))
                except (OSError, ValueError) as exc:
                    manifest = {"error": str(exc)}
            meta_path = folder / settings.META_FILENAME
            if meta_path.is_file():
                try:
                    meta = filesystem.read_json(str(meta_path))
                except (OSError, ValueError):
                    meta = None
            if meta is None and isinstance(manifest, dict):
                meta = manifest.get("meta")
            subs.append(
                SubTheme(
                    name=folder.name,
                    manifest=manifest,
                    meta=meta,
                    wallpaper_preview=self._find_wallpaper(folder),
                )
            )
        return subs

    @staticmethod
    def _find_wallpaper(folder: Path) -> Optional[str]:
        for f in sorted(folder.iterdir()):
            name = f.name.lower()
            if (
                f.is_file()
                and name.startswith(settings.WALLPAPER_STEM + ".")
                and name.endswith(settings.WALLPAPER_EXTENSIONS)
            ):
                return str(f)
        return None

    def list_subs(self, theme: str) -> List[str]:
        """Sorted sub-theme folder names of ``theme`` (empty when none)."""
        sub_root = self.theme_path(theme) / settings.SUB_THEMES_DIRNAME
        if not sub_root.is_dir():
            return []
        return sorted(p.name for p in sub_root.iterdir() if p.is_dir())

    # Theme files ------------------------------------------------------
    def read_theme_file(self, theme: str, filename: str = settings.CONFIG_FILENAME) -> Optional[str]:
        """Text content of a theme-level file, or None when it does not exist."""
        path = self.theme_path(theme) / _check_segment(filename, "file name")
        if not path.is_file():
            return None
        try:
            return filesystem.read_text(str(path))
        except OSError as exc:
            raise ThemeLibraryError(f"Failed to read {path}: {exc}") from exc

    def write_theme_file(
        self, theme: str, content: str, filename: str = settings.CONFIG_FILENAME
    ) -> Path:
        path = self.theme_path(theme) / _check_segment(filename, "file name")
        try:
            filesystem.write_text(str(path), content)
        except OSError as exc:
            raise ThemeLibraryError(f"Failed to write {path}: {exc}") from exc
        _logger.info("Wrote %s", path)
        return path

    # Sub-theme manifests ----------------------------------------------
    def read_sub_manifest(self, theme: str, sub: str) -> Dict[str, Any]:
        """Parsed sub-theme manifest; ``{}`` when the JSON is corrupt."""
        path = self.manifest_path(theme, sub)
        if not path.is_file():
            raise ThemeLibraryError(f"manifest not found: {path}")
        try:
            data = filesystem.read_json(str(path))
        except ValueError as exc:
            _logger.warning("Corrupt manifest %s: %s", path, exc)
            return {}
        except OSError as exc:
            raise ThemeLibraryError(f"Failed to read {path}: {exc}") from exc
        return data if isinstance(data, dict) else {}

    def write_sub_manifest(self, theme: str, sub: str, manifest: Dict[str, Any]) -> Path:
        path = self.manifest_path(theme, sub)
        try:
            filesystem.write_json(str(path), manifest)
        except OSError as exc:
            raise ThemeLibraryError(f"Failed to write {path}: {exc}") from exc
        _logger.info("Wrote %s", path)
        return path

    # Wallpaper toggles --------------------------------------------------
    def _set_wallpaper_enabled(self, theme: str, sub: str, enabled: bool) -> Dict[str, Any]:
        manifest = self.read_sub_manifest(theme, sub)
        engine = manifest.get("wallpaper-engine")
        if not isinstance(engine, dict):
            engine = manifest["wallpaper-engine"] = {}
        engine["enabled"] = enabled
        manifest.pop("skip-provided-wallpaper", None)
        return manifest

    def disable_sub_wallpaper(self, theme: str, sub: str) -> None:
        manifest = self._set_wallpaper_enabled(theme, sub, False)
        self.write_sub_manifest(theme, sub, manifest)

    def enable_sub_wallpaper(self, theme: str, sub: str) -> None:
        manifest = self._set_wallpaper_enabled(theme, sub, True)
        skip_file = self.skip_file_path(theme, sub)
        if skip_file.exists():
            try:
                os.remove(skip_file)
                _logger.debug("Deleted skip file: %s", skip_file)
            except OSError as exc:
                _logger.warning("Failed to delete skip file %s: %s", skip_file, exc)
        self.write_sub_manifest(theme, sub, manifest)

