# Shared fixtures: headless Qt platform, a sample config document and an
# on-disk theme tree. Also provides a fallback 'qtbot' fixture if pytest-qt is
# not installed; if pytest-qt is installed, its fixture wins.

import json
import os
import sys
import contextlib
from pathlib import Path

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

try:  # If pytest-qt present, do nothing (its fixture will be used)
    import pytestqt  # type: ignore  # noqa: F401
except Exception:  # pragma: no cover
    try:
        from PyQt6.QtWidgets import QApplication
    except Exception:  # pragma: no cover
        QApplication = None  # type: ignore

    @pytest.fixture
    def qtbot():  # type: ignore
        if QApplication is None:
            pytest.skip("PyQt6 not available")
        QApplication.instance() or QApplication(sys.argv)  # type: ignore
        widgets = []

        class Bot:
            def addWidget(self, w):  # mimic pytest-qt API subset
                widgets.append(w)

            @contextlib.contextmanager
            def waitSignal(self, *args, **kwargs):  # no-op stub
                yield

        return Bot()


from gui.services.service_locator import services  # noqa: E402

SAMPLE_CONFIG = r"""watch_stylesheet: true
# global comment
bars:
  primary-bar:
    enabled: true
    screens: ['*']
    widgets:
      left:
        - "home"
        - "workspaces"
      center:
        - "clock"
      right:
        - "cpu"
        - "battery"
    dimensions:
      width: "100%"
      height: 32

  secondary-bar:
    enabled: false
    widgets:
      left: ["home"]
      center: []
      right:
        - 'clock'
        - volume
widgets:
  home:
    type: "yasb.home.HomeWidget"
    options:
      label: "\uf015"
  clock:
    type: "yasb.clock.ClockWidget"
    options:
      label: "{%H:%M}"
  cpu:
    type: "yasb.cpu.CpuWidget"
    options:
      label: "\uf4bc {info[percent][total]}%"
  workspaces:
    type: "komorebi.workspaces.WorkspaceWidget"
    options:
      label_offline: "Offline"
  battery:
    type: "yasb.battery.BatteryWidget"
  volume:
    type: "yasb.volume.VolumeWidget"
    options:
      volume_icons:
        - "\ueee8"
        - "\uf026"
      wifi_icons: ["a", "b", "c"]
  broken:
    options:
      label: "no type"
komorebi:
  start_command: "komorebic start"
"""

DARK_MANIFEST = {
    "meta": {"name": "Neon Dark", "version": "1.0.0"},
    "root-variables": {
        "--accent1": "#00dfff",
        "--accent2": "#ff00aa",
        "--bg-panel": "rgba(1, 2, 3, 0.5)",
        "--font-family": "Inter",
    },
    "wallpaper-engine": {
        "enabled": True,
        "link": "https://steamcommunity.com/sharedfiles/filedetails/?id=123456",
    },
}


@pytest.fixture
def sample_config() -> str:
    return SAMPLE_CONFIG


def _write_json(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


@pytest.fixture
def theme_tree(tmp_path: Path) -> dict:
    """Themes folder with one editable theme (two sub-themes) and a few oddities."""
    themes = tmp_path / "yasb-themes"
    neon = themes / "neon"
    neon.mkdir(parents=True)
    (neon / "config.yaml").write_bytes(SAMPLE_CONFIG.encode("utf-8"))
    _write_json(neon / "sub-themes" / "dark" / "manifest.json", DARK_MANIFEST)
    (neon / "sub-themes" / "dark" / "wallpaper.png").write_bytes(b"\x89PNG")
    _write_json(neon / "sub-themes" / "light" / "manifest.json", {"meta": {"name": "Neon Light"}})

    described = themes / "described"
    _write_json(
        described / "meta.json",
        {"name": "Described", "short-description": "Short", "long-description": "Long", "tags": ["x"]},
    )
    (themes / "plain").mkdir()
    broken = themes / "broken"
    broken.mkdir()
    (broken / "manifest.json").write_text("{not json", encoding="utf-8")

    user_state = tmp_path / "user-state"
    user_state.mkdir()
    return {"root": tmp_path, "themes": themes, "user_state": user_state}


@pytest.fixture
def library(theme_tree):
    from services.theme_library import ThemeLibrary

    return ThemeLibrary(theme_tree["themes"], user_state_dir=theme_tree["user_state"])


@pytest.fixture
def isolated_services():
    """Snapshot and restore the global service registry around a test."""
    saved = {key: services.get(key) for key in services.list_keys()}
    yield services
    services.clear()
    for key, value in saved.items():
        services.register(key, value)
