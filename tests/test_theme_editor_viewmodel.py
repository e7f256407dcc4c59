import pytest

from gui.services.event_bus import EventBus, GUIEvent
from gui.viewmodels.theme_editor_viewmodel import ThemeEditorViewModel, ThemeRow, sub_count_text


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def events(bus):
    seen = []
    for evt in GUIEvent:
        bus.subscribe(evt, lambda e: seen.append((e.name, e.payload)))
    return seen


@pytest.fixture
def vm(library, bus):
    model = ThemeEditorViewModel(library, event_bus=bus)
    model.refresh()
    return model


def _names(events):
    return [name for name, _ in events]


def test_sub_count_text():
    assert sub_count_text(1) == "1 sub-theme"
    assert sub_count_text(0) == "0 sub-themes"
    assert sub_count_text(3) == "3 sub-themes"


def test_refresh_lists_only_themes_with_sub_themes(library, bus, events):
    model = ThemeEditorViewModel(library, event_bus=bus)
    rows = model.refresh()
    assert rows == [ThemeRow(name="neon", display_name="Neon Dark", detail="2 sub-themes")]
    assert events[-1] == (GUIEvent.THEMES_LOADED.value, {"count": 4})


def test_library_resolved_from_services(isolated_services, library):
    isolated_services.register("theme_library", library, allow_override=True)
    isolated_services.register("event_bus", EventBus(), allow_override=True)
    model = ThemeEditorViewModel()
    assert model.library is library
    assert model.previews.has("yasb.cpu.CpuWidget")


def test_select_theme_and_sub(vm, events):
    assert vm.select_theme("neon")
    assert vm.session.sub == "dark"
    assert vm.theme_rows()[0].selected
    assert vm.sub_names() == ["dark", "light"]
    assert vm.wallpaper_preview().endswith("wallpaper.png")
    assert vm.select_sub("light")
    assert vm.wallpaper_preview() is None
    assert _names(events)[-2:] == [GUIEvent.THEME_SELECTED.value, GUIEvent.SUB_THEME_SELECTED.value]
    assert events[-1][1] == {"theme": "neon", "sub": "light"}


def test_select_sub_without_theme_is_rejected(vm):
    assert not vm.select_sub("dark")


def test_invalid_theme_publishes_error(vm, events):
    assert not vm.select_theme("..")
    name, payload = events[-1]
    assert name == GUIEvent.ERROR_OCCURRED.value
    assert payload["action"] == "load theme"


def test_bar_previews_and_palette(vm):
    vm.select_theme("neon")
    previews = vm.bar_previews()
    assert [name for name, _ in previews] == ["primary-bar", "secondary-bar"]
    primary = previews[0][1]
    assert [p.name for p in primary["left"]] == ["home", "workspaces"]
    assert vm.palette()["accent"] == "#ff00aa"
    assert vm.palette()["background"] == "rgba(1, 2, 3, 0.5)"


def test_edits_publish_document_changed(vm, events):
    vm.select_theme("neon")
    assert vm.add_widget("primary-bar", "center", "cpu")
    assert events[-1] == (
        GUIEvent.DOCUMENT_CHANGED.value,
        {"theme": "neon", "sub": "dark", "action": "add"},
    )
    count = len(events)
    assert not vm.move_widget_up("primary-bar", "left", 0)
    assert len(events) == count
    assert vm.set_root_variable("--accent1", "#000000")
    assert events[-1][1]["action"] == "color"
    assert vm.has_unsaved_changes


def test_save_publishes_saved(vm, events, library):
    vm.select_theme("neon")
    vm.set_meta("Neon Dark", "2.0.0")
    assert vm.save()
    assert events[-1] == (GUIEvent.DOCUMENT_SAVED.value, {"theme": "neon", "sub": "dark"})
    assert library.read_sub_manifest("neon", "dark")["meta"]["version"] == "2.0.0"
    assert not vm.has_unsaved_changes
    assert not vm.save()


def test_save_failure_publishes_error(vm, events, theme_tree):
    vm.select_theme("neon")
    vm.remove_widget("primary-bar", "right", 0)
    config = theme_tree["themes"] / "neon" / "config.yaml"
    config.unlink()
    config.mkdir()
    assert not vm.save()
    name, payload = events[-1]
    assert name == GUIEvent.ERROR_OCCURRED.value
    assert payload["action"] == "save"
    assert vm.has_unsaved_changes
