import pytest

pytest.importorskip("PyQt6")

from PyQt6.QtWidgets import QApplication  # noqa: E402

from gui.services.event_bus import EventBus  # noqa: E402
from gui.viewmodels.theme_editor_viewmodel import ThemeEditorViewModel  # noqa: E402
from gui.views.theme_editor_window import ThemeEditorWindow  # noqa: E402


@pytest.fixture
def qapp():
    return QApplication.instance() or QApplication([])


@pytest.fixture
def window(qapp, qtbot, library, isolated_services):
    bus = EventBus()
    isolated_services.register("event_bus", bus, allow_override=True)
    vm = ThemeEditorViewModel(library, event_bus=bus)
    win = ThemeEditorWindow(vm)
    qtbot.addWidget(win)
    yield win
    win.close()


def test_window_lists_editable_themes(window):
    assert window.theme_list.count() == 1
    assert "Neon Dark" in window.theme_list.item(0).text()
    assert not window.save_btn.isEnabled()


def test_selecting_theme_renders_editor(window):
    window.vm.select_theme("neon")
    assert window.save_btn.isEnabled()
    assert [window.sub_tabs.tabText(i) for i in range(window.sub_tabs.count())] == ["dark", "light"]
    assert window.sub_tabs.tabText(window.sub_tabs.currentIndex()) == "dark"


def test_edit_marks_window_dirty(window):
    window.vm.select_theme("neon")
    window.vm.add_widget("primary-bar", "center", "cpu")
    assert window.statusBar().currentMessage() == "Unsaved changes"
    window.vm.save()
    assert window.statusBar().currentMessage() == "Changes saved successfully!"
