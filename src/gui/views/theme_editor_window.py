"""Theme editor main window.

Layout:
 - left: theme list (display name + sub-theme count)
 - right: sub-theme tabs, preview strip (one row per bar), metadata /
   colors / wallpaper forms, per-bar widget lists with up/down/remove/add
   buttons, and a Save button.

All state lives in ``ThemeEditorViewModel``; the window rebuilds its panels
from it after each event published on the bus.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

try:  # pragma: no cover - import guard for headless tests
    from PyQt6.QtCore import Qt
    from PyQt6.QtGui import QPixmap
    from PyQt6.QtWidgets import (
        QCheckBox,
        QComboBox,
        QFormLayout,
        QFrame,
        QGroupBox,
        QHBoxLayout,
        QLabel,
        QLineEdit,
        QListWidget,
        QListWidgetItem,
        QMainWindow,
        QMessageBox,
        QPushButton,
        QScrollArea,
        QSplitter,
        QTabBar,
        QVBoxLayout,
        QWidget,
    )
except Exception:  # pragma: no cover
    QMainWindow = object  # type: ignore

from domain.models import POSITIONS
from gui.services.event_bus import Event, EventBus, GUIEvent
from gui.services.service_locator import services
from gui.services.widget_preview import WidgetPreview
from gui.viewmodels.theme_editor_viewmodel import ThemeEditorViewModel

_logger = logging.getLogger(__name__)

__all__ = ["ThemeEditorWindow"]

_REFRESH_EVENTS = (
    GUIEvent.THEME_SELECTED,
    GUIEvent.SUB_THEME_SELECTED,
    GUIEvent.DOCUMENT_CHANGED,
    GUIEvent.DOCUMENT_SAVED,
)


def _clear_layout(layout) -> None:  # pragma: no cover - UI
    while layout.count():
        item = layout.takeAt(0)
        widget = item.widget()
        if widget is not None:
            widget.deleteLater()
        elif item.layout() is not None:
            _clear_layout(item.layout())


class ThemeEditorWindow(QMainWindow):  # type: ignore[misc]
    """Main window of the theme editor."""

    def __init__(self, view_model: ThemeEditorViewModel | None = None, parent=None):  # pragma: no cover - UI
        super().__init__(parent)
        self.setWindowTitle("YASB Theme Editor")
        self.setObjectName("ThemeEditorWindow")
        self.vm = view_model or ThemeEditorViewModel()
        self._subscriptions = []
        self._color_inputs: Dict[str, QLineEdit] = {}
        self._widget_lists: Dict[tuple[str, str], QListWidget] = {}

        splitter = QSplitter(Qt.Orientation.Horizontal, self)
        self.theme_list = QListWidget(splitter)
        self.theme_list.setObjectName("themeList")
        self.theme_list.setMinimumWidth(200)
        self.theme_list.currentItemChanged.connect(self._on_theme_item_changed)

        right = QWidget(splitter)
        right_layout = QVBoxLayout(right)
        self.sub_tabs = QTabBar(right)
        self.sub_tabs.setObjectName("subThemeTabs")
        self.sub_tabs.currentChanged.connect(self._on_sub_tab_changed)
        right_layout.addWidget(self.sub_tabs)

        scroll = QScrollArea(right)
        scroll.setWidgetResizable(True)
        body = QWidget()
        self._body_layout = QVBoxLayout(body)
        scroll.setWidget(body)
        right_layout.addWidget(scroll, 1)

        self.wallpaper_label = QLabel()
        self.wallpaper_label.setObjectName("wallpaperPreview")
        self.wallpaper_label.setMaximumHeight(180)
        self._body_layout.addWidget(self.wallpaper_label)
        self.preview_box = QGroupBox("Status bar preview")
        self.preview_layout = QVBoxLayout(self.preview_box)
        self._body_layout.addWidget(self.preview_box)

        self._build_meta_panel()
        self.colors_box = QGroupBox("Colors")
        self.colors_layout = QFormLayout(self.colors_box)
        self._body_layout.addWidget(self.colors_box)
        self._build_wallpaper_panel()
        self.widgets_box = QGroupBox("Widgets")
        self.widgets_layout = QVBoxLayout(self.widgets_box)
        self._body_layout.addWidget(self.widgets_box)
        self._body_layout.addStretch(1)

        self.save_btn = QPushButton("Save changes", right)
        self.save_btn.setObjectName("saveButton")
        self.save_btn.clicked.connect(self._on_save)
        right_layout.addWidget(self.save_btn)

        splitter.setStretchFactor(1, 1)
        self.setCentralWidget(splitter)
        self.resize(1100, 760)
        self._subscribe()
        self._populate_theme_list(self.vm.refresh())
        self._render_editor()

    # Construction -------------------------------------------------------
    def _build_meta_panel(self) -> None:  # pragma: no cover - UI
        box = QGroupBox("Metadata")
        form = QFormLayout(box)
        self.meta_name = QLineEdit()
        self.meta_name.setPlaceholderText("Enter name")
        self.meta_version = QLineEdit()
        self.meta_version.setPlaceholderText("1.0.0")
        self.meta_name.editingFinished.connect(self._on_meta_edited)
        self.meta_version.editingFinished.connect(self._on_meta_edited)
        form.addRow("Name", self.meta_name)
        form.addRow("Version", self.meta_version)
        self._body_layout.addWidget(box)

    def _build_wallpaper_panel(self) -> None:  # pragma: no cover - UI
        box = QGroupBox("Wallpaper")
        form = QFormLayout(box)
        self.wallpaper_enabled = QCheckBox("Wallpaper enabled")
        self.workshop_id = QLineEdit()
        self.workshop_id.setPlaceholderText("Enter Steam Workshop ID")
        self.workshop_link = QLineEdit()
        self.workshop_link.setPlaceholderText(
            "https://steamcommunity.com/sharedfiles/filedetails/?id=..."
        )
        self.wallpaper_enabled.toggled.connect(self._on_wallpaper_edited)
        self.workshop_id.editingFinished.connect(self._on_wallpaper_edited)
        self.workshop_link.editingFinished.connect(self._on_wallpaper_edited)
        form.addRow(self.wallpaper_enabled)
        form.addRow("Workshop ID", self.workshop_id)
        form.addRow("Workshop link", self.workshop_link)
        self._body_layout.addWidget(box)

    def _subscribe(self) -> None:  # pragma: no cover - UI
        bus = services.try_get("event_bus")
        if not isinstance(bus, EventBus):
            return
        for evt in _REFRESH_EVENTS:
            self._subscriptions.append(bus.subscribe(evt, self._on_document_event))
        self._subscriptions.append(bus.subscribe(GUIEvent.ERROR_OCCURRED, self._on_error))
        self._subscriptions.append(bus.subscribe(GUIEvent.LOG_RECORD_ADDED, self._on_log_record))

    # Rendering ----------------------------------------------------------
    def _populate_theme_list(self, rows) -> None:  # pragma: no cover - UI
        self.theme_list.blockSignals(True)
        self.theme_list.clear()
        for row in rows:
            item = QListWidgetItem(f"{row.display_name}\n{row.detail}")
            item.setData(Qt.ItemDataRole.UserRole, row.name)
            self.theme_list.addItem(item)
            if row.selected:
                self.theme_list.setCurrentItem(item)
        if not rows:
            self.theme_list.addItem(QListWidgetItem("No themes found"))
        self.theme_list.blockSignals(False)

    def _render_editor(self) -> None:  # pragma: no cover - UI
        session = self.vm.session
        loaded = session.loaded and session.sub is not None
        self._body_layout.parentWidget().setEnabled(loaded)
        self.save_btn.setEnabled(loaded)
        if not loaded:
            self.statusBar().showMessage("Select a theme from the sidebar to begin editing")
            return
        self._render_sub_tabs()
        self._render_wallpaper_preview()
        self._render_preview()
        self._render_forms()
        self._render_widget_lists()

    def _render_sub_tabs(self) -> None:  # pragma: no cover - UI
        self.sub_tabs.blockSignals(True)
        while self.sub_tabs.count():
            self.sub_tabs.removeTab(0)
        for name in self.vm.sub_names():
            idx = self.sub_tabs.addTab(name)
            if name == self.vm.session.sub:
                self.sub_tabs.setCurrentIndex(idx)
        self.sub_tabs.blockSignals(False)

    def _render_wallpaper_preview(self) -> None:  # pragma: no cover - UI
        path = self.vm.wallpaper_preview()
        if path and not path.lower().endswith(".svg"):
            pix = QPixmap(path)
            self.wallpaper_label.setPixmap(
                pix.scaledToHeight(170, Qt.TransformationMode.SmoothTransformation)
            )
        else:
            self.wallpaper_label.setText("No wallpaper preview")

    def _preview_label(self, preview: WidgetPreview, palette: Dict[str, str]) -> QWidget:  # pragma: no cover - UI
        frame = QFrame()
        frame.setStyleSheet(
            f"background: {palette['widget_background']}; color: {palette['text']};"
            f" border: 1px solid {palette['border']}; border-radius: 6px;"
        )
        row = QHBoxLayout(frame)
        row.setContentsMargins(8, 4, 8, 4)
        if preview.text:
            row.addWidget(QLabel(preview.text))
        if preview.accent_text:
            accent = QLabel(preview.accent_text)
            accent.setStyleSheet(f"color: {palette['accent']}; border: none;")
            row.addWidget(accent)
        for child in preview.children:
            row.addWidget(self._preview_label(child, palette))
        return frame

    def _render_preview(self) -> None:  # pragma: no cover - UI
        _clear_layout(self.preview_layout)
        palette = self.vm.palette()
        bars = self.vm.bar_previews()
        if not bars:
            self.preview_layout.addWidget(QLabel("No bars configured"))
            return
        for bar_name, slots in bars:
            strip = QFrame()
            strip.setStyleSheet(
                f"background: {palette['background']}; border: 1px solid {palette['border']};"
            )
            row = QHBoxLayout(strip)
            for pos, align in zip(
                POSITIONS,
                (Qt.AlignmentFlag.AlignLeft, Qt.AlignmentFlag.AlignHCenter, Qt.AlignmentFlag.AlignRight),
            ):
                section = QHBoxLayout()
                section.setAlignment(align)
                for preview in slots.get(pos, []):
                    section.addWidget(self._preview_label(preview, palette))
                row.addLayout(section, 1)
            self.preview_layout.addWidget(QLabel(bar_name))
            self.preview_layout.addWidget(strip)

    def _render_forms(self) -> None:  # pragma: no cover - UI
        session = self.vm.session
        meta = session.meta()
        self.meta_name.setText(str(meta.get("name") or session.sub or ""))
        self.meta_version.setText(str(meta.get("version") or "1.0.0"))

        _clear_layout(self.colors_layout)
        self._color_inputs = {}
        for var, value in session.color_variables().items():
            edit = QLineEdit(value)
            edit.editingFinished.connect(lambda v=var, e=edit: self._on_color_edited(v, e))
            label = var[2:].replace("-", " ").title()
            self.colors_layout.addRow(label, edit)
            self._color_inputs[var] = edit

        wallpaper = session.wallpaper_settings()
        for w in (self.wallpaper_enabled, self.workshop_id, self.workshop_link):
            w.blockSignals(True)
        self.wallpaper_enabled.setChecked(wallpaper["enabled"])
        self.workshop_id.setText(wallpaper["workshop_id"])
        self.workshop_link.setText(wallpaper["link"])
        self.workshop_id.setEnabled(wallpaper["enabled"])
        self.workshop_link.setEnabled(wallpaper["enabled"])
        for w in (self.wallpaper_enabled, self.workshop_id, self.workshop_link):
            w.blockSignals(False)

    def _render_widget_lists(self) -> None:  # pragma: no cover - UI
        _clear_layout(self.widgets_layout)
        self._widget_lists = {}
        available = self.vm.session.available_widgets()
        for bar in self.vm.session.bars():
            bar_box = QGroupBox(bar.name)
            bar_layout = QHBoxLayout(bar_box)
            for pos in POSITIONS:
                bar_layout.addWidget(self._position_panel(bar.name, pos, bar.position(pos), available))
            self.widgets_layout.addWidget(bar_box)

    def _position_panel(
        self, bar_name: str, pos: str, widgets: List[str], available: List[str]
    ) -> QWidget:  # pragma: no cover - UI
        panel = QWidget()
        col = QVBoxLayout(panel)
        col.addWidget(QLabel(pos.capitalize()))
        lst = QListWidget()
        lst.addItems(widgets)
        self._widget_lists[(bar_name, pos)] = lst
        col.addWidget(lst)
        buttons = QHBoxLayout()
        for text, handler in (
            ("▲", self._on_move_up),
            ("▼", self._on_move_down),
            ("✕", self._on_remove),
        ):
            btn = QPushButton(text)
            btn.setFixedWidth(32)
            btn.clicked.connect(lambda _=False, b=bar_name, p=pos, h=handler: h(b, p))
            buttons.addWidget(btn)
        col.addLayout(buttons)
        add_row = QHBoxLayout()
        combo = QComboBox()
        combo.addItems(available)
        add_btn = QPushButton("+")
        add_btn.setFixedWidth(32)
        add_btn.clicked.connect(
            lambda _=False, b=bar_name, p=pos, c=combo: self.vm.add_widget(b, p, c.currentText())
        )
        add_row.addWidget(combo, 1)
        add_row.addWidget(add_btn)
        col.addLayout(add_row)
        return panel

    # Handlers ---------------------------------------------------------
    def _selected_index(self, bar_name: str, pos: str) -> Optional[int]:  # pragma: no cover - UI
        lst = self._widget_lists.get((bar_name, pos))
        if lst is None or lst.currentRow() < 0:
            return None
        return lst.currentRow()

    def _on_move_up(self, bar_name: str, pos: str) -> None:  # pragma: no cover - UI
        idx = self._selected_index(bar_name, pos)
        if idx is not None:
            self.vm.move_widget_up(bar_name, pos, idx)

    def _on_move_down(self, bar_name: str, pos: str) -> None:  # pragma: no cover - UI
        idx = self._selected_index(bar_name, pos)
        if idx is not None:
            self.vm.move_widget_down(bar_name, pos, idx)

    def _on_remove(self, bar_name: str, pos: str) -> None:  # pragma: no cover - UI
        idx = self._selected_index(bar_name, pos)
        if idx is None:
            return
        name = self._widget_lists[(bar_name, pos)].item(idx).text()
        answer = QMessageBox.question(
            self, "Remove widget", f'Remove "{name}" from {bar_name} ({pos})?'
        )
        if answer == QMessageBox.StandardButton.Yes:
            self.vm.remove_widget(bar_name, pos, idx)

    def _on_meta_edited(self) -> None:  # pragma: no cover - UI
        self.vm.set_meta(self.meta_name.text(), self.meta_version.text())

    def _on_color_edited(self, var: str, edit: QLineEdit) -> None:  # pragma: no cover - UI
        self.vm.set_root_variable(var, edit.text())

    def _on_wallpaper_edited(self, *_args) -> None:  # pragma: no cover - UI
        self.vm.set_wallpaper(
            self.workshop_link.text(), self.workshop_id.text(), self.wallpaper_enabled.isChecked()
        )

    def _on_theme_item_changed(self, current, _previous) -> None:  # pragma: no cover - UI
        if current is None:
            return
        name = current.data(Qt.ItemDataRole.UserRole)
        if name and name != self.vm.session.theme:
            self.vm.select_theme(name)

    def _on_sub_tab_changed(self, index: int) -> None:  # pragma: no cover - UI
        if index < 0:
            return
        sub = self.sub_tabs.tabText(index)
        if sub and sub != self.vm.session.sub:
            self.vm.select_sub(sub)

    def _on_save(self) -> None:  # pragma: no cover - UI
        if not self.vm.has_unsaved_changes:
            self.statusBar().showMessage("No changes to save", 3000)
            return
        self.vm.save()

    def _on_document_event(self, event: Event) -> None:  # pragma: no cover - UI
        self._render_editor()
        if event.name == GUIEvent.DOCUMENT_SAVED.value:
            self.statusBar().showMessage("Changes saved successfully!", 3000)
        elif event.name == GUIEvent.DOCUMENT_CHANGED.value:
            self.statusBar().showMessage("Unsaved changes")

    def _on_error(self, event: Event) -> None:  # pragma: no cover - UI
        payload = event.payload or {}
        self.statusBar().showMessage(f"Error: {payload.get('message', '')}", 5000)

    def _on_log_record(self, event: Event) -> None:  # pragma: no cover - UI
        payload = event.payload or {}
        if payload.get("level") in ("WARNING", "ERROR"):
            self.statusBar().showMessage(payload.get("message", ""), 5000)

    def closeEvent(self, event) -> None:  # pragma: no cover - UI
        if self.vm.has_unsaved_changes:
            answer = QMessageBox.question(
                self, "Unsaved changes", "Discard unsaved changes and close?"
            )
            if answer != QMessageBox.StandardButton.Yes:
                event.ignore()
                return
        bus = services.try_get("event_bus")
        if isinstance(bus, EventBus):
            for sub in self._subscriptions:
                bus.unsubscribe(sub)
        self._subscriptions = []
        super().closeEvent(event)
