from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from PySide6.QtCore import Qt, QSize, QTimer
from PySide6.QtGui import QAction, QDragEnterEvent, QDropEvent
from PySide6.QtWidgets import (
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QSlider,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)
import qtawesome as qta

from ..core.editor_session import EditMode, EditorSession, EditorSessionError, NoBackupAvailableError
from ..core.image_io import SUPPORTED_EXTENSIONS, ImageIOError
from ..core.pixel_buffer import InvalidBufferError
from ..core.settings import AppSettings
from ..core.undo_stack import NothingToUndoError
from .controllers.brightness_controller import BrightnessController
from .dialogs.text_prompt_dialog import DialogPromptService
from .views.editor_canvas import CanvasDisplay, EditorCanvas

SAVE_FILTERS = {
    "PNG-Bild (*.png)": "png",
    "JPEG-Bild (*.jpg)": "jpg",
}


class MainWindow(QMainWindow):
    """
    Application shell: toolbar, canvas and status bar around one EditorSession.
    """

    def __init__(self, settings: AppSettings, initial_path: Path | None = None) -> None:
        super().__init__()
        self.logger = logging.getLogger(self.__class__.__name__)
        self.settings = settings
        self._initial_path = initial_path

        self.canvas = EditorCanvas()
        self.session = EditorSession(
            settings,
            display=CanvasDisplay(self.canvas),
            prompt=DialogPromptService(self),
        )

        self.setWindowTitle("MiniPhoto - Bildeditor")
        self.resize(800, 600)
        self.setAcceptDrops(True)

        self._create_actions()
        self._create_menus()
        self._create_ui()

    # --- UI creation helpers -------------------------------------------------
    def _create_actions(self) -> None:
        self.open_action = QAction("Bild öffnen …", self)
        self.open_action.setShortcut("Ctrl+O")
        self.open_action.triggered.connect(self.open_image_dialog)

        self.save_action = QAction("Speichern unter …", self)
        self.save_action.setShortcut("Ctrl+S")
        self.save_action.triggered.connect(self.save_image_dialog)
        self.save_action.setEnabled(False)

        self.undo_action = QAction("Rückgängig", self)
        self.undo_action.setShortcut("Ctrl+Z")
        self.undo_action.triggered.connect(self.undo_change)
        self.undo_action.setEnabled(False)

        self.exit_action = QAction("Beenden", self)
        self.exit_action.setShortcut("Ctrl+Q")
        self.exit_action.triggered.connect(self.close)

    def _create_menus(self) -> None:
        file_menu = self.menuBar().addMenu("&Datei")
        file_menu.addAction(self.open_action)
        file_menu.addAction(self.save_action)
        file_menu.addSeparator()
        file_menu.addAction(self.exit_action)

        edit_menu = self.menuBar().addMenu("&Bearbeiten")
        edit_menu.addAction(self.undo_action)

    def _create_ui(self) -> None:
        self.btn_style_checkable = """
            QPushButton {
                background-color: #2196F3;
                color: white;
                border: none;
                border-radius: 4px;
                padding: 6px;
            }
            QPushButton:hover {
                background-color: #1976D2;
            }
            QPushButton:checked {
                background-color: #FF7043;
            }
            QPushButton:disabled {
                background-color: #9E9E9E;
                color: white;
            }
        """

        main_container = QWidget()
        main_layout = QVBoxLayout(main_container)
        main_layout.setContentsMargins(8, 8, 8, 0)
        main_layout.setSpacing(6)

        toolbar = QHBoxLayout()
        toolbar.setSpacing(6)
        self.edit_controls: list[QWidget] = []

        self.open_btn = self._add_tool_button(toolbar, "mdi6.folder-open", "Bild öffnen", self.open_image_dialog)
        self.save_btn = self._add_tool_button(toolbar, "mdi6.content-save", "Speichern unter", self.save_image_dialog)
        self.grayscale_btn = self._add_tool_button(
            toolbar, "mdi6.invert-colors", "Graustufen / Farbe", self.toggle_grayscale
        )
        self.crop_btn = self._add_tool_button(
            toolbar, "mdi6.crop", "Zuschneiden", lambda: self._select_mode(EditMode.CROPPING), checkable=True
        )
        self.undo_btn = self._add_tool_button(toolbar, "mdi6.undo", "Rückgängig", self.undo_change)
        self.draw_btn = self._add_tool_button(toolbar, "mdi6.draw", "Zeichnen", self._toggle_draw_mode, checkable=True)
        self.text_btn = self._add_tool_button(
            toolbar, "mdi6.format-text", "Text einfügen", lambda: self._select_mode(EditMode.TEXT_SELECTING), checkable=True
        )
        self.edit_controls = [self.save_btn, self.grayscale_btn, self.crop_btn, self.undo_btn, self.draw_btn, self.text_btn]

        self.brightness_label = QLabel()
        self.brightness_slider = QSlider(Qt.Horizontal)
        self.brightness_slider.setTickInterval(50)
        self.brightness_slider.setTickPosition(QSlider.TicksBelow)
        toolbar.addSpacing(12)
        toolbar.addWidget(self.brightness_label)
        toolbar.addWidget(self.brightness_slider, stretch=1)
        main_layout.addLayout(toolbar)

        self.canvas.pointer_pressed.connect(self._on_pointer_pressed)
        self.canvas.pointer_dragged.connect(self._on_pointer_dragged)
        self.canvas.pointer_released.connect(self._on_pointer_released)
        main_layout.addWidget(self.canvas, stretch=1)

        self.status_bar = QStatusBar()
        self.status_bar.showMessage("Bereit.")
        main_layout.addWidget(self.status_bar)
        self.setCentralWidget(main_container)

        self.brightness_controller = BrightnessController(
            self.session, self.brightness_slider, self.brightness_label, on_status=self._show_status
        )
        self._set_edit_controls_enabled(False)
        if self._initial_path:
            QTimer.singleShot(0, lambda: self._open_path(self._initial_path))

    def _add_tool_button(
        self,
        layout: QHBoxLayout,
        icon_name: str,
        tooltip: str,
        handler: Callable[[], None],
        checkable: bool = False,
    ) -> QPushButton:
        button = QPushButton()
        button.setIcon(qta.icon(icon_name, color="white"))
        button.setIconSize(QSize(22, 22))
        button.setFixedSize(38, 38)
        button.setToolTip(tooltip)
        button.setCheckable(checkable)
        button.setStyleSheet(self.btn_style_checkable)
        button.clicked.connect(lambda _checked=False: handler())
        layout.addWidget(button)
        return button

    # --- File handling -------------------------------------------------------
    def open_image_dialog(self) -> None:
        file_path, _ = QFileDialog.getOpenFileName(
            self,
            "Bild öffnen",
            str(Path.home()),
            "Bilder (*.png *.jpg *.jpeg *.bmp *.gif)",
        )
        if file_path:
            self._open_path(Path(file_path))

    def _open_path(self, path: Path) -> None:
        if not path.exists():
            self._show_error(f"Datei wurde nicht gefunden:\n{path}")
            return
        if path.suffix.lower() not in SUPPORTED_EXTENSIONS:
            self._show_error("Das Dateiformat wird derzeit nicht unterstützt.")
            return
        try:
            message = self.session.open_file(path)
        except (ImageIOError, InvalidBufferError) as exc:
            self.logger.exception("Fehler beim Laden von %s", path)
            self._show_error(str(exc))
            return
        self._set_edit_controls_enabled(True)
        self._sync_from_session()
        self._show_status(message)

    def save_image_dialog(self) -> None:
        if not self.session.has_image():
            self._show_error("Es gibt kein Bild zum Speichern.")
            return
        file_path, selected_filter = QFileDialog.getSaveFileName(
            self,
            "Speichern unter",
            str(Path.home()),
            ";;".join(SAVE_FILTERS),
        )
        if not file_path:
            return
        fmt = SAVE_FILTERS.get(selected_filter, "png")
        try:
            target = self.session.save_file(Path(file_path), fmt)
        except ImageIOError as exc:
            self.logger.exception("Fehler beim Speichern")
            self._show_error(str(exc))
            return
        self._show_status(f"Bild gespeichert: {target.name}")

    # --- Drag & drop events --------------------------------------------------
    def dragEnterEvent(self, event: QDragEnterEvent) -> None:
        urls = event.mimeData().urls()
        if any(Path(url.toLocalFile()).suffix.lower() in SUPPORTED_EXTENSIONS for url in urls):
            event.acceptProposedAction()
        else:
            event.ignore()

    def dropEvent(self, event: QDropEvent) -> None:
        for url in event.mimeData().urls():
            path = Path(url.toLocalFile())
            if path.suffix.lower() in SUPPORTED_EXTENSIONS:
                self._open_path(path)
                break
        event.acceptProposedAction()

    # --- Editing -------------------------------------------------------------
    def _select_mode(self, mode: EditMode) -> None:
        try:
            message = self.session.select_mode(mode)
        except EditorSessionError as exc:
            self._show_status(str(exc))
            self._sync_from_session()
            return
        self._sync_from_session()
        self._show_status(message)

    def _toggle_draw_mode(self) -> None:
        self._select_mode(EditMode.DRAWING if self.draw_btn.isChecked() else EditMode.IDLE)

    def toggle_grayscale(self) -> None:
        try:
            message = self.session.toggle_grayscale()
        except NoBackupAvailableError as exc:
            self.logger.warning("Graustufen-Umschaltung fehlgeschlagen: %s", exc)
            message = str(exc)
        except EditorSessionError as exc:
            message = str(exc)
        self._sync_from_session()
        self._show_status(message)

    def undo_change(self) -> None:
        try:
            message = self.session.undo()
        except NothingToUndoError as exc:
            message = str(exc)
        self._sync_from_session()
        self._show_status(message)

    def _on_pointer_pressed(self, x: int, y: int) -> None:
        self.session.pointer_down((x, y))
        self._sync_selection()

    def _on_pointer_dragged(self, x: int, y: int) -> None:
        self.session.pointer_drag((x, y))
        self._sync_selection()

    def _on_pointer_released(self, x: int, y: int) -> None:
        try:
            message = self.session.pointer_up((x, y))
        except (EditorSessionError, InvalidBufferError, OSError) as exc:
            self.logger.exception("Bearbeitung fehlgeschlagen")
            message = str(exc)
        self._sync_from_session()
        if message:
            self._show_status(message)

    # --- Sync helpers --------------------------------------------------------
    def _sync_selection(self) -> None:
        self.canvas.set_selection(self.session.selection, self.session.mode)

    def _sync_from_session(self) -> None:
        mode = self.session.mode
        self.crop_btn.setChecked(mode is EditMode.CROPPING)
        self.draw_btn.setChecked(mode is EditMode.DRAWING)
        self.text_btn.setChecked(mode is EditMode.TEXT_SELECTING)
        self.canvas.set_mode_cursor(mode)
        self._sync_selection()
        self.brightness_controller.sync()
        has_history = self.session.undo_stack.depth > 0
        self.undo_action.setEnabled(has_history)
        self.undo_btn.setEnabled(has_history)

    def _set_edit_controls_enabled(self, enabled: bool) -> None:
        for widget in self.edit_controls:
            widget.setEnabled(enabled)
        self.save_action.setEnabled(enabled)
        self.undo_action.setEnabled(enabled)
        self.brightness_controller.set_enabled(enabled)

    def _show_status(self, message: str) -> None:
        self.status_bar.showMessage(message)
        self.logger.debug("Status: %s", message)

    def _show_error(self, message: str) -> None:
        QMessageBox.critical(self, "Fehler", message)
        self.status_bar.showMessage(message, 5000)
