from __future__ import annotations

from typing import Optional

from PySide6.QtCore import Qt, QRectF, Signal
from PySide6.QtGui import QBrush, QColor, QPainter, QPalette, QPen, QPixmap
from PySide6.QtWidgets import QSizePolicy, QWidget
from PIL import Image, ImageQt

from ...core.editor_session import EditMode
from ...core.geometry import Rect, to_view_space


class EditorCanvas(QWidget):
    """
    Paints the edited image unscaled and centered, plus the active selection.

    Pointer events leave the widget in view coordinates; mapping to image
    space is left to the session.
    """

    pointer_pressed = Signal(int, int)
    pointer_dragged = Signal(int, int)
    pointer_released = Signal(int, int)

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setObjectName("editorCanvas")
        self.setMinimumSize(200, 150)
        self._pixmap: Optional[QPixmap] = None
        self._image_size: Optional[tuple[int, int]] = None
        self._selection: Optional[Rect] = None
        self._selection_mode = EditMode.IDLE
        self._pressed = False

    def display_pil_image(self, image: Optional[Image.Image]) -> None:
        if image is None or image.width <= 0 or image.height <= 0:
            self._pixmap = None
            self._image_size = None
        else:
            self._pixmap = QPixmap.fromImage(ImageQt.ImageQt(image))
            self._image_size = image.size
        self.update()

    def viewport_size(self) -> tuple[int, int]:
        return (self.width(), self.height())

    # --- Overlay state -------------------------------------------------------
    def set_selection(self, rect: Optional[Rect], mode: EditMode) -> None:
        self._selection = rect
        self._selection_mode = mode
        self.update()

    def set_mode_cursor(self, mode: EditMode) -> None:
        if mode is EditMode.IDLE:
            self.unsetCursor()
        else:
            self.setCursor(Qt.CrossCursor)

    # --- Qt events -----------------------------------------------------------
    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.fillRect(self.rect(), self.palette().color(QPalette.Base))
        if not self._pixmap or not self._image_size:
            painter.setPen(self.palette().color(QPalette.Text))
            painter.drawText(self.rect(), Qt.AlignCenter, "Kein Bild geladen.")
            return

        placed = to_view_space(Rect(0, 0, *self._image_size), self._image_size, self.viewport_size())
        painter.drawPixmap(placed.x, placed.y, self._pixmap)
        self._draw_selection(painter)

    def _draw_selection(self, painter: QPainter) -> None:
        if self._selection is None or self._selection.is_empty or not self._image_size:
            return
        rect = to_view_space(self._selection, self._image_size, self.viewport_size())
        target = QRectF(rect.x, rect.y, rect.width, rect.height)
        if self._selection_mode is EditMode.CROPPING:
            painter.setPen(QPen(QColor(0, 0, 255), 1))
            painter.setBrush(QBrush(QColor(0, 0, 255, 100)))
        else:
            painter.setPen(QPen(QColor(255, 0, 0, 100), 1))
            painter.setBrush(Qt.NoBrush)
        painter.drawRect(target)

    def mousePressEvent(self, event) -> None:
        if event.button() != Qt.LeftButton:
            event.ignore()
            return
        self._pressed = True
        pos = event.position().toPoint()
        self.pointer_pressed.emit(pos.x(), pos.y())
        event.accept()

    def mouseMoveEvent(self, event) -> None:
        if not self._pressed:
            event.ignore()
            return
        pos = event.position().toPoint()
        self.pointer_dragged.emit(pos.x(), pos.y())
        event.accept()

    def mouseReleaseEvent(self, event) -> None:
        if event.button() != Qt.LeftButton or not self._pressed:
            event.ignore()
            return
        self._pressed = False
        pos = event.position().toPoint()
        self.pointer_released.emit(pos.x(), pos.y())
        event.accept()


class CanvasDisplay:
    """Display adapter handing session output to an EditorCanvas."""

    def __init__(self, canvas: EditorCanvas) -> None:
        self.canvas = canvas

    def show(self, image: Optional[Image.Image]) -> None:
        self.canvas.display_pil_image(image)

    def viewport_size(self) -> tuple[int, int]:
        return self.canvas.viewport_size()
