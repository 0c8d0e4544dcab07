from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtWidgets import QLabel, QSlider

from ...core.editor_session import BRIGHTNESS_MAX, BRIGHTNESS_MIN, EditorSession


class BrightnessController:
    """
    Couples the brightness slider/label with the EditorSession so live preview
    and commit handling stay out of the MainWindow.
    """

    def __init__(
        self,
        session: EditorSession,
        slider: QSlider,
        label: QLabel,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> None:
        self.session = session
        self.slider = slider
        self.label = label
        self._on_status = on_status
        self.slider.setRange(BRIGHTNESS_MIN, BRIGHTNESS_MAX)
        self.slider.setValue(0)
        self.slider.valueChanged.connect(self._on_slider_value_changed)
        self.slider.sliderReleased.connect(self._on_slider_released)
        self._sync_label(self.slider.value())

    def _on_slider_value_changed(self, value: int) -> None:
        self._sync_label(value)
        # keyboard and click steps arrive without a drag and commit directly
        message = self.session.change_brightness(value, is_live=self.slider.isSliderDown())
        if message and self._on_status:
            self._on_status(message)

    def _on_slider_released(self) -> None:
        message = self.session.change_brightness(self.slider.value(), is_live=False)
        if message and self._on_status:
            self._on_status(message)

    def sync(self) -> None:
        """Move the slider to the session's level without emitting changes."""
        value = self.session.brightness_level
        self.slider.blockSignals(True)
        self.slider.setValue(value)
        self.slider.blockSignals(False)
        self._sync_label(value)

    def set_enabled(self, enabled: bool) -> None:
        self.slider.setEnabled(enabled)
        self.label.setEnabled(enabled)

    def _sync_label(self, slider_value: int) -> None:
        self.label.setText(f"Helligkeit: {slider_value}")
