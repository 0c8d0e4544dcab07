from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QComboBox, QDialog, QDialogButtonBox, QFormLayout, QLineEdit

from ...core.interfaces import TextColor, TextPrompt


class TextPromptDialog(QDialog):
    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Text einfügen")
        self._text_input = QLineEdit()
        self._text_input.setMinimumWidth(240)
        self._color_input = QComboBox()
        for color in TextColor:
            self._color_input.addItem(color.label, color)

        layout = QFormLayout(self)
        layout.addRow("Text", self._text_input)
        layout.addRow("Farbe", self._color_input)

        buttons = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel)
        buttons.accepted.connect(self._on_accept)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

        self.result_prompt: TextPrompt | None = None

    def _on_accept(self) -> None:
        self.result_prompt = TextPrompt(
            text=self._text_input.text(),
            color=self._color_input.currentData(),
        )
        self.accept()


class DialogPromptService:
    """Prompt service backed by a modal TextPromptDialog."""

    def __init__(self, parent=None) -> None:
        self.parent = parent

    def prompt_text_and_color(self) -> Optional[TextPrompt]:
        dialog = TextPromptDialog(self.parent)
        if dialog.exec() != QDialog.DialogCode.Accepted:
            return None
        return dialog.result_prompt
