from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, Tuple

from PIL import Image


class TextColor(Enum):
    BLACK = ("Schwarz", (0, 0, 0))
    RED = ("Rot", (255, 0, 0))
    GREEN = ("Grün", (0, 255, 0))
    BLUE = ("Blau", (0, 0, 255))
    WHITE = ("Weiß", (255, 255, 255))

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return self.value[1]


@dataclass(frozen=True)
class TextPrompt:
    text: str
    color: TextColor = TextColor.BLACK


class Display(Protocol):
    """Surface that shows the edited buffer and reports its viewport size."""

    def show(self, image: Optional[Image.Image]) -> None: ...

    def viewport_size(self) -> Tuple[int, int]: ...


class PromptService(Protocol):
    def prompt_text_and_color(self) -> Optional[TextPrompt]:
        """Return the entered text and color, or None when cancelled."""
        ...
