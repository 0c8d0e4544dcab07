from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from PIL import Image

from . import effects
from .geometry import Point, Rect, to_image_space
from .image_io import ImageIOService, IOConfig
from .image_resize import fit_to_viewport
from .interfaces import Display, PromptService, TextColor
from .pixel_buffer import InvalidBufferError, deep_copy, ensure_valid, require_copy
from .settings import AppSettings, load_settings
from .undo_stack import UndoStack

BRIGHTNESS_MIN = -100
BRIGHTNESS_MAX = 100


class EditorSessionError(RuntimeError):
    pass


class NoBackupAvailableError(EditorSessionError):
    pass


class EditMode(Enum):
    IDLE = "idle"
    CROPPING = "cropping"
    DRAWING = "drawing"
    TEXT_SELECTING = "text_selecting"


@dataclass
class IdleState:
    mode = EditMode.IDLE


@dataclass
class CropState:
    anchor: Optional[Point] = None
    selection: Optional[Rect] = None

    mode = EditMode.CROPPING


@dataclass
class DrawState:
    last_point: Optional[Point] = None

    mode = EditMode.DRAWING

    @property
    def stroke_active(self) -> bool:
        return self.last_point is not None


@dataclass
class TextState:
    anchor: Optional[Point] = None
    selection: Optional[Rect] = None

    mode = EditMode.TEXT_SELECTING

    @property
    def defining_bounds(self) -> bool:
        return self.anchor is not None


ModeState = Union[IdleState, CropState, DrawState, TextState]

_STATE_FOR_MODE = {
    EditMode.IDLE: IdleState,
    EditMode.CROPPING: CropState,
    EditMode.DRAWING: DrawState,
    EditMode.TEXT_SELECTING: TextState,
}


class EditorSession:
    """
    Owns the edited image and drives every edit from abstract input events.

    Pointer events carry view coordinates; they are mapped onto the image via
    the display's viewport. Successful operations return a status message,
    failures restore the previous state before raising.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        display: Display | None = None,
        prompt: PromptService | None = None,
        io_service: ImageIOService | None = None,
    ) -> None:
        self.logger = logging.getLogger(self.__class__.__name__)
        self.settings = settings or load_settings()
        self.display = display
        self.prompt = prompt
        self.io_service = io_service or ImageIOService(
            IOConfig(
                jpeg_quality=self.settings.export.jpeg_quality,
                png_compress_level=self.settings.export.png_compress_level,
            )
        )
        self.undo_stack = UndoStack()
        self.current: Optional[Image.Image] = None
        self.brightness_base: Optional[Image.Image] = None
        self.grayscale_backup: Optional[Image.Image] = None
        self.preview: Optional[Image.Image] = None
        self.brightness_level: int = 0
        self.state: ModeState = IdleState()

    # --- State queries -------------------------------------------------------
    @property
    def mode(self) -> EditMode:
        return self.state.mode

    @property
    def selection(self) -> Optional[Rect]:
        if isinstance(self.state, (CropState, TextState)):
            return self.state.selection
        return None

    def has_image(self) -> bool:
        return self.current is not None

    def _require_image(self) -> Image.Image:
        if self.current is None:
            raise EditorSessionError("Kein Bild geladen.")
        return self.current

    def _show(self, image: Optional[Image.Image]) -> None:
        if self.display is not None:
            self.display.show(image)

    def _viewport_size(self) -> Optional[tuple[int, int]]:
        if self.display is None:
            return None
        return self.display.viewport_size()

    def _to_image_point(self, view_point: Point) -> Point:
        image_size = self.current.size if self.current is not None else None
        viewport = self._viewport_size() or image_size or (0, 0)
        return to_image_space(view_point, image_size, viewport)

    def _refresh_base(self, *, neutral: bool = True) -> None:
        self.brightness_base = deep_copy(self.current)
        self.preview = None
        if neutral:
            self.brightness_level = 0

    def _push_snapshot(self, image: Image.Image) -> None:
        # a failed push appends nothing, so there is nothing to roll back
        if not self.undo_stack.push(image):
            raise InvalidBufferError("Zustand vor der Bearbeitung konnte nicht gesichert werden.")

    # --- File handling -------------------------------------------------------
    def open_image(self, image: Image.Image) -> str:
        ensure_valid(image)
        fitted = fit_to_viewport(
            image,
            self._viewport_size(),
            resample_filter=self.settings.export.resample_method,
        )
        history = UndoStack()
        if not history.push(fitted):
            raise InvalidBufferError("Ausgangszustand konnte nicht gesichert werden.")
        self.current = fitted
        self.undo_stack = history
        self.grayscale_backup = deep_copy(fitted)
        self._refresh_base()
        self.state = IdleState()
        self._show(self.current)
        self.logger.info("Bild geöffnet: %sx%s (Quelle %sx%s)", *fitted.size, *image.size)
        return f"Bild geladen: {fitted.width}x{fitted.height}"

    def open_file(self, path: Path) -> str:
        path = Path(path)
        image = self.io_service.decode(path)
        self.open_image(image)
        return f"Bild geladen: {path.name}"

    def save_file(self, path: Path, fmt: str = "png") -> Path:
        image = self._require_image()
        return self.io_service.encode(image, Path(path), fmt)

    # --- Modes ---------------------------------------------------------------
    def select_mode(self, mode: EditMode) -> str:
        if mode is not EditMode.IDLE:
            self._require_image()
        previous = self.state
        if isinstance(previous, DrawState) and previous.stroke_active:
            self._refresh_base(neutral=False)
        self.state = _STATE_FOR_MODE[mode]()
        self.logger.debug("Modus gewechselt: %s -> %s", previous.mode.value, mode.value)

        if mode is EditMode.CROPPING:
            return "Zuschneiden: Bereich aufziehen, beim Loslassen wird zugeschnitten."
        if mode is EditMode.DRAWING:
            return "Zeichenmodus aktiv: auf dem Bild ziehen, um zu zeichnen."
        if mode is EditMode.TEXT_SELECTING:
            return "Textmodus: klicken oder Bereich aufziehen, um Text einzufügen."
        if isinstance(previous, DrawState):
            return "Zeichenmodus beendet."
        return "Bereit."

    # --- Pointer events ------------------------------------------------------
    def pointer_down(self, view_point: Point) -> None:
        if self.current is None:
            return
        point = self._to_image_point(view_point)
        state = self.state
        if isinstance(state, DrawState):
            # one snapshot per stroke; no stroke without it
            if not self.undo_stack.push(self.current):
                return
            state.last_point = point
        elif isinstance(state, (CropState, TextState)):
            state.anchor = point
            state.selection = Rect.at(point)

    def pointer_drag(self, view_point: Point) -> None:
        if self.current is None:
            return
        state = self.state
        if isinstance(state, DrawState):
            if state.last_point is None:
                return
            point = self._to_image_point(view_point)
            editor = self.settings.editor
            effects.draw_line(self.current, state.last_point, point, editor.draw_color, editor.stroke_width)
            state.last_point = point
            self._show(self.current)
        elif isinstance(state, (CropState, TextState)):
            if state.anchor is None:
                return
            state.selection = Rect.from_corners(state.anchor, self._to_image_point(view_point))

    def pointer_up(self, view_point: Point) -> Optional[str]:
        state = self.state
        if isinstance(state, DrawState):
            if not state.stroke_active:
                return None
            state.last_point = None
            self._refresh_base(neutral=False)
            self._show(self.current)
            return "Zeichnung abgeschlossen."
        if isinstance(state, CropState):
            if state.anchor is None or self.current is None:
                return None
            rect = Rect.from_corners(state.anchor, self._to_image_point(view_point))
            self.state = IdleState()
            return self.crop(rect)
        if isinstance(state, TextState):
            if state.anchor is None or self.current is None:
                return None
            anchor = state.anchor
            rect = Rect.from_corners(anchor, self._to_image_point(view_point))
            self.state = IdleState()
            origin = anchor if rect.is_empty else rect.top_left
            return self._prompt_and_insert_text(origin)
        return None

    # --- Edits ---------------------------------------------------------------
    def crop(self, rect: Rect) -> str:
        image = self._require_image()
        if effects.clamp_rect(rect, image.size).is_empty:
            self.logger.info("Zuschneiden abgebrochen, leere Auswahl %s", rect)
            return "Zuschneiden abgebrochen: ungültiger Auswahlbereich."

        self._push_snapshot(image)
        try:
            cropped = effects.crop(image, rect)
        except (effects.DegenerateSelectionError, InvalidBufferError):
            self.undo_stack.rollback()
            raise
        self.current = cropped
        self.grayscale_backup = deep_copy(cropped)
        self._refresh_base()
        self._show(self.current)
        self.logger.info("Zugeschnitten auf %sx%s", *cropped.size)
        return f"Bild auf {cropped.width}x{cropped.height} zugeschnitten."

    def _prompt_and_insert_text(self, origin: Point) -> str:
        if self.prompt is None:
            raise EditorSessionError("Kein Eingabedialog für Text verfügbar.")
        answer = self.prompt.prompt_text_and_color()
        if answer is None:
            return "Texteinfügen abgebrochen."
        return self.insert_text(origin, answer.text, answer.color)

    def insert_text(self, point: Point, text: str, color: TextColor | tuple[int, int, int] = TextColor.BLACK) -> str:
        image = self._require_image()
        if not text or not text.strip():
            return "Texteinfügen abgebrochen: kein Text eingegeben."
        rgb = color.rgb if isinstance(color, TextColor) else tuple(color)
        editor = self.settings.editor

        self._push_snapshot(image)
        try:
            effects.draw_text(image, point, text, rgb, editor.font_size, editor.font_candidates)
        except (OSError, ValueError):
            self.undo_stack.rollback()
            raise
        self._refresh_base()
        self._show(self.current)
        self.logger.info("Text eingefügt bei %s", point)
        return "Text eingefügt."

    def change_brightness(self, value: int, is_live: bool) -> Optional[str]:
        """
        Preview or commit a brightness slider value in [-100, 100].

        Both paths start from ``brightness_base`` so repeated adjustments never
        compound on a previous preview.
        """
        if self.current is None or self.brightness_base is None:
            return None
        value = int(max(BRIGHTNESS_MIN, min(BRIGHTNESS_MAX, value)))
        factor = value / 100.0

        if is_live:
            preview = require_copy(self.brightness_base)
            effects.apply_brightness(preview, factor)
            self.preview = preview
            self.brightness_level = value
            self._show(preview)
            return None

        self._push_snapshot(self.current)
        adjusted = deep_copy(self.brightness_base)
        if adjusted is None:
            self.undo_stack.rollback()
            raise InvalidBufferError("Helligkeitsbasis ist ungültig.")
        effects.apply_brightness(adjusted, factor)
        self.current = adjusted
        self._refresh_base(neutral=False)
        self.brightness_level = value
        self._show(self.current)
        self.logger.info("Helligkeit übernommen: %s", value)
        return f"Helligkeit angepasst: {value}"

    def toggle_grayscale(self) -> str:
        image = self._require_image()
        self._push_snapshot(image)

        if effects.is_effectively_grayscale(image, self.settings.editor.grayscale_sample):
            if self.grayscale_backup is None:
                self.undo_stack.rollback()
                raise NoBackupAvailableError("Keine Farbversion vorhanden, Umschalten nicht möglich.")
            self.current = require_copy(self.grayscale_backup)
            message = "Farbversion wiederhergestellt."
        else:
            self.grayscale_backup = deep_copy(image)
            self.current = effects.to_grayscale(image)
            message = "Graustufen angewendet."

        self._refresh_base()
        self._show(self.current)
        self.logger.info(message)
        return message

    def undo(self) -> str:
        rewinding_to_floor = self.undo_stack.depth == 1
        restored = self.undo_stack.undo(self.current)
        self.current = restored
        if not effects.is_effectively_grayscale(restored, self.settings.editor.grayscale_sample):
            self.grayscale_backup = deep_copy(restored)
        self._refresh_base()
        self.state = _STATE_FOR_MODE[self.mode]()
        self._show(self.current)
        if rewinding_to_floor:
            self.logger.info("Auf Ausgangszustand zurückgesetzt")
            return "Auf Ausgangszustand zurückgesetzt."
        self.logger.info("Rückgängig, verbleibende Schritte: %s", self.undo_stack.depth)
        return "Rückgängig gemacht."
