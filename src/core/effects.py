from __future__ import annotations

import logging
from functools import lru_cache
from typing import Iterable, Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from .geometry import Point, Rect
from .pixel_buffer import ensure_valid

logger = logging.getLogger(__name__)

Color = tuple[int, int, int]

DEFAULT_FONT_SIZE = 24
DEFAULT_FONT_CANDIDATES = (
    "arialbd.ttf",
    "Arial Bold.ttf",
    "DejaVuSans-Bold.ttf",
    "LiberationSans-Bold.ttf",
)
GRAYSCALE_SAMPLE = 10


class DegenerateSelectionError(ValueError):
    pass


def brightness_params(factor: float) -> tuple[float, float]:
    """Scale and offset for a brightness factor in [-1, 1]."""
    factor = float(max(-1.0, min(1.0, factor)))
    scale = 1.0 + factor
    # darkening shifts twice as hard per unit as brightening
    offset = factor * 25.0 if factor > 0 else factor * 50.0
    return scale, offset


def apply_brightness(image: Image.Image, factor: float) -> Image.Image:
    """
    Rescale the color channels of ``image`` in place.

    Every channel value becomes ``clamp(v * (1 + factor) + offset, 0, 255)``,
    alpha is copied through untouched. Returns the same image object.
    """
    ensure_valid(image)
    if image.mode not in ("RGBA", "RGB", "L"):
        raise ValueError(f"Nicht unterstützter Bildmodus: {image.mode}")

    scale, offset = brightness_params(factor)
    arr = np.asarray(image, dtype=np.float32)
    out = np.clip(arr * scale + offset, 0.0, 255.0)
    if image.mode == "RGBA":
        out[..., 3] = arr[..., 3]
    image.paste(Image.fromarray(out.astype(np.uint8)))
    return image


def to_grayscale(image: Image.Image) -> Image.Image:
    ensure_valid(image)
    return image.convert("L")


def is_effectively_grayscale(image: Image.Image, sample: int = GRAYSCALE_SAMPLE) -> bool:
    """
    Heuristic check on the top-left ``sample`` x ``sample`` block only.

    A color pixel outside that corner is not seen, so a mostly gray image with
    color elsewhere reports True.
    """
    if image is None:
        return False
    if image.mode == "L":
        return True
    width, height = image.size
    if width <= 0 or height <= 0:
        return False
    block = image.crop((0, 0, min(sample, width), min(sample, height))).convert("RGB")
    arr = np.asarray(block)
    red, green, blue = arr[..., 0], arr[..., 1], arr[..., 2]
    return bool(np.all(red == green) and np.all(green == blue))


def clamp_rect(rect: Rect, size: tuple[int, int]) -> Rect:
    """Move the origin to >= 0 and shrink the extent to stay inside ``size``."""
    width, height = size
    x = max(0, rect.x)
    y = max(0, rect.y)
    crop_w = rect.width
    crop_h = rect.height
    if x + crop_w > width:
        crop_w = width - x
    if y + crop_h > height:
        crop_h = height - y
    return Rect(x, y, crop_w, crop_h)


def crop(image: Image.Image, rect: Rect) -> Image.Image:
    ensure_valid(image)
    clamped = clamp_rect(rect, image.size)
    if clamped.is_empty:
        raise DegenerateSelectionError(
            f"Ungültiger Auswahlbereich: {clamped.width}x{clamped.height}"
        )
    # Image.crop allocates new storage
    return image.crop(clamped.box)


def _ink(image: Image.Image, color: Sequence[int]):
    rgb = tuple(int(c) for c in color[:3])
    if image.mode == "L":
        # same weights as Image.convert("L")
        return int(round(rgb[0] * 299 / 1000 + rgb[1] * 587 / 1000 + rgb[2] * 114 / 1000))
    if image.mode == "RGBA":
        return rgb + (255,)
    return rgb


def draw_line(image: Image.Image, start: Point, end: Point, color: Color, width: int = 3) -> Image.Image:
    ensure_valid(image)
    draw = ImageDraw.Draw(image)
    draw.line([tuple(start), tuple(end)], fill=_ink(image, color), width=max(1, int(width)))
    return image


@lru_cache(maxsize=16)
def load_font(size: int = DEFAULT_FONT_SIZE, candidates: tuple[str, ...] = DEFAULT_FONT_CANDIDATES):
    for name in candidates:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    logger.debug("Keine der Schriften %s gefunden, verwende Standardschrift", candidates)
    return ImageFont.load_default(size=size)


def draw_text(
    image: Image.Image,
    origin: Point,
    text: str,
    color: Color,
    font_size: int = DEFAULT_FONT_SIZE,
    font_candidates: Iterable[str] = DEFAULT_FONT_CANDIDATES,
) -> bool:
    """
    Render ``text`` with its baseline starting at ``origin``.

    Glyph edges are antialiased. Returns False without touching the image when
    the text is blank.
    """
    ensure_valid(image)
    if not text or not text.strip():
        return False
    font = load_font(int(font_size), tuple(font_candidates))
    draw = ImageDraw.Draw(image)
    draw.fontmode = "L"
    draw.text(tuple(origin), text, fill=_ink(image, color), font=font, anchor="ls")
    return True
