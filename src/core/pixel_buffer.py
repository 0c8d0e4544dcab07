from __future__ import annotations

import logging
from typing import Optional

from PIL import Image

logger = logging.getLogger(__name__)

SUPPORTED_MODES = {"RGBA", "RGB", "L"}


class InvalidBufferError(ValueError):
    pass


def is_valid(image: Optional[Image.Image]) -> bool:
    if image is None:
        return False
    width, height = image.size
    return width > 0 and height > 0


def ensure_valid(image: Optional[Image.Image]) -> Image.Image:
    if image is None:
        raise InvalidBufferError("Kein Bild vorhanden.")
    if not is_valid(image):
        width, height = image.size
        raise InvalidBufferError(f"Ungültige Bildgröße: {width}x{height}")
    return image


def deep_copy(image: Optional[Image.Image]) -> Optional[Image.Image]:
    """
    Return an independent copy of ``image`` or ``None`` if it has no pixels.

    Modes outside RGBA/RGB/L are normalized to RGBA so alpha stays
    representable for every later edit.
    """
    if image is None:
        return None
    if not is_valid(image):
        logger.warning("Kopie fehlgeschlagen: ungültige Bildgröße %sx%s", *image.size)
        return None
    if image.mode not in SUPPORTED_MODES:
        return image.convert("RGBA")
    return image.copy()


def require_copy(image: Optional[Image.Image]) -> Image.Image:
    copy = deep_copy(ensure_valid(image))
    if copy is None:  # pragma: no cover - ensure_valid already rejects this
        raise InvalidBufferError("Bild konnte nicht kopiert werden.")
    return copy


def same_pixels(a: Optional[Image.Image], b: Optional[Image.Image]) -> bool:
    if a is None or b is None:
        return a is b
    return a.mode == b.mode and a.size == b.size and a.tobytes() == b.tobytes()


__all__ = [
    "InvalidBufferError",
    "SUPPORTED_MODES",
    "deep_copy",
    "ensure_valid",
    "is_valid",
    "require_copy",
    "same_pixels",
]
