from __future__ import annotations

from PIL import Image


def fit_scale(image_size: tuple[int, int], viewport_size: tuple[int, int]) -> float:
    """Scale factor that fits the image into the viewport, never above 1.0."""
    src_width, src_height = image_size
    view_width, view_height = viewport_size
    if src_width <= 0 or src_height <= 0 or view_width <= 0 or view_height <= 0:
        return 1.0
    return min(1.0, view_width / src_width, view_height / src_height)


def fit_to_viewport(
    image: Image.Image,
    viewport_size: tuple[int, int] | None,
    *,
    resample_filter: int = Image.Resampling.LANCZOS,
) -> Image.Image:
    """
    Shrink image to fit the viewport while keeping its aspect ratio.

    Args:
        image: Source image
        viewport_size: Available (width, height); None or non-positive skips resizing
        resample_filter: PIL resampling filter (default: LANCZOS)

    Returns:
        A new RGBA image; the source is never upscaled.
    """
    src_width, src_height = image.size
    if src_width <= 0 or src_height <= 0:
        raise ValueError("Ungültige Bildquelle.")

    rgba = image.convert("RGBA") if image.mode != "RGBA" else image.copy()
    if viewport_size is None:
        return rgba

    scale = fit_scale(image.size, viewport_size)
    new_width = int(src_width * scale)
    new_height = int(src_height * scale)
    if new_width <= 0 or new_height <= 0 or (new_width, new_height) == (src_width, src_height):
        return rgba
    return rgba.resize((new_width, new_height), resample_filter)


__all__ = ["fit_scale", "fit_to_viewport"]
