from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .pixel_buffer import ensure_valid, InvalidBufferError

logger = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif"}
FORMAT_ALIASES = {"png": "png", "jpg": "jpg", "jpeg": "jpg"}


class ImageIOError(Exception):
    pass


class UnreadableFileError(ImageIOError):
    pass


class WriteError(ImageIOError):
    pass


class UnsupportedFormatError(ImageIOError):
    pass


@dataclass
class IOConfig:
    jpeg_quality: int = 90
    png_compress_level: int = 6


def flatten_on_white(image: Image.Image) -> Image.Image:
    """Composite any alpha onto a white background and drop the channel."""
    if image.mode in ("RGB", "L"):
        return image.copy()
    rgba = image.convert("RGBA")
    background = Image.new("RGB", rgba.size, (255, 255, 255))
    background.paste(rgba, mask=rgba.getchannel("A"))
    return background


def normalize_format(fmt: str) -> str:
    key = fmt.lower().lstrip(".")
    if key not in FORMAT_ALIASES:
        raise UnsupportedFormatError(f"Format wird nicht unterstützt: {fmt}")
    return FORMAT_ALIASES[key]


def target_path_for(path: Path, fmt: str) -> Path:
    """Append the format extension unless the path already carries it."""
    fmt = normalize_format(fmt)
    accepted = {".jpg", ".jpeg"} if fmt == "jpg" else {f".{fmt}"}
    if path.suffix.lower() in accepted:
        return path
    return path.with_name(path.name + f".{fmt}")


class ImageIOService:
    def __init__(self, config: IOConfig | None = None) -> None:
        self.config = config or IOConfig()

    def decode(self, path: Path) -> Image.Image:
        path = Path(path)
        try:
            with Image.open(path) as img:
                img.load()
                decoded = img.convert("RGBA")
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
            raise UnreadableFileError(f"Bild konnte nicht geladen werden: {exc}") from exc
        try:
            ensure_valid(decoded)
        except InvalidBufferError as exc:
            raise UnreadableFileError(str(exc)) from exc
        logger.debug("Bild dekodiert: %s (%sx%s)", path, *decoded.size)
        return decoded

    def encode(self, image: Image.Image, path: Path, fmt: str = "png") -> Path:
        fmt = normalize_format(fmt)
        try:
            ensure_valid(image)
        except InvalidBufferError as exc:
            raise UnsupportedFormatError(str(exc)) from exc

        target_path = target_path_for(Path(path), fmt)
        if fmt == "jpg":
            to_save = flatten_on_white(image)
            save_kwargs = dict(format="JPEG", quality=self.config.jpeg_quality)
        else:
            if image.mode not in ("RGBA", "RGB", "L"):
                raise UnsupportedFormatError(f"Bildmodus {image.mode} kann nicht als PNG gespeichert werden.")
            to_save = image
            save_kwargs = dict(format="PNG", compress_level=self.config.png_compress_level)

        try:
            to_save.save(target_path, **save_kwargs)
        except OSError as exc:
            raise WriteError(f"Fehler beim Speichern: {exc}") from exc
        logger.info("Bild gespeichert: %s", target_path)
        return target_path
