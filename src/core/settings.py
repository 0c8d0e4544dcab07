from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from PIL import Image


@dataclass
class EditorSettings:
    draw_color: tuple[int, int, int]
    stroke_width: int
    font_size: int
    font_candidates: list[str]
    grayscale_sample: int


@dataclass
class ExportSettings:
    jpeg_quality: int
    png_compress_level: int
    resample_method: int


@dataclass
class AppSettings:
    editor: EditorSettings
    export: ExportSettings


DEFAULT_SETTINGS = {
    "editor": {
        "draw_color": [255, 0, 0],
        "stroke_width": 3,
        "font_size": 24,
        "font_candidates": [
            "arialbd.ttf",
            "Arial Bold.ttf",
            "DejaVuSans-Bold.ttf",
            "LiberationSans-Bold.ttf",
        ],
        "grayscale_sample": 10,
    },
    "export": {
        "jpeg_quality": 90,
        "png_compress_level": 6,
        "resample_method": "LANCZOS",
    },
}


def load_settings(path: Path | None = None) -> AppSettings:
    base_path = path or Path(__file__).resolve().parents[1] / "config" / "settings.json"
    data = DEFAULT_SETTINGS
    if base_path.exists():
        try:
            with base_path.open("r", encoding="utf-8") as fh:
                file_data = json.load(fh)
                data = _merge_settings(DEFAULT_SETTINGS, file_data)
        except json.JSONDecodeError as exc:
            raise RuntimeError(f"Settings-Datei ungültig: {exc}") from exc

    editor = data["editor"]
    export = data["export"]

    draw_color = tuple(int(max(0, min(255, c))) for c in editor.get("draw_color", [255, 0, 0])[:3])
    if len(draw_color) != 3:
        draw_color = (255, 0, 0)

    editor_settings = EditorSettings(
        draw_color=draw_color,
        stroke_width=max(1, int(editor.get("stroke_width", 3))),
        font_size=max(1, int(editor.get("font_size", 24))),
        font_candidates=[str(name) for name in editor.get("font_candidates", [])],
        grayscale_sample=max(1, int(editor.get("grayscale_sample", 10))),
    )

    resample_attr = export.get("resample_method", "LANCZOS")
    resample_method = getattr(Image.Resampling, resample_attr, Image.Resampling.LANCZOS)

    export_settings = ExportSettings(
        jpeg_quality=int(max(1, min(95, int(export.get("jpeg_quality", 90))))),
        png_compress_level=int(max(0, min(9, int(export.get("png_compress_level", 6))))),
        resample_method=resample_method,
    )

    return AppSettings(editor=editor_settings, export=export_settings)


def _merge_settings(default: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for key, value in default.items():
        if key in overrides:
            if isinstance(value, dict) and isinstance(overrides[key], dict):
                merged[key] = _merge_settings(value, overrides[key])
            else:
                merged[key] = overrides[key]
        else:
            merged[key] = value
    # Include extra keys from overrides
    for key, value in overrides.items():
        if key not in merged:
            merged[key] = value
    return merged
