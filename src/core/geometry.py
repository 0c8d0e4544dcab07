from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

Point = Tuple[int, int]
Size = Tuple[int, int]


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_corners(cls, start: Point, end: Point) -> "Rect":
        x = min(start[0], end[0])
        y = min(start[1], end[1])
        return cls(x, y, abs(start[0] - end[0]), abs(start[1] - end[1]))

    @classmethod
    def at(cls, point: Point) -> "Rect":
        return cls(point[0], point[1], 0, 0)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def top_left(self) -> Point:
        return (self.x, self.y)

    @property
    def box(self) -> tuple[int, int, int, int]:
        """Pillow style (left, top, right, bottom)."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)


def _centered_offset(viewport: int, extent: int) -> int:
    # truncate toward zero, also when the image is larger than the viewport
    return int((viewport - extent) / 2)


def to_image_space(view_point: Point, image_size: Optional[Size], viewport_size: Size) -> Point:
    """
    Map a point from view coordinates onto the image shown centered in the view.

    The result is clamped into ``[0, dimension - 1]`` on both axes. Without a
    displayed image the point is passed through unchanged.
    """
    if image_size is None:
        return view_point
    image_w, image_h = image_size
    if image_w <= 0 or image_h <= 0:
        return view_point

    offset_x = _centered_offset(viewport_size[0], image_w)
    offset_y = _centered_offset(viewport_size[1], image_h)
    x = view_point[0] - offset_x
    y = view_point[1] - offset_y
    x = max(0, min(x, image_w - 1))
    y = max(0, min(y, image_h - 1))
    return (x, y)


def to_view_space(image_rect: Rect, image_size: Size, viewport_size: Size) -> Rect:
    """Inverse offset of ``to_image_space`` for painting selections."""
    offset_x = _centered_offset(viewport_size[0], image_size[0])
    offset_y = _centered_offset(viewport_size[1], image_size[1])
    return Rect(image_rect.x + offset_x, image_rect.y + offset_y, image_rect.width, image_rect.height)
