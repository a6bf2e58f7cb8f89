"""Coordinate mapping between region space and pixel space.

Regions are selected in normalized coordinates with a top-left origin and
y growing downward. Pixel rectangles handed to the pixelation engine use a
bottom-left origin, so the vertical axis is flipped on the way in. The raster
buffer itself stores rows top first; ``to_row_slice`` undoes the flip when
the engine indexes the array, which keeps a region exactly where it was
selected.

Rounding: every pixel edge is floored independently (after snapping float
noise to 9 decimals), and sizes are edge differences. Two rectangles that
share a normalized edge therefore share a pixel edge.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Tuple


def _check_unit(name: str, value: float) -> float:
    value = float(value)
    if not math.isfinite(value) or value < 0.0 or value > 1.0:
        raise ValueError(f"{name} must be within [0, 1], got {value!r}")
    return value


def _unit_clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


def _floor_edge(value: float) -> int:
    return math.floor(round(value, 9))


@dataclass(frozen=True)
class NormalizedRect:
    """Rectangle in [0,1] image-relative coordinates, top-left origin."""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        for name in ("x", "y", "width", "height"):
            object.__setattr__(self, name, _check_unit(name, getattr(self, name)))

    @classmethod
    def from_sequence(cls, values) -> "NormalizedRect":
        x, y, width, height = (float(v) for v in values)
        return cls(x=x, y=y, width=width, height=height)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


@dataclass(frozen=True)
class PixelRect:
    """Integer rectangle; the origin convention depends on the producer."""
    x: int
    y: int
    width: int
    height: int

    @property
    def x1(self) -> int:
        return self.x + self.width

    @property
    def y1(self) -> int:
        return self.y + self.height

    @property
    def area(self) -> int:
        return max(0, self.width) * max(0, self.height)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


def to_pixel_rect(rect: NormalizedRect, image_width: int, image_height: int) -> PixelRect:
    """Map a top-left normalized rect to a bottom-left pixel rect."""
    left = rect.x * image_width
    right = (rect.x + rect.width) * image_width
    bottom = (1.0 - rect.y - rect.height) * image_height
    top = bottom + rect.height * image_height

    x0, x1 = _floor_edge(left), _floor_edge(right)
    y0, y1 = _floor_edge(bottom), _floor_edge(top)
    return PixelRect(x=x0, y=y0, width=x1 - x0, height=y1 - y0)


def from_pixel_rect(rect: PixelRect, image_width: int, image_height: int) -> NormalizedRect:
    """Inverse of ``to_pixel_rect`` (exact up to the rounding rule)."""
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image size must be positive, got {image_width}x{image_height}")
    return NormalizedRect(
        x=_unit_clamp(rect.x / image_width),
        y=_unit_clamp(1.0 - rect.y1 / image_height),
        width=_unit_clamp(rect.width / image_width),
        height=_unit_clamp(rect.height / image_height),
    )


def clamp_pixel_rect(rect: PixelRect, image_width: int, image_height: int) -> PixelRect:
    """Clip a pixel rect to ``[0, width) x [0, height)``."""
    x0 = max(0, min(rect.x, image_width))
    x1 = max(0, min(rect.x1, image_width))
    y0 = max(0, min(rect.y, image_height))
    y1 = max(0, min(rect.y1, image_height))
    return PixelRect(x=x0, y=y0, width=max(0, x1 - x0), height=max(0, y1 - y0))


def to_row_slice(rect: PixelRect, image_height: int) -> slice:
    """Row range of a bottom-left pixel rect inside a top-row-first array."""
    return slice(image_height - rect.y1, image_height - rect.y)


def clip_unit_box(x: float, y: float, width: float, height: float) -> NormalizedRect:
    """Clip a top-left normalized box to the unit square; both edges of each axis are clamped."""
    x0, x1 = _unit_clamp(x), _unit_clamp(x + width)
    y0, y1 = _unit_clamp(y), _unit_clamp(y + height)
    return NormalizedRect(x=x0, y=y0, width=max(0.0, x1 - x0), height=max(0.0, y1 - y0))


def flip_vertical(x: float, y: float, width: float, height: float) -> NormalizedRect:
    """Convert a bottom-left normalized box into the top-left convention, clipped."""
    bottom, top = _unit_clamp(y), _unit_clamp(y + height)
    return clip_unit_box(x, 1.0 - top, width, top - bottom)


def normalize_box(
    left: float, top: float, width: float, height: float, image_width: int, image_height: int
) -> NormalizedRect:
    """Normalize a top-left pixel box, clipping it to the image."""
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image size must be positive, got {image_width}x{image_height}")
    x0 = _unit_clamp(left / image_width)
    y0 = _unit_clamp(top / image_height)
    x1 = _unit_clamp((left + width) / image_width)
    y1 = _unit_clamp((top + height) / image_height)
    return NormalizedRect(x=x0, y=y0, width=max(0.0, x1 - x0), height=max(0.0, y1 - y0))
