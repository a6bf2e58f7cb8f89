"""Coordinate mapping (normalized region space <-> pixel space)."""

from .mapper import (
    NormalizedRect,
    PixelRect,
    clamp_pixel_rect,
    clip_unit_box,
    flip_vertical,
    from_pixel_rect,
    normalize_box,
    to_pixel_rect,
    to_row_slice,
)

__all__ = [
    "NormalizedRect",
    "PixelRect",
    "clamp_pixel_rect",
    "clip_unit_box",
    "flip_vertical",
    "from_pixel_rect",
    "normalize_box",
    "to_pixel_rect",
    "to_row_slice",
]
