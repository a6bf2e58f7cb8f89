"""Pixelation engine."""

from .engine import apply_mosaic, block_mean, pixelate_rect

__all__ = ["apply_mosaic", "block_mean", "pixelate_rect"]
