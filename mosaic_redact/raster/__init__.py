"""Raster buffers (RGBA8, premultiplied alpha)."""

from .buffer import BYTES_PER_PIXEL, RasterBuffer

__all__ = ["BYTES_PER_PIXEL", "RasterBuffer"]
