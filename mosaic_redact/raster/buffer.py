"""RGBA8 raster buffers with premultiplied alpha.

Pixels are held in a numpy ``uint8`` array of shape ``(height, width, 4)``
with the top row first. Colour channels are premultiplied by alpha, which is
the convention the pixelation engine averages over directly.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from PIL import Image

from ..errors import InvalidBufferError

BYTES_PER_PIXEL = 4


@dataclass(eq=False)
class RasterBuffer:
    width: int
    height: int
    pixels: np.ndarray

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise InvalidBufferError(f"Negative raster size {self.width}x{self.height}")
        if self.pixels is None:
            raise InvalidBufferError("Raster has no pixel data")
        expected = (self.height, self.width, BYTES_PER_PIXEL)
        if self.pixels.shape != expected:
            raise InvalidBufferError(f"Pixel array shape {self.pixels.shape} does not match {expected}")
        if self.pixels.dtype != np.uint8:
            raise InvalidBufferError(f"Pixel array must be uint8, got {self.pixels.dtype}")

    # --- constructors -------------------------------------------------------

    @classmethod
    def from_bytes(cls, width: int, height: int, data: bytes) -> "RasterBuffer":
        """Wrap ``width*height*4`` premultiplied RGBA bytes (copied)."""
        if len(data) != width * height * BYTES_PER_PIXEL:
            raise InvalidBufferError(
                f"Expected {width * height * BYTES_PER_PIXEL} bytes for {width}x{height}, got {len(data)}"
            )
        arr = np.frombuffer(data, dtype=np.uint8).reshape(height, width, BYTES_PER_PIXEL).copy()
        return cls(width=width, height=height, pixels=arr)

    @classmethod
    def from_pil(cls, image: Image.Image) -> "RasterBuffer":
        """Convert a PIL image to a premultiplied RGBA buffer."""
        rgba = np.array(image.convert("RGBA"), dtype=np.uint8)
        alpha = rgba[..., 3:4].astype(np.uint16)
        # Round half up when scaling colour by alpha.
        rgb = (rgba[..., :3].astype(np.uint16) * alpha + 127) // 255
        rgba[..., :3] = rgb.astype(np.uint8)
        height, width = rgba.shape[:2]
        return cls(width=width, height=height, pixels=rgba)

    @classmethod
    def solid(cls, width: int, height: int, color: tuple[int, int, int, int]) -> "RasterBuffer":
        """Build a uniform buffer; ``color`` is already premultiplied."""
        arr = np.empty((height, width, BYTES_PER_PIXEL), dtype=np.uint8)
        arr[...] = np.asarray(color, dtype=np.uint8)
        return cls(width=width, height=height, pixels=arr)

    # --- views --------------------------------------------------------------

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0 or self.pixels.size == 0

    def copy(self) -> "RasterBuffer":
        return RasterBuffer(width=self.width, height=self.height, pixels=self.pixels.copy())

    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def to_pil(self) -> Image.Image:
        """Return a straight-alpha RGBA PIL image."""
        rgba = self.pixels.astype(np.uint16)
        alpha = rgba[..., 3:4]
        safe_alpha = np.where(alpha == 0, 1, alpha)
        rgb = np.where(alpha == 0, 0, (rgba[..., :3] * 255 + safe_alpha // 2) // safe_alpha)
        out = np.empty_like(self.pixels)
        out[..., :3] = np.clip(rgb, 0, 255).astype(np.uint8)
        out[..., 3] = self.pixels[..., 3]
        return Image.fromarray(out)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RasterBuffer):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and np.array_equal(self.pixels, other.pixels)
        )
