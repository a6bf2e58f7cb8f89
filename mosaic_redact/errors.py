"""Exception types shared across the redaction engine."""

from __future__ import annotations


class InvalidBufferError(ValueError):
    """Raster data is missing or does not match its declared dimensions."""


class DegenerateRegionError(ValueError):
    """A proposed region is below the minimum normalized size."""

    def __init__(self, width: float, height: float, min_size: float) -> None:
        super().__init__(
            f"Region {width:.4f}x{height:.4f} is below the minimum size {min_size} (normalized)"
        )
        self.width = width
        self.height = height
        self.min_size = min_size
