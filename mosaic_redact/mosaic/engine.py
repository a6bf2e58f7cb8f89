"""Block-average pixelation over region rectangles.

`apply_mosaic` is the single entry point used by the session, CLI and API:
- copies the source raster (the caller's buffer is never touched),
- maps each active region to a clamped pixel rectangle,
- replaces every block of that rectangle with its mean colour.

Regions are applied in store order and overlapping regions compound: a
later region averages pixels an earlier one already flattened. Always derive
from the original raster; feeding an output back in degrades it further.
"""

#=== Imports =============================================================
from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from ..geometry import PixelRect, clamp_pixel_rect, to_pixel_rect, to_row_slice
from ..raster import RasterBuffer
from ..regions import Region

LOGGER = logging.getLogger("mosaic_redact.mosaic")

#=== Helpers =============================================================

def block_mean(block: np.ndarray) -> Optional[np.ndarray]:
    """Per-channel mean of an (h, w, 4) block, rounded half up.

    Premultiplied samples are averaged as-is. Returns None for empty blocks.
    """
    count = block.shape[0] * block.shape[1]
    if count == 0:
        return None
    totals = block.reshape(-1, block.shape[2]).sum(axis=0, dtype=np.int64)
    return ((totals + count // 2) // count).astype(np.uint8)


def pixelate_rect(buffer: RasterBuffer, rect: PixelRect, block_size: int) -> int:
    """Pixelate a bottom-left pixel rect of ``buffer`` in place.

    Blocks are anchored at the rect's bottom-left corner; the last row and
    column are clipped to the rect. Returns the number of blocks written.
    """
    if block_size <= 0:
        raise ValueError(f"block_size must be positive, got {block_size}")
    rect = clamp_pixel_rect(rect, buffer.width, buffer.height)
    if rect.is_empty:
        return 0

    pixels = buffer.pixels
    written = 0
    for by in range(rect.y, rect.y1, block_size):
        block_h = min(block_size, rect.y1 - by)
        rows = to_row_slice(PixelRect(x=rect.x, y=by, width=rect.width, height=block_h), buffer.height)
        for bx in range(rect.x, rect.x1, block_size):
            block_w = min(block_size, rect.x1 - bx)
            block = pixels[rows, bx : bx + block_w]
            mean = block_mean(block)
            if mean is None:
                continue
            block[...] = mean
            written += 1
    return written

#=== Public API ===================================================================

def apply_mosaic(source: Optional[RasterBuffer], regions: Iterable[Region]) -> Optional[RasterBuffer]:
    """Return a pixelated copy of ``source``, or None for an unusable buffer."""
    if source is None or source.pixels is None or source.is_empty:
        LOGGER.warning("apply_mosaic: source raster is missing or empty")
        return None

    output = source.copy()
    for region in regions:
        if not region.active:
            continue
        rect = to_pixel_rect(region.rect, output.width, output.height)
        blocks = pixelate_rect(output, rect, region.intensity.block_size)
        LOGGER.debug("Pixelated %s blocks for region %s", blocks, region.rect.as_tuple())
    return output
