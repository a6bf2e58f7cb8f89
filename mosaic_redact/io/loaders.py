"""Decode PDFs and images into raster buffers (bytes -> page rasters)."""

from __future__ import annotations

import io
from dataclasses import dataclass
from typing import List

from pdf2image import convert_from_bytes
from PIL import Image, UnidentifiedImageError

from ..raster import RasterBuffer


@dataclass
class PageRaster:
    page: int
    raster: RasterBuffer

    @property
    def width(self) -> int:
        return self.raster.width

    @property
    def height(self) -> int:
        return self.raster.height


def load_rasters_from_bytes(file_bytes: bytes, *, dpi: int = 300) -> List[PageRaster]:
    """Load one raster per PDF page, or a single raster for image bytes."""
    if not file_bytes:
        raise ValueError("Empty payload")
    if file_bytes[:4] == b"%PDF":
        pages = convert_from_bytes(file_bytes, dpi=dpi)
        if not pages:
            raise ValueError("Empty PDF")
        return [
            PageRaster(page=idx, raster=RasterBuffer.from_pil(page))
            for idx, page in enumerate(pages, start=1)
        ]

    try:
        im = Image.open(io.BytesIO(file_bytes))
        im.load()
    except UnidentifiedImageError as exc:
        raise ValueError("Payload is not a supported image") from exc
    return [PageRaster(page=1, raster=RasterBuffer.from_pil(im))]
