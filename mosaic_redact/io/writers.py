"""Output writers (images, JSON)."""

from __future__ import annotations

import io
import json
from pathlib import Path
from typing import Any, Dict, Iterable

from ..raster import RasterBuffer


def encode_png(raster: RasterBuffer) -> bytes:
    buf = io.BytesIO()
    raster.to_pil().save(buf, format="PNG")
    return buf.getvalue()


def write_image(path: Path, raster: RasterBuffer) -> None:
    """Write a raster; the format follows the file suffix (alpha dropped for JPEG)."""
    path.parent.mkdir(parents=True, exist_ok=True)
    image = raster.to_pil()
    if path.suffix.lower() in {".jpg", ".jpeg"}:
        image = image.convert("RGB")
    image.save(path)


def write_json(path: Path, data: Any, *, indent: int = 2) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=indent))


def write_jsonl(path: Path, rows: Iterable[Dict[str, Any]]) -> int:
    """Write one JSON object per line; returns the number of rows written."""
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with path.open("w", encoding="utf-8") as fh:
        for row in rows:
            fh.write(json.dumps(row, ensure_ascii=False) + "\n")
            count += 1
    return count
