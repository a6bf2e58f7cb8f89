"""IO helpers (loaders and writers)."""

from .loaders import PageRaster, load_rasters_from_bytes
from .writers import encode_png, write_image, write_json, write_jsonl

__all__ = [
    "PageRaster",
    "encode_png",
    "load_rasters_from_bytes",
    "write_image",
    "write_json",
    "write_jsonl",
]
