from .detection import DetectionAdapter, TesseractTextDetector
from .geometry import NormalizedRect, PixelRect, from_pixel_rect, to_pixel_rect
from .mosaic import apply_mosaic
from .raster import RasterBuffer
from .regions import Intensity, Region, RegionStore, create_region
from .session import EditorSession

__version__ = "0.1.0"

__all__ = [
    "DetectionAdapter",
    "EditorSession",
    "Intensity",
    "NormalizedRect",
    "PixelRect",
    "RasterBuffer",
    "Region",
    "RegionStore",
    "TesseractTextDetector",
    "apply_mosaic",
    "create_region",
    "from_pixel_rect",
    "to_pixel_rect",
]
