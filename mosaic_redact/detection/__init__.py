"""Text-region detection (adapter + detectors)."""

from .adapter import DetectionAdapter, normalize_boxes
from .base import BOTTOM_LEFT, TOP_LEFT, TextBox, TextDetector
from .sensitive import SensitiveTextDetector
from .tesseract import TesseractTextDetector

__all__ = [
    "BOTTOM_LEFT",
    "TOP_LEFT",
    "DetectionAdapter",
    "SensitiveTextDetector",
    "TesseractTextDetector",
    "TextBox",
    "TextDetector",
    "normalize_boxes",
]
