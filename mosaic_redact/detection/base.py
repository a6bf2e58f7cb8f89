"""Text detector contract."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Protocol

from PIL import Image

TOP_LEFT = "top-left"
BOTTOM_LEFT = "bottom-left"


@dataclass
class TextBox:
    """A text bounding box in the detector's normalized convention."""
    x: float
    y: float
    width: float
    height: float
    text: Optional[str] = None
    conf: Optional[float] = None


class TextDetector(Protocol):
    origin: str

    def detect(self, image: Image.Image) -> List[TextBox]:
        ...
