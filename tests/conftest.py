import io
import threading

import numpy as np
import pytest
from PIL import Image

from mosaic_redact.detection import TOP_LEFT
from mosaic_redact.raster import RasterBuffer


class StaticDetector:
    """Detector returning fixed boxes; optionally blocks until ``gate`` is set."""

    def __init__(self, boxes=(), origin=TOP_LEFT, gate=None, error=None):
        self.boxes = list(boxes)
        self.origin = origin
        self.gate = gate
        self.error = error
        self.calls = 0
        self.threads = []

    def detect(self, image):
        self.calls += 1
        self.threads.append(threading.current_thread())
        if self.gate is not None:
            self.gate.wait(5)
        if self.error is not None:
            raise self.error
        return list(self.boxes)


@pytest.fixture
def make_detector():
    return StaticDetector


@pytest.fixture
def random_raster():
    def _make(width=100, height=100, seed=0):
        rng = np.random.default_rng(seed)
        pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
        return RasterBuffer(width=width, height=height, pixels=pixels)

    return _make


@pytest.fixture
def png_bytes():
    def _make(size=(40, 30), color=(255, 255, 255)):
        image = Image.new("RGB", size, color)
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        return buf.getvalue()

    return _make
