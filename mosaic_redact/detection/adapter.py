"""Asynchronous text-region detection producing region candidates.

The adapter runs a text detector on a worker thread and resolves a Future
once with normalized, top-left/y-down rectangles, the same convention as
``Region.rect``. Detector failures resolve to an empty list.

At most one request per image key is in flight. A second request while the
first is running gets the same Future back; a request older than
``timeout`` is abandoned and a fresh one is started.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from dataclasses import dataclass
from typing import Callable, Dict, Hashable, Iterable, List, Optional

from PIL import Image

from ..geometry import NormalizedRect, clip_unit_box, flip_vertical
from ..raster import RasterBuffer
from .base import BOTTOM_LEFT, TOP_LEFT, TextBox, TextDetector
from .tesseract import TesseractTextDetector

LOGGER = logging.getLogger("mosaic_redact.detection")


def _as_pil(image) -> Image.Image:
    if isinstance(image, RasterBuffer):
        if image.is_empty:
            raise ValueError("Cannot detect text in an empty raster")
        return image.to_pil()
    if isinstance(image, Image.Image):
        return image
    raise TypeError(f"Unsupported image type: {type(image).__name__}")


def normalize_boxes(boxes: Iterable[TextBox], origin: str = TOP_LEFT) -> List[NormalizedRect]:
    """Convert detector boxes to top-left normalized rects, clipped to the image."""
    if origin not in (TOP_LEFT, BOTTOM_LEFT):
        raise ValueError(f"Unknown detector origin: {origin!r}")
    rects: List[NormalizedRect] = []
    for box in boxes:
        values = (box.x, box.y, box.width, box.height)
        if not all(math.isfinite(v) for v in values):
            continue
        if box.width <= 0 or box.height <= 0:
            continue
        rect = flip_vertical(*values) if origin == BOTTOM_LEFT else clip_unit_box(*values)
        if rect.width > 0 and rect.height > 0:
            rects.append(rect)
    return rects


@dataclass
class _Pending:
    future: Future
    started: float


class DetectionAdapter:
    def __init__(
        self,
        detector: Optional[TextDetector] = None,
        *,
        timeout: float = 30.0,
        max_workers: int = 2,
        executor: Optional[ThreadPoolExecutor] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.detector = detector if detector is not None else TesseractTextDetector()
        self.timeout = timeout
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="mosaic-detect"
        )
        self._clock = clock
        self._lock = threading.Lock()
        self._pending: Dict[Hashable, _Pending] = {}

    def detect_candidate_regions(self, image, key: Optional[Hashable] = None) -> "Future[List[NormalizedRect]]":
        """Submit detection for ``image``; the Future never raises."""
        key = id(image) if key is None else key
        with self._lock:
            current = self._pending.get(key)
            if current is not None and not current.future.done():
                age = self._clock() - current.started
                if age < self.timeout:
                    LOGGER.debug("Detection for %r already in flight; reusing request", key)
                    return current.future
                LOGGER.warning("Abandoning detection for %r after %.1fs", key, age)
            future = self._executor.submit(self._run, image)
            entry = _Pending(future=future, started=self._clock())
            self._pending[key] = entry
        future.add_done_callback(lambda _f: self._release(key, entry))
        return future

    def detect_sync(self, image, *, key: Optional[Hashable] = None, timeout: Optional[float] = None) -> List[NormalizedRect]:
        """Blocking helper; resolves to [] if detection does not finish in time."""
        future = self.detect_candidate_regions(image, key=key)
        wait = self.timeout if timeout is None else timeout
        try:
            return future.result(timeout=wait)
        except FuturesTimeout:
            LOGGER.warning("Text detection timed out after %.1fs", wait)
            return []

    def in_flight(self, key: Hashable) -> bool:
        with self._lock:
            current = self._pending.get(key)
            return current is not None and not current.future.done()

    def _release(self, key: Hashable, entry: _Pending) -> None:
        with self._lock:
            if self._pending.get(key) is entry:
                del self._pending[key]

    def _run(self, image) -> List[NormalizedRect]:
        try:
            pil = _as_pil(image)
            boxes = self.detector.detect(pil)
            rects = normalize_boxes(boxes, getattr(self.detector, "origin", TOP_LEFT))
        except Exception:
            LOGGER.exception("Text detection failed; returning no candidates")
            return []
        LOGGER.info("Detected %s text regions", len(rects))
        return rects

    def shutdown(self, wait: bool = True) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "DetectionAdapter":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown(wait=False)
