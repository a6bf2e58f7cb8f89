"""Editing session: one original image, its regions and the derived image.

Every mutation runs under a single lock and re-derives the output from the
untouched original, so results never compound across edits. Detection
results are appended under the same lock, which serializes them with
interactive edits.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .detection import DetectionAdapter
from .errors import DegenerateRegionError, InvalidBufferError
from .geometry import NormalizedRect
from .mosaic import apply_mosaic
from .raster import RasterBuffer
from .regions import MIN_REGION_SIZE, Intensity, Region, RegionStore, create_region

LOGGER = logging.getLogger("mosaic_redact.session")


def _resolve(future: Future, value) -> None:
    if not future.done():
        future.set_result(value)


class EditorSession:
    def __init__(
        self,
        original: RasterBuffer,
        *,
        adapter: Optional[DetectionAdapter] = None,
        intensity: Intensity = Intensity.STRONG,
        min_region_size: float = MIN_REGION_SIZE,
        dedupe_candidates: bool = True,
        detection_timeout: float = 30.0,
    ) -> None:
        if original is None or original.is_empty:
            raise InvalidBufferError("Session needs a non-empty original raster")
        self.original = original
        self.store = RegionStore()
        self.intensity = intensity
        self.min_region_size = min_region_size
        self.dedupe_candidates = dedupe_candidates
        self.detection_timeout = detection_timeout
        self._adapter = adapter
        self._lock = threading.RLock()
        self._derived = original
        self._generation = 0
        self._detection_source: Optional[Future] = None
        self._detection: Optional[Future] = None

    # --- reads --------------------------------------------------------------

    @property
    def derived(self) -> RasterBuffer:
        with self._lock:
            return self._derived

    @property
    def regions(self) -> Tuple[Region, ...]:
        with self._lock:
            return self.store.snapshot()

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "width": self.original.width,
                "height": self.original.height,
                "intensity": self.intensity.name.lower(),
                "regions": [r.to_dict() for r in self.store],
            }

    # --- mutations ----------------------------------------------------------

    def _rederive(self) -> None:
        if len(self.store) == 0:
            self._derived = self.original
            return
        output = apply_mosaic(self.original, self.store.snapshot())
        self._derived = output if output is not None else self.original

    def add_selection(self, rect: NormalizedRect) -> Optional[int]:
        """Add a user-drawn region; returns its id, or None if too small."""
        return self.add_region(Region(rect=rect, intensity=self.intensity))

    def add_region(self, region: Region) -> Optional[int]:
        """Add a region keeping its intensity and active flag; None if too small."""
        try:
            checked = create_region(region.rect, region.intensity, min_size=self.min_region_size)
        except DegenerateRegionError as exc:
            LOGGER.info("Rejected selection: %s", exc)
            return None
        if not region.active:
            checked = checked.toggled()
        with self._lock:
            region_id = self.store.add_region(checked)
            if checked.active:
                self._rederive()
            return region_id

    def add_candidates(self, rects: Iterable[NormalizedRect]) -> List[int]:
        """Append detected rects (skipping exact duplicates when configured)."""
        with self._lock:
            ids: List[int] = []
            for rect in rects:
                if self.dedupe_candidates and self.store.contains_rect(rect):
                    continue
                ids.append(self.store.add(rect, self.intensity))
            if ids:
                self._rederive()
            return ids

    def toggle(self, index: int) -> bool:
        with self._lock:
            changed = self.store.toggle(index)
            if changed:
                self._rederive()
            return changed

    def remove(self, index: int) -> bool:
        with self._lock:
            changed = self.store.remove(index)
            if changed:
                self._rederive()
            return changed

    def clear_all(self) -> None:
        with self._lock:
            self.store.clear_all()
            # Results of detection requests issued before the clear are dropped.
            self._generation += 1
            self._rederive()

    def set_intensity(self, intensity: Intensity) -> None:
        """Intensity for regions added from now on; existing regions keep theirs."""
        with self._lock:
            self.intensity = Intensity.parse(intensity)

    # --- detection ----------------------------------------------------------

    def auto_detect(self) -> "Future[List[int]]":
        """Start detection; the Future resolves to the ids of appended regions."""
        if self._adapter is None:
            raise RuntimeError("No detection adapter configured for this session")
        with self._lock:
            source = self._adapter.detect_candidate_regions(self.original, key=id(self.original))
            if source is self._detection_source and self._detection is not None:
                return self._detection
            applied: Future = Future()
            generation = self._generation
            self._detection_source = source
            self._detection = applied
        source.add_done_callback(lambda f: self._apply_detection(f, applied, generation))
        return applied

    def _apply_detection(self, source: Future, applied: Future, generation: int) -> None:
        rects = [] if source.cancelled() else source.result()
        with self._lock:
            if generation != self._generation or source is not self._detection_source:
                LOGGER.info("Dropping stale detection result (%s candidates)", len(rects))
                _resolve(applied, [])
                return
            ids = self.add_candidates(rects)
        LOGGER.info("Added %s detected regions", len(ids))
        _resolve(applied, ids)

    @property
    def detection_pending(self) -> bool:
        """True while the adapter is still running detection for this image."""
        return self._adapter is not None and self._adapter.in_flight(id(self.original))

    def wait_for_detection(self, timeout: Optional[float] = None) -> List[int]:
        """Wait for the latest detection; [] when none is pending or on timeout."""
        with self._lock:
            future = self._detection
        if future is None:
            return []
        wait = self.detection_timeout if timeout is None else timeout
        try:
            return future.result(timeout=wait)
        except FuturesTimeout:
            LOGGER.warning("Detection did not finish within %.1fs", wait)
            return []
