"""End-to-end redaction over decoded pages (shared by CLI and API)."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..config import Settings, load_settings
from ..detection import DetectionAdapter, SensitiveTextDetector, TesseractTextDetector, TextDetector
from ..geometry import NormalizedRect
from ..io.loaders import PageRaster, load_rasters_from_bytes
from ..raster import RasterBuffer
from ..regions import Intensity, Region
from ..session import EditorSession
from .schemas import DetectionSummary, PageCandidates, PageRedaction, RedactionSummary, RegionRecord

LOGGER = logging.getLogger("mosaic_redact.pipeline")


@dataclass
class RedactionResult:
    """Summary plus one redacted raster per page."""
    summary: RedactionSummary
    outputs: List[RasterBuffer] = field(default_factory=list)

    def to_dict(self) -> dict:
        return self.summary.to_dict()


def build_detector(settings: Settings, *, sensitive_only: bool = False) -> TextDetector:
    detector: TextDetector = TesseractTextDetector(
        lang=settings.detection_lang,
        psm=settings.detection_psm,
        min_confidence=settings.detection_min_confidence,
    )
    if sensitive_only:
        rules_path = Path(settings.sensitive_rules_path) if settings.sensitive_rules_path else None
        detector = SensitiveTextDetector(detector, rules_path=rules_path)
    return detector


def build_adapter(
    settings: Settings,
    *,
    sensitive_only: bool = False,
    detector: Optional[TextDetector] = None,
) -> DetectionAdapter:
    return DetectionAdapter(
        detector if detector is not None else build_detector(settings, sensitive_only=sensitive_only),
        timeout=settings.detection_timeout,
        max_workers=settings.detection_max_workers,
    )


def _records(session: EditorSession) -> List[RegionRecord]:
    records = []
    for index, region in enumerate(session.regions):
        records.append(
            RegionRecord(
                index=index,
                region_id=session.store.region_id(index),
                rect=region.rect.to_dict(),
                intensity=region.intensity.name.lower(),
                block_size=region.intensity.block_size,
                active=region.active,
            )
        )
    return records


def _add(session: EditorSession, item: Union[Region, NormalizedRect]) -> Optional[int]:
    if isinstance(item, Region):
        return session.add_region(item)
    return session.add_selection(item)


def redact_pages(
    pages: Sequence[PageRaster],
    regions: Sequence[Union[Region, NormalizedRect]] = (),
    *,
    auto_detect: bool = False,
    sensitive_only: bool = False,
    settings: Optional[Settings] = None,
    detector: Optional[TextDetector] = None,
) -> RedactionResult:
    """Apply the same normalized regions (plus detected text) to every page."""
    settings = settings or load_settings()
    intensity = Intensity.parse(settings.intensity)
    adapter = build_adapter(settings, sensitive_only=sensitive_only, detector=detector) if auto_detect else None

    summary = RedactionSummary()
    outputs: List[RasterBuffer] = []
    try:
        for page in pages:
            session = EditorSession(
                page.raster,
                adapter=adapter,
                intensity=intensity,
                min_region_size=settings.min_region_size,
                dedupe_candidates=settings.dedupe_candidates,
                detection_timeout=settings.detection_timeout,
            )
            rejected = sum(1 for item in regions if _add(session, item) is None)
            detected = 0
            if adapter is not None:
                session.auto_detect()
                detected = len(session.wait_for_detection())
                if session.detection_pending:
                    LOGGER.warning("Page %s: detection still running; its candidates are not applied", page.page)
            LOGGER.info(
                "Page %s: %s regions (%s detected, %s rejected)",
                page.page, len(session.store), detected, rejected,
            )
            summary.pages.append(
                PageRedaction(
                    page=page.page,
                    width=page.width,
                    height=page.height,
                    regions=_records(session),
                    detected=detected,
                    rejected=rejected,
                )
            )
            outputs.append(session.derived)
    finally:
        if adapter is not None:
            adapter.shutdown(wait=False)
    return RedactionResult(summary=summary, outputs=outputs)


def redact_document_bytes(
    file_bytes: bytes,
    regions: Sequence[Union[Region, NormalizedRect]] = (),
    *,
    auto_detect: bool = False,
    sensitive_only: bool = False,
    settings: Optional[Settings] = None,
    detector: Optional[TextDetector] = None,
) -> RedactionResult:
    settings = settings or load_settings()
    pages = load_rasters_from_bytes(file_bytes, dpi=settings.dpi)
    return redact_pages(
        pages,
        regions,
        auto_detect=auto_detect,
        sensitive_only=sensitive_only,
        settings=settings,
        detector=detector,
    )


def detect_document_bytes(
    file_bytes: bytes,
    *,
    sensitive_only: bool = False,
    settings: Optional[Settings] = None,
    detector: Optional[TextDetector] = None,
) -> DetectionSummary:
    """Return candidate rects per page without redacting anything."""
    settings = settings or load_settings()
    pages = load_rasters_from_bytes(file_bytes, dpi=settings.dpi)
    summary = DetectionSummary()
    with build_adapter(settings, sensitive_only=sensitive_only, detector=detector) as adapter:
        for page in pages:
            rects = adapter.detect_sync(page.raster, key=page.page)
            summary.pages.append(
                PageCandidates(
                    page=page.page,
                    width=page.width,
                    height=page.height,
                    candidates=[r.to_dict() for r in rects],
                )
            )
    return summary
