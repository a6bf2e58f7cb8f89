"""Canonical output schemas for CLI and API results."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List


@dataclass
class RegionRecord:
    index: int
    region_id: int
    rect: Dict[str, float]
    intensity: str
    block_size: int
    active: bool


@dataclass
class PageRedaction:
    page: int
    width: int
    height: int
    regions: List[RegionRecord] = field(default_factory=list)
    detected: int = 0
    rejected: int = 0


@dataclass
class PageCandidates:
    page: int
    width: int
    height: int
    candidates: List[Dict[str, float]] = field(default_factory=list)


@dataclass
class RedactionSummary:
    pages: List[PageRedaction] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class DetectionSummary:
    pages: List[PageCandidates] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)
