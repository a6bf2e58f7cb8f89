"""Ordered, index-addressed collection of redaction regions.

Position in the store is a region's identity for callers driven by a UI.
Each entry also carries a monotonically increasing ``region_id`` that
survives removals of other entries, for callers that need a stable handle.

The store does no locking; serialize mutations externally.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Tuple, TypeVar

from ..geometry import NormalizedRect
from .model import Intensity, Region

V = TypeVar("V")


def shift_index_keyed(mapping: Dict[int, V], removed_index: int) -> Dict[int, V]:
    """Re-key an index-keyed mapping after ``remove(removed_index)``.

    Keys below the removed index are kept, keys above move down by one and
    the removed key is dropped.
    """
    out: Dict[int, V] = {}
    for key, value in mapping.items():
        if key < removed_index:
            out[key] = value
        elif key > removed_index:
            out[key - 1] = value
    return out


class RegionStore:
    def __init__(self, regions: Optional[Iterable[Region]] = None) -> None:
        self._regions: List[Region] = []
        self._ids: List[int] = []
        self._next_id = 1
        self.revision = 0
        for region in regions or ():
            self._append(region)

    def _append(self, region: Region) -> int:
        region_id = self._next_id
        self._next_id += 1
        self._regions.append(region)
        self._ids.append(region_id)
        return region_id

    def _in_bounds(self, index: int) -> bool:
        return 0 <= index < len(self._regions)

    # --- mutation -----------------------------------------------------------

    def add(self, rect: NormalizedRect, intensity: Intensity = Intensity.STRONG) -> int:
        """Append a new active region and return its id."""
        region_id = self._append(Region(rect=rect, intensity=intensity))
        self.revision += 1
        return region_id

    def add_region(self, region: Region) -> int:
        region_id = self._append(region)
        self.revision += 1
        return region_id

    def toggle(self, index: int) -> bool:
        if not self._in_bounds(index):
            return False
        self._regions[index] = self._regions[index].toggled()
        self.revision += 1
        return True

    def remove(self, index: int) -> bool:
        if not self._in_bounds(index):
            return False
        del self._regions[index]
        del self._ids[index]
        self.revision += 1
        return True

    def remove_many(self, indices: Iterable[int]) -> int:
        """Remove by original indices (highest first); returns the count removed."""
        removed = 0
        for index in sorted(set(indices), reverse=True):
            if self.remove(index):
                removed += 1
        return removed

    def clear_all(self) -> None:
        self._regions.clear()
        self._ids.clear()
        self.revision += 1

    # --- reads --------------------------------------------------------------

    def snapshot(self) -> Tuple[Region, ...]:
        return tuple(self._regions)

    def region_id(self, index: int) -> Optional[int]:
        return self._ids[index] if self._in_bounds(index) else None

    def index_of(self, region_id: int) -> Optional[int]:
        try:
            return self._ids.index(region_id)
        except ValueError:
            return None

    def active_regions(self) -> List[Region]:
        return [r for r in self._regions if r.active]

    def contains_rect(self, rect: NormalizedRect) -> bool:
        return any(r.rect == rect for r in self._regions)

    def __len__(self) -> int:
        return len(self._regions)

    def __iter__(self) -> Iterator[Region]:
        return iter(tuple(self._regions))

    def __getitem__(self, index: int) -> Region:
        return self._regions[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegionStore):
            return NotImplemented
        return self._regions == other._regions

    def __repr__(self) -> str:
        return f"RegionStore(regions={self._regions!r}, revision={self.revision})"
