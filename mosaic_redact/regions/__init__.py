"""Region records and the ordered region store."""

from .model import MIN_REGION_SIZE, Intensity, Region, create_region
from .store import RegionStore, shift_index_keyed

__all__ = [
    "MIN_REGION_SIZE",
    "Intensity",
    "Region",
    "RegionStore",
    "create_region",
    "shift_index_keyed",
]
