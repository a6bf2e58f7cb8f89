"""Region records and redaction strengths."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Dict

from ..errors import DegenerateRegionError
from ..geometry import NormalizedRect

# Interactive selections must be strictly larger than this on both axes.
MIN_REGION_SIZE = 0.02


class Intensity(Enum):
    """Redaction strength; the value is the block edge length in pixels."""

    STRONG = 20

    @property
    def block_size(self) -> int:
        return self.value

    @property
    def display_name(self) -> str:
        return self.name.title()

    @classmethod
    def parse(cls, value: "str | int | Intensity") -> "Intensity":
        """Resolve a name ("strong"), a block size (20) or a member."""
        if isinstance(value, Intensity):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown intensity: {value!r}") from None


def _parse_active(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        text = value.strip().lower()
        if text in {"true", "1", "yes", "on"}:
            return True
        if text in {"false", "0", "no", "off"}:
            return False
    raise ValueError(f"active must be a boolean, got {value!r}")


@dataclass(frozen=True)
class Region:
    rect: NormalizedRect
    intensity: Intensity = Intensity.STRONG
    active: bool = True

    def toggled(self) -> "Region":
        return replace(self, active=not self.active)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rect": self.rect.to_dict(),
            "intensity": self.intensity.name.lower(),
            "block_size": self.intensity.block_size,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Region":
        """Accept ``{"rect": ...}``, flat ``{"x", "y", ...}`` keys or ``[x, y, w, h]``."""
        if not isinstance(data, dict):
            return cls(rect=NormalizedRect.from_sequence(data))
        rect = data.get("rect", data)
        if isinstance(rect, dict):
            rect = NormalizedRect(
                x=rect["x"], y=rect["y"], width=rect["width"], height=rect["height"]
            )
        else:
            rect = NormalizedRect.from_sequence(rect)
        return cls(
            rect=rect,
            intensity=Intensity.parse(data.get("intensity", Intensity.STRONG)),
            active=_parse_active(data.get("active", True)),
        )


def create_region(
    rect: NormalizedRect,
    intensity: Intensity = Intensity.STRONG,
    *,
    min_size: float = MIN_REGION_SIZE,
) -> Region:
    """Build a region from an interactive selection, enforcing the size floor."""
    if rect.width <= min_size or rect.height <= min_size:
        raise DegenerateRegionError(rect.width, rect.height, min_size)
    return Region(rect=rect, intensity=intensity)
