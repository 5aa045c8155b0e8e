from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .field_segment import FieldSegment, GeoPolygon, Orientation


@dataclass(frozen=True, slots=True)
class LayoutParameters:
    """Snapshot of the segment fields that drive the packer.

    Spacings and setback are in feet; ``azimuth`` is a compass bearing or
    ``None`` to align rows with the boundary's longest edge.
    """

    orientation: Orientation = "portrait"
    row_spacing: float = 0.0
    module_spacing: float = 0.0
    setback: float = 0.0
    azimuth: Optional[float] = None

    @classmethod
    def from_segment(cls, segment: FieldSegment) -> LayoutParameters:
        return cls(
            orientation=segment.orientation,
            row_spacing=segment.row_spacing,
            module_spacing=segment.module_spacing,
            setback=segment.setback,
            azimuth=segment.azimuth,
        )


@dataclass(frozen=True, slots=True)
class LayoutResult:
    """Packer output: accepted module footprints in geographic points."""

    footprints: Tuple[GeoPolygon, ...] = ()
    azimuth: Optional[float] = None
    buildable: GeoPolygon = ()

    @property
    def count(self) -> int:
        return len(self.footprints)

    @classmethod
    def empty(cls, azimuth: Optional[float] = None) -> LayoutResult:
        return cls(footprints=(), azimuth=azimuth)


@dataclass(slots=True)
class DesignSummary:
    """Totals over all field segments of a design."""

    segment_count: int = 0
    module_count: int = 0
    nameplate_kw: float = 0.0
    area_sq_ft: float = 0.0
    segment_ids: List[str] = field(default_factory=list)

    def label(self) -> str:
        return f"{self.module_count} Modules, {self.nameplate_kw:.2f} kWp"
