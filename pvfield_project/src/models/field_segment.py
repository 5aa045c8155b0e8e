from __future__ import annotations

import logging
from typing import Any, Literal, Optional, Tuple
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

logger = logging.getLogger(__name__)

GeoPoint = Tuple[float, float]  # (lat, lon)
GeoPolygon = Tuple[GeoPoint, ...]

Orientation = Literal["portrait", "landscape"]
RackingType = Literal["fixed_tilt", "flush_mount"]

# Keys written by the older web client, mapped to the current field names.
_LEGACY_KEYS: dict[str, str] = {
    "description": "name",
    "moduleId": "module_id",
    "selectedModuleId": "module_id",
    "moduleCount": "module_count",
    "moduleLayout": "module_layout",
    "rowSpacing": "row_spacing",
    "moduleSpacing": "module_spacing",
    "moduleTilt": "tilt",
    "rackingType": "racking_type",
    "frameSizeUp": "frame_size_up",
    "frameSizeWide": "frame_size_wide",
}

# The web client kept the sidebar rules in a nested object.
_LAYOUT_RULE_KEYS: dict[str, str] = {
    "orientation": "orientation",
    "rowSpacing": "row_spacing",
    "moduleSpacing": "module_spacing",
    "setback": "setback",
    "azimuth": "azimuth",
    "tilt": "tilt",
    "moduleTilt": "tilt",
    "rackingType": "racking_type",
}


class FieldSegment(BaseModel):
    """A user-drawn ground polygon that receives a module layout.

    Instances are immutable values: every edit produces a new segment through
    :py:meth:`evolve` and the layout aggregator returns a fresh copy with the
    derived outputs filled in.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str = "Field Segment"
    points: GeoPolygon = ()

    # --- derived geometry ---
    area: float = 0.0  # sq ft
    azimuth: Optional[float] = None  # None -> derive from the longest edge

    # --- module assignment ---
    module_id: Optional[str] = None

    # --- layout parameters (ft / deg) ---
    orientation: Orientation = "portrait"
    row_spacing: float = 0.0
    module_spacing: float = 0.0
    setback: float = 0.0
    # Metadata only; the packer ignores these.
    tilt: float = 0.0
    racking_type: RackingType = "fixed_tilt"
    frame_size_up: int = 1
    frame_size_wide: int = 1

    # --- derived outputs ---
    layout_azimuth: Optional[float] = None  # bearing the rows were packed at
    module_layout: Tuple[GeoPolygon, ...] = ()
    module_count: int = 0
    nameplate: float = 0.0  # kW
    gcr: float = 0.0

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("orientation", mode="before")
    @classmethod
    def _normalise_orientation(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("racking_type", mode="before")
    @classmethod
    def _normalise_racking(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower().replace(" ", "_").replace("-", "_")
        return value

    @field_validator("azimuth", "layout_azimuth")
    @classmethod
    def _wrap_azimuth(cls, value: Optional[float]) -> Optional[float]:
        return None if value is None else value % 360.0

    # ------------------------------------------------------------------
    @property
    def is_degenerate(self) -> bool:
        """True when the boundary has fewer than three points."""
        return len(self.points) < 3

    def evolve(self, **changes: Any) -> FieldSegment:
        """Return a validated copy with *changes* applied."""
        data = self.model_dump()
        data.update(changes)
        return FieldSegment.model_validate(data)

    # --- (de)serialization ---
    def to_dict(self) -> dict:
        return self.model_dump(mode="json")

    @classmethod
    def from_dict(cls, d: dict) -> FieldSegment:
        """Build a segment from a stored record, migrating legacy keys."""
        data = dict(d)
        rules = data.pop("layoutRules", None)
        if isinstance(rules, dict):
            for old, new in _LAYOUT_RULE_KEYS.items():
                if old in rules and new not in data:
                    data[new] = rules[old]
            logger.debug("Flattened legacy layoutRules: %s", sorted(rules))
        for old, new in _LEGACY_KEYS.items():
            if old in data and new not in data:
                logger.debug("Migrating legacy segment key '%s' -> '%s'", old, new)
                data[new] = data.pop(old)
        return cls.model_validate(data)
