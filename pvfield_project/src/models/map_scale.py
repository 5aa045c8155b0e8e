from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

FEET_PER_METER = 3.28084


class MapScale(BaseModel):
    """Linear scale of the projected plane, in projected units per metre.

    The default of ``1.0`` means projected coordinates are plain metres.  A map
    view that works in screen pixels supplies its current pixels-per-metre
    instead; every geometry call receives the scale explicitly rather than
    reading it from a map widget.
    """

    units_per_meter: float = Field(1.0, gt=0, alias="px_per_m", serialization_alias="px_per_m")
    source: Literal["metric", "map_view"] = "metric"

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # -------- convenience  --------
    @property
    def units_per_foot(self) -> float:
        return self.units_per_meter / FEET_PER_METER

    def meters_to_units(self, meters: float) -> float:
        return meters * self.units_per_meter

    def feet_to_units(self, feet: float) -> float:
        """Convert a length in feet (spacing, setback) to projected units."""
        return feet * self.units_per_foot

    def units_to_feet(self, units: float) -> float:
        return units / self.units_per_foot

    def sq_units_to_sq_feet(self, sq_units: float) -> float:
        """Convert an area in squared projected units to square feet."""
        return sq_units / (self.units_per_foot ** 2)

    # factory helpers
    @classmethod
    def metric(cls) -> MapScale:
        return cls(units_per_meter=1.0, source="metric")

    @classmethod
    def from_map_view(cls, pixels_per_meter: float) -> MapScale:
        """Scale reported by the map editor at its current zoom level."""
        return cls(units_per_meter=pixels_per_meter, source="map_view")

    # ---------------- (de)serialisation helpers ----------------------- #
    def to_dict(self) -> dict[str, float | str]:
        return {"units_per_meter": self.units_per_meter, "source": self.source}

    @classmethod
    def from_dict(cls, d: dict) -> MapScale:
        return cls(
            units_per_meter=float(d.get("units_per_meter", d.get("px_per_m", 1.0))),
            source=str(d.get("source", "metric")),
        )
