"""Helper for creating new :class:`FieldSegment` objects.

The map editor calls :func:`new_segment` once the user closes a boundary;
the segment starts with the user's default layout parameters, an unset
azimuth and an empty layout.
"""

import logging
from typing import Optional, Sequence

# NOTE: Relative import (services ─► models)
from ..models.field_segment import FieldSegment, GeoPoint
from .settings_service import SettingsService

__all__ = ["new_segment"]

logger = logging.getLogger(__name__)


def new_segment(
    points: Sequence[GeoPoint],
    name: str = "Field Segment",
    settings: Optional[SettingsService] = None,
    module_id: Optional[str] = None,
) -> FieldSegment:  # noqa: D401
    """Return a new segment for a finished boundary of at least three vertices."""
    if len(points) < 3:
        raise ValueError(f"A field segment needs at least 3 boundary points, got {len(points)}")
    settings = settings or SettingsService()
    seg = FieldSegment(
        name=name,
        points=tuple((float(lat), float(lon)) for lat, lon in points),
        module_id=module_id,
        **settings.layout_defaults(),
    )
    logger.info("Created field segment %s with %d vertices", seg.id, len(seg.points))
    return seg
