from __future__ import annotations

"""pvfield_project.src.core.geometry.metrics

Polygon metrics on geographic boundaries: area, edge lengths, midpoints,
centroid and the bearing helpers used for row alignment.

Every function projects through a :class:`LocalProjection` centred on the
input, so the results are metric regardless of where on the globe the field
sits.  Nothing here keeps state between calls.
"""

import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ...models.map_scale import MapScale
from .planar import shoelace_area
from .projection import GeoPoint, LocalProjection


def polygon_area_sq_ft(points: Sequence[GeoPoint], scale: Optional[MapScale] = None) -> float:
    """Shoelace area of the boundary in square feet (0 for < 3 points).

    Points collinear in the local plane give 0.  Points on one parallel of
    latitude are not: the projection bends parallels, which adds well under a
    square foot across a 100 m parcel but hundreds of square feet once the
    points span more than about a kilometre.
    """
    if len(points) < 3:
        return 0.0
    proj = LocalProjection.for_polygon(points, scale)
    sq_units = shoelace_area(proj.project_many(points))
    return proj.scale.sq_units_to_sq_feet(sq_units)


def segment_length_ft(p1: GeoPoint, p2: GeoPoint, scale: Optional[MapScale] = None) -> float:
    proj = LocalProjection.for_polygon([p1, p2], scale)
    a, b = proj.project_many([p1, p2])
    return proj.scale.units_to_feet(float(np.hypot(*(b - a))))


def midpoint(p1: GeoPoint, p2: GeoPoint) -> GeoPoint:
    return (p1[0] + p2[0]) / 2.0, (p1[1] + p2[1]) / 2.0


def centroid(points: Sequence[GeoPoint], scale: Optional[MapScale] = None) -> GeoPoint:
    """Mean of the projected vertices, returned as a geographic point."""
    if not points:
        return (0.0, 0.0)
    proj = LocalProjection.for_polygon(points, scale)
    mean = proj.project_many(points).mean(axis=0)
    return proj.unproject((float(mean[0]), float(mean[1])))


def edge_labels(points: Sequence[GeoPoint], scale: Optional[MapScale] = None) -> List[Tuple[GeoPoint, float]]:
    """``(midpoint, length_ft)`` for every boundary edge, closing edge included.

    Open polylines with two points yield their single edge once.
    """
    n = len(points)
    if n < 2:
        return []
    pairs = [(points[i], points[(i + 1) % n]) for i in range(n if n > 2 else 1)]
    return [(midpoint(a, b), segment_length_ft(a, b, scale)) for a, b in pairs]


def compass_azimuth(dx: float, dy: float) -> float:
    """Compass bearing (0 = north, clockwise) of the planar vector ``(dx, dy)``."""
    angle = math.atan2(dy, dx)
    return (90.0 - angle * 180.0 / math.pi + 360.0) % 360.0


def longest_edge_azimuth(points: Sequence[GeoPoint], scale: Optional[MapScale] = None) -> Optional[float]:
    """Bearing of the boundary's longest edge, or ``None`` for < 2 points."""
    if len(points) < 2:
        return None
    proj = LocalProjection.for_polygon(points, scale)
    ring = proj.project_many(points)
    vecs = np.roll(ring, -1, axis=0) - ring
    longest = int(np.argmax(np.hypot(vecs[:, 0], vecs[:, 1])))
    return compass_azimuth(float(vecs[longest, 0]), float(vecs[longest, 1]))


def azimuth_toward(center: GeoPoint, target: GeoPoint) -> float:
    """Bearing from *center* to *target*; drives the segment rotation handle."""
    proj = LocalProjection(center)
    x, y = proj.project(target)
    return compass_azimuth(x, y)
