from __future__ import annotations

"""Setback inset for field segment boundaries.

Every edge is shifted inwards by the setback along its normal and the new
vertices are the intersections of neighbouring shifted edges.  This is exact
for convex boundaries and small setbacks.  Concave boundaries or setbacks
large enough to collapse the shape can come back self-intersecting; callers
treat the result as a drawing aid and the packer re-checks clearance per
module corner anyway.
"""

import logging
import math
from collections.abc import Sequence
from typing import List, Optional, Tuple

import numpy as np

from ...models.map_scale import MapScale
from .planar import as_ring, line_intersection, point_in_polygon
from .projection import GeoPoint, LocalProjection

Point2 = Tuple[float, float]

logger = logging.getLogger(__name__)

__all__ = ["inset_polygon", "inset_boundary"]


def _dedupe(poly: np.ndarray) -> np.ndarray:
    """Drop consecutive duplicates (and a repeated closing point)."""
    keep = np.any(np.abs(poly - np.roll(poly, 1, axis=0)) > 0.0, axis=1)
    if len(poly) and not keep.any():
        return poly[:1]
    return poly[keep]


def _signed_area(poly: np.ndarray) -> float:
    x, y = poly[:, 0], poly[:, 1]
    return float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y)) / 2.0


def _inward_normal(poly: np.ndarray, p1: np.ndarray, p2: np.ndarray, ccw: bool) -> Optional[np.ndarray]:
    edge = p2 - p1
    length = math.hypot(edge[0], edge[1])
    if length == 0.0:
        return None
    normal = np.array([-edge[1], edge[0]]) / length  # left-hand normal
    probe = max(length * 1e-4, 1e-9)
    mid = (p1 + p2) / 2.0
    left_inside = point_in_polygon(tuple(mid + normal * probe), poly)
    right_inside = point_in_polygon(tuple(mid - normal * probe), poly)
    if left_inside != right_inside:
        return normal if left_inside else -normal
    # Probe landed on a spike or outside both ways; fall back to winding.
    return normal if ccw else -normal


def inset_polygon(poly: Sequence[Point2] | np.ndarray, dist: float) -> List[Point2]:
    """Return *poly* shifted inwards by *dist* (same units as the points).

    ``dist == 0`` returns the polygon unchanged; a negative distance or fewer
    than three points gives an empty list.
    """
    ring = _dedupe(as_ring(poly))
    if len(ring) < 3 or dist < 0:
        return []
    if dist == 0:
        return [(float(x), float(y)) for x, y in ring]

    ccw = _signed_area(ring) > 0
    n = len(ring)
    offset_lines: List[Tuple[np.ndarray, np.ndarray]] = []
    for i in range(n):
        p1, p2 = ring[i], ring[(i + 1) % n]
        normal = _inward_normal(ring, p1, p2, ccw)
        if normal is None:  # pragma: no cover - removed by _dedupe
            normal = np.zeros(2)
        offset_lines.append((p1 + normal * dist, p2 + normal * dist))

    out: List[Point2] = []
    for i in range(n):
        prev_a, prev_b = offset_lines[i - 1]
        cur_a, cur_b = offset_lines[i]
        hit = line_intersection(prev_a, prev_b, cur_a, cur_b)
        if hit is None:
            # Collinear neighbours: the shifted edges share a line.
            logger.debug("Parallel offset edges at vertex %d; reusing edge end point", i)
            hit = prev_b
        out.append((float(hit[0]), float(hit[1])))
    return out


def inset_boundary(
    points: Sequence[GeoPoint],
    distance_ft: float,
    scale: Optional[MapScale] = None,
) -> List[GeoPoint]:
    """Geographic wrapper around :func:`inset_polygon` with the setback in feet."""
    if len(points) < 3 or distance_ft < 0:
        return []
    if distance_ft == 0:
        return [(float(lat), float(lon)) for lat, lon in points]
    proj = LocalProjection.for_polygon(points, scale)
    planar = inset_polygon(proj.project_many(points), proj.scale.feet_to_units(distance_ft))
    if not planar:
        return []
    return proj.unproject_many(np.asarray(planar))
