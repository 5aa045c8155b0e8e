from __future__ import annotations

"""Planar primitives shared by the inset and packing code.

All functions take ``(n, 2)`` numpy arrays (or anything ``np.asarray`` turns
into one) of projected coordinates.  Polygons are implicitly closed and may be
wound either way.
"""

import math
from typing import Optional, Sequence, Tuple

import numpy as np

Point2 = Tuple[float, float]

# Boundary tolerance in projected units.
EPS = 1e-6


def as_ring(points: Sequence[Point2] | np.ndarray) -> np.ndarray:
    return np.asarray(points, dtype=float).reshape(-1, 2)


def edges(poly: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """Return edge start and end point arrays, closing edge included."""
    return poly, np.roll(poly, -1, axis=0)


def shoelace_area(points: Sequence[Point2] | np.ndarray) -> float:
    """Unsigned shoelace area; 0 for fewer than three points."""
    poly = as_ring(points)
    if len(poly) < 3:
        return 0.0
    x, y = poly[:, 0], poly[:, 1]
    return abs(float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))) / 2.0


def points_in_polygon(pts: np.ndarray, poly: np.ndarray) -> np.ndarray:
    """Even-odd ray-cast test for many points at once.

    A horizontal ray is cast towards +x from every point and edge crossings
    are counted with the half-open ``(yi > y) != (yj > y)`` rule, so vertices
    are never counted twice.
    """
    pts = as_ring(pts)
    a, b = edges(poly)
    px = pts[:, 0][:, None]
    py = pts[:, 1][:, None]
    xi, yi = a[:, 0][None, :], a[:, 1][None, :]
    xj, yj = b[:, 0][None, :], b[:, 1][None, :]
    straddles = (yi > py) != (yj > py)
    with np.errstate(divide="ignore", invalid="ignore"):
        x_cross = (xj - xi) * (py - yi) / (yj - yi) + xi
    crossings = straddles & (px < x_cross)
    return (np.count_nonzero(crossings, axis=1) % 2) == 1


def point_in_polygon(pt: Point2, poly: np.ndarray) -> bool:
    return bool(points_in_polygon(np.asarray([pt], dtype=float), poly)[0])


def distances_to_edges(pts: np.ndarray, poly: np.ndarray) -> np.ndarray:
    """Minimum point-to-segment distance from every point to the boundary."""
    pts = as_ring(pts)
    a, b = edges(poly)
    ab = b - a                                   # (m, 2)
    ab_len2 = np.einsum("ij,ij->i", ab, ab)      # (m,)
    ap = pts[:, None, :] - a[None, :, :]         # (n, m, 2)
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.einsum("nmk,mk->nm", ap, ab) / ab_len2[None, :]
    t = np.where(ab_len2[None, :] > 0, np.clip(t, 0.0, 1.0), 0.0)
    closest = a[None, :, :] + t[..., None] * ab[None, :, :]
    d = np.linalg.norm(pts[:, None, :] - closest, axis=2)
    return d.min(axis=1)


def covered_by(pts: np.ndarray, poly: np.ndarray, clearance: float = 0.0) -> np.ndarray:
    """True where a point lies inside *poly* and at least *clearance* from its edges.

    Points within :data:`EPS` of the boundary count as inside, which keeps
    modules that sit flush against a straight edge from flickering in and
    out with floating-point noise.
    """
    pts = as_ring(pts)
    dist = distances_to_edges(pts, poly)
    inside = points_in_polygon(pts, poly) | (dist <= EPS)
    return inside & (dist >= clearance - EPS)


def rotate(points: np.ndarray, angle: float, origin: Point2) -> np.ndarray:
    """Rotate *points* counter-clockwise by *angle* radians about *origin*."""
    pts = as_ring(points)
    c, s = math.cos(angle), math.sin(angle)
    ox, oy = origin
    dx = pts[:, 0] - ox
    dy = pts[:, 1] - oy
    return np.column_stack([ox + dx * c - dy * s, oy + dx * s + dy * c])


def line_intersection(
    p1: np.ndarray, p2: np.ndarray, p3: np.ndarray, p4: np.ndarray, eps: float = 1e-12,
) -> Optional[np.ndarray]:
    """Intersection of the infinite lines p1-p2 and p3-p4, or ``None`` if parallel."""
    d = (p1[0] - p2[0]) * (p3[1] - p4[1]) - (p1[1] - p2[1]) * (p3[0] - p4[0])
    if abs(d) < eps:
        return None
    a = p1[0] * p2[1] - p1[1] * p2[0]
    b = p3[0] * p4[1] - p3[1] * p4[0]
    x = (a * (p3[0] - p4[0]) - (p1[0] - p2[0]) * b) / d
    y = (a * (p3[1] - p4[1]) - (p1[1] - p2[1]) * b) / d
    return np.array([x, y])


def scanline_hits(poly: np.ndarray, y: float) -> np.ndarray:
    """Sorted x positions where the horizontal line at *y* crosses the boundary.

    Edges parallel to the scanline are skipped; edge end points are included
    (within :data:`EPS`) so a scanline running along a vertex still hits it.
    """
    a, b = edges(poly)
    y1, y2 = a[:, 1], b[:, 1]
    dy = y2 - y1
    usable = (np.abs(dy) > EPS) & (np.minimum(y1, y2) - EPS <= y) & (y <= np.maximum(y1, y2) + EPS)
    if not np.any(usable):
        return np.empty(0)
    t = (y - y1[usable]) / dy[usable]
    xs = a[usable, 0] + np.clip(t, 0.0, 1.0) * (b[usable, 0] - a[usable, 0])
    return np.sort(xs)
