from __future__ import annotations

"""pvfield_project.src.core.layout.module_packer

Rotated-grid module packer.

The boundary is rotated so module rows run along the x axis, then scanned
row by row: each row's usable span is the overlap of the boundary at the top
and bottom edges of the row, and candidate module rectangles are stepped
along that span.  A candidate is kept only when all four corners lie inside
the boundary and at least the setback away from every edge.  There is no
backtracking; the result is a greedy, deterministic, row-major fill.

The packer never raises for bad geometry.  Anything it cannot lay out (fewer
than three points, zero area, non-positive module size, module larger than
the field) comes back as an empty :class:`LayoutResult`.  Negative spacing or
setback values are a caller error; they produce odd but finite layouts.
"""

import logging
import math
from typing import List, Optional, Sequence, Tuple

import numpy as np

from ...models.field_segment import Orientation
from ...models.layout import LayoutParameters, LayoutResult
from ...models.map_scale import MapScale
from ..geometry.inset import inset_polygon
from ..geometry.metrics import compass_azimuth
from ..geometry.planar import EPS, as_ring, covered_by, rotate, scanline_hits, shoelace_area
from ..geometry.projection import GeoPoint, LocalProjection

logger = logging.getLogger(__name__)

__all__ = ["pack", "pack_planar", "footprint_size", "PlanarLayout"]

# Safety valve against absurd inputs (e.g. a 10 km field at pixel scale).
MAX_CANDIDATES = 2_000_000


def footprint_size(width: float, height: float, orientation: Orientation) -> Tuple[float, float]:
    """Return ``(along_row, across_row)`` module dimensions.

    Portrait modules stand on their short side, so the module width runs
    along the row; landscape modules lie on their long side.
    """
    if orientation == "landscape":
        return height, width
    return width, height


def row_angle(azimuth: float) -> float:
    """Counter-clockwise angle (radians) of the row direction from +x."""
    return math.radians(90.0 - azimuth)


class PlanarLayout:
    """Packer output in projected coordinates (before unprojection)."""

    __slots__ = ("footprints", "azimuth", "buildable")

    def __init__(self, footprints: List[np.ndarray], azimuth: Optional[float], buildable: List[Tuple[float, float]]):
        self.footprints = footprints
        self.azimuth = azimuth
        self.buildable = buildable

    @property
    def count(self) -> int:
        return len(self.footprints)


def pack_planar(
    ring: np.ndarray,
    footprint_w: float,
    footprint_h: float,
    step_x: float,
    step_y: float,
    clearance: float,
    azimuth: Optional[float],
) -> PlanarLayout:
    """Pack rectangles of ``footprint_w`` x ``footprint_h`` into *ring*.

    All arguments are in projected units.  ``footprint_w`` runs along the row.
    ``azimuth`` of ``None`` aligns rows with the longest boundary edge.
    """
    ring = as_ring(ring)
    if len(ring) < 3 or shoelace_area(ring) <= EPS * EPS:
        return PlanarLayout([], azimuth, [])

    if azimuth is None:
        vecs = np.roll(ring, -1, axis=0) - ring
        longest = int(np.argmax(np.hypot(vecs[:, 0], vecs[:, 1])))
        azimuth = compass_azimuth(float(vecs[longest, 0]), float(vecs[longest, 1]))

    buildable = inset_polygon(ring, clearance) if clearance > 0 else [tuple(p) for p in ring]

    if footprint_w <= 0 or footprint_h <= 0 or step_x <= 0 or step_y <= 0:
        return PlanarLayout([], azimuth, buildable)

    angle = row_angle(azimuth)
    origin = (float(ring[0, 0]), float(ring[0, 1]))
    local = rotate(ring, -angle, origin)

    min_x, min_y = local.min(axis=0)
    max_x, max_y = local.max(axis=0)
    est = ((max_x - min_x) / step_x + 1) * ((max_y - min_y) / step_y + 1)
    if est > MAX_CANDIDATES:
        logger.warning("Skipping layout: %.0f candidate cells exceeds limit", est)
        return PlanarLayout([], azimuth, buildable)

    accepted: List[np.ndarray] = []
    rows = 0
    k = 0
    while True:
        y = min_y + k * step_y
        k += 1
        if y + footprint_h > max_y + EPS:
            break
        top = scanline_hits(local, y)
        bottom = scanline_hits(local, y + footprint_h)
        if len(top) < 2 or len(bottom) < 2:
            logger.debug("Row at y=%.3f skipped: scanline misses boundary", y)
            continue
        start = max(top[0], bottom[0])
        end = min(top[-1], bottom[-1])
        if end - start + EPS < footprint_w:
            continue

        n_cells = int(math.floor((end - start - footprint_w + EPS) / step_x)) + 1
        xs = start + step_x * np.arange(n_cells)
        corners = np.empty((n_cells, 4, 2))
        corners[:, 0] = np.column_stack([xs, np.full(n_cells, y)])
        corners[:, 1] = np.column_stack([xs + footprint_w, np.full(n_cells, y)])
        corners[:, 2] = np.column_stack([xs + footprint_w, np.full(n_cells, y + footprint_h)])
        corners[:, 3] = np.column_stack([xs, np.full(n_cells, y + footprint_h)])

        ok = covered_by(corners.reshape(-1, 2), local, clearance).reshape(n_cells, 4).all(axis=1)
        for rect in corners[ok]:
            accepted.append(rotate(rect, angle, origin))
        rows += 1

    logger.debug("Packed %d modules in %d rows (azimuth %.2f)", len(accepted), rows, azimuth)
    return PlanarLayout(accepted, azimuth, buildable)


def pack(
    points: Sequence[GeoPoint],
    module_width: Optional[float],
    module_height: Optional[float],
    params: LayoutParameters,
    scale: Optional[MapScale] = None,
) -> LayoutResult:
    """Lay modules out inside a geographic boundary.

    Args:
        points: Boundary vertices as ``(lat, lon)``, either winding.
        module_width: Physical module width in metres.
        module_height: Physical module height in metres.
        params: Orientation, spacings and setback (feet) and optional azimuth.
        scale: Linear scale of the projected frame; metres when omitted.

    Returns:
        LayoutResult: Accepted footprints (row-major), the azimuth actually
        used and the setback-inset buildable polygon.
    """
    if len(points) < 3:
        return LayoutResult.empty(params.azimuth)

    proj = LocalProjection.for_polygon(points, scale)
    ring = proj.project_many(points)
    s = proj.scale

    if not module_width or not module_height or module_width <= 0 or module_height <= 0:
        fw = fh = 0.0
    else:
        along, across = footprint_size(module_width, module_height, params.orientation)
        fw, fh = s.meters_to_units(along), s.meters_to_units(across)

    planar = pack_planar(
        ring,
        footprint_w=fw,
        footprint_h=fh,
        step_x=fw + s.feet_to_units(params.module_spacing),
        step_y=fh + s.feet_to_units(params.row_spacing),
        clearance=s.feet_to_units(params.setback),
        azimuth=params.azimuth,
    )
    footprints = tuple(tuple(proj.unproject_many(rect)) for rect in planar.footprints)
    buildable = tuple(proj.unproject_many(np.asarray(planar.buildable))) if planar.buildable else ()
    return LayoutResult(footprints=footprints, azimuth=planar.azimuth, buildable=buildable)
