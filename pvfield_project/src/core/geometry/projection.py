from __future__ import annotations

"""pvfield_project.src.core.geometry.projection

Local tangent-plane projection between geographic points and the planar
frame every other geometry helper works in.

The projection is an azimuthal-equidistant CRS centred on the field
segment, so distances and angles near the parcel are metric to well below
a millimetre for anything under a kilometre across.  Coordinates are then
multiplied by :pyattr:`MapScale.units_per_meter`, which lets a map view hand
in its own pixel scale without the geometry code knowing about the map.
"""

from typing import Iterable, List, Sequence, Tuple

import numpy as np
from pyproj import CRS, Transformer

from ...models.map_scale import MapScale

GeoPoint = Tuple[float, float]    # (lat, lon)
PlanarPoint = Tuple[float, float]  # (x, y) in projected units

__all__ = ["LocalProjection", "GeoPoint", "PlanarPoint"]


def local_crs(lat: float, lon: float) -> CRS:
    """Return an azimuthal-equidistant CRS centred on ``(lat, lon)``."""
    return CRS.from_dict(
        {"proj": "aeqd", "lat_0": lat, "lon_0": lon, "datum": "WGS84", "units": "m"},
    )


class LocalProjection:
    """Project ``(lat, lon)`` to ``(x, y)`` and back around a fixed origin.

    ``x`` grows east and ``y`` grows north.  Instances are immutable and hold
    no state besides the two pyproj transformers.
    """

    def __init__(self, origin: GeoPoint, scale: MapScale | None = None) -> None:
        self.origin: GeoPoint = (float(origin[0]), float(origin[1]))
        self.scale: MapScale = scale or MapScale()
        crs = local_crs(*self.origin)
        self._to_local = Transformer.from_crs("EPSG:4326", crs, always_xy=True)
        self._to_wgs = Transformer.from_crs(crs, "EPSG:4326", always_xy=True)

    @classmethod
    def for_polygon(cls, points: Sequence[GeoPoint], scale: MapScale | None = None) -> LocalProjection:
        """Projection centred on the vertex mean of *points*."""
        if not points:
            return cls((0.0, 0.0), scale)
        lats = [p[0] for p in points]
        lons = [p[1] for p in points]
        return cls((sum(lats) / len(lats), sum(lons) / len(lons)), scale)

    # ------------------------------------------------------------------
    def project(self, point: GeoPoint) -> PlanarPoint:
        lat, lon = point
        x, y = self._to_local.transform(lon, lat)
        k = self.scale.units_per_meter
        return float(x) * k, float(y) * k

    def unproject(self, point: PlanarPoint) -> GeoPoint:
        k = self.scale.units_per_meter
        lon, lat = self._to_wgs.transform(point[0] / k, point[1] / k)
        return float(lat), float(lon)

    # ------------------------------------------------------------------
    # Vectorised variants used by the packer
    # ------------------------------------------------------------------
    def project_many(self, points: Iterable[GeoPoint]) -> np.ndarray:
        """Return an ``(n, 2)`` array of projected coordinates."""
        arr = np.asarray(list(points), dtype=float).reshape(-1, 2)
        if arr.shape[0] == 0:
            return arr
        x, y = self._to_local.transform(arr[:, 1], arr[:, 0])
        return np.column_stack([x, y]) * self.scale.units_per_meter

    def unproject_many(self, points: np.ndarray) -> List[GeoPoint]:
        arr = np.asarray(points, dtype=float).reshape(-1, 2)
        if arr.shape[0] == 0:
            return []
        k = self.scale.units_per_meter
        lon, lat = self._to_wgs.transform(arr[:, 0] / k, arr[:, 1] / k)
        return [(float(a), float(o)) for a, o in zip(np.atleast_1d(lat), np.atleast_1d(lon))]
