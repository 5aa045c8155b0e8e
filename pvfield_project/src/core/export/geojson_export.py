"""GeoJSON export of field segments and their module layouts.

Each segment becomes one boundary feature plus one feature per module
footprint, all in EPSG:4326 with GeoJSON's ``[lon, lat]`` axis order.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence

from shapely.geometry import Polygon, mapping

from ...models.field_segment import FieldSegment, GeoPoint


def _to_polygon(points: Sequence[GeoPoint]) -> Polygon:
    return Polygon([(lon, lat) for lat, lon in points])


def segment_features(segment: FieldSegment) -> List[Dict[str, Any]]:
    """Boundary feature followed by the module footprint features."""
    if segment.is_degenerate:
        return []

    features: List[Dict[str, Any]] = [
        {
            "type": "Feature",
            "properties": {
                "kind": "field_segment",
                "id": segment.id,
                "name": segment.name,
                "area_sq_ft": segment.area,
                "azimuth": segment.azimuth,
                "layout_azimuth": segment.layout_azimuth,
                "module_id": segment.module_id,
                "module_count": segment.module_count,
                "nameplate_kw": segment.nameplate,
                "gcr": segment.gcr,
            },
            "geometry": mapping(_to_polygon(segment.points)),
        },
    ]
    for i, footprint in enumerate(segment.module_layout):
        features.append(
            {
                "type": "Feature",
                "properties": {"kind": "module", "segment_id": segment.id, "index": i},
                "geometry": mapping(_to_polygon(footprint)),
            },
        )
    return features


def segment_to_feature_collection(segment: FieldSegment) -> Dict[str, Any]:
    return {"type": "FeatureCollection", "features": segment_features(segment)}


def export_geojson(segments: Iterable[FieldSegment], out_path: str | Path) -> Path:
    """Write all *segments* to *out_path* as one FeatureCollection."""
    fc: Dict[str, Any] = {"type": "FeatureCollection", "features": []}
    for seg in segments:
        fc["features"].extend(segment_features(seg))

    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(fc, f)
    return out
