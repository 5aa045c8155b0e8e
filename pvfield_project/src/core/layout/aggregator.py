from __future__ import annotations

"""pvfield_project.src.core.layout.aggregator

Combines boundary area, packer output and module rating into the derived
fields of a :class:`FieldSegment`.

:func:`recompute` is a pure function of the segment value and the module
snapshot it is given.  It always performs a full recomputation; the caller
decides when to invoke it (on commit of an edit, not on every intermediate
drag position).
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Mapping, Optional

from ...models.field_segment import FieldSegment
from ...models.layout import DesignSummary, LayoutParameters
from ...models.map_scale import FEET_PER_METER, MapScale
from ...models.module import Module
from ..geometry.metrics import longest_edge_azimuth, polygon_area_sq_ft
from .module_packer import footprint_size, pack

logger = logging.getLogger(__name__)

__all__ = ["recompute", "recompute_all", "summarize", "ground_coverage_ratio", "nameplate_kw"]


def nameplate_kw(count: int, power_w: float) -> float:
    return count * power_w / 1000


def ground_coverage_ratio(module: Module, segment: FieldSegment) -> float:
    """Module length along the tilt direction divided by the row pitch.

    Row spacing is stored in feet and module dimensions in metres, so the
    comparison is done in metres.
    """
    if not module.width or not module.height or module.width <= 0 or module.height <= 0:
        return 0.0
    _along, across = footprint_size(module.width, module.height, segment.orientation)
    pitch = across + segment.row_spacing / FEET_PER_METER
    return across / pitch if pitch > 0 else 0.0


def recompute(
    segment: FieldSegment,
    module: Optional[Module],
    scale: Optional[MapScale] = None,
) -> FieldSegment:
    """Return *segment* with area, layout, count, nameplate and GCR refreshed.

    With no module (or a module lacking dimensions or power) the layout is
    cleared and only the area is refreshed.  The user's ``azimuth`` is never
    written; with it unset the rows follow the boundary's current longest edge
    and the bearing actually used is reported in ``layout_azimuth``.
    """
    area = polygon_area_sq_ft(segment.points, scale)
    azimuth = segment.azimuth
    if azimuth is None and not segment.is_degenerate:
        azimuth = longest_edge_azimuth(segment.points, scale)

    if module is None or not module.can_be_laid_out:
        if module is not None:
            logger.debug("Module '%s' lacks dimensions or power; clearing layout", module.id)
        return segment.evolve(
            area=area,
            layout_azimuth=azimuth,
            module_layout=(),
            module_count=0,
            nameplate=0.0,
            gcr=0.0,
        )

    params = replace(LayoutParameters.from_segment(segment), azimuth=azimuth)
    result = pack(segment.points, module.width, module.height, params, scale)
    count = result.count
    logger.debug("Segment %s: %d modules of '%s'", segment.id, count, module.model_name)
    return segment.evolve(
        area=area,
        layout_azimuth=result.azimuth,
        module_layout=result.footprints,
        module_count=count,
        nameplate=nameplate_kw(count, module.max_power_pmp),
        gcr=ground_coverage_ratio(module, segment) if count else 0.0,
    )


def recompute_all(
    segments: Iterable[FieldSegment],
    modules: Mapping[str, Module],
    scale: Optional[MapScale] = None,
) -> List[FieldSegment]:
    """Recompute every segment against one catalog snapshot.

    Segments whose ``module_id`` is missing from *modules* are treated as
    unassigned.
    """
    out: List[FieldSegment] = []
    for seg in segments:
        module = modules.get(seg.module_id) if seg.module_id else None
        if seg.module_id and module is None:
            logger.warning("Segment %s references unknown module '%s'", seg.id, seg.module_id)
        out.append(recompute(seg, module, scale))
    return out


def summarize(segments: Iterable[FieldSegment]) -> DesignSummary:
    summary = DesignSummary()
    for seg in segments:
        summary.segment_count += 1
        summary.module_count += seg.module_count
        summary.nameplate_kw += seg.nameplate
        summary.area_sq_ft += seg.area
        summary.segment_ids.append(seg.id)
    return summary
