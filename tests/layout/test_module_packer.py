"""Rotated-grid module packing."""
import math

import numpy as np
import pytest

from pvfield_project.src.core.geometry.inset import inset_polygon
from pvfield_project.src.core.geometry.planar import distances_to_edges, point_in_polygon, rotate
from pvfield_project.src.core.geometry.projection import LocalProjection
from pvfield_project.src.core.layout.module_packer import footprint_size, pack, pack_planar, row_angle
from pvfield_project.src.models.layout import LayoutParameters
from pvfield_project.src.models.map_scale import FEET_PER_METER, MapScale

ORIGIN = (40.0, -105.0)


def _params(**kw):
    base = dict(orientation="portrait", row_spacing=3.0, module_spacing=0.5, setback=0.0, azimuth=180.0)
    base.update(kw)
    return LayoutParameters(**base)


def _expected_grid(span_along, span_across, fw, fh, step_x, step_y):
    cols = math.floor((span_along - fw) / step_x) + 1
    rows = math.floor((span_across - fh) / step_y) + 1
    return cols * rows


def test_footprint_size():
    assert footprint_size(1.0, 1.7, "portrait") == (1.0, 1.7)
    assert footprint_size(1.0, 1.7, "landscape") == (1.7, 1.0)


def test_rectangle_count_matches_grid(rectangle):
    """With azimuth 180 the 50 ft side runs along the rows and the 100 ft side across."""
    result = pack(rectangle, 1.0, 1.7, _params())
    expected = _expected_grid(
        span_along=15.24,
        span_across=30.48,
        fw=1.0,
        fh=1.7,
        step_x=1.0 + 0.5 / FEET_PER_METER,
        step_y=1.7 + 3.0 / FEET_PER_METER,
    )
    assert expected == 156
    assert result.count == expected
    assert result.azimuth == 180.0


def test_landscape_swaps_footprint(rectangle):
    result = pack(rectangle, 1.0, 1.7, _params(orientation="landscape"))
    expected = _expected_grid(15.24, 30.48, 1.7, 1.0, 1.7 + 0.5 / FEET_PER_METER, 1.0 + 3.0 / FEET_PER_METER)
    assert result.count == expected


def test_footprints_are_module_sized(rectangle):
    result = pack(rectangle, 1.0, 1.7, _params())
    proj = LocalProjection(ORIGIN)
    rect = proj.project_many(result.footprints[0])
    sides = np.hypot(*(np.roll(rect, -1, axis=0) - rect).T)
    assert sorted(sides.tolist()) == pytest.approx([1.0, 1.0, 1.7, 1.7], abs=1e-6)


def test_pack_is_deterministic(rectangle):
    first = pack(rectangle, 1.0, 1.7, _params(azimuth=37.0))
    second = pack(rectangle, 1.0, 1.7, _params(azimuth=37.0))
    assert first == second


def test_setback_is_respected(make_rect):
    width, height = 30.0, 20.0
    setback_ft = 4.0
    result = pack(make_rect(width, height), 1.0, 1.7, _params(setback=setback_ft, azimuth=90.0))
    assert result.count > 0

    clearance = setback_ft / FEET_PER_METER
    proj = LocalProjection(ORIGIN)
    for footprint in result.footprints:
        for x, y in proj.project_many(footprint):
            assert clearance - 1e-6 <= x <= width - clearance + 1e-6
            assert clearance - 1e-6 <= y <= height - clearance + 1e-6

    assert len(result.buildable) == 4


def test_larger_spacing_never_adds_modules(rectangle):
    counts = [pack(rectangle, 1.0, 1.7, _params(row_spacing=rs)).count for rs in (0.0, 3.0, 6.0, 12.0)]
    assert counts == sorted(counts, reverse=True)
    assert counts[0] > counts[-1]


def test_map_scale_does_not_change_layout(rectangle):
    metric = pack(rectangle, 1.0, 1.7, _params())
    pixels = pack(rectangle, 1.0, 1.7, _params(), MapScale.from_map_view(12.0))
    assert pixels.count == metric.count


def test_unset_azimuth_uses_longest_edge(rectangle):
    result = pack(rectangle, 1.0, 1.7, _params(azimuth=None))
    assert result.azimuth is not None
    assert math.isclose(result.azimuth % 180.0, 90.0, abs_tol=1e-3)
    assert result.count > 0


@pytest.mark.parametrize(
    "points_slice, width, height",
    [
        (slice(0, 2), 1.0, 1.7),   # fewer than three points
        (slice(0, 4), 0.0, 1.7),   # no module width
        (slice(0, 4), 1.0, None),  # no module height
        (slice(0, 4), 40.0, 40.0),  # module bigger than the field
    ],
)
def test_empty_layouts(rectangle, points_slice, width, height):
    result = pack(rectangle[points_slice], width, height, _params())
    assert result.count == 0
    assert result.footprints == ()


def test_pack_planar_collinear_ring():
    ring = np.array([(0.0, 0.0), (5.0, 0.0), (10.0, 0.0)])
    assert pack_planar(ring, 1.0, 1.0, 1.0, 1.0, 0.0, 0.0).count == 0


TRIANGLE = np.array([(0.0, 0.0), (60.0, 5.0), (20.0, 45.0)])


def _assert_no_overlap(footprints, angle, origin):
    """Footprints, turned back into the row frame, may touch but never overlap."""
    local = np.array([rotate(f, -angle, origin) for f in footprints])
    lo = local.min(axis=1)
    hi = local.max(axis=1)
    overlap_x = np.minimum(hi[:, None, 0], hi[None, :, 0]) - np.maximum(lo[:, None, 0], lo[None, :, 0])
    overlap_y = np.minimum(hi[:, None, 1], hi[None, :, 1]) - np.maximum(lo[:, None, 1], lo[None, :, 1])
    overlapping = (overlap_x > 1e-6) & (overlap_y > 1e-6)
    np.fill_diagonal(overlapping, False)
    assert not overlapping.any()


@pytest.mark.parametrize("azimuth", [0.0, 37.0, 123.0, 250.0])
def test_triangle_footprints_inside_setback(azimuth):
    """Every corner lies inside the inset boundary at any row direction."""
    clearance = 5.0 / FEET_PER_METER
    fw, fh = 1.0, 1.7
    layout = pack_planar(TRIANGLE, fw, fh, fw + 0.1524, fh + 0.9144, clearance, azimuth)
    assert layout.count > 0
    assert layout.azimuth == azimuth

    buildable = np.array(inset_polygon(TRIANGLE, clearance))
    assert np.allclose(np.array(layout.buildable), buildable)

    corners = np.concatenate(layout.footprints)
    near_edge = distances_to_edges(corners, buildable) <= 1e-5
    inside = np.array([point_in_polygon(tuple(c), buildable) for c in corners])
    assert (inside | near_edge).all()
    assert distances_to_edges(corners, TRIANGLE).min() >= clearance - 1e-6

    _assert_no_overlap(layout.footprints, row_angle(azimuth), tuple(TRIANGLE[0]))


def test_larger_module_spacing_never_adds_modules(rectangle):
    counts = [pack(rectangle, 1.0, 1.7, _params(module_spacing=ms)).count for ms in (0.0, 0.5, 2.0, 5.0)]
    assert counts == sorted(counts, reverse=True)
    assert counts[0] > counts[-1]


def test_rectangle_footprints_do_not_overlap(rectangle):
    result = pack(rectangle, 1.0, 1.7, _params(module_spacing=0.0, row_spacing=0.0, azimuth=90.0))
    proj = LocalProjection.for_polygon(rectangle)
    footprints = [proj.project_many(f) for f in result.footprints]
    _assert_no_overlap(footprints, row_angle(90.0), (0.0, 0.0))
