"""Planar primitives and the setback inset."""
import math

import numpy as np
import pytest

from pvfield_project.src.core.geometry.inset import inset_boundary, inset_polygon
from pvfield_project.src.core.geometry.metrics import polygon_area_sq_ft
from pvfield_project.src.core.geometry.planar import (
    covered_by,
    distances_to_edges,
    line_intersection,
    point_in_polygon,
    rotate,
    scanline_hits,
    shoelace_area,
)

SQUARE = np.array([(0.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0)])
TRIANGLE = np.array([(0.0, 0.0), (20.0, 0.0), (5.0, 15.0)])
L_SHAPE = np.array([(0.0, 0.0), (10.0, 0.0), (10.0, 4.0), (4.0, 4.0), (4.0, 10.0), (0.0, 10.0)])


def test_shoelace_area():
    assert shoelace_area(SQUARE) == pytest.approx(100.0)
    assert shoelace_area(SQUARE[::-1]) == pytest.approx(100.0)
    assert shoelace_area(SQUARE[:2]) == 0.0


def test_point_in_polygon_even_odd():
    assert point_in_polygon((5.0, 5.0), SQUARE)
    assert not point_in_polygon((15.0, 5.0), SQUARE)
    # Inside the notch of the L
    assert not point_in_polygon((7.0, 7.0), L_SHAPE)
    assert point_in_polygon((2.0, 8.0), L_SHAPE)


def test_covered_by_accepts_boundary_points():
    pts = np.array([(0.0, 5.0), (10.0, 10.0), (5.0, 5.0), (11.0, 5.0)])
    assert covered_by(pts, SQUARE).tolist() == [True, True, True, False]


def test_covered_by_clearance():
    pts = np.array([(1.0, 5.0), (0.5, 5.0), (5.0, 5.0)])
    assert covered_by(pts, SQUARE, clearance=1.0).tolist() == [True, False, True]


def test_distances_to_edges():
    d = distances_to_edges(np.array([(5.0, 5.0), (1.0, 2.0), (-3.0, 0.0)]), SQUARE)
    assert d.tolist() == pytest.approx([5.0, 1.0, 3.0])


def test_rotate_quarter_turn():
    out = rotate(np.array([(1.0, 0.0)]), math.pi / 2, (0.0, 0.0))
    assert out[0] == pytest.approx([0.0, 1.0])


def test_line_intersection():
    hit = line_intersection(np.array([0.0, 0.0]), np.array([2.0, 2.0]), np.array([0.0, 2.0]), np.array([2.0, 0.0]))
    assert hit.tolist() == pytest.approx([1.0, 1.0])
    parallel = line_intersection(np.array([0.0, 0.0]), np.array([1.0, 0.0]), np.array([0.0, 1.0]), np.array([1.0, 1.0]))
    assert parallel is None


def test_scanline_hits():
    assert scanline_hits(SQUARE, 5.0).tolist() == pytest.approx([0.0, 10.0])
    # Running along the bottom edge still hits both vertical sides
    assert scanline_hits(SQUARE, 0.0).tolist() == pytest.approx([0.0, 10.0])
    assert scanline_hits(SQUARE, 11.0).size == 0
    assert scanline_hits(L_SHAPE, 7.0).tolist() == pytest.approx([0.0, 4.0])


# ---------------------------------------------------------------------------
# Inset
# ---------------------------------------------------------------------------

def test_inset_square():
    """Insetting a 10 x 10 square by 1 gives the 8 x 8 square inside it."""
    for ring in (SQUARE, SQUARE[::-1]):
        out = inset_polygon(ring, 1.0)
        assert len(out) == 4
        xs = [p[0] for p in out]
        ys = [p[1] for p in out]
        assert min(xs) == pytest.approx(1.0) and max(xs) == pytest.approx(9.0)
        assert min(ys) == pytest.approx(1.0) and max(ys) == pytest.approx(9.0)


def test_inset_zero_returns_input():
    assert inset_polygon(SQUARE, 0.0) == [tuple(p) for p in SQUARE.tolist()]


def test_inset_rejects_bad_input():
    assert inset_polygon(SQUARE, -1.0) == []
    assert inset_polygon(SQUARE[:2], 1.0) == []


@pytest.mark.parametrize("ring", [TRIANGLE, L_SHAPE])
def test_inset_stays_inside_by_distance(ring):
    d = 1.0
    out = np.array(inset_polygon(ring, d))
    assert len(out) == len(ring)
    assert all(point_in_polygon(tuple(p), ring) for p in out)
    assert distances_to_edges(out, ring).min() >= 0.99 * d


def test_inset_skips_repeated_vertices():
    ring = np.array([(0.0, 0.0), (10.0, 0.0), (10.0, 0.0), (10.0, 10.0), (0.0, 10.0), (0.0, 0.0)])
    assert len(inset_polygon(ring, 1.0)) == 4


def test_inset_boundary_in_feet(rectangle):
    """A 4 ft setback removes a 4 ft band from a 100 x 50 ft field."""
    inner = inset_boundary(rectangle, 4.0)
    assert len(inner) == 4
    assert polygon_area_sq_ft(inner) == pytest.approx(92.0 * 42.0, rel=1e-5)
    assert inset_boundary(rectangle, 0.0) == list(rectangle)
    assert inset_boundary(rectangle, -1.0) == []
