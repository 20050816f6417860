import numpy as np
import pytest

from config import HIT_MATRIX, PITCH_MATRIX, ZONE_MATRIX
from viz.geometry import (
    plate_location_point,
    project,
    project_hit,
    project_many,
    project_pitch,
    strike_zone_outline,
)


def test_project_applies_translation_column():
    matrix = ((1, 0, 0, 10), (0, 2, 0, 0), (0, 0, 1, -1))
    assert project((1.0, 2.0, 3.0), matrix) == (11.0, 4.0, 2.0)


def test_hit_matrix_axis_mapping():
    x, y, z = project_hit((10.0, 4.0, 2.0))
    assert x == pytest.approx(0.254 * 2.0)
    assert y == pytest.approx(0.254 * 4.0 + 0.3)
    assert z == pytest.approx(-0.253578 * 10.0 + 38.0)


def test_pitch_matrix_axis_mapping():
    x, y, z = project_pitch((10.0, 4.0, 2.0))
    assert x == pytest.approx(0.254 * 2.0)
    assert z == pytest.approx(-0.33 * 10.0 + 38.47)


@pytest.mark.parametrize("matrix", [HIT_MATRIX, PITCH_MATRIX, ZONE_MATRIX])
def test_project_many_matches_project(matrix):
    pts = np.array([[0.0, 0.0, 0.0], [1.0, -2.0, 3.5], [55.0, 0.5, 6.0]])
    out = project_many(pts, matrix)
    assert out.shape == (3, 3)
    for row, p in zip(out, pts):
        assert tuple(row) == pytest.approx(project(p, matrix))


def test_plate_location_point(make_pitch):
    x, y, z = plate_location_point(make_pitch(plate_loc_side=0.5, plate_loc_height=2.0))
    assert x == pytest.approx(0.127)
    assert y == pytest.approx(0.808)
    assert z == pytest.approx(38.0)


@pytest.mark.parametrize("side,height", [(None, 2.0), (0.1, None), ("NA", 2.0), (float("nan"), 1.0)])
def test_plate_location_missing(make_pitch, side, height):
    assert plate_location_point(make_pitch(plate_loc_side=side, plate_loc_height=height)) is None


def test_strike_zone_outline_is_closed():
    outline = strike_zone_outline()
    assert len(outline) == 5
    assert outline[0] == outline[-1]
    xs = sorted({round(p[0], 6) for p in outline})
    assert xs == [pytest.approx(-0.83 * 0.254), pytest.approx(0.83 * 0.254)]
