"""Affine projection from the TrackMan sensor frame into the viewer frame."""
from __future__ import annotations

from functools import lru_cache
from typing import Optional, Sequence, Tuple

import numpy as np

from config import HIT_MATRIX, PITCH_MATRIX, ZONE_MATRIX, ZONE_SIDE, ZONE_HEIGHT_BOT, ZONE_HEIGHT_TOP
from data.models import PitchEvent, to_float

Point3 = Tuple[float, float, float]


def project(point: Sequence[float], matrix: Sequence[Sequence[float]]) -> Point3:
    """out[r] = sum_c matrix[r][c] * in[c] + matrix[r][3]."""
    x, y, z = point
    return tuple(row[0] * x + row[1] * y + row[2] * z + row[3] for row in matrix)


@lru_cache(maxsize=None)
def _as_array(matrix) -> np.ndarray:
    return np.asarray(matrix, dtype=float)


def project_many(points, matrix) -> np.ndarray:
    """Project an (n, 3) array of points; returns an (n, 3) array."""
    pts = np.asarray(points, dtype=float).reshape(-1, 3)
    m = _as_array(tuple(tuple(r) for r in matrix))
    return pts @ m[:, :3].T + m[:, 3]


def project_hit(point: Sequence[float]) -> Point3:
    return project(point, HIT_MATRIX)


def project_pitch(point: Sequence[float]) -> Point3:
    return project(point, PITCH_MATRIX)


def project_zone(point: Sequence[float]) -> Point3:
    return project(point, ZONE_MATRIX)


def plate_location_point(pitch: PitchEvent) -> Optional[Point3]:
    """Where the pitch crossed the plate, in the viewer frame."""
    side = to_float(pitch.plate_loc_side)
    height = to_float(pitch.plate_loc_height)
    if not (np.isfinite(side) and np.isfinite(height)):
        return None
    return project_zone((side, 0.0, height))


@lru_cache(maxsize=1)
def strike_zone_outline() -> Tuple[Point3, ...]:
    """Closed loop around the rulebook zone at the front of the plate."""
    corners = [
        (-ZONE_SIDE, 0.0, ZONE_HEIGHT_BOT),
        (ZONE_SIDE, 0.0, ZONE_HEIGHT_BOT),
        (ZONE_SIDE, 0.0, ZONE_HEIGHT_TOP),
        (-ZONE_SIDE, 0.0, ZONE_HEIGHT_TOP),
        (-ZONE_SIDE, 0.0, ZONE_HEIGHT_BOT),
    ]
    return tuple(project_zone(c) for c in corners)
