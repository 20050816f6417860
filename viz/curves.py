"""Curve and marker builders for the game viewer, spray chart and movement plot.

Everything here returns plain numbers in the viewer frame; the drawing layer
consumes them as-is. A pitch without usable tracking data simply contributes
nothing.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from analytics.trajectory import has_complete_fit, is_all_trajectory_na, landing_point, sample_fit
from config import (
    DEFAULT_HIT_COLOR,
    DEFAULT_ZONE_TIME,
    HIT_COLORS,
    HIT_CURVE_POINTS,
    HIT_MATRIX,
    PITCH_COEFFS_PER_AXIS,
    PITCH_COLORS,
    PITCH_CURVE_POINTS,
    PITCH_MATRIX,
)
from data.models import PitchEvent, to_float
from viz.geometry import plate_location_point, project, project_many

logger = logging.getLogger(__name__)

Point3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Curve:
    points: Tuple[Point3, ...]
    times: Tuple[float, ...]

    def __len__(self):
        return len(self.points)

    @property
    def start(self) -> Point3:
        return self.points[0]

    @property
    def end(self) -> Point3:
        return self.points[-1]

    @property
    def x(self) -> List[float]:
        return [p[0] for p in self.points]

    @property
    def y(self) -> List[float]:
        return [p[1] for p in self.points]

    @property
    def z(self) -> List[float]:
        return [p[2] for p in self.points]


def _check_points(n_points):
    if n_points < 2:
        raise ValueError(f"a curve needs at least 2 samples, got {n_points}")


def zone_time_for(pitch: PitchEvent) -> float:
    """Release-to-plate time, or the default when not recorded."""
    raw = to_float(pitch.pitching.zone_time) if pitch.pitching is not None else math.nan
    return raw if math.isfinite(raw) and raw > 0 else DEFAULT_ZONE_TIME


def hang_time_for(pitch: PitchEvent) -> Optional[float]:
    if pitch.hitting is None:
        return None
    hang = to_float(pitch.hitting.hang_time)
    if not math.isfinite(hang) or hang <= 0:
        return None
    return hang


def _as_points(arr: np.ndarray) -> Tuple[Point3, ...]:
    return tuple(tuple(row) for row in arr.tolist())


def build_pitch_curve(pitch: PitchEvent, n_points: int = PITCH_CURVE_POINTS) -> Optional[Curve]:
    """Release-to-plate flight, ``n_points`` samples evenly spaced in time."""
    _check_points(n_points)
    if pitch.pitching is None or not has_complete_fit(pitch.pitch_trajectory):
        logger.debug("No pitch curve for %s: missing pitch fit or metrics", pitch.pitch_uid)
        return None
    zone_time = zone_time_for(pitch)
    ts = np.arange(n_points) * zone_time / (n_points - 1)
    raw = sample_fit(pitch.pitch_trajectory, ts, n_terms=PITCH_COEFFS_PER_AXIS)
    projected = project_many(raw, PITCH_MATRIX)
    if not np.isfinite(projected).all():
        return None
    return Curve(points=_as_points(projected), times=tuple(ts.tolist()))


def build_hit_curve(pitch: PitchEvent, n_points: int = HIT_CURVE_POINTS,
                    pitch_curve: Optional[Curve] = None) -> Optional[Curve]:
    """Batted-ball flight that starts exactly where the pitch curve ends.

    The hit fit and the pitch fit are recorded with different origins, so the
    whole hit path is translated by (pitch end - projected contact point) and
    the pitch end itself is prepended. ``times`` counts from contact.
    """
    _check_points(n_points)
    if is_all_trajectory_na(pitch.hit_trajectory):
        return None
    hang_time = hang_time_for(pitch)
    if hang_time is None:
        return None
    if pitch_curve is None:
        pitch_curve = build_pitch_curve(pitch)
    if pitch_curve is None:
        return None

    contact = pitch.hitting.contact_position
    if not all(math.isfinite(c) for c in contact):
        logger.debug("No hit curve for %s: contact position missing", pitch.pitch_uid)
        return None
    pitch_end = pitch_curve.end
    contact_t = project(contact, HIT_MATRIX)
    shift = np.asarray(pitch_end) - np.asarray(contact_t)

    ts = hang_time * np.arange(1, n_points + 1) / n_points
    shifted = project_many(sample_fit(pitch.hit_trajectory, ts), HIT_MATRIX) + shift
    if not np.isfinite(shifted).all():
        logger.debug("No hit curve for %s: non-numeric hit coefficients", pitch.pitch_uid)
        return None
    return Curve(
        points=(pitch_end,) + _as_points(shifted),
        times=(0.0,) + tuple(ts.tolist()),
    )


def hit_color(play_result: Optional[str]) -> str:
    return HIT_COLORS.get(play_result or "Out", DEFAULT_HIT_COLOR)


def landing_points(pitches: Iterable[PitchEvent]) -> List[Dict]:
    """Spray-chart markers: where each tracked batted ball came down."""
    points = []
    for idx, p in enumerate(pitches):
        if p.hit_trajectory is None or is_all_trajectory_na(p.hit_trajectory):
            continue
        hang_time = hang_time_for(p)
        if hang_time is None:
            continue
        position = project(landing_point(p.hit_trajectory, hang_time), HIT_MATRIX)
        if not all(math.isfinite(v) for v in position):
            continue
        result = p.play_result or "Out"
        points.append({
            "position": list(position),
            "type": result,
            "color": hit_color(result),
            "key": p.pitch_uid or idx,
        })
    return points


def pitch_call_color(pitch_call: Optional[str]) -> str:
    if pitch_call in ("StrikeCalled", "StrikeSwinging"):
        return "red"
    if pitch_call == "BallCalled":
        return "blue"
    if pitch_call == "InPlay":
        return "green"
    return "white"


def plate_location_markers(pitches: Iterable[PitchEvent]) -> List[Dict]:
    """3D markers at the plate for each pitch with a recorded location."""
    markers = []
    for idx, p in enumerate(pitches):
        position = plate_location_point(p)
        if position is None:
            continue
        markers.append({
            "position": list(position),
            "color": pitch_call_color(p.pitch_call),
            "key": p.pitch_uid or idx,
        })
    return markers


def movement_points(pitches: Iterable[PitchEvent]) -> List[Dict]:
    """Horizontal break vs induced vertical break, one point per pitch."""
    out = []
    for idx, p in enumerate(pitches):
        if p.pitching is None:
            continue
        hb = to_float(p.pitching.horz_break)
        ivb = to_float(p.pitching.induced_vert_break)
        if not (math.isfinite(hb) and math.isfinite(ivb)):
            continue
        out.append({
            "x": hb,
            "y": ivb,
            "pitch_type": p.pitch_type,
            "color": PITCH_COLORS.get(p.pitch_type, DEFAULT_HIT_COLOR),
            "key": p.pitch_uid or idx,
        })
    return out
