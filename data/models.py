from __future__ import annotations

import datetime
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

import pandas as pd

from config import NA_TOKENS

UNKNOWN_SEASON = "Unknown Season"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def leading_int(value: Any) -> Optional[int]:
    """Integer prefix of a value's text ('2 ' -> 2, '1.5' -> 1), or None."""
    if value is None:
        return None
    if isinstance(value, int):
        return value
    m = _LEADING_INT.match(str(value))
    return int(m.group(1)) if m else None


def to_date(value: Any) -> Optional[datetime.date]:
    if value is None or (isinstance(value, datetime.date) and not isinstance(value, datetime.datetime)):
        return value
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    return ts.date()


def season_label(date: Optional[datetime.date]) -> str:
    """Fall practice through Feb 12 is pre-season and spans two years."""
    if date is None:
        return UNKNOWN_SEASON
    if date.month >= 8:
        return f"{date.year}-{date.year + 1} Pre-season"
    if date.month == 1 or (date.month == 2 and date.day <= 12):
        return f"{date.year - 1}-{date.year} Pre-season"
    return f"{date.year} Regular Season"


def to_float(value: Any) -> float:
    """Coerce a recorded value to float; anything unreadable becomes NaN."""
    if value is None:
        return math.nan
    if isinstance(value, str):
        value = value.strip()
        if value in NA_TOKENS:
            return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def is_finite(value: Any) -> bool:
    return math.isfinite(to_float(value))


@dataclass(frozen=True)
class TrajectoryCoefficients:
    """Per-axis polynomial coefficients in time, lowest order first.

    Values are kept as recorded (numbers, numeric strings, None or 'NA') so
    that an all-NA set can be told apart from a set with a few gaps.
    """
    x: Tuple[Any, ...]
    y: Tuple[Any, ...]
    z: Tuple[Any, ...]

    @property
    def axes(self) -> Tuple[Tuple[Any, ...], ...]:
        return (self.x, self.y, self.z)

    def as_floats(self) -> Tuple[Tuple[float, ...], ...]:
        return tuple(tuple(to_float(c) for c in axis) for axis in self.axes)


@dataclass(frozen=True)
class PitchingMetrics:
    rel_speed: Optional[float] = None
    spin_rate: Optional[float] = None
    spin_axis: Optional[float] = None
    induced_vert_break: Optional[float] = None
    horz_break: Optional[float] = None
    rel_height: Optional[float] = None
    rel_side: Optional[float] = None
    extension: Optional[float] = None
    zone_time: Optional[float] = None
    zone_speed: Optional[float] = None


@dataclass(frozen=True)
class HittingMetrics:
    exit_speed: Optional[float] = None
    angle: Optional[float] = None
    direction: Optional[float] = None
    bearing: Optional[float] = None
    distance: Optional[float] = None
    hang_time: Optional[float] = None
    contact_position_x: Optional[float] = None
    contact_position_y: Optional[float] = None
    contact_position_z: Optional[float] = None

    @property
    def contact_position(self) -> Tuple[float, float, float]:
        return (
            to_float(self.contact_position_x),
            to_float(self.contact_position_y),
            to_float(self.contact_position_z),
        )


@dataclass(frozen=True)
class PitchEvent:
    """One recorded pitch. Read-only once imported."""
    pitch_uid: Optional[str]
    game_id: str
    inning: int
    top_bottom: str
    pa_of_inning: int
    pitch_of_pa: int
    date: Optional[datetime.date] = None
    pitcher_id: Optional[str] = None
    batter_id: Optional[str] = None
    batter_side: Optional[str] = None
    pitcher_throws: Optional[str] = None
    balls: Optional[int] = None
    strikes: Optional[int] = None
    outs: Optional[int] = None
    outs_on_play: Optional[int] = None
    pitch_call: Optional[str] = None
    play_result: Optional[str] = None
    kor_bb: Optional[str] = None
    tagged_hit_type: Optional[str] = None
    pitch_type: Optional[str] = None
    plate_loc_side: Optional[float] = None
    plate_loc_height: Optional[float] = None
    pitching: Optional[PitchingMetrics] = None
    hitting: Optional[HittingMetrics] = None
    hit_trajectory: Optional[TrajectoryCoefficients] = None
    pitch_trajectory: Optional[TrajectoryCoefficients] = None

    @property
    def season(self) -> str:
        return season_label(self.date)

    @property
    def has_location(self) -> bool:
        return is_finite(self.plate_loc_side) and is_finite(self.plate_loc_height)


class PlayerRole(str, Enum):
    PITCHER = "pitcher"
    HITTER = "hitter"
