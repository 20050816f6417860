"""Zone chart -- 9 inner zones plus 4 outside polygons, and per-zone rates."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Dict, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from config import (
    BATTED_BALL_TYPES,
    HIT_RESULTS,
    INNER_ZONES,
    OUTSIDE_ZONES,
    SACRIFICE_RESULTS,
    SWING_CALLS,
)
from data.hierarchy import final_rows, pitch_frame
from data.models import PitchEvent, to_float
from data.stats import fmt_fixed

logger = logging.getLogger(__name__)

ZoneId = Union[int, str]

ZONE_METRICS = ("Location%", "Whiff%", "Batting Average", "GB%", "FB%", "LD%")


@lru_cache(maxsize=1)
def zone_ids() -> Tuple[ZoneId, ...]:
    """Every zone in test order: inner 1..9, then bl, tl, tr, br."""
    return tuple(z[0] for z in INNER_ZONES) + tuple(z[0] for z in OUTSIDE_ZONES)


@lru_cache(maxsize=1)
def inner_zone_centers() -> Dict[int, Tuple[float, float]]:
    """Center of each inner zone in (PlateLocSide, PlateLocHeight) terms."""
    return {
        zid: (-(xr[0] + xr[1]) / 2, (yr[0] + yr[1]) / 2)
        for zid, xr, yr in INNER_ZONES
    }


def point_in_polygon(x, y, vertices: Sequence[Tuple[float, float]]):
    """Even-odd ray casting; ``x`` and ``y`` may be scalars or arrays."""
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    inside = np.zeros(np.broadcast(x, y).shape, dtype=bool)
    j = len(vertices) - 1
    for i in range(len(vertices)):
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        crosses = (yi > y) != (yj > y)
        if yj != yi:
            crosses &= x < (xj - xi) * (y - yi) / (yj - yi) + xi
        inside ^= crosses
        j = i
    return inside if inside.ndim else bool(inside)


def zone_series(df: pd.DataFrame) -> pd.Series:
    """Zone id per row of a pitch frame; None when missing or off the chart.

    The chart is drawn from the catcher's view, so side is negated. A point
    on a shared edge goes to the first zone tested.
    """
    x = -df["plate_loc_side"].to_numpy(dtype=float)
    y = df["plate_loc_height"].to_numpy(dtype=float)
    zones = np.full(len(df), None, dtype=object)
    open_ = np.isfinite(x) & np.isfinite(y)
    for zid, (xmin, xmax), (ymin, ymax) in INNER_ZONES:
        hit = open_ & (x >= xmin) & (x <= xmax) & (y >= ymin) & (y <= ymax)
        zones[hit] = zid
        open_ &= ~hit
    for zid, vertices in OUTSIDE_ZONES:
        hit = open_ & point_in_polygon(x, y, vertices)
        zones[hit] = zid
        open_ &= ~hit
    return pd.Series(zones, index=df.index, dtype=object)


def classify(plate_loc_side, plate_loc_height) -> Optional[ZoneId]:
    """Zone id for a single plate location, or None when missing or off the chart."""
    one = pd.DataFrame({"plate_loc_side": [to_float(plate_loc_side)],
                        "plate_loc_height": [to_float(plate_loc_height)]})
    return zone_series(one).iloc[0]


def classify_pitch(pitch: PitchEvent) -> Optional[ZoneId]:
    return classify(pitch.plate_loc_side, pitch.plate_loc_height)


def _zone_counts(df: pd.DataFrame) -> pd.DataFrame:
    """Per-zone counts for every zone id, zeros where a zone has no pitches."""
    call = df["pitch_call"]
    in_play = call == "InPlay"
    hit_type = df["tagged_hit_type"]
    df = df.assign(
        _zone=zone_series(df),
        _is_swing=call.isin(SWING_CALLS),
        _is_whiff=call == "StrikeSwinging",
        _gb=in_play & (hit_type == "GroundBall"),
        _fb=in_play & (hit_type == "FlyBall"),
        _ld=in_play & (hit_type == "LineDrive"),
        _bip=in_play & hit_type.isin(BATTED_BALL_TYPES),
        _hit=df["play_result"].isin(HIT_RESULTS),
        _walk=df["kor_bb"] == "Walk",
        _hbp=call == "HitByPitch",
        _sac=df["play_result"].isin(SACRIFICE_RESULTS),
    )
    located = df[df["_zone"].notna()]
    logger.debug("%d of %d pitches fall on the zone chart", len(located), len(df))
    agg = located.groupby("_zone", sort=False).agg(
        n=("_is_swing", "size"),
        swings=("_is_swing", "sum"),
        whiffs=("_is_whiff", "sum"),
        gb=("_gb", "sum"),
        fb=("_fb", "sum"),
        ld=("_ld", "sum"),
        bip=("_bip", "sum"),
        hits=("_hit", "sum"),
        walks=("_walk", "sum"),
        hbp=("_hbp", "sum"),
        sacs=("_sac", "sum"),
    )
    return agg.reindex(list(zone_ids()), fill_value=0).astype(int)


def _pct(num, den) -> str:
    return fmt_fixed(num / den * 100, 1) if den > 0 else "0.0"


def _batting_average(row) -> str:
    at_bats = row["n"] - row["walks"] - row["hbp"] - row["sacs"]
    return fmt_fixed(row["hits"] / at_bats, 3) if at_bats > 0 else "0.000"


_BATTED_BALL_METRICS = {"GB%": "gb", "FB%": "fb", "LD%": "ld"}


def compute_zone_stats(pitches, metric: str, final_pitches=None) -> Dict[ZoneId, str]:
    """Formatted ``metric`` for every zone.

    Location% is over all pitches given, including those off the chart.
    Batting Average is computed from ``final_pitches`` (derived from
    ``pitches`` when omitted); every other metric from ``pitches``.
    """
    if metric not in ZONE_METRICS:
        raise ValueError(f"Unknown zone metric {metric!r}; expected one of {ZONE_METRICS}")
    df = pitch_frame(pitches)

    if metric == "Batting Average":
        finals = final_rows(df) if final_pitches is None else pitch_frame(final_pitches)
        counts = _zone_counts(finals)
        return {zid: _batting_average(row) for zid, row in counts.iterrows()}

    counts = _zone_counts(df)
    if metric == "Location%":
        total = len(df)
        return {zid: _pct(row["n"], total) for zid, row in counts.iterrows()}
    if metric == "Whiff%":
        return {zid: _pct(row["whiffs"], row["swings"]) for zid, row in counts.iterrows()}
    column = _BATTED_BALL_METRICS[metric]
    return {zid: _pct(row[column], row["bip"]) for zid, row in counts.iterrows()}


def zone_grid(pitches, final_pitches=None) -> Dict[str, Dict[ZoneId, str]]:
    """Every zone metric at once: ``{metric: {zone_id: value}}``."""
    df = pitch_frame(pitches)
    finals = None if final_pitches is None else pitch_frame(final_pitches)
    return {metric: compute_zone_stats(df, metric, finals) for metric in ZONE_METRICS}
