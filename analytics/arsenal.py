"""Pitch arsenal summary and per-game metric trends, by pitch type."""
from __future__ import annotations

import datetime
import logging
import math

import numpy as np
import pandas as pd

from config import SWING_CALLS, in_zone_mask
from data.hierarchy import PITCHING_FIELDS, pitch_frame

logger = logging.getLogger(__name__)

# Columns a pitch needs before it counts toward usage and the averages.
ARSENAL_REQUIRED = ["rel_speed", "induced_vert_break", "horz_break", "spin_rate", "spin_axis"]

# Output column -> averaged pitch frame column
ARSENAL_AVERAGES = {
    "velocity": "rel_speed",
    "ivb": "induced_vert_break",
    "hb": "horz_break",
    "spin_rate": "spin_rate",
    "spin_axis": "spin_axis",
    "rel_height": "rel_height",
    "rel_side": "rel_side",
    "extension": "extension",
}

# Release point and extension are sometimes untracked; they average in as 0.
_ZERO_FILLED = ("rel_height", "rel_side", "extension")

ARSENAL_COLUMNS = (["pitch_type", "count", "usage_pct"] + list(ARSENAL_AVERAGES)
                   + ["whiff_pct", "zone_pct", "chase_pct"])

TREND_BY = ("game", "date")


def _rate(num, den) -> np.ndarray:
    num = np.asarray(num, dtype=float)
    den = np.asarray(den, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        return np.where(den > 0, num / den * 100, 0.0)


def pitch_arsenal(pitches) -> pd.DataFrame:
    """One row per pitch type, most-thrown first.

    Usage and the averages cover pitches with velocity, both breaks, spin
    rate and spin axis recorded. Whiff% (per swing), Zone% and Chase% (per
    out-of-zone pitch) cover every typed pitch with any pitching metric;
    a rate whose denominator is 0 reads 0.
    """
    df = pitch_frame(pitches)
    typed = df[df["pitch_type"].notna() & df[PITCHING_FIELDS].notna().any(axis=1)]
    valid = typed[typed[ARSENAL_REQUIRED].notna().all(axis=1)]
    if valid.empty:
        return pd.DataFrame(columns=ARSENAL_COLUMNS)

    valid = valid.assign(**{col: valid[col].fillna(0.0) for col in _ZERO_FILLED})
    agg = valid.groupby("pitch_type", sort=False).agg(
        count=("rel_speed", "size"),
        **{name: (col, "mean") for name, col in ARSENAL_AVERAGES.items()},
    )
    agg.insert(1, "usage_pct", agg["count"] / len(valid) * 100)

    typed = typed.assign(
        _is_swing=typed["pitch_call"].isin(SWING_CALLS),
        _is_whiff=typed["pitch_call"] == "StrikeSwinging",
        _in_zone=in_zone_mask(typed),
    )
    typed["_out_zone"] = ~typed["_in_zone"]
    typed["_oz_swing"] = typed["_out_zone"] & typed["_is_swing"]
    rates = typed.groupby("pitch_type", sort=False).agg(
        n_pitches=("_is_swing", "size"),
        swings=("_is_swing", "sum"),
        whiffs=("_is_whiff", "sum"),
        iz_count=("_in_zone", "sum"),
        oz_count=("_out_zone", "sum"),
        oz_swings=("_oz_swing", "sum"),
    ).reindex(agg.index, fill_value=0)
    agg["whiff_pct"] = _rate(rates["whiffs"], rates["swings"])
    agg["zone_pct"] = _rate(rates["iz_count"], rates["n_pitches"])
    agg["chase_pct"] = _rate(rates["oz_swings"], rates["oz_count"])

    agg = agg.sort_values("count", ascending=False, kind="stable").reset_index()
    logger.debug("Arsenal: %d pitch types over %d pitches", len(agg), len(valid))
    return agg[ARSENAL_COLUMNS]


def _earliest(dates: pd.Series):
    dates = dates.dropna()
    return min(dates) if len(dates) else None


def _date_order(d) -> float:
    return d.toordinal() if isinstance(d, datetime.date) else math.inf


def metric_trend(pitches, metric: str, by: str = "game") -> pd.DataFrame:
    """Average ``metric`` per pitch type for each game (or game date), earliest first.

    ``metric`` is a pitching metric column such as ``rel_speed`` or
    ``spin_rate``. Pitches without the metric are left out and untyped
    pitches are grouped as "Other". Averages are rounded to 2 decimals and
    come with the number of pitches behind them. A game sits at its earliest
    date; undated games sort last, and by date they are dropped.
    """
    if metric not in PITCHING_FIELDS:
        raise ValueError(f"Unknown pitching metric {metric!r}; expected one of {PITCHING_FIELDS}")
    if by not in TREND_BY:
        raise ValueError(f"Trend must be by one of {TREND_BY}, got {by!r}")

    df = pitch_frame(pitches)
    df = df[df[metric].notna()]
    df = df.assign(pitch_type=df["pitch_type"].fillna("Other"))
    if by == "game":
        game_dates = df.groupby("game_id")["date"].agg(_earliest)
        df = df.assign(date=df["game_id"].map(game_dates))
        keys = ["game_id", "date"]
    else:
        df = df[df["date"].notna()]
        keys = ["date"]
    if df.empty:
        return pd.DataFrame(columns=keys + ["pitch_type", "value", "count"])

    trend = df.groupby(keys + ["pitch_type"], sort=False, dropna=False).agg(
        value=(metric, "mean"),
        count=(metric, "size"),
    ).reset_index()
    trend["value"] = trend["value"].round(2)
    trend = (trend.assign(_order=trend["date"].map(_date_order))
             .sort_values("_order", kind="stable")
             .drop(columns="_order"))
    return trend.reset_index(drop=True)
