"""Data loading -- DuckDB parquet reads, TrackMan frames and API rows to PitchEvent or a pitch frame."""

import logging
import os

import duckdb
import numpy as np
import pandas as pd

from config import HIT_COEFFS_PER_AXIS, PARQUET_PATH, PITCH_COEFFS_PER_AXIS
from data.hierarchy import pitch_frame
from data.models import HittingMetrics, PitchEvent, PitchingMetrics, TrajectoryCoefficients, to_date

logger = logging.getLogger(__name__)

_AXES = ("x", "y", "z")

# PitchingMetrics / HittingMetrics field -> TrackMan column
PITCHING_COLUMNS = {
    "rel_speed": "RelSpeed",
    "spin_rate": "SpinRate",
    "spin_axis": "SpinAxis",
    "induced_vert_break": "InducedVertBreak",
    "horz_break": "HorzBreak",
    "rel_height": "RelHeight",
    "rel_side": "RelSide",
    "extension": "Extension",
    "zone_time": "ZoneTime",
    "zone_speed": "ZoneSpeed",
}
HITTING_COLUMNS = {
    "exit_speed": "ExitSpeed",
    "angle": "Angle",
    "direction": "Direction",
    "bearing": "Bearing",
    "distance": "Distance",
    "hang_time": "HangTime",
    "contact_position_x": "ContactPositionX",
    "contact_position_y": "ContactPositionY",
    "contact_position_z": "ContactPositionZ",
}


# ──────────────────────────────────────────────
# DUCKDB
# ──────────────────────────────────────────────

def load_trackman_parquet(path=None, game_ids=None):
    """Read TrackMan rows from parquet into pandas, optionally for a set of games."""
    path = path or PARQUET_PATH
    if not os.path.exists(path):
        raise FileNotFoundError(f"Parquet file not found: {path}")
    con = duckdb.connect(database=":memory:")
    try:
        escaped = path.replace("'", "''")
        sql = f"""
            SELECT * FROM read_parquet('{escaped}')
            WHERE (PitchCall IS NULL OR PitchCall != 'Undefined')
        """
        params = []
        if game_ids:
            sql += f" AND GameID IN ({', '.join('?' for _ in game_ids)})"
            params.extend(str(g) for g in game_ids)
        data = con.execute(sql, params).fetchdf()
    finally:
        con.close()
    logger.info("Loaded %d TrackMan rows from %s", len(data), path)
    return data


# ──────────────────────────────────────────────
# SCALAR HELPERS
# ──────────────────────────────────────────────

def _missing(v):
    if v is None:
        return True
    try:
        return bool(pd.isna(v))
    except (TypeError, ValueError):
        return False


def _clean(v):
    """Missing -> None; numpy scalars -> Python scalars."""
    if _missing(v):
        return None
    if isinstance(v, np.generic):
        return v.item()
    return v


def _to_int(v):
    v = _clean(v)
    if v is None:
        return None
    try:
        return int(float(v))
    except (TypeError, ValueError):
        return None


def _to_str(v):
    v = _clean(v)
    if v is None:
        return None
    s = str(v).strip()
    return s or None


def normalize_hand(v):
    """Left/Right; 'L'/'R' abbreviations expanded, anything else None."""
    s = _to_str(v)
    s = {"L": "Left", "R": "Right"}.get(s, s)
    return s if s in ("Left", "Right") else None


def _normalize_half(v):
    s = _to_str(v)
    if s is None:
        return None
    return "Top" if s.lower() == "top" else "Bottom" if s.lower() == "bottom" else s


def _metrics(cls, getter, columns):
    values = {field: _clean(getter(col)) for field, col in columns.items()}
    if all(v is None for v in values.values()):
        return None
    return cls(**values)


def _trajectory(getter, key_fmt, n):
    axes = [tuple(_clean(getter(key_fmt.format(axis=a, AXIS=a.upper(), i=i))) for i in range(n))
            for a in _AXES]
    if all(c is None for axis in axes for c in axis):
        return None
    return TrajectoryCoefficients(*axes)


# ──────────────────────────────────────────────
# TRACKMAN DATAFRAME
# ──────────────────────────────────────────────

def _row_to_pitch(row):
    get = row.get
    game_id = _to_str(get("GameID"))
    if game_id is None:
        return None
    return PitchEvent(
        pitch_uid=_to_str(get("PitchUID")),
        game_id=game_id,
        date=to_date(get("Date")),
        inning=_to_int(get("Inning")) or 0,
        top_bottom=_normalize_half(get("Top/Bottom", get("TopBottom"))) or "Top",
        pa_of_inning=_to_int(get("PAofInning")) or 0,
        pitch_of_pa=_to_int(get("PitchofPA")) or 0,
        pitcher_id=_to_str(get("PitcherId")),
        batter_id=_to_str(get("BatterId")),
        batter_side=normalize_hand(get("BatterSide")),
        pitcher_throws=normalize_hand(get("PitcherThrows")),
        balls=_to_int(get("Balls")),
        strikes=_to_int(get("Strikes")),
        outs=_to_int(get("Outs")),
        outs_on_play=_to_int(get("OutsOnPlay")),
        pitch_call=_to_str(get("PitchCall")),
        play_result=_to_str(get("PlayResult")),
        kor_bb=_to_str(get("KorBB")),
        tagged_hit_type=_to_str(get("TaggedHitType")),
        pitch_type=_to_str(get("AutoPitchType")) or _to_str(get("TaggedPitchType")),
        plate_loc_side=_clean(get("PlateLocSide")),
        plate_loc_height=_clean(get("PlateLocHeight")),
        pitching=_metrics(PitchingMetrics, get, PITCHING_COLUMNS),
        hitting=_metrics(HittingMetrics, get, HITTING_COLUMNS),
        hit_trajectory=_trajectory(get, "HitTrajectory{AXIS}c{i}", HIT_COEFFS_PER_AXIS),
        pitch_trajectory=_trajectory(get, "PitchTrajectory{AXIS}c{i}", PITCH_COEFFS_PER_AXIS),
    )


def pitches_from_frame(df):
    """Convert a TrackMan DataFrame (CSV/parquet column names) into PitchEvents.

    Rows without a GameID are skipped.
    """
    if df is None or df.empty:
        return []
    pitches = []
    skipped = 0
    for row in df.to_dict("records"):
        pitch = _row_to_pitch(row)
        if pitch is None:
            skipped += 1
            continue
        pitches.append(pitch)
    if skipped:
        logger.debug("Skipped %d rows with no GameID", skipped)
    return pitches


# TrackMan column -> pitch frame column, for the plain event fields
FRAME_COLUMNS_FROM_TRACKMAN = {
    "PitchUID": "pitch_uid",
    "GameID": "game_id",
    "Date": "date",
    "Inning": "inning",
    "PAofInning": "pa_of_inning",
    "PitchofPA": "pitch_of_pa",
    "PitcherId": "pitcher_id",
    "BatterId": "batter_id",
    "BatterSide": "batter_side",
    "PitcherThrows": "pitcher_throws",
    "Balls": "balls",
    "Strikes": "strikes",
    "Outs": "outs",
    "OutsOnPlay": "outs_on_play",
    "PitchCall": "pitch_call",
    "PlayResult": "play_result",
    "KorBB": "kor_bb",
    "TaggedHitType": "tagged_hit_type",
    "PlateLocSide": "plate_loc_side",
    "PlateLocHeight": "plate_loc_height",
}
_TEXT_FIELDS = ["pitch_uid", "pitcher_id", "batter_id", "pitch_call", "play_result",
                "kor_bb", "tagged_hit_type"]


def _column(df, name):
    if name in df.columns:
        return df[name]
    return pd.Series(None, index=df.index, dtype=object)


def trackman_frame(df):
    """TrackMan DataFrame -> pitch frame (see ``data.hierarchy.pitch_frame``).

    Same cleaning as ``pitches_from_frame``, column by column: hands and
    halves are normalized, blank text becomes None, AutoPitchType falls back
    to TaggedPitchType, and rows without a GameID are dropped.
    """
    if df is None:
        df = pd.DataFrame()
    game_ids = _column(df, "GameID").map(_to_str)
    src = df[game_ids.notna()]
    if len(src) < len(df):
        logger.debug("Skipped %d rows with no GameID", len(df) - len(src))

    out = pd.DataFrame(index=src.index)
    for col, name in FRAME_COLUMNS_FROM_TRACKMAN.items():
        out[name] = _column(src, col)
    for name, col in {**PITCHING_COLUMNS, **HITTING_COLUMNS}.items():
        out[name] = _column(src, col)

    out["game_id"] = game_ids[src.index]
    for name in _TEXT_FIELDS:
        out[name] = out[name].map(_to_str)
    for name in ("inning", "pa_of_inning", "pitch_of_pa"):
        out[name] = out[name].map(_to_int).fillna(0).astype(int)
    for name in ("batter_side", "pitcher_throws"):
        out[name] = out[name].map(normalize_hand)
    half = _column(src, "Top/Bottom" if "Top/Bottom" in src.columns else "TopBottom")
    out["top_bottom"] = half.map(_normalize_half).fillna("Top")
    out["pitch_type"] = (_column(src, "AutoPitchType").map(_to_str)
                         .fillna(_column(src, "TaggedPitchType").map(_to_str)))
    return pitch_frame(out.reset_index(drop=True))


# ──────────────────────────────────────────────
# API / DATABASE ROWS
# ──────────────────────────────────────────────

def _nested(record, key):
    value = record.get(key)
    # One-to-one joins sometimes come back as a single-element list.
    if isinstance(value, list):
        value = value[0] if value else None
    return value if isinstance(value, dict) else {}


def pitch_from_record(record):
    """Convert one snake_case pitch record (with nested metric and trajectory
    objects, as returned by the games endpoint) into a PitchEvent, or None
    when it has no game id."""
    game_id = _to_str(record.get("game_id"))
    if game_id is None:
        logger.debug("Skipping pitch %s with no game_id", record.get("pitch_uid"))
        return None
    pm = _nested(record, "pitching_metrics")
    hm = _nested(record, "hitting_metrics")
    ht = _nested(record, "hit_trajectory")
    pt = _nested(record, "pitch_trajectory")
    batter = _nested(record, "batter")
    pitcher = _nested(record, "pitcher")

    return PitchEvent(
        pitch_uid=_to_str(record.get("pitch_uid")),
        game_id=game_id,
        date=to_date(record.get("date")),
        inning=_to_int(record.get("inning")) or 0,
        top_bottom=_normalize_half(record.get("top_bottom")) or "Top",
        pa_of_inning=_to_int(record.get("pa_of_inning")) or 0,
        pitch_of_pa=_to_int(record.get("pitch_of_pa")) or 0,
        pitcher_id=_to_str(record.get("pitcher_id")),
        batter_id=_to_str(record.get("batter_id")),
        batter_side=normalize_hand(batter.get("side", record.get("batter_side"))),
        pitcher_throws=normalize_hand(pitcher.get("throws", record.get("pitcher_throws"))),
        balls=_to_int(record.get("balls")),
        strikes=_to_int(record.get("strikes")),
        outs=_to_int(record.get("outs")),
        outs_on_play=_to_int(record.get("outs_on_play")),
        pitch_call=_to_str(record.get("pitch_call")),
        play_result=_to_str(record.get("play_result")),
        kor_bb=_to_str(record.get("kor_bb")),
        tagged_hit_type=_to_str(record.get("tagged_hit_type")),
        pitch_type=_to_str(record.get("auto_pitch_type")) or _to_str(record.get("pitch_type")),
        plate_loc_side=_clean(pm.get("plate_loc_side", record.get("plate_loc_side"))),
        plate_loc_height=_clean(pm.get("plate_loc_height", record.get("plate_loc_height"))),
        pitching=_metrics(PitchingMetrics, pm.get, {f: f for f in PITCHING_COLUMNS}) if pm else None,
        hitting=_metrics(HittingMetrics, hm.get, {f: f for f in HITTING_COLUMNS}) if hm else None,
        hit_trajectory=_trajectory(ht.get, "hit_trajectory_{axis}c{i}", HIT_COEFFS_PER_AXIS) if ht else None,
        pitch_trajectory=_trajectory(pt.get, "pitch_trajectory_{axis}c{i}", PITCH_COEFFS_PER_AXIS) if pt else None,
    )


def pitches_from_records(records):
    pitches = []
    for record in records:
        pitch = pitch_from_record(record)
        if pitch is not None:
            pitches.append(pitch)
    return pitches
