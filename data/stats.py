"""Player stat line -- counting stats, rate stats and plate discipline from TrackMan pitches.

Everything here runs on the flat pitch frame (see ``data.hierarchy.pitch_frame``);
callers may pass a frame, a pitch sequence or a list of Season.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from config import (
    BALL_CALLS,
    CONTACT_CALLS,
    HIT_RESULTS,
    OUT_CALLS,
    SACRIFICE_RESULTS,
    STRIKE_CALLS,
    SWING_CALLS,
    TOTAL_BASES,
    ZONE_HEIGHT_BOT,
    ZONE_HEIGHT_TOP,
    ZONE_SIDE,
    in_zone_mask,
)
from data.hierarchy import final_rows, pa_ids, pitch_frame, player_mask
from data.models import PitchEvent, PlayerRole, leading_int, to_float

logger = logging.getLogger(__name__)

__all__ = [
    "PlayerRole", "PlayerStats", "compute_player_stats", "compute_game_log",
    "display_innings_pitched", "baseball_to_decimal_ip", "innings_pitched",
    "in_rulebook_zone", "fmt_fixed",
]


# ──────────────────────────────────────────────
# FORMATTING
# ──────────────────────────────────────────────

def fmt_fixed(value: float, decimals: int) -> str:
    """Fixed-decimal string, halves rounded away from zero on the exact binary value."""
    quantum = Decimal(1).scaleb(-decimals)
    return str(Decimal(float(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def _ratio(num, den, decimals=3) -> str:
    return fmt_fixed(num / den, decimals) if den > 0 else fmt_fixed(0, decimals)


def _pct(num, den) -> str:
    return fmt_fixed(num / den * 100, 1) if den > 0 else "0.0"


def display_innings_pitched(ip) -> str:
    """Thirds to box-score notation: 5.333 -> '5.1', 5.667 -> '5.2'."""
    ip = to_float(ip)
    if math.isnan(ip):
        return "0.0"
    whole = math.floor(ip)
    tenths = math.floor((ip - whole) * 10 + 0.5)
    if tenths == 10:
        whole, tenths = whole + 1, 0
    if tenths == 3:
        tenths = 1
    elif tenths == 7:
        tenths = 2
    return f"{whole}.{tenths}"


def baseball_to_decimal_ip(baseball_ip: str) -> float:
    """Inverse of ``display_innings_pitched``: '5.1' -> 5.3, '5.2' -> 5.7."""
    parts = str(baseball_ip).split(".")
    if len(parts) != 2:
        value = to_float(baseball_ip)
        return 0.0 if math.isnan(value) else value
    whole = leading_int(parts[0]) or 0
    digit = leading_int(parts[1]) or 0
    if digit == 1:
        return whole + 0.3
    if digit == 2:
        return whole + 0.7
    return whole + digit * 0.1


# ──────────────────────────────────────────────
# PREDICATES
# ──────────────────────────────────────────────

def in_rulebook_zone(pitch: PitchEvent) -> bool:
    """Single-pitch form of ``config.in_zone_mask``; no location counts as outside."""
    side = to_float(pitch.plate_loc_side)
    height = to_float(pitch.plate_loc_height)
    if math.isnan(side) or math.isnan(height):
        return False
    return -ZONE_SIDE <= side <= ZONE_SIDE and ZONE_HEIGHT_BOT <= height <= ZONE_HEIGHT_TOP


def _produces_outs(df: pd.DataFrame) -> pd.Series:
    return ((df["kor_bb"] == "Strikeout")
            | df["play_result"].isin(SACRIFICE_RESULTS)
            | df["pitch_call"].isin(OUT_CALLS))


def innings_pitched(finals, by_plate_appearance: bool = False) -> float:
    """Outs recorded / 3 over out-producing final pitches.

    Each inning (or plate appearance, when situational filters have broken
    innings apart) contributes max(outs) - min(outs), plus one if its last
    pitch was a strikeout, plus that pitch's outs_on_play. Missing out counts
    read as zero.
    """
    df = pitch_frame(finals)
    df = df[_produces_outs(df)]
    if df.empty:
        return 0.0
    if by_plate_appearance:
        key = pa_ids(df)
    else:
        key = df["game_id"].astype(str) + "_" + df["inning"].astype(str) + "_" + df["top_bottom"].astype(str)
    df = df.assign(
        _key=key,
        _outs=df["outs"].fillna(0),
        _k=(df["kor_bb"] == "Strikeout").astype(int),
        _on_play=df["outs_on_play"].fillna(0),
    )
    agg = df.groupby("_key", sort=False).agg(
        hi=("_outs", "max"),
        lo=("_outs", "min"),
        last_k=("_k", "last"),
        last_on_play=("_on_play", "last"),
    )
    total_outs = (agg["hi"] - agg["lo"] + agg["last_k"] + agg["last_on_play"]).sum()
    return float(total_outs) / 3


# ──────────────────────────────────────────────
# STAT LINE
# ──────────────────────────────────────────────

@dataclass
class PlayerStats:
    role: PlayerRole
    games: int
    plate_appearances: int
    at_bats: int
    hits: int
    singles: int
    doubles: int
    triples: int
    home_runs: int
    walks: int
    hit_by_pitch: int
    strikeouts: int
    sacrifices: int
    k_pct: str
    bb_pct: str
    k_bb_pct: str
    batting_average: str
    babip: str
    # Batted ball
    gb_pct: str
    fb_pct: str
    ld_pct: str
    hr_per_fb: str
    gb_fb_ratio: str
    pull_pct: str
    cent_pct: str
    oppo_pct: str
    # Plate discipline
    strike_pct: str
    ball_pct: str
    chase_pct: str
    z_swing_pct: str
    swing_pct: str
    o_contact_pct: str
    z_contact_pct: str
    contact_pct: str
    zone_pct: str
    whiff_pct: str
    # Pitcher only
    innings_pitched: Optional[float] = None
    whip: Optional[str] = None
    # Hitter only
    on_base_pct: Optional[str] = None
    slugging_pct: Optional[str] = None
    ops: Optional[str] = None

    @property
    def innings_pitched_display(self) -> Optional[str]:
        if self.innings_pitched is None:
            return None
        return display_innings_pitched(self.innings_pitched)

    def as_dict(self) -> Dict[str, object]:
        """Display-name keyed stat line; stats the role does not carry are left out."""
        out = {}
        for name, attr in _DISPLAY_NAMES:
            value = self.innings_pitched_display if attr == "innings_pitched" else getattr(self, attr)
            if value is not None:
                out[name] = value
        return out


_DISPLAY_NAMES = [
    ("G", "games"), ("PA", "plate_appearances"), ("IP", "innings_pitched"),
    ("AB", "at_bats"), ("H", "hits"), ("1B", "singles"), ("2B", "doubles"),
    ("3B", "triples"), ("HR", "home_runs"), ("BB", "walks"), ("HBP", "hit_by_pitch"),
    ("SO", "strikeouts"), ("SAC", "sacrifices"),
    ("K%", "k_pct"), ("BB%", "bb_pct"), ("K-BB%", "k_bb_pct"),
    ("BA", "batting_average"), ("OBP", "on_base_pct"), ("SLG", "slugging_pct"),
    ("OPS", "ops"), ("WHIP", "whip"), ("BABIP", "babip"),
    ("GB/FB", "gb_fb_ratio"), ("LD%", "ld_pct"), ("GB%", "gb_pct"), ("FB%", "fb_pct"),
    ("HR/FB", "hr_per_fb"), ("Pull%", "pull_pct"), ("Cent%", "cent_pct"), ("Oppo%", "oppo_pct"),
    ("Strike%", "strike_pct"), ("Ball%", "ball_pct"), ("Chase%", "chase_pct"),
    ("Z-Swing%", "z_swing_pct"), ("Swing%", "swing_pct"), ("O-Contact%", "o_contact_pct"),
    ("Z-Contact%", "z_contact_pct"), ("Contact%", "contact_pct"), ("Zone%", "zone_pct"),
    ("Whiff%", "whiff_pct"),
]


def _count(mask: pd.Series) -> int:
    return int(mask.sum())


def _outcome_counts(finals: pd.DataFrame) -> Dict[str, int]:
    results = finals["play_result"]
    c = {
        "PA": int(pa_ids(finals).nunique()),
        "H": _count(results.isin(HIT_RESULTS)),
        "1B": _count(results == "Single"),
        "2B": _count(results == "Double"),
        "3B": _count(results == "Triple"),
        "HR": _count(results == "HomeRun"),
        "BB": _count(finals["kor_bb"] == "Walk"),
        "HBP": _count(finals["pitch_call"] == "HitByPitch"),
        "SO": _count(finals["kor_bb"] == "Strikeout"),
        "SAC": _count(results.isin(SACRIFICE_RESULTS)),
    }
    c["AB"] = c["PA"] - c["BB"] - c["HBP"] - c["SAC"]
    return c


def _batted_ball(df: pd.DataFrame, home_runs: int) -> Dict[str, str]:
    in_play = df[df["pitch_call"] == "InPlay"]
    hit_type = in_play["tagged_hit_type"]
    gb = _count(hit_type == "GroundBall")
    fb = _count(hit_type == "FlyBall")
    ld = _count(hit_type == "LineDrive")
    total = gb + fb + ld

    side = in_play["batter_side"]
    known = in_play["bearing"].notna() & side.isin(["Right", "Left"])
    # Left-handed hitters pull to the positive side.
    bearing = pd.Series(np.where(side == "Right", in_play["bearing"], -in_play["bearing"]),
                        index=in_play.index)
    pull = known & bearing.between(-45, -15)
    cent = known & ~pull & bearing.between(-15, 15)
    oppo = known & ~pull & ~cent & bearing.between(15, 45)
    directional = _count(pull) + _count(cent) + _count(oppo)

    return {
        "gb_pct": _pct(gb, total),
        "fb_pct": _pct(fb, total),
        "ld_pct": _pct(ld, total),
        "hr_per_fb": _ratio(home_runs, fb, 3),
        "gb_fb_ratio": _ratio(gb, fb, 2),
        "pull_pct": _pct(_count(pull), directional),
        "cent_pct": _pct(_count(cent), directional),
        "oppo_pct": _pct(_count(oppo), directional),
    }


def _plate_discipline(df: pd.DataFrame) -> Dict[str, str]:
    df = df.assign(
        _is_swing=df["pitch_call"].isin(SWING_CALLS),
        _is_contact=df["pitch_call"].isin(CONTACT_CALLS),
        _is_whiff=df["pitch_call"] == "StrikeSwinging",
        _in_zone=in_zone_mask(df),
    )
    df["_out_zone"] = ~df["_in_zone"]
    df["_iz_swing"] = df["_in_zone"] & df["_is_swing"]
    df["_oz_swing"] = df["_out_zone"] & df["_is_swing"]
    df["_iz_contact"] = df["_in_zone"] & df["_is_contact"]
    df["_oz_contact"] = df["_out_zone"] & df["_is_contact"]
    n = df[["_is_swing", "_is_contact", "_is_whiff", "_in_zone", "_out_zone",
            "_iz_swing", "_oz_swing", "_iz_contact", "_oz_contact"]].sum().astype(int)
    total = len(df)

    return {
        "strike_pct": _pct(_count(df["pitch_call"].isin(STRIKE_CALLS)), total),
        "ball_pct": _pct(_count(df["pitch_call"].isin(BALL_CALLS)), total),
        "chase_pct": _pct(n["_oz_swing"], n["_out_zone"]),
        "z_swing_pct": _pct(n["_iz_swing"], n["_in_zone"]),
        "swing_pct": _pct(n["_is_swing"], total),
        "o_contact_pct": _pct(n["_oz_contact"], n["_oz_swing"]),
        "z_contact_pct": _pct(n["_iz_contact"], n["_iz_swing"]),
        "contact_pct": _pct(n["_is_contact"], n["_is_swing"]),
        "zone_pct": _pct(n["_in_zone"], total),
        "whiff_pct": _pct(n["_is_whiff"], n["_is_swing"]),
    }


def _pitcher_formulas(c, finals, criteria) -> dict:
    situational = criteria is not None and criteria.has_situational_filter
    ip = innings_pitched(finals, by_plate_appearance=situational)
    return {
        "innings_pitched": ip,
        "whip": fmt_fixed((c["H"] + c["BB"]) / ip, 2) if ip > 0 else "0.00",
    }


def _hitter_formulas(c, finals, criteria) -> dict:
    obp = _ratio(c["H"] + c["BB"] + c["HBP"], c["PA"])
    total_bases = sum(TOTAL_BASES[r] * c[k] for r, k in
                      (("Single", "1B"), ("Double", "2B"), ("Triple", "3B"), ("HomeRun", "HR")))
    slg = _ratio(total_bases, c["AB"])
    return {
        "on_base_pct": obp,
        "slugging_pct": slg,
        # Rounded operands are summed, not the raw ratios.
        "ops": fmt_fixed(float(obp) + float(slg), 3),
    }


_ROLE_FORMULAS = {
    PlayerRole.PITCHER: _pitcher_formulas,
    PlayerRole.HITTER: _hitter_formulas,
}


def compute_player_stats(pitches, role, player_id: Optional[str] = None,
                         criteria=None) -> PlayerStats:
    """Full stat line for one pitcher or hitter.

    ``pitches`` may be a pitch frame, a flat sequence or a list of Season.
    Pitches are first narrowed to ``player_id`` (as pitcher or batter, by
    ``role``) and then to ``criteria``. Plate-appearance outcomes come from
    the player's last pitch of each plate appearance; discipline and
    batted-ball rates use every remaining pitch.
    """
    from analytics.filters import FilterCriteria, filter_pitches

    role = PlayerRole(role)
    if criteria is not None and not isinstance(criteria, FilterCriteria):
        criteria = FilterCriteria.from_mapping(criteria)

    df = pitch_frame(pitches)
    source = df[player_mask(df, role, player_id)]
    finals = filter_pitches(final_rows(source), criteria, role)
    mine = filter_pitches(source, criteria, role)

    c = _outcome_counts(finals)
    babip_den = c["PA"] - c["SO"] - c["HR"] - c["BB"] - c["HBP"]
    stats = dict(
        role=role,
        games=int(mine["game_id"].nunique()),
        plate_appearances=c["PA"],
        at_bats=c["AB"],
        hits=c["H"],
        singles=c["1B"],
        doubles=c["2B"],
        triples=c["3B"],
        home_runs=c["HR"],
        walks=c["BB"],
        hit_by_pitch=c["HBP"],
        strikeouts=c["SO"],
        sacrifices=c["SAC"],
        k_pct=_pct(c["SO"], c["PA"]),
        bb_pct=_pct(c["BB"], c["PA"]),
        k_bb_pct=_pct(c["SO"] - c["BB"], c["PA"]),
        batting_average=_ratio(c["H"], c["AB"]),
        babip=_ratio(c["H"] - c["HR"], babip_den),
    )
    stats.update(_batted_ball(mine, c["HR"]))
    stats.update(_plate_discipline(mine))
    stats.update(_ROLE_FORMULAS[role](c, finals, criteria))
    logger.debug("Stats for %s %s: %d pitches, %d PA", role.value, player_id, len(mine), c["PA"])
    return PlayerStats(**stats)


def compute_game_log(pitches, role, player_id: Optional[str] = None,
                     criteria=None) -> List[tuple]:
    """(game_id, date, PlayerStats) per game the player appears in, most recent first."""
    from analytics.filters import filter_pitches

    role = PlayerRole(role)
    df = pitch_frame(pitches)
    source = df[player_mask(df, role, player_id)]
    kept_games = filter_pitches(source, criteria, role)["game_id"].unique()
    source = source[source["game_id"].isin(kept_games)]

    log = []
    for game_id, rows in source.groupby("game_id", sort=False):
        dates = rows["date"].dropna()
        log.append((game_id, min(dates) if len(dates) else None,
                    compute_player_stats(rows, role, player_id, criteria)))
    log.sort(key=lambda row: (row[1] is None, -(row[1].toordinal() if row[1] else 0)))
    return log
