"""Pitch filtering -- season, month, pitch type/call, count, side and game selection."""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from typing import Collection, List, Mapping, Optional, Union

import pandas as pd

from data.hierarchy import frame_and_items, player_pitches, restore
from data.models import PlayerRole, leading_int

logger = logging.getLogger(__name__)

ALL = "all"

# External filter records use camelCase keys.
_MAPPING_KEYS = {
    "season": "season",
    "month": "month",
    "pitchType": "pitch_type",
    "pitchCall": "pitch_call",
    "outs": "outs",
    "balls": "balls",
    "strikes": "strikes",
    "batterSide": "batter_side",
    "gameIds": "game_ids",
}


def _active(value) -> bool:
    return value is not None and value != ALL


def _equals_int(column: pd.Series, value) -> pd.Series:
    """Integer-prefix match ('2', ' 2', '2.0' all select 2); nothing parses, nothing matches."""
    wanted = leading_int(value)
    if wanted is None:
        logger.debug("Filter value %r is not a number; no pitch matches", value)
        return pd.Series(False, index=column.index)
    return column == wanted


@dataclass(frozen=True)
class FilterCriteria:
    """Conjunctive pitch filter. ``None`` or ``"all"`` disables a dimension;
    an empty ``game_ids`` collection means every game."""
    season: Optional[str] = None
    month: Optional[Union[str, int]] = None
    pitch_type: Optional[str] = None
    pitch_call: Optional[str] = None
    outs: Optional[Union[str, int]] = None
    balls: Optional[Union[str, int]] = None
    strikes: Optional[Union[str, int]] = None
    batter_side: Optional[str] = None
    game_ids: Optional[Collection[str]] = None

    @classmethod
    def from_mapping(cls, mapping: Optional[Mapping]) -> "FilterCriteria":
        if not mapping:
            return cls()
        kwargs = {}
        for key, value in mapping.items():
            name = _MAPPING_KEYS.get(key, key)
            if name not in _FIELD_NAMES:
                logger.debug("Ignoring unknown filter key %r", key)
                continue
            if name == "game_ids" and value is not None:
                value = frozenset(value)
            kwargs[name] = value
        return cls(**kwargs)

    @property
    def has_situational_filter(self) -> bool:
        """Side, pitch type or count filters split innings into plate appearances."""
        return any(_active(v) for v in (self.batter_side, self.pitch_type,
                                        self.outs, self.balls, self.strikes))

    def mask(self, df: pd.DataFrame, role: Optional[PlayerRole] = None) -> pd.Series:
        """Boolean mask over a pitch frame: the AND of every active dimension."""
        mask = pd.Series(True, index=df.index)
        if _active(self.season):
            mask &= df["date"].notna() & (df["season"] == self.season)
        if _active(self.month):
            mask &= _equals_int(df["month"], self.month)
        if _active(self.pitch_type):
            mask &= df["pitch_type"] == self.pitch_type
        if _active(self.pitch_call):
            mask &= df["pitch_call"] == self.pitch_call
        for name in ("outs", "balls", "strikes"):
            value = getattr(self, name)
            if _active(value):
                mask &= _equals_int(df[name], value)
        if _active(self.batter_side):
            # Hitter views filter on the opposing pitcher's hand.
            hitter = role is not None and PlayerRole(role) is PlayerRole.HITTER
            mask &= df["pitcher_throws" if hitter else "batter_side"] == self.batter_side
        if self.game_ids:
            mask &= df["game_id"].isin(list(self.game_ids))
        return mask


_FIELD_NAMES = {f.name for f in fields(FilterCriteria)}


def filter_pitches(pitches, criteria: Optional[FilterCriteria] = None,
                   role: Optional[PlayerRole] = None):
    """Stable filter: survivors keep their input order.

    Takes a pitch sequence, a list of Season or a pitch frame; returns a list
    of pitches, or a frame when given one.
    """
    df, items = frame_and_items(pitches)
    if criteria is None:
        return restore(items, df)
    if isinstance(criteria, Mapping):
        criteria = FilterCriteria.from_mapping(criteria)
    kept = df[criteria.mask(df, role)]
    logger.debug("Filter kept %d of %d pitches", len(kept), len(df))
    return restore(items, kept)


def pitches_for_player(pitches, role: PlayerRole, player_id: Optional[str],
                       criteria: Optional[FilterCriteria] = None):
    """The player's pitches (as pitcher or batter, by ``role``) that pass ``criteria``."""
    return filter_pitches(player_pitches(pitches, role, player_id), criteria, role)


def available_values(pitches, attr: str) -> List:
    """Sorted distinct non-null values of ``attr``, for filter dropdowns."""
    df, _ = frame_and_items(pitches)
    values = df[attr].dropna()
    if attr in _COUNT_COLUMNS:
        return sorted(values.astype(int).unique().tolist())
    return sorted(values.unique().tolist(), key=str)


_COUNT_COLUMNS = ("month", "outs", "balls", "strikes", "outs_on_play")
