"""Season -> Game -> Inning -> PlateAppearance -> Pitch nesting, and the flat pitch frame.

The nested form feeds the game viewer; every aggregate (filters, stat lines,
zone rates) works on the flat form, a pandas DataFrame with one row per pitch
and the ``PitchEvent`` field names as columns.
"""
from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass, field, fields
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

import numpy as np
import pandas as pd

from data.models import (
    UNKNOWN_SEASON,
    HittingMetrics,
    PitchEvent,
    PitchingMetrics,
    PlayerRole,
    season_label,
    to_date,
)

logger = logging.getLogger(__name__)

__all__ = [
    "UNKNOWN_SEASON", "PlateAppearance", "Inning", "Game", "Season", "season_label",
    "group", "build_games", "build_seasons", "iter_pitches", "flatten",
    "ROW", "FRAME_COLUMNS", "pitch_frame", "frame_and_items", "restore",
    "pa_key", "pa_ids", "player_mask", "player_pitches", "final_rows",
    "final_pitches", "count_plate_appearances",
]

PAKey = Tuple[str, int, str, int]


@dataclass
class PlateAppearance:
    pa_of_inning: int
    pitches: List[PitchEvent] = field(default_factory=list)

    @property
    def final_pitch(self) -> Optional[PitchEvent]:
        return self.pitches[-1] if self.pitches else None


@dataclass
class Inning:
    inning: int
    top_bottom: str
    plate_appearances: List[PlateAppearance] = field(default_factory=list)


@dataclass
class Game:
    game_id: str
    date: Optional[datetime.date] = None
    innings: List[Inning] = field(default_factory=list)


@dataclass
class Season:
    label: str
    games: List[Game] = field(default_factory=list)


def _season_sort_key(label: str):
    m = re.search(r"\d{4}", label)
    if m is None:
        return (1, 0, 0)
    # Aug-Dec of a year comes after that year's regular season.
    return (0, -int(m.group(0)), 0 if "Pre-season" in label else 1)


# ──────────────────────────────────────────────
# PITCH FRAME
# ──────────────────────────────────────────────

ROW = "_row"

_NESTED = ("pitching", "hitting", "hit_trajectory", "pitch_trajectory")
EVENT_FIELDS = [f.name for f in fields(PitchEvent) if f.name not in _NESTED]
PITCHING_FIELDS = [f.name for f in fields(PitchingMetrics)]
HITTING_FIELDS = [f.name for f in fields(HittingMetrics)]
FRAME_COLUMNS = EVENT_FIELDS + PITCHING_FIELDS + HITTING_FIELDS
NUMERIC_COLUMNS = (["balls", "strikes", "outs", "outs_on_play", "plate_loc_side", "plate_loc_height"]
                   + PITCHING_FIELDS + HITTING_FIELDS)


def iter_pitches(seasons: Iterable[Season]) -> Iterator[PitchEvent]:
    for season in seasons:
        for game in season.games:
            for inning in game.innings:
                for pa in inning.plate_appearances:
                    yield from pa.pitches


def flatten(seasons: Iterable[Season]) -> List[PitchEvent]:
    """All pitches in traversal order."""
    return list(iter_pitches(seasons))


def _as_pitches(source: Iterable[Union[Season, PitchEvent]]) -> List[PitchEvent]:
    items = list(source)
    if items and isinstance(items[0], Season):
        return flatten(items)
    return items


def _event_row(p: PitchEvent) -> dict:
    row = {name: getattr(p, name) for name in EVENT_FIELDS}
    for attr, names in (("pitching", PITCHING_FIELDS), ("hitting", HITTING_FIELDS)):
        metrics = getattr(p, attr)
        row.update({name: getattr(metrics, name) if metrics is not None else None for name in names})
    return row


def _finish(df: pd.DataFrame) -> pd.DataFrame:
    for col in NUMERIC_COLUMNS:
        df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
    dates = [to_date(v) for v in df["date"]]
    df["date"] = pd.Series(dates, index=df.index, dtype=object)
    df["season"] = [season_label(d) for d in dates]
    df["month"] = [d.month if d is not None else np.nan for d in dates]
    df[ROW] = np.arange(len(df))
    return df


def pitch_frame(source) -> pd.DataFrame:
    """One row per pitch, ``PitchEvent`` field names (metrics flattened) as columns.

    ``source`` is a pitch frame (returned as is), a snake_case DataFrame, a
    list of Season or a flat pitch sequence. ``_row`` holds each pitch's
    position in the flattened input; ``season`` and ``month`` are derived
    from ``date``.
    """
    if isinstance(source, pd.DataFrame):
        if ROW in source.columns:
            return source
        return _finish(source.reindex(columns=FRAME_COLUMNS).reset_index(drop=True))
    rows = [_event_row(p) for p in _as_pitches(source)]
    return _finish(pd.DataFrame(rows, columns=FRAME_COLUMNS))


def frame_and_items(source) -> Tuple[pd.DataFrame, Optional[List[PitchEvent]]]:
    """The pitch frame for ``source`` plus, unless it already was a frame,
    the flattened pitches its ``_row`` column indexes."""
    if isinstance(source, pd.DataFrame):
        return pitch_frame(source), None
    items = _as_pitches(source)
    return pitch_frame(items), items


def restore(items: Optional[List[PitchEvent]], rows: pd.DataFrame):
    """Hand ``rows`` back in the caller's shape: a frame, or the matching pitches."""
    if items is None:
        return rows
    return [items[i] for i in rows[ROW]]


# ──────────────────────────────────────────────
# GROUPING
# ──────────────────────────────────────────────

def group(pitches: Iterable[PitchEvent]) -> List[Inning]:
    """Nest one game's pitches into innings and plate appearances.

    Innings sort by number with Top before Bottom, plate appearances by
    ``pa_of_inning`` and pitches by ``pitch_of_pa``. Sorting is stable, so
    duplicates keep their input order and nothing is dropped.
    """
    items = _as_pitches(pitches)
    df = pitch_frame(items)
    df = df.assign(_half=(df["top_bottom"].astype(str).str.lower() != "top").astype(int))
    df = df.sort_values(["inning", "_half", "pa_of_inning", "pitch_of_pa", ROW], kind="stable")

    innings = []
    for (inning, half), half_rows in df.groupby(["inning", "top_bottom"], sort=False, dropna=False):
        innings.append(Inning(
            inning=int(inning),
            top_bottom=half,
            plate_appearances=[
                PlateAppearance(pa_of_inning=int(n), pitches=restore(items, pa_rows))
                for n, pa_rows in half_rows.groupby("pa_of_inning", sort=False)
            ],
        ))
    return innings


def build_games(pitches: Iterable[PitchEvent]) -> List[Game]:
    """One Game per game id, most recent date first."""
    items = _as_pitches(pitches)
    df = pitch_frame(items)

    games = []
    for game_id, rows in df.groupby("game_id", sort=False, dropna=False):
        dates = rows["date"].dropna()
        games.append(Game(game_id=game_id, date=min(dates) if len(dates) else None,
                          innings=group(restore(items, rows))))
    # Undated games sink to the bottom.
    games.sort(key=lambda g: (g.date is None, -(g.date.toordinal() if g.date else 0)))
    return games


def build_seasons(pitches: Iterable[PitchEvent]) -> List[Season]:
    """Full hierarchy, seasons most recent first."""
    by_label: Dict[str, List[Game]] = {}
    for game in build_games(pitches):
        by_label.setdefault(season_label(game.date), []).append(game)
    labels = sorted(by_label, key=_season_sort_key)
    logger.debug("Built %d seasons from %d games", len(labels), sum(len(g) for g in by_label.values()))
    return [Season(label=label, games=by_label[label]) for label in labels]


# ──────────────────────────────────────────────
# PLATE APPEARANCES
# ──────────────────────────────────────────────

def pa_key(pitch: PitchEvent) -> PAKey:
    return (pitch.game_id, pitch.inning, pitch.top_bottom, pitch.pa_of_inning)


def pa_ids(df: pd.DataFrame) -> pd.Series:
    """Per-row plate appearance id: game, inning, half and PA number."""
    return (df["game_id"].astype(str) + "_" + df["inning"].astype(str) + "_"
            + df["top_bottom"].astype(str) + "_" + df["pa_of_inning"].astype(str))


def player_mask(df: pd.DataFrame, role: Optional[PlayerRole] = None,
                player_id: Optional[str] = None) -> pd.Series:
    """Rows thrown by (pitcher) or to (hitter) ``player_id``; all rows when either is None."""
    if player_id is None or role is None:
        return pd.Series(True, index=df.index)
    column = "pitcher_id" if PlayerRole(role) is PlayerRole.PITCHER else "batter_id"
    return df[column] == player_id


def player_pitches(source, role: Optional[PlayerRole] = None, player_id: Optional[str] = None):
    """Pitches thrown by (pitcher) or to (hitter) ``player_id``, seasons flattened."""
    df, items = frame_and_items(source)
    return restore(items, df[player_mask(df, role, player_id)])


def final_rows(df: pd.DataFrame) -> pd.DataFrame:
    """Last row of every plate appearance, in order of first appearance.

    The highest ``pitch_of_pa`` wins; on a tie the later row does.
    """
    if df.empty:
        return df
    pa = pa_ids(df)
    ordered = df.assign(_pa_id=pa, _first=df[ROW].groupby(pa).transform("min"))
    ordered = ordered.sort_values(["_first", "pitch_of_pa", ROW], kind="stable")
    return ordered.groupby("_pa_id", sort=False).tail(1).drop(columns=["_pa_id", "_first"])


def final_pitches(source, role: Optional[PlayerRole] = None, player_id: Optional[str] = None):
    """Last pitch of every plate appearance, in order of first appearance.

    ``source`` is a list of Season, a flat pitch sequence or a pitch frame;
    the result has the same shape. When both ``role`` and ``player_id`` are
    given only that player's pitches are considered, so a plate appearance
    finished by a reliever ends, for the starter, on the starter's last pitch.
    """
    df, items = frame_and_items(source)
    return restore(items, final_rows(df[player_mask(df, role, player_id)]))


def count_plate_appearances(pitches) -> int:
    return int(pa_ids(pitch_frame(pitches)).nunique())
