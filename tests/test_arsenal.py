import datetime

import pytest

from analytics.arsenal import ARSENAL_COLUMNS, metric_trend, pitch_arsenal
from data.hierarchy import pitch_frame
from data.models import PitchingMetrics

D = datetime.date


def _metrics(speed, **overrides):
    values = dict(rel_speed=speed, induced_vert_break=15.0, horz_break=-8.0, spin_rate=2300.0,
                  spin_axis=210.0, rel_height=6.0, rel_side=-2.0, extension=6.5)
    values.update(overrides)
    return PitchingMetrics(**values)


@pytest.fixture
def arsenal_pitches(make_pitch):
    def thrown(uid, pitch_type, metrics, call, side, height):
        return make_pitch(pitch_uid=uid, pitch_type=pitch_type, pitching=metrics, pitch_call=call,
                          plate_loc_side=side, plate_loc_height=height)
    return [
        thrown("f1", "Four-Seam", _metrics(92.0), "StrikeSwinging", 0.0, 2.5),
        thrown("f2", "Four-Seam", _metrics(94.0), "InPlay", 0.2, 3.0),
        thrown("f3", "Four-Seam", _metrics(93.0, extension=None), "BallCalled", 1.5, 2.0),
        thrown("s1", "Slider", _metrics(84.0, horz_break=4.0), "StrikeSwinging", -1.2, 1.0),
        # No velocity: counts toward the slider's rates but not its usage.
        thrown("s2", "Slider", _metrics(None), "FoulBallFieldable", -1.0, 1.2),
        thrown("u1", None, _metrics(90.0), "BallCalled", 0.0, 2.0),
        thrown("u2", "Slider", None, "BallCalled", 0.0, 2.0),
    ]


def test_arsenal_rows_sorted_by_count(arsenal_pitches):
    arsenal = pitch_arsenal(arsenal_pitches)
    assert list(arsenal.columns) == ARSENAL_COLUMNS
    assert arsenal["pitch_type"].tolist() == ["Four-Seam", "Slider"]
    assert arsenal["count"].tolist() == [3, 1]
    assert arsenal["usage_pct"].tolist() == pytest.approx([75.0, 25.0])


def test_arsenal_averages(arsenal_pitches):
    fastball, slider = pitch_arsenal(arsenal_pitches).to_dict("records")
    assert fastball["velocity"] == pytest.approx(93.0)
    assert fastball["spin_rate"] == pytest.approx(2300.0)
    # A missing extension averages in as 0.
    assert fastball["extension"] == pytest.approx(13.0 / 3)
    assert slider["hb"] == pytest.approx(4.0)


def test_arsenal_rates(arsenal_pitches):
    fastball, slider = pitch_arsenal(arsenal_pitches).to_dict("records")
    assert fastball["whiff_pct"] == pytest.approx(50.0)
    assert fastball["zone_pct"] == pytest.approx(200.0 / 3)
    assert fastball["chase_pct"] == 0.0
    assert slider["whiff_pct"] == pytest.approx(50.0)
    assert slider["zone_pct"] == 0.0
    assert slider["chase_pct"] == pytest.approx(100.0)


def test_arsenal_from_frame_matches_records(arsenal_pitches):
    assert pitch_arsenal(pitch_frame(arsenal_pitches)).equals(pitch_arsenal(arsenal_pitches))


def test_empty_arsenal(make_pitch):
    for pitches in ([], [make_pitch(pitch_type="Slider")]):
        arsenal = pitch_arsenal(pitches)
        assert arsenal.empty
        assert list(arsenal.columns) == ARSENAL_COLUMNS


@pytest.fixture
def trend_pitches(make_pitch):
    def thrown(game_id, date, pitch_type, speed):
        metrics = PitchingMetrics(rel_speed=speed) if speed is not None else None
        return make_pitch(game_id=game_id, date=date, pitch_type=pitch_type, pitching=metrics)
    return [
        thrown("G2", D(2024, 4, 2), "Slider", 84.0),
        thrown("G2", D(2024, 4, 2), "Slider", 85.0),
        thrown("G1", D(2024, 3, 20), "Four-Seam", 92.123),
        thrown("G1", D(2024, 3, 20), None, 80.0),
        thrown("G1", D(2024, 3, 20), "Four-Seam", None),
        thrown("G3", None, "Slider", 83.0),
    ]


def test_metric_trend_by_game(trend_pitches):
    trend = metric_trend(trend_pitches, "rel_speed")
    rows = trend[["game_id", "pitch_type", "value", "count"]].values.tolist()
    assert rows == [
        ["G1", "Four-Seam", 92.12, 1],
        ["G1", "Other", 80.0, 1],
        ["G2", "Slider", 84.5, 2],
        ["G3", "Slider", 83.0, 1],
    ]
    assert trend["date"].tolist()[:3] == [D(2024, 3, 20), D(2024, 3, 20), D(2024, 4, 2)]


def test_metric_trend_by_date_drops_undated(trend_pitches):
    trend = metric_trend(trend_pitches, "rel_speed", by="date")
    assert "game_id" not in trend.columns
    assert trend["pitch_type"].tolist() == ["Four-Seam", "Other", "Slider"]
    assert trend["count"].tolist() == [1, 1, 2]


def test_metric_trend_bad_arguments():
    with pytest.raises(ValueError):
        metric_trend([], "exit_speed")
    with pytest.raises(ValueError):
        metric_trend([], "rel_speed", by="week")


def test_metric_trend_without_data(make_pitch):
    assert metric_trend([], "spin_rate").empty
    assert metric_trend([make_pitch()], "spin_rate", by="date").empty
