import datetime

import pytest

from data.models import HittingMetrics, PitchEvent, PitchingMetrics, TrajectoryCoefficients


def _make_pitch(**overrides):
    fields = dict(
        pitch_uid=None,
        game_id="G1",
        inning=1,
        top_bottom="Top",
        pa_of_inning=1,
        pitch_of_pa=1,
        date=datetime.date(2024, 3, 15),
        pitcher_id="P1",
        batter_id="B1",
        batter_side="Right",
        pitcher_throws="Right",
        balls=0,
        strikes=0,
        outs=0,
    )
    fields.update(overrides)
    return PitchEvent(**fields)


@pytest.fixture
def make_pitch():
    return _make_pitch


@pytest.fixture
def make_pa():
    """Plate appearance of ``n`` pitches; the last one carries ``final``."""
    def _pa(pa_of_inning=1, n=2, final=None, **common):
        pitches = [
            _make_pitch(pa_of_inning=pa_of_inning, pitch_of_pa=i + 1,
                        pitch_call="BallCalled", **common)
            for i in range(n - 1)
        ]
        last = dict(common)
        last.update(final or {})
        pitches.append(_make_pitch(pa_of_inning=pa_of_inning, pitch_of_pa=n, **last))
        return pitches
    return _pa


@pytest.fixture
def pitch_fit():
    return TrajectoryCoefficients(
        x=(52.0, -128.0, 12.0),
        y=(0.4, 1.2, -0.8),
        z=(6.0, -4.5, -14.0),
    )


@pytest.fixture
def hit_fit():
    return TrajectoryCoefficients(
        x=(1.5, 90.0, -8.0) + (0.0,) * 6,
        y=(0.2, 3.0, 0.0) + (0.0,) * 6,
        z=(3.0, 45.0, -16.0) + (0.0,) * 6,
    )


@pytest.fixture
def tracked_pitch(pitch_fit, hit_fit):
    """A put-in-play pitch with both fits and all metrics present."""
    return _make_pitch(
        pitch_uid="uid-1",
        pitch_call="InPlay",
        play_result="Double",
        pitching=PitchingMetrics(zone_time=0.42, horz_break=-8.5, induced_vert_break=16.2),
        hitting=HittingMetrics(hang_time=2.5, contact_position_x=1.5,
                               contact_position_y=0.2, contact_position_z=3.0),
        pitch_trajectory=pitch_fit,
        hit_trajectory=hit_fit,
    )
