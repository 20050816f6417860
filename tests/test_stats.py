import datetime

import pytest

from analytics.filters import FilterCriteria
from data.hierarchy import build_seasons, pitch_frame
from data.models import HittingMetrics, PlayerRole
from data.stats import (
    baseball_to_decimal_ip,
    compute_game_log,
    compute_player_stats,
    display_innings_pitched,
    fmt_fixed,
    in_rulebook_zone,
    innings_pitched,
)

PERCENT_FIELDS = [
    "k_pct", "bb_pct", "k_bb_pct", "gb_pct", "fb_pct", "ld_pct", "pull_pct", "cent_pct",
    "oppo_pct", "strike_pct", "ball_pct", "chase_pct", "z_swing_pct", "swing_pct",
    "o_contact_pct", "z_contact_pct", "contact_pct", "zone_pct", "whiff_pct",
]


@pytest.fixture
def four_pa(make_pa):
    """Single, walk, groundout, strikeout against hitter B1."""
    return (
        make_pa(1, n=2, final={"pitch_call": "InPlay", "play_result": "Single"})
        + make_pa(2, n=4, final={"pitch_call": "BallCalled", "kor_bb": "Walk"})
        + make_pa(3, n=1, final={"pitch_call": "InPlay", "play_result": "Out"})
        + make_pa(4, n=3, final={"pitch_call": "StrikeSwinging", "kor_bb": "Strikeout"})
    )


def test_basic_hitter_line(four_pa):
    s = compute_player_stats(four_pa, PlayerRole.HITTER, "B1")
    assert (s.plate_appearances, s.walks, s.hits, s.at_bats) == (4, 1, 1, 3)
    assert s.batting_average == "0.333"
    assert s.on_base_pct == "0.500"
    assert s.slugging_pct == "0.333"
    assert s.ops == "0.833"
    assert s.k_pct == "25.0"
    assert s.bb_pct == "25.0"
    assert s.k_bb_pct == "0.0"
    assert s.babip == "0.500"
    assert s.games == 1
    assert s.whip is None and s.innings_pitched is None


def test_hitter_line_from_seasons(four_pa):
    flat = compute_player_stats(four_pa, "hitter", "B1")
    nested = compute_player_stats(build_seasons(four_pa), "hitter", "B1")
    assert flat == nested


def test_other_player_sees_nothing(four_pa):
    s = compute_player_stats(four_pa, PlayerRole.HITTER, "someone-else")
    assert s.plate_appearances == 0


@pytest.mark.parametrize("role", list(PlayerRole))
def test_empty_line_uses_zero_literals(role):
    s = compute_player_stats([], role, "X")
    assert s.plate_appearances == 0
    for name in PERCENT_FIELDS:
        assert getattr(s, name) == "0.0", name
    for name in ("batting_average", "babip", "hr_per_fb"):
        assert getattr(s, name) == "0.000", name
    assert s.gb_fb_ratio == "0.00"
    if role is PlayerRole.PITCHER:
        assert s.whip == "0.00"
        assert s.innings_pitched_display == "0.0"
        assert s.on_base_pct is None
    else:
        assert (s.on_base_pct, s.slugging_pct, s.ops) == ("0.000", "0.000", "0.000")


def test_ops_sums_rounded_operands(make_pa):
    results = ["Single", "Single", "Double", "Triple", "HomeRun", "Out", "Out"]
    pitches = []
    for i, result in enumerate(results, start=1):
        pitches += make_pa(i, n=1, final={"pitch_call": "InPlay", "play_result": result})
    s = compute_player_stats(pitches, PlayerRole.HITTER, "B1")
    assert s.on_base_pct == "0.714"   # 5/7
    assert s.slugging_pct == "1.571"  # 11/7
    # Raw 5/7 + 11/7 would round to 2.286.
    assert s.ops == "2.285"
    assert s.babip == "0.667"


def test_sacrifices_and_hbp_leave_at_bats(make_pa):
    pitches = (
        make_pa(1, n=1, final={"pitch_call": "InPlay", "play_result": "Sacrifice"})
        + make_pa(2, n=1, final={"pitch_call": "InPlay", "play_result": "Sacrifice Fly"})
        + make_pa(3, n=1, final={"pitch_call": "HitByPitch"})
        + make_pa(4, n=1, final={"pitch_call": "InPlay", "play_result": "Double"})
    )
    s = compute_player_stats(pitches, PlayerRole.HITTER, "B1")
    assert (s.plate_appearances, s.sacrifices, s.hit_by_pitch, s.at_bats) == (4, 2, 1, 1)
    assert s.batting_average == "1.000"
    assert s.on_base_pct == "0.500"


@pytest.fixture
def pitcher_innings(make_pa):
    first = (
        make_pa(1, n=3, outs=0, final={"pitch_call": "StrikeSwinging", "kor_bb": "Strikeout"})
        + make_pa(2, n=2, outs=1, final={"pitch_call": "InPlay", "play_result": "Out", "outs_on_play": 1})
        + make_pa(3, n=1, outs=2, final={"pitch_call": "InPlay", "play_result": "Single"})
        + make_pa(4, n=2, outs=2, final={"pitch_call": "StrikeCalled", "kor_bb": "Strikeout"})
    )
    second = make_pa(1, n=1, inning=2, outs=0,
                     final={"pitch_call": "InPlay", "play_result": "Out", "outs_on_play": 1})
    return first + second


def test_innings_pitched_by_inning(pitcher_innings):
    s = compute_player_stats(pitcher_innings, PlayerRole.PITCHER, "P1")
    # Inning 1: 2 - 0 + 1 (strikeout) = 3 outs; inning 2: 0 + 1 on play.
    assert s.innings_pitched == pytest.approx(4 / 3)
    assert s.innings_pitched_display == "1.1"
    assert s.whip == fmt_fixed(1 / (4 / 3), 2) == "0.75"
    assert s.as_dict()["IP"] == "1.1"
    assert "OBP" not in s.as_dict()


def test_innings_pitched_by_plate_appearance(pitcher_innings):
    # PA grouping: 1 (K) + 1 (on play) + 0 + 1 (K) + 1 (on play) = 4 outs.
    assert innings_pitched(pitcher_innings, by_plate_appearance=True) == pytest.approx(4 / 3)
    s = compute_player_stats(pitcher_innings, PlayerRole.PITCHER, "P1",
                             FilterCriteria(batter_side="Right"))
    assert s.innings_pitched == pytest.approx(4 / 3)


def test_innings_pitched_skips_non_out_finals(make_pa):
    walk = make_pa(1, n=4, outs=1, final={"pitch_call": "BallCalled", "kor_bb": "Walk"})
    assert innings_pitched(walk) == 0


@pytest.mark.parametrize("ip,shown", [
    (5.0, "5.0"),
    (5 + 1 / 3, "5.1"),
    (5 + 2 / 3, "5.2"),
    (6.3, "6.1"),
    (6.7, "6.2"),
    (2.1, "2.1"),
    (float("nan"), "0.0"),
    (None, "0.0"),
])
def test_display_innings_pitched(ip, shown):
    assert display_innings_pitched(ip) == shown


@pytest.mark.parametrize("s", ["5.0", "5.1", "5.2", "6.1"])
def test_innings_pitched_round_trip(s):
    assert display_innings_pitched(baseball_to_decimal_ip(s)) == s


@pytest.mark.parametrize("s,value", [("5.1", 5.3), ("5.2", 5.7), ("7", 7.0), ("abc", 0.0)])
def test_baseball_to_decimal_ip(s, value):
    assert baseball_to_decimal_ip(s) == pytest.approx(value)


@pytest.mark.parametrize("value,decimals,text", [
    (0.125, 2, "0.13"),
    (1 / 3, 3, "0.333"),
    (2 / 3, 1, "0.7"),
    (0, 3, "0.000"),
    (-12.5, 1, "-12.5"),
])
def test_fmt_fixed(value, decimals, text):
    assert fmt_fixed(value, decimals) == text


def test_plate_discipline(make_pitch):
    calls = [
        (0.0, 2.5, "StrikeSwinging"),
        (0.5, 3.0, "InPlay"),
        (1.5, 2.5, "BallCalled"),
        (-1.2, 1.0, "FoulBallFieldable"),
        (None, None, "StrikeCalled"),
    ]
    pitches = [
        make_pitch(pitch_of_pa=i, plate_loc_side=side, plate_loc_height=height, pitch_call=call)
        for i, (side, height, call) in enumerate(calls, start=1)
    ]
    s = compute_player_stats(pitches, PlayerRole.PITCHER, "P1")
    assert s.strike_pct == "80.0"
    assert s.ball_pct == "20.0"
    assert s.chase_pct == "33.3"
    assert s.z_swing_pct == "100.0"
    assert s.swing_pct == "60.0"
    assert s.o_contact_pct == "100.0"
    assert s.z_contact_pct == "50.0"
    assert s.contact_pct == "66.7"
    assert s.zone_pct == "40.0"
    assert s.whiff_pct == "33.3"


@pytest.mark.parametrize("side,height,inside", [
    (0.83, 1.5, True),
    (-0.83, 3.5, True),
    (0.84, 2.0, False),
    (0.0, 3.51, False),
    (None, 2.0, False),
])
def test_in_rulebook_zone(make_pitch, side, height, inside):
    assert in_rulebook_zone(make_pitch(plate_loc_side=side, plate_loc_height=height)) is inside


def test_batted_ball_and_spray(make_pa):
    def bip(n, hit_type, result, bearing, side="Right"):
        return make_pa(n, n=1, batter_side=side, final={
            "pitch_call": "InPlay", "play_result": result, "tagged_hit_type": hit_type,
            "hitting": HittingMetrics(bearing=bearing),
        })
    pitches = (
        bip(1, "GroundBall", "Out", -30.0)
        + bip(2, "GroundBall", "Single", 0.0)
        + bip(3, "FlyBall", "HomeRun", 30.0)
        + bip(4, "LineDrive", "Double", 30.0, side="Left")
        + make_pa(5, n=1, final={"pitch_call": "FoulBallFieldable", "tagged_hit_type": "FlyBall"})
    )
    s = compute_player_stats(pitches, PlayerRole.HITTER, "B1")
    assert (s.gb_pct, s.fb_pct, s.ld_pct) == ("50.0", "25.0", "25.0")
    assert s.hr_per_fb == "1.000"
    assert s.gb_fb_ratio == "2.00"
    assert (s.pull_pct, s.cent_pct, s.oppo_pct) == ("50.0", "25.0", "25.0")


def test_criteria_mapping_and_game_count(four_pa, make_pa):
    other_game = make_pa(1, n=2, game_id="G2", final={"pitch_call": "InPlay", "play_result": "HomeRun"})
    pitches = four_pa + other_game
    s = compute_player_stats(pitches, "hitter", "B1", {"gameIds": ["G2"]})
    assert s.games == 1
    assert s.plate_appearances == 1
    assert s.home_runs == 1
    assert compute_player_stats(pitches, "hitter", "B1").games == 2


def test_unreadable_count_filter_gives_empty_line(four_pa):
    s = compute_player_stats(four_pa, "hitter", "B1", FilterCriteria(strikes="x"))
    assert s.plate_appearances == 0
    assert s.batting_average == "0.000"


def test_count_filter_text_forms_agree(four_pa):
    assert (compute_player_stats(four_pa, "hitter", "B1", FilterCriteria(strikes="0.0"))
            == compute_player_stats(four_pa, "hitter", "B1", FilterCriteria(strikes=0)))


def test_frame_and_records_give_the_same_line(four_pa, pitcher_innings):
    assert (compute_player_stats(pitch_frame(four_pa), "hitter", "B1")
            == compute_player_stats(four_pa, "hitter", "B1"))
    assert (compute_player_stats(pitch_frame(pitcher_innings), "pitcher", "P1")
            == compute_player_stats(pitcher_innings, "pitcher", "P1"))


def test_unknown_role_raises(four_pa):
    with pytest.raises(ValueError):
        compute_player_stats(four_pa, "catcher", "B1")


def test_game_log(four_pa, make_pa):
    later = make_pa(1, n=1, game_id="G2", date=datetime.date(2024, 4, 1),
                    final={"pitch_call": "InPlay", "play_result": "Triple"})
    log = compute_game_log(four_pa + later, PlayerRole.HITTER, "B1")
    assert [row[0] for row in log] == ["G2", "G1"]
    assert log[0][2].triples == 1
    assert log[1][2].plate_appearances == 4
