"""Pitch records, the season/game hierarchy and pitch frame, stat lines and loaders."""
from data.models import (
    PitchEvent, PitchingMetrics, HittingMetrics, TrajectoryCoefficients, PlayerRole,
    to_float, to_date, is_finite, leading_int, season_label,
)
from data.hierarchy import (
    Season, Game, Inning, PlateAppearance,
    group, build_games, build_seasons, flatten, iter_pitches,
    pitch_frame, pa_key, pa_ids, player_mask, final_rows, final_pitches,
    player_pitches, count_plate_appearances,
)
from data.stats import (
    PlayerStats, compute_player_stats, compute_game_log, innings_pitched,
    display_innings_pitched, baseball_to_decimal_ip, in_rulebook_zone,
)
from data.loader import (
    load_trackman_parquet, pitches_from_frame, trackman_frame, pitch_from_record, pitches_from_records,
)
