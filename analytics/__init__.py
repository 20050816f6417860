"""Analytics computations -- trajectory fits, filtering, zone chart, heatmap density, arsenal."""
from analytics.trajectory import (
    evaluate_polynomial, evaluate_polynomial_many, is_all_trajectory_na,
    has_complete_fit, landing_point, pitch_position, sample_fit,
)
from analytics.filters import FilterCriteria, filter_pitches, pitches_for_player, available_values
from analytics.zones import (
    ZONE_METRICS, classify, classify_pitch, compute_zone_stats, zone_grid,
    zone_ids, zone_series, inner_zone_centers, point_in_polygon,
)
from analytics.heatmap import DensityGrid, density_grid
from analytics.arsenal import pitch_arsenal, metric_trend
