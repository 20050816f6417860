"""Viewer geometry -- projections, flight curves and chart markers."""
from viz.geometry import (
    project, project_many, project_hit, project_pitch, project_zone,
    plate_location_point, strike_zone_outline,
)
from viz.curves import (
    Curve, build_pitch_curve, build_hit_curve, landing_points,
    plate_location_markers, movement_points, hit_color, pitch_call_color,
)
