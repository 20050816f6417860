"""
TrackMan Viewer -- Configuration & Constants.

Rendering matrices, curve sample counts, zone geometry, pitch-call and
play-result vocabularies, and color definitions live here.
"""
import os

# ── Paths ──────────────────────────────────────
_APP_DIR = os.path.dirname(os.path.abspath(__file__))
PARQUET_PATH = os.environ.get("TRACKMAN_PARQUET", os.path.join(_APP_DIR, "trackman.parquet"))
LOG_LEVEL = os.environ.get("TRACKMAN_LOG_LEVEL", "WARNING")

# ── Rendering frame calibration ────────────────
# 3x4 affine maps from the TrackMan sensor frame to the viewer frame.
# Column 3 is the translation applied to the homogeneous [x, y, z, 1].
HIT_MATRIX = (
    (0.0, 0.0, 0.254, 0.0),
    (0.0, 0.254, 0.0, 0.3),
    (-0.253578, 0.0, 0.0, 38.0),
)
PITCH_MATRIX = (
    (0.0, 0.0, 0.254, 0.0),
    (0.0, 0.254, 0.0, 0.3),
    (-0.33, 0.0, 0.0, 38.47),
)
# Plate locations are (side, depth, height); height becomes the viewer's up axis.
ZONE_MATRIX = (
    (0.254, 0.0, 0.0, 0.0),
    (0.0, 0.0, 0.254, 0.3),
    (0.0, -0.253578, 0.0, 38.0),
)

# ── Curve sampling ─────────────────────────────
def curve_points_from_env(name, default):
    """Sample count override; a curve needs both endpoints, so at least 2."""
    return max(2, int(os.environ.get(name, default)))


PITCH_CURVE_POINTS = curve_points_from_env("TRACKMAN_PITCH_CURVE_POINTS", "150")
HIT_CURVE_POINTS = curve_points_from_env("TRACKMAN_HIT_CURVE_POINTS", "100")
DEFAULT_ZONE_TIME = 0.5  # seconds, release to plate
HIT_COEFFS_PER_AXIS = 9
PITCH_COEFFS_PER_AXIS = 3
NA_TOKENS = {"NA", "N/A", "NaN", "nan", ""}

# ── Strike zone constants ──────────────────────
ZONE_SIDE = 0.83
ZONE_HEIGHT_BOT = 1.5
ZONE_HEIGHT_TOP = 3.5


def in_zone_mask(df):
    """Per-pitch boolean mask: True if the pitch is inside the rulebook zone.

    Takes a pitch frame (snake_case columns); a missing location is out.
    """
    side_ok = df["plate_loc_side"].abs() <= ZONE_SIDE
    height_ok = df["plate_loc_height"].between(ZONE_HEIGHT_BOT, ZONE_HEIGHT_TOP)
    return side_ok & height_ok


# Zone chart: rulebook zone grown by 0.17 ft on every edge, cut in thirds.
# Coordinates are in the flipped display frame (x = -PlateLocSide).
_ZX = (-1.00, -0.333, 0.333, 1.00)
_ZY = (3.67, 2.89, 2.11, 1.33)
INNER_ZONES = tuple(
    (row * 3 + col + 1, (_ZX[col], _ZX[col + 1]), (_ZY[row + 1], _ZY[row]))
    for row in range(3)
    for col in range(3)
)
OUTSIDE_ZONES = (
    ("bl", ((1.00, 1.33), (0.0, 1.33), (0.0, 0.0), (2.0, 0.0), (2.0, 2.5), (1.00, 2.5))),
    ("tl", ((1.00, 3.67), (0.0, 3.67), (0.0, 5.0), (2.0, 5.0), (2.0, 2.5), (1.00, 2.5))),
    ("tr", ((-1.00, 3.67), (0.0, 3.67), (0.0, 5.0), (-2.0, 5.0), (-2.0, 2.5), (-1.00, 2.5))),
    ("br", ((-1.00, 1.33), (0.0, 1.33), (0.0, 0.0), (-2.0, 0.0), (-2.0, 2.5), (-1.00, 2.5))),
)
PLOT_X_MIN, PLOT_X_MAX = -2.0, 2.0
PLOT_Y_MIN, PLOT_Y_MAX = 0.0, 5.0

# ── Heatmap density ────────────────────────────
KDE_BANDWIDTH = 0.18
KDE_GRID_SIZE = 40

# ── Pitch call / result vocabularies ───────────
SWING_CALLS = ["InPlay", "StrikeSwinging", "FoulBallNotFieldable", "FoulBallFieldable"]
CONTACT_CALLS = ["InPlay", "FoulBallNotFieldable", "FoulBallFieldable"]
STRIKE_CALLS = SWING_CALLS + ["StrikeCalled"]
BALL_CALLS = ["BallCalled", "HitByPitch", "BallinDirt", "BallIntentional"]
OUT_CALLS = ["InPlay", "StrikeCalled", "FoulBallNotFieldable", "FoulBallFieldable"]

HIT_RESULTS = ("Single", "Double", "Triple", "HomeRun")
TOTAL_BASES = {"Single": 1, "Double": 2, "Triple": 3, "HomeRun": 4}
SACRIFICE_RESULTS = ("Sacrifice", "Sacrifice Fly")
BATTED_BALL_TYPES = ("GroundBall", "FlyBall", "LineDrive")

# ── Colors ─────────────────────────────────────
HIT_COLORS = {
    "Single": "#4ade80",
    "Double": "#fbbf24",
    "Triple": "#f97316",
    "HomeRun": "#ef4444",
    "Out": "#6b7280",
    "FieldersChoice": "#6b7280",
    "Sacrifice": "#6b7280",
}
DEFAULT_HIT_COLOR = "#9ca3af"

PITCH_COLORS = {
    "Four-Seam": "#ff6b35",
    "Curveball": "#8b5cf6",
    "Slider": "#06b6d4",
    "Changeup": "#96ceb4",
    "Cutter": "#feca57",
    "Sinker": "#ff9ff3",
    "Splitter": "#54a0ff",
}
