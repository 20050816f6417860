"""Ball-flight reconstruction from TrackMan polynomial trajectory fits.

TrackMan publishes each tracked flight as per-axis polynomials in elapsed
time: a 9-term fit for the batted ball (time since contact) and a 3-term
fit for the pitch (time since release). Positions are in the sensor frame,
feet; see ``viz.geometry`` for the map into the viewer frame.
"""
from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from data.models import TrajectoryCoefficients, to_float

Point3 = Tuple[float, float, float]


def evaluate_polynomial(t: float, coeffs: Sequence[float]) -> float:
    """Return sum(coeffs[i] * t**i). An empty fit evaluates to 0.

    Horner's scheme: a runaway value overflows to inf instead of raising.
    """
    total = 0.0
    for c in reversed(coeffs):
        total = total * t + c
    return total


def evaluate_polynomial_many(ts, coeffs: Sequence[float]) -> np.ndarray:
    """Vectorised ``evaluate_polynomial`` over an array of times."""
    ts = np.asarray(ts, dtype=float)
    if len(coeffs) == 0:
        return np.zeros_like(ts)
    # np.polyval wants the highest-order term first.
    return np.polyval(np.asarray(coeffs, dtype=float)[::-1], ts)


def is_all_trajectory_na(coeffs: Optional[TrajectoryCoefficients]) -> bool:
    """True when not a single coefficient of the set is a usable number."""
    if coeffs is None:
        return True
    return all(math.isnan(to_float(c)) for axis in coeffs.axes for c in axis)


def has_complete_fit(coeffs: Optional[TrajectoryCoefficients]) -> bool:
    """True when every coefficient of the set is finite."""
    if coeffs is None:
        return False
    return all(math.isfinite(c) for axis in coeffs.as_floats() for c in axis)


def landing_point(coeffs: TrajectoryCoefficients, t: float) -> Point3:
    """Evaluate the fit on each axis at time ``t``.

    Callers screen all-NA sets and validate ``t`` first; a malformed
    coefficient shows up as NaN on its axis rather than an exception.
    """
    x, y, z = coeffs.as_floats()
    return (
        evaluate_polynomial(t, x),
        evaluate_polynomial(t, y),
        evaluate_polynomial(t, z),
    )


def pitch_position(coeffs: TrajectoryCoefficients, t: float) -> Point3:
    """Pitch fits are quadratic: c0 + c1*t + c2*t^2 per axis."""
    x, y, z = coeffs.as_floats()
    return tuple(evaluate_polynomial(t, axis[:3]) for axis in (x, y, z))


def sample_fit(coeffs: TrajectoryCoefficients, ts, n_terms: Optional[int] = None) -> np.ndarray:
    """Evaluate the fit at every time in ``ts``; returns an (n, 3) array.

    ``n_terms`` keeps only the lowest-order terms of each axis.
    """
    x, y, z = coeffs.as_floats()
    with np.errstate(over="ignore", invalid="ignore"):
        return np.column_stack([
            evaluate_polynomial_many(ts, axis[:n_terms]) for axis in (x, y, z)
        ])
