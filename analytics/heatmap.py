"""Strike-zone heatmap -- Gaussian kernel density over plate locations."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

import numpy as np
import pandas as pd

from config import KDE_BANDWIDTH, KDE_GRID_SIZE, PLOT_X_MAX, PLOT_X_MIN, PLOT_Y_MAX, PLOT_Y_MIN
from data.models import PitchEvent, to_float


@dataclass(frozen=True)
class DensityGrid:
    side: np.ndarray        # cell-center PlateLocSide, shape (n,)
    height: np.ndarray      # cell-center PlateLocHeight, shape (n,)
    density: np.ndarray     # shape (n, n), indexed [side, height], max 1

    @property
    def display_x(self) -> np.ndarray:
        """Catcher's-view x used by the zone chart."""
        return -self.side

    def cells(self) -> List[dict]:
        """Flat ``{x, y, density}`` records, x in the display frame."""
        out = []
        for i, s in enumerate(self.side):
            for j, h in enumerate(self.height):
                out.append({"x": float(-s), "y": float(h), "density": float(self.density[i, j])})
        return out


def _locations(items) -> np.ndarray:
    if isinstance(items, pd.DataFrame):
        pts = items[["plate_loc_side", "plate_loc_height"]].to_numpy(dtype=float)
        return pts[np.isfinite(pts).all(axis=1)]
    pts = []
    for item in items:
        if isinstance(item, PitchEvent):
            side, height = to_float(item.plate_loc_side), to_float(item.plate_loc_height)
        else:
            side, height = to_float(item[0]), to_float(item[1])
        if np.isfinite(side) and np.isfinite(height):
            pts.append((side, height))
    return np.asarray(pts, dtype=float).reshape(-1, 2)


def density_grid(locations: Iterable, bandwidth: float = KDE_BANDWIDTH,
                 grid_size: int = KDE_GRID_SIZE) -> DensityGrid:
    """Sum of unit Gaussians at each location, evaluated at cell centers.

    ``locations`` holds pitches, (side, height) pairs or a pitch frame;
    pitches with no location are ignored. The result is scaled so the
    densest cell is 1; with no data every cell is 0.
    """
    if bandwidth <= 0:
        raise ValueError(f"bandwidth must be positive, got {bandwidth}")
    if grid_size < 1:
        raise ValueError(f"grid_size must be at least 1, got {grid_size}")

    x_step = (PLOT_X_MAX - PLOT_X_MIN) / grid_size
    y_step = (PLOT_Y_MAX - PLOT_Y_MIN) / grid_size
    xs = PLOT_X_MIN + np.arange(grid_size) * x_step + x_step / 2
    ys = PLOT_Y_MIN + np.arange(grid_size) * y_step + y_step / 2

    pts = _locations(locations)
    if len(pts) == 0:
        return DensityGrid(side=xs, height=ys, density=np.zeros((grid_size, grid_size)))

    dx = (xs[:, None] - pts[None, :, 0]) / bandwidth          # (n, m)
    dy = (ys[:, None] - pts[None, :, 1]) / bandwidth          # (n, m)
    density = np.exp(-0.5 * (dx[:, None, :] ** 2 + dy[None, :, :] ** 2)).sum(axis=2)
    peak = density.max()
    if peak > 0:
        density = density / peak
    return DensityGrid(side=xs, height=ys, density=density)
