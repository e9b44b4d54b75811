from __future__ import annotations

import numpy as np

from ..core.scene import Scene


def _tree(rng: np.random.Generator, n: int) -> tuple[np.ndarray, np.ndarray]:
    # Points on a spiral cone: wide at the bottom, a single tip at z=2.
    h = rng.random(n)
    theta = 2 * np.pi * (8.0 * h + 0.05 * rng.standard_normal(n))
    r = 0.8 * (1.0 - h) + 0.02 * rng.standard_normal(n)
    positions = np.stack([r * np.cos(theta), r * np.sin(theta), 2.0 * h], axis=1)

    colors = np.empty((n, 3), dtype=np.float64)
    colors[:] = (0.1, 0.55, 0.2)
    # Roughly 4% of the points are ornaments.
    ornaments = rng.random(n) < 0.04
    colors[ornaments] = rng.choice([(0.9, 0.1, 0.1), (0.95, 0.8, 0.2), (0.2, 0.4, 0.95)], size=int(ornaments.sum()))
    return positions, colors


def _snow(rng: np.random.Generator, n: int) -> tuple[np.ndarray, np.ndarray]:
    positions = np.stack(
        [rng.uniform(-2.0, 2.0, n), rng.uniform(-2.0, 2.0, n), rng.uniform(0.0, 3.0, n)],
        axis=1,
    )
    return positions, np.ones((n, 3), dtype=np.float64)


def build(n_tree: int = 20_000, n_snow: int = 5_000, seed: int = 0) -> Scene:
    rng = np.random.default_rng(seed)
    tree_pos, tree_col = _tree(rng, n_tree)
    snow_pos, snow_col = _snow(rng, n_snow)
    return Scene(
        name="xmas",
        title="Christmas tree",
        positions=np.concatenate([tree_pos, snow_pos]),
        colors=np.concatenate([tree_col, snow_col]),
        point_size=0.02,
        background=(0.02, 0.03, 0.08),
        tags=("seasonal",),
    )
