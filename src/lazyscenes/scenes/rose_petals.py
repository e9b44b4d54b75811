from __future__ import annotations

import numpy as np

from ..core.scene import Scene


def build(n: int = 12_000, petals: int = 5, seed: int = 0) -> Scene:
    """Petals scattered along a rose curve, drifting down."""

    rng = np.random.default_rng(seed)
    theta = 2 * np.pi * rng.random(n)
    r = np.abs(np.cos(petals * theta / 2.0)) + 0.03 * rng.standard_normal(n)
    z = rng.uniform(0.0, 2.0, n)
    # Petals spread out as they fall.
    spread = 1.0 + 0.5 * (2.0 - z)
    positions = np.stack([spread * r * np.cos(theta), spread * r * np.sin(theta), z], axis=1)

    shade = rng.uniform(0.75, 1.0, n)
    colors = np.stack([shade, 0.35 * shade, 0.5 * shade], axis=1)

    return Scene(
        name="rosePetals",
        title="Rose petals",
        positions=positions,
        colors=colors,
        point_size=0.03,
        background=(0.1, 0.02, 0.05),
        tags=("seasonal",),
    )
