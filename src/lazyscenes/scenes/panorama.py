from __future__ import annotations

import numpy as np

from ..core.scene import Scene


def build(n: int = 30_000, seed: int = 0) -> Scene:
    """A cylindrical backdrop with a sky-to-ground gradient."""

    rng = np.random.default_rng(seed)
    theta = 2 * np.pi * rng.random(n)
    z = rng.uniform(-1.0, 1.0, n)
    radius = 5.0
    positions = np.stack([radius * np.cos(theta), radius * np.sin(theta), z], axis=1)

    t = (z + 1.0) / 2.0
    sky = np.array([0.45, 0.7, 0.95])
    ground = np.array([0.35, 0.3, 0.2])
    colors = ground[None, :] * (1.0 - t)[:, None] + sky[None, :] * t[:, None]

    return Scene(
        name="panorama",
        title="Panorama",
        positions=positions,
        colors=colors,
        point_size=0.08,
        background=(0.6, 0.75, 0.9),
    )
