from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True, kw_only=True)
class Scene:
    """A loaded presentation unit: a colored particle field plus display hints.

    Notes:
    - `positions` is float32 (n,3); `colors` is uint8 (n,3) or None.
    - Instances are shared by every caller of the registry, so treat the arrays
      as read-only.
    """

    name: str
    title: str
    positions: np.ndarray
    colors: np.ndarray | None = None
    point_size: float = 0.05
    background: tuple[float, float, float] = (0.0, 0.0, 0.0)
    tags: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        pos = np.array(self.positions, dtype=np.float32, order="C", copy=True)
        if pos.ndim != 2 or pos.shape[1] != 3:
            raise ValueError(f"positions must have shape (N,3), got {pos.shape}")
        pos.setflags(write=False)
        object.__setattr__(self, "positions", pos)

        if self.colors is not None:
            c = np.asarray(self.colors)
            if c.shape != pos.shape:
                raise ValueError(f"colors must have shape {pos.shape}, got {c.shape}")
            if np.issubdtype(c.dtype, np.floating):
                c = np.clip(c, 0.0, 1.0) * 255.0
            col = np.array(c, dtype=np.uint8, order="C", copy=True)
            col.setflags(write=False)
            object.__setattr__(self, "colors", col)

        if not np.isfinite(self.point_size) or float(self.point_size) <= 0:
            raise ValueError("point_size must be a finite positive number")

    @property
    def point_count(self) -> int:
        return int(self.positions.shape[0])

    def interleaved_points(self) -> bytes:
        """Little-endian payload: xyz float32, followed by rgb uint8 when colored."""

        pos = self.positions.astype("<f4", copy=False)
        if self.colors is None:
            return pos.tobytes(order="C")

        n = pos.shape[0]
        out = np.empty((n, 15), dtype=np.uint8)
        out[:, 0:12] = pos.view(np.uint8).reshape(n, 12)
        out[:, 12:15] = self.colors.reshape(n, 3)
        return out.tobytes(order="C")

    @property
    def bytes_per_point(self) -> int:
        return 12 + (3 if self.colors is not None else 0)
