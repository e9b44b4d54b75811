from __future__ import annotations

from .client import SceneClient

__all__ = ["SceneClient"]
