from __future__ import annotations

from .scenes import mount_scenes_api

__all__ = ["mount_scenes_api"]
