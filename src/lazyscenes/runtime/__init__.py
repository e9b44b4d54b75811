from __future__ import annotations

from .app import create_app
from .server import SceneHost, run

__all__ = ["create_app", "SceneHost", "run"]
