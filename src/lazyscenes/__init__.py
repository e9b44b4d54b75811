from __future__ import annotations

from .config import RegistrySettings
from .core.entry import EntrySnapshot, EntryState
from .core.errors import (
    DuplicateKeyError,
    LoadFailure,
    RegistryClosedError,
    RegistryError,
    ResolveTimeout,
    UnknownKeyError,
)
from .core.loaders import Loader, import_loader
from .core.presenter import Presentation, PresentationKind, PresentationOptions, ScenePresenter
from .core.registry import LazyRegistry
from .core.scene import Scene
from .runtime.server import SceneHost, run
from .scenes import create_scene_registry
from .sdk.client import SceneClient

__all__ = [
    "run",
    "SceneHost",
    "SceneClient",
    "LazyRegistry",
    "RegistrySettings",
    "EntryState",
    "EntrySnapshot",
    "Loader",
    "import_loader",
    "Scene",
    "create_scene_registry",
    "ScenePresenter",
    "Presentation",
    "PresentationKind",
    "PresentationOptions",
    "RegistryError",
    "DuplicateKeyError",
    "UnknownKeyError",
    "LoadFailure",
    "ResolveTimeout",
    "RegistryClosedError",
]
