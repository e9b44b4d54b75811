from __future__ import annotations

from .entry import Entry, EntrySnapshot, EntryState, Outcome
from .errors import (
    DuplicateKeyError,
    LoadFailure,
    RegistryClosedError,
    RegistryError,
    ResolveTimeout,
    UnknownKeyError,
)
from .loaders import ImportLoader, Loader, call_loader_blocking, import_loader, is_async_loader
from .presenter import Presentation, PresentationKind, PresentationOptions, ScenePresenter
from .registry import LazyRegistry, RegistryKeys
from .scene import Scene

__all__ = [
    "Entry",
    "EntrySnapshot",
    "EntryState",
    "Outcome",
    "RegistryError",
    "DuplicateKeyError",
    "UnknownKeyError",
    "LoadFailure",
    "ResolveTimeout",
    "RegistryClosedError",
    "Loader",
    "ImportLoader",
    "import_loader",
    "is_async_loader",
    "call_loader_blocking",
    "LazyRegistry",
    "RegistryKeys",
    "Presentation",
    "PresentationKind",
    "PresentationOptions",
    "ScenePresenter",
    "Scene",
]
