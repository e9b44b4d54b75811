from __future__ import annotations

from collections.abc import Hashable, Mapping

from ..config import RegistrySettings
from ..core.loaders import Loader, import_loader
from ..core.registry import LazyRegistry
from ..core.scene import Scene

# Scene modules are only imported when their key is first resolved.
SCENE_TARGETS: dict[str, str] = {
    "xmas": "lazyscenes.scenes.xmas:build",
    "panorama": "lazyscenes.scenes.panorama:build",
    "rosePetals": "lazyscenes.scenes.rose_petals:build",
}


def create_scene_registry(
    extra: Mapping[Hashable, Loader[Scene]] | None = None,
    *,
    settings: RegistrySettings | None = None,
) -> LazyRegistry[Scene]:
    """Build a fresh registry holding the demo catalog plus any `extra` loaders."""

    registry: LazyRegistry[Scene] = LazyRegistry(settings=settings)
    for key, target in SCENE_TARGETS.items():
        registry.register(key, import_loader(target))
    for key, loader in (extra or {}).items():
        registry.register(key, loader)
    return registry


__all__ = ["SCENE_TARGETS", "create_scene_registry"]
