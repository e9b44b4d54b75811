from __future__ import annotations

import pytest

from lazyscenes.core import DuplicateKeyError, EntryState, Scene
from lazyscenes.scenes import SCENE_TARGETS, create_scene_registry


def test_catalog_keys_and_initial_state() -> None:
    with create_scene_registry() as reg:
        assert list(reg.keys()) == ["xmas", "panorama", "rosePetals"]
        assert all(reg.state(k) is EntryState.UNLOADED for k in reg.keys())


def test_each_catalog_scene_builds() -> None:
    with create_scene_registry() as reg:
        for key in SCENE_TARGETS:
            scene = reg.resolve(key, timeout=30)
            assert isinstance(scene, Scene)
            assert scene.name == key
            assert scene.point_count > 0
            assert scene.colors is not None
            assert reg.resolve(key) is scene


def test_registries_are_independent() -> None:
    with create_scene_registry() as a, create_scene_registry() as b:
        scene_a = a.resolve("panorama", timeout=30)
        assert b.state("panorama") is EntryState.UNLOADED
        assert b.resolve("panorama", timeout=30) is not scene_a


def test_extra_loaders_are_appended() -> None:
    with create_scene_registry({"custom": lambda: "custom-scene"}) as reg:
        assert list(reg.keys())[-1] == "custom"
        assert reg.resolve("custom", timeout=5) == "custom-scene"

    with pytest.raises(DuplicateKeyError):
        create_scene_registry({"xmas": lambda: None})
