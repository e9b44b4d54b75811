import asyncio
import time

import numpy as np

import lazyscenes
from lazyscenes import LazyRegistry, Scene, import_loader


async def _build_cube() -> Scene:
    # Stands in for a slow asset fetch.
    await asyncio.sleep(0.5)
    grid = np.linspace(-1.0, 1.0, 12)
    xs, ys, zs = np.meshgrid(grid, grid, grid, indexing="ij")
    positions = np.stack([xs.ravel(), ys.ravel(), zs.ravel()], axis=1)
    return Scene(name="cube", title="Cube", positions=positions, colors=(positions + 1.0) / 2.0)


def main() -> None:
    registry = LazyRegistry(
        {
            "xmas": import_loader("lazyscenes.scenes.xmas:build"),
            "rosePetals": import_loader("lazyscenes.scenes.rose_petals:build"),
            "cube": _build_cube,
        }
    )

    print("registered:", list(registry.keys()))
    print("cube state:", registry.state("cube").value)

    t0 = time.perf_counter()
    cube = registry.resolve("cube")
    print(f"cube loaded in {time.perf_counter() - t0:.2f}s ({cube.point_count} points)")

    t0 = time.perf_counter()
    assert registry.resolve("cube") is cube
    print(f"cached lookup in {(time.perf_counter() - t0) * 1e6:.0f}us")

    host = lazyscenes.run(port=0, open_browser=False, registry=registry)
    print("serving at", host.url)
    print("try:", host.url + "api/scenes/xmas?wait=0")

    try:
        while True:
            time.sleep(3600)
    except KeyboardInterrupt:
        registry.close()


if __name__ == "__main__":
    main()
