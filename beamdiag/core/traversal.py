"""Level/tile traversal of a host particle container."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np

from beamdiag.core.ids import local_ids_to_global
from beamdiag.core.particles import ParticleContainer


@dataclass(frozen=True)
class TileBatch:
    """Contiguous host particle data of one tile, ready for output.

    Attributes:
        level: Refinement level of the tile
        tile_index: Container-defined tile index
        global_ids: uint64 global particle ids
        x, y, t: Positions
        px, py, pt: Momenta
    """

    level: int
    tile_index: int
    global_ids: np.ndarray
    x: np.ndarray
    y: np.ndarray
    t: np.ndarray
    px: np.ndarray
    py: np.ndarray
    pt: np.ndarray

    @property
    def num_particles(self) -> int:
        return int(self.global_ids.shape[0])


def iter_tiles(container: ParticleContainer) -> Iterator[TileBatch]:
    """Yield one TileBatch per tile: levels ascending, tiles in container order.

    Empty tiles are yielded as empty batches; an empty level or a container
    without levels simply yields nothing for that level.

    Raises:
        ValueError: If a tile still lives in device memory
    """
    for lev in range(container.finest_level + 1):
        for tile_index, tile in container.tiles(lev):
            if tile.on_device:
                raise ValueError(
                    f"tile {tile_index} on level {lev} is in device memory; "
                    "stage the container to host first"
                )
            yield TileBatch(
                level=lev,
                tile_index=tile_index,
                global_ids=local_ids_to_global(tile.ids, tile.cpus),
                x=tile.x,
                y=tile.y,
                t=tile.t,
                px=tile.px,
                py=tile.py,
                pt=tile.pt,
            )
