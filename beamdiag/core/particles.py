"""Particle container for diagnostics.

A ParticleContainer holds the particles owned by one rank, partitioned by
mesh-refinement level and, within a level, by spatial tile. Each tile stores
its particles as a structure of arrays:

    positions   x, y, t           (t is the longitudinal, time-like coordinate)
    identity    ids, cpus         (rank-local id and creating rank)
    reals       px, py, pt, ...   (named real components)

Tile arrays may live on the device (CuPy) or on the host (NumPy). The
container also carries the single reference particle of the beam.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from beamdiag.config.defaults import (
    FIRST_LOCAL_ID,
    PARTICLE_REAL_DTYPE,
    REQUIRED_REAL_COMPONENTS,
)
from beamdiag.gpu.utils import get_cupy, is_device_array, require_gpu, to_host


@dataclass(frozen=True)
class RefPart:
    """Reference (synchronous) particle state.

    Attributes:
        s: Path length along the beamline
        x, y, z: Position
        t: Time-like coordinate
        px, py, pz: Momenta
        pt: Energy-like longitudinal momentum
    """

    s: float = 0.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    t: float = 0.0
    px: float = 0.0
    py: float = 0.0
    pz: float = 0.0
    pt: float = 0.0

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def as_tuple(self) -> Tuple[float, ...]:
        return tuple(getattr(self, name) for name in self.field_names())


@dataclass
class ParticleTile:
    """Particles of one tile at one refinement level (structure of arrays).

    Attributes:
        x, y, t: Particle positions
        ids: Rank-local particle ids
        cpus: Rank that created each particle
        real: Named real components; must contain px, py and pt
    """

    x: Any
    y: Any
    t: Any
    ids: Any
    cpus: Any
    real: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate component names and array lengths."""
        missing = [name for name in REQUIRED_REAL_COMPONENTS if name not in self.real]
        if missing:
            raise ValueError(f"ParticleTile is missing real components: {missing}")

        n = self.x.shape[0]
        arrays = {"y": self.y, "t": self.t, "ids": self.ids, "cpus": self.cpus}
        arrays.update(self.real)
        for name, array in arrays.items():
            if array.shape[0] != n:
                raise ValueError(
                    f"ParticleTile component '{name}' has {array.shape[0]} entries, "
                    f"expected {n}"
                )

    @classmethod
    def empty(cls, real_components: Sequence[str] = REQUIRED_REAL_COMPONENTS) -> "ParticleTile":
        """Tile with zero particles on the host."""
        return cls(
            x=np.zeros(0, dtype=PARTICLE_REAL_DTYPE),
            y=np.zeros(0, dtype=PARTICLE_REAL_DTYPE),
            t=np.zeros(0, dtype=PARTICLE_REAL_DTYPE),
            ids=np.zeros(0, dtype=np.int64),
            cpus=np.zeros(0, dtype=np.int32),
            real={name: np.zeros(0, dtype=PARTICLE_REAL_DTYPE) for name in real_components},
        )

    @property
    def num_particles(self) -> int:
        return int(self.x.shape[0])

    @property
    def px(self):
        return self.real["px"]

    @property
    def py(self):
        return self.real["py"]

    @property
    def pt(self):
        return self.real["pt"]

    @property
    def on_device(self) -> bool:
        return is_device_array(self.x)

    def to_host(self) -> "ParticleTile":
        """Copy of this tile with every array in host memory."""
        return ParticleTile(
            x=to_host(self.x),
            y=to_host(self.y),
            t=to_host(self.t),
            ids=to_host(self.ids),
            cpus=to_host(self.cpus),
            real={name: to_host(array) for name, array in self.real.items()},
        )

    def to_device(self) -> "ParticleTile":
        """Copy of this tile with every array in device memory.

        Raises:
            RuntimeError: If CuPy / a GPU is not available
        """
        require_gpu("ParticleTile.to_device needs a CUDA device")
        cp = get_cupy()
        return ParticleTile(
            x=cp.asarray(self.x),
            y=cp.asarray(self.y),
            t=cp.asarray(self.t),
            ids=cp.asarray(self.ids),
            cpus=cp.asarray(self.cpus),
            real={name: cp.asarray(array) for name, array in self.real.items()},
        )


class ParticleContainer:
    """Particles owned by one rank, partitioned by level and tile.

    Levels are numbered 0..finest_level. Within a level, tiles are kept in
    insertion order, which is the iteration order used by diagnostics.

    Example:
        >>> pc = ParticleContainer(rank=0)
        >>> pc.add_particles(0, 0, x=[0.0], y=[0.0], t=[0.0],
        ...                  px=[0.0], py=[0.0], pt=[0.0])
        array([1])
        >>> pc.total_number_of_particles()
        1
    """

    def __init__(
        self,
        rank: int = 0,
        ref_particle: Optional[RefPart] = None,
        real_components: Sequence[str] = REQUIRED_REAL_COMPONENTS,
    ):
        if rank < 0:
            raise ValueError(f"rank must be >= 0, got {rank}")
        missing = [name for name in REQUIRED_REAL_COMPONENTS if name not in real_components]
        if missing:
            raise ValueError(f"real_components is missing required components: {missing}")

        self.rank = rank
        self.real_components = tuple(real_components)
        self._levels: List[Dict[int, ParticleTile]] = []
        self._next_id = FIRST_LOCAL_ID
        self._ref_particle = ref_particle if ref_particle is not None else RefPart()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    @property
    def finest_level(self) -> int:
        """Index of the finest refinement level (-1 for a container without levels)."""
        return len(self._levels) - 1

    @property
    def num_levels(self) -> int:
        return len(self._levels)

    def add_level(self) -> int:
        """Append an empty refinement level and return its index."""
        self._levels.append({})
        return self.finest_level

    def set_tile(self, level: int, tile_index: int, tile: ParticleTile) -> None:
        """Store a tile, creating empty levels up to level if needed."""
        if level < 0:
            raise ValueError(f"level must be >= 0, got {level}")
        missing = [name for name in self.real_components if name not in tile.real]
        if missing:
            raise ValueError(f"tile is missing real components {missing}")
        while self.finest_level < level:
            self.add_level()
        self._levels[level][tile_index] = tile

    def get_tile(self, level: int, tile_index: int) -> ParticleTile:
        return self._levels[level][tile_index]

    def tiles(self, level: int) -> Iterator[Tuple[int, ParticleTile]]:
        """Iterate (tile_index, tile) pairs of one level in container order."""
        if not 0 <= level <= self.finest_level:
            raise IndexError(f"level {level} outside 0..{self.finest_level}")
        return iter(list(self._levels[level].items()))

    def number_of_particles(self, level: int) -> int:
        return sum(tile.num_particles for _, tile in self.tiles(level))

    def total_number_of_particles(self) -> int:
        return sum(self.number_of_particles(lev) for lev in range(self.finest_level + 1))

    def layout(self) -> List[Dict[int, int]]:
        """Particle count per tile, per level: [{tile_index: count}, ...]."""
        return [
            {index: tile.num_particles for index, tile in level.items()}
            for level in self._levels
        ]

    # ------------------------------------------------------------------
    # Particles
    # ------------------------------------------------------------------

    def add_particles(
        self,
        level: int,
        tile_index: int,
        x: Sequence[float],
        y: Sequence[float],
        t: Sequence[float],
        px: Sequence[float],
        py: Sequence[float],
        pt: Sequence[float],
        **real: Sequence[float],
    ) -> np.ndarray:
        """Create particles owned by this rank and append them to a tile.

        New particles get consecutive rank-local ids from this container's
        counter and this container's rank as creating rank. Appending to a
        device tile leaves the merged tile on the device.

        Returns:
            The rank-local ids assigned to the new particles
        """
        components = {"px": px, "py": py, "pt": pt}
        components.update(real)
        unknown = sorted(set(components) - set(self.real_components))
        if unknown:
            raise ValueError(f"unknown real components {unknown}")

        x = np.asarray(x, dtype=PARTICLE_REAL_DTYPE)
        n = x.shape[0]
        ids = np.arange(self._next_id, self._next_id + n, dtype=np.int64)
        new = ParticleTile(
            x=x,
            y=np.asarray(y, dtype=PARTICLE_REAL_DTYPE),
            t=np.asarray(t, dtype=PARTICLE_REAL_DTYPE),
            ids=ids,
            cpus=np.full(n, self.rank, dtype=np.int32),
            real={
                name: np.asarray(components[name], dtype=PARTICLE_REAL_DTYPE)
                if name in components
                else np.zeros(n, dtype=PARTICLE_REAL_DTYPE)
                for name in self.real_components
            },
        )

        if self.finest_level >= level and tile_index in self._levels[level]:
            existing = self._levels[level][tile_index]
            new = _concatenate_tiles(existing, new)
            if existing.on_device:
                new = new.to_device()
        self.set_tile(level, tile_index, new)
        self._next_id += n
        return ids

    # ------------------------------------------------------------------
    # Reference particle
    # ------------------------------------------------------------------

    def get_ref_particle(self) -> RefPart:
        return self._ref_particle

    def set_ref_particle(self, ref_particle: RefPart) -> None:
        self._ref_particle = ref_particle

    # ------------------------------------------------------------------
    # Copies
    # ------------------------------------------------------------------

    def make_alike(self) -> "ParticleContainer":
        """Empty container with the same rank, components and reference particle."""
        return ParticleContainer(
            rank=self.rank,
            ref_particle=self._ref_particle,
            real_components=self.real_components,
        )

    def copy_particles(self, other: "ParticleContainer") -> None:
        """Replace this container's particles with host copies of other's.

        Levels, tile indices and tile order are preserved; no particle moves
        between tiles or ranks.
        """
        self._levels = [
            {index: tile.to_host() for index, tile in level.items()}
            for level in other._levels
        ]
        self._next_id = other._next_id

    def __repr__(self) -> str:
        return (
            f"ParticleContainer(rank={self.rank}, levels={self.num_levels}, "
            f"particles={self.total_number_of_particles()})"
        )


def _concatenate_tiles(first: ParticleTile, second: ParticleTile) -> ParticleTile:
    """Host concatenation of two tiles with the same components."""
    def cat(a, b):
        return np.concatenate([to_host(a), to_host(b)])

    return ParticleTile(
        x=cat(first.x, second.x),
        y=cat(first.y, second.y),
        t=cat(first.t, second.t),
        ids=cat(first.ids, second.ids),
        cpus=cat(first.cpus, second.cpus),
        real={name: cat(first.real[name], second.real[name]) for name in first.real},
    )


def container_from_tiles(
    tiles: Mapping[Tuple[int, int], ParticleTile],
    rank: int = 0,
    ref_particle: Optional[RefPart] = None,
) -> ParticleContainer:
    """Build a container from {(level, tile_index): tile}, in mapping order."""
    pc = ParticleContainer(rank=rank, ref_particle=ref_particle)
    for (level, tile_index), tile in tiles.items():
        pc.set_tile(level, tile_index, tile)
    return pc
