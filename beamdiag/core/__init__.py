"""Core data structures: particle container, identities, staging, traversal, invariants."""

from beamdiag.core.particles import (
    ParticleContainer,
    ParticleTile,
    RefPart,
    container_from_tiles,
)
from beamdiag.core.ids import global_to_local, local_id_to_global, local_ids_to_global
from beamdiag.core.staging import stage_to_host
from beamdiag.core.traversal import TileBatch, iter_tiles
from beamdiag.core.invariants import (
    InvariantParameters,
    NonlinearLensInvariants,
    nonlinear_lens_invariants,
)

__all__ = [
    "ParticleContainer",
    "ParticleTile",
    "RefPart",
    "container_from_tiles",
    "global_to_local",
    "local_id_to_global",
    "local_ids_to_global",
    "stage_to_host",
    "TileBatch",
    "iter_tiles",
    "InvariantParameters",
    "NonlinearLensInvariants",
    "nonlinear_lens_invariants",
]
