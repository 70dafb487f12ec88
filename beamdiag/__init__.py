"""Particle Diagnostics Writer for Particle-in-Cell Beam Dynamics

Writes per-rank text diagnostics of a mesh-refined, tiled particle container
at selected simulation steps:

- raw phase space of every particle          (id x y t px py pt)
- nonlinear lens invariants of every particle (id H I)
- the reference particle trajectory          (step s x y z t px py pz pt)

Key Principles:
- Device particle data is staged to a host copy for every call
- Global particle ids are packed from (rank, rank-local id)
- Lens model parameters are read once per call from the run configuration
- One file handle per call, appended to across steps

Version: 1.0
"""

__version__ = "1.0"

# Configuration
from beamdiag.config.enums import OutputType
from beamdiag.config.parameters import ParameterStore

# Core data structures
from beamdiag.core.particles import ParticleContainer, ParticleTile, RefPart
from beamdiag.core.ids import global_to_local, local_id_to_global
from beamdiag.core.invariants import (
    InvariantParameters,
    NonlinearLensInvariants,
    nonlinear_lens_invariants,
)
from beamdiag.core.staging import stage_to_host

# Diagnostics
from beamdiag.diagnostics.output import DiagnosticOutput, emit
from beamdiag.diagnostics.readers import load_diagnostic

# Errors
from beamdiag.errors import DiagnosticError, StagingError, UnknownOutputTypeError

__all__ = [
    # Version
    "__version__",
    # Configuration
    "OutputType",
    "ParameterStore",
    # Core
    "ParticleContainer",
    "ParticleTile",
    "RefPart",
    "global_to_local",
    "local_id_to_global",
    "InvariantParameters",
    "NonlinearLensInvariants",
    "nonlinear_lens_invariants",
    "stage_to_host",
    # Diagnostics
    "DiagnosticOutput",
    "emit",
    "load_diagnostic",
    # Errors
    "DiagnosticError",
    "StagingError",
    "UnknownOutputTypeError",
]
