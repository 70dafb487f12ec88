"""Pytest configuration and shared fixtures for beamdiag tests."""

import matplotlib
matplotlib.use("Agg")

import pytest
import numpy as np

from beamdiag.config.parameters import ParameterStore
from beamdiag.core.invariants import InvariantParameters
from beamdiag.core.particles import ParticleContainer, ParticleTile, RefPart


def make_tile(ids, cpus, x, y, t, px, py, pt):
    """Host tile from plain sequences."""
    return ParticleTile(
        x=np.asarray(x, dtype=np.float64),
        y=np.asarray(y, dtype=np.float64),
        t=np.asarray(t, dtype=np.float64),
        ids=np.asarray(ids, dtype=np.int64),
        cpus=np.asarray(cpus, dtype=np.int32),
        real={
            "px": np.asarray(px, dtype=np.float64),
            "py": np.asarray(py, dtype=np.float64),
            "pt": np.asarray(pt, dtype=np.float64),
        },
    )


# Fixtures for particle containers


@pytest.fixture
def tile_factory():
    """make_tile as a fixture."""
    return make_tile


@pytest.fixture
def ref_particle():
    """Reference particle at s=10 moving along z."""
    return RefPart(s=10.0, x=0.0, y=0.0, z=5.0, t=0.0, px=0.0, py=0.0, pz=1.0, pt=0.0)


@pytest.fixture
def single_particle_container(ref_particle):
    """One particle (local id 3, created on rank 2) on level 0, tile 0."""
    pc = ParticleContainer(rank=2, ref_particle=ref_particle)
    pc.set_tile(0, 0, make_tile(
        ids=[3], cpus=[2], x=[1.0], y=[2.0], t=[0.0], px=[0.1], py=[0.2], pt=[0.3],
    ))
    return pc


@pytest.fixture
def multi_level_container(ref_particle):
    """Three levels: level 0 with an empty tile, level 1 without tiles, level 2.

    Particle counts: level 0 -> 2 + 0 + 3, level 1 -> 0, level 2 -> 1 (6 total).
    """
    pc = ParticleContainer(rank=0, ref_particle=ref_particle)
    pc.set_tile(0, 4, make_tile(
        ids=[1, 2], cpus=[0, 0],
        x=[0.1, 0.2], y=[0.0, 0.1], t=[0.0, 0.0],
        px=[1e-3, 2e-3], py=[0.0, 1e-3], pt=[-1.0, -1.0],
    ))
    pc.set_tile(0, 1, ParticleTile.empty())
    pc.set_tile(0, 7, make_tile(
        ids=[3, 4, 5], cpus=[0, 1, 1],
        x=[-0.1, 0.0, 0.3], y=[0.2, -0.2, 0.0], t=[1.0, 2.0, 3.0],
        px=[0.0, 0.0, -1e-3], py=[1e-3, 0.0, 0.0], pt=[0.5, 0.5, 0.5],
    ))
    pc.set_tile(2, 0, make_tile(
        ids=[6], cpus=[0], x=[0.05], y=[0.05], t=[0.0], px=[0.0], py=[0.0], pt=[0.0],
    ))
    return pc


@pytest.fixture
def empty_container(ref_particle):
    """Container without refinement levels."""
    return ParticleContainer(rank=0, ref_particle=ref_particle)


# Fixtures for configuration


@pytest.fixture
def parameter_store():
    """Run configuration overriding two of the lens parameters."""
    return ParameterStore({"diag": {"tn": 0.3, "cn": 0.02}})


@pytest.fixture
def unit_lens_params():
    """Lens parameters with unit normalization."""
    return InvariantParameters(alpha=0.0, beta=1.0, tn=0.0, cn=1.0)


# Utility fixtures for testing


@pytest.fixture
def rtol():
    """Default relative tolerance."""
    return 1e-12
