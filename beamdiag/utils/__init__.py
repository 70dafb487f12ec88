"""Utilities package."""

from beamdiag.utils.visualization import (
    plot_invariants,
    plot_phase_space,
    plot_ref_particle,
)

__all__ = [
    'plot_invariants',
    'plot_phase_space',
    'plot_ref_particle',
]
