"""
Configuration Enums for beamdiag

This module defines the enumeration types used to select diagnostics.

Import Policy:
    from beamdiag.config.enums import OutputType

DO NOT use: from beamdiag.config.enums import *
"""

from enum import Enum


class OutputType(Enum):
    """Kind of diagnostic record written by one output call.

    Options:
        PRINT_PARTICLES: Raw phase space of every particle (id x y t px py pt)
        PRINT_NONLINEAR_LENS_INVARIANTS: Invariants of motion of every particle
            under a nonlinear lens (id H I)
        PRINT_REF_PARTICLE: One line with the reference particle trajectory
            (step s x y z t px py pz pt)

    Note:
        The set is closed. Adding a member requires a header and a record
        handler in beamdiag.diagnostics.emitters, which checks coverage at
        import time.
    """
    PRINT_PARTICLES = "print_particles"
    PRINT_NONLINEAR_LENS_INVARIANTS = "print_nonlinear_lens_invariants"
    PRINT_REF_PARTICLE = "print_ref_particle"

    @property
    def per_particle(self) -> bool:
        """True if the record is written once per particle."""
        return self is not OutputType.PRINT_REF_PARTICLE
