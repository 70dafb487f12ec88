"""
Default Configuration Constants for beamdiag

This module contains ALL default values used by the diagnostics writer.
This is the Single Source of Truth (SSOT) for default configuration.

IMPORTANT Import Policies:
    1. DO NOT use: from beamdiag.config.defaults import *
       This causes namespace pollution and makes tracking difficult.

    2. DO use explicit imports:
       from beamdiag.config.defaults import DEFAULT_INVARIANT_TN, DEFAULT_PRINT_PRECISION

    3. DO NOT define defaults elsewhere. All defaults must be in this file.
"""

# =============================================================================
# Run Configuration Keys
# =============================================================================

# Prefix of all diagnostic keys in the run configuration store
DIAG_PREFIX = "diag"

# =============================================================================
# Nonlinear Lens Invariant Defaults
# =============================================================================

# Twiss alpha at the lens location (dimensionless)
DEFAULT_INVARIANT_ALPHA = 0.0

# Twiss beta at the lens location (m)
# Must be > 0: coordinates are normalized by sqrt(beta)
DEFAULT_INVARIANT_BETA = 1.0

# Dimensionless strength of the nonlinear lens
# |tn| >= 0.5 makes the lens potential unbounded (unstable motion)
DEFAULT_INVARIANT_TN = 0.4

# Lens scale parameter (m^(1/2))
# Must be != 0: coordinates are normalized by cn
DEFAULT_INVARIANT_CN = 0.01

# Bound on |tn| for stable motion
INVARIANT_TN_STABILITY_LIMIT = 0.5

# =============================================================================
# Output Defaults
# =============================================================================

# Significant digits for real-valued fields
# 6 matches the default precision of a C++ output stream
DEFAULT_PRINT_PRECISION = 6

# Write one file per rank (<file_name>.<rank>) instead of the bare file name
DEFAULT_PER_RANK_FILES = False

# Text encoding of diagnostic files
DEFAULT_ENCODING = "utf-8"

# =============================================================================
# Particle Identity
# =============================================================================

# Number of bits reserved for the rank-local particle id
# global_id = (rank << GLOBAL_ID_LOCAL_BITS) | local_id
GLOBAL_ID_LOCAL_BITS = 32

# First rank-local id handed out by a particle container
FIRST_LOCAL_ID = 1

# =============================================================================
# Particle Layout
# =============================================================================

# Real (structure-of-arrays) components every particle tile must carry
REQUIRED_REAL_COMPONENTS = ("px", "py", "pt")

# Floating point dtype of particle data
PARTICLE_REAL_DTYPE = "float64"
