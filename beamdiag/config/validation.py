"""
Configuration Validation Utilities

This module provides validation functions for diagnostic configuration.

Import Policy:
    from beamdiag.config.validation import validate_invariant_parameters, warn_if_unsafe

DO NOT use: from beamdiag.config.validation import *
"""

from __future__ import annotations

import math
import warnings
from typing import TYPE_CHECKING, List, Tuple

from beamdiag.config.defaults import INVARIANT_TN_STABILITY_LIMIT

if TYPE_CHECKING:
    from beamdiag.core.invariants import InvariantParameters


class ConfigurationError(Exception):
    """Raised when configuration validation fails."""

    pass


class ConfigurationWarning(Warning):
    """Warning for potentially unsafe configuration choices."""

    pass


def validate_invariant_parameters(
    params: "InvariantParameters",
    raise_on_error: bool = True,
) -> Tuple[bool, List[str]]:
    """Validate nonlinear lens invariant parameters.

    Invariants checked:
        1. All four parameters are finite
        2. beta > 0 (coordinates are normalized by sqrt(beta))
        3. cn != 0 (coordinates are normalized by cn)

    Args:
        params: InvariantParameters to validate
        raise_on_error: If True, raise ConfigurationError on validation failure

    Returns:
        Tuple of (is_valid, error_messages)

    Raises:
        ConfigurationError: If validation fails and raise_on_error=True
    """
    errors = []

    for name in ("alpha", "beta", "tn", "cn"):
        value = getattr(params, name)
        if not math.isfinite(value):
            errors.append(f"diag.{name} must be finite, got {value}")

    if params.beta <= 0.0:
        errors.append(f"diag.beta must be > 0, got {params.beta}")

    if params.cn == 0.0:
        errors.append("diag.cn must be != 0")

    if errors:
        if raise_on_error:
            raise ConfigurationError(
                f"Invariant parameter validation failed with {len(errors)} error(s):\n"
                + "\n".join(f"  - {err}" for err in errors)
            )
        return False, errors

    return True, []


def warn_if_unsafe(params: "InvariantParameters") -> List[str]:
    """Check for lens parameters that are legal but physically suspicious.

    Warnings are issued via Python's warnings module.

    Returns:
        List of warning messages (empty if no warnings)
    """
    warnings_list = []

    if abs(params.tn) >= INVARIANT_TN_STABILITY_LIMIT:
        warnings_list.append(
            f"|diag.tn| ({abs(params.tn)}) is >= {INVARIANT_TN_STABILITY_LIMIT}. "
            "The lens potential is unbounded and the invariants do not describe "
            "bounded motion."
        )

    for warning_msg in warnings_list:
        warnings.warn(warning_msg, ConfigurationWarning, stacklevel=2)

    return warnings_list
