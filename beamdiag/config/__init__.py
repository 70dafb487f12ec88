"""Configuration Module - Single Source of Truth for Diagnostic Parameters

Default Configuration (module constants):
    from beamdiag.config.defaults import DEFAULT_INVARIANT_TN

Run Configuration:
    from beamdiag.config import ParameterStore

    store = ParameterStore.from_yaml("run.yaml")
    tn = store.query_add("diag.tn", DEFAULT_INVARIANT_TN)

Import Policy:
    DO NOT use: from beamdiag.config import *

Submodules:
    defaults: Module-level default constants
    enums: Output type enumeration
    parameters: Run configuration store (ParameterStore)
    validation: Validation utilities (validate_invariant_parameters, warn_if_unsafe)
"""

from beamdiag.config.enums import OutputType
from beamdiag.config.parameters import ParameterStore
from beamdiag.config.validation import (
    ConfigurationError,
    ConfigurationWarning,
    validate_invariant_parameters,
    warn_if_unsafe,
)


__all__ = [
    # Enums
    "OutputType",
    # Run configuration
    "ParameterStore",
    # Validation
    "ConfigurationError",
    "ConfigurationWarning",
    "validate_invariant_parameters",
    "warn_if_unsafe",
]
