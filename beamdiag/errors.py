"""Custom exceptions for the :mod:`beamdiag` package."""
from __future__ import annotations


class DiagnosticError(Exception):
    """Base exception for diagnostic output errors."""


class UnknownOutputTypeError(DiagnosticError, ValueError):
    """The requested output type is not one of :class:`~beamdiag.config.enums.OutputType`."""


class StagingError(DiagnosticError, RuntimeError):
    """A host copy of a particle container does not reproduce its source."""


__all__ = [
    "DiagnosticError",
    "UnknownOutputTypeError",
    "StagingError",
]
