"""Diagnostic output: per-rank text records of particles, invariants and the reference particle."""

from beamdiag.diagnostics.emitters import (
    HEADERS,
    RecordEmitter,
    emit_invariants,
    emit_particles,
    emit_ref_particle,
    header_line,
    resolve_output_type,
)
from beamdiag.diagnostics.output import DiagnosticOutput, emit
from beamdiag.diagnostics.readers import detect_output_type, load_diagnostic
from beamdiag.diagnostics.stream import DiagnosticFile, format_value, rank_file_name

__all__ = [
    "HEADERS",
    "RecordEmitter",
    "emit_invariants",
    "emit_particles",
    "emit_ref_particle",
    "header_line",
    "resolve_output_type",
    "DiagnosticOutput",
    "emit",
    "detect_output_type",
    "load_diagnostic",
    "DiagnosticFile",
    "format_value",
    "rank_file_name",
]
