"""Record emitters: one formatted line per particle (or per reference particle).

Header and data field order per output type:

    PRINT_PARTICLES                  id x y t px py pt
    PRINT_NONLINEAR_LENS_INVARIANTS  id H I
    PRINT_REF_PARTICLE               step s x y z t px py pz pt
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Tuple, Union

import numpy as np

from beamdiag.config.enums import OutputType
from beamdiag.core.invariants import (
    InvariantCalculator,
    InvariantParameters,
    nonlinear_lens_invariants,
)
from beamdiag.core.particles import RefPart
from beamdiag.core.traversal import TileBatch
from beamdiag.diagnostics.stream import DiagnosticFile
from beamdiag.errors import UnknownOutputTypeError

HEADERS: Dict[OutputType, Tuple[str, ...]] = {
    OutputType.PRINT_PARTICLES: ("id", "x", "y", "t", "px", "py", "pt"),
    OutputType.PRINT_NONLINEAR_LENS_INVARIANTS: ("id", "H", "I"),
    OutputType.PRINT_REF_PARTICLE: ("step",) + RefPart.field_names(),
}


def resolve_output_type(output_type: Union[OutputType, str]) -> OutputType:
    """Map an OutputType or its value/name string onto the closed OutputType set.

    Raises:
        UnknownOutputTypeError: For anything else
    """
    if isinstance(output_type, OutputType):
        return output_type
    if isinstance(output_type, str):
        for member in OutputType:
            if output_type in (member.value, member.name):
                return member
    raise UnknownOutputTypeError(
        f"Unknown output type {output_type!r}; expected one of "
        f"{[member.value for member in OutputType]}"
    )


def header_line(output_type: OutputType) -> str:
    return " ".join(HEADERS[resolve_output_type(output_type)])


def write_header(stream: DiagnosticFile, output_type: OutputType) -> None:
    stream.write_line(header_line(output_type))


def emit_particles(stream: DiagnosticFile, batch: TileBatch) -> int:
    """Write 'id x y t px py pt' for every particle of a batch."""
    return stream.write_columns(
        (batch.global_ids, batch.x, batch.y, batch.t, batch.px, batch.py, batch.pt)
    )


def emit_invariants(
    stream: DiagnosticFile,
    batch: TileBatch,
    params: InvariantParameters,
    calculator: InvariantCalculator = nonlinear_lens_invariants,
) -> int:
    """Write 'id H I' for every particle of a batch."""
    if batch.num_particles == 0:
        return 0
    H, I = calculator(batch.x, batch.y, batch.px, batch.py, *params.as_tuple())
    H = np.broadcast_to(np.asarray(H, dtype=np.float64), (batch.num_particles,))
    I = np.broadcast_to(np.asarray(I, dtype=np.float64), (batch.num_particles,))
    return stream.write_columns((batch.global_ids, H, I))


def emit_ref_particle(stream: DiagnosticFile, step: int, ref_part: RefPart) -> int:
    """Write 'step s x y z t px py pz pt' for the reference particle."""
    stream.write_record((int(step),) + ref_part.as_tuple())
    return 1


class RecordEmitter:
    """Dispatches tile batches and the reference particle for one output type.

    Example:
        >>> emitter = RecordEmitter(OutputType.PRINT_PARTICLES)
        >>> for batch in iter_tiles(host_container):
        ...     emitter.emit_batch(stream, batch)
    """

    def __init__(
        self,
        output_type: Union[OutputType, str],
        params: Optional[InvariantParameters] = None,
        calculator: InvariantCalculator = nonlinear_lens_invariants,
    ):
        self.output_type = resolve_output_type(output_type)
        if self.output_type is OutputType.PRINT_NONLINEAR_LENS_INVARIANTS and params is None:
            raise ValueError("invariant output needs InvariantParameters")
        self.params = params
        self.calculator = calculator

    def header(self) -> str:
        return header_line(self.output_type)

    def emit_batch(self, stream: DiagnosticFile, batch: TileBatch) -> int:
        """Write the per-particle records of one batch; returns lines written."""
        return _BATCH_HANDLERS[self.output_type](self, stream, batch)

    def emit_reference(self, stream: DiagnosticFile, step: int, ref_part: RefPart) -> int:
        if self.output_type is not OutputType.PRINT_REF_PARTICLE:
            raise ValueError(f"{self.output_type.value} does not write the reference particle")
        return emit_ref_particle(stream, step, ref_part)

    def _particles(self, stream, batch):
        return emit_particles(stream, batch)

    def _invariants(self, stream, batch):
        return emit_invariants(stream, batch, self.params, self.calculator)

    def _reference(self, stream, batch):
        raise ValueError("reference particle output is not written per tile")


_BATCH_HANDLERS: Dict[OutputType, Callable[..., int]] = {
    OutputType.PRINT_PARTICLES: RecordEmitter._particles,
    OutputType.PRINT_NONLINEAR_LENS_INVARIANTS: RecordEmitter._invariants,
    OutputType.PRINT_REF_PARTICLE: RecordEmitter._reference,
}

_missing = set(OutputType) - set(HEADERS) | set(OutputType) - set(_BATCH_HANDLERS)
if _missing:
    raise RuntimeError(f"output types without a header or handler: {sorted(m.value for m in _missing)}")
