"""Diagnostic output driver.

emit() writes one diagnostic record set for one step:

    1. resolve the output type (unknown types fail before any I/O)
    2. read the invariant parameters once (invariant output only)
    3. open the per-call stream: append-or-create when appending, otherwise
       start the file over
    4. write the header unless appending
    5. stage the container to host memory
    6. traverse levels/tiles and write per-particle records, or write the
       reference particle taken from the source container

Every rank calls emit() independently; nothing is exchanged between ranks.

Example:
    >>> from beamdiag import emit, OutputType
    >>> emit(pc, OutputType.PRINT_REF_PARTICLE, "diags/ref_particle", step=0, append=False)
    >>> emit(pc, OutputType.PRINT_REF_PARTICLE, "diags/ref_particle", step=1, append=True)
"""

from __future__ import annotations

import logging
from contextlib import nullcontext
from pathlib import Path
from typing import Optional, Set, Union

from beamdiag.config.defaults import (
    DEFAULT_PER_RANK_FILES,
    DEFAULT_PRINT_PRECISION,
    DIAG_PREFIX,
)
from beamdiag.config.enums import OutputType
from beamdiag.config.parameters import ParameterStore
from beamdiag.core.invariants import (
    InvariantCalculator,
    InvariantParameters,
    nonlinear_lens_invariants,
)
from beamdiag.core.particles import ParticleContainer
from beamdiag.core.staging import stage_to_host
from beamdiag.core.traversal import iter_tiles
from beamdiag.diagnostics.emitters import RecordEmitter, resolve_output_type
from beamdiag.diagnostics.stream import open_diagnostic_file
from beamdiag.gpu.profiling import Profiler

logger = logging.getLogger(__name__)

ParameterSource = Union[InvariantParameters, ParameterStore, None]


def _resolve_invariant_parameters(parameters: ParameterSource) -> InvariantParameters:
    if isinstance(parameters, InvariantParameters):
        params = parameters
    else:
        params = InvariantParameters.from_store(parameters)
    return params.validate()


def emit(
    container: ParticleContainer,
    output_type: Union[OutputType, str],
    file_name: Union[str, Path],
    step: int,
    append: bool,
    *,
    parameters: ParameterSource = None,
    invariant_calculator: InvariantCalculator = nonlinear_lens_invariants,
    precision: int = DEFAULT_PRINT_PRECISION,
    per_rank_files: bool = DEFAULT_PER_RANK_FILES,
    profiler: Optional[Profiler] = None,
) -> None:
    """Write (or append) one diagnostic file for the local rank.

    Args:
        container: Source particle container (read only)
        output_type: Record kind; an OutputType or its value string
        file_name: Output file; '<file_name>.<rank>' when per_rank_files
        step: Current step number (written by reference particle output)
        append: If False the file is started over with a header line
        parameters: Invariant parameters, or the run ParameterStore to read
            diag.alpha/beta/tn/cn from (defaults when absent)
        invariant_calculator: calculator(x, y, px, py, alpha, beta, tn, cn) -> (H, I)
        precision: Significant digits of real fields
        per_rank_files: Suffix the file name with the rank
        profiler: Optional Profiler timing the call and the host staging

    Raises:
        UnknownOutputTypeError: Unsupported output type (nothing is written)
        ConfigurationError: Invalid invariant parameters (nothing is written)
        StagingError: Host copy does not reproduce the container layout
        OSError: The file cannot be opened or written
    """
    output_type = resolve_output_type(output_type)

    params = None
    if output_type is OutputType.PRINT_NONLINEAR_LENS_INVARIANTS:
        params = _resolve_invariant_parameters(parameters)
    emitter = RecordEmitter(output_type, params=params, calculator=invariant_calculator)

    def region(name):
        return profiler.profile(name) if profiler is not None else nullcontext()

    stream = open_diagnostic_file(
        file_name,
        rank=container.rank if per_rank_files else None,
        precision=precision,
        append=append,
    )

    with region("beamdiag.emit"), stream:
        if not append:
            stream.write_line(emitter.header())

        with region("beamdiag.stage_to_host"):
            host = stage_to_host(container)

        if output_type.per_particle:
            for batch in iter_tiles(host):
                emitter.emit_batch(stream, batch)
        else:
            emitter.emit_reference(stream, step, container.get_ref_particle())

    logger.debug(
        "Wrote %s for step %d to %s (%d line(s), append=%s)",
        output_type.value,
        step,
        stream.file_name,
        stream.lines_written,
        append,
    )


class DiagnosticOutput:
    """Diagnostic writer configured from the run parameters.

    Reads diag.precision and diag.per_rank_files from the store and passes
    the store on for the invariant parameters. When append is left as None,
    the first write to a path through this writer starts a new file (with
    header) and later writes to the same path append.

    Example:
        >>> diags = DiagnosticOutput(ParameterStore.from_yaml("run.yaml"))
        >>> for step in range(n_steps):
        ...     push(pc)
        ...     diags.write(pc, OutputType.PRINT_REF_PARTICLE, "diags/ref_particle", step)
    """

    def __init__(
        self,
        parameters: Optional[ParameterStore] = None,
        invariant_calculator: InvariantCalculator = nonlinear_lens_invariants,
        profiler: Optional[Profiler] = None,
    ):
        self.parameters = parameters if parameters is not None else ParameterStore()
        self.invariant_calculator = invariant_calculator
        self.profiler = profiler
        self.precision = int(self.parameters.query_add(
            f"{DIAG_PREFIX}.precision",
            DEFAULT_PRINT_PRECISION,
        ))
        self.per_rank_files = bool(self.parameters.query_add(
            f"{DIAG_PREFIX}.per_rank_files",
            DEFAULT_PER_RANK_FILES,
        ))
        self._started: Set[str] = set()

    def write(
        self,
        container: ParticleContainer,
        output_type: Union[OutputType, str],
        file_name: Union[str, Path],
        step: int,
        append: Optional[bool] = None,
    ) -> None:
        """Write one diagnostic record set; see emit()."""
        key = str(Path(file_name))
        if append is None:
            append = key in self._started

        emit(
            container,
            output_type,
            file_name,
            step,
            append,
            parameters=self.parameters,
            invariant_calculator=self.invariant_calculator,
            precision=self.precision,
            per_rank_files=self.per_rank_files,
            profiler=self.profiler,
        )
        self._started.add(key)
