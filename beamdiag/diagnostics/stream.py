"""Text stream for diagnostic records.

One DiagnosticFile is opened per output call and kept open while every
level, tile and particle of that call is written. In append mode a missing
file is created and an existing one is extended; otherwise the file is
started over so the header is its first line.
"""

from __future__ import annotations

import logging
import numbers
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import numpy as np

from beamdiag.config.defaults import DEFAULT_ENCODING, DEFAULT_PRINT_PRECISION

logger = logging.getLogger(__name__)


def rank_file_name(file_name: Union[str, Path], rank: int) -> Path:
    """Per-rank file name: '<file_name>.<rank>'."""
    file_name = Path(file_name)
    return file_name.with_name(f"{file_name.name}.{rank}")


def format_value(value, precision: int = DEFAULT_PRINT_PRECISION) -> str:
    """Format one field the way a default C++ output stream would.

    Integers are written verbatim; reals use '%g' with `precision`
    significant digits (1.0 -> '1', 0.1 -> '0.1', 1e-07 -> '1e-07').
    """
    if isinstance(value, (bool, np.bool_)):
        raise TypeError("boolean fields are not supported in diagnostic records")
    if isinstance(value, numbers.Integral):
        return str(int(value))
    return f"{float(value):.{precision}g}"


class DiagnosticFile:
    """Context manager owning one open diagnostic output stream.

    Example:
        >>> with DiagnosticFile("ref_particle.txt") as out:
        ...     out.write_record(("step", "s"))
        ...     out.write_record((0, 0.0))
    """

    def __init__(
        self,
        file_name: Union[str, Path],
        precision: int = DEFAULT_PRINT_PRECISION,
        encoding: str = DEFAULT_ENCODING,
        append: bool = True,
    ):
        if precision <= 0:
            raise ValueError(f"precision must be > 0, got {precision}")
        self.file_name = Path(file_name)
        self.precision = precision
        self.encoding = encoding
        self.append = append
        self.lines_written = 0
        self._file = None

    def open(self) -> "DiagnosticFile":
        if self._file is not None:
            raise RuntimeError(f"{self.file_name} is already open")
        mode = "a" if self.append else "w"
        self._file = open(self.file_name, mode, encoding=self.encoding, newline="\n")
        return self

    def close(self) -> None:
        if self._file is not None:
            try:
                self._file.close()
            finally:
                self._file = None

    @property
    def closed(self) -> bool:
        return self._file is None

    def __enter__(self) -> "DiagnosticFile":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def write_line(self, line: str) -> None:
        """Write one pre-formatted line (newline appended)."""
        if self._file is None:
            raise ValueError(f"I/O operation on closed diagnostic file {self.file_name}")
        self._file.write(line + "\n")
        self.lines_written += 1

    def write_record(self, fields: Sequence) -> None:
        """Write one space-separated record.

        Strings are written as-is (header names), numbers via format_value.
        """
        self.write_line(" ".join(
            item if isinstance(item, str) else format_value(item, self.precision)
            for item in fields
        ))

    def write_columns(self, columns: Iterable[np.ndarray], integer_columns: int = 1) -> int:
        """Write one record per row of equally long columns.

        The first `integer_columns` columns (ids) are written verbatim; the
        rest are real fields and are formatted as floats whatever their dtype.

        Returns:
            Number of lines written
        """
        columns = list(columns)
        if not columns:
            return 0
        n = len(columns[0])
        for column in columns[1:]:
            if len(column) != n:
                raise ValueError("all columns must have the same length")
        if n == 0:
            return 0

        formatted = [
            self._format_column(column, integer=index < integer_columns)
            for index, column in enumerate(columns)
        ]
        lines = [" ".join(row) for row in zip(*formatted)]
        if self._file is None:
            raise ValueError(f"I/O operation on closed diagnostic file {self.file_name}")
        self._file.write("\n".join(lines) + "\n")
        self.lines_written += n
        return n

    def _format_column(self, column: np.ndarray, integer: bool) -> list:
        column = np.asarray(column)
        if integer:
            if not np.issubdtype(column.dtype, np.integer):
                raise TypeError(f"id column must have an integer dtype, got {column.dtype}")
            return [str(value) for value in column.tolist()]
        fmt = f"{{:.{self.precision}g}}"
        return [fmt.format(value) for value in column.astype(np.float64).tolist()]

    def flush(self) -> None:
        if self._file is not None:
            self._file.flush()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"DiagnosticFile({str(self.file_name)!r}, {state})"


def open_diagnostic_file(
    file_name: Union[str, Path],
    rank: Optional[int] = None,
    precision: int = DEFAULT_PRINT_PRECISION,
    append: bool = True,
) -> DiagnosticFile:
    """Create (not yet opened) DiagnosticFile, per rank when rank is given."""
    path = rank_file_name(file_name, rank) if rank is not None else Path(file_name)
    logger.debug("Diagnostic stream bound to %s (append=%s)", path, append)
    return DiagnosticFile(path, precision=precision, append=append)
