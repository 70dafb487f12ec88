"""Readers for diagnostic text files written by beamdiag."""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Union

import numpy as np

from beamdiag.config.defaults import DEFAULT_ENCODING
from beamdiag.config.enums import OutputType
from beamdiag.diagnostics.emitters import HEADERS


def load_diagnostic(path: Union[str, Path]) -> Dict[str, np.ndarray]:
    """Load a diagnostic file into one array per column.

    The first column ('id' or 'step') is returned as uint64 so global ids
    above 2**53 survive; the other columns are float64.

    Args:
        path: File written by beamdiag.emit

    Returns:
        Dictionary mapping header names to 1D arrays

    Raises:
        ValueError: If the file is empty or a data line has the wrong field count
    """
    with open(path, encoding=DEFAULT_ENCODING) as f:
        lines = [line for line in f.read().splitlines() if line.strip()]
    if not lines:
        raise ValueError(f"{path} is empty")

    names = lines[0].split()
    rows = [line.split() for line in lines[1:]]
    for lineno, row in enumerate(rows, start=2):
        if len(row) != len(names):
            raise ValueError(
                f"{path}:{lineno}: expected {len(names)} fields, got {len(row)}"
            )

    data = {names[0]: np.array([int(row[0]) for row in rows], dtype=np.uint64)}
    for col, name in enumerate(names[1:], start=1):
        data[name] = np.array([float(row[col]) for row in rows], dtype=np.float64)
    return data


def detect_output_type(path: Union[str, Path]) -> OutputType:
    """Identify the output type of a diagnostic file from its header line."""
    with open(path, encoding=DEFAULT_ENCODING) as f:
        names = tuple(f.readline().split())
    for output_type, header in HEADERS.items():
        if names == header:
            return output_type
    raise ValueError(f"{path} does not start with a known diagnostic header: {names}")
