"""Run Configuration Store

Flat, dotted-key parameter table for a simulation run (e.g. 'diag.tn').
The store is built from a nested mapping or a YAML input file and is passed
explicitly to the diagnostics; nothing here is process-wide state.

Import Policy:
    from beamdiag.config.parameters import ParameterStore
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterator, Mapping, Optional, Union

import yaml


def _flatten(mapping: Mapping[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flatten a nested mapping into dotted keys."""
    flat: Dict[str, Any] = {}
    for key, value in mapping.items():
        dotted = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(_flatten(value, dotted))
        else:
            flat[dotted] = value
    return flat


class ParameterStore:
    """Dotted-key run parameters with query / query-and-record semantics.

    Values that were queried with a default through query_add() are recorded
    in the table, so to_dict() reports every parameter a run actually used.

    Example:
        >>> store = ParameterStore({"diag": {"tn": 0.3}})
        >>> store.query("diag.tn")
        0.3
        >>> store.query_add("diag.cn", 0.01)
        0.01
        >>> store.contains("diag.cn")
        True
    """

    def __init__(self, table: Optional[Mapping[str, Any]] = None):
        self._table: Dict[str, Any] = _flatten(table) if table else {}

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ParameterStore":
        """Load a run configuration from a YAML input file."""
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
        if data is None:
            data = {}
        if not isinstance(data, Mapping):
            raise ValueError(
                f"Run configuration {path} must contain a mapping at top level, "
                f"got {type(data).__name__}"
            )
        return cls(data)

    def contains(self, key: str) -> bool:
        return key in self._table

    def query(self, key: str, default: Any = None) -> Any:
        """Return the value stored under key, or default if absent."""
        return self._table.get(key, default)

    def query_add(self, key: str, default: Any) -> Any:
        """Return the value stored under key; record and return default if absent."""
        if key not in self._table:
            self._table[key] = default
        return self._table[key]

    def add(self, key: str, value: Any) -> None:
        self._table[key] = value

    def section(self, prefix: str) -> Dict[str, Any]:
        """All parameters below prefix, with the prefix stripped."""
        head = prefix.rstrip(".") + "."
        return {
            key[len(head):]: value
            for key, value in self._table.items()
            if key.startswith(head)
        }

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._table)

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"ParameterStore({self._table!r})"
