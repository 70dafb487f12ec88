"""Global particle identities.

A particle is created with an id that is unique only on the rank that
created it. Packing (rank, local_id) into one 64-bit word gives an id that is
unique across the whole run:

    global_id = (rank << 32) | local_id

Both inputs must fit in 32 bits. Uniqueness of (local_id, rank) pairs is a
property of the particle container and is not re-checked here.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from beamdiag.config.defaults import GLOBAL_ID_LOCAL_BITS

_LOCAL_MASK = (1 << GLOBAL_ID_LOCAL_BITS) - 1
_ID_LIMIT = 1 << GLOBAL_ID_LOCAL_BITS


def local_id_to_global(local_id: int, rank: int) -> int:
    """Combine a rank-local particle id and its creating rank into a global id.

    Args:
        local_id: Rank-local particle id, 0 <= local_id < 2**32
        rank: Rank that created the particle, 0 <= rank < 2**32

    Returns:
        Global particle id as a Python int in [0, 2**64)

    Raises:
        ValueError: If either input is outside its 32-bit range
    """
    local_id = int(local_id)
    rank = int(rank)
    if not 0 <= local_id < _ID_LIMIT:
        raise ValueError(f"local_id must be in [0, 2**{GLOBAL_ID_LOCAL_BITS}), got {local_id}")
    if not 0 <= rank < _ID_LIMIT:
        raise ValueError(f"rank must be in [0, 2**{GLOBAL_ID_LOCAL_BITS}), got {rank}")
    return (rank << GLOBAL_ID_LOCAL_BITS) | local_id


def local_ids_to_global(local_ids: np.ndarray, ranks: np.ndarray) -> np.ndarray:
    """Vectorized local_id_to_global over host arrays.

    Returns:
        uint64 array of global ids, same shape as the inputs
    """
    local_ids = np.asarray(local_ids)
    ranks = np.asarray(ranks)
    if local_ids.shape != ranks.shape:
        raise ValueError(
            f"local_ids shape {local_ids.shape} does not match ranks shape {ranks.shape}"
        )
    if local_ids.size == 0:
        return np.zeros(local_ids.shape, dtype=np.uint64)

    if local_ids.min() < 0 or local_ids.max() >= _ID_LIMIT:
        raise ValueError(f"local ids must be in [0, 2**{GLOBAL_ID_LOCAL_BITS})")
    if ranks.min() < 0 or ranks.max() >= _ID_LIMIT:
        raise ValueError(f"ranks must be in [0, 2**{GLOBAL_ID_LOCAL_BITS})")

    shift = np.uint64(GLOBAL_ID_LOCAL_BITS)
    return (ranks.astype(np.uint64) << shift) | local_ids.astype(np.uint64)


def global_to_local(global_id: int) -> Tuple[int, int]:
    """Split a global id back into (local_id, rank)."""
    global_id = int(global_id)
    if not 0 <= global_id < (1 << (2 * GLOBAL_ID_LOCAL_BITS)):
        raise ValueError(f"global_id must be a 64-bit unsigned value, got {global_id}")
    return global_id & _LOCAL_MASK, global_id >> GLOBAL_ID_LOCAL_BITS
