"""GPU utility functions for beamdiag.

This module is the Single Source of Truth (SSOT) for GPU availability checking,
CuPy imports and device-to-host transfers. CuPy is an optional dependency;
without it every particle array is a host (NumPy) array.

Import Policy:
    from beamdiag.gpu.utils import gpu_available, get_cupy, to_host

DO NOT use: from beamdiag.gpu.utils import *
"""

from typing import Optional, Any

import numpy as np

# =============================================================================
# GPU Availability and CuPy Import (SSOT)
# =============================================================================

# Cached CuPy module reference
_cupy_module: Optional[Any] = None
_gpu_available_cached: Optional[bool] = None


def get_cupy() -> Any:
    """Get CuPy module, importing lazily on first call.

    Returns:
        CuPy module if available, None otherwise

    Example:
        >>> cp = get_cupy()
        >>> if cp is not None:
        ...     arr = cp.array([1, 2, 3])
    """
    global _cupy_module, _gpu_available_cached

    if _cupy_module is not None:
        return _cupy_module

    try:
        import cupy as cp
        _cupy_module = cp
        return cp
    except ImportError:
        _cupy_module = None
        _gpu_available_cached = False
        return None


def gpu_available() -> bool:
    """Check if CUDA/GPU is available via CuPy.

    Returns:
        True if CuPy is available and GPU detected, False otherwise
    """
    global _gpu_available_cached

    if _gpu_available_cached is not None:
        return _gpu_available_cached

    cp = get_cupy()
    if cp is None:
        _gpu_available_cached = False
        return False

    # CuPy may import but have no GPU
    try:
        _gpu_available_cached = bool(cp.cuda.is_available())
    except Exception:
        _gpu_available_cached = False
    return _gpu_available_cached


def require_gpu(message: str = "GPU/CuPy is required for this operation") -> None:
    """Raise an error if GPU is not available.

    Raises:
        RuntimeError: If GPU is not available
    """
    if not gpu_available():
        raise RuntimeError(f"GPU/CuPy not available: {message}")


# =============================================================================
# Device / Host Transfers
# =============================================================================


def is_device_array(array: Any) -> bool:
    """True if array lives in device memory (a CuPy ndarray)."""
    cp = get_cupy()
    return cp is not None and isinstance(array, cp.ndarray)


def to_host(array: Any, dtype: Optional[Any] = None) -> np.ndarray:
    """Copy an array to a new host (NumPy) array.

    Device arrays are transferred with cupy.asnumpy, which blocks until the
    copy has completed. Host arrays are copied so the result never aliases
    the source.

    Args:
        array: CuPy array, NumPy array or sequence
        dtype: Optional dtype of the result

    Returns:
        Contiguous host array owning its memory
    """
    if is_device_array(array):
        host = get_cupy().asnumpy(array)
    else:
        host = np.array(array, copy=True)
    if dtype is not None and host.dtype != np.dtype(dtype):
        host = host.astype(dtype)
    return np.ascontiguousarray(host)


def synchronize() -> None:
    """Block until all queued device work has finished (no-op without GPU)."""
    if gpu_available():
        get_cupy().cuda.runtime.deviceSynchronize()
