"""Device support: CuPy detection, device-to-host copies and region profiling."""

from beamdiag.gpu.utils import (
    get_cupy,
    gpu_available,
    is_device_array,
    require_gpu,
    synchronize,
    to_host,
)
from beamdiag.gpu.profiling import Profiler

__all__ = [
    "get_cupy",
    "gpu_available",
    "is_device_array",
    "require_gpu",
    "synchronize",
    "to_host",
    "Profiler",
]
