"""Region Profiling

Wall-clock timing of named code regions (diagnostic output, host staging).
When a GPU is active the device is synchronized before a region is closed,
so asynchronous device work is charged to the region that queued it.

Example:
    >>> from beamdiag.gpu.profiling import Profiler
    >>> profiler = Profiler()
    >>> with profiler.profile("beamdiag.emit"):
    ...     emit(container, OutputType.PRINT_PARTICLES, "beam.txt", 0, False)
    >>> print(profiler.get_report())
"""

import time
from collections import defaultdict
from typing import Dict, List, Optional

from beamdiag.gpu.utils import synchronize


class Profiler:
    """Aggregates wall-clock timings of named regions.

    Attributes:
        timings: Dictionary mapping region names to lists of elapsed times (ms)
        enabled: Whether profiling is active
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.timings: Dict[str, List[float]] = defaultdict(list)

    def profile(self, region_name: str):
        """Context manager timing one execution of a region.

        Args:
            region_name: Name/identifier for the region

        Returns:
            Context manager that times the enclosed block
        """
        class _RegionProfileContext:
            def __init__(self, profiler_instance, name):
                self.profiler = profiler_instance
                self.name = name
                self._start = 0.0

            def __enter__(self):
                if self.profiler.enabled:
                    self._start = time.perf_counter()
                return self

            def __exit__(self, exc_type, exc_val, exc_tb):
                if self.profiler.enabled:
                    synchronize()
                    elapsed_ms = (time.perf_counter() - self._start) * 1e3
                    self.profiler.timings[self.name].append(elapsed_ms)
                return False

        return _RegionProfileContext(self, region_name)

    def get_timing(self, region_name: str) -> Optional[Dict[str, float]]:
        """Get timing statistics for a specific region.

        Returns:
            Dictionary with 'count', 'total_ms', 'mean_ms', 'min_ms', 'max_ms',
            or None if the region has no timings
        """
        if region_name not in self.timings or not self.timings[region_name]:
            return None

        times = self.timings[region_name]
        return {
            "count": len(times),
            "total_ms": sum(times),
            "mean_ms": sum(times) / len(times),
            "min_ms": min(times),
            "max_ms": max(times),
        }

    def get_report(self) -> str:
        """Generate a formatted timing report for all regions."""
        if not self.timings:
            return "No region timings recorded."

        lines = ["=" * 70]
        lines.append("REGION TIMING REPORT")
        lines.append("=" * 70)
        lines.append(f"{'Region':<30} {'Calls':<8} {'Total (ms)':<12} {'Mean (ms)':<12} {'Max (ms)':<12}")
        lines.append("-" * 70)

        for region_name in sorted(self.timings.keys()):
            stats = self.get_timing(region_name)
            if stats:
                lines.append(
                    f"{region_name:<30} {stats['count']:<8} "
                    f"{stats['total_ms']:<12.3f} {stats['mean_ms']:<12.3f} "
                    f"{stats['max_ms']:<12.3f}",
                )

        lines.append("=" * 70)
        return "\n".join(lines)

    def reset(self) -> None:
        """Clear all recorded timings."""
        self.timings.clear()
