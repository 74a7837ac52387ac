"""
Memory sampler.

One psutil.virtual_memory() call feeds the total/used/available gauges
and the usage percentage.
"""

import psutil

from .base import Sampler

MIB = 1024 * 1024


class MemorySampler(Sampler):
    """
    System memory in MiB plus usage percentage.

    used_mb excludes buffers and page cache; percent is based on
    MemAvailable, matching what the kernel considers reclaimable.
    """

    NAME = "memory"
    KEYS = ("total_mb", "used_mb", "available_mb", "percent")

    def sample(self) -> dict[str, float]:
        mem = psutil.virtual_memory()

        total = float(mem.total)
        available = float(mem.available)
        if total <= 0 or available <= 0:
            raise self.fail("total or available memory reported as zero")

        buffers = getattr(mem, "buffers", 0)
        cached = getattr(mem, "cached", 0)
        used = max(total - mem.free - buffers - cached, 0.0)

        return {
            "total_mb": total / MIB,
            "used_mb": used / MIB,
            "available_mb": available / MIB,
            "percent": (total - available) / total * 100.0,
        }
