"""
Disk samplers.

- Filesystem usage percentage for one mount path
- Aggregate block device I/O counters
"""

import psutil

from .base import Sampler


class DiskUsageSampler(Sampler):
    """Used share of a filesystem, from the caller's point of view (f_bavail)."""

    NAME = "disk_usage"
    KEYS = ("percent",)

    def __init__(self, path: str = "/"):
        self.path = path

    def sample(self) -> dict[str, float]:
        try:
            usage = psutil.disk_usage(self.path)
        except OSError as e:
            raise self.fail(f"cannot stat {self.path}: {e.strerror or e}") from e

        if usage.total <= 0:
            raise self.fail(f"{self.path} reports zero size")
        return {"percent": (usage.total - usage.free) / usage.total * 100.0}


class DiskIOSampler(Sampler):
    """Completed reads/writes and busy time summed over all block devices."""

    NAME = "disk_io"
    KEYS = ("io_time_ms", "writes_completed", "reads_completed")

    def sample(self) -> dict[str, float]:
        counters = psutil.disk_io_counters(perdisk=False)
        if counters is None:
            raise self.fail("no block device statistics available")

        busy_time = getattr(counters, "busy_time", None)
        if busy_time is None:
            raise self.fail("I/O busy time not reported by this system")

        return {
            "io_time_ms": float(busy_time),
            "writes_completed": float(counters.write_count),
            "reads_completed": float(counters.read_count),
        }
