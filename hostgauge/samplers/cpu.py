"""
CPU samplers.

- Usage percentage from the delta of aggregate CPU times
- Context switch count
- Current frequency (cpufreq file or psutil)
"""

from typing import Any

import psutil

from .base import Sampler, read_int_file

# Busy time fields; iowait counts as idle
BUSY_FIELDS = ("user", "nice", "system", "irq", "softirq", "steal")
IDLE_FIELDS = ("idle", "iowait")


def _split_times(times: Any) -> tuple[float, float]:
    """Return (idle, busy) totals from a psutil cpu_times tuple."""
    idle = sum(getattr(times, f, 0.0) for f in IDLE_FIELDS)
    busy = sum(getattr(times, f, 0.0) for f in BUSY_FIELDS)
    return idle, busy


class CpuUsageSampler(Sampler):
    """
    CPU usage over the interval since the previous sample.

    The first sample is measured against zero, i.e. it reports the average
    usage since boot, so a value is available after the very first cycle.
    """

    NAME = "cpu_usage"
    KEYS = ("percent",)

    def __init__(self):
        self._prev_idle = 0.0
        self._prev_total = 0.0

    def sample(self) -> dict[str, float]:
        idle, busy = _split_times(psutil.cpu_times())
        total = idle + busy

        total_delta = total - self._prev_total
        idle_delta = idle - self._prev_idle
        if total_delta <= 0:
            raise self.fail("no CPU time elapsed since previous sample")

        self._prev_idle = idle
        self._prev_total = total

        percent = (total_delta - idle_delta) / total_delta * 100.0
        return {"percent": min(max(percent, 0.0), 100.0)}


class ContextSwitchSampler(Sampler):
    """Total context switches since boot."""

    NAME = "context_switches"
    KEYS = ("count",)

    def sample(self) -> dict[str, float]:
        return {"count": float(psutil.cpu_stats().ctx_switches)}


class CpuFrequencySampler(Sampler):
    """
    Current CPU frequency in MHz.

    With a path, reads a cpufreq file (kHz), e.g.
    /sys/devices/system/cpu/cpu0/cpufreq/scaling_cur_freq.
    Without one, asks psutil.
    """

    NAME = "cpu_frequency"
    KEYS = ("mhz",)

    def __init__(self, path: str | None = None):
        self.path = path

    def sample(self) -> dict[str, float]:
        if self.path:
            return {"mhz": read_int_file(self.path, self.name) / 1000.0}

        freq = psutil.cpu_freq() if hasattr(psutil, "cpu_freq") else None
        if freq is None or not freq.current:
            raise self.fail("CPU frequency not reported by this system")
        return {"mhz": float(freq.current)}
