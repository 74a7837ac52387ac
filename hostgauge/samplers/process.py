"""
Process samplers.

- Runnable task count from the kernel's procs_running line
- Process counts by scheduler state
"""

from pathlib import Path

import psutil

from .base import Sampler

STATE_KEYS = {
    psutil.STATUS_SLEEPING: "suspended",
    psutil.STATUS_RUNNING: "ready",
    psutil.STATUS_DISK_SLEEP: "blocked",
}


class RunningProcessesSampler(Sampler):
    """procs_running from <proc_root>/stat."""

    NAME = "running_processes"
    KEYS = ("count",)

    def __init__(self, proc_root: str = "/proc"):
        self.stat_path = Path(proc_root) / "stat"

    def sample(self) -> dict[str, float]:
        try:
            lines = self.stat_path.read_text().splitlines()
        except OSError as e:
            raise self.fail(f"cannot read {self.stat_path}: {e.strerror or e}") from e

        for line in lines:
            fields = line.split()
            if len(fields) == 2 and fields[0] == "procs_running":
                try:
                    return {"count": float(int(fields[1]))}
                except ValueError:
                    break

        raise self.fail(f"no procs_running line in {self.stat_path}")


class ProcessStateSampler(Sampler):
    """
    Count processes by state.

    suspended = interruptible sleep (S), ready = running (R),
    blocked = uninterruptible disk sleep (D). Processes that exit during
    the scan are skipped.
    """

    NAME = "process_states"
    KEYS = ("total", "suspended", "ready", "blocked")

    def sample(self) -> dict[str, float]:
        counts = dict.fromkeys(self.KEYS, 0.0)

        for proc in psutil.process_iter(["status"]):
            status = proc.info.get("status")
            if status is None:
                continue
            counts["total"] += 1
            key = STATE_KEYS.get(status)
            if key:
                counts[key] += 1

        if counts["total"] == 0:
            raise self.fail("process table is empty")
        return counts
