"""
Samplers: one reading per call from a kernel-exposed source.
"""

from .base import FunctionSampler, SampleError, Sampler
from .cpu import ContextSwitchSampler, CpuFrequencySampler, CpuUsageSampler
from .disk import DiskIOSampler, DiskUsageSampler
from .hwmon import BatterySampler, FanSampler, TemperatureSampler
from .memory import MemorySampler
from .network import NetworkSampler
from .process import ProcessStateSampler, RunningProcessesSampler

__all__ = [
    "Sampler",
    "SampleError",
    "FunctionSampler",
    "CpuUsageSampler",
    "ContextSwitchSampler",
    "CpuFrequencySampler",
    "MemorySampler",
    "DiskUsageSampler",
    "DiskIOSampler",
    "NetworkSampler",
    "RunningProcessesSampler",
    "ProcessStateSampler",
    "TemperatureSampler",
    "FanSampler",
    "BatterySampler",
]
