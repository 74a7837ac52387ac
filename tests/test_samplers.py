"""
Tests for samplers.
"""

from collections import namedtuple

import pytest

from hostgauge.samplers import (
    BatterySampler,
    CpuFrequencySampler,
    CpuUsageSampler,
    DiskUsageSampler,
    FanSampler,
    FunctionSampler,
    MemorySampler,
    NetworkSampler,
    ProcessStateSampler,
    RunningProcessesSampler,
    SampleError,
    TemperatureSampler,
)
from hostgauge.samplers import cpu, network
from hostgauge.samplers.base import read_int_file

CpuTimes = namedtuple("CpuTimes", "user nice system idle iowait irq softirq steal")
NetCounters = namedtuple("NetCounters", "bytes_sent bytes_recv packets_sent packets_recv errin errout dropin dropout")


def test_read_int_file(tmp_path) -> None:
    path = tmp_path / "value"
    path.write_text("45000\n")

    assert read_int_file(path, "test") == 45000


def test_read_int_file_errors(tmp_path) -> None:
    path = tmp_path / "value"
    path.write_text("garbage")

    with pytest.raises(SampleError, match="unexpected contents"):
        read_int_file(path, "test")
    with pytest.raises(SampleError, match="cannot read"):
        read_int_file(tmp_path / "missing", "test")


def test_sample_error_message() -> None:
    error = SampleError("network", "interface 'eth9' not found")

    assert error.sampler == "network"
    assert str(error) == "network: interface 'eth9' not found"


def test_function_sampler() -> None:
    sampler = FunctionSampler("answer", lambda: 42)

    assert sampler.name == "answer"
    assert sampler.sample() == {"value": 42.0}


class TestCpuUsage:
    """Tests for CPU usage from time deltas."""

    def test_usage_from_deltas(self, monkeypatch) -> None:
        times = iter([
            CpuTimes(100, 0, 100, 800, 0, 0, 0, 0),
            CpuTimes(150, 0, 100, 850, 0, 0, 0, 0),
        ])
        monkeypatch.setattr(cpu.psutil, "cpu_times", lambda: next(times))
        sampler = CpuUsageSampler()

        # First sample is measured since boot
        assert sampler.sample()["percent"] == pytest.approx(20.0)
        assert sampler.sample()["percent"] == pytest.approx(50.0)

    def test_no_elapsed_time(self, monkeypatch) -> None:
        monkeypatch.setattr(cpu.psutil, "cpu_times", lambda: CpuTimes(1, 0, 1, 8, 0, 0, 0, 0))
        sampler = CpuUsageSampler()
        sampler.sample()

        with pytest.raises(SampleError):
            sampler.sample()

    def test_real_host(self) -> None:
        percent = CpuUsageSampler().sample()["percent"]

        assert 0.0 <= percent <= 100.0


def test_cpu_frequency_from_file(tmp_path) -> None:
    path = tmp_path / "scaling_cur_freq"
    path.write_text("2400000\n")

    assert CpuFrequencySampler(str(path)).sample() == {"mhz": 2400.0}


def test_memory_real_host() -> None:
    readings = MemorySampler().sample()

    assert set(readings) == set(MemorySampler.KEYS)
    assert readings["total_mb"] > 0
    assert 0.0 <= readings["percent"] <= 100.0


def test_disk_usage_real_host(tmp_path) -> None:
    percent = DiskUsageSampler(str(tmp_path)).sample()["percent"]

    assert 0.0 <= percent <= 100.0


class TestNetwork:
    """Tests for the network sampler."""

    def test_configured_interface(self, monkeypatch) -> None:
        counters = {"eth0": NetCounters(200, 100, 2, 1, 3, 4, 5, 6)}
        monkeypatch.setattr(network.psutil, "net_io_counters", lambda pernic=False: counters)

        assert NetworkSampler("eth0").sample() == {
            "rx_bytes": 100.0,
            "tx_bytes": 200.0,
            "rx_errors": 3.0,
            "tx_errors": 4.0,
            "dropped": 5.0,
        }

    def test_missing_interface(self, monkeypatch) -> None:
        monkeypatch.setattr(network.psutil, "net_io_counters", lambda pernic=False: {})

        with pytest.raises(SampleError, match="eth9"):
            NetworkSampler("eth9").sample()

    def test_discovery_prefers_non_loopback(self, monkeypatch) -> None:
        counters = {
            "lo": NetCounters(1, 1, 0, 0, 0, 0, 0, 0),
            "wlan0": NetCounters(9, 8, 0, 0, 0, 0, 0, 0),
        }
        monkeypatch.setattr(network.psutil, "net_io_counters", lambda pernic=False: counters)

        assert network.discover_network_interfaces() == ["wlan0", "lo"]
        assert NetworkSampler().sample()["rx_bytes"] == 8.0


def test_running_processes(tmp_path) -> None:
    (tmp_path / "stat").write_text("cpu  1 2 3 4\nprocs_running 3\nprocs_blocked 0\n")

    assert RunningProcessesSampler(str(tmp_path)).sample() == {"count": 3.0}


def test_running_processes_missing_line(tmp_path) -> None:
    (tmp_path / "stat").write_text("cpu  1 2 3 4\n")

    with pytest.raises(SampleError, match="procs_running"):
        RunningProcessesSampler(str(tmp_path)).sample()


def test_process_states_real_host() -> None:
    readings = ProcessStateSampler().sample()

    assert readings["total"] >= 1
    assert readings["suspended"] + readings["ready"] + readings["blocked"] <= readings["total"]


def test_temperature_from_file(tmp_path) -> None:
    path = tmp_path / "temp1_input"
    path.write_text("45000\n")

    assert TemperatureSampler(str(path)).sample() == {"celsius": 45.0}


def test_fan_from_file(tmp_path) -> None:
    path = tmp_path / "fan1_input"
    path.write_text("1200\n")
    sampler = FanSampler("cpu_fan", str(path))

    assert sampler.name == "cpu_fan"
    assert sampler.sample() == {"rpm": 1200.0}


def test_missing_sensor_file(tmp_path) -> None:
    with pytest.raises(SampleError):
        TemperatureSampler(str(tmp_path / "missing")).sample()


class TestBattery:
    """Tests for battery discovery and readings."""

    def make_supply(self, root, name, kind, **values) -> None:
        device = root / name
        device.mkdir()
        (device / "type").write_text(f"{kind}\n")
        for key, value in values.items():
            (device / key).write_text(f"{value}\n")

    def test_discovered_battery(self, tmp_path) -> None:
        self.make_supply(tmp_path, "AC", "Mains")
        self.make_supply(tmp_path, "BAT0", "Battery", voltage_now=12_300_000, current_now=-1_500_000)

        voltage = BatterySampler("voltage", power_supply_root=str(tmp_path)).sample()
        current = BatterySampler("current", power_supply_root=str(tmp_path)).sample()

        assert voltage == {"volts": pytest.approx(12.3)}
        assert current == {"amperes": pytest.approx(1.5)}

    def test_no_battery(self, tmp_path) -> None:
        self.make_supply(tmp_path, "AC", "Mains")

        with pytest.raises(SampleError, match="no battery"):
            BatterySampler("voltage", power_supply_root=str(tmp_path)).sample()

    def test_configured_path(self, tmp_path) -> None:
        path = tmp_path / "in0_input"
        path.write_text("11800\n")

        assert BatterySampler("voltage", str(path)).sample() == {"volts": pytest.approx(11.8)}

    def test_unknown_quantity(self) -> None:
        with pytest.raises(ValueError):
            BatterySampler("power")
