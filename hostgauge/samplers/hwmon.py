"""
Hardware sensor samplers: temperature, fans, battery.

Each sampler reads an explicit sysfs file when one is configured and
otherwise discovers a source:
- temperature: psutil.sensors_temperatures(), CPU chips first
- fans: psutil.sensors_fans(), n-th fan across all chips
- battery: first power_supply device of type Battery
"""

from pathlib import Path

import psutil

from .base import Sampler, read_int_file

# Chips that report the CPU package temperature, in preference order
CPU_TEMPERATURE_CHIPS = ("coretemp", "k10temp", "zenpower", "cpu_thermal", "soc_thermal", "acpitz")

POWER_SUPPLY_ROOT = "/sys/class/power_supply"


class TemperatureSampler(Sampler):
    """
    CPU temperature in degrees Celsius.

    A configured path is an hwmon temp*_input file in millidegrees.
    """

    NAME = "cpu_temperature"
    KEYS = ("celsius",)

    def __init__(self, path: str | None = None):
        self.path = path

    def sample(self) -> dict[str, float]:
        if self.path:
            return {"celsius": read_int_file(self.path, self.name) / 1000.0}

        read_sensors = getattr(psutil, "sensors_temperatures", None)
        chips = read_sensors() if read_sensors else {}
        if not chips:
            raise self.fail("no temperature sensors found")

        for chip in CPU_TEMPERATURE_CHIPS:
            if chips.get(chip):
                return {"celsius": float(chips[chip][0].current)}

        # Unknown chip names: fall back to the first reading
        first = next((entries for entries in chips.values() if entries), None)
        if first is None:
            raise self.fail("temperature sensors report no readings")
        return {"celsius": float(first[0].current)}


class FanSampler(Sampler):
    """
    Fan speed in RPM.

    A configured path is an hwmon fan*_input file (already in RPM). Without
    one, ``index`` selects the n-th fan reported by psutil, so the CPU fan
    is usually 0 and a GPU or case fan 1.
    """

    KEYS = ("rpm",)

    def __init__(self, name: str, path: str | None = None, index: int = 0):
        self._name = name
        self.path = path
        self.index = index

    @property
    def name(self) -> str:
        return self._name

    def sample(self) -> dict[str, float]:
        if self.path:
            return {"rpm": float(read_int_file(self.path, self.name))}

        read_fans = getattr(psutil, "sensors_fans", None)
        chips = read_fans() if read_fans else {}
        fans = [fan for entries in chips.values() for fan in entries]
        if len(fans) <= self.index:
            raise self.fail(f"fan #{self.index} not found ({len(fans)} fans reported)")
        return {"rpm": float(fans[self.index].current)}


def find_battery(root: str | Path = POWER_SUPPLY_ROOT) -> Path | None:
    """
    Find the first battery under /sys/class/power_supply.

    Returns:
        Battery directory, or None if the system has no battery
    """
    root = Path(root)
    if not root.is_dir():
        return None

    for device in sorted(root.iterdir()):
        try:
            kind = (device / "type").read_text().strip().lower()
        except OSError:
            continue
        if kind == "battery":
            return device
    return None


class BatterySampler(Sampler):
    """
    Battery voltage (V) or current (A).

    A configured path is an hwmon in*_input / curr*_input file in mV / mA.
    Discovered batteries expose voltage_now / current_now in uV / uA.
    """

    UNITS = {"voltage": "volts", "current": "amperes"}

    def __init__(self, quantity: str, path: str | None = None, power_supply_root: str = POWER_SUPPLY_ROOT):
        if quantity not in self.UNITS:
            raise ValueError(f"Unknown battery quantity: {quantity}")
        self.quantity = quantity
        self.path = path
        self.power_supply_root = power_supply_root

    @property
    def name(self) -> str:
        return f"battery_{self.quantity}"

    @property
    def keys(self) -> tuple[str, ...]:
        return (self.UNITS[self.quantity],)

    def sample(self) -> dict[str, float]:
        key = self.UNITS[self.quantity]

        if self.path:
            return {key: read_int_file(self.path, self.name) / 1000.0}

        battery = find_battery(self.power_supply_root)
        if battery is None:
            raise self.fail("no battery found")
        raw = read_int_file(battery / f"{self.quantity}_now", self.name)
        return {key: abs(raw) / 1_000_000.0}
