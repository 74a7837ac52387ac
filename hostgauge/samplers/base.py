"""
Base sampler interface.

A sampler reads one system source and returns a dict of named float
readings. One sampler may feed several catalog metrics (for example the
network sampler feeds five), so readings are keyed and each catalog entry
picks the key it publishes.

Samplers signal failure by raising SampleError. They must not touch gauge
storage; publishing is the scheduler's job.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path


class SampleError(Exception):
    """A sampler could not produce a reading this time."""

    def __init__(self, sampler: str, reason: str):
        self.sampler = sampler
        self.reason = reason
        super().__init__(f"{sampler}: {reason}")


class Sampler(ABC):
    """
    Abstract base class for samplers.

    Subclasses set NAME and KEYS and implement sample().
    """

    # Short identifier used in log messages
    NAME: str = "sampler"

    # Reading keys returned by sample(), in a stable order
    KEYS: tuple[str, ...] = ("value",)

    @property
    def name(self) -> str:
        return self.NAME

    @property
    def keys(self) -> tuple[str, ...]:
        return self.KEYS

    @abstractmethod
    def sample(self) -> dict[str, float]:
        """
        Take one reading from the source.

        Returns:
            Mapping of reading key to value

        Raises:
            SampleError: If the source cannot be read or parsed
        """
        pass

    def fail(self, reason: str) -> SampleError:
        """Build a SampleError tagged with this sampler's name."""
        return SampleError(self.name, reason)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name!r})"


class FunctionSampler(Sampler):
    """
    Adapts a zero-argument callable returning a float.

    The callable may raise SampleError, or any exception, to signal
    failure.
    """

    def __init__(self, name: str, func: Callable[[], float]):
        self._name = name
        self._func = func

    @property
    def name(self) -> str:
        return self._name

    def sample(self) -> dict[str, float]:
        return {"value": float(self._func())}


def read_int_file(path: str | Path, sampler: str) -> int:
    """
    Read a sysfs/procfs file holding a single integer.

    Raises:
        SampleError: If the file is missing, unreadable or not an integer
    """
    try:
        raw = Path(path).read_text().strip()
    except OSError as e:
        raise SampleError(sampler, f"cannot read {path}: {e.strerror or e}") from e

    try:
        return int(raw.split()[0])
    except (ValueError, IndexError):
        raise SampleError(sampler, f"unexpected contents in {path}: {raw[:32]!r}") from None
