"""
Control channel: selection message, status file and catalog listing.

A launcher writes one comma-separated line to the control FIFO, either a
list of metric names to collect or the sentinel "1" to ask for the
catalog. hostgauge reports lifecycle events back through a one-line
status file.
"""

import asyncio
import errno
import os
import stat
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

from .catalog import CatalogEntry
from .const import LIST_METRICS_SENTINEL, MAX_MESSAGE_BYTES, MAX_SELECTED_METRICS
from .logging import get_logger

logger = get_logger("control")


class ChannelError(Exception):
    """The selection message could not be obtained or decoded."""

    pass


@dataclass(frozen=True)
class Selection:
    """
    A decoded selection message.

    Attributes:
        names: Metric names in the order given
        list_catalog: True for the "list available metrics" request
    """

    names: tuple[str, ...] = field(default_factory=tuple)
    list_catalog: bool = False


def parse_selection(message: str) -> Selection:
    """
    Decode a selection message.

    Fields are comma-separated and stripped; empty fields are dropped. A
    first field of "1" is the catalog listing request and the remaining
    fields are ignored.

    Raises:
        ChannelError: If no fields remain, or there are too many
    """
    fields = [part.strip() for part in message.split(",")]
    fields = [part for part in fields if part]

    if not fields:
        raise ChannelError("selection message is empty")

    if fields[0] == LIST_METRICS_SENTINEL:
        return Selection(list_catalog=True)

    if len(fields) > MAX_SELECTED_METRICS:
        raise ChannelError(f"too many metrics selected ({len(fields)} > {MAX_SELECTED_METRICS})")

    return Selection(names=tuple(fields))


async def _read_fifo(path: Path) -> bytes:
    """
    Read a FIFO until its writer closes it, without blocking the event loop.

    The FIFO is opened non-blocking, so cancelling the caller while no
    writer has connected yet returns immediately.
    """
    loop = asyncio.get_running_loop()
    fd = os.open(path, os.O_RDONLY | os.O_NONBLOCK)
    chunks: list[bytes] = []
    size = 0

    try:
        while size < MAX_MESSAGE_BYTES:
            readable = loop.create_future()
            loop.add_reader(fd, lambda: readable.done() or readable.set_result(None))
            try:
                await readable
            finally:
                loop.remove_reader(fd)

            try:
                chunk = os.read(fd, MAX_MESSAGE_BYTES - size)
            except BlockingIOError:
                continue
            if not chunk:
                break
            chunks.append(chunk)
            size += len(chunk)
    finally:
        os.close(fd)

    return b"".join(chunks)


async def read_fifo_message(path: str | Path) -> str:
    """
    Read one message from the control FIFO, creating it if needed.

    Waits until a writer has sent a message and closed its end. A FIFO is
    removed after reading; a regular file at the path is read and left
    alone. Cancelling the wait leaves the FIFO in place.

    Raises:
        ChannelError: If the FIFO cannot be created, opened or read
    """
    path = Path(path)

    try:
        os.mkfifo(path, 0o666)
        logger.debug(f"Created control FIFO {path}")
    except OSError as e:
        if e.errno != errno.EEXIST:
            raise ChannelError(f"cannot create FIFO {path}: {e.strerror or e}") from e

    try:
        is_fifo = stat.S_ISFIFO(path.stat().st_mode)
        logger.info(f"Waiting for metric selection on {path}")
        if is_fifo:
            data = await _read_fifo(path)
        else:
            with open(path, "rb") as source:
                data = source.read(MAX_MESSAGE_BYTES)
    except OSError as e:
        raise ChannelError(f"cannot read {path}: {e.strerror or e}") from e

    if is_fifo:
        try:
            path.unlink()
        except OSError as e:
            logger.warning(f"Could not remove FIFO {path}: {e}")

    if not data:
        raise ChannelError(f"no data received on {path}")

    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise ChannelError(f"selection message is not valid UTF-8: {e}") from e


class StatusFile:
    """One-line status file, rewritten on every update."""

    def __init__(self, path: str | Path | None):
        self.path = Path(path) if path else None
        self.last: str | None = None

    def update(self, status: str) -> None:
        """Replace the status line. Write failures are logged, not raised."""
        self.last = status
        logger.debug(f"Status: {status}")
        if self.path is None:
            return
        try:
            self.path.write_text(f"{status}\n")
        except OSError as e:
            logger.warning(f"Cannot write status file {self.path}: {e}")


def format_catalog_listing(entries: Iterable[CatalogEntry]) -> list[str]:
    """One 'Metric: <name> - <description>' line per entry."""
    return [f"Metric: {entry.name} - {entry.description}" for entry in entries]


def write_catalog_listing(entries: Iterable[CatalogEntry], sink: str | Path | TextIO) -> int:
    """
    Write the catalog listing to a file path or an open text stream.

    Returns:
        Number of lines written

    Raises:
        ChannelError: If the listing file cannot be written
    """
    lines = format_catalog_listing(entries)
    text = "".join(f"{line}\n" for line in lines)

    if isinstance(sink, (str, Path)):
        try:
            Path(sink).write_text(text)
        except OSError as e:
            raise ChannelError(f"cannot write metric listing to {sink}: {e.strerror or e}") from e
    else:
        sink.write(text)
        sink.flush()

    return len(lines)
