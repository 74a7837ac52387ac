"""
Tests for the control channel.
"""

import asyncio
import io
import os
import stat
import threading
import time

import pytest

from hostgauge.catalog import build_default_catalog
from hostgauge.control import (
    ChannelError,
    StatusFile,
    format_catalog_listing,
    parse_selection,
    read_fifo_message,
    write_catalog_listing,
)


class TestParseSelection:
    """Tests for selection message decoding."""

    def test_names_trimmed(self) -> None:
        selection = parse_selection(" cpu_usage_percentage ,memory_usage_percentage\n")

        assert selection.names == ("cpu_usage_percentage", "memory_usage_percentage")
        assert not selection.list_catalog

    def test_empty_fields_dropped(self) -> None:
        assert parse_selection("a,,b,").names == ("a", "b")

    def test_list_sentinel(self) -> None:
        selection = parse_selection("1")

        assert selection.list_catalog
        assert selection.names == ()

    def test_list_sentinel_ignores_rest(self) -> None:
        assert parse_selection(" 1 , cpu_usage_percentage").list_catalog

    def test_sentinel_only_in_first_field(self) -> None:
        selection = parse_selection("cpu_usage_percentage,1")

        assert not selection.list_catalog
        assert selection.names == ("cpu_usage_percentage", "1")

    @pytest.mark.parametrize("message", ["", "  ", ",,", " , \n"])
    def test_empty_message(self, message) -> None:
        with pytest.raises(ChannelError):
            parse_selection(message)

    def test_too_many_fields(self) -> None:
        with pytest.raises(ChannelError, match="too many"):
            parse_selection(",".join(f"m{i}" for i in range(65)))


class TestReadFifoMessage:
    """Tests for reading the control FIFO."""

    def test_reads_fifo_and_removes_it(self, tmp_path) -> None:
        path = tmp_path / "fifo"
        os.mkfifo(path)

        def write() -> None:
            with open(path, "w") as fifo:
                fifo.write("cpu_usage_percentage\n")

        writer = threading.Thread(target=write)
        writer.start()
        message = asyncio.run(asyncio.wait_for(read_fifo_message(path), timeout=5))
        writer.join(timeout=5)

        assert message == "cpu_usage_percentage\n"
        assert not path.exists()

    def test_creates_missing_fifo(self, tmp_path) -> None:
        path = tmp_path / "fifo"

        async def run() -> str:
            reader = asyncio.create_task(read_fifo_message(path))
            while not path.exists():
                await asyncio.sleep(0.01)
            assert stat.S_ISFIFO(path.stat().st_mode)
            await asyncio.to_thread(path.write_text, "1")
            return await asyncio.wait_for(reader, timeout=5)

        assert asyncio.run(run()) == "1"

    def test_wait_is_cancellable(self, tmp_path) -> None:
        """Cancelling the wait returns at once, with no writer ever connecting."""
        path = tmp_path / "fifo"

        async def run() -> None:
            reader = asyncio.create_task(read_fifo_message(path))
            await asyncio.sleep(0.1)
            assert not reader.done()
            reader.cancel()
            with pytest.raises(asyncio.CancelledError):
                await asyncio.wait_for(reader, timeout=1)

        started = time.monotonic()
        asyncio.run(run())

        assert time.monotonic() - started < 2
        assert path.exists()

    def test_regular_file_left_in_place(self, tmp_path) -> None:
        path = tmp_path / "message"
        path.write_text("1")

        assert asyncio.run(read_fifo_message(path)) == "1"
        assert path.exists()

    def test_empty_file(self, tmp_path) -> None:
        path = tmp_path / "message"
        path.write_text("")

        with pytest.raises(ChannelError, match="no data"):
            asyncio.run(read_fifo_message(path))

    def test_invalid_utf8(self, tmp_path) -> None:
        path = tmp_path / "message"
        path.write_bytes(b"\xff\xfe")

        with pytest.raises(ChannelError, match="UTF-8"):
            asyncio.run(read_fifo_message(path))

    def test_missing_directory(self, tmp_path) -> None:
        with pytest.raises(ChannelError):
            asyncio.run(read_fifo_message(tmp_path / "nope" / "fifo"))


def test_status_file(tmp_path) -> None:
    path = tmp_path / "status"
    status = StatusFile(path)

    status.update("Starting monitoring from FIFO")
    status.update("Metrics monitoring started")

    assert path.read_text() == "Metrics monitoring started\n"
    assert status.last == "Metrics monitoring started"


def test_status_file_write_failure_is_not_raised(tmp_path) -> None:
    status = StatusFile(tmp_path / "missing" / "status")
    status.update("Metrics monitoring started")

    assert status.last == "Metrics monitoring started"


def test_listing_format() -> None:
    catalog = build_default_catalog()
    lines = format_catalog_listing(catalog)

    assert len(lines) == len(catalog)
    assert lines[0] == "Metric: rx_bytes_total - Total received bytes"


def test_write_listing_to_file(tmp_path) -> None:
    path = tmp_path / "metrics"
    count = write_catalog_listing(build_default_catalog(), path)

    assert count == 26
    assert len(path.read_text().splitlines()) == 26


def test_write_listing_to_stream() -> None:
    sink = io.StringIO()
    count = write_catalog_listing(build_default_catalog(), sink)

    assert count == 26
    assert sink.getvalue().count("\n") == 26


def test_write_listing_failure(tmp_path) -> None:
    with pytest.raises(ChannelError):
        write_catalog_listing(build_default_catalog(), tmp_path / "missing" / "metrics")
