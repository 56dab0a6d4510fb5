"""Tests for the liveness heartbeat."""

import logging
from datetime import datetime
from pathlib import Path

import pytest
from conftest import FastClock, ManualClock, wait_for

from fslock.core import Heartbeat


@pytest.fixture
def marker(tmp_path: Path) -> Path:
    return tmp_path / "alive.1234"


class TestHeartbeat:
    """Tests for Heartbeat."""

    def test_start_writes_marker(self, marker: Path, fast_clock: FastClock) -> None:
        """Starting writes an empty marker and runs the thread."""
        heartbeat = Heartbeat(marker, 5.0, fast_clock)
        heartbeat.start()
        try:
            assert marker.exists()
            assert marker.read_text() == ""
            assert heartbeat.running
        finally:
            heartbeat.stop()

    def test_stop_is_synchronous(self, marker: Path, fast_clock: FastClock) -> None:
        """The thread has exited once stop returns."""
        heartbeat = Heartbeat(marker, 5.0, fast_clock)
        heartbeat.start()
        heartbeat.stop()
        assert not heartbeat.running

    def test_stop_interrupts_long_interval(self, marker: Path) -> None:
        """Stopping does not wait out the refresh interval."""
        heartbeat = Heartbeat(marker, 3600.0)
        heartbeat.start()
        started = datetime.now()
        heartbeat.stop()
        assert (datetime.now() - started).total_seconds() < 5
        assert not heartbeat.running

    def test_double_start(self, marker: Path, fast_clock: FastClock) -> None:
        """A heartbeat can only be started once."""
        heartbeat = Heartbeat(marker, 5.0, fast_clock)
        heartbeat.start()
        try:
            with pytest.raises(RuntimeError, match="already started"):
                heartbeat.start()
        finally:
            heartbeat.stop()

    def test_stop_without_start(self, marker: Path, fast_clock: FastClock) -> None:
        """Stopping a heartbeat that never started is harmless."""
        heartbeat = Heartbeat(marker, 5.0, fast_clock)
        heartbeat.stop()
        heartbeat.stop()
        assert not marker.exists()

    def test_waits_for_interval(self, marker: Path, fast_clock: FastClock) -> None:
        """The thread waits the configured interval between refreshes."""
        heartbeat = Heartbeat(marker, 2.5, fast_clock)
        heartbeat.start()
        try:
            assert wait_for(lambda: len(fast_clock.waits) >= 3)
        finally:
            heartbeat.stop()
        assert set(fast_clock.waits) == {2.5}

    def test_refreshes_marker(self, marker: Path, manual_clock: ManualClock) -> None:
        """The marker's mtime follows the clock while running."""
        heartbeat = Heartbeat(marker, 5.0, manual_clock)
        heartbeat.start()
        try:
            manual_clock.advance(600)
            expected = manual_clock.now().timestamp()
            assert wait_for(lambda: abs(marker.stat().st_mtime - expected) < 1)
        finally:
            heartbeat.stop()

    def test_keeps_content(self, marker: Path, manual_clock: ManualClock) -> None:
        """Refreshing never rewrites the marker's content."""
        marker.write_text("keep me")
        heartbeat = Heartbeat(marker, 5.0, manual_clock)
        heartbeat.start()
        try:
            manual_clock.advance(600)
            expected = manual_clock.now().timestamp()
            assert wait_for(lambda: abs(marker.stat().st_mtime - expected) < 1)
        finally:
            heartbeat.stop()
        assert marker.read_text() == "keep me"

    def test_exits_when_marker_vanishes(
        self, marker: Path, fast_clock: FastClock, caplog: pytest.LogCaptureFixture
    ) -> None:
        """A broken lock ends the heartbeat on its own."""
        heartbeat = Heartbeat(marker, 5.0, fast_clock)
        with caplog.at_level(logging.WARNING, logger="fslock"):
            heartbeat.start()
            marker.unlink()
            assert wait_for(lambda: not heartbeat.running)
        heartbeat.stop()
        assert "vanished" in caplog.text
