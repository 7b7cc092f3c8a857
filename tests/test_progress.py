"""Tests for progress counters and the progress line."""

import asyncio

import pytest

from colo_scout.core.progress import ProgressState, ProgressTracker


class TestProgressState:
    """Tests for the shared counters."""

    def test_initial_counters(self):
        """Counters start at zero."""
        state = ProgressState(total=5)

        assert state.attempted == 0
        assert state.accepted == 0
        assert state.finished is False

    def test_render_format(self):
        """The line shows attempted, total, percent and accepted."""
        state = ProgressState(total=4)
        state.record_attempt()
        state.record_accept()

        assert state.render() == "1/4 (25.00%), accepted=1"

    def test_zero_total_is_complete(self):
        """An empty run renders as complete."""
        state = ProgressState(total=0)

        assert state.percent == 100.0
        assert state.finished is True
        assert state.render() == "0/0 (100.00%), accepted=0"


class TestProgressTracker:
    """Tests for the periodic renderer."""

    @pytest.mark.asyncio
    async def test_ticks_then_final_snapshot(self, quiet_console):
        """Ticks overwrite in place; only the final line ends with a newline."""
        state = ProgressState(total=3)
        tracker = ProgressTracker(state, console=quiet_console, interval=0.01).start()

        await asyncio.sleep(0.05)
        state.record_attempt()
        state.record_attempt()
        state.record_accept()
        await tracker.stop()

        output = quiet_console.file.getvalue()
        assert "0/3 (0.00%), accepted=0" in output
        assert output.endswith("2/3 (66.67%), accepted=1\n")
        assert output.count("\n") == 1

    @pytest.mark.asyncio
    async def test_no_output_after_stop(self, quiet_console):
        """Nothing is drawn once stop() returns."""
        state = ProgressState(total=1)
        tracker = ProgressTracker(state, console=quiet_console, interval=0.01).start()

        await tracker.stop()
        before = quiet_console.file.getvalue()
        await asyncio.sleep(0.05)

        assert quiet_console.file.getvalue() == before
        assert tracker.running is False

    @pytest.mark.asyncio
    async def test_stop_without_start_draws_final_line(self, quiet_console):
        """stop() still draws the final line if never started."""
        state = ProgressState(total=2)
        tracker = ProgressTracker(state, console=quiet_console)

        await tracker.stop()

        assert quiet_console.file.getvalue() == "0/2 (0.00%), accepted=0\n"

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, quiet_console):
        """A second start() reuses the running task."""
        tracker = ProgressTracker(ProgressState(total=1), console=quiet_console, interval=0.01)

        first = tracker.start()._task
        second = tracker.start()._task

        assert first is second
        await tracker.stop()
