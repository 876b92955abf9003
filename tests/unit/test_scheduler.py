import pytest
from unittest.mock import AsyncMock, patch

from henrik_models import PlayerIdentity
from scheduler import PeriodicTracker


class CountingTracker(PeriodicTracker):
    """Stops itself after ``limit`` ticks; optionally fails on some of them"""

    name = "counting tracker"

    def __init__(self, limit, failing_ticks=(), check_interval=60):
        super().__init__(check_interval)
        self.limit = limit
        self.failing_ticks = set(failing_ticks)
        self.calls = 0

    async def run_tick(self):
        self.calls += 1
        if self.calls >= self.limit:
            self.stop_tracking()
        if self.calls in self.failing_ticks:
            raise RuntimeError("tick failed")


class TestTrackingLoop:

    @pytest.mark.asyncio
    async def test_runs_until_stopped(self):
        tracker = CountingTracker(limit=3)

        with patch('scheduler.asyncio.sleep', new_callable=AsyncMock):
            await tracker.start_tracking()

        assert tracker.calls == 3
        assert tracker.ticks == 3
        assert tracker.running is False

    @pytest.mark.asyncio
    async def test_failing_tick_does_not_stop_loop(self):
        tracker = CountingTracker(limit=3, failing_ticks={1})

        with patch('scheduler.asyncio.sleep', new_callable=AsyncMock):
            with patch('scheduler.log_error') as mock_error:
                await tracker.start_tracking()

        assert tracker.calls == 3
        mock_error.assert_called_once()

    @pytest.mark.asyncio
    async def test_sleeps_for_remaining_interval(self):
        tracker = CountingTracker(limit=1, check_interval=60)

        with patch('scheduler.asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
            await tracker.start_tracking()

        delay = mock_sleep.call_args.args[0]
        assert 0 < delay <= 60

    @pytest.mark.asyncio
    async def test_overrunning_tick_sleeps_zero(self):
        tracker = CountingTracker(limit=1, check_interval=0)

        with patch('scheduler.asyncio.sleep', new_callable=AsyncMock) as mock_sleep:
            await tracker.start_tracking()

        mock_sleep.assert_awaited_once_with(0.0)

    @pytest.mark.asyncio
    async def test_start_is_noop_while_running(self):
        tracker = CountingTracker(limit=1)
        tracker.running = True

        await tracker.start_tracking()

        assert tracker.calls == 0


class TestForEachPlayer:

    @pytest.mark.asyncio
    async def test_results_in_player_order(self):
        tracker = CountingTracker(limit=1)
        players = [PlayerIdentity("Ari", "NA1"), PlayerIdentity("Bex", "EUW")]

        async def check(player):
            return str(player)

        assert await tracker.for_each_player(players, check) == ["Ari#NA1", "Bex#EUW"]

    @pytest.mark.asyncio
    async def test_failing_player_yields_none(self):
        tracker = CountingTracker(limit=1)
        players = [PlayerIdentity("Ari", "NA1"), PlayerIdentity("Bex", "EUW"), PlayerIdentity("Cam", "0001")]

        async def check(player):
            if player.name == "Bex":
                raise ValueError("bad payload")
            return player.name

        with patch('scheduler.log_error') as mock_error:
            results = await tracker.for_each_player(players, check)

        assert results == ["Ari", None, "Cam"]
        mock_error.assert_called_once()
