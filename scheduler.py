import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Awaitable, Callable, Iterable, TypeVar

from config import CHECK_INTERVAL_SECONDS
from henrik_models import PlayerIdentity
from utils import log_error

T = TypeVar('T')


class PeriodicTracker(ABC):
    """Runs :meth:`run_tick` forever, at most once per ``check_interval`` seconds.

    The interval is a minimum gap between tick starts: a tick that overruns it
    is followed immediately by the next one. Errors escaping a tick are logged
    and the loop keeps going.
    """

    name = "tracker"

    def __init__(self, check_interval: float = CHECK_INTERVAL_SECONDS) -> None:
        self.check_interval = check_interval
        self.running: bool = False
        self.ticks: int = 0

    async def start_tracking(self) -> None:
        """Start the background polling loop"""
        if self.running:
            return

        self.running = True
        logging.info(f"Starting {self.name} with {self.check_interval}s polling...")

        loop = asyncio.get_running_loop()
        while self.running:
            started = loop.time()
            try:
                await self.run_tick()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log_error(f"in {self.name} tick", e)
            self.ticks += 1

            elapsed = loop.time() - started
            await asyncio.sleep(max(0.0, self.check_interval - elapsed))

    def stop_tracking(self) -> None:
        """Stop the background polling loop after the current tick"""
        self.running = False
        logging.info(f"Stopped {self.name}")

    @abstractmethod
    async def run_tick(self) -> None:
        """Process every tracked player once."""

    async def for_each_player(self, players: Iterable[PlayerIdentity],
                              check: Callable[[PlayerIdentity], Awaitable[T]]) -> list:
        """Run ``check`` for every player concurrently.

        A failing player is logged and yields ``None``; the others are not affected.
        """
        async def guarded(player: PlayerIdentity):
            try:
                return await check(player)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                log_error(f"checking {player} in {self.name}", e)
                return None

        return await asyncio.gather(*(guarded(player) for player in players))
