import logging
import sys
import os
import time
import asyncio
from typing import List, Optional
import discord
from discord.ext import tasks

from config import (
    APP_VERSION,
    BOT_TOKEN,
    LOG_FILE,
    LOG_LEVEL,
    MATCH_CHANNEL_ID,
    MMR_CHANNEL_ID,
    ROSTER_FILE,
)
from henrik_models import PlayerIdentity
from match_tracker import MatchTracker
from mmr_leaderboard import MmrLeaderboardTracker
from notification_sink import DiscordNotificationSink
from roster import load_roster
from scheduler import PeriodicTracker
from utils import log_error
from valorant_client import ValorantClient


class MatchNotifierBot(discord.Client):
    """Discord client hosting the match tracker and the MMR leaderboard."""

    def __init__(self, roster_file: str = ROSTER_FILE):
        super().__init__(intents=discord.Intents.default())

        self.roster_file = roster_file
        self.players: List[PlayerIdentity] = []
        self.valorant_client: Optional[ValorantClient] = None
        self.trackers: List[PeriodicTracker] = []
        self._tracker_tasks: List[asyncio.Task] = []
        self._trackers_started = False
        self.health_check_file = ".bot_health"

    @tasks.loop(minutes=2)
    async def health_check_task(self) -> None:
        """Update health check file every 2 minutes."""
        try:
            with open(self.health_check_file, "w") as f:
                f.write(str(int(time.time())))
        except OSError as e:
            logging.error(f"Failed to update health check file: {e}")

    @health_check_task.before_loop
    async def before_health_check(self) -> None:
        """Wait until bot is ready before starting health checks."""
        await self.wait_until_ready()

    def setup_logging(self) -> None:
        """Configure logging with proper formatting."""
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        logging.basicConfig(
            level=getattr(logging, LOG_LEVEL.upper()),
            format=log_format,
            handlers=[
                logging.StreamHandler(sys.stdout),
                logging.FileHandler(LOG_FILE, encoding="utf-8"),
            ],
        )

        # Reduce Discord.py logging verbosity
        discord_logger = logging.getLogger("discord")
        discord_logger.setLevel(logging.INFO)

    async def on_ready(self) -> None:
        """Called when bot is ready."""
        logging.info(f"Bot logged in as {self.user} (ID: {self.user.id})")
        logging.info(f"Match notifier v{APP_VERSION} is starting up...")

        self.start_trackers()

        if not self.health_check_task.is_running():
            self.health_check_task.start()
            logging.info("Health monitoring started")

    def build_trackers(self) -> List[PeriodicTracker]:
        """Create one tracker per configured channel, sharing the API client."""
        self.players = load_roster(self.roster_file)
        if not self.players:
            logging.warning("Roster is empty, nothing to track")
            return []

        self.valorant_client = ValorantClient()
        sink = DiscordNotificationSink(self)
        trackers: List[PeriodicTracker] = []

        # Each tracker gets its own copies so the two never share identity objects
        if MATCH_CHANNEL_ID:
            players = [PlayerIdentity(p.name, p.tag, p.discord_id) for p in self.players]
            trackers.append(MatchTracker(players, self.valorant_client, sink, MATCH_CHANNEL_ID))
        else:
            logging.warning("MATCH_CHANNEL_ID not set, match announcements disabled")

        if MMR_CHANNEL_ID:
            players = [PlayerIdentity(p.name, p.tag, p.discord_id) for p in self.players]
            trackers.append(MmrLeaderboardTracker(players, self.valorant_client, sink, MMR_CHANNEL_ID))
        else:
            logging.warning("MMR_CHANNEL_ID not set, MMR leaderboard disabled")

        return trackers

    def start_trackers(self) -> None:
        """Start every tracker as an independent background task."""
        # on_ready fires again after reconnects; the roster is only read once
        if self._trackers_started:
            return
        self._trackers_started = True

        try:
            self.trackers = self.build_trackers()
        except Exception as e:
            log_error("starting trackers", e)
            logging.warning("Bot will continue without tracking")
            return

        for tracker in self.trackers:
            self._tracker_tasks.append(asyncio.create_task(tracker.start_tracking()))
            logging.info(f"Started {tracker.name} for {len(tracker.players)} players")

    async def close(self) -> None:
        """Gracefully shut down the bot."""
        logging.info("Shutting down match notifier...")

        for tracker in self.trackers:
            tracker.stop_tracking()
        for task in self._tracker_tasks:
            task.cancel()
        await asyncio.gather(*self._tracker_tasks, return_exceptions=True)
        self._tracker_tasks.clear()

        if self.valorant_client is not None:
            await self.valorant_client.close()

        await super().close()
        logging.info("Match notifier shutdown complete")


async def main() -> None:
    """Main bot startup function."""
    # Check for existing bot instances
    import psutil
    current_pid = os.getpid()

    for proc in psutil.process_iter(['pid', 'name', 'cmdline']):
        try:
            if proc.info['pid'] == current_pid:
                continue

            if proc.info['name'] and 'python' in proc.info['name'].lower():
                if proc.info['cmdline'] and any('bot.py' in arg for arg in proc.info['cmdline']):
                    print(f"\nAnother bot instance is already running (PID: {proc.info['pid']})")
                    sys.exit(1)
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            pass

    bot = MatchNotifierBot()
    bot.setup_logging()

    async with bot:
        await bot.start(BOT_TOKEN)


def check_requirements() -> bool:
    """Check if all requirements are met."""
    if not BOT_TOKEN:
        print("\nError: BOT_TOKEN not found!")
        print("\nPlease configure the bot token using one of these methods:")
        print("  1. Set BOT_TOKEN environment variable")
        print("  2. Create a .env file with BOT_TOKEN=your_token_here")
        return False

    if not MATCH_CHANNEL_ID and not MMR_CHANNEL_ID:
        print("\nError: set MATCH_CHANNEL_ID and/or MMR_CHANNEL_ID!")
        return False

    return True


if __name__ == "__main__":
    if not check_requirements():
        sys.exit(1)

    print(f"\nValorant match notifier v{APP_VERSION}")
    print(f"Roster: {ROSTER_FILE}")
    print(f"Log Level: {LOG_LEVEL}")
    print("Starting up...\n")

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nBot shutdown requested by user")
    except Exception as e:
        print(f"\nBot crashed: {e}")
        logging.exception("Fatal error:")
        sys.exit(1)
