import logging
from typing import Dict, Iterable, Optional
import discord

from config import CHECK_INTERVAL_SECONDS, LEADERBOARD_MESSAGE_ID, LEADERBOARD_PLACEHOLDER
from exceptions import TrackerError
from handlers.message_formatter import render_leaderboard
from henrik_models import MmrSnapshot, PlayerIdentity
from notification_sink import DiscordNotificationSink
from scheduler import PeriodicTracker
from utils import log_error
from valorant_client import ValorantClient


class MmrLeaderboardTracker(PeriodicTracker):
    """Keeps one message listing every roster player's rank, best elo first.

    The message is only edited on ticks where at least one player's elo
    moved, which keeps edits (and Discord rate limit pressure) to a minimum.
    """

    name = "mmr leaderboard"

    def __init__(self, players: Iterable[PlayerIdentity], client: ValorantClient,
                 sink: DiscordNotificationSink, channel_id: int,
                 message_id: Optional[int] = LEADERBOARD_MESSAGE_ID,
                 check_interval: float = CHECK_INTERVAL_SECONDS) -> None:
        super().__init__(check_interval)
        self.players = list(players)
        self.client = client
        self.sink = sink
        self.channel_id = channel_id
        self.message_id = message_id
        self.board: Dict[PlayerIdentity, Optional[MmrSnapshot]] = {player: None for player in self.players}
        self.message: Optional[discord.Message] = None

    async def ensure_message(self) -> discord.Message:
        """Find the leaderboard message to edit, creating it if needed.

        Looks for the configured message first, then for the newest message
        this bot posted in the channel, and only then posts a new one.
        """
        if self.message is not None:
            return self.message

        if self.message_id:
            self.message = await self.sink.fetch(self.channel_id, self.message_id)
            if self.message is None:
                logging.warning(f"Configured leaderboard message {self.message_id} no longer exists")

        if self.message is None:
            bot_user = self.sink.bot_user
            for message in await self.sink.list_recent(self.channel_id):
                if bot_user is not None and message.author.id == bot_user.id:
                    self.message = message
                    logging.info(f"Reusing leaderboard message {message.id}")
                    break

        if self.message is None:
            self.message = await self.sink.send(self.channel_id, content=LEADERBOARD_PLACEHOLDER)
            logging.info(
                f"Created leaderboard message {self.message.id}; "
                f"set LEADERBOARD_MESSAGE_ID={self.message.id} to keep using it"
            )

        return self.message

    async def _fetch(self, player: PlayerIdentity) -> Optional[MmrSnapshot]:
        try:
            return await self.client.fetch_latest_mmr(player.name, player.tag)
        except TrackerError as e:
            log_error(f"getting MMR for {player}", e)
            return None

    def update_board(self, results: Dict[PlayerIdentity, Optional[MmrSnapshot]]) -> bool:
        """Merge one tick of results; return whether any elo changed.

        Failed lookups (``None``) keep the player's last known rating.
        """
        changed = False
        for player, mmr in results.items():
            if mmr is None:
                continue

            previous = self.board.get(player)
            if previous is None or previous.elo != mmr.elo:
                changed = True
                logging.info(f"Detected MMR change in {player}.")

            self.board[player] = mmr

        return changed

    async def run_tick(self) -> None:
        fetched = await self.for_each_player(self.players, self._fetch)

        # Every lookup has finished before the board is compared or rendered
        if not self.update_board(dict(zip(self.players, fetched))):
            logging.debug("No MMR changes, leaderboard left untouched")
            return

        await self.publish()

    async def publish(self) -> None:
        """Edit the leaderboard message to the current board."""
        try:
            message = await self.ensure_message()
            await self.sink.edit(message, render_leaderboard(self.board))
        except TrackerError as e:
            log_error("updating mmr message", e)
            return

        logging.info("Successfully updated MMR message.")
