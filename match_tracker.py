import logging
from typing import Iterable, Optional
import discord

from config import CHECK_INTERVAL_SECONDS
from exceptions import DeliveryError, TrackerError
from handlers.message_formatter import add_mmr_fields, build_match_embed
from henrik_models import MatchSnapshot, PlayerIdentity
from notification_sink import DiscordNotificationSink
from scheduler import PeriodicTracker
from tracking_state import TrackingState, TrackingStateStore
from utils import log_error
from valorant_client import ValorantClient


class MatchTracker(PeriodicTracker):
    """Announces each roster player's newly finished competitive matches.

    State for a player is advanced as soon as a fetch succeeds, before any
    message is built or sent: every observed change is announced at most
    once, and a failed delivery is not retried.
    """

    name = "match tracker"

    def __init__(self, players: Iterable[PlayerIdentity], client: ValorantClient,
                 sink: DiscordNotificationSink, channel_id: int,
                 check_interval: float = CHECK_INTERVAL_SECONDS) -> None:
        super().__init__(check_interval)
        self.players = list(players)
        self.client = client
        self.sink = sink
        self.channel_id = channel_id
        self.states = TrackingStateStore(self.players)

    async def run_tick(self) -> None:
        await self.for_each_player(self.players, self.check_player)

    async def check_player(self, player: PlayerIdentity) -> Optional[discord.Embed]:
        """Poll one player; returns the announcement sent this tick, if any."""
        state = self.states.get(player)

        try:
            match = await self.client.fetch_latest_match(player.name, player.tag)
        except TrackerError as e:
            log_error(f"fetching latest match for {player}", e)
            return None

        previous_match_id = state.advance_match(match.match_id)

        embed = None
        if previous_match_id is None:
            logging.info(f"No game stored for {player}, storing {match.match_id} as baseline")
        elif previous_match_id == match.match_id:
            logging.debug(f"Last stored game is same as newest for {player}")
        else:
            embed = await self._build_announcement(player, match)

        await self._check_mmr(player, state, embed)

        if embed is None:
            return None

        try:
            await self.sink.send(self.channel_id, embed=embed)
        except DeliveryError as e:
            log_error(f"sending match message for {player}", e)
            return None

        logging.info(f"Sent new match message for {player} ({match.match_id})")
        return embed

    async def _build_announcement(self, player: PlayerIdentity, match: MatchSnapshot) -> discord.Embed:
        match_player = match.find_player(player.name, player.tag)
        display_name = await self.sink.resolve_display_name(player)
        return build_match_embed(display_name, match, match_player)

    async def _check_mmr(self, player: PlayerIdentity, state: TrackingState,
                         embed: Optional[discord.Embed]) -> None:
        """Advance the rating timestamp; attach the change to ``embed`` when it moved."""
        try:
            mmr = await self.client.fetch_latest_mmr(player.name, player.tag)
        except TrackerError as e:
            log_error(f"fetching mmr change for {player}", e, level=logging.WARNING)
            return
        except Exception as e:
            # The match step already advanced state, so its announcement must still go out
            log_error(f"fetching mmr change for {player}", e)
            return

        previous_timestamp = state.advance_mmr(mmr.date_raw)

        if previous_timestamp is None:
            logging.debug(f"No MMR stored for {player}, storing baseline")
            return
        if previous_timestamp == mmr.date_raw:
            logging.debug(f"Last MMR is same as newest for {player}")
            return

        if embed is not None:
            add_mmr_fields(embed, mmr)
            logging.info(f"Detected MMR change for {player}: {mmr.mmr_change_to_last_game}")
