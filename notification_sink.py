import logging
from typing import List, Optional
import discord

from exceptions import DeliveryError
from henrik_models import PlayerIdentity
from utils import log_error


class DiscordNotificationSink:
    """Posts and edits tracker messages through a discord.py client.

    Every Discord failure surfaces as :class:`DeliveryError`; nothing is
    retried here.
    """

    def __init__(self, client: discord.Client) -> None:
        self.client = client

    @property
    def bot_user(self) -> Optional[discord.ClientUser]:
        return self.client.user

    async def _get_channel(self, channel_id: int) -> discord.abc.Messageable:
        channel = self.client.get_channel(channel_id)
        if channel is not None:
            return channel

        try:
            return await self.client.fetch_channel(channel_id)
        except discord.HTTPException as e:
            raise DeliveryError(f"Channel {channel_id} unavailable: {e}") from e

    async def send(self, channel_id: int, content: Optional[str] = None,
                   embed: Optional[discord.Embed] = None) -> discord.Message:
        """Send a new message to a channel."""
        channel = await self._get_channel(channel_id)
        try:
            return await channel.send(content=content, embed=embed)
        except discord.HTTPException as e:
            raise DeliveryError(f"Failed to send message to channel {channel_id}: {e}") from e

    async def edit(self, message: discord.Message, content: str) -> discord.Message:
        """Replace the content of a message the bot sent earlier."""
        try:
            return await message.edit(content=content)
        except discord.HTTPException as e:
            raise DeliveryError(f"Failed to edit message {message.id}: {e}") from e

    async def list_recent(self, channel_id: int, limit: int = 50) -> List[discord.Message]:
        """Most recent messages of a channel, newest first."""
        channel = await self._get_channel(channel_id)
        try:
            return [message async for message in channel.history(limit=limit)]
        except discord.HTTPException as e:
            raise DeliveryError(f"Failed to read history of channel {channel_id}: {e}") from e

    async def fetch(self, channel_id: int, message_id: int) -> Optional[discord.Message]:
        """Fetch one message, or ``None`` if it no longer exists."""
        channel = await self._get_channel(channel_id)
        try:
            return await channel.fetch_message(message_id)
        except discord.NotFound:
            return None
        except discord.HTTPException as e:
            raise DeliveryError(f"Failed to fetch message {message_id}: {e}") from e

    async def resolve_display_name(self, player: PlayerIdentity) -> str:
        """Discord name for a roster player, falling back to the Riot name."""
        if player.display_name:
            return player.display_name
        if not player.discord_id:
            return player.name

        try:
            user = self.client.get_user(player.discord_id) or await self.client.fetch_user(player.discord_id)
        except discord.HTTPException as e:
            log_error(f"resolving Discord user {player.discord_id} for {player}", e, level=logging.WARNING)
            return player.name

        player.display_name = user.name
        return player.display_name
