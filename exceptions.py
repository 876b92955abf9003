"""
Error kinds raised by the trackers and their collaborators.

Every one of these is recovered per player, per tick: the tracker logs it
and moves on to the next player.
"""

from typing import Optional


class TrackerError(Exception):
    """Base exception for tracker errors."""
    def __init__(self, message: str, player: Optional[str] = None):
        super().__init__(message)
        self.player = player

    def __str__(self) -> str:
        message = super().__str__()
        if self.player:
            return f"{message} ({self.player})"
        return message


class TransportError(TrackerError):
    """Raised when the stats provider cannot be reached or its body cannot be decoded."""


class NotFoundError(TrackerError):
    """Raised when the provider answered without data or with a non-success status."""
    def __init__(self, message: str, player: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message, player)
        self.status = status


class PlayerNotInMatchError(TrackerError):
    """Raised when the tracked player is missing from the fetched match roster."""
    def __init__(self, player: str, match_id: Optional[str] = None):
        super().__init__(f"Player not found among participants of match {match_id}", player)
        self.match_id = match_id


class DeliveryError(TrackerError):
    """Raised when sending or editing a Discord message fails."""
