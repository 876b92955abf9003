from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, Optional

from henrik_models import PlayerIdentity


@dataclass
class TrackingState:
    """Last values observed for one player. ``None`` means no baseline yet."""
    last_match_id: Optional[str] = None
    last_mmr_timestamp: Optional[int] = None

    def advance_match(self, match_id: str) -> Optional[str]:
        """Store the newest match id and return the one it replaced."""
        previous = self.last_match_id
        self.last_match_id = match_id
        return previous

    def advance_mmr(self, timestamp: int) -> Optional[int]:
        """Store the newest rating timestamp and return the one it replaced."""
        previous = self.last_mmr_timestamp
        self.last_mmr_timestamp = timestamp
        return previous


class TrackingStateStore:
    """Per-player tracking state, owned by a single tracker.

    Each player's entry is only ever touched by that player's check, so
    concurrent checks for different players need no locking.
    """

    def __init__(self, players: Iterable[PlayerIdentity] = ()) -> None:
        self._states: Dict[PlayerIdentity, TrackingState] = {}
        for player in players:
            self._states.setdefault(player, TrackingState())

    def get(self, player: PlayerIdentity) -> TrackingState:
        """Get the player's state, creating an empty one on first use."""
        state = self._states.get(player)
        if state is None:
            state = self._states[player] = TrackingState()
        return state

    def __contains__(self, player: PlayerIdentity) -> bool:
        return player in self._states

    def __iter__(self) -> Iterator[PlayerIdentity]:
        return iter(self._states)

    def __len__(self) -> int:
        return len(self._states)
