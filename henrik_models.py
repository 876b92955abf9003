"""Data models for roster players and the Henrik API payloads we consume."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


def _int(value: Any, default: int = 0) -> int:
    """Coerce a provider number (possibly null or float) to int."""
    if value is None:
        return default
    return int(value)


def _number(value: Any):
    """Keep whole floats readable: 2.0 -> 2, 1.5 -> 1.5."""
    if value is None:
        return 0
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


@dataclass(eq=False)
class PlayerIdentity:
    """A roster entry. Equality is by Riot id, ignoring case."""
    name: str
    tag: str
    discord_id: Optional[int] = None
    display_name: Optional[str] = None  # cached Discord name

    @property
    def key(self) -> Tuple[str, str]:
        return (self.name.casefold(), self.tag.casefold())

    def matches(self, name: str, tag: str) -> bool:
        return self.key == (str(name).casefold(), str(tag).casefold())

    def __eq__(self, other) -> bool:
        if not isinstance(other, PlayerIdentity):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return f"{self.name}#{self.tag}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlayerIdentity':
        name = str(data['name']).strip()
        tag = str(data['tag']).strip().lstrip('#')
        if not name or not tag:
            raise ValueError(f"Roster entry needs a name and a tag: {data}")

        discord_id = data.get('discord_id')
        return cls(
            name=name,
            tag=tag,
            discord_id=int(discord_id) if discord_id else None,
        )


@dataclass
class PlayerStats:
    score: int = 0
    kills: int = 0
    deaths: int = 0
    assists: int = 0
    headshots: int = 0
    bodyshots: int = 0
    legshots: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PlayerStats':
        data = data or {}
        return cls(
            score=_int(data.get('score')),
            kills=_int(data.get('kills')),
            deaths=_int(data.get('deaths')),
            assists=_int(data.get('assists')),
            headshots=_int(data.get('headshots')),
            bodyshots=_int(data.get('bodyshots')),
            legshots=_int(data.get('legshots')),
        )


@dataclass
class MatchPlayer:
    """One participant of a match, as listed in ``players.all_players``."""
    puuid: str
    name: str
    tag: str
    team: str
    character: str
    current_tier: str
    stats: PlayerStats
    party_id: Optional[str] = None
    session_playtime_minutes: Optional[int] = None
    afk_rounds: float = 0
    rounds_in_spawn: float = 0
    card_wide: Optional[str] = None
    agent_small: Optional[str] = None

    @property
    def riot_id(self) -> str:
        return f"{self.name}#{self.tag}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchPlayer':
        session_playtime = data.get('session_playtime') or {}
        behavior = data.get('behavior') or {}
        assets = data.get('assets') or {}
        minutes = session_playtime.get('minutes')

        return cls(
            puuid=data['puuid'],
            name=data['name'],
            tag=data['tag'],
            team=data.get('team') or '',
            character=data.get('character') or 'Unknown',
            current_tier=data.get('currenttier_patched') or 'Unrated',
            stats=PlayerStats.from_dict(data.get('stats')),
            party_id=data.get('party_id') or None,
            session_playtime_minutes=_int(minutes) if minutes is not None else None,
            afk_rounds=_number(behavior.get('afk_rounds')),
            rounds_in_spawn=_number(behavior.get('rounds_in_spawn')),
            card_wide=(assets.get('card') or {}).get('wide'),
            agent_small=(assets.get('agent') or {}).get('small'),
        )


@dataclass
class TeamResult:
    has_won: bool
    rounds_won: int
    rounds_lost: int
    member_puuids: List[str] = field(default_factory=list)


@dataclass
class MatchSnapshot:
    """Read-only view of one competitive match."""
    match_id: str
    map_name: str
    rounds_played: int
    game_length: int
    game_start: Optional[int]
    round_count: int
    players: List[MatchPlayer]
    teams: Dict[str, TeamResult]

    def find_player(self, name: str, tag: str) -> Optional[MatchPlayer]:
        """Find a participant by Riot id, ignoring case."""
        wanted = (name.casefold(), tag.casefold())
        for player in self.players:
            if (player.name.casefold(), player.tag.casefold()) == wanted:
                return player
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MatchSnapshot':
        metadata = data['metadata']
        match_id = metadata.get('matchid')
        if not match_id:
            raise ValueError("Match payload has no matchid")

        players_section = data.get('players') or {}
        players = [MatchPlayer.from_dict(p) for p in players_section.get('all_players') or []]

        teams: Dict[str, TeamResult] = {}
        for team_id, team_data in (data.get('teams') or {}).items():
            if not isinstance(team_data, dict):
                continue
            team_id = team_id.lower()
            listed = players_section.get(team_id)
            if isinstance(listed, list) and listed:
                members = [p.get('puuid') for p in listed]
            else:
                members = [p.puuid for p in players if p.team.lower() == team_id]

            teams[team_id] = TeamResult(
                has_won=bool(team_data.get('has_won')),
                rounds_won=_int(team_data.get('rounds_won')),
                rounds_lost=_int(team_data.get('rounds_lost')),
                member_puuids=members,
            )

        return cls(
            match_id=match_id,
            map_name=metadata.get('map') or 'Unknown',
            rounds_played=_int(metadata.get('rounds_played')),
            game_length=_int(metadata.get('game_length')),
            game_start=metadata.get('game_start'),
            round_count=len(data.get('rounds') or []),
            players=players,
            teams=teams,
        )


@dataclass
class MmrSnapshot:
    """Latest entry of a player's rating history."""
    current_tier: int
    current_tier_patched: str
    ranking_in_tier: int
    mmr_change_to_last_game: int
    elo: int
    date_raw: int
    image_small: Optional[str] = None
    image_large: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'MmrSnapshot':
        images = data.get('images') or {}
        tier_name = data.get('currenttierpatched') or data.get('currenttier_patched') or 'Unrated'

        return cls(
            current_tier=_int(data.get('currenttier')),
            current_tier_patched=tier_name,
            ranking_in_tier=_int(data.get('ranking_in_tier')),
            mmr_change_to_last_game=_int(data.get('mmr_change_to_last_game')),
            elo=_int(data['elo']),
            date_raw=_int(data['date_raw']),
            image_small=images.get('small'),
            image_large=images.get('large'),
        )
