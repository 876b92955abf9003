"""
Derived statistics for a single match.

Every division here is guarded: zero deaths, zero shots and zero rounds all
produce a defined result instead of raising or leaking NaN into messages.
"""

import math
from typing import List, Optional

from henrik_models import MatchPlayer, MatchSnapshot, TeamResult

PERFECT_KD = "Perfect"

# Older Henrik payloads report game_length in milliseconds, current ones in seconds
_MILLISECONDS_THRESHOLD = 100_000


def calculate_kd(player: MatchPlayer) -> float:
    """Kills divided by deaths. Deathless games with kills are ``inf``, 0/0 is 0."""
    kills = player.stats.kills
    deaths = player.stats.deaths
    if deaths == 0:
        return math.inf if kills > 0 else 0.0
    return kills / deaths


def format_kd(kd: float) -> str:
    """Format a KD ratio with two decimals, or "Perfect" for a deathless game."""
    if math.isinf(kd):
        return PERFECT_KD
    return f"{kd:.2f}"


def calculate_headshot_percentage(player: MatchPlayer) -> Optional[int]:
    """Headshot share of all hits, truncated. ``None`` when nothing was hit."""
    stats = player.stats
    all_shots = stats.headshots + stats.bodyshots + stats.legshots
    if all_shots == 0:
        return None
    return int(stats.headshots * 100 / all_shots)


def rounds_played(match: MatchSnapshot) -> int:
    return match.rounds_played or match.round_count


def calculate_average_combat_score(player: MatchPlayer, match: MatchSnapshot) -> Optional[int]:
    """Total score over rounds played (integer division). ``None`` for zero rounds."""
    rounds = rounds_played(match)
    if rounds <= 0:
        return None
    return player.stats.score // rounds


def game_length_minutes(match: MatchSnapshot) -> int:
    length = match.game_length
    if length > _MILLISECONDS_THRESHOLD:
        return length // 60000
    return length // 60


def leaderboard_position(match: MatchSnapshot, player: MatchPlayer) -> int:
    """1-based rank of ``player`` among all participants by KD, highest first.

    ``sorted`` is stable, so equal KDs keep the provider's order.
    """
    ranking = sorted(match.players, key=calculate_kd, reverse=True)
    for index, other in enumerate(ranking):
        if other.puuid == player.puuid:
            return index + 1
    raise ValueError(f"{player.riot_id} is not a participant of match {match.match_id}")


def find_player_team(match: MatchSnapshot, player: MatchPlayer) -> Optional[TeamResult]:
    """The team whose roster contains ``player``, whatever the number of teams."""
    for team in match.teams.values():
        if player.puuid in team.member_puuids:
            return team
    return match.teams.get(player.team.lower())


def partied_with(match: MatchSnapshot, player: MatchPlayer) -> List[str]:
    """Riot ids of the other participants who queued in the player's party."""
    if not player.party_id:
        return []
    return [
        other.riot_id
        for other in match.players
        if other.party_id == player.party_id and other.puuid != player.puuid
    ]
