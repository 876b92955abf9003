from typing import Dict, Optional
import discord

from henrik_models import MatchPlayer, MatchSnapshot, MmrSnapshot, PlayerIdentity
from match_stats import (
    calculate_average_combat_score,
    calculate_headshot_percentage,
    calculate_kd,
    find_player_team,
    format_kd,
    game_length_minutes,
    leaderboard_position,
    partied_with,
    rounds_played,
)
from utils import parse_henrik_timestamp, safe_embed_field

MESSAGE_CONTENT_LIMIT = 2000


def bold(text: str) -> str:
    """Make text bold for Discord"""
    return f"**{text}**"


def format_mmr_change(change: int) -> str:
    """Signed MMR delta, with an explicit plus for gains"""
    return f"+{change}" if change > 0 else str(change)


def format_rank(mmr: MmrSnapshot) -> str:
    """Tier with the points inside it, e.g. ``Diamond 2 @ 55 MMR``"""
    return f"{mmr.current_tier_patched} @ {mmr.ranking_in_tier} MMR"


def build_match_embed(display_name: str, match: MatchSnapshot, player: MatchPlayer) -> discord.Embed:
    """
    Build the announcement for a player's newly finished match

    Args:
        display_name: Name shown in the title (Discord name when resolved)
        match: The new match
        player: The tracked player's entry in ``match.players``
    """
    team = find_player_team(match, player)
    has_won = bool(team and team.has_won)
    kd = format_kd(calculate_kd(player))
    stats = player.stats

    embed = discord.Embed(
        title=f"{display_name}'s Game on {match.map_name}",
        description=(
            f"{player.name} {bold('won' if has_won else 'lost')} their game on {match.map_name} "
            f"with a KD of {kd}, and is now at rank {player.current_tier}"
        ),
        color=discord.Color.dark_green() if has_won else discord.Color.dark_red(),
        timestamp=parse_henrik_timestamp(match.game_start),
    )

    if player.card_wide:
        embed.set_image(url=player.card_wide)
    if player.agent_small:
        embed.set_thumbnail(url=player.agent_small)

    if team:
        team_rounds = f"{team.rounds_won} / {team.rounds_lost}"
    else:
        team_rounds = "Unknown"

    safe_embed_field(embed, "Map", match.map_name)
    safe_embed_field(embed, "Rounds", rounds_played(match))
    safe_embed_field(embed, "Player Team Rounds Won / Lost", team_rounds)
    safe_embed_field(embed, "Game Length", f"{game_length_minutes(match)}min")
    safe_embed_field(embed, "Agent", player.character)
    safe_embed_field(embed, "Kills", stats.kills)
    safe_embed_field(embed, "Assists", stats.assists)
    safe_embed_field(embed, "Deaths", stats.deaths)
    safe_embed_field(embed, "KD Ratio", kd)
    safe_embed_field(embed, "Leaderboard Position", leaderboard_position(match, player))

    headshot_percentage = calculate_headshot_percentage(player)
    if headshot_percentage is not None:
        safe_embed_field(embed, "Head Shot Percentage", f"{headshot_percentage}%")

    average_combat_score = calculate_average_combat_score(player, match)
    if average_combat_score is not None:
        safe_embed_field(embed, "Average Combat Score", average_combat_score)

    if player.session_playtime_minutes is not None:
        safe_embed_field(embed, "Session Playtime", f"{player.session_playtime_minutes}min")

    if player.afk_rounds > 0:
        safe_embed_field(embed, "AFK Rounds", player.afk_rounds)

    if player.rounds_in_spawn > 0:
        safe_embed_field(embed, "Rounds in Spawn", player.rounds_in_spawn)

    party = partied_with(match, player)
    if party:
        safe_embed_field(embed, "Partied With", ", ".join(party))

    return embed


def add_mmr_fields(embed: discord.Embed, mmr: MmrSnapshot) -> discord.Embed:
    """Append the rating change to a match announcement"""
    safe_embed_field(embed, "MMR Change", format_mmr_change(mmr.mmr_change_to_last_game))
    safe_embed_field(embed, "Rank", format_rank(mmr))
    return embed


def leaderboard_line(player: PlayerIdentity, mmr: MmrSnapshot) -> str:
    return f"{player.name}: {format_rank(mmr)}"


def render_leaderboard(board: Dict[PlayerIdentity, Optional[MmrSnapshot]]) -> str:
    """
    Render the roster leaderboard, highest elo first

    Players whose rating was never fetched are left out. Ties keep roster order.
    """
    ranked = sorted(
        ((player, mmr) for player, mmr in board.items() if mmr is not None),
        key=lambda entry: entry[1].elo,
        reverse=True,
    )
    content = "\n".join(leaderboard_line(player, mmr) for player, mmr in ranked)
    # Discord limit: message content=2000
    if len(content) > MESSAGE_CONTENT_LIMIT:
        content = content[:MESSAGE_CONTENT_LIMIT - 3] + "..."
    return content
