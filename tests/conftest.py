import pytest
from unittest.mock import Mock, AsyncMock
import os
import sys

# Add the project root to the path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from henrik_models import PlayerIdentity, MatchSnapshot, MmrSnapshot


def make_player_payload(name="Ari", tag="NA1", puuid=None, team="Red", kills=10, deaths=4,
                        assists=3, score=2500, headshots=12, bodyshots=6, legshots=2,
                        party_id=None, playtime_minutes=None, afk_rounds=0.0,
                        rounds_in_spawn=0.0, character="Jett", tier="Diamond 2"):
    """Build one entry of ``players.all_players`` as Henrik v3 returns it"""
    return {
        "puuid": puuid or f"puuid-{name.lower()}",
        "name": name,
        "tag": tag,
        "team": team,
        "character": character,
        "currenttier": 19,
        "currenttier_patched": tier,
        "party_id": party_id,
        "session_playtime": {"minutes": playtime_minutes, "seconds": None, "milliseconds": None},
        "behavior": {
            "afk_rounds": afk_rounds,
            "friendly_fire": {"incoming": 0, "outgoing": 0},
            "rounds_in_spawn": rounds_in_spawn,
        },
        "assets": {
            "card": {"small": "https://cards/small.png", "large": "https://cards/large.png",
                     "wide": "https://cards/wide.png"},
            "agent": {"small": "https://agents/small.png", "bust": "https://agents/bust.png",
                      "full": "https://agents/full.png", "killfeed": "https://agents/kf.png"},
        },
        "stats": {
            "score": score,
            "kills": kills,
            "deaths": deaths,
            "assists": assists,
            "headshots": headshots,
            "bodyshots": bodyshots,
            "legshots": legshots,
        },
    }


def make_match_payload(match_id="match-1", players=None, map_name="Ascent", rounds_played=10,
                       game_length=2100, red_won=True, red_rounds=(6, 4)):
    """Build a Henrik v3 match object; by default Ari plays on the winning red team"""
    if players is None:
        players = [
            make_player_payload(),
            make_player_payload(name="Bex", tag="EUW", team="Blue", kills=8, deaths=9),
        ]
    red_won_rounds, red_lost_rounds = red_rounds
    return {
        "metadata": {
            "map": map_name,
            "game_length": game_length,
            "game_start": 1704067200,
            "rounds_played": rounds_played,
            "mode": "Competitive",
            "matchid": match_id,
            "region": "na",
        },
        "players": {
            "all_players": players,
            "red": [p for p in players if p["team"] == "Red"],
            "blue": [p for p in players if p["team"] == "Blue"],
        },
        "teams": {
            "red": {"has_won": red_won, "rounds_won": red_won_rounds, "rounds_lost": red_lost_rounds},
            "blue": {"has_won": not red_won, "rounds_won": red_lost_rounds, "rounds_lost": red_won_rounds},
        },
        "rounds": [{} for _ in range(rounds_played)],
    }


def make_mmr_payload(elo=1855, tier="Diamond 2", ranking=55, change=17, date_raw=1704070000):
    """Build one Henrik v1 mmr-history entry"""
    return {
        "currenttier": 19,
        "currenttierpatched": tier,
        "images": {"small": "https://ranks/small.png", "large": "https://ranks/large.png",
                   "triangle_down": "", "triangle_up": ""},
        "ranking_in_tier": ranking,
        "mmr_change_to_last_game": change,
        "elo": elo,
        "date": "Monday, January 1, 2024 12:00 AM",
        "date_raw": date_raw,
    }


@pytest.fixture
def player():
    return PlayerIdentity("Ari", "NA1", discord_id=391061411813523474)


@pytest.fixture
def match_factory():
    def factory(**kwargs):
        return MatchSnapshot.from_dict(make_match_payload(**kwargs))
    return factory


@pytest.fixture
def mmr_factory():
    def factory(**kwargs):
        return MmrSnapshot.from_dict(make_mmr_payload(**kwargs))
    return factory


@pytest.fixture
def mock_valorant_client():
    """ValorantClient stand-in whose lookups are AsyncMocks"""
    client = Mock()
    client.fetch_latest_match = AsyncMock()
    client.fetch_latest_mmr = AsyncMock()
    return client


@pytest.fixture
def mock_discord_message():
    """Create a mock Discord message object"""
    message = AsyncMock()
    message.id = 555666777
    message.content = "Test message"
    message.author = Mock()
    message.author.id = 963236610307141650
    message.edit = AsyncMock()
    return message


@pytest.fixture
def mock_sink(mock_discord_message):
    """DiscordNotificationSink stand-in"""
    sink = Mock()
    sink.send = AsyncMock(return_value=mock_discord_message)
    sink.edit = AsyncMock(return_value=mock_discord_message)
    sink.fetch = AsyncMock(return_value=None)
    sink.list_recent = AsyncMock(return_value=[])
    sink.resolve_display_name = AsyncMock(side_effect=lambda p: p.display_name or p.name)
    sink.bot_user = Mock()
    sink.bot_user.id = 963236610307141650
    return sink
