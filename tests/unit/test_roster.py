import json
import pytest

from henrik_models import PlayerIdentity
from roster import load_roster


@pytest.fixture
def roster_file(tmp_path):
    def write(content):
        path = tmp_path / "roster.json"
        path.write_text(content if isinstance(content, str) else json.dumps(content))
        return str(path)
    return write


def test_load_roster(roster_file):
    path = roster_file([
        {"name": "Ari", "tag": "NA1", "discord_id": 391061411813523474},
        {"name": "Bex", "tag": "#EUW"},
    ])

    players = load_roster(path)

    assert players == [PlayerIdentity("Ari", "NA1"), PlayerIdentity("Bex", "EUW")]
    assert players[0].discord_id == 391061411813523474
    assert players[1].discord_id is None


def test_invalid_entries_are_skipped(roster_file):
    path = roster_file([
        {"name": "Ari", "tag": "NA1"},
        {"name": "NoTag"},
        "Bex#EUW",
        {"name": "", "tag": "0001"},
        {"name": "Cam", "tag": "0001"},
    ])

    assert [str(p) for p in load_roster(path)] == ["Ari#NA1", "Cam#0001"]


def test_duplicates_are_dropped(roster_file):
    path = roster_file([
        {"name": "Ari", "tag": "NA1", "discord_id": 1},
        {"name": "ARI", "tag": "na1", "discord_id": 2},
    ])

    players = load_roster(path)

    assert len(players) == 1
    assert players[0].discord_id == 1


def test_loads_through_safe_json_load(mocker):
    mock_load = mocker.patch('roster.safe_json_load', return_value=[{"name": "Ari", "tag": "NA1"}])

    assert load_roster("data/roster.json") == [PlayerIdentity("Ari", "NA1")]
    mock_load.assert_called_once_with("data/roster.json", default=None)


def test_missing_file_is_empty_roster(tmp_path):
    assert load_roster(str(tmp_path / "missing.json")) == []


@pytest.mark.parametrize("content", ['{"name": "Ari", "tag": "NA1"}', "not json"])
def test_non_list_roster_is_empty(roster_file, content):
    assert load_roster(roster_file(content)) == []
