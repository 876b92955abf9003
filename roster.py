import logging
from typing import List

from config import ROSTER_FILE
from henrik_models import PlayerIdentity
from utils import safe_json_load


def load_roster(path: str = ROSTER_FILE) -> List[PlayerIdentity]:
    """
    Load the tracked players from a JSON roster file

    The file holds a list of ``{"name": ..., "tag": ..., "discord_id": ...}``
    objects. Invalid entries and repeated Riot ids are skipped.
    """
    entries = safe_json_load(path, default=None)
    if entries is None:
        logging.error(f"No roster loaded from {path}")
        return []
    if not isinstance(entries, list):
        logging.error(f"Roster file {path} must contain a list of players")
        return []

    players: List[PlayerIdentity] = []
    for index, entry in enumerate(entries):
        try:
            player = PlayerIdentity.from_dict(entry)
        except (KeyError, TypeError, ValueError) as e:
            logging.warning(f"Skipping roster entry {index} in {path}: {e}")
            continue

        if player in players:
            logging.warning(f"Skipping duplicate roster entry {player}")
            continue

        players.append(player)

    logging.info(f"Loaded {len(players)} players from {path}")
    return players
