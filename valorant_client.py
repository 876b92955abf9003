import logging
from typing import Optional, Dict, Any
from config import HENRIK_API_KEY, HENRIK_BASE_URL, HENRIK_REGION
from exceptions import NotFoundError, PlayerNotInMatchError, TransportError
from api_clients import BaseAPIClient, RateLimitInfo, APIResponse
from henrik_models import MatchSnapshot, MmrSnapshot


class ValorantClient(BaseAPIClient):
    """Client for Henrik's Valorant API.

    Only the two lookups the trackers need are exposed. Both make a single
    request and either return a parsed snapshot or raise one of
    ``TransportError``, ``NotFoundError`` or ``PlayerNotInMatchError``.
    """

    def __init__(self, api_key: Optional[str] = None, region: Optional[str] = None):
        api_key = HENRIK_API_KEY if api_key is None else api_key

        # Henrik API rate limits: 30 requests per minute for the basic tier,
        # higher with an Advanced key
        rate_limit = RateLimitInfo(requests_per_minute=90 if api_key else 30)

        super().__init__(
            base_url=HENRIK_BASE_URL,
            api_key=api_key,
            rate_limit=rate_limit,
            timeout=30
        )
        self.region = region or HENRIK_REGION

        if api_key:
            logging.info("Using Henrik API with Advanced key")
        else:
            logging.info("Using Henrik API Basic tier (no key)")

    def _get_auth_headers(self) -> Dict[str, str]:
        """Get authentication headers for Henrik API."""
        if self.api_key:
            return {'Authorization': self.api_key}
        return {}

    @staticmethod
    def _first_entry(response: APIResponse, player: str, what: str) -> Dict[str, Any]:
        """Return the newest element of a Henrik list response."""
        if not response.success:
            raise NotFoundError(f"Got HTTP {response.status_code} fetching {what}",
                                player, status=response.status_code)

        body = response.data
        if not isinstance(body, dict) or ('status' not in body and 'data' not in body):
            raise TransportError(f"Unrecognised response body fetching {what}", player)

        status = body.get('status', response.status_code)
        if status != 200:
            raise NotFoundError(f"Got status of {status} instead of 200 fetching {what}",
                                player, status=status)

        data = body.get('data')
        if not isinstance(data, list) or not data:
            raise NotFoundError(f"No {what} found", player, status=status)

        if not isinstance(data[0], dict):
            raise TransportError(f"Malformed {what} entry: {type(data[0]).__name__}", player)

        return data[0]

    async def fetch_latest_match(self, name: str, tag: str) -> MatchSnapshot:
        """Fetch the player's most recent competitive match."""
        player = f"{name}#{tag}"
        response = await self.get(
            f'v3/matches/{self.region}/{name}/{tag}',
            params={'filter': 'competitive', 'size': 1}
        )
        entry = self._first_entry(response, player, 'matches')

        try:
            match = MatchSnapshot.from_dict(entry)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed match payload: {type(e).__name__}: {e}", player) from e

        # Matches are looked up by Riot id but their rosters are keyed by puuid
        if match.find_player(name, tag) is None:
            raise PlayerNotInMatchError(player, match.match_id)

        logging.debug(f"Fetched match {match.match_id} for {player}")
        return match

    async def fetch_latest_mmr(self, name: str, tag: str) -> MmrSnapshot:
        """Fetch the player's most recent rating history entry."""
        player = f"{name}#{tag}"
        response = await self.get(
            f'v1/mmr-history/{self.region}/{name}/{tag}',
            params={'size': 1}
        )
        entry = self._first_entry(response, player, 'mmr')

        try:
            return MmrSnapshot.from_dict(entry)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TransportError(f"Malformed mmr payload: {type(e).__name__}: {e}", player) from e
