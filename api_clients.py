"""Base classes for external API clients."""

import asyncio
import aiohttp
import logging
from abc import ABC, abstractmethod
from typing import Dict, Any, Optional, List, TypeVar, Generic
from datetime import datetime, timedelta, timezone
from dataclasses import dataclass

from config import APP_VERSION
from exceptions import TransportError
from utils import log_error


T = TypeVar('T')

@dataclass
class RateLimitInfo:
    """Information about API rate limits."""
    requests_per_minute: int


class APIResponse(Generic[T]):
    """Wrapper for API responses with metadata."""

    def __init__(self, data: T, status_code: int, headers: Dict[str, str] = None):
        self.data = data
        self.status_code = status_code
        self.headers = headers or {}

    @property
    def success(self) -> bool:
        """Check if the response was successful."""
        return 200 <= self.status_code < 300


class BaseAPIClient(ABC):
    """Abstract base class for external API clients.

    Each request is a single attempt. Non-2xx responses are returned to the
    caller as-is; only failures to reach the server or to decode its body
    raise, as :class:`TransportError`.
    """

    def __init__(self, base_url: str, api_key: Optional[str] = None,
                 rate_limit: RateLimitInfo = None, timeout: int = 30):
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.rate_limit = rate_limit or RateLimitInfo(60)
        self.timeout = timeout
        self.logger = logging.getLogger(self.__class__.__name__)

        self._session: Optional[aiohttp.ClientSession] = None
        self._request_times: List[datetime] = []
        self._rate_lock = asyncio.Lock()

    async def __aenter__(self):
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, _exc_type, _exc_val, _exc_tb):
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure aiohttp session is created."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=100,
                limit_per_host=30,
                keepalive_timeout=30
            )

            timeout = aiohttp.ClientTimeout(total=self.timeout)

            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=timeout,
                headers=self._get_default_headers()
            )

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def _get_default_headers(self) -> Dict[str, str]:
        """Get default headers for requests."""
        headers = {
            'User-Agent': f'ValorantMatchNotifier/{APP_VERSION}',
            'Accept': 'application/json',
        }

        if self.api_key:
            headers.update(self._get_auth_headers())

        return headers

    @abstractmethod
    def _get_auth_headers(self) -> Dict[str, str]:
        """Get authentication headers (implement in subclass)."""
        pass

    async def _check_rate_limit(self) -> None:
        """Check and enforce rate limits."""
        # Concurrent fan-out shares one window, so the check and record are serialized
        async with self._rate_lock:
            now = datetime.now(timezone.utc)

            cutoff = now - timedelta(seconds=60)
            self._request_times = [t for t in self._request_times if t > cutoff]

            if len(self._request_times) >= self.rate_limit.requests_per_minute:
                oldest_request = min(self._request_times)
                wait_time = 60 - (now - oldest_request).total_seconds()

                if wait_time > 0:
                    self.logger.warning(f"Rate limit reached, waiting {wait_time:.1f}s")
                    await asyncio.sleep(wait_time)
                    now = datetime.now(timezone.utc)

            self._request_times.append(now)

    async def _make_request(self, method: str, endpoint: str,
                            params: Dict[str, Any] = None) -> APIResponse[Dict[str, Any]]:
        """Make one HTTP request, rate limited."""
        await self._ensure_session()
        await self._check_rate_limit()

        url = f"{self.base_url}/{endpoint.lstrip('/')}"

        try:
            async with self._session.request(method=method, url=url, params=params) as response:
                headers = dict(response.headers)
                status_code = response.status

                if 'application/json' in response.headers.get('content-type', ''):
                    response_data = await response.json()
                elif 200 <= status_code < 300:
                    # A proxy or CDN page instead of the API body
                    raise TransportError(
                        f"Expected JSON from {endpoint}, got {response.headers.get('content-type', 'no content type')}"
                    )
                else:
                    response_data = {'text': await response.text()}

                if status_code == 429:
                    self.logger.warning(
                        f"Rate limited on {endpoint}, retry after {headers.get('retry-after', '?')}s"
                    )

                return APIResponse(
                    data=response_data,
                    status_code=status_code,
                    headers=headers
                )

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log_error(f"making {method} request to {endpoint}", e)
            raise TransportError(f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            # Body advertised as JSON but did not decode
            log_error(f"decoding {method} response from {endpoint}", e)
            raise TransportError(f"Invalid JSON body: {e}") from e

    async def get(self, endpoint: str, params: Dict[str, Any] = None) -> APIResponse[Dict[str, Any]]:
        """Make GET request."""
        return await self._make_request('GET', endpoint, params=params)
