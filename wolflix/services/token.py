"""Bearer token cache for the MovieBox-style aggregator API."""
import asyncio
import json
import logging
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx

from wolflix.config import (
    TOKEN_TTL_SECONDS,
    WOLFMOVIE_API_BASE,
    WOLFMOVIE_TOKEN_HEADER,
    WOLFMOVIE_TOKEN_PATH,
)
from wolflix.services.upstream import UpstreamError, get_client

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthToken:
    value: str
    issued_at: float
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


def parse_token_header(raw: str) -> str:
    """Pull the token out of the header value.

    The aggregator sends either the bare token or a JSON object with a
    ``token`` field; a leading ``Bearer`` scheme is stripped.
    """
    value = raw.strip()
    if value.startswith("{"):
        try:
            value = str(json.loads(value).get("token") or "")
        except (ValueError, AttributeError):
            value = ""
    if value.lower().startswith("bearer "):
        value = value[7:]
    return value.strip()


async def fetch_token() -> str:
    """Request a fresh token from the aggregator's token endpoint."""
    client = await get_client()
    url = WOLFMOVIE_API_BASE + WOLFMOVIE_TOKEN_PATH
    try:
        resp = await client.get(url)
    except httpx.HTTPError as e:
        raise UpstreamError(f"Token request failed: {e}")

    if not resp.is_success:
        raise UpstreamError(f"Token request failed: HTTP {resp.status_code}", status_code=resp.status_code)

    token = parse_token_header(resp.headers.get(WOLFMOVIE_TOKEN_HEADER, ""))
    if not token:
        raise UpstreamError(f"No token in '{WOLFMOVIE_TOKEN_HEADER}' response header")
    return token


class TokenProvider:
    """Caches one bearer token for a fixed TTL measured from issuance.

    Concurrent callers that find the cache empty or expired share a single
    upstream fetch.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[str]] = fetch_token,
        ttl_seconds: float = TOKEN_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch = fetch
        self._ttl = ttl_seconds
        self._clock = clock
        self._token: Optional[AuthToken] = None
        self._lock = asyncio.Lock()

    @property
    def token(self) -> Optional[AuthToken]:
        return self._token

    async def get_token(self) -> str:
        cached = self._token
        if cached and cached.is_valid(self._clock()):
            return cached.value

        async with self._lock:
            # Another caller may have refreshed while we waited
            cached = self._token
            if cached and cached.is_valid(self._clock()):
                return cached.value

            value = await self._fetch()
            issued_at = self._clock()
            self._token = AuthToken(value=value, issued_at=issued_at, expires_at=issued_at + self._ttl)
            logger.info("Fetched new aggregator token (valid %ss)", self._ttl)
            return value

    def invalidate(self) -> None:
        if self._token is not None:
            logger.info("Aggregator token invalidated")
        self._token = None


# Process-wide default, overridable through the get_token_provider dependency
token_provider = TokenProvider()


def get_token_provider() -> TokenProvider:
    return token_provider
