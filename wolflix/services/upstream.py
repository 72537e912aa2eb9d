"""Shared HTTP client and JSON fetch helper for all upstream content APIs."""
import logging
from typing import Any, Optional

import httpx

from wolflix.config import HTTP_TIMEOUT

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    'User-Agent': (
        'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 '
        '(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36'
    ),
    'Accept': 'application/json, text/plain, */*',
    'Accept-Language': 'en-US,en;q=0.9',
}


class UpstreamError(Exception):
    """An upstream API answered with a non-2xx status or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


# Shared HTTP client (reuses connections across routes)
_client: httpx.AsyncClient | None = None


async def get_client() -> httpx.AsyncClient:
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            headers=BROWSER_HEADERS,
            follow_redirects=True,
            timeout=HTTP_TIMEOUT,
        )
    return _client


def set_client(client: httpx.AsyncClient | None) -> None:
    """Replace the shared client, e.g. with one backed by a mock transport."""
    global _client
    _client = client


async def close_client() -> None:
    global _client
    if _client and not _client.is_closed:
        await _client.aclose()
    _client = None


def clean_params(params: Optional[dict]) -> dict:
    """Drop unset query parameters so they are not forwarded as empty strings."""
    if not params:
        return {}
    return {k: v for k, v in params.items() if v is not None and v != ""}


async def fetch_json(
    url: str,
    *,
    method: str = "GET",
    params: Optional[dict] = None,
    json: Any = None,
    headers: Optional[dict] = None,
) -> Any:
    """Call an upstream endpoint and return its decoded JSON body.

    Raises UpstreamError for network failures, timeouts, non-2xx answers and
    bodies that are not JSON. Nothing is retried here.
    """
    client = await get_client()
    try:
        resp = await client.request(
            method, url, params=clean_params(params), json=json, headers=headers
        )
    except httpx.TimeoutException:
        logger.warning("Upstream timeout: %s %s", method, url)
        raise UpstreamError("Upstream timeout")
    except httpx.HTTPError as e:
        logger.warning("Upstream request failed: %s %s: %s", method, url, e)
        raise UpstreamError(f"Upstream request failed: {e}")

    if not resp.is_success:
        logger.warning("Upstream error %s: %s %s", resp.status_code, method, url)
        raise UpstreamError(f"API error: {resp.status_code}", status_code=resp.status_code)

    try:
        return resp.json()
    except ValueError:
        raise UpstreamError("Upstream returned invalid JSON", status_code=resp.status_code)
