"""Query cache used by the pages to load JSON from the REST endpoints.

Results are keyed by request identity (a tuple such as
``("/api/wolflix/search", "matrix")``). Concurrent queries for the same key
share one in-flight fetch. A client lives for one page render, so nothing is
cached across requests.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable, Hashable, Optional

import httpx

logger = logging.getLogger(__name__)

QueryKey = tuple[Hashable, ...]


class QueryError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@dataclass
class QueryResult:
    status: str = "idle"  # idle | success | error
    data: Any = None
    error: Optional[Exception] = None
    attempts: int = 0

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    @property
    def is_error(self) -> bool:
        return self.status == "error"

    @property
    def is_idle(self) -> bool:
        return self.status == "idle"

    def data_or(self, default: Any) -> Any:
        """The fetched payload, or ``default`` for idle/failed/empty queries."""
        return self.data if self.is_success and self.data is not None else default


class QueryClient:
    def __init__(
        self,
        http: Optional[httpx.AsyncClient] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._http = http
        self._sleep = sleep
        self._results: dict[QueryKey, QueryResult] = {}
        self._inflight: dict[QueryKey, asyncio.Task] = {}

    def get_cached(self, key: QueryKey) -> Optional[QueryResult]:
        return self._results.get(key)

    def invalidate(self, key: QueryKey) -> None:
        """Forget every cached result whose key starts with ``key``."""
        for cached in list(self._results):
            if cached[:len(key)] == key:
                del self._results[cached]

    async def query(
        self,
        key: QueryKey,
        fn: Callable[[], Awaitable[Any]],
        *,
        enabled: bool = True,
        retry: int = 0,
        retry_delay: float = 1.0,
    ) -> QueryResult:
        """Run ``fn`` for ``key`` unless a result is cached or already loading.

        Disabled queries resolve to an idle result without calling ``fn``.
        Failures are retried ``retry`` times with a fixed ``retry_delay``.
        """
        if not enabled:
            return QueryResult()

        cached = self._results.get(key)
        if cached is not None:
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._run(key, fn, retry, retry_delay))
            self._inflight[key] = task
        return await asyncio.shield(task)

    async def _run(self, key, fn, retry, retry_delay) -> QueryResult:
        attempts = 0
        try:
            while True:
                attempts += 1
                try:
                    data = await fn()
                except Exception as e:
                    if attempts <= retry:
                        logger.debug("Query %r failed (attempt %d), retrying: %s", key, attempts, e)
                        await self._sleep(retry_delay)
                        continue
                    logger.info("Query %r failed after %d attempt(s): %s", key, attempts, e)
                    return QueryResult(status="error", error=e, attempts=attempts)

                result = QueryResult(status="success", data=data, attempts=attempts)
                self._results[key] = result
                return result
        finally:
            self._inflight.pop(key, None)

    async def fetch_json(self, path: str, params: Optional[dict] = None) -> Any:
        """GET one of the server's REST endpoints and decode its JSON body."""
        if self._http is None:
            raise QueryError("QueryClient has no HTTP client")
        query = {k: v for k, v in (params or {}).items() if v is not None and v != ""}
        try:
            resp = await self._http.get(path, params=query)
        except httpx.HTTPError as e:
            raise QueryError(f"Request to {path} failed: {e}")
        if not resp.is_success:
            raise QueryError(f"{path} answered HTTP {resp.status_code}", status_code=resp.status_code)
        return resp.json()

    async def get(
        self,
        path: str,
        *key_parts: Hashable,
        params: Optional[dict] = None,
        enabled: bool = True,
        retry: int = 0,
        retry_delay: float = 1.0,
    ) -> QueryResult:
        """Shorthand for a query whose key is the path plus ``key_parts``."""
        return await self.query(
            (path, *key_parts),
            lambda: self.fetch_json(path, params),
            enabled=enabled,
            retry=retry,
            retry_delay=retry_delay,
        )


@asynccontextmanager
async def local_query_client(app) -> AsyncIterator[QueryClient]:
    """A QueryClient whose requests are served in-process by ``app``."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://wolflix") as http:
        yield QueryClient(http)
