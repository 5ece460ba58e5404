"""Resilient CouchDB client with transparent session renewal."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any

import httpx
from dotenv import load_dotenv

from honorflight.logging_config import TRACE

from .errors import StoreError, StoreRequestError, StoreSessionError
from .session_cache import DEFAULT_SESSION_TTL_SECONDS, SessionCache, session_key

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

MAX_SESSION_RETRY_ATTEMPTS = 3
SESSION_COOKIE_NAME = "AuthSession"


@dataclass
class StoreConfig:
    """Configuration for document store access."""

    url: str = "http://127.0.0.1:5984"
    database: str = "honorflight"
    username: str = ""
    password: str = ""
    design_doc: str = "basic"
    session_ttl_seconds: float = DEFAULT_SESSION_TTL_SECONDS
    max_attempts: int = MAX_SESSION_RETRY_ATTEMPTS

    @classmethod
    def from_env(cls) -> StoreConfig:
        """Load configuration from environment variables."""
        return cls(
            url=os.environ.get("DB_URL", "http://127.0.0.1:5984"),
            database=os.environ.get("DB_NAME", "honorflight"),
            username=os.environ.get("DB_USER", ""),
            password=os.environ.get("DB_PASS", ""),
            design_doc=os.environ.get("DB_DESIGN_DOC", "basic"),
            session_ttl_seconds=float(os.environ.get("DB_SESSION_TTL_SECONDS", DEFAULT_SESSION_TTL_SECONDS)),
            max_attempts=int(os.environ.get("DB_MAX_SESSION_ATTEMPTS", MAX_SESSION_RETRY_ATTEMPTS)),
        )

    @property
    def database_url(self) -> str:
        return f"{self.url.rstrip('/')}/{self.database}"

    @property
    def cache_key(self) -> str:
        return session_key(self.url, self.username)


@dataclass
class RequestContext:
    """Session credential shared by every store call in one logical request.

    The client rewrites ``credential`` in place when it renews the session,
    so later calls in the same chain pick up the fresh cookie.
    """

    credential: str | None = None


class StoreClient:
    """Issues CouchDB requests and renews the session on expiry.

    Usage:
        client = StoreClient(StoreConfig.from_env(), SessionCache())
        ctx = RequestContext()
        await client.ensure_session(ctx)
        response = await client.request(ctx, "GET", f"{client.config.database_url}/some-id")
    """

    def __init__(
        self,
        config: StoreConfig,
        session_cache: SessionCache,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.config = config
        self.session_cache = session_cache
        self._http = http_client or httpx.AsyncClient()
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        if self._owns_http:
            await self._http.aclose()

    async def login(self) -> str:
        """Open a new CouchDB session and return the cookie header value."""
        response = await self._http.post(
            f"{self.config.url.rstrip('/')}/_session",
            json={"name": self.config.username, "password": self.config.password},
            headers={"Accept": "application/json"},
        )
        if not response.is_success:
            raise StoreRequestError(response.status_code, "Failed to create CouchDB session")

        token = response.cookies.get(SESSION_COOKIE_NAME)
        if not token:
            raise StoreRequestError(response.status_code, "CouchDB session response carried no AuthSession cookie")
        return f"{SESSION_COOKIE_NAME}={token}"

    async def refresh_session(self) -> str:
        """Invalidate the cached session and store a freshly issued one."""
        self.session_cache.invalidate(self.config.cache_key)
        credential = await self.login()
        self.session_cache.set(self.config.cache_key, credential)
        return credential

    async def ensure_session(self, context: RequestContext) -> None:
        """Attach a usable credential to ``context``, logging in if the cache is cold."""
        if context.credential:
            return

        cached = self.session_cache.get(self.config.cache_key)
        if cached:
            context.credential = cached
            return

        try:
            credential = await self.login()
        except (StoreRequestError, httpx.HTTPError) as e:
            logger.error(f"CouchDB session error: {e}")
            raise StoreSessionError(1) from e

        self.session_cache.set(self.config.cache_key, credential)
        context.credential = credential

    async def request(
        self,
        context: RequestContext,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request, renewing the session on 401 or transport failure.

        Any response other than 401 is returned as-is; callers interpret the
        status. Raises StoreSessionError once the attempt budget is spent.
        """
        max_attempts = self.config.max_attempts

        for attempt in range(1, max_attempts + 1):
            request_headers = {"Accept": "application/json", **(headers or {})}
            if context.credential:
                request_headers["Cookie"] = context.credential

            logger.log(TRACE, f"{method} {url} (attempt {attempt}/{max_attempts}) params={kwargs.get('params')}")

            try:
                response = await self._http.request(method, url, headers=request_headers, **kwargs)
            except httpx.TransportError as e:
                logger.error(f"Database fetch error (attempt {attempt}/{max_attempts}): {e}")
                if attempt < max_attempts:
                    await self._renew(context, attempt)
                continue

            if response.status_code == 401:
                logger.warning(f"CouchDB session expired (attempt {attempt}/{max_attempts}), refreshing...")
                if attempt < max_attempts:
                    await self._renew(context, attempt)
                continue

            return response

        raise StoreSessionError(max_attempts)

    async def _renew(self, context: RequestContext, attempt: int) -> None:
        # A failed refresh still consumes the attempt; the next request goes out with the old cookie
        try:
            context.credential = await self.refresh_session()
        except (StoreError, httpx.HTTPError) as e:
            logger.error(f"Session refresh failed (attempt {attempt}/{self.config.max_attempts}): {e}")
