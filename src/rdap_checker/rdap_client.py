"""
RDAP client performing single domain queries.

This module provides an async resolver that issues one GET per call to
``<base>/domain/<percent-encoded name>``, follows redirects, enforces a
per-request deadline, and parses the body as JSON opportunistically.
Transport failures never raise: they are returned as a failed RdapFetch.
"""

import asyncio
import json
import time
from typing import Any, Optional
from urllib.parse import quote, urlparse

import httpx

from .config import DEFAULT_USER_AGENT
from .event_logger import EventLogger
from .exceptions import NetworkError
from .models import RdapFetch


RDAP_ACCEPT = "application/rdap+json"


def build_query_url(base_url: str, domain: str) -> str:
    """Build the domain query URL for an RDAP base URL."""
    return f"{base_url.rstrip('/')}/domain/{quote(domain, safe='')}"


class RdapResolver:
    """
    Async RDAP resolver.

    The HTTP client is either injected (and then owned by the caller) or
    created lazily and closed by ``close``/``__aexit__``.
    """

    COMPONENT = "RdapResolver"

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        logger: Optional[EventLogger] = None,
    ) -> None:
        """
        Initialize the resolver.

        Args:
            client: Optional shared HTTP client; must follow redirects
            user_agent: User-Agent header sent with every request
            logger: Optional event logger
        """
        self._client = client
        self._owns_client = client is None
        self._user_agent = user_agent
        self._logger = logger

    async def __aenter__(self) -> "RdapResolver":
        """Async context manager entry."""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    @property
    def client(self) -> httpx.AsyncClient:
        """The HTTP client used for queries (created on first access)."""
        return self._ensure_client()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(follow_redirects=True)
            self._owns_client = True
        return self._client

    async def resolve(self, base_url: str, domain: str, timeout_ms: int) -> RdapFetch:
        """
        Query an RDAP server for a domain.

        Args:
            base_url: RDAP base URL (aggregator or authoritative server)
            domain: Domain name to query
            timeout_ms: Deadline for the whole exchange, redirects included

        Returns:
            RdapFetch with status, parsed body, final URL and timing; a
            failed fetch (no status, zero elapsed time) on timeout or
            transport error
        """
        url = build_query_url(base_url, domain)

        timeout = max(timeout_ms, 1) / 1000

        try:
            self._validate_base_url(base_url)
            return await asyncio.wait_for(self._fetch(url, timeout), timeout=timeout)
        except asyncio.TimeoutError:
            return self._failed(url, f"timed out after {timeout_ms}ms")
        except NetworkError as e:
            return self._failed(url, e.message)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            return self._failed(url, f"{type(e).__name__}: {e}")

    async def _fetch(self, url: str, timeout: float) -> RdapFetch:
        start_time = time.perf_counter()

        response = await self.client.get(
            url,
            headers={
                "Accept": RDAP_ACCEPT,
                "User-Agent": self._user_agent,
            },
            follow_redirects=True,
            timeout=httpx.Timeout(timeout),
        )

        elapsed_ms = int(round((time.perf_counter() - start_time) * 1000))
        fetch = RdapFetch(
            url=url,
            http_status=response.status_code,
            body=self._parse_body(response),
            final_url=str(response.url),
            elapsed_ms=elapsed_ms,
        )

        if self._logger:
            self._logger.debug(
                self.COMPONENT,
                f"GET {url} -> {response.status_code}",
                {"final_url": fetch.final_url, "elapsed_ms": elapsed_ms},
            )

        return fetch

    @staticmethod
    def _parse_body(response: httpx.Response) -> Any:
        """
        Parse a response body as JSON, returning None when impossible.

        A JSON content type is parsed directly; any other content type is
        still tried as JSON text since some servers mislabel responses.
        """
        content_type = response.headers.get("content-type", "")
        try:
            if "json" in content_type.lower():
                return response.json()
            text = response.text
            return json.loads(text) if text else None
        except ValueError:
            return None

    @staticmethod
    def _validate_base_url(base_url: str) -> None:
        scheme = urlparse(base_url).scheme.lower()
        if scheme not in ("http", "https"):
            raise NetworkError(
                code="unsupported_scheme",
                message=f"RDAP base URL must use HTTP(S): {base_url}",
                details={"base_url": base_url, "scheme": scheme},
            )

    def _failed(self, url: str, error: str) -> RdapFetch:
        if self._logger:
            self._logger.debug(self.COMPONENT, f"GET {url} failed", {"error": error})
        return RdapFetch.failed(url, error)

    async def close(self) -> None:
        """Close the HTTP client if this resolver created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None
