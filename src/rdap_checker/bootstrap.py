"""
RDAP bootstrap directory.

Fetches the IANA DNS bootstrap document, which maps TLDs to the base URLs
of their authoritative RDAP servers, and caches it in memory for a fixed
TTL. The whole document is cached as one entry; an expired entry is
treated as absent and replaced on the next lookup.

Bootstrap format:
{
    "services": [
        [["com", "net"], ["https://rdap.verisign.com/com/v1/"]],
        [["org"], ["https://rdap.publicinterestregistry.org/rdap/"]],
        ...
    ]
}
"""

import asyncio
import time
from typing import Any, Callable, Optional

import httpx

from .config import DEFAULT_BOOTSTRAP_URL, DEFAULT_USER_AGENT
from .event_logger import EventLogger
from .exceptions import BootstrapError
from .models import BootstrapCacheEntry


DEFAULT_TTL_SECONDS = 3600.0
DEFAULT_TIMEOUT_SECONDS = 8.0


def extract_tld(domain: str) -> Optional[str]:
    """Return the lower-cased last label of a domain, or None if it has none."""
    if "." not in domain:
        return None
    tld = domain.rsplit(".", 1)[1].lower()
    return tld or None


def parse_bootstrap_services(data: Any) -> dict[str, list[str]]:
    """
    Parse a bootstrap document into a TLD -> server URLs mapping.

    Malformed service entries are skipped without aborting the scan. When
    several groups name the same TLD, the first one wins even if it lists
    no usable URL.

    Args:
        data: Decoded bootstrap JSON document

    Returns:
        Mapping of lower-cased TLD to its ordered list of base URLs
    """
    services: dict[str, list[str]] = {}
    if not isinstance(data, dict):
        return services

    entries = data.get("services")
    if not isinstance(entries, list):
        return services

    for entry in entries:
        if not isinstance(entry, list) or len(entry) < 2:
            continue
        tlds, urls = entry[0], entry[1]
        if not isinstance(tlds, list):
            continue
        if not isinstance(urls, list):
            urls = []
        server_urls = [url for url in urls if isinstance(url, str) and url]

        for tld in tlds:
            if not isinstance(tld, str):
                continue
            services.setdefault(tld.lower(), server_urls)

    return services


class BootstrapDirectory:
    """
    TTL-cached view of the bootstrap document.

    Concurrent lookups that miss the cache share a single in-flight fetch.
    Fetch failures propagate as BootstrapError; a stale entry is never
    served in place of a failed refresh.
    """

    COMPONENT = "BootstrapDirectory"

    def __init__(
        self,
        url: str = DEFAULT_BOOTSTRAP_URL,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        user_agent: str = DEFAULT_USER_AGENT,
        client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[EventLogger] = None,
    ) -> None:
        """
        Initialize the directory.

        Args:
            url: Location of the bootstrap document
            ttl_seconds: Maximum age of the cached document
            timeout_seconds: Timeout for the bootstrap fetch
            user_agent: User-Agent header sent with the fetch
            client: Optional HTTP client used when a lookup passes none
            clock: Monotonic time source, injectable for tests
            logger: Optional event logger
        """
        self.url = url
        self.ttl_seconds = ttl_seconds
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self._client = client
        self._clock = clock
        self._logger = logger
        self._entry: Optional[BootstrapCacheEntry] = None
        self._inflight: Optional[asyncio.Task] = None
        self.fetch_count = 0

    @property
    def entry(self) -> Optional[BootstrapCacheEntry]:
        """The live cache entry, if any (may be expired)."""
        return self._entry

    def _is_fresh(self, entry: Optional[BootstrapCacheEntry]) -> bool:
        return entry is not None and entry.age(self._clock()) < self.ttl_seconds

    async def get_directory(
        self, client: Optional[httpx.AsyncClient] = None
    ) -> dict[str, list[str]]:
        """
        Return the TLD mapping, fetching it if the cache is absent or stale.

        Args:
            client: Optional HTTP client to fetch with

        Returns:
            Mapping of TLD to candidate server base URLs

        Raises:
            BootstrapError: If the document cannot be fetched or parsed
        """
        if self._is_fresh(self._entry):
            return self._entry.mapping

        loop = asyncio.get_running_loop()
        task = self._inflight
        if task is None or task.done() or task.get_loop() is not loop:
            task = loop.create_task(self._refresh(client))
            task.add_done_callback(self._refresh_done)
            self._inflight = task

        # A cancelled waiter must not cancel the fetch shared with others
        entry = await asyncio.shield(task)
        return entry.mapping

    async def lookup(
        self, tld: str, client: Optional[httpx.AsyncClient] = None
    ) -> Optional[str]:
        """
        Find the authoritative RDAP base URL for a TLD.

        Args:
            tld: Top-level label, matched case-insensitively
            client: Optional HTTP client used if the directory must be fetched

        Returns:
            First server URL of the matching group, or None

        Raises:
            BootstrapError: If the directory cannot be fetched
        """
        mapping = await self.get_directory(client)
        urls = mapping.get(tld.lower())
        if not urls:
            return None
        return urls[0]

    def invalidate(self) -> None:
        """Drop the cached document so the next lookup fetches it again."""
        self._entry = None
        self._inflight = None

    def _refresh_done(self, task: asyncio.Task) -> None:
        if self._inflight is task:
            self._inflight = None
        # Retrieve the error so an unawaited failure is not reported by asyncio
        if not task.cancelled():
            task.exception()

    async def _refresh(self, client: Optional[httpx.AsyncClient]) -> BootstrapCacheEntry:
        data = await self._fetch(client)
        entry = BootstrapCacheEntry(
            fetched_at=self._clock(),
            mapping=parse_bootstrap_services(data),
        )
        self._entry = entry

        if self._logger:
            self._logger.info(
                self.COMPONENT,
                "Bootstrap directory refreshed",
                {"url": self.url, "tlds": len(entry.mapping)},
            )

        return entry

    async def _fetch(self, client: Optional[httpx.AsyncClient]) -> dict:
        http = client or self._client
        owns_client = http is None
        if owns_client:
            http = httpx.AsyncClient(follow_redirects=True)

        self.fetch_count += 1
        try:
            response = await http.get(
                self.url,
                headers={
                    "Accept": "application/json",
                    "User-Agent": self.user_agent,
                },
                timeout=self.timeout_seconds,
                follow_redirects=True,
            )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise BootstrapError(
                code="bootstrap_fetch_failed",
                message=f"Failed to fetch bootstrap directory: {e}",
                details={"url": self.url, "error_type": type(e).__name__},
            ) from e
        finally:
            if owns_client:
                await http.aclose()

        if not response.is_success:
            raise BootstrapError(
                code="bootstrap_http_error",
                message=f"Bootstrap directory returned HTTP {response.status_code}",
                details={"url": self.url, "status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            raise BootstrapError(
                code="bootstrap_invalid_json",
                message="Bootstrap directory is not valid JSON",
                details={"url": self.url},
            ) from e

        if not isinstance(data, dict):
            raise BootstrapError(
                code="bootstrap_invalid_document",
                message="Bootstrap directory is not a JSON object",
                details={"url": self.url, "type": type(data).__name__},
            )

        return data


_default_directory: Optional[BootstrapDirectory] = None


def get_default_directory() -> BootstrapDirectory:
    """Return the process-wide directory, creating it on first use."""
    global _default_directory
    if _default_directory is None:
        _default_directory = BootstrapDirectory()
    return _default_directory


def invalidate_bootstrap_cache() -> None:
    """Clear the process-wide bootstrap cache."""
    if _default_directory is not None:
        _default_directory.invalidate()
