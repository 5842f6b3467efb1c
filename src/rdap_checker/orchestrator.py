"""
Fallback Orchestrator for the RDAP checker.

Sequences resolver calls for one domain: the well-known aggregator is
queried first, and only when its answer is inconclusive (and fallback is
enabled) is the authoritative registry server located through the
bootstrap directory and queried as well. Failures on the fallback path
are logged and otherwise silent: the primary result is reported instead.
"""

from typing import Optional
from urllib.parse import urlparse

import httpx

from .bootstrap import BootstrapDirectory, extract_tld, get_default_directory
from .config import CheckOptions, ResolverConfig
from .domain_validator import DomainValidator
from .enums import DomainStatus, ResolutionState
from .event_logger import EventLogger
from .exceptions import BootstrapError, ValidationError
from .models import CheckResult, RdapFetch
from .rdap_client import RdapResolver
from .response_interpreter import interpret


class FallbackOrchestrator:
    """
    Two-tier domain status resolution.

    States per domain: QUERYING_PRIMARY -> (QUERYING_AUTHORITATIVE) -> DONE.
    Exactly one CheckResult is produced per call regardless of how many
    HTTP requests were issued.
    """

    COMPONENT = "FallbackOrchestrator"

    def __init__(
        self,
        resolver_config: Optional[ResolverConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        directory: Optional[BootstrapDirectory] = None,
        logger: Optional[EventLogger] = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            resolver_config: Aggregator and bootstrap settings; when omitted
                the defaults and the process-wide bootstrap directory are used
            client: Optional shared HTTP client (not closed by the orchestrator)
            directory: Optional bootstrap directory, overriding the above
            logger: Optional event logger
        """
        self._logger = logger

        if directory is None:
            if resolver_config is None:
                directory = get_default_directory()
            else:
                directory = BootstrapDirectory(
                    url=resolver_config.bootstrap_url,
                    ttl_seconds=resolver_config.bootstrap_ttl_seconds,
                    timeout_seconds=resolver_config.bootstrap_timeout_seconds,
                    user_agent=resolver_config.user_agent,
                    logger=logger,
                )

        self._config = resolver_config or ResolverConfig()
        self._directory = directory
        self._resolver = RdapResolver(
            client=client,
            user_agent=self._config.user_agent,
            logger=logger,
        )
        self._validator = DomainValidator()

    async def __aenter__(self) -> "FallbackOrchestrator":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        """Release the HTTP client if the orchestrator created it."""
        await self._resolver.close()

    @property
    def directory(self) -> BootstrapDirectory:
        return self._directory

    @property
    def resolver(self) -> RdapResolver:
        return self._resolver

    async def check_domain(
        self, domain: str, options: Optional[CheckOptions] = None
    ) -> CheckResult:
        """
        Resolve the registration status of a domain.

        Args:
            domain: Domain name to check
            options: Timeout and fallback settings (defaults if omitted)

        Returns:
            CheckResult; transport and bootstrap failures yield an
            UNKNOWN result rather than an exception

        Raises:
            ValidationError: If the domain name is not admissible
        """
        if not self._validator.is_valid(domain):
            raise ValidationError(
                code="invalid_domain",
                message=f"Invalid domain: {domain!r}",
                details={"domain": domain},
            )

        options = options or CheckOptions()

        self._transition(domain, ResolutionState.QUERYING_PRIMARY)
        fetch = await self._resolver.resolve(
            self._config.aggregator_url, domain, options.timeout_ms
        )
        primary = self._primary_result(domain, fetch)

        if primary.status.is_definitive or not options.fallback:
            self._transition(domain, ResolutionState.DONE, primary)
            return primary

        self._transition(domain, ResolutionState.QUERYING_AUTHORITATIVE, primary)
        authoritative = await self._query_authoritative(domain, options)

        # An inconclusive authoritative answer never replaces the primary one
        if authoritative is not None and authoritative.status.is_definitive:
            result = authoritative
        else:
            result = primary

        self._transition(domain, ResolutionState.DONE, result)
        return result

    def _primary_result(self, domain: str, fetch: RdapFetch) -> CheckResult:
        aggregator_host = urlparse(self._config.aggregator_url).hostname

        if not fetch.ok:
            return CheckResult(
                domain=domain,
                status=DomainStatus.UNKNOWN,
                source=aggregator_host,
                response_time_ms=0,
            )

        source = aggregator_host
        if fetch.final_url != fetch.url:
            source = urlparse(fetch.final_url).hostname or aggregator_host

        interpretation = interpret(fetch.http_status, fetch.body)
        return CheckResult(
            domain=domain,
            status=interpretation.status,
            http_status=fetch.http_status,
            error_code=interpretation.error_code,
            source=source,
            response_time_ms=fetch.elapsed_ms,
        )

    async def _query_authoritative(
        self, domain: str, options: CheckOptions
    ) -> Optional[CheckResult]:
        tld = extract_tld(domain)
        if tld is None:
            return None

        try:
            base_url = await self._directory.lookup(tld, client=self._resolver.client)
        except BootstrapError as e:
            self._log_warn(
                "Bootstrap directory unavailable, keeping primary result",
                {"domain": domain, "error": e.message, "code": e.code},
            )
            return None

        if base_url is None:
            self._log_warn(
                "No authoritative RDAP server for TLD",
                {"domain": domain, "tld": tld},
            )
            return None

        fetch = await self._resolver.resolve(base_url, domain, options.timeout_ms)
        if not fetch.ok:
            self._log_warn(
                "Authoritative query failed, keeping primary result",
                {"domain": domain, "base_url": base_url, "error": fetch.error},
            )
            return None

        interpretation = interpret(fetch.http_status, fetch.body)
        return CheckResult(
            domain=domain,
            status=interpretation.status,
            http_status=fetch.http_status,
            error_code=interpretation.error_code,
            source=base_url,
            response_time_ms=fetch.elapsed_ms,
        )

    def _transition(
        self,
        domain: str,
        state: ResolutionState,
        result: Optional[CheckResult] = None,
    ) -> None:
        if not self._logger:
            return
        data = {"domain": domain, "state": state.value}
        if result is not None:
            data["status"] = result.status.value
        self._logger.debug(self.COMPONENT, f"{domain} -> {state.value}", data)

    def _log_warn(self, message: str, data: dict) -> None:
        if self._logger:
            self._logger.warn(self.COMPONENT, message, data)


async def check_domain(
    domain: str,
    options: Optional[CheckOptions] = None,
    client: Optional[httpx.AsyncClient] = None,
    resolver_config: Optional[ResolverConfig] = None,
    logger: Optional[EventLogger] = None,
) -> CheckResult:
    """
    Resolve one domain with a short-lived orchestrator.

    Without a resolver configuration the process-wide bootstrap cache is
    used, so repeated calls share one directory fetch per TTL window.
    """
    async with FallbackOrchestrator(
        resolver_config=resolver_config, client=client, logger=logger
    ) as orchestrator:
        return await orchestrator.check_domain(domain, options)
