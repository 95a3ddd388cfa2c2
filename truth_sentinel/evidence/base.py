"""Evidence source capability with a single failure-absorption path.

Subclasses implement ``_search`` and ``is_configured``. Everything else -
the missing-credential check, the time bound, turning exceptions into empty
results and tagging official items - happens here once, so every source
degrades the same way.

Usage:
    class MySource(EvidenceSource):
        name = "my_source"

        @property
        def is_configured(self) -> bool:
            return bool(self._api_key)

        async def _search(self, query, options) -> EvidenceResult:
            ...
"""

import asyncio
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable, Optional

import httpx
import structlog

from truth_sentinel.config.settings import settings
from truth_sentinel.evidence.schemas import (
    EvidenceResult,
    SearchOptions,
    is_official_domain,
)


class EvidenceSource(ABC):
    """Independently failing provider of evidence for a claim.

    Attributes:
        name: Source identifier used in logs and results.
        high_precision: True for the source used as mandatory final check.
    """

    name: str = "evidence"
    high_precision: bool = False

    def __init__(
        self,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """Initialize EvidenceSource.

        Args:
            timeout: Seconds allowed per call. Defaults to settings.search_timeout.
            client: Shared httpx client. A short-lived client is created per
                    call when omitted.
        """
        self.timeout = timeout or settings.search_timeout
        self._client = client
        self._logger = structlog.get_logger().bind(component=type(self).__name__)

    @property
    @abstractmethod
    def is_configured(self) -> bool:
        """Whether credentials required by the source are present."""

    @abstractmethod
    async def _search(self, query: str, options: SearchOptions) -> EvidenceResult:
        """Source-specific search. May raise; callers go through search()."""

    async def search(
        self,
        query: str,
        options: Optional[SearchOptions] = None,
    ) -> EvidenceResult:
        """Search for evidence, never raising.

        Args:
            query: Claim or search text.
            options: Result count and optional trusted-domain scope.

        Returns:
            EvidenceResult; empty with found=False on any failure.
        """
        options = options or SearchOptions()
        return await self._guarded(
            lambda: self._search(query, options),
            query=query,
            sources_checked=self.sources_checked(options),
            trusted_domains=options.include_domains,
        )

    def sources_checked(self, options: SearchOptions) -> list[str]:
        return list(options.include_domains) or [self.name]

    async def _guarded(
        self,
        call: Callable[[], Awaitable[EvidenceResult]],
        query: str,
        sources_checked: list[str],
        trusted_domains: Optional[list[str]] = None,
    ) -> EvidenceResult:
        if not self.is_configured:
            self._logger.warning("source_not_configured", source=self.name)
            return EvidenceResult.empty(
                self.name, query, sources_checked, error="not_configured"
            )

        try:
            result = await asyncio.wait_for(call(), timeout=self.timeout)
        except asyncio.TimeoutError:
            self._logger.warning(
                "search_timeout", source=self.name, timeout=self.timeout, query=query[:50]
            )
            return EvidenceResult.empty(self.name, query, sources_checked, error="timeout")
        except Exception as e:
            self._logger.warning(
                "search_failed", source=self.name, query=query[:50], error=str(e)
            )
            return EvidenceResult.empty(self.name, query, sources_checked, error=str(e))

        if trusted_domains:
            for item in result.items:
                item.is_official = is_official_domain(item.domain, trusted_domains)

        self._logger.info(
            "search_executed",
            source=self.name,
            query=query[:80],
            results=len(result.items),
            official=len(result.official_items),
        )
        return result

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        """Yield the shared client, or a short-lived one closed on exit."""
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            yield client
