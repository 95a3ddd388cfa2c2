"""Neural web search over the Exa REST API.

ExaSearchSource searches the open web. OfficialSourceSearch restricts the
same search to an authority's trusted domains (university and regulator
portals) and tags every hit with is_official.

Handles a missing EXA_API_KEY gracefully by returning empty results.
"""

from typing import Any, Optional

import httpx

from truth_sentinel.config.official_sources import DEFAULT_AUTHORITY, domains_for
from truth_sentinel.config.settings import settings
from truth_sentinel.evidence.base import EvidenceSource
from truth_sentinel.evidence.schemas import EvidenceItem, EvidenceResult, SearchOptions


class ExaSearchSource(EvidenceSource):
    """General neural web search."""

    name = "exa_search"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        max_content_chars: int = 1500,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(timeout=timeout, client=client)
        self._api_key = api_key if api_key is not None else settings.exa_api_key
        self.base_url = (base_url or settings.exa_base_url).rstrip("/")
        self.max_content_chars = max_content_chars

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def build_query(self, query: str) -> str:
        return query

    async def _search(self, query: str, options: SearchOptions) -> EvidenceResult:
        payload: dict[str, Any] = {
            "query": self.build_query(query),
            "numResults": options.num_results,
            "type": "neural",
            "useAutoprompt": True,
            "contents": {"text": True},
        }
        if options.include_domains:
            payload["includeDomains"] = options.include_domains

        async with self._http() as client:
            response = await client.post(
                f"{self.base_url}/search",
                json=payload,
                headers={"x-api-key": self._api_key, "Content-Type": "application/json"},
            )
            response.raise_for_status()
            data = response.json()

        items = [
            EvidenceItem(
                title=raw.get("title") or "No title",
                url=raw.get("url") or "",
                content=(raw.get("text") or "No content available")[: self.max_content_chars],
                published_date=raw.get("publishedDate"),
                score=raw.get("score"),
            )
            for raw in data.get("results", [])
        ]

        return EvidenceResult(
            source_name=self.name,
            query=query,
            found=bool(items),
            items=items,
            sources_checked=self.sources_checked(options),
        )


class OfficialSourceSearch(ExaSearchSource):
    """Exa search scoped to official university and regulator domains."""

    name = "official_search"

    def __init__(
        self,
        authority: str = DEFAULT_AUTHORITY,
        num_results: int = 8,
        max_content_chars: int = 1200,
        **kwargs: Any,
    ) -> None:
        super().__init__(max_content_chars=max_content_chars, **kwargs)
        self.authority = authority
        self.num_results = num_results

    def build_query(self, query: str) -> str:
        return f"{query} official notice announcement circular"

    async def search(
        self,
        query: str,
        options: Optional[SearchOptions] = None,
    ) -> EvidenceResult:
        options = options or SearchOptions(num_results=self.num_results)
        if not options.include_domains:
            options = options.model_copy(
                update={"include_domains": domains_for(self.authority)}
            )
        return await super().search(query, options)
