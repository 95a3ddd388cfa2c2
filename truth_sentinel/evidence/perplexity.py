"""High-precision verification through the Perplexity chat completions API.

The answer engine is the mandatory final check for factual claims and the
tiebreaker when only one other source corroborates. Its reply is returned as
a single evidence item whose content is the answer text; citations become
the sources checked.
"""

from typing import Any, Optional

import httpx

from truth_sentinel.config.settings import settings
from truth_sentinel.evidence.base import EvidenceSource
from truth_sentinel.evidence.schemas import EvidenceItem, EvidenceResult, SearchOptions

PERPLEXITY_CHAT_URL = "https://api.perplexity.ai/chat/completions"

FACT_CHECK_SYSTEM_PROMPT = (
    "You are a high-accuracy fact-checking assistant. Verify the user's query "
    "and cite valid sources. If you cannot verify the information with high "
    "confidence, state that you are unable to verify. Be concise and factual."
)


class PerplexitySearchSource(EvidenceSource):
    """Answer-engine evidence source (sonar models)."""

    name = "perplexity"
    high_precision = True

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        url: str = PERPLEXITY_CHAT_URL,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(timeout=timeout, client=client)
        self._api_key = api_key if api_key is not None else settings.perplexity_api_key
        self.model = model or settings.perplexity_model
        self.url = url

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def _search(self, query: str, options: SearchOptions) -> EvidenceResult:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": FACT_CHECK_SYSTEM_PROMPT},
                {"role": "user", "content": query},
            ],
            "temperature": 0.1,
        }
        if options.include_domains:
            payload["search_domain_filter"] = options.include_domains

        async with self._http() as client:
            response = await client.post(
                self.url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            response.raise_for_status()
            data = response.json()

        choices = data.get("choices") or [{}]
        answer = ((choices[0].get("message") or {}).get("content") or "").strip()
        citations = [c for c in data.get("citations") or [] if isinstance(c, str)]

        if not answer:
            return EvidenceResult.empty(
                self.name, query, citations or [self.name], error="empty_answer"
            )

        return EvidenceResult(
            source_name=self.name,
            query=query,
            found=True,
            items=[
                EvidenceItem(
                    title="Perplexity answer",
                    url=citations[0] if citations else "",
                    content=answer,
                )
            ],
            sources_checked=citations or [self.name],
        )
