"""Evidence source schemas shared by every source implementation.

Every source returns an EvidenceResult. A source that is unconfigured,
times out or fails returns an empty result with found=False and the reason
in ``error``; it never raises into the orchestrator.
"""

from typing import Optional
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

PENDING_REVIEW = "pending_review"


def extract_domain(url: str) -> str:
    """Extract domain from URL, stripping www. prefix."""
    try:
        domain = urlparse(url).netloc.lower().split(":")[0]
    except ValueError:
        return ""
    if domain.startswith("www."):
        domain = domain[4:]
    return domain


def is_official_domain(domain: str, trusted_domains: list[str]) -> bool:
    """True if ``domain`` equals a trusted domain or is one of its sub-domains."""
    domain = domain.lower()
    for trusted in trusted_domains:
        trusted = trusted.lower()
        if domain == trusted or domain.endswith("." + trusted):
            return True
    return False


class EvidenceItem(BaseModel):
    """One search hit or answer returned by an evidence source."""

    title: str = Field(default="No title")
    url: str = Field(default="", description="Origin URL, empty when unknown")
    content: str = Field(default="", description="Excerpt of the page or answer text")
    published_date: Optional[str] = None
    is_official: Optional[bool] = Field(
        default=None,
        description="Set only when the search was scoped to trusted domains",
    )
    score: Optional[float] = None

    @property
    def domain(self) -> str:
        return extract_domain(self.url) if self.url else ""


class SearchOptions(BaseModel):
    """Per-call options for EvidenceSource.search."""

    num_results: int = Field(default=5, ge=1, le=25)
    include_domains: list[str] = Field(default_factory=list)


class EvidenceResult(BaseModel):
    """Uniform result of one evidence source call."""

    source_name: str
    query: str = ""
    found: bool = False
    items: list[EvidenceItem] = Field(default_factory=list)
    sources_checked: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    review_status: Optional[str] = Field(
        default=None,
        description="Marker for content the source could not judge (pending_review)",
    )

    @field_validator("sources_checked")
    @classmethod
    def _dedupe_sources(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @classmethod
    def empty(
        cls,
        source_name: str,
        query: str = "",
        sources_checked: Optional[list[str]] = None,
        error: Optional[str] = None,
    ) -> "EvidenceResult":
        return cls(
            source_name=source_name,
            query=query,
            found=False,
            items=[],
            sources_checked=sources_checked or [],
            error=error,
        )

    @property
    def official_items(self) -> list[EvidenceItem]:
        return [item for item in self.items if item.is_official]
