"""Evidence sources: web, official-domain, answer-engine and video search.

Every source shares EvidenceSource.search, which never raises: missing
credentials, timeouts and upstream errors all come back as an empty
EvidenceResult with found=False.
"""

from truth_sentinel.evidence.base import EvidenceSource
from truth_sentinel.evidence.media import (
    GeminiMediaAnalyzer,
    MediaAnalysis,
    MediaFetcher,
    MediaPayload,
    parse_media_analysis,
    resolve_mime_type,
)
from truth_sentinel.evidence.perplexity import PerplexitySearchSource
from truth_sentinel.evidence.schemas import (
    PENDING_REVIEW,
    EvidenceItem,
    EvidenceResult,
    SearchOptions,
    extract_domain,
    is_official_domain,
)
from truth_sentinel.evidence.web_search import ExaSearchSource, OfficialSourceSearch
from truth_sentinel.evidence.youtube import (
    YouTubeVerificationSource,
    extract_video_id,
    find_video_urls,
)

__all__ = [
    "EvidenceSource",
    "EvidenceItem",
    "EvidenceResult",
    "SearchOptions",
    "PENDING_REVIEW",
    "extract_domain",
    "is_official_domain",
    "ExaSearchSource",
    "OfficialSourceSearch",
    "PerplexitySearchSource",
    "YouTubeVerificationSource",
    "extract_video_id",
    "find_video_urls",
    "GeminiMediaAnalyzer",
    "MediaAnalysis",
    "MediaFetcher",
    "MediaPayload",
    "parse_media_analysis",
    "resolve_mime_type",
]
