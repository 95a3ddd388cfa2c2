"""Video verification through the YouTube Data API and public transcripts.

The source never decides a verdict. It gathers title, channel, description
and the opening of the transcript so the orchestrator can check whether the
video actually talks about the claim, and marks the result pending review.
"""

import asyncio
import re
from typing import Callable, Optional

import httpx
from youtube_transcript_api import YouTubeTranscriptApi

from truth_sentinel.config.settings import settings
from truth_sentinel.evidence.base import EvidenceSource
from truth_sentinel.evidence.schemas import (
    PENDING_REVIEW,
    EvidenceItem,
    EvidenceResult,
    SearchOptions,
)

YOUTUBE_VIDEOS_URL = "https://www.googleapis.com/youtube/v3/videos"
TRANSCRIPT_MAX_CHARS = 5000
TRANSCRIPT_UNAVAILABLE = (
    "Transcript not available. Verifying based on title and description only."
)

VIDEO_NOT_FOUND = "video_not_found"
INVALID_VIDEO = "invalid_video"

_VIDEO_ID_RE = re.compile(r"(?:v=|/)([0-9A-Za-z_-]{11})")
_VIDEO_URL_RE = re.compile(
    r"https?://(?:www\.|m\.)?(?:youtube\.com/(?:watch\?\S*v=|shorts/|embed/)|youtu\.be/)"
    r"[0-9A-Za-z_-]{11}\S*",
    re.IGNORECASE,
)


def extract_video_id(video_url: str) -> Optional[str]:
    """Return the 11-character video id in a YouTube URL, or None."""
    match = _VIDEO_ID_RE.search(video_url)
    return match.group(1) if match else None


def find_video_urls(text: str) -> list[str]:
    """Return YouTube URLs found in free text, in order of appearance."""
    return _VIDEO_URL_RE.findall(text or "")


def fetch_transcript(video_id: str) -> str:
    """Join the public transcript of a video into one string (blocking)."""
    transcript = YouTubeTranscriptApi().fetch(video_id)
    return " ".join(snippet.text for snippet in transcript)


class YouTubeVerificationSource(EvidenceSource):
    """Evidence from a video referenced in the message."""

    name = "youtube"

    def __init__(
        self,
        api_key: Optional[str] = None,
        transcript_fetcher: Optional[Callable[[str], str]] = None,
        url: str = YOUTUBE_VIDEOS_URL,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(timeout=timeout, client=client)
        self._api_key = api_key if api_key is not None else settings.youtube_api_key
        self._fetch_transcript = transcript_fetcher or fetch_transcript
        self.url = url

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def verify_video(self, video_url: str, claim: str) -> EvidenceResult:
        """Gather evidence about ``video_url`` for ``claim``.

        Args:
            video_url: Link to the video.
            claim: What the sender says the video shows.

        Returns:
            EvidenceResult with one item holding the combined video text and
            review_status ``pending_review``; found=False with
            ``invalid_video`` or ``video_not_found`` when there is nothing
            to review.
        """
        return await self._guarded(
            lambda: self._verify(video_url, claim),
            query=claim,
            sources_checked=[video_url],
        )

    async def _search(self, query: str, options: SearchOptions) -> EvidenceResult:
        urls = find_video_urls(query)
        if not urls:
            return EvidenceResult.empty(self.name, query, [self.name], error="no_video_url")
        return await self._verify(urls[0], query)

    async def _verify(self, video_url: str, claim: str) -> EvidenceResult:
        video_id = extract_video_id(video_url)
        if not video_id:
            result = EvidenceResult.empty(self.name, claim, [video_url])
            result.review_status = INVALID_VIDEO
            return result

        async with self._http() as client:
            response = await client.get(
                self.url,
                params={"part": "snippet", "id": video_id, "key": self._api_key},
            )
            response.raise_for_status()
            data = response.json()

        videos = data.get("items") or []
        if not videos:
            result = EvidenceResult.empty(self.name, claim, [video_url])
            result.review_status = VIDEO_NOT_FOUND
            return result

        snippet = videos[0].get("snippet") or {}
        title = snippet.get("title", "")
        channel = snippet.get("channelTitle", "")
        description = snippet.get("description", "")

        transcript = await self._transcript_excerpt(video_id)

        content = (
            f"VIDEO TITLE: {title}\n"
            f"CHANNEL: {channel}\n"
            f"DESCRIPTION: {description}\n"
            f"TRANSCRIPT START: {transcript}"
        )

        return EvidenceResult(
            source_name=self.name,
            query=claim,
            found=True,
            items=[
                EvidenceItem(
                    title=title or "Untitled video",
                    url=f"https://www.youtube.com/watch?v={video_id}",
                    content=content,
                    published_date=snippet.get("publishedAt"),
                )
            ],
            sources_checked=[video_url],
            review_status=PENDING_REVIEW,
        )

    async def _transcript_excerpt(self, video_id: str) -> str:
        try:
            text = await asyncio.to_thread(self._fetch_transcript, video_id)
        except Exception as e:
            self._logger.warning("transcript_unavailable", video_id=video_id, error=str(e))
            return TRANSCRIPT_UNAVAILABLE
        return text[:TRANSCRIPT_MAX_CHARS] if text else TRANSCRIPT_UNAVAILABLE
