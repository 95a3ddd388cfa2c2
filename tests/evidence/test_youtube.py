"""Tests for video verification evidence."""

import httpx
import pytest

from truth_sentinel.evidence import (
    PENDING_REVIEW,
    YouTubeVerificationSource,
    extract_video_id,
    find_video_urls,
)
from truth_sentinel.evidence.youtube import (
    INVALID_VIDEO,
    TRANSCRIPT_UNAVAILABLE,
    VIDEO_NOT_FOUND,
)

VIDEO_ID = "dQw4w9WgXcQ"

SNIPPET = {
    "items": [
        {
            "snippet": {
                "title": "Exam update from the registrar",
                "channelTitle": "University Channel",
                "description": "Semester exams schedule explained.",
                "publishedAt": "2026-10-01T10:00:00Z",
            }
        }
    ]
}


def source_with(payload: dict, transcript=lambda video_id: "exams are on time " * 500):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["id"] == VIDEO_ID
        assert request.url.params["part"] == "snippet"
        return httpx.Response(200, json=payload)

    return YouTubeVerificationSource(
        api_key="y",
        transcript_fetcher=transcript,
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


class TestVideoUrls:
    @pytest.mark.parametrize(
        "url",
        [
            f"https://www.youtube.com/watch?v={VIDEO_ID}",
            f"https://youtu.be/{VIDEO_ID}",
            f"https://youtube.com/shorts/{VIDEO_ID}",
        ],
    )
    def test_extract_video_id(self, url: str) -> None:
        assert extract_video_id(url) == VIDEO_ID

    def test_extract_video_id_invalid(self) -> None:
        assert extract_video_id("https://example.com/x") is None

    def test_find_video_urls_in_text(self) -> None:
        text = f"Watch this https://youtu.be/{VIDEO_ID} exams cancelled!!"
        assert find_video_urls(text) == [f"https://youtu.be/{VIDEO_ID}"]
        assert find_video_urls("no links here") == []


class TestVerifyVideo:
    @pytest.mark.asyncio
    async def test_metadata_and_transcript_excerpt(self) -> None:
        source = source_with(SNIPPET)
        result = await source.verify_video(f"https://youtu.be/{VIDEO_ID}", "exams cancelled")

        assert result.found is True
        assert result.review_status == PENDING_REVIEW
        content = result.items[0].content
        assert "VIDEO TITLE: Exam update from the registrar" in content
        assert "CHANNEL: University Channel" in content
        transcript = content.split("TRANSCRIPT START: ", 1)[1]
        assert len(transcript) == 5000
        assert result.items[0].url == f"https://www.youtube.com/watch?v={VIDEO_ID}"

    @pytest.mark.asyncio
    async def test_transcript_failure_falls_back_to_metadata(self) -> None:
        def broken(video_id: str) -> str:
            raise RuntimeError("transcripts disabled")

        source = source_with(SNIPPET, transcript=broken)
        result = await source.verify_video(f"https://youtu.be/{VIDEO_ID}", "exams cancelled")
        assert result.found is True
        assert TRANSCRIPT_UNAVAILABLE in result.items[0].content

    @pytest.mark.asyncio
    async def test_video_not_found(self) -> None:
        source = source_with({"items": []})
        result = await source.verify_video(f"https://youtu.be/{VIDEO_ID}", "exams cancelled")
        assert result.found is False
        assert result.review_status == VIDEO_NOT_FOUND

    @pytest.mark.asyncio
    async def test_invalid_url(self) -> None:
        source = source_with(SNIPPET)
        result = await source.verify_video("https://example.com/x", "exams cancelled")
        assert result.found is False
        assert result.review_status == INVALID_VIDEO

    @pytest.mark.asyncio
    async def test_missing_key(self) -> None:
        source = YouTubeVerificationSource(api_key="")
        result = await source.verify_video(f"https://youtu.be/{VIDEO_ID}", "claim")
        assert result.found is False
        assert result.error == "not_configured"

    @pytest.mark.asyncio
    async def test_search_uses_url_in_query(self) -> None:
        source = source_with(SNIPPET)
        result = await source.search(f"is this true https://youtu.be/{VIDEO_ID}")
        assert result.found is True
