"""Tests for media MIME handling, analysis parsing and the Gemini analyzer."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from truth_sentinel.evidence import (
    GeminiMediaAnalyzer,
    MediaPayload,
    parse_media_analysis,
    resolve_mime_type,
)

FULL_REPLY = """EXTRACTED_TEXT: UNIVERSITY OF MUMBAI
Circular No. 42: Semester exams postponed to 5th December.
DOCUMENT_TYPE: Official circular
APPEARS_OFFICIAL: YES
READABLE: YES
CONFIDENCE: 0.85
OBSERVATIONS: University seal and registrar signature visible."""


class TestResolveMimeType:
    def test_explicit_type_kept(self) -> None:
        assert resolve_mime_type("image/png; charset=binary", "photo.jpg") == "image/png"

    def test_octet_stream_uses_extension(self) -> None:
        assert resolve_mime_type("application/octet-stream", "docs/notice.pdf") == "application/pdf"
        assert resolve_mime_type(None, "photos/file_1.webp") == "image/webp"

    def test_unknown_extension_defaults_to_jpeg(self) -> None:
        assert resolve_mime_type("application/octet-stream", "photos/file_1") == "image/jpeg"
        assert resolve_mime_type("", "archive.zip") == "image/jpeg"


class TestParseMediaAnalysis:
    def test_full_reply(self) -> None:
        analysis = parse_media_analysis(FULL_REPLY)
        assert analysis.extracted_text.startswith("UNIVERSITY OF MUMBAI")
        assert "Circular No. 42" in analysis.extracted_text
        assert analysis.document_type == "Official circular"
        assert analysis.appears_official == "YES"
        assert analysis.readable is True
        assert analysis.confidence == 0.85
        assert "seal" in analysis.observations
        assert analysis.description.startswith("Official circular.")

    def test_extracted_text_stops_at_any_later_field(self) -> None:
        analysis = parse_media_analysis(
            "EXTRACTED_TEXT: Library timing changed to 8 pm\nAPPEARS_OFFICIAL: YES\nREADABLE: YES"
        )
        assert analysis.extracted_text == "Library timing changed to 8 pm"
        assert analysis.appears_official == "YES"
        assert analysis.document_type == "Unknown document type"

    def test_reordered_fields(self) -> None:
        analysis = parse_media_analysis(
            "DOCUMENT_TYPE: Screenshot of a chat\nCONFIDENCE: 0.4\n"
            "EXTRACTED_TEXT: Holiday declared on Monday\nOBSERVATIONS: No letterhead\n"
            "READABLE: YES"
        )
        assert analysis.document_type == "Screenshot of a chat"
        assert analysis.extracted_text == "Holiday declared on Monday"
        assert analysis.observations == "No letterhead"
        assert analysis.confidence == 0.4

    def test_unstructured_reply_is_extracted_text(self) -> None:
        analysis = parse_media_analysis("Just some words from a screenshot")
        assert analysis.extracted_text == "Just some words from a screenshot"
        assert analysis.appears_official == "UNCERTAIN"
        assert analysis.readable is True
        assert analysis.confidence == 0.5

    def test_unreadable_and_clamped_confidence(self) -> None:
        analysis = parse_media_analysis(
            "EXTRACTED_TEXT: \nDOCUMENT_TYPE: Blurry photo\nAPPEARS_OFFICIAL: no\n"
            "READABLE: NO\nCONFIDENCE: 7"
        )
        assert analysis.readable is False
        assert analysis.appears_official == "NO"
        assert analysis.confidence == 1.0

    def test_empty_reply_not_readable(self) -> None:
        analysis = parse_media_analysis("")
        assert analysis.extracted_text == ""
        assert analysis.readable is False


# ── Analyzer ──────────────────────────────────────────────────────────────


@pytest.fixture
def payload() -> MediaPayload:
    return MediaPayload(data=b"\xff\xd8fake", mime_type="image/jpeg", file_name="photo.jpg")


class TestGeminiMediaAnalyzer:
    @pytest.mark.asyncio
    async def test_analyze_sends_media_and_prompt(self, payload: MediaPayload) -> None:
        client = MagicMock()
        client.agenerate_content = AsyncMock(return_value=FULL_REPLY)
        analyzer = GeminiMediaAnalyzer(client=client)

        analysis = await analyzer.analyze(payload, caption="is this real?")

        assert analysis.appears_official == "YES"
        parts = client.agenerate_content.call_args.args[0]
        assert parts[0] == {"mime_type": "image/jpeg", "data": b"\xff\xd8fake"}
        assert 'caption: "is this real?"' in parts[1]
        assert client.agenerate_content.call_args.kwargs["temperature"] == 0.2

    @pytest.mark.asyncio
    async def test_not_configured_raises(self, payload: MediaPayload) -> None:
        with patch("truth_sentinel.evidence.media.get_client", return_value=None):
            analyzer = GeminiMediaAnalyzer()
            assert analyzer.is_configured is False
            with pytest.raises(ValueError, match="GEMINI_API_KEY"):
                await analyzer.analyze(payload)

    @pytest.mark.asyncio
    async def test_client_errors_propagate(self, payload: MediaPayload) -> None:
        client = MagicMock()
        client.agenerate_content = AsyncMock(side_effect=RuntimeError("quota"))
        analyzer = GeminiMediaAnalyzer(client=client)
        with pytest.raises(RuntimeError):
            await analyzer.analyze(payload)
