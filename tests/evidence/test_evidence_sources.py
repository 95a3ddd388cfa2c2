"""Tests for the web, official-domain and answer-engine evidence sources.

HTTP is served by httpx.MockTransport; no test touches the network.

Tests cover:
- Missing credentials degrade to empty results without any request
- Request shape (headers, body, domain scoping, query enhancement)
- Official tagging by exact and sub-domain match
- HTTP errors and timeouts absorbed into empty results
"""

import asyncio
import json

import httpx
import pytest

from truth_sentinel.evidence import (
    EvidenceResult,
    ExaSearchSource,
    OfficialSourceSearch,
    PerplexitySearchSource,
    SearchOptions,
    extract_domain,
    is_official_domain,
)

EXA_RESULTS = {
    "results": [
        {
            "title": "Exam schedule revised",
            "url": "https://www.mu.ac.in/notices/exam-schedule",
            "text": "The university has revised the exam schedule. " * 60,
            "publishedDate": "2026-10-01",
            "score": 0.91,
        },
        {
            "title": "Department notice",
            "url": "https://exams.mu.ac.in/dept",
            "text": "Department level notice.",
        },
        {
            "title": "Blog repost",
            "url": "https://fakemu.ac.in/post",
            "text": None,
        },
    ]
}


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ── Domain helpers ────────────────────────────────────────────────────────


class TestDomainHelpers:
    def test_extract_domain_strips_www_and_port(self) -> None:
        assert extract_domain("https://www.mu.ac.in:443/a") == "mu.ac.in"
        assert extract_domain("not a url") == ""

    def test_official_exact_and_suffix(self) -> None:
        assert is_official_domain("mu.ac.in", ["mu.ac.in"])
        assert is_official_domain("exams.mu.ac.in", ["mu.ac.in"])
        assert not is_official_domain("fakemu.ac.in", ["mu.ac.in"])

    def test_sources_checked_deduplicated(self) -> None:
        result = EvidenceResult(source_name="x", sources_checked=["a", "b", "a"])
        assert result.sources_checked == ["a", "b"]


# ── Unconfigured sources ──────────────────────────────────────────────────


class TestUnconfigured:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "source_cls", [ExaSearchSource, OfficialSourceSearch, PerplexitySearchSource]
    )
    async def test_missing_key_returns_empty(self, source_cls) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        source = source_cls(api_key="", client=mock_client(handler))
        result = await source.search("exam postponed")
        assert result.found is False
        assert result.items == []
        assert result.error == "not_configured"
        assert result.sources_checked


# ── Exa search ────────────────────────────────────────────────────────────


class TestExaSearch:
    @pytest.mark.asyncio
    async def test_request_and_items(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            seen["key"] = request.headers["x-api-key"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=EXA_RESULTS)

        source = ExaSearchSource(api_key="k", client=mock_client(handler))
        result = await source.search("exam schedule", SearchOptions(num_results=3))

        assert seen["path"] == "/search"
        assert seen["key"] == "k"
        assert seen["body"]["query"] == "exam schedule"
        assert seen["body"]["numResults"] == 3
        assert "includeDomains" not in seen["body"]

        assert result.found is True
        assert len(result.items) == 3
        assert len(result.items[0].content) == 1500
        assert result.items[2].content == "No content available"
        # No domain scope requested: official flag left unset
        assert all(item.is_official is None for item in result.items)
        assert result.sources_checked == ["exa_search"]

    @pytest.mark.asyncio
    async def test_http_error_absorbed(self) -> None:
        source = ExaSearchSource(
            api_key="k", client=mock_client(lambda r: httpx.Response(500, text="boom"))
        )
        result = await source.search("exam")
        assert result.found is False
        assert result.items == []
        assert result.error

    @pytest.mark.asyncio
    async def test_timeout_absorbed(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(1)
            return httpx.Response(200, json=EXA_RESULTS)

        source = ExaSearchSource(api_key="k", timeout=0.05, client=mock_client(handler))
        result = await source.search("exam")
        assert result.found is False
        assert result.error == "timeout"

    @pytest.mark.asyncio
    async def test_empty_results(self) -> None:
        source = ExaSearchSource(
            api_key="k", client=mock_client(lambda r: httpx.Response(200, json={"results": []}))
        )
        result = await source.search("exam")
        assert result.found is False
        assert result.error is None


# ── Official search ───────────────────────────────────────────────────────


class TestOfficialSearch:
    @pytest.mark.asyncio
    async def test_scoped_query_and_official_tags(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=EXA_RESULTS)

        source = OfficialSourceSearch(
            authority="mumbai", api_key="k", client=mock_client(handler)
        )
        result = await source.search("exam schedule")

        assert seen["body"]["query"] == "exam schedule official notice announcement circular"
        assert seen["body"]["numResults"] == 8
        assert "mu.ac.in" in seen["body"]["includeDomains"]
        assert [item.is_official for item in result.items] == [True, True, False]
        assert len(result.official_items) == 2
        assert len(result.items[0].content) == 1200
        assert "mu.ac.in" in result.sources_checked

    @pytest.mark.asyncio
    async def test_unknown_authority_falls_back_to_general(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"results": []})

        source = OfficialSourceSearch(authority="mars", api_key="k", client=mock_client(handler))
        await source.search("exam")
        assert "ugc.ac.in" in seen["body"]["includeDomains"]


# ── Perplexity ────────────────────────────────────────────────────────────


class TestPerplexity:
    @pytest.mark.asyncio
    async def test_answer_and_citations(self) -> None:
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                200,
                json={
                    "choices": [{"message": {"content": "  The exam was postponed.  "}}],
                    "citations": ["https://mu.ac.in/notice", "https://news.example/x"],
                },
            )

        source = PerplexitySearchSource(api_key="p", client=mock_client(handler))
        result = await source.search("was the exam postponed", SearchOptions(include_domains=["mu.ac.in"]))

        assert seen["auth"] == "Bearer p"
        assert seen["body"]["model"] == "sonar-pro"
        assert seen["body"]["temperature"] == 0.1
        assert seen["body"]["messages"][0]["role"] == "system"
        assert seen["body"]["search_domain_filter"] == ["mu.ac.in"]
        assert result.found is True
        assert result.items[0].content == "The exam was postponed."
        assert result.items[0].url == "https://mu.ac.in/notice"
        assert result.items[0].is_official is True
        assert result.sources_checked == ["https://mu.ac.in/notice", "https://news.example/x"]
        assert source.high_precision is True

    @pytest.mark.asyncio
    async def test_empty_answer(self) -> None:
        source = PerplexitySearchSource(
            api_key="p",
            client=mock_client(lambda r: httpx.Response(200, json={"choices": []})),
        )
        result = await source.search("exam")
        assert result.found is False
        assert result.error == "empty_answer"
