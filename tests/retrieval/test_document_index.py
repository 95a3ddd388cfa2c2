"""Tests for the lazily built lexical DocumentIndex.

Tests cover:
- Scoring heuristic
- Query ranking and relevance flag
- Missing directory, PDF placeholder, exclusions
- Reload determinism and single build under concurrent first queries
"""

import asyncio
from pathlib import Path
from unittest.mock import patch

import pytest

from truth_sentinel.retrieval import DocumentIndex
from truth_sentinel.retrieval.document_index import score_chunk

NOTICE = (
    "Circular No. 42: The Controller of Examinations informs all students that the "
    "exam postponed to Dec 5 due to the convocation ceremony. Hall tickets remain valid."
)

SYLLABUS = (
    "Semester 3: Data Structures - Units 1-5 cover arrays, linked lists, stacks, "
    "queues, trees and graphs, with two practical assignments per unit."
)

HOSTEL = (
    "Hostel allotment for the new academic year opens on the first Monday of July. "
    "Students must submit the fee receipt at the warden office."
)


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def corpus(tmp_path: Path) -> Path:
    (tmp_path / "notice.txt").write_text(NOTICE, encoding="utf-8")
    (tmp_path / "syllabus.md").write_text(SYLLABUS, encoding="utf-8")
    (tmp_path / "hostel.txt").write_text(HOSTEL, encoding="utf-8")
    return tmp_path


@pytest.fixture
def index(corpus: Path) -> DocumentIndex:
    return DocumentIndex(corpus, chunk_size=500, chunk_overlap=100)


# ── Scoring ───────────────────────────────────────────────────────────────


class TestScoring:
    def test_exact_and_partial_overlap(self) -> None:
        # "exam": +1 exact, +0.5 "exam", +0.5 "examination" -> 2.0 over 1 token
        assert score_chunk("exam", "exam examination hall") == 2.0

    def test_short_tokens_ignored(self) -> None:
        assert score_chunk("is to", "is to be") == 0.0

    def test_no_overlap(self) -> None:
        assert score_chunk("hostel fees", "semester results declared") == 0.0


# ── Query ─────────────────────────────────────────────────────────────────


class TestQuery:
    @pytest.mark.asyncio
    async def test_exact_phrase_ranks_first(self, index: DocumentIndex) -> None:
        result = await index.query("is exam postponed", top_k=3)
        assert result.has_relevant_results is True
        assert result.best.source_name == "notice.txt"
        assert result.total_chunks == 3

    @pytest.mark.asyncio
    async def test_scores_rounded_and_sorted(self, index: DocumentIndex) -> None:
        result = await index.query("syllabus semester data structures units")
        scores = [chunk.relevance_score for chunk in result.results]
        assert scores == sorted(scores, reverse=True)
        assert all(round(s, 2) == s for s in scores)
        assert result.best.source_name == "syllabus.md"

    @pytest.mark.asyncio
    async def test_top_k_limits_results(self, index: DocumentIndex) -> None:
        result = await index.query("students", top_k=1)
        assert len(result.results) == 1

    @pytest.mark.asyncio
    async def test_unrelated_query_not_relevant(self, index: DocumentIndex) -> None:
        result = await index.query("cricket tournament zzz")
        assert result.has_relevant_results is False

    @pytest.mark.asyncio
    async def test_missing_directory_created(self, tmp_path: Path) -> None:
        missing = tmp_path / "corpus"
        index = DocumentIndex(missing)
        result = await index.query("exam")
        assert result.results == []
        assert result.has_relevant_results is False
        assert missing.is_dir()

    @pytest.mark.asyncio
    async def test_unparseable_pdf_becomes_placeholder(self, tmp_path: Path) -> None:
        (tmp_path / "scan.pdf").write_bytes(b"not really a pdf")
        index = DocumentIndex(tmp_path)
        result = await index.query("scan")
        assert result.total_chunks == 1
        assert result.best.text.startswith("[PDF Document: scan.pdf]")

    @pytest.mark.asyncio
    async def test_excluded_files_not_indexed(self, corpus: Path) -> None:
        index = DocumentIndex(corpus, exclude=[corpus / "hostel.txt"])
        await index.ensure_initialized()
        assert {c.source_name for c in index.chunks} == {"notice.txt", "syllabus.md"}

    @pytest.mark.asyncio
    async def test_other_files_ignored(self, corpus: Path) -> None:
        (corpus / "learning_log.json").write_text("[]", encoding="utf-8")
        index = DocumentIndex(corpus)
        await index.ensure_initialized()
        assert all(not c.source_name.endswith(".json") for c in index.chunks)


# ── Lifecycle ─────────────────────────────────────────────────────────────


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_lazy_build(self, index: DocumentIndex) -> None:
        assert index.is_initialized is False
        await index.query("exam")
        assert index.is_initialized is True

    @pytest.mark.asyncio
    async def test_reload_is_deterministic(self, index: DocumentIndex) -> None:
        first_count = await index.reload()
        first = [(c.text, c.source_name, c.chunk_index) for c in index.chunks]
        second_count = await index.reload()
        second = [(c.text, c.source_name, c.chunk_index) for c in index.chunks]
        assert first_count == second_count == 3
        assert first == second

    @pytest.mark.asyncio
    async def test_reload_picks_up_new_files(self, index: DocumentIndex, corpus: Path) -> None:
        await index.ensure_initialized()
        (corpus / "extra.txt").write_text(HOSTEL + " Late fees apply after July.", encoding="utf-8")
        assert await index.reload() == 4

    @pytest.mark.asyncio
    async def test_concurrent_first_queries_build_once(self, index: DocumentIndex) -> None:
        with patch.object(index, "build_index", wraps=index.build_index) as build:
            results = await asyncio.gather(*(index.query("exam") for _ in range(5)))
        assert build.call_count == 1
        assert all(r.total_chunks == 3 for r in results)
