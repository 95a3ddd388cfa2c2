"""Lazily built in-memory index over the local reference corpus.

The corpus is a small directory of official documents (syllabi, circulars,
notices). Exact official terminology matters more than paraphrase, so the
index uses a bag-of-words overlap score instead of embeddings.

Lifecycle:
- First query builds the index (lazy); concurrent first queries wait on one
  build instead of racing.
- reload() rebuilds from scratch.
- Builds produce a new chunk tuple that replaces the old one in a single
  assignment, so a query never sees a half-built index.

Usage:
    from truth_sentinel.retrieval import DocumentIndex

    index = DocumentIndex("data")
    result = await index.query("is exam postponed", top_k=3)
"""

import asyncio
from pathlib import Path
from typing import Optional, Sequence

import pypdfium2 as pdfium
import structlog

from truth_sentinel.config.settings import settings
from truth_sentinel.retrieval.chunker import chunk_text
from truth_sentinel.retrieval.schemas import DocumentChunk, RetrievalResult, ScoredChunk
from truth_sentinel.utils.lexical import tokenize_words

TEXT_SUFFIXES = (".txt", ".md")
PDF_SUFFIX = ".pdf"
RELEVANCE_THRESHOLD = 0.1
MIN_TOKEN_LENGTH = 3


def score_chunk(query: str, chunk_text_value: str) -> float:
    """Symmetric lexical overlap between a query and a chunk.

    For each unique query token: +1 when it appears verbatim in the chunk,
    +0.5 for every unique chunk token that contains it or is contained by
    it. The sum is divided by the number of unique query tokens.
    """
    query_tokens = set(tokenize_words(query, MIN_TOKEN_LENGTH))
    chunk_tokens = set(tokenize_words(chunk_text_value, MIN_TOKEN_LENGTH))

    raw = 0.0
    for token in query_tokens:
        if token in chunk_tokens:
            raw += 1.0
        for chunk_token in chunk_tokens:
            if token in chunk_token or chunk_token in token:
                raw += 0.5

    return raw / max(len(query_tokens), 1)


class DocumentIndex:
    """Chunked lexical index over plain-text and PDF reference files."""

    def __init__(
        self,
        data_dir: Optional[str | Path] = None,
        chunk_size: Optional[int] = None,
        chunk_overlap: Optional[int] = None,
        exclude: Sequence[str | Path] = (),
    ) -> None:
        """Initialize DocumentIndex.

        Args:
            data_dir: Corpus directory. Defaults to settings.data_dir.
            chunk_size: Target chunk size in characters.
            chunk_overlap: Overlap between consecutive chunks.
            exclude: Files never indexed (the learning log lives in data/).
        """
        self.data_dir = Path(data_dir or settings.data_dir)
        self.chunk_size = chunk_size or settings.chunk_size
        self.chunk_overlap = (
            chunk_overlap if chunk_overlap is not None else settings.chunk_overlap
        )
        self._exclude = {Path(p).resolve() for p in exclude}
        self._chunks: Optional[tuple[DocumentChunk, ...]] = None
        self._build_lock = asyncio.Lock()
        self._logger = structlog.get_logger().bind(component="DocumentIndex")

    @property
    def is_initialized(self) -> bool:
        return self._chunks is not None

    @property
    def chunks(self) -> tuple[DocumentChunk, ...]:
        return self._chunks or ()

    def build_index(self, directory: Optional[str | Path] = None) -> list[DocumentChunk]:
        """Read every reference file under ``directory`` and chunk it.

        A missing directory is created and treated as an empty corpus.
        Unreadable files are logged and skipped.

        Args:
            directory: Corpus root. Defaults to the index's data_dir.

        Returns:
            Chunks in file order, each file's chunks in text order.
        """
        root = Path(directory) if directory else self.data_dir

        if not root.exists():
            root.mkdir(parents=True, exist_ok=True)
            self._logger.warning("data_dir_created", path=str(root))
            return []

        chunks: list[DocumentChunk] = []
        files = sorted(p for p in root.rglob("*") if p.is_file())
        text_count = pdf_count = 0

        for path in files:
            if path.resolve() in self._exclude:
                continue
            suffix = path.suffix.lower()
            source_name = path.relative_to(root).as_posix()
            try:
                if suffix in TEXT_SUFFIXES:
                    text = path.read_text(encoding="utf-8", errors="replace")
                    chunks.extend(self._chunk_document(text, source_name))
                    text_count += 1
                elif suffix == PDF_SUFFIX:
                    chunks.extend(self._chunk_pdf(path, source_name))
                    pdf_count += 1
            except OSError as e:
                self._logger.error(
                    "document_load_failed", source=source_name, error=str(e)
                )

        self._logger.info(
            "index_built",
            path=str(root),
            text_files=text_count,
            pdf_files=pdf_count,
            chunks=len(chunks),
        )
        return chunks

    async def ensure_initialized(self) -> None:
        """Build the index once; callers arriving mid-build wait and reuse it."""
        if self._chunks is not None:
            return
        async with self._build_lock:
            if self._chunks is not None:
                return
            await self._rebuild_locked()

    async def reload(self) -> int:
        """Force a full rebuild and return the new chunk count."""
        async with self._build_lock:
            await self._rebuild_locked()
        return len(self.chunks)

    async def query(self, text: str, top_k: int = 3) -> RetrievalResult:
        """Score every chunk against ``text`` and return the best ``top_k``.

        Args:
            text: Query text.
            top_k: Maximum number of chunks returned.

        Returns:
            RetrievalResult with scores rounded to two decimals.
        """
        await self.ensure_initialized()
        snapshot = self.chunks

        if not snapshot:
            self._logger.warning("empty_index", path=str(self.data_dir))
            return RetrievalResult(query=text)

        scored = [(score_chunk(text, chunk.text), chunk) for chunk in snapshot]
        # sorted() is stable: ties keep index order
        scored.sort(key=lambda pair: pair[0], reverse=True)
        top = scored[: max(top_k, 0)]
        best_score = top[0][0] if top else 0.0

        result = RetrievalResult(
            query=text,
            results=[
                ScoredChunk(
                    **chunk.model_dump(),
                    relevance_score=round(score, 2),
                )
                for score, chunk in top
            ],
            total_chunks=len(snapshot),
            has_relevant_results=best_score > RELEVANCE_THRESHOLD,
        )

        self._logger.info(
            "query_complete",
            query=text[:80],
            total_chunks=len(snapshot),
            top_score=round(best_score, 2),
            has_relevant_results=result.has_relevant_results,
        )
        return result

    async def _rebuild_locked(self) -> None:
        chunks = await asyncio.to_thread(self.build_index)
        self._chunks = tuple(chunks)

    def _chunk_document(self, text: str, source_name: str) -> list[DocumentChunk]:
        return [
            DocumentChunk(text=chunk, source_name=source_name, chunk_index=i)
            for i, chunk in enumerate(
                chunk_text(text, self.chunk_size, self.chunk_overlap)
            )
        ]

    def _chunk_pdf(self, path: Path, source_name: str) -> list[DocumentChunk]:
        """Extract PDF text with pypdfium2; fall back to a placeholder chunk."""
        text = ""
        try:
            pdf = pdfium.PdfDocument(str(path))
            parts = []
            for page in pdf:
                text_page = page.get_textpage()
                page_text = text_page.get_text_range()
                if page_text:
                    parts.append(page_text)
                text_page.close()
                page.close()
            pdf.close()
            text = "\n\n".join(parts)
        except Exception as e:
            self._logger.warning("pdf_extraction_failed", source=source_name, error=str(e))

        chunks = self._chunk_document(text, source_name) if text.strip() else []
        if chunks:
            return chunks

        self._logger.info("pdf_placeholder", source=source_name)
        return [
            DocumentChunk(
                text=(
                    f"[PDF Document: {source_name}] - This is a placeholder. "
                    "For better results, extract text content to a .txt file."
                ),
                source_name=source_name,
                chunk_index=0,
            )
        ]
