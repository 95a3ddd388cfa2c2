"""Local document retrieval schemas.

DocumentChunk is owned by the DocumentIndex: chunks are created at build
time, never mutated, and replaced wholesale on reload. ScoredChunk and
RetrievalResult are per-query values discarded after the response.
"""

from pydantic import BaseModel, Field

MIN_CHUNK_CHARS = 50


class DocumentChunk(BaseModel):
    """A trimmed, overlap-aware slice of one reference document."""

    text: str = Field(..., min_length=MIN_CHUNK_CHARS)
    source_name: str = Field(..., description="File name relative to the corpus root")
    chunk_index: int = Field(..., ge=0, description="Position within the source file")

    model_config = {"frozen": True}


class ScoredChunk(DocumentChunk):
    """A chunk with its lexical relevance score for one query."""

    relevance_score: float = Field(..., ge=0.0)


class RetrievalResult(BaseModel):
    """Top-K chunks for a query plus index-level metadata."""

    query: str
    results: list[ScoredChunk] = Field(default_factory=list)
    total_chunks: int = 0
    has_relevant_results: bool = False

    @property
    def best(self) -> ScoredChunk | None:
        return self.results[0] if self.results else None
