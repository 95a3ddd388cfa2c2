"""Local reference corpus retrieval: chunking and lexical scoring."""

from truth_sentinel.retrieval.chunker import chunk_spans, chunk_text
from truth_sentinel.retrieval.document_index import DocumentIndex, score_chunk
from truth_sentinel.retrieval.schemas import DocumentChunk, RetrievalResult, ScoredChunk

__all__ = [
    "DocumentChunk",
    "DocumentIndex",
    "RetrievalResult",
    "ScoredChunk",
    "chunk_spans",
    "chunk_text",
    "score_chunk",
]
