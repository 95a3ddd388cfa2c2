"""Data management package for Truth Sentinel.

Storage and maintenance:
- VerificationLog: append-only learning log of past verdicts
- CorpusManager: status and cleanup of the local reference corpus
"""

from truth_sentinel.data_management.corpus_manager import (
    CleanupReport,
    CorpusManager,
    CorpusStatus,
)
from truth_sentinel.data_management.schemas import (
    LearningInsights,
    VerificationLogEntry,
)
from truth_sentinel.data_management.verification_log import (
    VerificationLog,
    claim_similarity,
    extract_patterns,
)

__all__ = [
    "CleanupReport",
    "CorpusManager",
    "CorpusStatus",
    "LearningInsights",
    "VerificationLog",
    "VerificationLogEntry",
    "claim_similarity",
    "extract_patterns",
]
