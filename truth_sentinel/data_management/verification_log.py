"""Append-only learning log of past verdicts.

Follows the same store pattern as the other persistence layers:
- asyncio lock around every read-modify-write
- JSON file persistence, flushed before the call returns
- failures logged as "persistence_failed" and reported, never raised

A filelock.FileLock on a sibling ``.lock`` file additionally serializes
writers in other processes (or other VerificationLog instances) sharing the
same path. Files are replaced atomically with os.replace, so readers never
see a half-written log.

Usage:
    from truth_sentinel.data_management import VerificationLog

    log = VerificationLog("data/learning_log.json")
    await log.append(VerificationLogEntry(claim="...", verdict="HOAX", confidence=70))
    similar = await log.find_similar("Exam postponed to December")
"""

import asyncio
import json
import os
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional

import structlog
from filelock import FileLock, Timeout
from pydantic import ValidationError

from truth_sentinel.config.settings import settings
from truth_sentinel.data_management.schemas.log_schema import (
    LearningInsights,
    VerificationLogEntry,
)
from truth_sentinel.utils.lexical import tokenize_words, tokens_match

SIMILARITY_THRESHOLD = 0.5
PATTERN_MIN_LENGTH = 4
PATTERN_MIN_COUNT = 2

HOAX_PATTERN_WARNING = (
    "This claim matches known HOAX patterns. Be extra vigilant and verify thoroughly."
)
STANDARD_RECOMMENDATION = "Proceed with standard verification"


class CorruptLogError(ValueError):
    """The persisted log exists but is not a JSON list of entries."""


def claim_similarity(a: str, b: str) -> float:
    """Shared-token ratio between two claims.

    Common tokens are counted over the first claim's unique tokens (a token
    is common when any token of the other claim matches it lexically) and
    divided by the larger unique token set.
    """
    tokens_a = set(tokenize_words(a))
    tokens_b = set(tokenize_words(b))
    if not tokens_a or not tokens_b:
        return 0.0

    common = sum(
        1 for token in tokens_a if any(tokens_match(token, other) for other in tokens_b)
    )
    return common / max(len(tokens_a), len(tokens_b))


def extract_patterns(claims: Iterable[str], limit: int = 10) -> list[str]:
    """Recurring vocabulary across claims.

    Counts tokens longer than three characters, keeps those seen at least
    twice and returns them by descending frequency (first-seen order on ties).
    """
    frequency: Counter[str] = Counter()
    for claim in claims:
        frequency.update(tokenize_words(claim, PATTERN_MIN_LENGTH))

    return [
        word for word, count in frequency.most_common() if count >= PATTERN_MIN_COUNT
    ][:limit]


class VerificationLog:
    """Durable history of verdicts with similarity lookup and pattern mining."""

    def __init__(
        self,
        path: Optional[str | Path] = None,
        lock_timeout: float = 10.0,
    ) -> None:
        """Initialize VerificationLog.

        Args:
            path: JSON file backing the log. Defaults to settings.learning_log_path.
            lock_timeout: Seconds to wait for the cross-process file lock.
        """
        self.path = Path(path or settings.learning_log_path)
        self._lock = asyncio.Lock()
        self._file_lock = FileLock(f"{self.path}.lock", timeout=lock_timeout)
        self._logger = structlog.get_logger().bind(component="VerificationLog")

    async def append(self, entry: VerificationLogEntry) -> bool:
        """Append one entry and persist the whole log before returning.

        Args:
            entry: Entry to record.

        Returns:
            True if persisted, False if the write failed.
        """
        async with self._lock:
            try:
                total = await asyncio.to_thread(self._append_sync, entry)
            except (OSError, Timeout) as e:
                self._logger.error(
                    "persistence_failed", path=str(self.path), error=str(e)
                )
                return False

        self._logger.info(
            "entry_logged",
            verdict=entry.verdict,
            confidence=entry.confidence,
            total_entries=total,
        )
        return True

    async def load_entries(self) -> list[VerificationLogEntry]:
        """All entries, oldest first. Absent, empty or corrupt stores read as empty."""
        try:
            return await asyncio.to_thread(self._read_entries)
        except CorruptLogError as e:
            self._logger.warning("log_corrupt", path=str(self.path), error=str(e))
        except OSError as e:
            self._logger.warning("log_unreadable", path=str(self.path), error=str(e))
        return []

    async def find_similar(
        self,
        claim: str,
        limit: int = 5,
    ) -> list[VerificationLogEntry]:
        """Past entries whose claim shares more than half its tokens with ``claim``.

        Args:
            claim: New claim text.
            limit: Maximum number of entries.

        Returns:
            The most recent ``limit`` similar entries, newest first.
        """
        entries = await self.load_entries()
        similar = [
            entry
            for entry in entries
            if claim_similarity(claim, entry.claim) > SIMILARITY_THRESHOLD
        ]
        if limit <= 0:
            return []
        return list(reversed(similar[-limit:]))

    async def get_insights(self, claim: str, limit: int = 10) -> LearningInsights:
        """Recurring HOAX and VERIFIED vocabulary and a recommendation for ``claim``."""
        entries = await self.load_entries()

        hoax_patterns = extract_patterns(
            (e.claim for e in entries if e.verdict == "HOAX"), limit
        )
        verified_patterns = extract_patterns(
            (e.claim for e in entries if e.verdict == "VERIFIED"), limit
        )

        claim_lower = claim.lower()
        matches_hoax = any(pattern in claim_lower for pattern in hoax_patterns)

        return LearningInsights(
            total_verifications=len(entries),
            hoax_patterns=hoax_patterns,
            verified_patterns=verified_patterns,
            matches_hoax_pattern=matches_hoax,
            recommendation=HOAX_PATTERN_WARNING if matches_hoax else STANDARD_RECOMMENDATION,
        )

    async def record_feedback(
        self,
        timestamp: str,
        claim: str,
        was_correct: bool,
        feedback: Optional[str] = None,
    ) -> bool:
        """Attach human feedback to the entry matching timestamp and claim.

        Returns:
            True if an entry was updated and persisted, False otherwise.
        """
        async with self._lock:
            try:
                updated = await asyncio.to_thread(
                    self._feedback_sync, timestamp, claim, was_correct, feedback
                )
            except (OSError, Timeout, CorruptLogError) as e:
                self._logger.error(
                    "persistence_failed", path=str(self.path), error=str(e)
                )
                return False

        if updated:
            self._logger.info("feedback_recorded", timestamp=timestamp, was_correct=was_correct)
        else:
            self._logger.warning("feedback_entry_not_found", timestamp=timestamp)
        return updated

    def _append_sync(self, entry: VerificationLogEntry) -> int:
        with self._file_lock:
            try:
                entries = self._read_entries()
            except CorruptLogError as e:
                self._quarantine(e)
                entries = []
            entries.append(entry)
            self._write_entries(entries)
            return len(entries)

    def _feedback_sync(
        self,
        timestamp: str,
        claim: str,
        was_correct: bool,
        feedback: Optional[str],
    ) -> bool:
        with self._file_lock:
            entries = self._read_entries()
            for entry in entries:
                if entry.timestamp == timestamp and entry.claim == claim:
                    entry.was_correct = was_correct
                    if feedback is not None:
                        entry.feedback = feedback
                    self._write_entries(entries)
                    return True
            return False

    def _read_entries(self) -> list[VerificationLogEntry]:
        if not self.path.exists():
            return []
        raw = self.path.read_text(encoding="utf-8")
        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
            if not isinstance(data, list):
                raise CorruptLogError("log root is not a list")
            return [VerificationLogEntry.model_validate(item) for item in data]
        except (json.JSONDecodeError, ValidationError) as e:
            raise CorruptLogError(str(e)) from e

    def _write_entries(self, entries: list[VerificationLogEntry]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        payload = [e.model_dump(by_alias=True, exclude_none=True) for e in entries]

        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, self.path)

    def _quarantine(self, error: CorruptLogError) -> None:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S")
        backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        os.replace(self.path, backup)
        self._logger.warning(
            "log_quarantined", path=str(self.path), backup=str(backup), error=str(error)
        )
