"""Learning log record schemas.

A VerificationLogEntry is written once per processed (non-skipped) message.
Only ``was_correct`` and ``feedback`` may change afterwards, through human
feedback matched on timestamp and claim.
"""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

LogVerdict = Literal["HOAX", "VERIFIED", "UNCERTAIN"]


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


class VerificationLogEntry(BaseModel):
    """One past verdict in the learning log."""

    model_config = ConfigDict(populate_by_name=True)

    timestamp: str = Field(default_factory=utc_timestamp)
    claim: str
    verdict: LogVerdict
    sources: list[str] = Field(default_factory=list)
    confidence: int = Field(ge=0, le=100)
    was_correct: Optional[bool] = Field(default=None, alias="wasCorrect")
    feedback: Optional[str] = None

    @field_validator("timestamp")
    @classmethod
    def _iso_timestamp(cls, value: str) -> str:
        datetime.fromisoformat(value.replace("Z", "+00:00"))
        return value


class LearningInsights(BaseModel):
    """Vocabulary learned from past verdicts, relative to one claim."""

    total_verifications: int = 0
    hoax_patterns: list[str] = Field(default_factory=list)
    verified_patterns: list[str] = Field(default_factory=list)
    matches_hoax_pattern: bool = False
    recommendation: str = "Proceed with standard verification"
