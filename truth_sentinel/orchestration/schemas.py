"""Decision and outcome schemas for the verdict orchestrator."""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from truth_sentinel.data_management.schemas import (
    LearningInsights,
    VerificationLogEntry,
)
from truth_sentinel.evidence.schemas import EvidenceResult
from truth_sentinel.gatekeeper.schemas import GatekeeperDecision
from truth_sentinel.orchestration.states import PipelineState, Stance, Verdict


def clamp_confidence(value: float) -> int:
    """Round and clamp a confidence value into [0, 100]."""
    return int(min(max(round(value), 0), 100))


class SourceAssessment(BaseModel):
    """Stance of one evidence source (or the local corpus) toward a claim."""

    source_name: str
    stance: Stance = Stance.NEUTRAL
    domains: list[str] = Field(
        default_factory=list,
        description="Independent origins backing the stance",
    )
    relevance: float = Field(default=0.0, ge=0.0, le=1.0)
    high_precision: bool = False
    citation: Optional[str] = Field(
        default=None, description="URL or document name to cite"
    )
    is_official: bool = False
    summary: str = ""


class Decision(BaseModel):
    """Verdict computed by VerdictPolicy before any wording."""

    verdict: Verdict
    confidence: int = Field(ge=0, le=100)
    primary_source: Optional[str] = None
    reasoning: str = ""
    decided_by: str = Field(
        default="evidence",
        description="media, local, evidence or no_corroboration",
    )
    assessments: list[SourceAssessment] = Field(default_factory=list)

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp(cls, value: float) -> int:
        return clamp_confidence(value)


class VerificationOutcome(BaseModel):
    """Everything the orchestrator produced for one message."""

    conversation_id: Optional[str] = None
    message_id: str = ""
    state_trail: list[PipelineState] = Field(default_factory=list)
    gate: Optional[GatekeeperDecision] = None
    verdict: Optional[Verdict] = None
    confidence: int = Field(default=0, ge=0, le=100)
    primary_source: Optional[str] = None
    reasoning: str = ""
    sources: list[str] = Field(default_factory=list)
    evidence: list[EvidenceResult] = Field(default_factory=list)
    response_text: Optional[str] = None
    skipped: bool = False
    skip_reason: Optional[str] = None
    logged: bool = False
    delivered: Optional[bool] = None
    similar_cases: list[VerificationLogEntry] = Field(default_factory=list)
    insights: Optional[LearningInsights] = None
    error: Optional[str] = None

    @property
    def final_state(self) -> Optional[PipelineState]:
        return self.state_trail[-1] if self.state_trail else None
