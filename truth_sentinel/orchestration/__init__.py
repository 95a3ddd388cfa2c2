"""Verdict orchestration: state machine, decision policy and reply wording."""

from truth_sentinel.orchestration.orchestrator import DeliveryClient, VerdictOrchestrator
from truth_sentinel.orchestration.phrasing import (
    APOLOGY_TEXT,
    VerdictPhraser,
    template_reply,
)
from truth_sentinel.orchestration.policy import VerdictPolicy
from truth_sentinel.orchestration.schemas import (
    Decision,
    SourceAssessment,
    VerificationOutcome,
)
from truth_sentinel.orchestration.states import PipelineState, Stance, Verdict

__all__ = [
    "APOLOGY_TEXT",
    "Decision",
    "DeliveryClient",
    "PipelineState",
    "SourceAssessment",
    "Stance",
    "Verdict",
    "VerdictOrchestrator",
    "VerdictPhraser",
    "VerdictPolicy",
    "VerificationOutcome",
    "template_reply",
]
