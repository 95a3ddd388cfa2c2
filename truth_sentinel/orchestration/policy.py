"""Deterministic verdict policy.

Turns media analysis, local retrieval and external evidence into a verdict
and a bounded confidence. The language model never decides; it only words
the Decision produced here.

Rules, in order:
- Media lacking official markers, unreadable, or not mentioning the claim's
  trigger words -> HOAX (media fraud short-circuit).
- Academic reference question (syllabus, units, modules...) with a relevant
  local document -> VERIFIED from the local corpus.
- Two or more independent origins agreeing -> 85 to 95.
- A single corroborating origin -> 55 to 70, high-precision source breaks ties.
- Nothing corroborates and the claim is alarmist or describes an
  institution-wide disruption -> HOAX at 70.
- Nothing at all for a minor claim -> UNABLE_TO_VERIFY at 20.
"""

import re
from typing import Iterable, Optional, Sequence

import structlog

from truth_sentinel.config.keywords import (
    ACADEMIC_REFERENCE_TERMS,
    ALARMIST_PHRASES,
    DENIAL_MARKERS,
    DISRUPTION_TERMS,
    UNCERTAINTY_MARKERS,
)
from truth_sentinel.config.official_sources import PRIMARY_OFFICIAL_SITE
from truth_sentinel.evidence.media import MediaAnalysis
from truth_sentinel.evidence.schemas import PENDING_REVIEW, EvidenceItem, EvidenceResult
from truth_sentinel.evidence.youtube import VIDEO_NOT_FOUND
from truth_sentinel.orchestration.schemas import Decision, SourceAssessment
from truth_sentinel.orchestration.states import Stance, Verdict
from truth_sentinel.retrieval.schemas import RetrievalResult
from truth_sentinel.utils.lexical import (
    FUZZY_MIN_LENGTH,
    levenshtein,
    strip_punctuation,
    tokenize_words,
    tokens_match,
)

CLAIM_TERM_MIN_LENGTH = 4

CLAIM_STOPWORDS = frozenset(
    {
        "this", "that", "these", "those", "with", "from", "have", "will", "there",
        "their", "what", "when", "where", "which", "your", "about", "they", "been",
        "were", "into", "just", "also", "does", "some", "like", "than", "then",
        "them", "here", "true", "really", "please", "everyone", "guys",
    }
)

MEDIA_SOURCE = "Attached media analysis"

_SHOUTED_WORD = re.compile(r"\b[A-Z]{3,}\b")


def _term_hit(token: str, term: str, allow_prefix: bool) -> bool:
    if token == term:
        return True
    if len(token) < FUZZY_MIN_LENGTH or len(term) < FUZZY_MIN_LENGTH:
        return False
    if allow_prefix and token.startswith(term):
        return True
    return levenshtein(token, term) <= min(1, int(0.3 * len(term)))


def mentioned_terms(
    text: str,
    terms: Iterable[str],
    allow_prefix: bool = False,
) -> list[str]:
    """Terms from ``terms`` that ``text`` mentions.

    Multi-word terms are matched as phrases in the normalized text; single
    words match a token exactly, by one edit, or (with ``allow_prefix``) as
    the start of a longer token ("shut" in "shutdown").
    """
    normalized = " ".join(strip_punctuation(text.lower()).split())
    tokens = set(normalized.split())
    hits = []
    for term in terms:
        if " " in term:
            if term in normalized:
                hits.append(term)
        elif any(_term_hit(token, term, allow_prefix) for token in tokens):
            hits.append(term)
    return hits


def claim_terms(claim: str) -> list[str]:
    """Content words of a claim used to judge evidence relevance."""
    framing = {p for p in ALARMIST_PHRASES if " " not in p}
    return [
        token
        for token in dict.fromkeys(tokenize_words(claim, CLAIM_TERM_MIN_LENGTH))
        if token not in CLAIM_STOPWORDS and token not in framing
    ]


def relevance(terms: Sequence[str], text: str) -> float:
    """Fraction of claim terms that appear (lexically) in ``text``."""
    if not terms:
        return 0.0
    text_tokens = set(tokenize_words(text, 3))
    hits = sum(1 for term in terms if any(tokens_match(term, t) for t in text_tokens))
    return hits / len(terms)


def _has_marker(text: str, markers: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(marker in lowered for marker in markers)


class VerdictPolicy:
    """Stance assessment and tallying rules."""

    def __init__(
        self,
        relevance_threshold: float = 0.5,
        hoax_without_corroboration: int = 70,
        unable_confidence: int = 20,
    ) -> None:
        """Initialize VerdictPolicy.

        Args:
            relevance_threshold: Minimum share of claim terms an evidence text
                                 must contain to take a stance.
            hoax_without_corroboration: Confidence of the dramatic-claim HOAX.
            unable_confidence: Confidence of UNABLE_TO_VERIFY.
        """
        self.relevance_threshold = relevance_threshold
        self.hoax_without_corroboration = hoax_without_corroboration
        self.unable_confidence = unable_confidence
        self._logger = structlog.get_logger().bind(component="VerdictPolicy")

    # ── Claim framing ──────────────────────────────────────────────────

    def is_alarmist(self, claim: str) -> bool:
        """Chain-message framing: urgency words, "!!", or shouted words."""
        if "!!" in claim:
            return True
        if len(_SHOUTED_WORD.findall(claim)) >= 2:
            return True
        return bool(mentioned_terms(claim, ALARMIST_PHRASES))

    def describes_disruption(self, claim: str) -> bool:
        """Closures, cancellations, postponements and similar events."""
        return bool(mentioned_terms(claim, DISRUPTION_TERMS, allow_prefix=True))

    def is_reference_question(self, claim: str) -> bool:
        return bool(mentioned_terms(claim, ACADEMIC_REFERENCE_TERMS))

    # ── Short-circuits ─────────────────────────────────────────────────

    def decide_from_media(
        self,
        analysis: Optional[MediaAnalysis],
        trigger_keywords: Sequence[str],
    ) -> Optional[Decision]:
        """HOAX when attached media is evidently not a genuine notice.

        Returns None when media is unavailable or passes every check.
        """
        if analysis is None:
            return None

        reasoning = None
        confidence = 85
        if analysis.appears_official == "NO":
            reasoning = "The attached document has no official markers"
            confidence = 90
        elif not analysis.readable:
            reasoning = "The attached media is unreadable"
        elif trigger_keywords and not mentioned_terms(
            analysis.extracted_text, trigger_keywords, allow_prefix=True
        ):
            reasoning = "The attached document does not say what the message claims"

        if reasoning is None:
            return None

        self._logger.info("media_fraud_detected", reasoning=reasoning)
        return Decision(
            verdict=Verdict.HOAX,
            confidence=confidence,
            primary_source=MEDIA_SOURCE,
            reasoning=reasoning,
            decided_by="media",
        )

    def decide_from_local(
        self,
        claim: str,
        retrieval: Optional[RetrievalResult],
    ) -> Optional[Decision]:
        """VERIFIED from the local corpus for plain reference questions."""
        if retrieval is None or not retrieval.has_relevant_results:
            return None
        if not self.is_reference_question(claim):
            return None
        if self.is_alarmist(claim) or self.describes_disruption(claim):
            return None

        best = retrieval.best
        return Decision(
            verdict=Verdict.VERIFIED,
            confidence=85,
            primary_source=best.source_name,
            reasoning=f"Found in the local reference document {best.source_name}",
            decided_by="local",
            assessments=[self.assess_local(claim, retrieval)],
        )

    # ── Stance assessment ──────────────────────────────────────────────

    def assess_local(self, claim: str, retrieval: RetrievalResult) -> SourceAssessment:
        name = "local_documents"
        if not retrieval.has_relevant_results:
            return SourceAssessment(source_name=name)

        best = retrieval.best
        stance, score = self._text_stance(claim_terms(claim), best.text)
        return SourceAssessment(
            source_name=name,
            stance=stance,
            domains=[f"local:{best.source_name}"] if stance != Stance.NEUTRAL else [],
            relevance=score,
            citation=best.source_name,
            is_official=True,
            summary=best.text[:200],
        )

    def assess(
        self,
        claim: str,
        result: EvidenceResult,
        high_precision: bool = False,
    ) -> SourceAssessment:
        """Stance of one evidence result toward ``claim``."""
        if result.review_status is not None:
            return self._assess_video(claim, result)
        if not result.found or not result.items:
            return SourceAssessment(
                source_name=result.source_name, high_precision=high_precision
            )
        if high_precision:
            return self._assess_answer(claim, result)

        terms = claim_terms(claim)
        sides: dict[Stance, list[EvidenceItem]] = {
            Stance.SUPPORTS: [],
            Stance.CONTRADICTS: [],
        }
        best_score = 0.0
        for item in result.items:
            stance, score = self._text_stance(terms, f"{item.title} {item.content}")
            best_score = max(best_score, score)
            if stance != Stance.NEUTRAL:
                sides[stance].append(item)

        supporting = self._domains(sides[Stance.SUPPORTS], result.source_name)
        contradicting = self._domains(sides[Stance.CONTRADICTS], result.source_name)
        if len(supporting) > len(contradicting):
            stance, winners, domains = Stance.SUPPORTS, sides[Stance.SUPPORTS], supporting
        elif len(contradicting) > len(supporting):
            stance, winners, domains = (
                Stance.CONTRADICTS,
                sides[Stance.CONTRADICTS],
                contradicting,
            )
        else:
            stance, winners, domains = Stance.NEUTRAL, [], []

        official = [item for item in winners if item.is_official]
        cited = (official or winners or [None])[0]
        return SourceAssessment(
            source_name=result.source_name,
            stance=stance,
            domains=domains,
            relevance=round(best_score, 2),
            citation=cited.url if cited else None,
            is_official=bool(official),
            summary=cited.title if cited else "",
        )

    def _assess_answer(self, claim: str, result: EvidenceResult) -> SourceAssessment:
        answer = result.items[0]
        score = relevance(claim_terms(claim), answer.content)
        if _has_marker(answer.content, UNCERTAINTY_MARKERS):
            stance = Stance.NEUTRAL
        elif _has_marker(answer.content, DENIAL_MARKERS):
            stance = Stance.CONTRADICTS
        elif score >= self.relevance_threshold:
            stance = Stance.SUPPORTS
        else:
            stance = Stance.NEUTRAL

        citation = answer.url or None
        origin = answer.domain or result.source_name
        return SourceAssessment(
            source_name=result.source_name,
            stance=stance,
            domains=[origin] if stance != Stance.NEUTRAL else [],
            relevance=round(score, 2),
            high_precision=True,
            citation=citation,
            summary=answer.content[:200],
        )

    def _assess_video(self, claim: str, result: EvidenceResult) -> SourceAssessment:
        origin = result.sources_checked[0] if result.sources_checked else result.source_name
        if result.review_status == VIDEO_NOT_FOUND:
            return SourceAssessment(
                source_name=result.source_name,
                stance=Stance.CONTRADICTS,
                domains=[origin],
                citation=origin,
                summary="The referenced video does not exist or is private",
            )
        if result.review_status != PENDING_REVIEW or not result.items:
            return SourceAssessment(source_name=result.source_name)

        video = result.items[0]
        stance, score = self._text_stance(claim_terms(claim), video.content)
        if stance == Stance.NEUTRAL:
            # A video that never discusses the claim does not back it
            stance = Stance.CONTRADICTS
        return SourceAssessment(
            source_name=result.source_name,
            stance=stance,
            domains=[video.url or origin],
            relevance=round(score, 2),
            citation=video.url or origin,
            summary=video.title,
        )

    def _text_stance(self, terms: Sequence[str], text: str) -> tuple[Stance, float]:
        score = relevance(terms, text)
        if score < self.relevance_threshold:
            return Stance.NEUTRAL, score
        if _has_marker(text, DENIAL_MARKERS):
            return Stance.CONTRADICTS, score
        return Stance.SUPPORTS, score

    @staticmethod
    def _domains(items: Sequence[EvidenceItem], fallback: str) -> list[str]:
        return list(dict.fromkeys(item.domain or fallback for item in items))

    # ── Tally ──────────────────────────────────────────────────────────

    def decide(
        self,
        claim: str,
        results: Sequence[EvidenceResult],
        retrieval: Optional[RetrievalResult] = None,
        high_precision_sources: Iterable[str] = (),
    ) -> Decision:
        """Tally stances across every source and pick a verdict.

        Args:
            claim: Claim text.
            results: External evidence, one result per source.
            retrieval: Local corpus result, counted as one more origin.
            high_precision_sources: Names of sources acting as tiebreaker.

        Returns:
            Decision with clamped confidence.
        """
        hp_names = set(high_precision_sources)
        assessments = [
            self.assess(claim, result, high_precision=result.source_name in hp_names)
            for result in results
        ]
        if retrieval is not None:
            assessments.append(self.assess_local(claim, retrieval))

        support = self._origins(assessments, Stance.SUPPORTS)
        contra = self._origins(assessments, Stance.CONTRADICTS)
        hp = next((a for a in assessments if a.high_precision), None)
        hp_stance = hp.stance if hp else Stance.NEUTRAL

        decision = self._tally(claim, assessments, support, contra, hp_stance)
        self._logger.info(
            "verdict_decided",
            verdict=decision.verdict.value,
            confidence=decision.confidence,
            supporting=len(support),
            contradicting=len(contra),
            high_precision_stance=hp_stance.value,
            decided_by=decision.decided_by,
        )
        return decision

    def _tally(
        self,
        claim: str,
        assessments: list[SourceAssessment],
        support: list[str],
        contra: list[str],
        hp_stance: Stance,
    ) -> Decision:
        n_support, n_contra = len(support), len(contra)

        if max(n_support, n_contra) >= 2 and n_support != n_contra:
            verdict = Verdict.VERIFIED if n_support > n_contra else Verdict.HOAX
            agreeing = max(n_support, n_contra)
            confidence = 85 + 5 * (agreeing - 2)
            if min(n_support, n_contra):
                confidence -= 5
            stance = Stance.SUPPORTS if verdict is Verdict.VERIFIED else Stance.CONTRADICTS
            action = "confirm" if verdict is Verdict.VERIFIED else "contradict"
            return Decision(
                verdict=verdict,
                confidence=min(max(confidence, 85), 95),
                primary_source=self._primary(assessments, stance),
                reasoning=f"{agreeing} independent sources {action} the claim",
                assessments=assessments,
            )

        if n_support or n_contra:
            leaning = None
            if n_support > n_contra:
                leaning = Verdict.VERIFIED
            elif n_contra > n_support:
                leaning = Verdict.HOAX

            if hp_stance is Stance.SUPPORTS:
                verdict, confidence = Verdict.VERIFIED, 70 if leaning is Verdict.VERIFIED else 55
            elif hp_stance is Stance.CONTRADICTS:
                verdict, confidence = Verdict.HOAX, 70 if leaning is Verdict.HOAX else 55
            elif leaning is not None:
                verdict, confidence = leaning, 60
            else:
                verdict = None

            if verdict is not None:
                stance = Stance.SUPPORTS if verdict is Verdict.VERIFIED else Stance.CONTRADICTS
                primary = self._primary(assessments, stance)
                action = "Confirmed" if verdict is Verdict.VERIFIED else "Contradicted"
                return Decision(
                    verdict=verdict,
                    confidence=confidence,
                    primary_source=primary,
                    reasoning=f"{action} by {primary or 'a single source'}",
                    assessments=assessments,
                )

        if self.is_alarmist(claim) or self.describes_disruption(claim):
            return Decision(
                verdict=Verdict.HOAX,
                confidence=self.hoax_without_corroboration,
                primary_source=PRIMARY_OFFICIAL_SITE,
                reasoning="No official announcement confirms this claim",
                decided_by="no_corroboration",
                assessments=assessments,
            )

        return Decision(
            verdict=Verdict.UNABLE_TO_VERIFY,
            confidence=self.unable_confidence,
            primary_source=None,
            reasoning="No evidence found in any source",
            decided_by="no_corroboration",
            assessments=assessments,
        )

    @staticmethod
    def _origins(assessments: Sequence[SourceAssessment], stance: Stance) -> list[str]:
        origins: dict[str, None] = {}
        for assessment in assessments:
            if assessment.stance == stance:
                origins.update(dict.fromkeys(assessment.domains or [assessment.source_name]))
        return list(origins)

    @staticmethod
    def _primary(assessments: Sequence[SourceAssessment], stance: Stance) -> Optional[str]:
        agreeing = [a for a in assessments if a.stance == stance and a.citation]
        for preferred in (
            [a for a in agreeing if a.is_official],
            [a for a in agreeing if a.high_precision],
            agreeing,
        ):
            if preferred:
                return preferred[0].citation
        return None
