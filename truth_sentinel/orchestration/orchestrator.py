"""Verdict orchestrator: the claim verification state machine.

RECEIVED -> GATED -> MEDIA_CHECKED -> LOCAL_SEARCHED -> EXTERNALLY_SEARCHED
         -> DECIDED -> LOGGED -> DONE

Skipped messages stop after GATED and are never logged. Media fraud and
local reference answers jump straight to DECIDED. External sources run
concurrently under one time budget; sources still running when the budget
expires are cancelled and count as absent evidence.

Collaborators (index, sources, log, phraser, media, delivery) are injected,
so a process shares one DocumentIndex and one VerificationLog across
requests. No lock is held across a network call.

Usage:
    from truth_sentinel.orchestration import VerdictOrchestrator

    orchestrator = VerdictOrchestrator.from_settings()
    outcome = await orchestrator.process(Message(text="Exam postponed?"), "chat-42")
    print(outcome.response_text)
"""

import asyncio
from typing import Optional, Protocol, Sequence

import structlog

from truth_sentinel.config.settings import settings
from truth_sentinel.data_management.schemas import VerificationLogEntry
from truth_sentinel.data_management.verification_log import VerificationLog
from truth_sentinel.evidence.base import EvidenceSource
from truth_sentinel.evidence.media import GeminiMediaAnalyzer, MediaAnalysis, MediaFetcher
from truth_sentinel.evidence.perplexity import PerplexitySearchSource
from truth_sentinel.evidence.schemas import EvidenceResult
from truth_sentinel.evidence.web_search import ExaSearchSource, OfficialSourceSearch
from truth_sentinel.evidence.youtube import YouTubeVerificationSource, find_video_urls
from truth_sentinel.gatekeeper.gatekeeper import Gatekeeper
from truth_sentinel.gatekeeper.schemas import Message
from truth_sentinel.orchestration.phrasing import APOLOGY_TEXT, VerdictPhraser
from truth_sentinel.orchestration.policy import VerdictPolicy
from truth_sentinel.orchestration.schemas import Decision, VerificationOutcome
from truth_sentinel.orchestration.states import PipelineState, Verdict
from truth_sentinel.retrieval.document_index import DocumentIndex
from truth_sentinel.retrieval.schemas import RetrievalResult
from truth_sentinel.utils.logging import message_context, new_message_id

MEDIA_CLAIM_CHARS = 300


class DeliveryClient(Protocol):
    """Outbound collaborator that sends the reply to the conversation."""

    async def send(self, conversation_id: str, text: str) -> bool:
        ...


class VerdictOrchestrator:
    """Runs one message through admission, evidence, decision and logging."""

    def __init__(
        self,
        gatekeeper: Optional[Gatekeeper] = None,
        index: Optional[DocumentIndex] = None,
        sources: Optional[Sequence[EvidenceSource]] = None,
        video_source: Optional[YouTubeVerificationSource] = None,
        verification_log: Optional[VerificationLog] = None,
        policy: Optional[VerdictPolicy] = None,
        phraser: Optional[VerdictPhraser] = None,
        media_fetcher: Optional[MediaFetcher] = None,
        media_analyzer: Optional[GeminiMediaAnalyzer] = None,
        delivery: Optional[DeliveryClient] = None,
        evidence_budget: Optional[float] = None,
        media_timeout: Optional[float] = None,
    ) -> None:
        """Initialize VerdictOrchestrator.

        Args:
            gatekeeper: Admission control.
            index: Shared local document index.
            sources: External evidence sources run for every admitted claim.
                     The high-precision source is the tiebreaker.
            video_source: Consulted when the message links a video.
            verification_log: Shared learning log.
            policy: Verdict rules.
            phraser: Reply wording.
            media_fetcher: Resolves media handles into bytes.
            media_analyzer: Reads fetched media.
            delivery: Optional outbound collaborator.
            evidence_budget: Seconds allowed for the whole external step.
            media_timeout: Seconds allowed for fetching and reading media.
        """
        self.gatekeeper = gatekeeper or Gatekeeper()
        self.verification_log = verification_log or VerificationLog()
        self.index = index or DocumentIndex(exclude=[self.verification_log.path])
        self.sources = list(sources) if sources is not None else []
        self.video_source = video_source
        self.policy = policy or VerdictPolicy()
        self.phraser = phraser or VerdictPhraser()
        self.media_fetcher = media_fetcher
        self.media_analyzer = media_analyzer
        self.delivery = delivery
        self.evidence_budget = evidence_budget or settings.evidence_budget_seconds
        self.media_timeout = media_timeout or settings.search_timeout

    @classmethod
    def from_settings(
        cls,
        media_fetcher: Optional[MediaFetcher] = None,
        delivery: Optional[DeliveryClient] = None,
    ) -> "VerdictOrchestrator":
        """Orchestrator wired with every configured source."""
        verification_log = VerificationLog()
        return cls(
            index=DocumentIndex(exclude=[verification_log.path]),
            sources=[
                OfficialSourceSearch(),
                ExaSearchSource(),
                PerplexitySearchSource(),
            ],
            video_source=YouTubeVerificationSource(),
            verification_log=verification_log,
            media_fetcher=media_fetcher,
            media_analyzer=GeminiMediaAnalyzer(),
            delivery=delivery,
        )

    async def process(
        self,
        message: Message,
        conversation_id: Optional[str] = None,
    ) -> VerificationOutcome:
        """Verify one message. Never raises.

        Args:
            message: Normalized inbound message.
            conversation_id: Chat or thread id, used for log context and delivery.

        Returns:
            VerificationOutcome. An unexpected failure yields the apology text.
        """
        outcome = VerificationOutcome(
            conversation_id=conversation_id,
            message_id=new_message_id(),
            state_trail=[PipelineState.RECEIVED],
        )

        with message_context(conversation_id, outcome.message_id):
            logger = structlog.get_logger().bind(component="VerdictOrchestrator")
            try:
                await self._run(message, outcome, logger)
            except Exception as e:
                logger.error("pipeline_failed", error=str(e), exc_info=True)
                outcome.error = str(e)
                outcome.verdict = None
                outcome.response_text = APOLOGY_TEXT
                self._enter(outcome, PipelineState.DONE)

        return outcome

    async def _run(self, message: Message, outcome: VerificationOutcome, logger) -> None:
        if message.is_empty:
            self._skip(outcome, "empty")
            logger.info("message_skipped", reason="empty")
            return

        gate = self.gatekeeper.classify(message)
        outcome.gate = gate
        self._enter(outcome, PipelineState.GATED)

        if not gate.should_process:
            self._skip(outcome, gate.reason)
            logger.info("message_skipped", reason=gate.reason)
            return

        claim = message.combined_text or (message.reply_to_text or "")
        decision: Optional[Decision] = None

        analysis = await self._check_media(message, logger) if message.has_media else None
        self._enter(outcome, PipelineState.MEDIA_CHECKED)
        if analysis is not None:
            decision = self.policy.decide_from_media(
                analysis, self.gatekeeper.match_keywords(claim)
            )
            if not claim:
                claim = analysis.extracted_text[:MEDIA_CLAIM_CHARS]

        if decision is None and not claim.strip():
            # Media with no readable text and no message text
            decision = self.policy.decide(claim, [])

        if decision is None:
            retrieval = await self._search_local(claim, logger)
            self._enter(outcome, PipelineState.LOCAL_SEARCHED)
            if retrieval is not None and retrieval.best is not None:
                outcome.sources.append(retrieval.best.source_name)

            decision = self.policy.decide_from_local(claim, retrieval)

            if decision is None:
                evidence = await self._gather_evidence(claim, message, logger)
                outcome.evidence = evidence
                self._enter(outcome, PipelineState.EXTERNALLY_SEARCHED)
                for result in evidence:
                    outcome.sources.extend(result.sources_checked)
                decision = self.policy.decide(
                    claim,
                    evidence,
                    retrieval,
                    high_precision_sources=[s.name for s in self.sources if s.high_precision],
                )

        self._enter(outcome, PipelineState.DECIDED)
        outcome.verdict = decision.verdict
        outcome.confidence = decision.confidence
        outcome.primary_source = decision.primary_source
        outcome.reasoning = decision.reasoning
        if decision.primary_source:
            outcome.sources.insert(0, decision.primary_source)
        outcome.sources = list(dict.fromkeys(outcome.sources))

        outcome.insights = await self.verification_log.get_insights(claim)
        outcome.similar_cases = await self.verification_log.find_similar(claim)

        outcome.response_text = await self.phraser.phrase(
            claim, decision, recommendation=outcome.insights.recommendation
        )

        outcome.logged = await self.verification_log.append(
            VerificationLogEntry(
                claim=claim,
                verdict=decision.verdict.log_label,
                sources=outcome.sources,
                confidence=decision.confidence,
            )
        )
        if not outcome.logged:
            logger.warning("verdict_not_logged", verdict=decision.verdict.value)
        self._enter(outcome, PipelineState.LOGGED)

        logger.info(
            "message_verified",
            verdict=decision.verdict.value,
            confidence=decision.confidence,
            decided_by=decision.decided_by,
            logged=outcome.logged,
        )

        await self._deliver(outcome, logger)
        self._enter(outcome, PipelineState.DONE)

    async def _check_media(self, message: Message, logger) -> Optional[MediaAnalysis]:
        """Fetch and read attached media; None means media unavailable."""
        handle = message.image_handle or message.document_handle
        analyzer = self.media_analyzer
        if not handle or self.media_fetcher is None or analyzer is None:
            logger.warning("media_unavailable", reason="no_handle_or_collaborator")
            return None
        if not analyzer.is_configured:
            logger.warning("media_unavailable", reason="analyzer_not_configured")
            return None

        async def fetch_and_analyze() -> MediaAnalysis:
            payload = await self.media_fetcher.fetch(handle)
            return await analyzer.analyze(payload, caption=message.caption or "")

        try:
            return await asyncio.wait_for(fetch_and_analyze(), timeout=self.media_timeout)
        except asyncio.TimeoutError:
            logger.warning("media_unavailable", reason="timeout")
        except Exception as e:
            logger.warning("media_unavailable", reason="error", error=str(e))
        return None

    async def _search_local(self, claim: str, logger) -> Optional[RetrievalResult]:
        try:
            return await self.index.query(claim, top_k=3)
        except Exception as e:
            logger.warning("local_search_failed", error=str(e))
            return None

    async def _gather_evidence(
        self,
        claim: str,
        message: Message,
        logger,
    ) -> list[EvidenceResult]:
        """Run every source concurrently within the evidence budget."""
        names: list[str] = []
        calls = []
        for source in self.sources:
            names.append(source.name)
            calls.append(source.search(claim))

        video_urls = find_video_urls(f"{message.text} {message.caption or ''}")
        if self.video_source is not None and video_urls:
            names.append(self.video_source.name)
            calls.append(self.video_source.verify_video(video_urls[0], claim))

        if not calls:
            return []

        tasks = [asyncio.create_task(call) for call in calls]
        try:
            _, pending = await asyncio.wait(tasks, timeout=self.evidence_budget)
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            raise
        for task in pending:
            task.cancel()

        results = []
        for name, task in zip(names, tasks):
            if task in pending:
                logger.warning("evidence_budget_exceeded", source=name, budget=self.evidence_budget)
                results.append(EvidenceResult.empty(name, claim, error="budget_exceeded"))
            elif task.exception() is not None:
                logger.warning("search_failed", source=name, error=str(task.exception()))
                results.append(EvidenceResult.empty(name, claim, error=str(task.exception())))
            else:
                results.append(task.result())

        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        return results

    async def _deliver(self, outcome: VerificationOutcome, logger) -> None:
        if self.delivery is None or not outcome.conversation_id or not outcome.response_text:
            return
        try:
            outcome.delivered = await self.delivery.send(
                outcome.conversation_id, outcome.response_text
            )
        except Exception as e:
            logger.warning("delivery_failed", error=str(e))
            outcome.delivered = False

    @staticmethod
    def _enter(outcome: VerificationOutcome, state: PipelineState) -> None:
        outcome.state_trail.append(state)

    def _skip(self, outcome: VerificationOutcome, reason: str) -> None:
        outcome.skipped = True
        outcome.skip_reason = reason
        outcome.verdict = Verdict.SKIP
        self._enter(outcome, PipelineState.DONE)
