"""Natural-language wording of an already computed verdict.

The model may rephrase but never decide. Replies that lose the verdict
marker (or carry a different verdict) are replaced by the deterministic
template, so the user-facing text always matches the logged verdict.
"""

import re
from typing import Optional

import structlog

from truth_sentinel.config.official_sources import PRIMARY_OFFICIAL_SITE
from truth_sentinel.config.prompts import VERDICT_PHRASING_PROMPT
from truth_sentinel.llm.gemini_client import GeminiClient, get_client
from truth_sentinel.orchestration.schemas import Decision
from truth_sentinel.orchestration.states import Verdict

VERDICT_MARKERS = {
    Verdict.HOAX: "🚨 HOAX",
    Verdict.VERIFIED: "✅ VERIFIED",
    Verdict.UNABLE_TO_VERIFY: "ℹ️",
}

APOLOGY_TEXT = (
    "⚠️ I encountered an error while verifying this information. "
    "Please try again later."
)

NO_INFO_TEXT = f"ℹ️ No official info found. Check {PRIMARY_OFFICIAL_SITE} for updates."

MAX_REPLY_CHARS = 500


def template_reply(decision: Decision) -> str:
    """Deterministic reply for a decision."""
    if decision.verdict is Verdict.UNABLE_TO_VERIFY:
        return NO_INFO_TEXT

    marker = VERDICT_MARKERS[decision.verdict]
    fact = decision.reasoning.rstrip(".") or "See the official source"
    source = decision.primary_source or PRIMARY_OFFICIAL_SITE
    return f"{marker} - {fact}. Source: {source}"


def _names_verdict(upper_text: str, word: str) -> bool:
    # "UNVERIFIED", "NOT VERIFIED" and "NOT A HOAX" do not name the verdict
    pattern = rf"(?<!NOT )(?<!NOT A )\b{word}\b"
    return re.search(pattern, upper_text) is not None


def carries_verdict(text: str, verdict: Verdict) -> bool:
    """True if ``text`` shows the marker of ``verdict`` and no other verdict word."""
    if VERDICT_MARKERS[verdict] not in text:
        return False
    upper = text.upper()
    others = {"HOAX", "VERIFIED"} - {verdict.value}
    return not any(_names_verdict(upper, word) for word in others)


class VerdictPhraser:
    """Words a Decision for the chat, with a template fallback."""

    def __init__(
        self,
        client: Optional[GeminiClient] = None,
        use_model: bool = True,
        temperature: float = 0.3,
    ) -> None:
        """Initialize VerdictPhraser.

        Args:
            client: Gemini client. Resolved from settings when omitted.
            use_model: False forces the deterministic template.
            temperature: Sampling temperature for the wording call.
        """
        self._client = client
        self.use_model = use_model
        self.temperature = temperature
        self._logger = structlog.get_logger().bind(component="VerdictPhraser")

    @property
    def client(self) -> Optional[GeminiClient]:
        if not self.use_model:
            return None
        if self._client is None:
            self._client = get_client()
        return self._client

    async def phrase(
        self,
        message_text: str,
        decision: Decision,
        recommendation: str = "",
    ) -> str:
        """Reply text for ``decision``.

        Returns:
            Model wording when it keeps the verdict marker, the template when
            no model is configured or the wording drifts, and the apology
            when the model call fails or returns nothing.
        """
        client = self.client
        if client is None:
            return template_reply(decision)

        marker = VERDICT_MARKERS[decision.verdict]
        prompt = VERDICT_PHRASING_PROMPT.format(
            message=message_text[:1000],
            verdict=decision.verdict.value,
            confidence=decision.confidence,
            primary_source=decision.primary_source or PRIMARY_OFFICIAL_SITE,
            reasoning=decision.reasoning,
            evidence_digest=self.evidence_digest(decision),
            recommendation=recommendation or "none",
            marker=marker,
        )

        try:
            text = await client.agenerate_content(prompt, temperature=self.temperature)
        except Exception as e:
            self._logger.error("phrasing_failed", error=str(e))
            return APOLOGY_TEXT

        text = (text or "").strip()
        if not text:
            self._logger.warning("phrasing_empty")
            return APOLOGY_TEXT

        if not carries_verdict(text, decision.verdict):
            self._logger.warning(
                "phrasing_verdict_mismatch", verdict=decision.verdict.value
            )
            return template_reply(decision)

        return text[:MAX_REPLY_CHARS]

    @staticmethod
    def evidence_digest(decision: Decision) -> str:
        lines = [
            f"- {a.source_name}: {a.stance.value}"
            + (f" ({a.citation})" if a.citation else "")
            + (f": {a.summary[:160]}" if a.summary else "")
            for a in decision.assessments
        ]
        return "\n".join(lines) or "- no external evidence"
