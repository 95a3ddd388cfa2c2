"""Cheap local admission control run before any paid API call.

Every message in a busy group chat would otherwise trigger the full
verification pipeline. The gatekeeper decides, without network access,
whether a message is worth verifying:

1. Image or document attached -> HIGH
2. Forwarded -> MEDIUM
3. Three tokens or fewer, all casual -> SKIP
4. Panic keyword found (fuzzy, catches misspellings) -> HIGH
5. Anything else -> SKIP

The first matching rule wins.

Usage:
    from truth_sentinel.gatekeeper import Gatekeeper, Message

    decision = Gatekeeper().classify(Message(text="exms postponed??"))
"""

from typing import Iterable, Optional

import structlog

from truth_sentinel.config.keywords import CASUAL_WORDS, PANIC_KEYWORDS
from truth_sentinel.gatekeeper.schemas import GatekeeperDecision, Message, Priority
from truth_sentinel.utils.lexical import FUZZY_MIN_LENGTH, fuzzy_match, strip_punctuation

MAX_CASUAL_TOKENS = 3


class Gatekeeper:
    """Keyword and fuzzy-match classifier for inbound messages.

    Word lists default to truth_sentinel.config.keywords and can be replaced
    per instance.
    """

    def __init__(
        self,
        panic_keywords: Optional[Iterable[str]] = None,
        casual_words: Optional[Iterable[str]] = None,
        max_distance: int = 2,
    ) -> None:
        keywords = [k.lower() for k in (panic_keywords or PANIC_KEYWORDS)]
        self.single_keywords = [k for k in keywords if " " not in k]
        self.phrase_keywords = [k for k in keywords if " " in k]
        self.casual_words = [w.lower() for w in (casual_words or CASUAL_WORDS)]
        self.max_distance = max_distance
        self._logger = structlog.get_logger().bind(component="Gatekeeper")

    def classify(self, message: Message) -> GatekeeperDecision:
        """Classify a message into skip or process-at-priority."""
        if message.has_media:
            self._logger.info(
                "media_detected",
                has_image=message.has_image,
                has_document=message.has_document,
            )
            return GatekeeperDecision(
                should_process=True,
                reason="media present",
                priority=Priority.HIGH,
            )

        if message.is_forwarded:
            self._logger.info("forwarded_message")
            return GatekeeperDecision(
                should_process=True,
                reason="forwarded",
                priority=Priority.MEDIUM,
            )

        text = message.combined_text.lower()
        tokens = [t for t in text.split() if t]

        if len(tokens) <= MAX_CASUAL_TOKENS and all(
            self._is_casual(t) for t in tokens
        ):
            self._logger.debug("casual_message", token_count=len(tokens))
            return GatekeeperDecision(
                should_process=False,
                reason="casual",
                priority=Priority.SKIP,
            )

        matched = self.match_keywords(text)
        if matched:
            self._logger.info("panic_keywords_detected", keywords=matched)
            return GatekeeperDecision(
                should_process=True,
                reason="keyword match",
                matched_keywords=matched,
                priority=Priority.HIGH,
            )

        self._logger.debug("neutral_message", token_count=len(tokens))
        return GatekeeperDecision(
            should_process=False,
            reason="neutral",
            priority=Priority.SKIP,
        )

    def match_keywords(self, text: str) -> list[str]:
        """Return panic keywords found in ``text``, de-duplicated in first-match order."""
        normalized = " ".join(strip_punctuation(text.lower()).split())
        matched: list[str] = []

        for token in normalized.split():
            for keyword in self.single_keywords:
                if keyword in matched:
                    continue
                if self._token_matches(token, keyword):
                    matched.append(keyword)

        padded = f" {normalized} "
        for phrase in self.phrase_keywords:
            phrase_norm = " ".join(strip_punctuation(phrase).split())
            if f" {phrase_norm} " in padded and phrase not in matched:
                matched.append(phrase)

        return matched

    def _token_matches(self, token: str, keyword: str) -> bool:
        # Short tokens ("the", "is") would otherwise hit longer keywords by containment
        if len(token) < FUZZY_MIN_LENGTH:
            return token == keyword
        return fuzzy_match(token, keyword, self.max_distance)

    def _is_casual(self, token: str) -> bool:
        word = strip_punctuation(token).strip()
        if not word:
            return True
        return any(word in casual for casual in self.casual_words)
