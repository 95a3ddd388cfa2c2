"""Tests for the Gatekeeper admission classifier.

Tests cover:
- Rule order (media, forwarded, casual, keyword, neutral)
- Fuzzy keyword detection and de-duplication order
- Phrase keywords
- Decision invariants
"""

import pytest
from pydantic import ValidationError

from truth_sentinel.gatekeeper import Gatekeeper, GatekeeperDecision, Message, Priority


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def gatekeeper() -> Gatekeeper:
    return Gatekeeper()


# ── Media and forwarding ──────────────────────────────────────────────────


class TestMediaAndForwarding:
    @pytest.mark.parametrize(
        "message",
        [
            Message(has_image=True),
            Message(has_document=True),
            Message(text="hi", has_image=True),
            Message(text="hello", has_document=True, is_forwarded=True),
        ],
    )
    def test_media_always_high(self, gatekeeper: Gatekeeper, message: Message) -> None:
        decision = gatekeeper.classify(message)
        assert decision.should_process is True
        assert decision.priority == Priority.HIGH
        assert decision.reason == "media present"

    def test_forwarded_is_medium(self, gatekeeper: Gatekeeper) -> None:
        decision = gatekeeper.classify(Message(text="ok", is_forwarded=True))
        assert decision.should_process is True
        assert decision.priority == Priority.MEDIUM
        assert decision.reason == "forwarded"


# ── Casual messages ───────────────────────────────────────────────────────


class TestCasual:
    @pytest.mark.parametrize("text", ["hi", "ok thanks", "hello bot", "haha lol ok", "Thanks!"])
    def test_short_casual_skipped(self, gatekeeper: Gatekeeper, text: str) -> None:
        decision = gatekeeper.classify(Message(text=text))
        assert decision.should_process is False
        assert decision.priority == Priority.SKIP
        assert decision.reason == "casual"

    def test_four_casual_tokens_not_casual(self, gatekeeper: Gatekeeper) -> None:
        decision = gatekeeper.classify(Message(text="hi hello ok thanks"))
        assert decision.reason == "neutral"

    @pytest.mark.parametrize("text", ["Notice", "announcement", "no notice?", "ok announcement"])
    def test_keyword_containing_casual_word_is_processed(
        self, gatekeeper: Gatekeeper, text: str
    ) -> None:
        # "notice" and "announcement" both contain the casual word "no"
        decision = gatekeeper.classify(Message(text=text))
        assert decision.should_process is True
        assert decision.reason == "keyword match"
        assert decision.priority == Priority.HIGH

    def test_caption_counts_toward_tokens(self, gatekeeper: Gatekeeper) -> None:
        decision = gatekeeper.classify(Message(text="ok", caption="exam postponed"))
        assert decision.reason == "keyword match"


# ── Keywords ──────────────────────────────────────────────────────────────


class TestKeywords:
    def test_keyword_match(self, gatekeeper: Gatekeeper) -> None:
        decision = gatekeeper.classify(Message(text="Is the exam postponed to next week?"))
        assert decision.should_process is True
        assert decision.priority == Priority.HIGH
        assert decision.reason == "keyword match"
        assert "exam" in decision.matched_keywords
        assert "postponed" in decision.matched_keywords

    def test_misspelled_keywords_detected(self, gatekeeper: Gatekeeper) -> None:
        decision = gatekeeper.classify(Message(text="exms postpned again"))
        assert decision.should_process is True
        assert "exams" in decision.matched_keywords
        assert "postponed" in decision.matched_keywords

    def test_matches_deduplicated_in_first_match_order(self, gatekeeper: Gatekeeper) -> None:
        matched = gatekeeper.match_keywords("syllabus exam syllabus exam")
        assert matched.index("syllabus") < matched.index("exam")
        assert len(matched) == len(set(matched))

    def test_phrase_keyword(self, gatekeeper: Gatekeeper) -> None:
        assert "is it true" in gatekeeper.match_keywords("Is it true, guys?")

    def test_short_tokens_do_not_hit_by_containment(self, gatekeeper: Gatekeeper) -> None:
        assert gatekeeper.match_keywords("the is on at") == []

    def test_neutral_message_skipped(self, gatekeeper: Gatekeeper) -> None:
        decision = gatekeeper.classify(Message(text="what are you all doing this evening"))
        assert decision.should_process is False
        assert decision.reason == "neutral"

    def test_custom_keywords(self) -> None:
        gatekeeper = Gatekeeper(panic_keywords=["strike"])
        decision = gatekeeper.classify(Message(text="bus strike tomorrow they say"))
        assert decision.matched_keywords == ["strike"]
        assert gatekeeper.classify(Message(text="exam postponed they say")).reason == "neutral"


# ── Decision invariants ───────────────────────────────────────────────────


class TestDecisionInvariant:
    def test_skip_requires_not_processed(self) -> None:
        with pytest.raises(ValidationError):
            GatekeeperDecision(should_process=True, reason="x", priority=Priority.SKIP)
        with pytest.raises(ValidationError):
            GatekeeperDecision(should_process=False, reason="x", priority=Priority.HIGH)

    def test_decision_is_frozen(self, gatekeeper: Gatekeeper) -> None:
        decision = gatekeeper.classify(Message(text="hi"))
        with pytest.raises(ValidationError):
            decision.reason = "changed"
