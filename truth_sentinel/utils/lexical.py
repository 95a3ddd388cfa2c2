"""Lexical term matching shared by the gatekeeper, retrieval and learning log.

Matching is deliberately cheap: exact equality, substring containment in
either direction, then bounded Levenshtein distance (rapidfuzz) for words of
four or more characters. Short words never fuzzy-match, so "ok" and "no"
cannot drift onto real keywords.
"""

import re
from typing import Optional

from rapidfuzz.distance import Levenshtein

_NON_WORD = re.compile(r"[^\w\s]")

FUZZY_MIN_LENGTH = 4


def levenshtein(a: str, b: str, score_cutoff: Optional[int] = None) -> int:
    """Edit distance with unit insert, delete and substitute costs.

    With ``score_cutoff`` set, any distance above it is reported as
    ``score_cutoff + 1``.
    """
    return Levenshtein.distance(a, b, score_cutoff=score_cutoff)


def fuzzy_match(word: str, term: str, max_distance: int = 2) -> bool:
    """Return True if ``word`` matches ``term`` exactly, by containment, or by edit distance.

    Args:
        word: Candidate word from the message.
        term: Reference term (keyword).
        max_distance: Upper bound on accepted edit distance.

    Returns:
        True when any of the three rules accepts the pair.
    """
    if word == term:
        return True
    if word in term or term in word:
        return True
    if len(word) < FUZZY_MIN_LENGTH or len(term) < FUZZY_MIN_LENGTH:
        return False

    allowed = min(max_distance, int(0.3 * len(term)))
    if abs(len(word) - len(term)) > allowed:
        return False
    return levenshtein(word, term, score_cutoff=allowed) <= allowed


def tokens_match(a: str, b: str) -> bool:
    """Token equivalence for claim similarity.

    Tokens shorter than three characters ("to", "is") are compared exactly;
    longer tokens go through fuzzy_match so "exams"/"exam" and
    "december"/"dec" count as the same word.
    """
    if a == b:
        return True
    if len(a) < 3 or len(b) < 3:
        return False
    return fuzzy_match(a, b)


def strip_punctuation(text: str) -> str:
    """Replace every non-word, non-space character with a space."""
    return _NON_WORD.sub(" ", text)


def tokenize_words(text: str, min_length: int = 1) -> list[str]:
    """Lower-case alphanumeric tokens whose length is at least ``min_length``."""
    return [
        token
        for token in strip_punctuation(text.lower()).split()
        if len(token) >= min_length
    ]
