"""Shared utilities: structured logging and lexical matching."""

from truth_sentinel.utils.lexical import (
    fuzzy_match,
    levenshtein,
    tokenize_words,
    tokens_match,
)

__all__ = ["fuzzy_match", "levenshtein", "tokenize_words", "tokens_match"]
