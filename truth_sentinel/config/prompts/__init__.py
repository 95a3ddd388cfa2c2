"""Prompt templates for the language-model collaborators.

Modules:
    verdict_prompts: verdict phrasing and media analysis prompts
"""

from truth_sentinel.config.prompts.verdict_prompts import (
    MEDIA_ANALYSIS_PROMPT,
    VERDICT_PHRASING_PROMPT,
)

__all__ = [
    "MEDIA_ANALYSIS_PROMPT",
    "VERDICT_PHRASING_PROMPT",
]
