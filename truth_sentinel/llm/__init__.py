"""Language-model collaborators."""

from truth_sentinel.llm.gemini_client import GeminiClient, get_client

__all__ = ["GeminiClient", "get_client"]
