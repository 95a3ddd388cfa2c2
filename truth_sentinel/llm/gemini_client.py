"""Gemini API client with exponential backoff."""

import asyncio
import functools
import random
import time
from typing import Any, Callable, Optional, Sequence, Union

import google.generativeai as genai
from google.generativeai.types.generation_types import BlockedPromptException
from loguru import logger

from truth_sentinel.config.settings import settings

# Text prompt, or a sequence of parts (text and {"mime_type", "data"} blobs)
Prompt = Union[str, Sequence[Any]]

log = logger.bind(component="gemini")


def _exponential_backoff(func: Callable) -> Callable:
    """
    Decorator implementing exponential backoff with jitter for API calls.

    Retries failed requests up to 3 times with exponentially increasing delays.
    Base delay: 1.0s, exponential factor: 2, jitter: 0-10% of delay.
    Blocked prompts are never retried.

    Args:
        func: Function to wrap with retry logic

    Returns:
        Wrapped function with exponential backoff
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> Any:
        max_retries = 3
        base_delay = 1.0

        for retry in range(max_retries):
            try:
                return func(*args, **kwargs)
            except BlockedPromptException:
                raise
            except Exception as e:
                if retry == max_retries - 1:
                    log.error(f"Max retries exceeded for {func.__name__}: {e}")
                    raise

                delay = base_delay * (2 ** retry)
                jitter = random.uniform(0, delay * 0.1)
                total_delay = delay + jitter

                log.warning(
                    f"Retry {retry + 1}/{max_retries} for {func.__name__} "
                    f"after {total_delay:.2f}s: {e}"
                )
                time.sleep(total_delay)

        raise RuntimeError(f"Unexpected retry loop exit in {func.__name__}")

    return wrapper


class GeminiClient:
    """
    Google Gemini API client used for verdict wording and media analysis.

    Attributes:
        model_name: Gemini model identifier
        model: Configured Gemini generative model instance
    """

    def __init__(self, api_key: Optional[str] = None, model_name: Optional[str] = None):
        """
        Initialize Gemini client.

        Args:
            api_key: API key, defaults to settings.gemini_api_key
            model_name: Model identifier, defaults to settings.gemini_model

        Raises:
            ValueError: If API key is not configured
        """
        api_key = api_key or settings.gemini_api_key
        if not api_key:
            raise ValueError("GEMINI_API_KEY not configured in environment")

        genai.configure(api_key=api_key)

        self.model_name = model_name or settings.gemini_model
        self.model = genai.GenerativeModel(self.model_name)

        log.info(
            f"Gemini client initialized with model {self.model_name}"
        )

    @_exponential_backoff
    def generate_content(self, prompt: Prompt, temperature: float = 0.3) -> str:
        """
        Generate content from Gemini API with exponential backoff.

        Args:
            prompt: Text prompt or list of content parts (text and inline blobs)
            temperature: Sampling temperature (0.0-1.0). Lower = more deterministic

        Returns:
            Generated text content, stripped

        Raises:
            BlockedPromptException: If prompt violates safety policies
            Exception: For other API errors after retries exhausted
        """
        try:
            response = self.model.generate_content(
                prompt,
                generation_config=genai.types.GenerationConfig(
                    temperature=temperature,
                )
            )
            return (response.text or "").strip()
        except BlockedPromptException as e:
            log.error(f"Prompt blocked by safety filters: {e}")
            raise

    async def agenerate_content(self, prompt: Prompt, temperature: float = 0.3) -> str:
        """Run generate_content in a worker thread so the event loop stays free."""
        return await asyncio.to_thread(self.generate_content, prompt, temperature)


_client: Optional[GeminiClient] = None


def get_client() -> Optional[GeminiClient]:
    """
    Return the shared client, creating it on first use.

    Returns:
        GeminiClient, or None when GEMINI_API_KEY is not configured
    """
    global _client
    if _client is None and settings.gemini_api_key:
        _client = GeminiClient()
    return _client
