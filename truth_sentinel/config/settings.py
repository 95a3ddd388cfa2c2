"""Application settings using Pydantic BaseSettings for environment variable management."""

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Every external credential is optional. A missing key degrades the
    matching evidence source to empty results instead of failing startup.

    Attributes:
        gemini_api_key: Google Gemini API key (verdict wording, media analysis)
        gemini_model: Default Gemini model to use
        exa_api_key: Exa API key for neural and official-domain web search
        perplexity_api_key: Perplexity API key for high-precision verification
        youtube_api_key: YouTube Data API key for video verification
        telegram_bot_token: Telegram bot token for media download and delivery
        data_dir: Directory holding the local reference corpus
        learning_log_path: JSON file backing the verification log
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
    """

    gemini_api_key: str | None = Field(
        default=None,
        description="Google Gemini API key"
    )
    gemini_model: str = Field(
        default="gemini-2.0-flash",
        description="Default Gemini model identifier"
    )
    exa_api_key: str | None = Field(
        default=None,
        description="Exa API key for web search"
    )
    exa_base_url: str = Field(
        default="https://api.exa.ai",
        description="Exa REST API base URL"
    )
    perplexity_api_key: str | None = Field(
        default=None,
        description="Perplexity API key for high-precision verification"
    )
    perplexity_model: str = Field(
        default="sonar-pro",
        description="Perplexity chat completion model"
    )
    youtube_api_key: str | None = Field(
        default=None,
        description="YouTube Data API v3 key"
    )
    telegram_bot_token: str | None = Field(
        default=None,
        description="Telegram bot token"
    )
    data_dir: str = Field(
        default="data",
        description="Local reference corpus directory"
    )
    learning_log_path: str = Field(
        default="data/learning_log.json",
        description="Verification log file"
    )
    chunk_size: int = Field(
        default=500,
        description="Target chunk size in characters"
    )
    chunk_overlap: int = Field(
        default=100,
        description="Overlap between consecutive chunks in characters"
    )
    search_timeout: float = Field(
        default=20.0,
        description="Per-source evidence search timeout in seconds"
    )
    evidence_budget_seconds: float = Field(
        default=45.0,
        description="Overall budget for the external evidence step"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: json or console"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


# Singleton instance - import this throughout the application
settings = Settings()
