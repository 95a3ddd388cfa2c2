"""Configuration: environment settings, keyword lists, trusted domains, prompts."""

from truth_sentinel.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
