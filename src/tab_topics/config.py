"""
Configuration management for the application.
"""

import logging
from enum import Enum
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Provider(str, Enum):
    """Which pipeline assigns topics to tabs."""
    LOCAL = "local"
    REMOTE = "remote"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Provider selection
    ai_provider: Provider = Provider.LOCAL

    # Remote classifier (Gemini)
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com"
    remote_timeout: float = 30.0

    # Local models (any OpenAI-compatible endpoint, e.g. an on-device server)
    openai_api_key: Optional[str] = None
    openai_base_url: Optional[str] = None
    openai_embedding_model: str = "text-embedding-3-small"
    openai_llm_model: str = "gpt-4o-mini"
    model_timeout: float = 60.0
    embed_urls: bool = False

    # Pipeline tuning
    similarity_threshold: float = 0.45
    group_similarity_threshold: float = 0.65
    existing_group_boost: float = 0.1
    fuzzy_match_threshold: float = 0.7
    consolidation_distance_threshold: int = 2
    embedding_batch_size: int = 5
    keyword_count: int = 5
    naming_max_tokens: int = 8
    naming_temperature: float = 0.7

    # Logging
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )


# Global settings instance
settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create the global settings instance."""
    global settings
    if settings is None:
        settings = Settings()
    return settings


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure application-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)
