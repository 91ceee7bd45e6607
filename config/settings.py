"""
Settings configuration for Deckflow.

All scoring weights, thresholds and slide limits live here so they can be
tuned from the environment (or a .env file) without code changes.
"""
from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field


class Settings(BaseSettings):
    """Application settings."""

    # App settings
    APP_ENV: str = Field("development", env="APP_ENV")
    DEBUG: bool = Field(True, env="DEBUG")
    LOG_LEVEL: str = Field("INFO", env="LOG_LEVEL")

    # API settings
    API_ENABLED: bool = Field(True, env="API_ENABLED")
    API_HOST: str = Field("0.0.0.0", env="API_HOST")
    API_PORT: int = Field(8000, validation_alias=AliasChoices("PORT", "API_PORT"))

    # Finished runs kept in memory by the API
    RUN_RETENTION_MINUTES: int = Field(60, ge=0, env="RUN_RETENTION_MINUTES")
    MAX_STORED_RUNS: int = Field(100, ge=1, env="MAX_STORED_RUNS")

    # Logging
    LOGFIRE_TOKEN: Optional[str] = Field(None, env="LOGFIRE_TOKEN")

    # Pattern scoring weights
    WEIGHT_EFFECTIVENESS: float = Field(0.3, env="WEIGHT_EFFECTIVENESS")
    WEIGHT_CATEGORY_MATCH: float = Field(0.4, env="WEIGHT_CATEGORY_MATCH")
    WEIGHT_USE_CASE_RELEVANCE: float = Field(0.2, env="WEIGHT_USE_CASE_RELEVANCE")
    WEIGHT_COMPLEXITY: float = Field(0.1, env="WEIGHT_COMPLEXITY")
    CATEGORY_MATCH_BONUS: float = Field(10.0, env="CATEGORY_MATCH_BONUS")
    USE_CASE_MATCH_BONUS: float = Field(2.0, env="USE_CASE_MATCH_BONUS")
    PATTERNS_PER_TYPE: int = Field(3, ge=1, env="PATTERNS_PER_TYPE")
    MAX_ALTERNATIVES: int = Field(3, ge=0, env="MAX_ALTERNATIVES")
    LOW_CONFIDENCE_THRESHOLD: float = Field(
        0.6,
        ge=0.0,
        le=1.0,
        env="LOW_CONFIDENCE_THRESHOLD",
        description="Mappings below this confidence are reported as warnings"
    )

    # Content classifier thresholds
    KEYWORD_MATCH_THRESHOLD: int = Field(2, ge=1, env="KEYWORD_MATCH_THRESHOLD")
    NUMERIC_SIGNAL_THRESHOLD: int = Field(3, ge=1, env="NUMERIC_SIGNAL_THRESHOLD")
    TEMPORAL_SIGNAL_THRESHOLD: int = Field(2, ge=1, env="TEMPORAL_SIGNAL_THRESHOLD")

    # Flow optimizer
    VARIETY_DIVISOR: int = Field(3, ge=1, env="VARIETY_DIVISOR")
    COMPLEXITY_CEILING: float = Field(2.5, env="COMPLEXITY_CEILING")
    COMPLEXITY_SWAP_THRESHOLD: int = Field(3, env="COMPLEXITY_SWAP_THRESHOLD")
    MAX_OPTIMIZATION_ROUNDS: int = Field(10, ge=1, env="MAX_OPTIMIZATION_ROUNDS")

    # Slide segmenter (limits taken from the Marp expression guide)
    MAX_LINES_PER_SLIDE: int = Field(23, env="MAX_LINES_PER_SLIDE")
    MAX_CHARACTERS_PER_SLIDE: int = Field(800, env="MAX_CHARACTERS_PER_SLIDE")
    CODE_BLOCK_LINE_LIMIT: int = Field(15, env="CODE_BLOCK_LINE_LIMIT")
    LONG_LINE_LENGTH: int = Field(100, env="LONG_LINE_LENGTH")
    MAX_LONG_LINES: int = Field(5, env="MAX_LONG_LINES")
    WORDS_PER_MINUTE: int = Field(100, ge=1, env="WORDS_PER_MINUTE")
    MIN_SECTION_MINUTES: int = Field(2, env="MIN_SECTION_MINUTES")
    MIN_FRAGMENT_MINUTES: int = Field(1, env="MIN_FRAGMENT_MINUTES")
    OVERVIEW_ITEM_LIMIT: int = Field(5, ge=1, env="OVERVIEW_ITEM_LIMIT")

    # Pipeline orchestrator
    SECONDS_PER_STAGE: int = Field(30, env="SECONDS_PER_STAGE")
    MAX_RECOMMENDED_SLIDES: int = Field(20, env="MAX_RECOMMENDED_SLIDES")
    MAX_RECOMMENDED_MINUTES: int = Field(30, env="MAX_RECOMMENDED_MINUTES")
    WARNING_RECOMMENDATION_THRESHOLD: int = Field(3, env="WARNING_RECOMMENDATION_THRESHOLD")

    # Input documents
    INPUT_ENCODING: str = Field("utf-8", env="INPUT_ENCODING")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env


def get_settings() -> Settings:
    """Get settings instance."""
    return Settings()


settings = get_settings()
