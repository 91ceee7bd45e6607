"""
Pipeline tuning passed to every component at construction.

Built from Settings so every weight and threshold is overridable from the
environment; tests construct it directly with custom values.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from config.settings import Settings, get_settings


class PipelineConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    # Scoring
    weight_effectiveness: float = 0.3
    weight_category_match: float = 0.4
    weight_use_case_relevance: float = 0.2
    weight_complexity: float = 0.1
    category_match_bonus: float = 10.0
    use_case_match_bonus: float = 2.0
    patterns_per_type: int = Field(3, ge=1)
    max_alternatives: int = Field(3, ge=0)
    low_confidence_threshold: float = Field(0.6, ge=0.0, le=1.0)

    # Classifier
    keyword_match_threshold: int = Field(2, ge=1)
    numeric_signal_threshold: int = Field(3, ge=1)
    temporal_signal_threshold: int = Field(2, ge=1)

    # Optimizer
    variety_divisor: int = Field(3, ge=1)
    complexity_ceiling: float = 2.5
    complexity_swap_threshold: int = 3
    max_optimization_rounds: int = Field(10, ge=1)

    # Segmenter
    max_lines_per_slide: int = 23
    max_characters_per_slide: int = 800
    code_block_line_limit: int = 15
    long_line_length: int = 100
    max_long_lines: int = 5
    words_per_minute: int = Field(100, ge=1)
    min_section_minutes: int = 2
    min_fragment_minutes: int = 1
    overview_item_limit: int = Field(5, ge=1)

    # Orchestrator
    seconds_per_stage: int = 30
    max_recommended_slides: int = 20
    max_recommended_minutes: int = 30
    warning_recommendation_threshold: int = 3

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PipelineConfig":
        """Copy the matching UPPER_CASE settings into a frozen config."""
        settings = settings or get_settings()
        values = {
            name: getattr(settings, name.upper())
            for name in cls.model_fields
            if hasattr(settings, name.upper())
        }
        return cls(**values)
