"""Configuration models and YAML loader for the placement decision engine."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator


class ScoreTier(BaseModel):
    """Award ``points`` when the measured value is >= ``threshold``."""

    threshold: float
    points: int = Field(ge=0)
    label: str = ""


def _descending(tiers: list[ScoreTier]) -> list[ScoreTier]:
    return sorted(tiers, key=lambda t: t.threshold, reverse=True)


class ScoringConfig(BaseModel):
    """Weights and thresholds for match scoring.

    Bands sum to 100 with the defaults: eligibility 40, branch 20,
    skills 25, academic 10, high-value 5.
    """

    eligible_points: int = Field(default=40, ge=0)
    near_miss_points: int = Field(default=20, ge=0)
    near_miss_margin: float = Field(default=0.3, ge=0.0)

    branch_match_points: int = Field(default=20, ge=0)
    branch_open_points: int = Field(default=15, ge=0)

    skill_tiers: list[ScoreTier] = Field(default_factory=lambda: [
        ScoreTier(threshold=0.8, points=25),
        ScoreTier(threshold=0.5, points=15),
        ScoreTier(threshold=0.25, points=8),
    ])
    academic_tiers: list[ScoreTier] = Field(default_factory=lambda: [
        ScoreTier(threshold=9.0, points=10, label="Outstanding CGPA gives you an edge"),
        ScoreTier(threshold=8.5, points=7, label="Excellent CGPA"),
        ScoreTier(threshold=8.0, points=5, label="Good CGPA"),
    ])

    high_value_min_cgpa: float = 8.5
    ctc_tiers: list[ScoreTier] = Field(default_factory=lambda: [
        ScoreTier(threshold=10.0, points=5, label="High-value opportunity matching your profile"),
        ScoreTier(threshold=7.0, points=3, label="Good-value opportunity matching your profile"),
    ])

    @field_validator("skill_tiers", "academic_tiers", "ctc_tiers")
    @classmethod
    def tiers_descending(cls, v: list[ScoreTier]) -> list[ScoreTier]:
        return _descending(v)


class RecommendationConfig(BaseModel):
    """Recommendation list settings."""

    limit: int = 10


class AnalyticsConfig(BaseModel):
    """Population analytics settings."""

    top_recruiters: int = Field(default=10, ge=0)
    decimal_places: int = Field(default=2, ge=0, le=6)


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    recommendations: RecommendationConfig = Field(default_factory=RecommendationConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)
