"""
Score result schema.

Defines the eight bounded component scores, the recommendation tiers
and the canonical `ScoreResult` returned by every scoring strategy.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from typing import Dict, List


class Recommendation(str, Enum):
    """Recommendation tier derived from the overall score."""

    HIGHLY_RECOMMENDED = "Highly Recommended"
    RECOMMENDED = "Recommended"
    CONSIDER = "Consider"

    @property
    def filter_key(self) -> str:
        """Label used by the ranking filter, e.g. ``highly_recommended``."""
        return self.value.lower().replace(" ", "_")


def clamp_score(value: float) -> int:
    """Round half up and clamp into [0, 100]; NaN maps to 0."""
    if math.isnan(value):
        return 0
    return math.floor(max(0.0, min(100.0, value)) + 0.5)


@dataclass(frozen=True)
class ComponentScoreSet:
    """The eight sub-scores, each an integer in [0, 100]."""

    niche_match: int
    audience_relevance: int
    audience_quality: int
    engagement_rate: int
    growth_consistency: int
    location_match: int
    past_performance: int
    content_quality: int

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= 100:
                raise ValueError(f"{f.name} must be an int in [0, 100], got {value!r}")

    def as_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreResult:
    """Canonical scoring output, identical in shape for every strategy."""

    components: ComponentScoreSet
    overall: int
    recommendation: Recommendation
    strengths: List[str] = field(default_factory=list)
    concerns: List[str] = field(default_factory=list)
    reasoning: str = ""

    def to_dict(self) -> Dict[str, object]:
        return {
            "overall": self.overall,
            "recommendation": self.recommendation.value,
            **self.components.as_dict(),
            "strengths": list(self.strengths),
            "concerns": list(self.concerns),
            "reasoning": self.reasoning,
        }
