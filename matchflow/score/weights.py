"""
Weighted blend of component scores.

Both scoring strategies share the same weight vector.  Weights are
kept in whole percent so the blend is computed in integer arithmetic
and rounds half up exactly, without float drift at .5 boundaries.
The deterministic strategy additionally applies a niche-mismatch
multiplier; the LLM-assisted strategy does not, because the model's
own niche judgement already accounts for topical fit.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Tuple

from .schema import ComponentScoreSet, Recommendation

# Percent per component; sums to 100.
COMPONENT_WEIGHTS: Mapping[str, int] = MappingProxyType(
    {
        "niche_match": 25,
        "audience_relevance": 10,
        "audience_quality": 10,
        "engagement_rate": 25,
        "growth_consistency": 10,
        "location_match": 10,
        "past_performance": 5,
        "content_quality": 5,
    }
)

# (niche_match strictly below, multiplier in tenths), most severe first.
NICHE_PENALTY_TIERS: Tuple[Tuple[int, int], ...] = (
    (20, 3),
    (40, 5),
    (60, 7),
    (80, 9),
)

HIGHLY_RECOMMENDED_MIN = 80
RECOMMENDED_MIN = 60


def weighted_score(components: ComponentScoreSet) -> int:
    """Return the weighted blend of all eight components, rounded half up."""
    total = sum(getattr(components, name) * weight for name, weight in COMPONENT_WEIGHTS.items())
    return (total + 50) // 100


def niche_multiplier_tenths(niche_match: int) -> int:
    """Return the niche-mismatch multiplier in tenths (10 means no penalty)."""
    for below, tenths in NICHE_PENALTY_TIERS:
        if niche_match < below:
            return tenths
    return 10


def penalized_score(components: ComponentScoreSet) -> int:
    """Weighted blend followed by the niche-mismatch multiplier."""
    raw = weighted_score(components)
    return (raw * niche_multiplier_tenths(components.niche_match) + 5) // 10


def recommendation_for(overall: int) -> Recommendation:
    if overall >= HIGHLY_RECOMMENDED_MIN:
        return Recommendation.HIGHLY_RECOMMENDED
    if overall >= RECOMMENDED_MIN:
        return Recommendation.RECOMMENDED
    return Recommendation.CONSIDER
