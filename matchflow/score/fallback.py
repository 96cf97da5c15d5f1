"""
Deterministic scoring strategy.

Combines the eight component scores with the fixed weight vector,
applies the niche-mismatch multiplier and writes the strengths,
concerns and reasoning text from the same numbers.  This strategy does
no I/O and cannot fail, which makes it the last tier of the scoring
chain.
"""

from __future__ import annotations

import logging
from typing import List, Tuple

from ..profile.schema import CampaignProfile, CandidateProfile
from .components import compute_components
from .concepts import DEFAULT_CONCEPT_GRAPH, ConceptGraph
from .schema import ComponentScoreSet, ScoreResult
from .weights import penalized_score, recommendation_for

logger = logging.getLogger(__name__)

DEFAULT_STRENGTH = "Profile meets basic campaign requirements"


def describe_components(
    components: ComponentScoreSet,
    candidate: CandidateProfile,
    campaign: CampaignProfile,
) -> Tuple[List[str], List[str]]:
    """Return (strengths, concerns) for a component score set.

    At least one strength is always returned.
    """
    strengths: List[str] = []
    concerns: List[str] = []

    niche = components.niche_match
    if niche >= 80:
        strengths.append("Excellent niche alignment with campaign requirements")
    elif niche >= 60:
        strengths.append("Good niche match for campaign")
    elif niche >= 40:
        concerns.append("Partial niche alignment with campaign focus areas")
    elif niche >= 20:
        concerns.append("Poor niche match - content may not align with campaign goals")
    else:
        concerns.append("Severe niche mismatch - creates a different content type than the campaign requires")

    if components.audience_relevance >= 80:
        strengths.append(f"Strong audience size of {candidate.followers:,} followers")
    elif components.audience_relevance >= 60:
        strengths.append(f"Good audience reach with {candidate.followers:,} followers")
    else:
        concerns.append("Smaller audience size may limit campaign reach")

    if components.audience_quality >= 75:
        strengths.append("High-quality, authentic audience with strong engagement signals")
    elif components.audience_quality >= 55:
        strengths.append("Decent audience quality with reasonable authenticity indicators")
    elif components.audience_quality < 40:
        concerns.append("Low audience quality score - possible follow-for-follow or inactive followers")

    if components.engagement_rate >= 80:
        strengths.append("Exceptional engagement rate relative to follower tier")
    elif components.engagement_rate >= 60:
        strengths.append("Solid engagement rate for their follower tier")
    elif components.engagement_rate < 40:
        concerns.append("Engagement rate is below benchmark for this follower size")

    if components.growth_consistency >= 80:
        strengths.append("Healthy and consistent account growth over time")
    elif components.growth_consistency < 40:
        concerns.append("Inconsistent or shrinking audience growth")

    targeted = not campaign.nationwide and any(t.strip() for t in campaign.target_locations)
    if targeted and components.location_match >= 90:
        strengths.append("Location matches campaign targeting")
    elif components.location_match < 70:
        concerns.append("Location may not align with campaign target locations")

    if candidate.track_record.has_history:
        total = candidate.track_record.total_campaigns
        if components.past_performance >= 80:
            strengths.append(f"Strong track record across {total} past campaigns")
        elif components.past_performance < 40:
            concerns.append(f"Low success rate across {total} past campaigns")

    if candidate.is_verified:
        strengths.append("Verified account adds credibility")

    if not strengths:
        strengths.append(DEFAULT_STRENGTH)
    return strengths, concerns


def _reasoning(overall: int, components: ComponentScoreSet) -> str:
    return (
        f"Match score of {overall}% based on niche alignment ({components.niche_match}%), "
        f"audience quality ({components.audience_quality}%), "
        f"engagement tier score ({components.engagement_rate}%), "
        f"growth consistency ({components.growth_consistency}%), "
        f"and location fit ({components.location_match}%)."
    )


def fallback_score(
    candidate: CandidateProfile,
    campaign: CampaignProfile,
    graph: ConceptGraph = DEFAULT_CONCEPT_GRAPH,
) -> ScoreResult:
    """Score a candidate for a campaign without any external calls."""
    components = compute_components(candidate, campaign, graph)
    overall = penalized_score(components)
    strengths, concerns = describe_components(components, candidate, campaign)
    logger.debug(
        "Deterministic score for candidate %s on campaign %s: %d",
        candidate.candidate_id,
        campaign.campaign_id,
        overall,
    )
    return ScoreResult(
        components=components,
        overall=overall,
        recommendation=recommendation_for(overall),
        strengths=strengths,
        concerns=concerns,
        reasoning=_reasoning(overall, components),
    )
