"""
LLM-assisted scoring.

The model is asked for one number, ``nicheMatch``, plus narrative
(strengths, concerns, reasoning).  Every other component is computed
locally with the same calculators the deterministic strategy uses and
is sent to the model as context only.  The overall score is then
recomputed here from the returned niche score and the seven local
scores, with the same weights as the deterministic strategy but
without the niche-mismatch multiplier: the model's niche judgement
already prices in topical fit.  Whatever ``overall`` the model
returns is ignored.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import replace
from typing import Any, List

from ..profile.schema import CampaignProfile, CandidateProfile
from .components import compute_components
from .concepts import DEFAULT_CONCEPT_GRAPH, ConceptGraph
from .llm_providers import LLMProvider
from .llm_schema import LLMJudgement
from .schema import ComponentScoreSet, ScoreResult, clamp_score
from .weights import recommendation_for, weighted_score

logger = logging.getLogger(__name__)

MAX_STRENGTHS = 4
MAX_CONCERNS = 3

_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*(.*?)\s*```\s*$", re.DOTALL)


class ResponseFormatError(ValueError):
    """Raised when a provider completion is not a usable judgement."""


def _or_na(value: Any) -> str:
    return "N/A" if value in (None, "") else str(value)


def build_scoring_prompt(
    candidate: CandidateProfile,
    campaign: CampaignProfile,
    components: ComponentScoreSet,
) -> str:
    """Create the scoring prompt shared by all providers."""
    niches = ", ".join(candidate.niches) or "Not specified"
    required = ", ".join(campaign.niches) or "Any"
    targeting = "Nationwide" if campaign.nationwide else (", ".join(campaign.target_locations) or "Any")
    track = candidate.track_record
    success = "N/A" if track.success_rate is None else f"{track.success_rate:g}%"
    return f"""You are a creator-campaign match analyst. Given the data below, return ONLY valid JSON.

Creator: {candidate.name} (@{candidate.username})
  Followers: {candidate.followers} | Follows: {candidate.following} | Media: {candidate.media_count}
  Verified: {candidate.is_verified} | Location: {_or_na(candidate.location)}
  Niches: {niches}
  Bio: {_or_na(candidate.bio)}
  Engagement rate: {candidate.engagement.engagement_rate:.2f}%
  Past campaigns: {track.total_campaigns} (success rate {success})

Campaign: "{campaign.name}"
  Description: {_or_na(campaign.description)}
  Required niches: {required}
  Targeting: {targeting}
  Type: {_or_na(campaign.campaign_type)}

Pre-calculated component scores (0-100):
  audienceRelevance: {components.audience_relevance}
  audienceQuality: {components.audience_quality}
  engagementRate: {components.engagement_rate}
  growthConsistency: {components.growth_consistency}
  locationMatch: {components.location_match}
  pastPerformance: {components.past_performance}
  contentQuality: {components.content_quality}

Your task:
1. Evaluate nicheMatch (0-100): how well do the creator's niches align with the campaign's required niches?
   Be precise: exact match = 80-100, related = 40-70, unrelated = 0-30.
2. 2-4 strengths (specific positives).
3. 1-3 concerns (specific cautions, if any).
4. reasoning: 2-3 sentences explaining the match.

Return JSON:
{{
  "nicheMatch": <number>,
  "strengths": ["<string>"],
  "concerns": ["<string>"],
  "reasoning": "<string>"
}}"""


def _string_list(data: dict, key: str, limit: int) -> List[str]:
    value = data.get(key)
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ResponseFormatError(f"'{key}' must be a list of strings")
    return [item.strip() for item in value if item.strip()][:limit]


def parse_judgement(content: str) -> LLMJudgement:
    """Parse a provider completion into an :class:`LLMJudgement`.

    ``nicheMatch`` outside [0, 100] (including infinities) is clamped;
    only NaN and non-numeric values are rejected.

    Raises:
        ResponseFormatError: If the completion is not a JSON object with
            a numeric ``nicheMatch``, string lists ``strengths`` and
            ``concerns`` and a string ``reasoning``.
    """
    match = _FENCE_RE.match(content)
    text = match.group(1) if match else content
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ResponseFormatError(f"Completion is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ResponseFormatError("Completion must be a JSON object")

    niche = data.get("nicheMatch")
    if isinstance(niche, bool) or not isinstance(niche, (int, float)) or (isinstance(niche, float) and math.isnan(niche)):
        raise ResponseFormatError(f"'nicheMatch' must be a number, got {niche!r}")
    # Bound before rounding; JSON ints can exceed the float range.
    niche = max(0, min(100, niche))
    reasoning = data.get("reasoning")
    if not isinstance(reasoning, str):
        raise ResponseFormatError("'reasoning' must be a string")

    return LLMJudgement(
        niche_match=clamp_score(niche),
        strengths=_string_list(data, "strengths", MAX_STRENGTHS),
        concerns=_string_list(data, "concerns", MAX_CONCERNS),
        reasoning=reasoning.strip(),
    )


def combine_judgement(components: ComponentScoreSet, judgement: LLMJudgement) -> ScoreResult:
    """Merge the model's niche score into locally computed components."""
    merged = replace(components, niche_match=judgement.niche_match)
    overall = weighted_score(merged)
    return ScoreResult(
        components=merged,
        overall=overall,
        recommendation=recommendation_for(overall),
        strengths=list(judgement.strengths),
        concerns=list(judgement.concerns),
        reasoning=judgement.reasoning,
    )


def judge_candidate(
    provider: LLMProvider,
    candidate: CandidateProfile,
    campaign: CampaignProfile,
    graph: ConceptGraph = DEFAULT_CONCEPT_GRAPH,
) -> ScoreResult:
    """Score one candidate with ``provider`` judging niche fit.

    Raises:
        ProviderError: If the provider call fails.
        ResponseFormatError: If the completion cannot be used.
    """
    components = compute_components(candidate, campaign, graph)
    prompt = build_scoring_prompt(candidate, campaign, components)
    content = provider.complete(prompt)
    judgement = parse_judgement(content)
    logger.debug(
        "%s judged niche match %d for candidate %s",
        provider.name,
        judgement.niche_match,
        candidate.candidate_id,
    )
    return combine_judgement(components, judgement)
