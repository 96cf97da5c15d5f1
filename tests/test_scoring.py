"""
Tests for the weighted blend, the deterministic scorer and the
LLM-assisted judge.

The LLM tests use a stub provider that returns canned completions, so
no network access or API key is needed.
"""

from __future__ import annotations

import json
import random

import pytest

from conftest import StubProvider, build_campaign, build_candidate, snapshots
from matchflow.profile.schema import TrackRecord
from matchflow.score.components import compute_components
from matchflow.score.fallback import DEFAULT_STRENGTH, describe_components, fallback_score
from matchflow.score.llm_judge import (
    MAX_CONCERNS,
    MAX_STRENGTHS,
    ResponseFormatError,
    combine_judgement,
    judge_candidate,
    parse_judgement,
)
from matchflow.score.llm_schema import LLMJudgement
from matchflow.score.schema import ComponentScoreSet, Recommendation, clamp_score
from matchflow.score.weights import (
    COMPONENT_WEIGHTS,
    niche_multiplier_tenths,
    penalized_score,
    recommendation_for,
    weighted_score,
)


def _components(**overrides: int) -> ComponentScoreSet:
    values = dict(
        niche_match=100,
        audience_relevance=60,
        audience_quality=75,
        engagement_rate=70,
        growth_consistency=50,
        location_match=100,
        past_performance=50,
        content_quality=60,
    )
    values.update(overrides)
    return ComponentScoreSet(**values)


def _completion(**overrides) -> str:
    payload = {
        "nicheMatch": 45,
        "strengths": ["Strong styling content"],
        "concerns": ["Audience skews outside target city"],
        "reasoning": "Partial fit for a summer fashion launch.",
    }
    payload.update(overrides)
    return json.dumps(payload)


# ------------------------------------------------------------------ weights


def test_weights_sum_to_100() -> None:
    assert sum(COMPONENT_WEIGHTS.values()) == 100


def test_weighted_score_rounds_half_up() -> None:
    # 7650 / 100 = 76.5
    assert weighted_score(_components()) == 77
    assert weighted_score(_components(niche_match=45)) == 63


@pytest.mark.parametrize(
    "niche, tenths",
    [(0, 3), (19, 3), (20, 5), (39, 5), (40, 7), (59, 7), (60, 9), (79, 9), (80, 10), (100, 10)],
)
def test_niche_multiplier_tiers(niche, tenths) -> None:
    assert niche_multiplier_tenths(niche) == tenths


def test_penalized_score() -> None:
    assert penalized_score(_components()) == 77
    # raw 63 * 0.7 = 44.1
    assert penalized_score(_components(niche_match=45)) == 44


@pytest.mark.parametrize(
    "overall, expected",
    [
        (100, Recommendation.HIGHLY_RECOMMENDED),
        (80, Recommendation.HIGHLY_RECOMMENDED),
        (79, Recommendation.RECOMMENDED),
        (60, Recommendation.RECOMMENDED),
        (59, Recommendation.CONSIDER),
        (0, Recommendation.CONSIDER),
    ],
)
def test_recommendation_boundaries(overall, expected) -> None:
    assert recommendation_for(overall) is expected


def test_recommendation_filter_keys() -> None:
    assert Recommendation.HIGHLY_RECOMMENDED.filter_key == "highly_recommended"
    assert Recommendation.CONSIDER.filter_key == "consider"


def test_clamp_score() -> None:
    assert clamp_score(150) == 100
    assert clamp_score(-5) == 0
    assert clamp_score(44.5) == 45
    assert clamp_score(float("nan")) == 0
    assert clamp_score(float("inf")) == 100


def test_component_set_rejects_out_of_range() -> None:
    with pytest.raises(ValueError):
        _components(niche_match=101)
    with pytest.raises(ValueError):
        _components(engagement_rate=-1)


# --------------------------------------------------------- deterministic scorer


def test_fallback_score_for_good_fit(candidate, campaign) -> None:
    result = fallback_score(candidate, campaign)
    assert result.overall == 77
    assert result.recommendation is Recommendation.RECOMMENDED
    assert "Excellent niche alignment with campaign requirements" in result.strengths
    assert result.reasoning.startswith("Match score of 77% based on niche alignment (100%)")


def test_candidate_without_niches_lands_in_consider() -> None:
    result = fallback_score(build_candidate(niches=()), build_campaign())
    assert result.components.niche_match == 20
    # raw 57, multiplier 0.5
    assert result.overall == 29
    assert result.recommendation is Recommendation.CONSIDER
    assert any("niche" in c.lower() for c in result.concerns)


def test_nationwide_campaign_ignores_location() -> None:
    for location in ("", "???", "Nowhere"):
        result = fallback_score(build_candidate(location=location), build_campaign(nationwide=True))
        assert result.components.location_match == 100


def test_fallback_overall_matches_penalized_blend() -> None:
    rng = random.Random(99)
    for _ in range(100):
        candidate = build_candidate(
            followers=rng.randint(0, 2_000_000),
            following=rng.randint(0, 10_000),
            media_count=rng.randint(0, 5000),
            niches=tuple(rng.sample(["fashion", "travel", "food", "pets"], rng.randint(0, 3))),
            snapshots=snapshots(*[(rng.randint(0, 50_000), rng.uniform(0, 10)) for _ in range(rng.randint(0, 4))]),
        )
        result = fallback_score(candidate, build_campaign())
        assert result.overall == penalized_score(result.components)
        assert result.recommendation is recommendation_for(result.overall)
        assert 0 <= result.overall <= 100
        assert result.strengths


def test_describe_components_always_has_a_strength() -> None:
    weak = ComponentScoreSet(
        niche_match=10,
        audience_relevance=10,
        audience_quality=0,
        engagement_rate=20,
        growth_consistency=30,
        location_match=50,
        past_performance=50,
        content_quality=60,
    )
    strengths, concerns = describe_components(weak, build_candidate(followers=5), build_campaign())
    assert strengths == [DEFAULT_STRENGTH]
    assert len(concerns) >= 4


def test_describe_components_mentions_track_record() -> None:
    candidate = build_candidate(track_record=TrackRecord(total_campaigns=6, success_rate=90.0))
    strengths, _ = describe_components(compute_components(candidate, build_campaign()), candidate, build_campaign())
    assert "Strong track record across 6 past campaigns" in strengths


# ---------------------------------------------------------------- LLM judge


def test_parse_judgement_accepts_code_fence() -> None:
    judgement = parse_judgement("```json\n" + _completion(nicheMatch=82) + "\n```")
    assert judgement.niche_match == 82
    assert judgement.reasoning == "Partial fit for a summer fashion launch."


@pytest.mark.parametrize(
    "raw, expected",
    [(150, 100), (-5, 0), (72.6, 73), (float("inf"), 100), (float("-inf"), 0), (10**400, 100), (-(10**400), 0)],
)
def test_parse_judgement_clamps_niche_match(raw, expected) -> None:
    assert parse_judgement(_completion(nicheMatch=raw)).niche_match == expected


def test_parse_judgement_clamps_overflowing_literal() -> None:
    content = '{"nicheMatch": 1e400, "strengths": [], "concerns": [], "reasoning": "ok"}'
    assert parse_judgement(content).niche_match == 100


def test_parse_judgement_rejects_nan() -> None:
    with pytest.raises(ResponseFormatError):
        parse_judgement(_completion(nicheMatch=float("nan")))


def test_parse_judgement_truncates_lists() -> None:
    judgement = parse_judgement(_completion(strengths=[f"s{i}" for i in range(8)], concerns=[f"c{i}" for i in range(8)]))
    assert len(judgement.strengths) == MAX_STRENGTHS
    assert len(judgement.concerns) == MAX_CONCERNS


@pytest.mark.parametrize(
    "content",
    [
        "not json at all",
        json.dumps(["nicheMatch", 80]),
        _completion(nicheMatch="high"),
        _completion(nicheMatch=True),
        _completion(nicheMatch=None),
        _completion(strengths="great"),
        _completion(concerns=[1, 2]),
        _completion(reasoning=None),
    ],
)
def test_parse_judgement_rejects_malformed(content) -> None:
    with pytest.raises(ResponseFormatError):
        parse_judgement(content)


def test_combine_judgement_replaces_niche_without_penalty() -> None:
    judgement = LLMJudgement(niche_match=45, strengths=["a"], concerns=[], reasoning="r")
    result = combine_judgement(_components(niche_match=100), judgement)
    assert result.components.niche_match == 45
    assert result.overall == 63
    assert result.overall == weighted_score(result.components)
    assert result.recommendation is Recommendation.RECOMMENDED


def test_judge_candidate_ignores_provider_overall(candidate, campaign) -> None:
    provider = StubProvider(_completion(nicheMatch=150, overall=5, audienceQuality=0))
    result = judge_candidate(provider, candidate, campaign)
    assert result.components.niche_match == 100
    # every other component comes from the local calculators
    local = compute_components(candidate, campaign)
    assert result.components.audience_quality == local.audience_quality
    assert result.overall == weighted_score(result.components) == 77
    assert result.strengths == ["Strong styling content"]


def test_judge_candidate_prompt_carries_local_scores(candidate, campaign) -> None:
    provider = StubProvider(_completion())
    judge_candidate(provider, candidate, campaign)
    prompt = provider.prompts[0]
    assert "Summer Edit" in prompt
    assert "audienceQuality: 75" in prompt
    assert "@asha.styles" in prompt


def test_llm_and_deterministic_paths_differ_only_by_penalty(candidate, campaign) -> None:
    llm = judge_candidate(StubProvider(_completion(nicheMatch=45)), candidate, campaign)
    assert llm.overall == 63
    assert penalized_score(llm.components) == 44
