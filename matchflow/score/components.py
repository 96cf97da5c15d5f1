"""
Component score calculators.

Each calculator is a pure function that turns raw profile and campaign
facts into one integer sub-score in [0, 100].  Degenerate inputs
(no niches, no snapshots, zero followers) map to documented defaults
rather than exceptions.  :func:`compute_components` runs all eight and
is shared by every scoring strategy, so the deterministic and the
LLM-assisted paths always agree on everything except niche match.
"""

from __future__ import annotations

import logging
import math
import statistics
from typing import Iterable, Optional, Sequence, Tuple

from ..profile.schema import CampaignProfile, CandidateProfile, Snapshot
from .concepts import DEFAULT_CONCEPT_GRAPH, ConceptGraph
from .schema import ComponentScoreSet, clamp_score

logger = logging.getLogger(__name__)

# (minimum followers, score), highest tier first.
AUDIENCE_REACH_TIERS: Tuple[Tuple[int, int], ...] = (
    (100_000, 90),
    (50_000, 80),
    (10_000, 70),
    (5_000, 60),
    (1_000, 50),
    (500, 40),
    (100, 30),
    (10, 20),
)

# (minimum followers, expected engagement rate in percent).  Larger
# accounts carry more passive followers, so the benchmark drops.
ENGAGEMENT_BENCHMARKS: Tuple[Tuple[int, float], ...] = (
    (1_000_000, 1.0),
    (500_000, 1.5),
    (100_000, 2.0),
    (10_000, 3.5),
    (1_000, 5.0),
    (0, 7.0),
)

# (minimum observed/benchmark ratio, score).
ENGAGEMENT_RATIO_BANDS: Tuple[Tuple[float, int], ...] = (
    (2.0, 100),
    (1.5, 90),
    (1.2, 80),
    (1.0, 70),
    (0.8, 60),
    (0.6, 50),
    (0.4, 40),
    (0.2, 30),
)

# (followers strictly below, maximum engagement score).
ENGAGEMENT_SMALL_AUDIENCE_CAPS: Tuple[Tuple[int, int], ...] = (
    (50, 25),
    (200, 55),
)

# (growth lower bound %, growth upper bound %, score), first match wins.
GROWTH_BANDS: Tuple[Tuple[float, float, int], ...] = (
    (5.0, 50.0, 90),
    (2.0, 100.0, 80),
    (0.0, 200.0, 70),
)


def _normalize_tags(tags: Iterable[str]) -> Tuple[str, ...]:
    seen = []
    for tag in tags:
        value = tag.strip().lower()
        if value and value not in seen:
            seen.append(value)
    return tuple(seen)


def niche_match(
    candidate_niches: Sequence[str],
    campaign_niches: Sequence[str],
    graph: ConceptGraph = DEFAULT_CONCEPT_GRAPH,
) -> int:
    """Score topical fit between a candidate's tags and a campaign's required tags.

    A campaign without required tags is broad and accepts most
    candidates (70).  A candidate without tags cannot be verified and is
    treated as risky (20).  Otherwise the candidate's tags are matched
    exactly, by containment and through the concept graph.
    """
    required = _normalize_tags(campaign_niches)
    if not required:
        return 70
    offered = _normalize_tags(candidate_niches)
    if not offered:
        return 20

    exact = {tag for tag in offered if tag in required}
    partial = {tag for tag in offered if any(tag in req or req in tag for req in required)}
    related = {tag for tag in offered if any(graph.related(tag, req) for req in required)}
    total = len(exact | partial | related)
    needed = len(required)

    if len(exact) >= needed:
        return 100
    if total >= needed:
        return 85
    if total >= 0.7 * needed:
        return 70
    if total >= 0.5 * needed:
        return 50
    if partial or related:
        return 30
    return 10


def audience_relevance(followers: int) -> int:
    """Step function of reach."""
    for minimum, score in AUDIENCE_REACH_TIERS:
        if followers >= minimum:
            return score
    return 10


def audience_quality(followers: int, following: int, media_count: int, is_verified: bool) -> int:
    """Authenticity estimate from follow ratio, posting density and verification.

    Ratio signals are meaningless on near-empty accounts, so profiles
    under 200 followers take a flat penalty on top.
    """
    score = 50

    if following > 0:
        ratio = followers / following
        if ratio >= 10:
            score += 20
        elif ratio >= 3:
            score += 15
        elif ratio >= 1:
            score += 10
        elif ratio < 0.5:
            # follow-for-follow
            score -= 20

    if media_count == 0:
        score -= 10
    elif followers > 0:
        posts_per_follower = media_count / followers
        if posts_per_follower >= 0.05:
            score += 15
        elif posts_per_follower >= 0.02:
            score += 10

    if is_verified:
        score += 15

    if followers < 50:
        score -= 30
    elif followers < 200:
        score -= 15

    return clamp_score(score)


def engagement_benchmark(followers: int) -> float:
    for minimum, benchmark in ENGAGEMENT_BENCHMARKS:
        if followers >= minimum:
            return benchmark
    return ENGAGEMENT_BENCHMARKS[-1][1]


def engagement_rate(observed_rate: float, followers: int) -> int:
    """Score an engagement rate (percent) against its follower-tier benchmark."""
    if not observed_rate or observed_rate <= 0:
        return 20

    ratio = observed_rate / engagement_benchmark(followers)
    score = 20
    for minimum, band_score in ENGAGEMENT_RATIO_BANDS:
        if ratio >= minimum:
            score = band_score
            break

    for below, cap in ENGAGEMENT_SMALL_AUDIENCE_CAPS:
        if followers < below:
            return min(score, cap)
    return score


def _growth_band(growth_pct: float) -> int:
    for low, high, score in GROWTH_BANDS:
        if low <= growth_pct <= high:
            return score
    if growth_pct > 200:
        # suspicious spike
        return 40
    if growth_pct < -5:
        return 30
    return 50


def growth_consistency(snapshots: Optional[Sequence[Snapshot]]) -> int:
    """Score follower growth and engagement stability across snapshots.

    Needs at least two snapshots; with fewer the score is neutral (50).
    """
    if not snapshots or len(snapshots) < 2:
        return 50

    ordered = sorted(snapshots, key=lambda s: s.sequence_number)
    oldest = ordered[0].total_followers or 1
    latest = ordered[-1].total_followers or oldest
    growth_pct = (latest - oldest) / oldest * 100
    score = _growth_band(growth_pct)

    rates = [s.avg_engagement_rate for s in ordered if math.isfinite(s.avg_engagement_rate) and s.avg_engagement_rate > 0]
    if len(rates) >= 2:
        spread = statistics.pstdev(rates)
        if spread < 1.0:
            score += 10
        elif spread < 2.0:
            score += 5
    logger.debug("Growth %.1f%% over %d snapshots -> %d", growth_pct, len(ordered), score)
    return min(100, score)


def location_match(candidate_location: str, target_locations: Sequence[str], nationwide: bool) -> int:
    """Binary location fit: 100 when targeted or untargeted, else 50."""
    targets = [t.strip().lower() for t in target_locations if t and t.strip()]
    if nationwide or not targets:
        return 100
    location = (candidate_location or "").lower()
    return 100 if any(target in location for target in targets) else 50


def past_performance(success_rate: Optional[float], total_campaigns: int) -> int:
    """Historical success rate, neutral 50 when there is no history."""
    if total_campaigns <= 0 or success_rate is None:
        return 50
    return clamp_score(success_rate)


def content_quality(is_verified: bool) -> int:
    # Coarse proxy until content analysis feeds a real score.
    return 80 if is_verified else 60


def compute_components(
    candidate: CandidateProfile,
    campaign: CampaignProfile,
    graph: ConceptGraph = DEFAULT_CONCEPT_GRAPH,
) -> ComponentScoreSet:
    """Run every calculator for one candidate/campaign pair."""
    return ComponentScoreSet(
        niche_match=niche_match(candidate.niches, campaign.niches, graph),
        audience_relevance=audience_relevance(candidate.followers),
        audience_quality=audience_quality(
            candidate.followers, candidate.following, candidate.media_count, candidate.is_verified
        ),
        engagement_rate=engagement_rate(candidate.engagement.engagement_rate, candidate.followers),
        growth_consistency=growth_consistency(candidate.snapshots),
        location_match=location_match(candidate.location, campaign.target_locations, campaign.nationwide),
        past_performance=past_performance(
            candidate.track_record.success_rate, candidate.track_record.total_campaigns
        ),
        content_quality=content_quality(candidate.is_verified),
    )
