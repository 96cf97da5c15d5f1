"""
Rank the applicants to one campaign.

Scores every application through the orchestrator, then hands the
scored candidates to the ranker.  Applications whose records are too
malformed to score are left out of the ranking and counted in the
returned :class:`~matchflow.score.orchestrator.BatchOutcome`.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Optional, Tuple

from ..score.orchestrator import ApplicationInput, BatchOutcome, CampaignInput, ScoringOrchestrator
from .ranker import TOP_MATCHES_LIMIT, RankedPage, ScoredCandidate, rank_candidates

logger = logging.getLogger(__name__)


async def rank_applications(
    orchestrator: ScoringOrchestrator,
    campaign: CampaignInput,
    applications: Iterable[ApplicationInput],
    *,
    filter_tier: str = "all",
    sort_by: str = "relevance",
    page: int = 1,
    page_size: int = 50,
    top_matches_limit: int = TOP_MATCHES_LIMIT,
    concurrency: Optional[int] = None,
    cancel_event: Optional[asyncio.Event] = None,
) -> Tuple[RankedPage, BatchOutcome]:
    """Score and rank all applications for a campaign.

    Ranking arguments are validated before any scoring starts, so a bad
    filter or sort key does not cost a round of provider calls.

    Returns:
        ``(page, outcome)`` where ``outcome`` reports skipped and
        unstarted applications.
    """
    # Fail fast on bad ranking arguments.
    rank_candidates([], filter_tier, sort_by, page, page_size)

    outcome = await orchestrator.score_batch(
        campaign,
        applications,
        concurrency=concurrency,
        cancel_event=cancel_event,
    )
    scored = [ScoredCandidate.from_application(item.application, item.score) for item in outcome.scored]
    ranked = rank_candidates(
        scored,
        filter_tier,
        sort_by,
        page,
        page_size,
        top_matches_limit=top_matches_limit,
    )
    if outcome.skipped:
        logger.warning("%d applications could not be scored and were excluded", outcome.skipped_count)
    return ranked, outcome
