"""
Candidate ranking.

Given a list of scored candidates, filter by recommendation tier, sort
by the requested key, split off the top tier and paginate the rest.
Sorting is stable: candidates that tie on the sort key keep their input
order, so the same input always produces the same page.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from ..profile.schema import Application, CandidateProfile, display_fields
from ..score.schema import Recommendation, ScoreResult

logger = logging.getLogger(__name__)

FILTER_TIERS = ("all", "highly_recommended", "recommended", "consider")
SORT_KEYS = ("relevance", "date", "engagement", "followers")
TOP_MATCHES_LIMIT = 10

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class ScoredCandidate:
    """A score plus the display fields the ranking consumer needs."""

    candidate_id: Union[int, str]
    score: ScoreResult
    name: str = ""
    username: str = ""
    followers: int = 0
    engagement_rate: float = 0.0
    niches: List[str] = field(default_factory=list)
    location: str = ""
    application_id: Optional[Union[int, str]] = None
    applied_at: Optional[datetime] = None
    status: str = "pending"

    @property
    def recommendation(self) -> Recommendation:
        return self.score.recommendation

    @classmethod
    def from_profile(
        cls,
        candidate: CandidateProfile,
        score: ScoreResult,
        *,
        application_id: Optional[Union[int, str]] = None,
        applied_at: Optional[datetime] = None,
        status: str = "pending",
    ) -> "ScoredCandidate":
        fields_ = display_fields(candidate)
        return cls(
            candidate_id=candidate.candidate_id,
            score=score,
            name=fields_["name"],
            username=fields_["username"],
            followers=fields_["followers"],
            engagement_rate=fields_["engagement_rate"],
            niches=fields_["niches"],
            location=fields_["location"],
            application_id=application_id,
            applied_at=applied_at,
            status=status,
        )

    @classmethod
    def from_application(cls, application: Application, score: ScoreResult) -> "ScoredCandidate":
        return cls.from_profile(
            application.candidate,
            score,
            application_id=application.application_id,
            applied_at=application.applied_at,
            status=application.status,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "application_id": self.application_id,
            "candidate": {
                "id": self.candidate_id,
                "name": self.name,
                "username": self.username,
                "followers": self.followers,
                "engagement_rate": self.engagement_rate,
                "niches": list(self.niches),
                "location": self.location,
            },
            "applied_at": self.applied_at.isoformat() if self.applied_at else None,
            "status": self.status,
            "score": self.score.to_dict(),
        }


@dataclass(frozen=True)
class RankedPage:
    """Ranker output: the top tier plus one page of everyone else."""

    top_matches: List[ScoredCandidate]
    others: List[ScoredCandidate]
    total_others: int
    total_pages: int
    page: int
    page_size: int
    total_candidates: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_candidates": self.total_candidates,
            "top_matches": [c.to_dict() for c in self.top_matches],
            "others": [c.to_dict() for c in self.others],
            "pagination": {
                "page": self.page,
                "page_size": self.page_size,
                "total": self.total_others,
                "total_pages": self.total_pages,
            },
        }


def _applied_at_key(candidate: ScoredCandidate) -> datetime:
    value = candidate.applied_at
    if value is None:
        return _EPOCH
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


_SORT_KEY_FUNCS: Dict[str, Callable[[ScoredCandidate], Any]] = {
    "relevance": lambda c: c.score.overall,
    "date": _applied_at_key,
    "engagement": lambda c: c.engagement_rate,
    "followers": lambda c: c.followers,
}


def rank_candidates(
    candidates: Iterable[ScoredCandidate],
    filter_tier: str = "all",
    sort_by: str = "relevance",
    page: int = 1,
    page_size: int = 50,
    *,
    top_matches_limit: int = TOP_MATCHES_LIMIT,
) -> RankedPage:
    """Filter, sort, split and paginate scored candidates.

    Args:
        candidates: Scored candidates in input order.
        filter_tier: ``all``, ``highly_recommended``, ``recommended`` or
            ``consider``.
        sort_by: ``relevance``, ``date``, ``engagement`` or ``followers``;
            always descending, ties keep input order.
        page: 1-based page of the non-top candidates.
        page_size: Number of non-top candidates per page.
        top_matches_limit: Maximum number of Highly Recommended entries
            returned in ``top_matches``.

    Raises:
        ValueError: On an unknown filter or sort key, or page/page_size
            below 1.
    """
    if filter_tier not in FILTER_TIERS:
        raise ValueError(f"Unknown filter '{filter_tier}'; expected one of {', '.join(FILTER_TIERS)}")
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key '{sort_by}'; expected one of {', '.join(SORT_KEYS)}")
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be at least 1")

    items = list(candidates)
    total = len(items)
    if filter_tier != "all":
        items = [c for c in items if c.recommendation.filter_key == filter_tier]

    # sorted() with reverse=True is stable
    ordered = sorted(items, key=_SORT_KEY_FUNCS[sort_by], reverse=True)

    top = [c for c in ordered if c.recommendation is Recommendation.HIGHLY_RECOMMENDED]
    others = [c for c in ordered if c.recommendation is not Recommendation.HIGHLY_RECOMMENDED]

    offset = (page - 1) * page_size
    total_pages = math.ceil(len(others) / page_size)
    logger.debug(
        "Ranked %d candidates (filter=%s, sort=%s): %d top, %d others",
        total,
        filter_tier,
        sort_by,
        len(top),
        len(others),
    )
    return RankedPage(
        top_matches=top[:top_matches_limit],
        others=others[offset:offset + page_size],
        total_others=len(others),
        total_pages=total_pages,
        page=page,
        page_size=page_size,
        total_candidates=total,
    )
