"""Shared fixtures for the matchflow test-suite."""

from __future__ import annotations

from typing import Any, List

import pytest

from matchflow.profile.schema import (
    CampaignProfile,
    CandidateProfile,
    EngagementStats,
    Snapshot,
    TrackRecord,
)
from matchflow.score.llm_providers import LLMProvider, ProviderError


def build_candidate(**overrides: Any) -> CandidateProfile:
    """A mid-sized fashion creator in Mumbai; override any field."""
    values = dict(
        candidate_id=1,
        name="Asha Rao",
        username="asha.styles",
        followers=5000,
        following=1000,
        media_count=150,
        is_verified=False,
        bio="Everyday fashion and styling",
        niches=("fashion",),
        location="Mumbai, Maharashtra",
        engagement=EngagementStats(total_posts=150, average_likes=250.0, engagement_rate=5.0),
        track_record=TrackRecord(),
        snapshots=(),
    )
    values.update(overrides)
    return CandidateProfile(**values)


def build_campaign(**overrides: Any) -> CampaignProfile:
    values = dict(
        campaign_id=10,
        name="Summer Edit",
        description="Summer collection launch",
        niches=("fashion",),
        target_locations=("Mumbai",),
        nationwide=False,
        campaign_type="paid",
    )
    values.update(overrides)
    return CampaignProfile(**values)


def snapshots(*points: tuple) -> tuple:
    """Build snapshots from ``(followers, engagement_rate)`` pairs in order."""
    return tuple(
        Snapshot(sequence_number=i + 1, total_followers=f, avg_engagement_rate=r) for i, (f, r) in enumerate(points)
    )


class StubProvider(LLMProvider):
    """Provider returning a canned completion and recording prompts."""

    def __init__(self, content: str, name: str = "stub") -> None:
        self.content = content
        self.name = name
        self.prompts: List[str] = []

    def complete(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self.content


class FailingProvider(LLMProvider):
    """Provider whose every call fails."""

    def __init__(self, name: str = "broken") -> None:
        self.name = name
        self.calls = 0

    def complete(self, prompt: str) -> str:
        self.calls += 1
        raise ProviderError(f"{self.name} is down")


@pytest.fixture
def candidate() -> CandidateProfile:
    return build_candidate()


@pytest.fixture
def campaign() -> CampaignProfile:
    return build_campaign()
