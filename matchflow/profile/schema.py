# profile/schema.py
"""
Candidate and campaign records.

All records are frozen dataclasses: one scoring call sees an immutable
snapshot of the facts.  The ``from_dict`` loaders accept either
camelCase keys (as sent by the upstream API) or snake_case keys and
raise :class:`ProfileValidationError` when identity fields are missing
or a field has the wrong type.  Degenerate but well-formed values
(no niches, no snapshots, zero followers) are accepted as-is; the
component calculators define what they mean.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple, Union


class ProfileValidationError(ValueError):
    """Raised when an input record violates the caller contract."""


def _get(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _require_id(value: Any, what: str) -> Union[int, str]:
    if value is None or (isinstance(value, str) and not value.strip()):
        raise ProfileValidationError(f"{what} is missing an id")
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ProfileValidationError(f"{what} id must be an int or str, got {type(value).__name__}")
    return value


def _count(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ProfileValidationError(f"{name} must be a number, got bool")
    try:
        number = int(value)
        # Calculators divide counts as floats.
        math.isfinite(number)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ProfileValidationError(f"{name} must be a finite number, got {value!r}") from exc
    if number < 0:
        raise ProfileValidationError(f"{name} must not be negative, got {number}")
    return number


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise ProfileValidationError(f"{name} must be a number, got bool")
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ProfileValidationError(f"{name} must be a number, got {value!r}") from exc
    if not math.isfinite(number):
        raise ProfileValidationError(f"{name} must be a finite number, got {value!r}")
    return number


def _flag(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ProfileValidationError(f"{name} must be true or false, got {value!r}")
    return value


def _tags(value: Any, name: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str) or not isinstance(value, Sequence):
        raise ProfileValidationError(f"{name} must be a list of strings")
    tags = []
    for item in value:
        # The data source sometimes hands over niche rows instead of names.
        if isinstance(item, Mapping):
            item = item.get("name")
        if not isinstance(item, str):
            raise ProfileValidationError(f"{name} must contain only strings, got {item!r}")
        tags.append(item)
    return tuple(tags)


def _timestamp(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ProfileValidationError(f"applied_at is not an ISO timestamp: {value!r}") from exc
    raise ProfileValidationError(f"applied_at must be a datetime or ISO string, got {value!r}")


@dataclass(frozen=True)
class Snapshot:
    """One periodic measurement of a candidate's audience."""

    sequence_number: int
    total_followers: int
    avg_engagement_rate: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Snapshot":
        if not isinstance(data, Mapping):
            raise ProfileValidationError(f"snapshot must be a mapping, got {data!r}")
        return cls(
            sequence_number=_count(_get(data, "sequenceNumber", "sequence_number", "syncNumber", default=0), "sequence_number"),
            total_followers=_count(_get(data, "totalFollowers", "total_followers", default=0), "total_followers"),
            avg_engagement_rate=_number(_get(data, "avgEngagementRate", "avg_engagement_rate", default=0.0), "avg_engagement_rate"),
        )


@dataclass(frozen=True)
class EngagementStats:
    """Aggregate past-engagement statistics."""

    total_posts: int = 0
    average_likes: float = 0.0
    engagement_rate: float = 0.0  # percent, e.g. 4.2 means 4.2%

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngagementStats":
        return cls(
            total_posts=_count(_get(data, "totalPosts", "total_posts", default=0), "total_posts"),
            average_likes=_number(_get(data, "averageLikes", "average_likes", default=0.0), "average_likes"),
            engagement_rate=_number(_get(data, "engagementRate", "engagement_rate", default=0.0), "engagement_rate"),
        )


@dataclass(frozen=True)
class TrackRecord:
    """Historical collaboration record."""

    total_campaigns: int = 0
    success_rate: Optional[float] = None  # 0-100

    @property
    def has_history(self) -> bool:
        return self.total_campaigns > 0 and self.success_rate is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TrackRecord":
        rate = _get(data, "successRate", "success_rate")
        return cls(
            total_campaigns=_count(_get(data, "total", "totalCampaigns", "total_campaigns", default=0), "total_campaigns"),
            success_rate=None if rate is None else _number(rate, "success_rate"),
        )


@dataclass(frozen=True)
class CandidateProfile:
    """A content creator as seen by one scoring call."""

    candidate_id: Union[int, str]
    name: str = ""
    username: str = ""
    followers: int = 0
    following: int = 0
    media_count: int = 0
    is_verified: bool = False
    bio: str = ""
    niches: Tuple[str, ...] = ()
    location: str = ""
    engagement: EngagementStats = field(default_factory=EngagementStats)
    track_record: TrackRecord = field(default_factory=TrackRecord)
    # Ascending by sequence_number.
    snapshots: Tuple[Snapshot, ...] = ()

    def __post_init__(self) -> None:
        _require_id(self.candidate_id, "candidate")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CandidateProfile":
        """Build a profile from a data-source record.

        Raises:
            ProfileValidationError: If the record has no id or a field
                has an unusable type.
        """
        if not isinstance(data, Mapping):
            raise ProfileValidationError(f"candidate record must be a mapping, got {type(data).__name__}")
        candidate_id = _require_id(_get(data, "id", "candidateId", "candidate_id"), "candidate")
        engagement = _get(data, "postPerformance", "engagement", default={})
        track = _get(data, "pastCampaigns", "trackRecord", "track_record", default={})
        snapshots = _get(data, "profileSnapshots", "snapshots", default=[])
        if not isinstance(engagement, Mapping) or not isinstance(track, Mapping):
            raise ProfileValidationError("engagement and track record must be mappings")
        if isinstance(snapshots, (str, Mapping)) or not isinstance(snapshots, Sequence):
            raise ProfileValidationError("snapshots must be a list")
        ordered = sorted((Snapshot.from_dict(s) for s in snapshots), key=lambda s: s.sequence_number)
        return cls(
            candidate_id=candidate_id,
            name=str(_get(data, "name", default="")),
            username=str(_get(data, "username", default="")),
            followers=_count(_get(data, "followers", default=0), "followers"),
            following=_count(_get(data, "following", "instagramFollowsCount", default=0), "following"),
            media_count=_count(_get(data, "mediaCount", "media_count", "instagramMediaCount", default=0), "media_count"),
            is_verified=_flag(_get(data, "isVerified", "is_verified", default=False), "is_verified"),
            bio=str(_get(data, "bio", default="")),
            niches=_tags(_get(data, "niches"), "niches"),
            location=str(_get(data, "location", default="")),
            engagement=EngagementStats.from_dict(engagement),
            track_record=TrackRecord.from_dict(track),
            snapshots=tuple(ordered),
        )


@dataclass(frozen=True)
class CampaignProfile:
    """A marketing campaign as seen by one scoring call."""

    campaign_id: Union[int, str]
    name: str
    description: Optional[str] = None
    niches: Tuple[str, ...] = ()
    target_locations: Tuple[str, ...] = ()
    nationwide: bool = False
    campaign_type: str = ""

    def __post_init__(self) -> None:
        _require_id(self.campaign_id, "campaign")
        if not isinstance(self.name, str) or not self.name.strip():
            raise ProfileValidationError(f"campaign {self.campaign_id!r} is missing a name")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CampaignProfile":
        if not isinstance(data, Mapping):
            raise ProfileValidationError(f"campaign record must be a mapping, got {type(data).__name__}")
        description = _get(data, "description")
        return cls(
            campaign_id=_require_id(_get(data, "id", "campaignId", "campaign_id"), "campaign"),
            name=_get(data, "name", default=""),
            description=None if description is None else str(description),
            niches=_tags(_get(data, "niches"), "niches"),
            target_locations=_tags(_get(data, "targetCities", "targetLocations", "target_locations"), "target_locations"),
            nationwide=_flag(_get(data, "isPanIndia", "nationwide", default=False), "nationwide"),
            campaign_type=str(_get(data, "campaignType", "campaign_type", default="")),
        )


@dataclass(frozen=True)
class Application:
    """One candidate's submission to a campaign."""

    candidate: CandidateProfile
    application_id: Optional[Union[int, str]] = None
    applied_at: Optional[datetime] = None
    status: str = "pending"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Application":
        if not isinstance(data, Mapping):
            raise ProfileValidationError(f"application record must be a mapping, got {type(data).__name__}")
        candidate = _get(data, "candidate", "influencer")
        if candidate is None:
            raise ProfileValidationError("application has no candidate record")
        return cls(
            candidate=CandidateProfile.from_dict(candidate),
            application_id=_get(data, "applicationId", "application_id", "id"),
            applied_at=_timestamp(_get(data, "appliedAt", "applied_at", "createdAt")),
            status=str(_get(data, "status", default="pending")),
        )


def display_fields(profile: CandidateProfile) -> Dict[str, Any]:
    """Return the display fields of a candidate, as used in ranked output."""
    return {
        "id": profile.candidate_id,
        "name": profile.name,
        "username": profile.username,
        "followers": profile.followers,
        "engagement_rate": profile.engagement.engagement_rate,
        "niches": list(profile.niches),
        "location": profile.location,
    }
