"""
Input records for the matching engine.

The data source supplies candidate and campaign facts as plain
mappings.  This package turns them into immutable dataclasses and
rejects records that are missing identity fields.
"""

from .schema import (  # noqa: F401
    Application,
    CampaignProfile,
    CandidateProfile,
    EngagementStats,
    ProfileValidationError,
    Snapshot,
    TrackRecord,
)
