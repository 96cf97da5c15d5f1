"""
Matchflow package: creator/campaign matching and ranking.

This package scores how well a content creator fits a marketing
campaign, classifies the match into a recommendation tier and ranks a
batch of scored applicants for presentation.  Each submodule
implements one step of the flow:

1. **profile** – Plain, immutable input records (`CandidateProfile`,
   `CampaignProfile`, `Application`) built from whatever the data
   source hands over.  Loaders validate identity fields and fail fast
   on caller contract violations.
2. **score** – Eight bounded component calculators, the concept
   relationship graph used for topical matching, a deterministic
   scorer, an LLM‑assisted scorer and the orchestrator that tries the
   primary provider, then the secondary provider, then the
   deterministic scorer.
3. **rank** – Filters, sorts and paginates scored candidates and
   separates the top tier from the rest.
4. **cli** – Command line entry point wiring the above together for
   JSON input files.

Every path produces the same canonical `ScoreResult`; the overall score
is always recomputed locally from the component scores.
"""

from importlib import metadata  # noqa: F401 (expose package version)
