"""
Ranking subsystem for matchflow.

* `ranker` – Filters scored candidates by tier, sorts them, separates
  the top matches and paginates the rest.
* `applications` – Scores a campaign's applicants as a batch and ranks
  the result.
"""

from .ranker import RankedPage, ScoredCandidate, rank_candidates  # noqa: F401
from .applications import rank_applications  # noqa: F401
