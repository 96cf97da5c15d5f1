"""
Scoring subsystem for matchflow.

The `score` package turns one candidate/campaign pair into a canonical
`ScoreResult`.  Its parts are:

* `components` – Eight bounded calculators (niche match, audience
  relevance and quality, engagement, growth, location, past
  performance, content quality).
* `concepts` – The concept relationship graph used for fuzzy topical
  matching.
* `fallback` – Deterministic weighted scoring with a niche-mismatch
  penalty.
* `llm_judge` – LLM-assisted scoring where the model judges niche fit
  and the engine recomputes the overall score.
* `orchestrator` – The primary -> secondary -> deterministic chain and
  concurrent batch scoring.
"""

from .components import compute_components  # noqa: F401
from .concepts import DEFAULT_CONCEPT_GRAPH, ConceptGraph, load_concept_graph  # noqa: F401
from .fallback import fallback_score  # noqa: F401
from .llm_judge import judge_candidate  # noqa: F401
from .orchestrator import BatchOutcome, ScoringOrchestrator  # noqa: F401
from .schema import ComponentScoreSet, Recommendation, ScoreResult  # noqa: F401
