"""
Concept relationship graph.

A hand-curated lookup of topical adjacency ("skincare" relates to
"beauty") used by the niche-match calculator.  The graph is data, not
logic: the default edges live in ``concepts.yaml`` next to this module
and are loaded once at import into :data:`DEFAULT_CONCEPT_GRAPH`.
Deployments can extend or replace the graph with their own YAML file
via :func:`load_concept_graph`, and tests can build a minimal
:class:`ConceptGraph` directly.
"""

from __future__ import annotations

import logging
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Optional, Tuple

import yaml  # type: ignore

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_PATH = Path(__file__).with_name("concepts.yaml")


class ConceptGraph:
    """Immutable topic -> related-topics mapping."""

    def __init__(self, edges: Mapping[str, Iterable[str]]) -> None:
        self._edges: Mapping[str, Tuple[str, ...]] = MappingProxyType(
            {
                str(topic).strip().lower(): tuple(str(r).strip().lower() for r in related if str(r).strip())
                for topic, related in edges.items()
            }
        )

    @property
    def edges(self) -> Mapping[str, Tuple[str, ...]]:
        return self._edges

    def related_to(self, topic: str) -> Tuple[str, ...]:
        return self._edges.get(topic.lower(), ())

    def related(self, first: str, second: str) -> bool:
        """Return True when either topic's related-list matches the other.

        Matching is a case-insensitive substring test in both directions,
        so "beauty" is related to "makeup tutorials" through the
        "makeup" edge.
        """
        a = first.lower()
        b = second.lower()
        if any(b in r or r in b for r in self.related_to(a)):
            return True
        return any(a in r or r in a for r in self.related_to(b))

    def merged(self, extra: Mapping[str, Iterable[str]]) -> "ConceptGraph":
        """Return a new graph with ``extra`` edges appended."""
        combined = {topic: list(related) for topic, related in self._edges.items()}
        for topic, related in extra.items():
            key = str(topic).strip().lower()
            existing = combined.setdefault(key, [])
            for r in related:
                value = str(r).strip().lower()
                if value and value not in existing:
                    existing.append(value)
        return ConceptGraph(combined)

    def __len__(self) -> int:
        return len(self._edges)

    def __repr__(self) -> str:
        return f"ConceptGraph({len(self)} topics)"


def _read_edges(path: Path) -> Mapping[str, Iterable[str]]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict) or not all(isinstance(v, list) for v in data.values()):
        raise ValueError(f"Concept graph {path} must map each topic to a list of topics")
    return data


def load_concept_graph(path: Optional[str] = None, *, extend: bool = True) -> ConceptGraph:
    """Load a concept graph from a YAML file.

    Args:
        path: YAML file mapping topic -> list of related topics.  When
            ``None`` the default graph is returned.
        extend: Merge the file's edges into the default graph instead
            of replacing it.

    Returns:
        A new :class:`ConceptGraph`.
    """
    if path is None:
        return DEFAULT_CONCEPT_GRAPH
    edges = _read_edges(Path(path))
    graph = DEFAULT_CONCEPT_GRAPH.merged(edges) if extend else ConceptGraph(edges)
    logger.info("Loaded concept graph from %s (%d topics)", path, len(graph))
    return graph


DEFAULT_CONCEPT_GRAPH = ConceptGraph(_read_edges(DEFAULT_GRAPH_PATH))
