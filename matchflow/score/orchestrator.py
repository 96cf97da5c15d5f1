"""
Scoring orchestrator.

Scoring runs through an ordered chain of strategies: the primary LLM
provider, the secondary LLM provider, then the deterministic scorer.
Each strategy reports an explicit :class:`StrategyResult` instead of
raising, so failures never cross tier boundaries and the chain can be
tested by injecting stub strategies.  There are no retries within a
tier, no circuit breaker and no memory of provider health between
calls.

Whichever tier succeeds, the caller receives the same canonical
:class:`~matchflow.score.schema.ScoreResult`; the result alone does not
reveal which strategy produced it.  This is intentional: the overall
score is recomputed locally on every path, so the number means the
same thing regardless of provider availability.

Batches are scored concurrently under a semaphore of bounded width so
a large campaign does not flood the external providers.
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

from ..config import EngineConfig
from ..profile.schema import Application, CampaignProfile, CandidateProfile, ProfileValidationError
from .concepts import DEFAULT_CONCEPT_GRAPH, ConceptGraph, load_concept_graph
from .fallback import fallback_score
from .llm_judge import ResponseFormatError, judge_candidate
from .llm_providers import LLMProvider, ProviderError, build_provider
from .schema import ScoreResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyResult:
    """Outcome of one strategy attempt."""

    strategy: str
    result: Optional[ScoreResult] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.result is not None

    @classmethod
    def success(cls, strategy: str, result: ScoreResult) -> "StrategyResult":
        return cls(strategy=strategy, result=result)

    @classmethod
    def failure(cls, strategy: str, error: str) -> "StrategyResult":
        return cls(strategy=strategy, error=error)


class ScoringStrategy(ABC):
    """One tier of the scoring chain."""

    name = "strategy"

    @abstractmethod
    async def evaluate(self, candidate: CandidateProfile, campaign: CampaignProfile) -> StrategyResult:
        raise NotImplementedError


class LLMStrategy(ScoringStrategy):
    """Score with an LLM provider judging niche fit.

    The synchronous provider call runs in the default executor and is
    bounded by ``timeout`` seconds; a timeout counts as a failure.
    """

    def __init__(
        self,
        provider: LLMProvider,
        *,
        timeout: float = 20.0,
        graph: ConceptGraph = DEFAULT_CONCEPT_GRAPH,
        name: Optional[str] = None,
    ) -> None:
        self.provider = provider
        self.timeout = timeout
        self.graph = graph
        self.name = name or f"llm:{provider.name}"

    async def evaluate(self, candidate: CandidateProfile, campaign: CampaignProfile) -> StrategyResult:
        loop = asyncio.get_running_loop()
        call = loop.run_in_executor(None, judge_candidate, self.provider, candidate, campaign, self.graph)
        try:
            result = await asyncio.wait_for(call, timeout=self.timeout)
        except asyncio.TimeoutError:
            return StrategyResult.failure(self.name, f"timed out after {self.timeout:g}s")
        except (ProviderError, ResponseFormatError) as exc:
            return StrategyResult.failure(self.name, str(exc))
        except Exception as exc:  # noqa: BLE001
            return StrategyResult.failure(self.name, f"{type(exc).__name__}: {exc}")
        return StrategyResult.success(self.name, result)


class DeterministicStrategy(ScoringStrategy):
    """Local weighted scoring; never fails."""

    name = "deterministic"

    def __init__(self, graph: ConceptGraph = DEFAULT_CONCEPT_GRAPH) -> None:
        self.graph = graph

    async def evaluate(self, candidate: CandidateProfile, campaign: CampaignProfile) -> StrategyResult:
        return StrategyResult.success(self.name, fallback_score(candidate, campaign, self.graph))


class ScoringChainExhausted(RuntimeError):
    """Raised when every strategy in a chain failed."""


@dataclass(frozen=True)
class ScoredApplication:
    """An application paired with its score."""

    application: Application
    score: ScoreResult


@dataclass(frozen=True)
class SkippedApplication:
    """An input record that could not be scored."""

    index: int
    reason: str
    application_id: Optional[Any] = None


@dataclass
class BatchOutcome:
    """Result of scoring a batch of applications.

    ``scored`` keeps input order.  ``skipped`` lists malformed records,
    ``not_started`` lists applications left unscored because the batch
    was cancelled.  A batch is complete when nothing was left unstarted.
    """

    scored: List[ScoredApplication] = field(default_factory=list)
    skipped: List[SkippedApplication] = field(default_factory=list)
    not_started: List[Application] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.not_started

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    def summary(self) -> dict:
        return {
            "scored": len(self.scored),
            "skipped": self.skipped_count,
            "not_started": len(self.not_started),
            "complete": self.complete,
        }


CandidateInput = Union[CandidateProfile, Mapping[str, Any]]
CampaignInput = Union[CampaignProfile, Mapping[str, Any]]
ApplicationInput = Union[Application, CandidateProfile, Mapping[str, Any]]


def _as_candidate(candidate: CandidateInput) -> CandidateProfile:
    if isinstance(candidate, CandidateProfile):
        return candidate
    return CandidateProfile.from_dict(candidate)


def _as_campaign(campaign: CampaignInput) -> CampaignProfile:
    if isinstance(campaign, CampaignProfile):
        return campaign
    return CampaignProfile.from_dict(campaign)


def _as_application(item: ApplicationInput) -> Application:
    if isinstance(item, Application):
        return item
    if isinstance(item, CandidateProfile):
        return Application(candidate=item)
    return Application.from_dict(item)


def build_strategies(
    providers: Iterable[Optional[LLMProvider]],
    *,
    timeout: float = 20.0,
    graph: ConceptGraph = DEFAULT_CONCEPT_GRAPH,
) -> List[ScoringStrategy]:
    """Return LLM tiers for the given providers followed by the deterministic tier.

    ``None`` entries (unconfigured providers) are skipped.
    """
    strategies: List[ScoringStrategy] = [
        LLMStrategy(provider, timeout=timeout, graph=graph) for provider in providers if provider is not None
    ]
    strategies.append(DeterministicStrategy(graph))
    return strategies


class ScoringOrchestrator:
    """Run the scoring chain for single candidates and batches."""

    def __init__(self, strategies: Sequence[ScoringStrategy], *, batch_concurrency: int = 5) -> None:
        if not strategies:
            raise ValueError("ScoringOrchestrator needs at least one strategy")
        if batch_concurrency < 1:
            raise ValueError("batch_concurrency must be at least 1")
        self.strategies = list(strategies)
        self.batch_concurrency = batch_concurrency

    @classmethod
    def from_config(cls, config: EngineConfig, *, offline: bool = False) -> "ScoringOrchestrator":
        """Build the primary -> secondary -> deterministic chain from config.

        With ``offline`` only the deterministic tier is used.
        """
        graph = load_concept_graph(config.concept_graph, extend=config.extend_concept_graph)
        providers: List[Optional[LLMProvider]] = []
        if not offline:
            providers = [
                build_provider(config.primary_provider, config),
                build_provider(config.secondary_provider, config),
            ]
        strategies = build_strategies(providers, timeout=config.provider_timeout, graph=graph)
        logger.info("Scoring chain: %s", " -> ".join(s.name for s in strategies))
        return cls(strategies, batch_concurrency=config.batch_concurrency)

    async def score_async(self, candidate: CandidateInput, campaign: CampaignInput) -> ScoreResult:
        """Score one candidate, falling through the chain until a tier succeeds.

        Raises:
            ProfileValidationError: If either record is malformed.
            ScoringChainExhausted: If every tier failed (only possible
                for a chain without the deterministic tier).
        """
        candidate = _as_candidate(candidate)
        campaign = _as_campaign(campaign)
        errors = []
        for strategy in self.strategies:
            outcome = await strategy.evaluate(candidate, campaign)
            if outcome.ok:
                logger.debug(
                    "Candidate %s scored %d by %s",
                    candidate.candidate_id,
                    outcome.result.overall,
                    outcome.strategy,
                )
                return outcome.result
            logger.warning(
                "Scoring tier %s failed for candidate %s: %s",
                outcome.strategy,
                candidate.candidate_id,
                outcome.error,
            )
            errors.append(f"{outcome.strategy}: {outcome.error}")
        raise ScoringChainExhausted("; ".join(errors))

    def score(self, candidate: CandidateInput, campaign: CampaignInput) -> ScoreResult:
        """Synchronous wrapper around :meth:`score_async`.

        Must not be called from inside a running event loop.
        """
        return asyncio.run(self.score_async(candidate, campaign))

    async def score_batch(
        self,
        campaign: CampaignInput,
        applications: Iterable[ApplicationInput],
        *,
        concurrency: Optional[int] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> BatchOutcome:
        """Score every application for ``campaign`` concurrently.

        Malformed records are skipped and reported instead of failing the
        batch.  When ``cancel_event`` is set, applications that have not
        started yet are reported in ``not_started``; in-flight ones finish.

        Raises:
            ProfileValidationError: If the campaign itself is malformed.
            ValueError: If ``concurrency`` is below 1.
        """
        width = self.batch_concurrency if concurrency is None else concurrency
        if width < 1:
            raise ValueError(f"concurrency must be at least 1, got {width}")
        campaign = _as_campaign(campaign)
        outcome = BatchOutcome()
        pending: List[Application] = []
        positions: List[int] = []
        for index, item in enumerate(applications):
            try:
                pending.append(_as_application(item))
                positions.append(index)
            except ProfileValidationError as exc:
                app_id = item.get("id") if isinstance(item, Mapping) else None
                logger.warning("Skipping application #%d: %s", index, exc)
                outcome.skipped.append(SkippedApplication(index=index, reason=str(exc), application_id=app_id))

        semaphore = asyncio.Semaphore(width)

        async def run(application: Application) -> Optional[ScoreResult]:
            async with semaphore:
                if cancel_event is not None and cancel_event.is_set():
                    return None
                return await self.score_async(application.candidate, campaign)

        results = await asyncio.gather(*(run(app) for app in pending), return_exceptions=True)
        for index, application, result in zip(positions, pending, results):
            if isinstance(result, BaseException):
                logger.error(
                    "Could not score candidate %s",
                    application.candidate.candidate_id,
                    exc_info=result,
                )
                outcome.skipped.append(
                    SkippedApplication(index=index, reason=str(result), application_id=application.application_id)
                )
            elif result is None:
                outcome.not_started.append(application)
            else:
                outcome.scored.append(ScoredApplication(application=application, score=result))
        logger.info("Scored batch for campaign %s: %s", campaign.campaign_id, outcome.summary())
        return outcome
