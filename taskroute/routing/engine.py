"""Task Router: picks a provider/model for a CRM analysis task.

Scores every candidate of the task's profile that belongs to an
available provider, combining static suitability with the task's
requirements, recorded outcomes and the remaining request budget, then
returns the best candidate with ranked fallbacks.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path

from taskroute.errors import NoAvailableModelError, UnsupportedTaskTypeError
from taskroute.performance.tracker import PerformanceTracker
from taskroute.persistence.store import KeyValueStore
from taskroute.providers.registry import (
    available_providers,
    load_profiles,
    load_providers,
    load_router_settings,
)
from taskroute.ratelimit import RateLimiter, RequestBudgetSource
from taskroute.routing.estimates import estimate_cost, estimate_latency
from taskroute.routing.scoring import (
    availability_adjustment,
    build_breakdown,
    format_reasoning,
    history_adjustments,
    requirement_adjustments,
)
from taskroute.schemas.performance import PerformanceStats, TaskPerformanceMetrics
from taskroute.schemas.providers import (
    ModelCandidate,
    ModelSpec,
    ProviderConfig,
    TaskProfile,
)
from taskroute.schemas.routing import (
    FallbackOption,
    ModelSelection,
    ScoreBreakdown,
    TaskRecommendation,
)
from taskroute.schemas.settings import RouterSettings
from taskroute.schemas.task import TaskContext, TaskRequirements

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Eligible:
    order: int
    provider: ProviderConfig
    candidate: ModelCandidate
    spec: ModelSpec


@dataclass(frozen=True)
class ScoredCandidate:
    """A candidate with its final breakdown and estimates."""

    order: int
    provider: str
    candidate: ModelCandidate
    breakdown: ScoreBreakdown
    expected_cost: float
    expected_latency: float

    @property
    def model(self) -> str:
        return self.candidate.model

    @property
    def reasoning(self) -> str:
        return format_reasoning(self.candidate.reasoning, self.breakdown)

    def as_fallback(self) -> FallbackOption:
        return FallbackOption(
            provider=self.provider, model=self.model, reasoning=self.reasoning,
        )


def _rank_key(scored: ScoredCandidate) -> tuple[float, float, float, float, int]:
    """Descending final and raw score, then cheaper, faster, config order."""
    return (
        -scored.breakdown.final_score,
        -scored.breakdown.raw_score,
        scored.expected_cost,
        scored.expected_latency,
        scored.order,
    )


class TaskRouter:
    """Requirement-aware model selection with adaptive scoring.

    The router itself holds no mutable state; outcome history lives in the
    injected PerformanceTracker and request budgets in the budget source.
    """

    def __init__(
        self,
        providers: dict[str, ProviderConfig],
        profiles: dict[str, TaskProfile],
        tracker: PerformanceTracker | None = None,
        budget_source: RequestBudgetSource | None = None,
        settings: RouterSettings | None = None,
    ) -> None:
        self._providers = providers
        self._profiles = profiles
        self._settings = settings or RouterSettings()
        self._tracker = tracker or PerformanceTracker.from_settings(self._settings)
        self._budget = budget_source if budget_source is not None else RateLimiter()

    @classmethod
    def from_config(
        cls,
        store: KeyValueStore | None = None,
        budget_source: RequestBudgetSource | None = None,
        config_dir: Path | None = None,
    ) -> TaskRouter:
        """Build a router from the TOML files in *config_dir* (or the packaged defaults)."""

        def _path(name: str) -> Path | None:
            return config_dir / name if config_dir else None

        settings = load_router_settings(_path("defaults.toml"))
        return cls(
            providers=load_providers(_path("providers.toml")),
            profiles=load_profiles(_path("profiles.toml")),
            tracker=PerformanceTracker.from_settings(settings, store),
            budget_source=budget_source,
            settings=settings,
        )

    @property
    def providers(self) -> dict[str, ProviderConfig]:
        return self._providers

    @property
    def profiles(self) -> dict[str, TaskProfile]:
        return self._profiles

    @property
    def settings(self) -> RouterSettings:
        return self._settings

    @property
    def tracker(self) -> PerformanceTracker:
        return self._tracker

    def resolve_requirements(self, context: TaskContext) -> TaskRequirements:
        """Merge the context's requirement overrides over the profile defaults.

        Raises:
            UnsupportedTaskTypeError: If the task type has no profile.
        """
        return self._profile_for(context.task_type).default_requirements.merged(
            context.requirements,
        )

    def _profile_for(self, task_type: str) -> TaskProfile:
        profile = self._profiles.get(task_type)
        if profile is None:
            raise UnsupportedTaskTypeError(task_type)
        return profile

    async def select_optimal_model(self, context: TaskContext) -> ModelSelection:
        """Select the best available model for a task.

        Returns:
            ModelSelection with the primary model, reasoning, estimates,
            score breakdown and up to ``fallback_count`` fallbacks.

        Raises:
            UnsupportedTaskTypeError: If the task type has no profile.
            NoAvailableModelError: If no candidate belongs to an available
                provider.
        """
        profile = self._profile_for(context.task_type)
        requirements = profile.default_requirements.merged(context.requirements)

        logger.info(
            "Selecting model for %s (urgency=%s, batch_size=%d, %s)",
            context.task_type,
            context.urgency.value,
            context.batch_size,
            ", ".join(f"{k}={v}" for k, v in requirements.model_dump(mode="json").items()),
        )

        ranked = await self._rank(profile, requirements)
        if not ranked:
            raise NoAvailableModelError(context.task_type)

        best = ranked[0]
        fallbacks = [
            s.as_fallback() for s in ranked[1:]
            if (s.provider, s.model) != (best.provider, best.model)
        ][:self._settings.fallback_count]

        selection = ModelSelection(
            provider=best.provider,
            model=best.model,
            reasoning=best.reasoning,
            expected_cost=best.expected_cost,
            expected_latency=best.expected_latency,
            confidence_score=best.breakdown.final_score,
            fallback_options=fallbacks,
            breakdown=best.breakdown,
        )

        logger.info(
            "Selected %s for %s (score=%.1f, est=$%.5f, %.0fms, %d fallbacks)",
            selection.model_key,
            context.task_type,
            selection.confidence_score,
            selection.expected_cost,
            selection.expected_latency,
            len(fallbacks),
        )
        return selection

    async def rank_candidates(self, context: TaskContext) -> list[ScoredCandidate]:
        """Score and order every eligible candidate without choosing one."""
        profile = self._profile_for(context.task_type)
        requirements = profile.default_requirements.merged(context.requirements)
        return await self._rank(profile, requirements)

    async def _rank(
        self, profile: TaskProfile, requirements: TaskRequirements,
    ) -> list[ScoredCandidate]:
        await self._tracker.load()
        eligible = self._eligible(profile)
        budgets = await asyncio.gather(
            *(self._remaining_budget(e.provider.name, e.spec.id) for e in eligible)
        )
        return sorted(
            (self._score(e, requirements, remaining) for e, remaining in zip(eligible, budgets)),
            key=_rank_key,
        )

    def _eligible(self, profile: TaskProfile) -> list[_Eligible]:
        """Candidates of available providers whose model the provider offers."""
        availability = available_providers(self._providers)
        eligible: list[_Eligible] = []
        for order, (provider_name, candidate) in enumerate(profile.iter_candidates()):
            if not availability.get(provider_name, False):
                continue
            provider = self._providers[provider_name]
            spec = provider.get_model(candidate.model)
            if spec is None:
                logger.warning(
                    "Skipping %s/%s: model not offered by provider",
                    provider_name, candidate.model,
                )
                continue
            eligible.append(_Eligible(order, provider, candidate, spec))
        return eligible

    async def _remaining_budget(self, provider: str, model: str) -> int | None:
        """Remaining requests for provider/model, or None if the lookup failed."""
        try:
            return await self._budget.get_remaining_requests(
                f"ai_{provider}",
                self._settings.rate_limit_identifier,
                model,
                self._settings.rate_limit,
            )
        except Exception as e:  # noqa: BLE001
            logger.warning("Could not check availability for %s/%s: %s", provider, model, e)
            return None

    def _score(
        self,
        eligible: _Eligible,
        requirements: TaskRequirements,
        remaining: int | None,
    ) -> ScoredCandidate:
        spec = eligible.spec
        model_key = f"{eligible.provider.name}/{spec.id}"

        adjustments = requirement_adjustments(
            spec,
            eligible.provider.pool,
            requirements,
            self._settings.cheap_cost_threshold,
        )
        adjustments += history_adjustments(
            self._tracker.model_performance(model_key),
            self._tracker.mean_latency(),
        )
        budget_penalty = availability_adjustment(remaining)
        if budget_penalty is not None:
            adjustments.append(budget_penalty)

        breakdown = build_breakdown(eligible.candidate.score, adjustments)
        logger.debug(
            "Scored %s: base=%.1f raw=%.2f final=%.2f (%s)",
            model_key,
            breakdown.base_score,
            breakdown.raw_score,
            breakdown.final_score,
            ", ".join(breakdown.names()) or "no adjustments",
        )

        return ScoredCandidate(
            order=eligible.order,
            provider=eligible.provider.name,
            candidate=eligible.candidate,
            breakdown=breakdown,
            expected_cost=estimate_cost(spec, requirements),
            expected_latency=estimate_latency(spec, requirements),
        )

    def get_task_recommendations(self, task_type: str) -> TaskRecommendation | None:
        """Config-only recommendation: top base score plus three alternatives.

        Ignores availability and history. Returns None for unknown task types.
        """
        profile = self._profiles.get(task_type)
        if profile is None:
            return None

        ranked = sorted(profile.iter_candidates(), key=lambda pc: -pc[1].score)
        if not ranked:
            return None

        (top_provider, top), *rest = ranked
        return TaskRecommendation(
            recommended_provider=top_provider,
            recommended_model=top.model,
            reasoning=top.reasoning,
            alternatives=[
                FallbackOption(provider=p, model=c.model, reasoning=c.reasoning)
                for p, c in rest[:self._settings.fallback_count]
            ],
        )

    async def record_task_performance(self, metrics: TaskPerformanceMetrics) -> None:
        """Report a completed task's outcome; never raises."""
        await self._tracker.record_task_performance(metrics)

    def get_performance_stats(self) -> PerformanceStats:
        return self._tracker.get_performance_stats()
