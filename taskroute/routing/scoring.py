"""Score adjustment rules for model candidates.

Pure functions: each takes static model data plus the merged task
requirements or runtime telemetry and returns the ScoreAdjustments that
apply. The router applies them in order: requirements (additive), then
history (multiplicative), then availability (multiplicative).
"""

from __future__ import annotations

from taskroute.schemas.performance import ModelPerformance
from taskroute.schemas.providers import ModelSpec, ModelTrait, ProviderPool
from taskroute.schemas.routing import AdjustmentKind, ScoreAdjustment, ScoreBreakdown
from taskroute.schemas.task import (
    Accuracy,
    Complexity,
    CostTier,
    Speed,
    TaskRequirements,
    Volume,
)

# Remaining-request thresholds, checked top to bottom: (below, factor, name)
_BUDGET_PENALTIES: list[tuple[int, float, str]] = [
    (1, 0.1, "rate_limit_exhausted"),
    (10, 0.7, "rate_limit_low"),
    (25, 0.9, "rate_limit_reduced"),
]

AVAILABILITY_UNKNOWN_FACTOR = 0.8
FASTER_THAN_AVERAGE_FACTOR = 1.1
SLOWER_THAN_AVERAGE_FACTOR = 0.9


def _add(name: str, delta: float) -> ScoreAdjustment:
    return ScoreAdjustment(name=name, kind=AdjustmentKind.ADDITIVE, value=delta)


def _mul(name: str, factor: float) -> ScoreAdjustment:
    return ScoreAdjustment(name=name, kind=AdjustmentKind.MULTIPLICATIVE, value=factor)


def clamp(score: float, low: float = 0.0, high: float = 100.0) -> float:
    return max(low, min(high, score))


def requirement_adjustments(
    spec: ModelSpec,
    pool: ProviderPool,
    requirements: TaskRequirements,
    cheap_cost_threshold: float = 0.001,
) -> list[ScoreAdjustment]:
    """Additive adjustments for how well a model fits the requirements.

    Each requirement dimension is evaluated independently, so several
    rules can fire for the same model.
    """
    commercial = pool == ProviderPool.COMMERCIAL
    flagship = spec.has(ModelTrait.FLAGSHIP)
    out: list[ScoreAdjustment] = []

    if requirements.accuracy == Accuracy.CRITICAL and flagship:
        out.append(_add("accuracy_critical_flagship", 15 if commercial else 10))
    elif requirements.accuracy == Accuracy.LOW and spec.has(ModelTrait.SMALLEST):
        out.append(_add("accuracy_low_smallest", 5))

    if requirements.speed == Speed.REALTIME:
        if spec.has(ModelTrait.FASTEST):
            out.append(_add("realtime_fastest", 20))
        elif spec.has(ModelTrait.FAST) or spec.has(ModelTrait.MINI):
            out.append(_add("realtime_fast", 10))
        elif flagship and commercial:
            out.append(_add("realtime_slow_flagship", -10))

    if requirements.cost == CostTier.FREE:
        if commercial:
            out.append(_add("cost_free_commercial", -30))
        else:
            out.append(_add("cost_free_self_hosted", 25))
    elif requirements.cost == CostTier.LOW:
        price = spec.cost_per_1k_tokens
        if price is not None and price < cheap_cost_threshold:
            out.append(_add("cost_low_cheap", 15))
        elif spec.has(ModelTrait.MINI):
            out.append(_add("cost_low_mini", 10))

    if requirements.volume in (Volume.BULK, Volume.STREAMING) and spec.has(
        ModelTrait.LIGHTWEIGHT
    ):
        out.append(_add("volume_lightweight", 15))

    if requirements.complexity == Complexity.EXPERT:
        if flagship and commercial:
            out.append(_add("expert_flagship", 20))
        elif flagship or spec.has(ModelTrait.LONG_CONTEXT):
            out.append(_add("expert_large", 15))
    elif requirements.complexity == Complexity.SIMPLE and spec.has(ModelTrait.COMPACT):
        out.append(_add("simple_compact", 10))

    return out


def history_adjustments(
    performance: ModelPerformance | None,
    mean_latency: float | None,
) -> list[ScoreAdjustment]:
    """Multiplicative adjustments from recorded outcomes.

    A model with no history is left untouched (neutral factor).
    """
    if performance is None:
        return []

    out = [_mul("history_success_rate", performance.success_rate)]
    if mean_latency is not None and performance.avg_time < mean_latency:
        out.append(_mul("history_faster", FASTER_THAN_AVERAGE_FACTOR))
    else:
        out.append(_mul("history_slower", SLOWER_THAN_AVERAGE_FACTOR))
    return out


def availability_adjustment(remaining: int | None) -> ScoreAdjustment | None:
    """Penalty for a shrinking request budget.

    ``remaining`` is None when the budget lookup failed. Returns None when
    the budget is healthy.
    """
    if remaining is None:
        return _mul("availability_unknown", AVAILABILITY_UNKNOWN_FACTOR)
    for below, factor, name in _BUDGET_PENALTIES:
        if remaining < below:
            return _mul(name, factor)
    return None


def build_breakdown(
    base_score: float, adjustments: list[ScoreAdjustment],
) -> ScoreBreakdown:
    """Apply adjustments in order and clamp the result."""
    score = base_score
    for adjustment in adjustments:
        score = adjustment.apply(score)
    return ScoreBreakdown(
        base_score=base_score,
        adjustments=adjustments,
        raw_score=score,
        final_score=clamp(score),
    )


def format_reasoning(reasoning: str, breakdown: ScoreBreakdown) -> str:
    """Render a candidate's reasoning with its adjusted score."""
    text = f"{reasoning} (adjusted score: {breakdown.final_score:.1f})"
    if breakdown.adjustments:
        steps = ", ".join(a.describe() for a in breakdown.adjustments)
        text = f"{text} [{steps}]"
    return text
