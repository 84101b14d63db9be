"""Cost and latency estimates for a model under given requirements."""

from __future__ import annotations

from taskroute.schemas.providers import ModelSpec
from taskroute.schemas.task import Complexity, TaskRequirements, Volume

# Approximate tokens consumed by one task, by complexity
_TOKENS_BY_COMPLEXITY: dict[Complexity, int] = {
    Complexity.SIMPLE: 150,
    Complexity.MEDIUM: 300,
    Complexity.COMPLEX: 600,
    Complexity.EXPERT: 1000,
}

# Batched requests carry several records per prompt
_VOLUME_TOKEN_MULTIPLIER: dict[Volume, int] = {
    Volume.SINGLE: 1,
    Volume.BATCH: 5,
    Volume.BULK: 20,
    Volume.STREAMING: 1,
}

_COMPLEXITY_LATENCY_MULTIPLIER: dict[Complexity, float] = {
    Complexity.SIMPLE: 1.0,
    Complexity.MEDIUM: 1.0,
    Complexity.COMPLEX: 1.5,
    Complexity.EXPERT: 2.0,
}


def estimate_tokens(requirements: TaskRequirements) -> int:
    return (
        _TOKENS_BY_COMPLEXITY[requirements.complexity]
        * _VOLUME_TOKEN_MULTIPLIER[requirements.volume]
    )


def estimate_cost(spec: ModelSpec, requirements: TaskRequirements) -> float:
    """Estimate USD for one task. Free models cost 0."""
    price = spec.cost_per_1k_tokens or 0.0
    return price * (estimate_tokens(requirements) / 1000)


def estimate_latency(spec: ModelSpec, requirements: TaskRequirements) -> float:
    """Estimate milliseconds for one task from the model's base latency."""
    return spec.base_latency_ms * _COMPLEXITY_LATENCY_MULTIPLIER[requirements.complexity]
