"""Task routing: requirement-aware model selection.

Scores each task profile's candidate models against the task's
requirements, recorded outcomes and remaining request budget.
"""

from taskroute.routing.engine import ScoredCandidate, TaskRouter
from taskroute.routing.estimates import estimate_cost, estimate_latency
from taskroute.routing.scoring import (
    availability_adjustment,
    build_breakdown,
    format_reasoning,
    history_adjustments,
    requirement_adjustments,
)

__all__ = [
    "ScoredCandidate",
    "TaskRouter",
    "availability_adjustment",
    "build_breakdown",
    "estimate_cost",
    "estimate_latency",
    "format_reasoning",
    "history_adjustments",
    "requirement_adjustments",
]
