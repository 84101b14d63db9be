"""Bulk run planning over a model selection.

Picks a model for running one task type across many records, checks the
projected cost and time against caller limits, and sizes batches for the
chosen provider pool. Execution itself stays with the caller.
"""

from __future__ import annotations

import logging
import math

from pydantic import BaseModel, Field

from taskroute.errors import BudgetExceededError
from taskroute.routing.engine import TaskRouter
from taskroute.schemas.providers import ProviderPool
from taskroute.schemas.routing import ModelSelection
from taskroute.schemas.task import (
    Accuracy,
    Complexity,
    CostTier,
    PartialRequirements,
    Speed,
    TaskContext,
    Urgency,
    Volume,
)

logger = logging.getLogger(__name__)

# Above this many records a run counts as bulk rather than batch
_BULK_THRESHOLD = 50
# Records processed per latency unit when projecting wall-clock time
_PARALLEL_FACTOR = 10


class BulkPlan(BaseModel):
    """Projected execution plan for a bulk run."""

    selection: ModelSelection
    item_count: int = Field(gt=0)
    batch_size: int = Field(gt=0)
    estimated_cost: float = Field(ge=0.0)
    estimated_time_ms: float = Field(ge=0.0)
    switched_to_free: bool = Field(
        default=False, description="True when the cost limit forced a cheaper model",
    )


def batch_size_for(pool: ProviderPool, total: int) -> int:
    """Records per batch: larger for the self-hosted pool, smaller for metered APIs."""
    if pool == ProviderPool.SELF_HOSTED:
        size = min(20, math.ceil(total / 5))
    else:
        size = min(10, math.ceil(total / 10))
    return max(1, size)


def _project(selection: ModelSelection, item_count: int) -> tuple[float, float]:
    cost = selection.expected_cost * item_count
    time_ms = selection.expected_latency * math.ceil(item_count / _PARALLEL_FACTOR)
    return cost, time_ms


async def plan_bulk_run(
    router: TaskRouter,
    task_type: str,
    item_count: int,
    *,
    urgency: Urgency = Urgency.MEDIUM,
    cost_limit: float | None = None,
    time_limit_ms: float | None = None,
) -> BulkPlan:
    """Select a model for *item_count* records and check it fits the limits.

    When the projected cost exceeds ``cost_limit`` the selection is retried
    with free-tier requirements and kept if it fits.

    Raises:
        BudgetExceededError: If no selection fits the cost limit, or the
            projected time exceeds ``time_limit_ms``.
        UnsupportedTaskTypeError, NoAvailableModelError: From the router.
    """
    if item_count <= 0:
        raise ValueError("item_count must be positive")

    context = TaskContext(
        task_type=task_type,
        requirements=PartialRequirements(
            accuracy=Accuracy.HIGH if urgency == Urgency.HIGH else Accuracy.MEDIUM,
            speed=Speed.FAST,
            cost=CostTier.LOW if cost_limit is not None else CostTier.FREE,
            complexity=Complexity.SIMPLE,
            volume=Volume.BULK if item_count > _BULK_THRESHOLD else Volume.BATCH,
        ),
        urgency=urgency,
        batch_size=item_count,
    )

    selection = await router.select_optimal_model(context)
    cost, time_ms = _project(selection, item_count)
    switched = False

    logger.info(
        "Bulk %s over %d records: %s (est=$%.4f, %.0fms)",
        task_type, item_count, selection.model_key, cost, time_ms,
    )

    if cost_limit is not None and cost > cost_limit:
        cheaper_context = context.model_copy(update={
            "requirements": context.requirements.model_copy(update={"cost": CostTier.FREE}),
        })
        cheaper = await router.select_optimal_model(cheaper_context)
        cheaper_cost, cheaper_time = _project(cheaper, item_count)
        if cheaper_cost > cost_limit:
            raise BudgetExceededError(
                f"Cannot complete bulk {task_type} within cost limit of ${cost_limit:.4f} "
                f"(cheapest estimate ${cheaper_cost:.4f})"
            )
        logger.info(
            "Switched to cheaper model due to cost constraint: %s -> %s (saves $%.4f)",
            selection.model_key, cheaper.model_key, cost - cheaper_cost,
        )
        selection, cost, time_ms, switched = cheaper, cheaper_cost, cheaper_time, True

    if time_limit_ms is not None and time_ms > time_limit_ms:
        raise BudgetExceededError(
            f"Estimated completion time ({time_ms:.0f}ms) exceeds limit ({time_limit_ms:.0f}ms)"
        )

    pool = router.providers[selection.provider].pool
    return BulkPlan(
        selection=selection,
        item_count=item_count,
        batch_size=batch_size_for(pool, item_count),
        estimated_cost=cost,
        estimated_time_ms=time_ms,
        switched_to_free=switched,
    )
