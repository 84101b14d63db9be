"""Task presets: ready-made contexts for common CRM operations.

Users pick a preset as a starting point and can override individual
requirement fields. ``requirements_for`` derives a full requirement set
from the caller's urgency, with per-task-type adjustments.
"""

from __future__ import annotations

from collections.abc import Callable

from taskroute.schemas.task import (
    Accuracy,
    Complexity,
    CostTier,
    PartialRequirements,
    Speed,
    TaskContext,
    TaskRequirements,
    TaskType,
    Urgency,
    Volume,
)


def contact_scoring_task(urgency: Urgency = Urgency.MEDIUM) -> TaskContext:
    high = urgency in (Urgency.HIGH, Urgency.CRITICAL)
    return TaskContext(
        task_type=TaskType.CONTACT_SCORING,
        requirements=PartialRequirements(
            accuracy=Accuracy.HIGH if high else Accuracy.MEDIUM,
            speed=Speed.FAST if high else Speed.MEDIUM,
            cost=CostTier.LOW,
            complexity=Complexity.MEDIUM,
            volume=Volume.SINGLE,
        ),
        urgency=urgency,
    )


def bulk_categorization_task() -> TaskContext:
    return TaskContext(
        task_type=TaskType.CATEGORIZATION,
        requirements=PartialRequirements(
            accuracy=Accuracy.MEDIUM,
            speed=Speed.FAST,
            cost=CostTier.FREE,
            complexity=Complexity.SIMPLE,
            volume=Volume.BULK,
        ),
    )


def critical_enrichment_task() -> TaskContext:
    return TaskContext(
        task_type=TaskType.CONTACT_ENRICHMENT,
        requirements=PartialRequirements(
            accuracy=Accuracy.CRITICAL,
            speed=Speed.MEDIUM,
            cost=CostTier.MEDIUM,
            complexity=Complexity.COMPLEX,
            volume=Volume.SINGLE,
        ),
        urgency=Urgency.HIGH,
    )


PRESETS: dict[str, Callable[[], TaskContext]] = {
    "contact_scoring": contact_scoring_task,
    "bulk_categorization": bulk_categorization_task,
    "critical_enrichment": critical_enrichment_task,
}


def resolve_preset(name: str) -> TaskContext:
    """Build the named preset context.

    Raises:
        ValueError: If the preset name is unknown.
    """
    if name not in PRESETS:
        valid = ", ".join(PRESETS)
        msg = f"Unknown preset: '{name}'. Choose from: {valid}"
        raise ValueError(msg)
    return PRESETS[name]()


def requirements_for(
    task_type: str,
    urgency: Urgency = Urgency.MEDIUM,
    overrides: PartialRequirements | None = None,
) -> TaskRequirements:
    """Derive requirements from urgency, then apply task-type adjustments.

    Critical urgency asks for critical accuracy and fast responses, high
    urgency for high accuracy. Explicit ``overrides`` win over both.
    """
    if urgency == Urgency.CRITICAL:
        accuracy, speed = Accuracy.CRITICAL, Speed.FAST
    elif urgency == Urgency.HIGH:
        accuracy, speed = Accuracy.HIGH, Speed.MEDIUM
    else:
        accuracy, speed = Accuracy.MEDIUM, Speed.MEDIUM

    base = TaskRequirements(
        accuracy=accuracy,
        speed=speed,
        cost=CostTier.LOW,
        complexity=Complexity.MEDIUM,
        volume=Volume.SINGLE,
    )

    if task_type in (TaskType.CATEGORIZATION, TaskType.TAGGING):
        base = base.model_copy(update={
            "complexity": Complexity.SIMPLE,
            "cost": CostTier.FREE,
            "speed": Speed.FAST,
        })
    elif task_type == TaskType.RELATIONSHIP_MAPPING:
        base = base.model_copy(update={
            "complexity": Complexity.EXPERT,
            "accuracy": Accuracy.CRITICAL,
        })
    elif task_type == TaskType.CONTACT_ENRICHMENT:
        base = base.model_copy(update={
            "complexity": Complexity.COMPLEX,
            "cost": CostTier.MEDIUM,
        })

    return base.merged(overrides)


def context_for(
    task_type: str,
    urgency: Urgency | None = None,
    overrides: PartialRequirements | None = None,
    batch_size: int = 1,
) -> TaskContext:
    """Build a router context for *task_type*.

    Without an urgency only ``overrides`` are sent and the task profile's
    defaults fill the rest. With an urgency every requirement comes from
    ``requirements_for``, so the profile defaults are replaced.
    """
    if urgency is None:
        return TaskContext(
            task_type=task_type,
            requirements=overrides or PartialRequirements(),
            batch_size=batch_size,
        )

    derived = requirements_for(task_type, urgency, overrides)
    return TaskContext(
        task_type=task_type,
        requirements=PartialRequirements(**derived.model_dump()),
        urgency=urgency,
        batch_size=batch_size,
    )
