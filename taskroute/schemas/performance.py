"""Performance tracking schemas."""

from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel, Field


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


class TaskPerformanceMetrics(BaseModel):
    """Outcome of one completed task, reported by the caller.

    ``model_used`` is the composite ``provider/model`` key.
    """

    task_type: str
    model_used: str
    execution_time: float = Field(ge=0.0, description="Milliseconds")
    accuracy: float = Field(default=0.0, ge=0.0, le=1.0)
    cost: float = Field(default=0.0, ge=0.0)
    success: bool
    timestamp: str = Field(default_factory=_now_iso)


class ModelPerformance(BaseModel):
    """Aggregate over all retained records for one model key."""

    model: str
    avg_time: float
    success_rate: float = Field(ge=0.0, le=1.0)
    avg_cost: float
    samples: int = Field(ge=1)


class PerformanceStats(BaseModel):
    total_tasks: int = 0
    overall_success_rate: float = 0.0
    avg_response_time: float = 0.0
    model_performance: list[ModelPerformance] = Field(default_factory=list)
