"""taskroute schema definitions.

All Pydantic v2 models used by the router, tracker and configuration.
"""

from taskroute.schemas.performance import (
    ModelPerformance,
    PerformanceStats,
    TaskPerformanceMetrics,
)
from taskroute.schemas.providers import (
    ModelCandidate,
    ModelSpec,
    ModelTrait,
    ProviderConfig,
    ProviderPool,
    TaskProfile,
)
from taskroute.schemas.routing import (
    AdjustmentKind,
    FallbackOption,
    ModelSelection,
    ScoreAdjustment,
    ScoreBreakdown,
    TaskRecommendation,
)
from taskroute.schemas.settings import RateLimitConfig, RouterSettings
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

__all__ = [
    "Accuracy",
    "AdjustmentKind",
    "Complexity",
    "CostTier",
    "FallbackOption",
    "ModelCandidate",
    "ModelPerformance",
    "ModelSelection",
    "ModelSpec",
    "ModelTrait",
    "PartialRequirements",
    "PerformanceStats",
    "ProviderConfig",
    "ProviderPool",
    "RateLimitConfig",
    "RouterSettings",
    "ScoreAdjustment",
    "ScoreBreakdown",
    "Speed",
    "TaskContext",
    "TaskPerformanceMetrics",
    "TaskProfile",
    "TaskRecommendation",
    "TaskRequirements",
    "TaskType",
    "Urgency",
    "Volume",
]
