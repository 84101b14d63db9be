"""taskroute: requirement-aware AI model routing for CRM analysis tasks."""

__version__ = "0.1.0"

from .errors import (
    NoAvailableModelError,
    TaskRouteError,
    UnsupportedTaskTypeError,
)
from .performance import PerformanceTracker
from .routing import TaskRouter
from .schemas import (
    ModelSelection,
    PartialRequirements,
    TaskContext,
    TaskPerformanceMetrics,
    TaskRequirements,
    TaskType,
)

__all__ = [
    "ModelSelection",
    "NoAvailableModelError",
    "PartialRequirements",
    "PerformanceTracker",
    "TaskContext",
    "TaskPerformanceMetrics",
    "TaskRequirements",
    "TaskRouteError",
    "TaskRouter",
    "TaskType",
    "UnsupportedTaskTypeError",
]
