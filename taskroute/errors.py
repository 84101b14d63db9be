"""Exception hierarchy for taskroute."""


class TaskRouteError(Exception):
    """Base exception for all application-specific errors."""


class UnsupportedTaskTypeError(TaskRouteError):
    """Raised when a task type has no configured profile."""

    def __init__(self, task_type: str) -> None:
        self.task_type = task_type
        super().__init__(f"Unsupported task type: {task_type}")


class NoAvailableModelError(TaskRouteError):
    """Raised when every candidate for a task is unavailable."""

    def __init__(self, task_type: str) -> None:
        self.task_type = task_type
        super().__init__(f"No available models for task type: {task_type}")


class BudgetExceededError(TaskRouteError):
    """Raised when a bulk run cannot fit its cost or time limit."""


class ConfigError(TaskRouteError, ValueError):
    """Raised when a configuration file is missing sections or malformed."""
