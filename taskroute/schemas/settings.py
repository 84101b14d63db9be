"""Router settings loaded from defaults.toml."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RateLimitConfig(BaseModel):
    """Request budget per limiting window."""

    max_requests: int = Field(default=100, gt=0)
    window_ms: int = Field(default=60_000, gt=0)
    skip_successful_requests: bool = False
    skip_failed_requests: bool = False


class RouterSettings(BaseModel):
    """Tunable limits for the router and performance tracker."""

    history_cap: int = Field(
        default=1000, gt=0, description="Records kept in memory"
    )
    persisted_cap: int = Field(
        default=500, gt=0, description="Records written to durable storage"
    )
    storage_key: str = Field(
        default="taskroute_task_performance",
        description="Key under which the history blob is stored",
    )
    rate_limit: RateLimitConfig = Field(default_factory=RateLimitConfig)
    rate_limit_identifier: str = Field(default="default")
    cheap_cost_threshold: float = Field(
        default=0.001, ge=0.0,
        description="cost_per_1k_tokens below which a model counts as cheap",
    )
    fallback_count: int = Field(default=3, ge=0)
