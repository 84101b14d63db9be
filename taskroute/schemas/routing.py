"""Routing decision schemas.

ModelSelection is the router's output. The ScoreBreakdown records every
adjustment applied to a candidate so that tests and audit logs work on
structured data; the human-readable reasoning is formatted from it.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class AdjustmentKind(StrEnum):
    ADDITIVE = "additive"
    MULTIPLICATIVE = "multiplicative"


class ScoreAdjustment(BaseModel):
    """One named step applied to a candidate's score."""

    name: str = Field(description="Rule identifier (e.g. 'cost_free_self_hosted')")
    kind: AdjustmentKind
    value: float = Field(description="Delta for additive, factor for multiplicative")

    def apply(self, score: float) -> float:
        if self.kind is AdjustmentKind.ADDITIVE:
            return score + self.value
        return score * self.value

    def describe(self) -> str:
        if self.kind is AdjustmentKind.ADDITIVE:
            return f"{self.name} {self.value:+g}"
        return f"{self.name} x{self.value:g}"


class ScoreBreakdown(BaseModel):
    """Base score, ordered adjustments, and the resulting scores."""

    base_score: float
    adjustments: list[ScoreAdjustment] = Field(default_factory=list)
    raw_score: float = Field(description="Score after all adjustments, unclamped")
    final_score: float = Field(ge=0.0, le=100.0, description="Raw score clamped to [0, 100]")

    def delta(self, name: str) -> float | None:
        """Return the value of the named adjustment, or None if not applied."""
        for adjustment in self.adjustments:
            if adjustment.name == name:
                return adjustment.value
        return None

    def names(self) -> list[str]:
        return [a.name for a in self.adjustments]


class FallbackOption(BaseModel):
    """A ranked alternative to the primary selection."""

    provider: str
    model: str
    reasoning: str = ""

    @property
    def model_key(self) -> str:
        return f"{self.provider}/{self.model}"


class ModelSelection(BaseModel):
    """The router's choice for one task, with fallbacks."""

    provider: str
    model: str
    reasoning: str
    expected_cost: float = Field(ge=0.0, description="Estimated USD for one task")
    expected_latency: float = Field(ge=0.0, description="Estimated milliseconds")
    confidence_score: float = Field(ge=0.0, le=100.0)
    fallback_options: list[FallbackOption] = Field(default_factory=list)
    breakdown: ScoreBreakdown

    @property
    def model_key(self) -> str:
        return f"{self.provider}/{self.model}"


class TaskRecommendation(BaseModel):
    """Config-only recommendation for a task type."""

    recommended_provider: str
    recommended_model: str
    reasoning: str
    alternatives: list[FallbackOption] = Field(default_factory=list)
