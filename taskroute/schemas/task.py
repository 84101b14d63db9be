"""Task description schemas.

Defines the ordinal requirement enums, the task type enum, and the
TaskContext submitted to the router for each model selection.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TaskType(StrEnum):
    """CRM analysis tasks the router knows how to place."""

    CONTACT_SCORING = "contact_scoring"
    CONTACT_ENRICHMENT = "contact_enrichment"
    CATEGORIZATION = "categorization"
    TAGGING = "tagging"
    RELATIONSHIP_MAPPING = "relationship_mapping"
    SENTIMENT_ANALYSIS = "sentiment_analysis"
    LEAD_QUALIFICATION = "lead_qualification"
    OPPORTUNITY_ANALYSIS = "opportunity_analysis"
    RISK_ASSESSMENT = "risk_assessment"
    ENGAGEMENT_PREDICTION = "engagement_prediction"


class Accuracy(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class Speed(StrEnum):
    SLOW = "slow"
    MEDIUM = "medium"
    FAST = "fast"
    REALTIME = "realtime"


class CostTier(StrEnum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    FREE = "free"


class Complexity(StrEnum):
    SIMPLE = "simple"
    MEDIUM = "medium"
    COMPLEX = "complex"
    EXPERT = "expert"


class Volume(StrEnum):
    SINGLE = "single"
    BATCH = "batch"
    BULK = "bulk"
    STREAMING = "streaming"


class Urgency(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class TaskRequirements(BaseModel):
    """Complete non-functional requirements for one task.

    All five fields are always present. Task profiles carry a full set
    as defaults; callers override individual fields via
    PartialRequirements.
    """

    model_config = ConfigDict(frozen=True)

    accuracy: Accuracy
    speed: Speed
    cost: CostTier
    complexity: Complexity
    volume: Volume

    def merged(self, overrides: PartialRequirements | None) -> TaskRequirements:
        """Return a copy with every field set in *overrides* replaced."""
        if overrides is None:
            return self
        changes = overrides.model_dump(exclude_none=True)
        return self.model_copy(update=changes)


class PartialRequirements(BaseModel):
    """Caller-supplied requirements; unset fields fall back to the profile."""

    model_config = ConfigDict(frozen=True)

    accuracy: Accuracy | None = None
    speed: Speed | None = None
    cost: CostTier | None = None
    complexity: Complexity | None = None
    volume: Volume | None = None


class TaskContext(BaseModel):
    """One request to the router.

    ``business_context`` and ``payload`` are carried through for the caller
    and never read by the scoring logic.
    """

    task_type: str = Field(description="Task kind; normally a TaskType value")
    requirements: PartialRequirements = Field(
        default_factory=PartialRequirements,
        description="Requirement overrides merged over the profile defaults",
    )
    urgency: Urgency = Field(default=Urgency.MEDIUM)
    batch_size: int = Field(default=1, gt=0)
    business_context: str = Field(default="")
    payload: Any = Field(default=None, description="Opaque caller data")
