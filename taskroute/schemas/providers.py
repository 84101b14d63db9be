"""Provider, model and task-profile configuration schemas.

Loaded once from providers.toml and profiles.toml. All models here are
frozen: the candidate tables are configuration, not runtime state.
"""

from __future__ import annotations

import os
from collections.abc import Iterator
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from taskroute.schemas.task import TaskRequirements


class ProviderPool(StrEnum):
    """Cost class of a provider."""

    SELF_HOSTED = "self_hosted"
    COMMERCIAL = "commercial"


class ModelTrait(StrEnum):
    """Static capability tags read by the requirement scoring rules."""

    FLAGSHIP = "flagship"
    FASTEST = "fastest"
    FAST = "fast"
    LIGHTWEIGHT = "lightweight"
    SMALLEST = "smallest"
    COMPACT = "compact"
    MINI = "mini"
    LONG_CONTEXT = "long_context"


class ModelSpec(BaseModel):
    """A single model offered by a provider."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Provider model identifier (e.g. 'gpt-4o-mini')")
    name: str = Field(default="", description="Human-friendly model name")
    capabilities: tuple[str, ...] = Field(default=())
    max_tokens: int = Field(gt=0, description="Maximum context size in tokens")
    cost_per_1k_tokens: float | None = Field(
        default=None, ge=0.0, description="USD per 1k tokens (None = free)"
    )
    description: str = Field(default="")
    traits: frozenset[ModelTrait] = Field(default=frozenset())
    base_latency_ms: int = Field(
        default=2500, gt=0, description="Typical single-request latency"
    )

    def has(self, trait: ModelTrait) -> bool:
        return trait in self.traits


class ProviderConfig(BaseModel):
    """Configuration for one AI provider.

    A provider is available only when it is enabled and a credential can
    be resolved, either inline or from the environment variable named by
    ``api_key_env``.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Provider key (e.g. 'openai', 'gemini')")
    display_name: str = Field(default="")
    pool: ProviderPool
    enabled: bool = Field(default=True)
    api_key_env: str = Field(default="", description="Env var holding the API key")
    api_key: str | None = Field(default=None, repr=False)
    models: tuple[ModelSpec, ...] = Field(default=())
    default_model: str = Field(default="")

    @property
    def credential(self) -> str | None:
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.environ.get(self.api_key_env) or None
        return None

    @property
    def is_available(self) -> bool:
        return self.enabled and bool(self.credential)

    def get_model(self, model_id: str) -> ModelSpec | None:
        """Look up a model by id, or None if the provider does not offer it."""
        for spec in self.models:
            if spec.id == model_id:
                return spec
        return None


class ModelCandidate(BaseModel):
    """A model proposed for a task type with its baseline suitability."""

    model_config = ConfigDict(frozen=True)

    model: str
    score: float = Field(ge=0.0, le=100.0)
    reasoning: str = Field(default="")


class TaskProfile(BaseModel):
    """Static per-task-type routing profile.

    ``candidates`` maps provider name to an ordered candidate list. The
    mapping order is the provider order used for stable tie-breaking.
    """

    model_config = ConfigDict(frozen=True)

    task_type: str
    candidates: dict[str, tuple[ModelCandidate, ...]] = Field(default_factory=dict)
    default_requirements: TaskRequirements

    def iter_candidates(self) -> Iterator[tuple[str, ModelCandidate]]:
        """Yield (provider, candidate) pairs in configuration order."""
        for provider, candidates in self.candidates.items():
            for candidate in candidates:
                yield provider, candidate
