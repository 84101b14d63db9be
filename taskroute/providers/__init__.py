"""Provider and task-profile configuration loading."""

from taskroute.providers.registry import (
    available_providers,
    load_profiles,
    load_providers,
    load_router_settings,
    unknown_candidates,
)

__all__ = [
    "available_providers",
    "load_profiles",
    "load_providers",
    "load_router_settings",
    "unknown_candidates",
]
