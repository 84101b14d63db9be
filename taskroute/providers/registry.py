"""Provider registry and TOML configuration loader.

Loads provider definitions from providers.toml, task profiles from
profiles.toml and router defaults from defaults.toml. Provides lookup
methods for provider availability.
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path

from pydantic import ValidationError

from taskroute.errors import ConfigError
from taskroute.schemas.providers import ProviderConfig, TaskProfile
from taskroute.schemas.settings import RouterSettings

logger = logging.getLogger(__name__)

# Default config directory relative to the taskroute package
_CONFIG_DIR = Path(__file__).parent.parent / "config"


def _read_toml(path: Path, label: str) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"{label} not found: {path}")
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e


def load_providers(config_path: Path | None = None) -> dict[str, ProviderConfig]:
    """Load the provider registry from a TOML file.

    Args:
        config_path: Path to providers.toml. Defaults to taskroute/config/providers.toml.

    Returns:
        Dictionary mapping provider names to ProviderConfig instances,
        in file order.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigError: If the TOML structure is invalid.
    """
    path = config_path or _CONFIG_DIR / "providers.toml"
    raw = _read_toml(path, "Provider registry")

    section = raw.get("providers")
    if not section or not isinstance(section, dict):
        raise ConfigError(f"No [providers] section found in {path}")

    registry: dict[str, ProviderConfig] = {}
    for name, entry in section.items():
        if not isinstance(entry, dict):
            continue
        try:
            registry[name] = ProviderConfig(name=name, **entry)
        except ValidationError as e:
            raise ConfigError(f"Invalid provider '{name}' in {path}: {e}") from e

    return registry


def load_profiles(config_path: Path | None = None) -> dict[str, TaskProfile]:
    """Load task profiles from a TOML file.

    Args:
        config_path: Path to profiles.toml. Defaults to taskroute/config/profiles.toml.

    Returns:
        Dictionary mapping task type names to TaskProfile instances.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigError: If a profile is missing its default requirements or
            has malformed candidates.
    """
    path = config_path or _CONFIG_DIR / "profiles.toml"
    raw = _read_toml(path, "Task profiles")

    section = raw.get("profiles")
    if not section or not isinstance(section, dict):
        raise ConfigError(f"No [profiles] section found in {path}")

    profiles: dict[str, TaskProfile] = {}
    for task_type, entry in section.items():
        if not isinstance(entry, dict):
            continue
        try:
            profiles[task_type] = TaskProfile(task_type=task_type, **entry)
        except ValidationError as e:
            raise ConfigError(f"Invalid profile '{task_type}' in {path}: {e}") from e

    return profiles


def load_router_settings(config_path: Path | None = None) -> RouterSettings:
    """Load router defaults from a TOML file.

    A missing ``[router]`` section yields the built-in defaults.

    Raises:
        FileNotFoundError: If the config file does not exist.
        ConfigError: If a value fails validation.
    """
    path = config_path or _CONFIG_DIR / "defaults.toml"
    raw = _read_toml(path, "Router config")

    try:
        return RouterSettings(**raw.get("router", {}))
    except ValidationError as e:
        raise ConfigError(f"Invalid [router] section in {path}: {e}") from e


def available_providers(registry: dict[str, ProviderConfig]) -> dict[str, bool]:
    """Map each provider name to whether it can be used right now."""
    availability = {name: cfg.is_available for name, cfg in registry.items()}
    for name, ok in availability.items():
        if not ok:
            logger.debug("Provider %s unavailable (disabled or missing credential)", name)
    return availability


def unknown_candidates(
    registry: dict[str, ProviderConfig],
    profiles: dict[str, TaskProfile],
) -> list[str]:
    """Return ``task_type:provider/model`` entries that no provider offers.

    The CLI `profiles` command prints these as typo warnings. The router
    skips such candidates at selection time.
    """
    missing: list[str] = []
    for task_type, profile in profiles.items():
        for provider, candidate in profile.iter_candidates():
            cfg = registry.get(provider)
            if cfg is None or cfg.get_model(candidate.model) is None:
                missing.append(f"{task_type}:{provider}/{candidate.model}")
    return missing
