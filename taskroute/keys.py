"""API key loading for taskroute.

Provider credentials are read from the environment variables named in
providers.toml. Before the CLI builds a router, keys are loaded with
this priority:
  1. Environment variables (highest, already set in shell)
  2. ~/.taskroute/keys.env
  3. .env in current directory (project-level)
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from taskroute.schemas.providers import ProviderConfig

logger = logging.getLogger(__name__)

TASKROUTE_HOME = Path.home() / ".taskroute"
KEYS_FILE = TASKROUTE_HOME / "keys.env"


def load_keys_env(files: list[Path] | None = None) -> None:
    """Load API keys from keys.env files into os.environ.

    Existing env vars are NOT overwritten, so earlier files win over
    later ones and the shell wins over both.
    """
    for env_file in files if files is not None else [KEYS_FILE, Path.cwd() / ".env"]:
        if env_file.is_file():
            _load_env_file(env_file)


def _load_env_file(path: Path) -> None:
    """Parse a simple KEY=VALUE .env file and set vars that aren't already set."""
    try:
        for line in path.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if "=" not in line:
                continue
            key, _, value = line.partition("=")
            key = key.strip()
            value = value.strip().strip("'\"")
            if key and not os.environ.get(key):
                os.environ[key] = value
                logger.debug("Loaded %s from %s", key, path)
    except OSError:
        logger.debug("Could not read %s", path)


def missing_keys(registry: dict[str, ProviderConfig]) -> dict[str, str]:
    """Return provider name -> env var for enabled providers with no credential."""
    return {
        name: cfg.api_key_env
        for name, cfg in registry.items()
        if cfg.enabled and not cfg.credential
    }
