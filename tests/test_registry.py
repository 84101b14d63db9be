"""Tests for taskroute.providers.registry: TOML config loading and lookups."""

from pathlib import Path

import pytest

from taskroute.errors import ConfigError
from taskroute.providers.registry import (
    available_providers,
    load_profiles,
    load_providers,
    load_router_settings,
    unknown_candidates,
)
from taskroute.schemas.providers import ModelTrait, ProviderPool
from taskroute.schemas.task import Accuracy, Complexity, CostTier, TaskType, Volume

# Path to the real config files shipped with the package
_CONFIG_DIR = Path(__file__).parent.parent / "taskroute" / "config"


class TestLoadProviders:
    def test_loads_real_config(self):
        registry = load_providers(_CONFIG_DIR / "providers.toml")
        assert list(registry) == ["gemini", "openai"]

    def test_default_path(self):
        assert set(load_providers()) == {"gemini", "openai"}

    def test_pools(self):
        registry = load_providers()
        assert registry["gemini"].pool == ProviderPool.SELF_HOSTED
        assert registry["openai"].pool == ProviderPool.COMMERCIAL

    def test_model_catalogue(self):
        registry = load_providers()
        gemini_ids = {m.id for m in registry["gemini"].models}
        assert {"gemma-2-2b-it", "gemma-2-9b-it", "gemma-2-27b-it",
                "gemini-1.5-flash-8b", "gemini-1.5-pro"} <= gemini_ids
        mini = registry["openai"].get_model("gpt-4o-mini")
        assert mini.cost_per_1k_tokens == pytest.approx(0.00015)
        assert mini.has(ModelTrait.MINI)

    def test_self_hosted_models_are_free(self):
        registry = load_providers()
        assert all(m.cost_per_1k_tokens is None for m in registry["gemini"].models)

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_providers(tmp_path / "nope.toml")

    def test_missing_section_raises(self, tmp_path):
        path = tmp_path / "providers.toml"
        path.write_text("[other]\nkey = 1\n")
        with pytest.raises(ConfigError, match="No \\[providers\\] section"):
            load_providers(path)

    def test_malformed_toml_raises(self, tmp_path):
        path = tmp_path / "providers.toml"
        path.write_text("[providers.broken\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_providers(path)

    def test_invalid_pool_raises(self, tmp_path):
        path = tmp_path / "providers.toml"
        path.write_text('[providers.x]\npool = "moon"\n')
        with pytest.raises(ConfigError, match="Invalid provider 'x'"):
            load_providers(path)

    def test_config_error_is_value_error(self, tmp_path):
        path = tmp_path / "providers.toml"
        path.write_text("")
        with pytest.raises(ValueError):
            load_providers(path)


class TestLoadProfiles:
    def test_every_task_type_has_a_profile(self):
        profiles = load_profiles(_CONFIG_DIR / "profiles.toml")
        assert set(profiles) == {t.value for t in TaskType}

    def test_default_requirements(self):
        profiles = load_profiles()
        req = profiles["relationship_mapping"].default_requirements
        assert req.accuracy == Accuracy.CRITICAL
        assert req.complexity == Complexity.EXPERT
        assert req.cost == CostTier.MEDIUM
        assert profiles["tagging"].default_requirements.volume == Volume.BULK

    def test_provider_order_preserved(self):
        profiles = load_profiles()
        assert list(profiles["contact_scoring"].candidates) == ["gemini", "openai"]

    def test_missing_default_requirements_raises(self, tmp_path):
        path = tmp_path / "profiles.toml"
        path.write_text(
            '[[profiles.tagging.candidates.gemini]]\nmodel = "m"\nscore = 50\n'
        )
        with pytest.raises(ConfigError, match="Invalid profile 'tagging'"):
            load_profiles(path)

    def test_missing_section_raises(self, tmp_path):
        path = tmp_path / "profiles.toml"
        path.write_text("")
        with pytest.raises(ConfigError):
            load_profiles(path)


class TestLoadRouterSettings:
    def test_loads_defaults(self):
        settings = load_router_settings(_CONFIG_DIR / "defaults.toml")
        assert settings.history_cap == 1000
        assert settings.persisted_cap == 500
        assert settings.rate_limit.max_requests == 100
        assert settings.rate_limit.window_ms == 60000
        assert settings.fallback_count == 3

    def test_missing_router_section_uses_builtins(self, tmp_path):
        path = tmp_path / "defaults.toml"
        path.write_text("")
        settings = load_router_settings(path)
        assert settings.storage_key == "taskroute_task_performance"

    def test_override(self, tmp_path):
        path = tmp_path / "defaults.toml"
        path.write_text("[router]\nhistory_cap = 10\n\n[router.rate_limit]\nmax_requests = 5\n")
        settings = load_router_settings(path)
        assert settings.history_cap == 10
        assert settings.rate_limit.max_requests == 5

    def test_invalid_value_raises(self, tmp_path):
        path = tmp_path / "defaults.toml"
        path.write_text("[router]\nhistory_cap = 0\n")
        with pytest.raises(ConfigError):
            load_router_settings(path)


class TestLookups:
    def test_available_providers_follows_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g")
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        availability = available_providers(load_providers())
        assert availability == {"gemini": True, "openai": False}

    def test_shipped_profiles_reference_known_models(self):
        assert unknown_candidates(load_providers(), load_profiles()) == []

    def test_unknown_candidates_reports_typos(self, tmp_path):
        path = tmp_path / "profiles.toml"
        path.write_text(
            "[profiles.tagging.default_requirements]\n"
            'accuracy = "low"\nspeed = "fast"\ncost = "free"\n'
            'complexity = "simple"\nvolume = "bulk"\n\n'
            "[[profiles.tagging.candidates.gemini]]\n"
            'model = "gemma-9-typo"\nscore = 50\n'
        )
        missing = unknown_candidates(load_providers(), load_profiles(path))
        assert missing == ["tagging:gemini/gemma-9-typo"]
