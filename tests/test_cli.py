"""Tests for the taskroute CLI.

Covers every command via CliRunner, including error exits and the
record/stats round trip through a SQLite history database.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from taskroute import __version__
from taskroute.cli import app

# NO_COLOR=1 prevents Rich from injecting ANSI codes inside option names,
# which breaks substring matching in CI (headless, no TTY).
# COLUMNS=200 prevents wrapping that could split a flag across lines.
runner = CliRunner(env={"NO_COLOR": "1", "COLUMNS": "200"})

# Patch target
_LOAD_KEYS = "taskroute.cli.load_keys_env"


@pytest.fixture(autouse=True)
def _no_key_files():
    with patch(_LOAD_KEYS):
        yield


@pytest.fixture()
def keyed(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    monkeypatch.setenv("OPENAI_API_KEY", "test-key")


@pytest.fixture()
def unkeyed(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


class TestGlobalOptions:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"taskroute {__version__}" in result.output

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("profiles", "providers", "recommend", "select", "stats", "record"):
            assert command in result.output


class TestProfilesCommand:
    def test_lists_profiles(self):
        result = runner.invoke(app, ["profiles"])
        assert result.exit_code == 0
        assert "contact_scoring" in result.output
        assert "relationship_mapping" in result.output

    def test_warns_about_unknown_models(self):
        with patch("taskroute.cli.unknown_candidates", return_value=["tagging:gemini/typo"]):
            result = runner.invoke(app, ["profiles"])
        assert result.exit_code == 0
        assert "Unknown models in profiles" in result.output
        assert "tagging:gemini/typo" in result.output

    def test_packaged_profiles_have_no_unknown_models(self):
        result = runner.invoke(app, ["profiles"])
        assert "Unknown models in profiles" not in result.output


class TestProvidersCommand:
    def test_reports_missing_keys(self, unkeyed):
        result = runner.invoke(app, ["providers"])
        assert result.exit_code == 0
        assert "unavailable" in result.output
        assert "Missing credentials" in result.output
        assert "OPENAI_API_KEY" in result.output

    def test_all_available(self, keyed):
        result = runner.invoke(app, ["providers"])
        assert result.exit_code == 0
        assert "Missing credentials" not in result.output


class TestRecommendCommand:
    def test_known_task(self, unkeyed):
        result = runner.invoke(app, ["recommend", "relationship_mapping"])
        assert result.exit_code == 0
        assert "openai/gpt-4o" in result.output
        assert "gemini/gemma-2-27b-it" in result.output

    def test_unknown_task(self):
        result = runner.invoke(app, ["recommend", "astrology"])
        assert result.exit_code == 1
        assert "Unknown task type" in result.output


class TestSelectCommand:
    def test_selects_model(self, keyed, tmp_path):
        db = str(tmp_path / "history.db")
        result = runner.invoke(app, ["select", "relationship_mapping", "--db", db])
        assert result.exit_code == 0
        assert "openai/gpt-4o" in result.output
        assert "expert_flagship" in result.output
        assert "Fallbacks" in result.output

    def test_requirement_overrides(self, keyed, tmp_path):
        db = str(tmp_path / "history.db")
        result = runner.invoke(
            app, ["select", "contact_scoring", "--cost", "free", "--db", db],
        )
        assert result.exit_code == 0
        assert "gemini/gemma-2-27b-it" in result.output
        assert "cost_free_self_hosted" in result.output

    def test_invalid_override(self, keyed, tmp_path):
        result = runner.invoke(
            app, ["select", "contact_scoring", "--speed", "warp", "--db", str(tmp_path / "h.db")],
        )
        assert result.exit_code == 1
        assert "Invalid speed" in result.output

    def test_unsupported_task(self, keyed, tmp_path):
        result = runner.invoke(app, ["select", "astrology", "--db", str(tmp_path / "h.db")])
        assert result.exit_code == 1
        assert "Unsupported task type" in result.output

    def test_no_available_model(self, unkeyed, tmp_path):
        result = runner.invoke(app, ["select", "tagging", "--db", str(tmp_path / "h.db")])
        assert result.exit_code == 1
        assert "No available models" in result.output

    def test_urgency_derives_requirements(self, keyed, tmp_path):
        db = str(tmp_path / "history.db")
        result = runner.invoke(
            app, ["select", "sentiment_analysis", "--urgency", "critical", "--db", db],
        )
        assert result.exit_code == 0
        assert "accuracy_critical_flagship" in result.output

    def test_low_urgency_relaxes_accuracy(self, keyed, tmp_path):
        db = str(tmp_path / "history.db")
        result = runner.invoke(
            app, ["select", "sentiment_analysis", "--urgency", "low", "--db", db],
        )
        assert result.exit_code == 0
        assert "accuracy_critical_flagship" not in result.output
        assert "cost_low_cheap" in result.output

    def test_explicit_flag_beats_urgency(self, keyed, tmp_path):
        db = str(tmp_path / "history.db")
        result = runner.invoke(
            app,
            ["select", "sentiment_analysis", "--urgency", "critical",
             "--accuracy", "medium", "--db", db],
        )
        assert result.exit_code == 0
        assert "accuracy_critical_flagship" not in result.output

    def test_invalid_urgency(self, keyed, tmp_path):
        result = runner.invoke(
            app, ["select", "tagging", "--urgency", "asap", "--db", str(tmp_path / "h.db")],
        )
        assert result.exit_code == 1
        assert "Invalid urgency" in result.output


class TestRecordAndStats:
    def test_empty_stats(self, tmp_path):
        result = runner.invoke(app, ["stats", "--db", str(tmp_path / "h.db")])
        assert result.exit_code == 0
        assert "No task outcomes recorded yet" in result.output

    def test_record_then_stats(self, tmp_path):
        db = str(tmp_path / "h.db")
        recorded = runner.invoke(app, [
            "record", "categorization", "gemini/gemma-2-2b-it",
            "--time", "450", "--db", db,
        ])
        assert recorded.exit_code == 0
        assert "Recorded success" in recorded.output

        failed = runner.invoke(app, [
            "record", "categorization", "gemini/gemma-2-2b-it",
            "--time", "550", "--failed", "--db", db,
        ])
        assert failed.exit_code == 0
        assert "2 tasks in history" in failed.output

        stats = runner.invoke(app, ["stats", "--db", db])
        assert stats.exit_code == 0
        assert "2 tasks" in stats.output
        assert "gemini/gemma-2-2b-it" in stats.output
        assert "50.0%" in stats.output

    def test_record_rejects_bare_model(self, tmp_path):
        result = runner.invoke(app, [
            "record", "tagging", "gpt-4o", "--time", "10", "--db", str(tmp_path / "h.db"),
        ])
        assert result.exit_code == 1
        assert "provider/model" in result.output

    def test_history_influences_select(self, keyed, tmp_path):
        db = str(tmp_path / "h.db")
        for _ in range(3):
            runner.invoke(app, [
                "record", "contact_scoring", "openai/gpt-4o-mini",
                "--time", "900", "--failed", "--db", db,
            ])
        result = runner.invoke(app, ["select", "contact_scoring", "--db", db])
        assert result.exit_code == 0
        # gpt-4o-mini drops to zero, leaving gpt-4o with its untouched base score
        assert "Score: 95.0" in result.output
