"""Tests for the offline CLI commands.

@file test_cli.py
@description check-config and match via typer's CliRunner. The run command
             needs a browser and is not exercised here.
"""

from __future__ import annotations

import yaml
from typer.testing import CliRunner

from applybot import __version__, config
from applybot.cli import app

runner = CliRunner()


def _write_configs(tmp_path, preferences_data, resume_data):
    prefs = tmp_path / "preferences.yaml"
    resume = tmp_path / "text_resume.yaml"
    prefs.write_text(yaml.safe_dump(preferences_data), encoding="utf-8")
    resume.write_text(yaml.safe_dump(resume_data), encoding="utf-8")
    return ["--preferences", str(prefs), "--resume", str(resume)]


class TestMatch:
    def test_blacklisted(self) -> None:
        result = runner.invoke(app, ["match", "Senior Engineer", "--text", "Engineer, Senior Level"])
        assert result.exit_code == 0
        assert "Blacklisted" in result.output

    def test_no_match(self) -> None:
        result = runner.invoke(app, ["match", "Staff Engineer", "--text", "Backend Engineer"])
        assert result.exit_code == 0
        assert "No match" in result.output


class TestCheckConfig:
    def test_all_good(self, monkeypatch, tmp_path, preferences_data, resume_data) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "o-key")
        args = _write_configs(tmp_path, preferences_data, resume_data)

        result = runner.invoke(app, ["check-config", *args])

        assert result.exit_code == 0
        assert "openai" in result.output
        assert "Software Engineer" in result.output

    def test_missing_llm_fails(self, tmp_path, preferences_data, resume_data) -> None:
        args = _write_configs(tmp_path, preferences_data, resume_data)
        result = runner.invoke(app, ["check-config", *args])
        assert result.exit_code == 1
        assert "No LLM provider configured" in result.output

    def test_missing_files_fail(self, monkeypatch) -> None:
        monkeypatch.setenv("OPENAI_API_KEY", "o-key")
        result = runner.invoke(app, ["check-config"])
        assert result.exit_code == 1
        assert "not found" in result.output


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_run_rejects_bad_config(monkeypatch) -> None:
    monkeypatch.setattr(config, "setup_logging", lambda verbose=False: None)
    result = runner.invoke(app, ["run"])
    assert result.exit_code == 1
    assert "Config error" in result.output
