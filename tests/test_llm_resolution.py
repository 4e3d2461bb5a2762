import logging

import pytest

from applybot.errors import ConfigError
from applybot.llm import resolve_llm_config


def test_only_gemini_api_key_selects_gemini() -> None:
    cfg = resolve_llm_config({"GEMINI_API_KEY": "g-key"})
    assert cfg.provider == "gemini"
    assert cfg.base_url.endswith("/openai")
    assert cfg.model == "gemini-2.0-flash"


def test_only_openai_api_key_selects_openai() -> None:
    cfg = resolve_llm_config({"OPENAI_API_KEY": "o-key"})
    assert cfg.provider == "openai"
    assert cfg.model == "gpt-4o-mini"


def test_claude_api_key_alias_selects_anthropic() -> None:
    cfg = resolve_llm_config({"CLAUDE_API_KEY": "c-key"})
    assert cfg.provider == "anthropic"
    assert cfg.api_key == "c-key"


def test_anthropic_key_preferred_over_claude_alias() -> None:
    cfg = resolve_llm_config({"CLAUDE_API_KEY": "c-key", "ANTHROPIC_API_KEY": "a-key"})
    assert cfg.provider == "anthropic"
    assert cfg.api_key == "a-key"


def test_local_url_defaults() -> None:
    cfg = resolve_llm_config({"LLM_URL": "http://127.0.0.1:11434/v1/"})
    assert cfg.provider == "local"
    assert cfg.base_url == "http://127.0.0.1:11434/v1"
    assert cfg.model == "llama3.1"
    assert cfg.api_key == ""


def test_model_override() -> None:
    cfg = resolve_llm_config({"OPENAI_API_KEY": "o-key", "LLM_MODEL": "gpt-4.1-mini"})
    assert cfg.model == "gpt-4.1-mini"


def test_llm_url_with_keys_selects_local() -> None:
    cfg = resolve_llm_config(
        {
            "LLM_URL": "http://127.0.0.1:8080/v1",
            "GEMINI_API_KEY": "g-key",
            "OPENAI_API_KEY": "o-key",
            "ANTHROPIC_API_KEY": "a-key",
        }
    )
    assert cfg.provider == "local"


def test_multiple_keys_selects_deterministically_and_warns(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        cfg = resolve_llm_config(
            {
                "GEMINI_API_KEY": "g-key",
                "OPENAI_API_KEY": "o-key",
                "ANTHROPIC_API_KEY": "a-key",
            }
        )
    assert cfg.provider == "gemini"
    assert any(
        "Multiple LLM providers configured" in rec.message and "Using 'gemini' based on precedence" in rec.message
        for rec in caplog.records
    )


def test_provider_override_when_multiple_configured(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        cfg = resolve_llm_config(
            {"GEMINI_API_KEY": "g-key", "ANTHROPIC_API_KEY": "a-key", "LLM_PROVIDER": "claude"}
        )
    assert cfg.provider == "anthropic"
    assert any("via LLM_PROVIDER override" in rec.message for rec in caplog.records)


def test_unconfigured_override_is_ignored(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING):
        cfg = resolve_llm_config({"GEMINI_API_KEY": "g-key", "OPENAI_API_KEY": "o-key", "LLM_PROVIDER": "ollama"})
    assert cfg.provider == "gemini"
    assert any("Ignoring LLM_PROVIDER='ollama'" in rec.message for rec in caplog.records)


def test_reads_process_env_by_default(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "o-key")
    assert resolve_llm_config().provider == "openai"


def test_missing_everything_raises_clear_error() -> None:
    with pytest.raises(ConfigError, match="No LLM provider configured"):
        resolve_llm_config({})
