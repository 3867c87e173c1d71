from __future__ import annotations

import pytest

from doc_distiller.config import ConfigError, Settings


def test_defaults():
    s = Settings.from_env()
    assert s.provider == "gemini"
    assert s.model == "gemini-2.5-flash"
    assert s.base_url == "https://generativelanguage.googleapis.com/v1beta/openai"
    assert s.api_key is None
    assert s.timeout is None
    assert s.lang == "en"
    assert s.max_workers is None


def test_env_values_are_cleaned(monkeypatch):
    monkeypatch.setenv("LLM_PROVIDER", " 'Groq' ")
    monkeypatch.setenv("GROQ_API_KEY", '"gsk"')
    monkeypatch.setenv("GROQ_MODEL", "llama-3.1-8b-instant")
    monkeypatch.setenv("LLM_BASE_URL", "http://localhost:8080/v1/")
    monkeypatch.setenv("LLM_TIMEOUT", "90")
    monkeypatch.setenv("LLM_TEMPERATURE", "0")
    monkeypatch.setenv("DISTILLER_LANG", "ZH")
    monkeypatch.setenv("DISTILLER_MAX_WORKERS", "4")
    s = Settings.from_env()
    assert s.provider == "groq"
    assert s.api_key == "gsk"
    assert s.model == "llama-3.1-8b-instant"
    assert s.base_url == "http://localhost:8080/v1"
    assert s.timeout == 90.0
    assert s.temperature == 0.0
    assert s.lang == "zh"
    assert s.max_workers == 4


def test_llm_model_beats_provider_model(monkeypatch):
    monkeypatch.setenv("LLM_MODEL", "gemini-2.5-pro")
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.0-flash")
    assert Settings.from_env().model == "gemini-2.5-pro"


def test_unknown_language_falls_back(monkeypatch):
    monkeypatch.setenv("DISTILLER_LANG", "fr")
    assert Settings.from_env().lang == "en"


def test_bad_number_is_config_error(monkeypatch):
    monkeypatch.setenv("LLM_TIMEOUT", "soon")
    with pytest.raises(ConfigError, match="LLM_TIMEOUT"):
        Settings.from_env()


def test_overrides_switch_provider(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "g")
    monkeypatch.setenv("OPENAI_API_KEY", "o")
    base = Settings.from_env()
    s = base.with_overrides(provider="openai", model=None, lang="zh")
    assert (s.provider, s.api_key, s.model, s.lang) == ("openai", "o", "gpt-4o-mini", "zh")
    assert s.base_url == "https://api.openai.com/v1"
    assert base.with_overrides(model="gemini-2.5-pro").model == "gemini-2.5-pro"
    assert base.with_overrides() is base


def test_require_backend():
    with pytest.raises(ConfigError):
        Settings().resolved().require_backend()
    Settings(api_key="k").resolved().require_backend()


def test_switching_provider_drops_global_model_and_base_url(monkeypatch):
    monkeypatch.setenv("LLM_MODEL", "my-proxy-model")
    monkeypatch.setenv("LLM_BASE_URL", "https://proxy.example/v1/")
    base = Settings.from_env()
    assert (base.model, base.base_url) == ("my-proxy-model", "https://proxy.example/v1")

    same = base.with_overrides(provider="gemini", lang="zh")
    assert (same.model, same.base_url) == ("my-proxy-model", "https://proxy.example/v1")

    other = base.with_overrides(provider="openai")
    assert (other.model, other.base_url) == ("gpt-4o-mini", "https://api.openai.com/v1")
