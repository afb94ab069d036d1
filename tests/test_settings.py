import pytest
from pydantic import ValidationError

from career_agent.models import ConfirmationLevel
from career_agent.settings import DEFAULT_BASE_URL, AgentSettings, ProviderConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "AGENT_MAX_ITERATIONS",
        "AGENT_CONFIRMATION_LEVEL",
        "LLM_BASE_URL",
        "LLM_API_KEY",
        "OPENROUTER_API_KEY",
        "LLM_MODEL",
        "LLM_MAX_TOKENS",
        "LLM_TEMPERATURE",
    ):
        monkeypatch.delenv(name, raising=False)


def test_agent_settings_defaults():
    settings = AgentSettings.from_env()
    assert settings.max_iterations == 50
    assert settings.confirmation_level is ConfirmationLevel.WRITE_ONLY


def test_agent_settings_from_env(monkeypatch):
    monkeypatch.setenv("AGENT_MAX_ITERATIONS", "5")
    monkeypatch.setenv("AGENT_CONFIRMATION_LEVEL", "destructive-only")

    settings = AgentSettings.from_env()
    assert settings.max_iterations == 5
    assert settings.confirmation_level is ConfirmationLevel.DESTRUCTIVE_ONLY


def test_agent_settings_rejects_unknown_level(monkeypatch):
    monkeypatch.setenv("AGENT_CONFIRMATION_LEVEL", "sometimes")
    with pytest.raises(ValidationError):
        AgentSettings.from_env()


def test_provider_config_defaults():
    config = ProviderConfig.from_env()
    assert config.base_url == DEFAULT_BASE_URL
    assert config.api_key is None
    assert config.max_tokens == 4096
    assert config.temperature is None


def test_provider_config_openrouter_key_fallback(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")
    assert ProviderConfig.from_env().api_key == "or-key"

    monkeypatch.setenv("LLM_API_KEY", "llm-key")
    monkeypatch.setenv("LLM_TEMPERATURE", "0.3")
    config = ProviderConfig.from_env()
    assert config.api_key == "llm-key"
    assert config.temperature == 0.3
