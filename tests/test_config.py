import pytest

from a2ui_agent.config import Config

PROVIDER_VARS = [
    "OPENROUTER_API_KEY", "OPENROUTER_MODEL", "OPENAI_API_KEY", "OPENAI_BASE_URL",
    "GEMINI_API_KEY", "LLM_BASE_URL", "LLM_API_KEY", "LLM_MODEL",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in PROVIDER_VARS + ["A2UI_HOST", "A2UI_PORT", "CORS_ORIGINS", "STREAM_TIMEOUT"]:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = Config()
    assert config.base_url == "http://localhost:10002"
    assert config.provider is None
    assert not config.has_llm_provider()
    assert config.stream_timeout == 0
    assert config.max_tool_rounds == 5
    assert config.cors_origins == ["http://localhost:5173", "http://localhost:3000", "http://localhost:3001"]


def test_openrouter_wins(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")
    monkeypatch.setenv("OPENAI_API_KEY", "oa-key")
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")

    provider = Config().provider
    assert provider.name == "openrouter"
    assert provider.base_url == "https://openrouter.ai/api/v1"
    assert provider.headers["X-Title"] == "A2UI Restaurant Agent"
    assert Config().model == "google/gemini-2.5-flash"


def test_openai_before_gemini(monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "oa-key")
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    assert Config().provider.name == "openai"


def test_gemini_uses_openai_compatible_endpoint(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "g-key")
    config = Config()
    assert config.provider.base_url.endswith("/v1beta/openai")
    assert config.model == "gemini-2.0-flash"


def test_custom_endpoint_and_model_override(monkeypatch):
    monkeypatch.setenv("LLM_BASE_URL", "http://localhost:11434/v1")
    monkeypatch.setenv("LLM_MODEL", "llama3.1")
    config = Config()
    assert config.provider.name == "custom"
    assert config.provider.api_key == ""
    assert config.model == "llama3.1"


def test_server_settings_from_env(monkeypatch):
    monkeypatch.setenv("A2UI_HOST", "0.0.0.0")
    monkeypatch.setenv("A2UI_PORT", "8080")
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, ,http://b.test")
    monkeypatch.setenv("STREAM_TIMEOUT", "2.5")
    config = Config()
    assert config.base_url == "http://0.0.0.0:8080"
    assert config.cors_origins == ["http://a.test", "http://b.test"]
    assert config.stream_timeout == 2.5
