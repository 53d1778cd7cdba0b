"""Agent server configuration."""

import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import load_dotenv


def _float_env(name: str, default: str) -> float:
    return float(os.getenv(name, default))


@dataclass
class LLMProvider:
    """Resolved OpenAI-compatible endpoint."""
    name: str
    api_key: str
    base_url: str
    default_model: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass
class Config:
    """Configuration loaded from environment variables."""

    # Server
    host: str = field(default_factory=lambda: os.getenv("A2UI_HOST", "localhost"))
    port: int = field(default_factory=lambda: int(os.getenv("A2UI_PORT", "10002")))
    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO").upper())
    cors_origins: List[str] = field(default_factory=lambda:
        [o.strip() for o in os.getenv(
            "CORS_ORIGINS",
            "http://localhost:5173,http://localhost:3000,http://localhost:3001",
        ).split(",") if o.strip()])

    # LLM providers, checked in this order
    openrouter_api_key: str = field(default_factory=lambda: os.getenv("OPENROUTER_API_KEY", ""))
    openrouter_model: str = field(default_factory=lambda: os.getenv("OPENROUTER_MODEL", "google/gemini-2.5-flash"))
    openrouter_app_name: str = "A2UI Restaurant Agent"
    openrouter_referer: str = "A2UI.org"
    openai_api_key: str = field(default_factory=lambda: os.getenv("OPENAI_API_KEY", ""))
    openai_base_url: str = field(default_factory=lambda: os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1"))
    gemini_api_key: str = field(default_factory=lambda: os.getenv("GEMINI_API_KEY", ""))
    llm_base_url: str = field(default_factory=lambda: os.getenv("LLM_BASE_URL", ""))
    llm_api_key: str = field(default_factory=lambda: os.getenv("LLM_API_KEY", ""))
    llm_model: str = field(default_factory=lambda: os.getenv("LLM_MODEL", ""))

    # Agent behaviour
    llm_timeout: float = field(default_factory=lambda: _float_env("LLM_TIMEOUT", "120"))
    stream_timeout: float = field(default_factory=lambda: _float_env("STREAM_TIMEOUT", "0"))
    max_tool_rounds: int = field(default_factory=lambda: int(os.getenv("MAX_TOOL_ROUNDS", "5")))
    max_ui_retries: int = field(default_factory=lambda: int(os.getenv("MAX_UI_RETRIES", "1")))
    history_ttl: int = field(default_factory=lambda: int(os.getenv("HISTORY_TTL", "1800")))

    @property
    def base_url(self) -> str:
        """Public URL of this server, used in the agent card and image links."""
        return f"http://{self.host}:{self.port}"

    @property
    def provider(self) -> Optional[LLMProvider]:
        """
        Active LLM provider.

        Priority: OpenRouter > OpenAI > Gemini > custom LLM_BASE_URL
        """
        if self.openrouter_api_key:
            return LLMProvider(
                name="openrouter",
                api_key=self.openrouter_api_key,
                base_url="https://openrouter.ai/api/v1",
                default_model=self.openrouter_model,
                headers={
                    "HTTP-Referer": self.openrouter_referer,
                    "X-Title": self.openrouter_app_name,
                },
            )
        if self.openai_api_key:
            return LLMProvider(
                name="openai",
                api_key=self.openai_api_key,
                base_url=self.openai_base_url,
                default_model="gpt-4o",
            )
        if self.gemini_api_key:
            return LLMProvider(
                name="gemini",
                api_key=self.gemini_api_key,
                base_url="https://generativelanguage.googleapis.com/v1beta/openai",
                default_model="gemini-2.0-flash",
            )
        if self.llm_base_url:
            return LLMProvider(
                name="custom",
                api_key=self.llm_api_key,
                base_url=self.llm_base_url,
                default_model=self.llm_model or "gpt-4o",
            )
        return None

    @property
    def model(self) -> str:
        """Explicit LLM_MODEL wins over the provider default."""
        if self.llm_model:
            return self.llm_model
        provider = self.provider
        return provider.default_model if provider else "gpt-4o"

    def has_llm_provider(self) -> bool:
        return self.provider is not None


LLM_CONFIG_ERROR_MESSAGE = """No LLM API key found. Please set one of the following environment variables:
  - OPENROUTER_API_KEY (recommended - get from https://openrouter.ai/keys)
  - OPENAI_API_KEY
  - GEMINI_API_KEY
  - Or LLM_BASE_URL for a local OpenAI-compatible server (e.g. http://localhost:11434/v1)"""


def load_config() -> Config:
    """Read .env (if present) and build the config. Call once at startup."""
    load_dotenv()
    return Config()
