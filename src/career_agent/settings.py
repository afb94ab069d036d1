# settings.py
# Process-wide settings, loaded from the environment (and .env if present).

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from career_agent.models import ConfirmationLevel

load_dotenv()

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "anthropic/claude-3.5-haiku"


class AgentSettings(BaseModel):
    """Defaults for every executor that does not override them."""

    max_iterations: int = Field(50, ge=1)
    confirmation_level: ConfirmationLevel = ConfirmationLevel.WRITE_ONLY

    @classmethod
    def from_env(cls) -> "AgentSettings":
        return cls(
            max_iterations=int(os.getenv("AGENT_MAX_ITERATIONS", "50")),
            confirmation_level=os.getenv("AGENT_CONFIRMATION_LEVEL", ConfirmationLevel.WRITE_ONLY.value),
        )


class ProviderConfig(BaseModel):
    """Connection and sampling settings for the model provider."""

    base_url: str = DEFAULT_BASE_URL
    api_key: str | None = Field(None, repr=False)
    model: str = DEFAULT_MODEL
    max_tokens: int = Field(4096, ge=1)
    temperature: float | None = None

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        temperature = os.getenv("LLM_TEMPERATURE")
        return cls(
            base_url=os.getenv("LLM_BASE_URL", DEFAULT_BASE_URL),
            api_key=os.getenv("LLM_API_KEY") or os.getenv("OPENROUTER_API_KEY"),
            model=os.getenv("LLM_MODEL", DEFAULT_MODEL),
            max_tokens=int(os.getenv("LLM_MAX_TOKENS", "4096")),
            temperature=float(temperature) if temperature else None,
        )
