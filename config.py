"""Environment-driven settings for the review pipeline.

Values are read with ``os.getenv`` so a ``.env`` file loaded by
``dotenv.load_dotenv()`` in ``main.py`` is honored. ``load_settings`` is called
once at process start and the resulting object is passed to the components.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from errors import ConfigurationError

SUPPORTED_PROVIDERS: frozenset[str] = frozenset({"openai", "anthropic"})


@dataclass(frozen=True, slots=True)
class Settings:
    model_provider: str = "openai"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.1
    anthropic_api_key: str | None = None
    claude_model: str = "claude-sonnet-4-5"
    model_max_tokens: int = 4096
    model_timeout_seconds: float = 60.0
    pubmed_api_key: str | None = None
    pubmed_email: str | None = None
    pubmed_tool: str = "mesh-review"
    pubmed_timeout_seconds: float = 20.0
    report_language: str = "Japanese"
    cors_allow_origin: str = "*"
    log_level: str = "INFO"

    @property
    def model_api_key(self) -> str | None:
        """Credential for the active provider, or None when unset."""
        if self.model_provider == "anthropic":
            return self.anthropic_api_key
        return self.openai_api_key

    @property
    def model_api_key_name(self) -> str:
        if self.model_provider == "anthropic":
            return "ANTHROPIC_API_KEY"
        return "OPENAI_API_KEY"

    @property
    def model_name(self) -> str:
        if self.model_provider == "anthropic":
            return self.claude_model
        return self.openai_model


def load_settings() -> Settings:
    """Build Settings from the current environment."""
    provider = os.getenv("MODEL_PROVIDER", "openai").strip().lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ConfigurationError(
            f"MODEL_PROVIDER must be one of {sorted(SUPPORTED_PROVIDERS)}, got {provider!r}"
        )

    try:
        return Settings(
            model_provider=provider,
            openai_api_key=_optional("OPENAI_API_KEY"),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            openai_temperature=float(os.getenv("OPENAI_TEMPERATURE", "0.1")),
            anthropic_api_key=_optional("ANTHROPIC_API_KEY"),
            claude_model=os.getenv("CLAUDE_MODEL", "claude-sonnet-4-5"),
            model_max_tokens=int(os.getenv("MODEL_MAX_TOKENS", "4096")),
            model_timeout_seconds=float(os.getenv("MODEL_TIMEOUT_SECONDS", "60")),
            pubmed_api_key=_optional("PUBMED_API_KEY"),
            pubmed_email=_optional("PUBMED_EMAIL"),
            pubmed_tool=os.getenv("PUBMED_TOOL", "mesh-review"),
            pubmed_timeout_seconds=float(os.getenv("PUBMED_TIMEOUT_SECONDS", "20")),
            report_language=os.getenv("REPORT_LANGUAGE", "Japanese"),
            cors_allow_origin=os.getenv("CORS_ALLOW_ORIGIN", "*"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
    except ValueError as exc:
        raise ConfigurationError(f"Invalid numeric setting: {exc}") from exc


def _optional(name: str) -> str | None:
    value = os.getenv(name)
    return value.strip() if value and value.strip() else None
