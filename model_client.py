"""Language-model handle used by term expansion and synthesis.

One ModelClient is built from Settings at process start and passed to the
stages that need it. The provider SDK client is created on first use so a
missing credential is reported before anything touches the network.
"""

from __future__ import annotations

import logging
from typing import Any

import anthropic
from openai import OpenAI, OpenAIError

from config import Settings
from errors import ConfigurationError, UpstreamModelError

LOGGER = logging.getLogger(__name__)


class ModelClient:
    """Single-prompt text generation against the configured provider."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.provider = settings.model_provider
        self.model = settings.model_name
        self._client: Any = None

    @property
    def configured(self) -> bool:
        return bool(self.settings.model_api_key)

    def require_credential(self) -> str:
        """Return the provider credential or raise ConfigurationError."""
        api_key = self.settings.model_api_key
        if not api_key:
            raise ConfigurationError(
                f"{self.settings.model_api_key_name} environment variable is required"
            )
        return api_key

    def generate(self, prompt: str, *, max_tokens: int | None = None) -> str:
        """Send one user prompt and return the reply text."""
        client = self._sdk_client()
        limit = max_tokens or self.settings.model_max_tokens

        LOGGER.debug("Calling %s model=%s max_tokens=%s", self.provider, self.model, limit)
        if self.provider == "anthropic":
            content = self._generate_anthropic(client, prompt, limit)
        else:
            content = self._generate_openai(client, prompt, limit)

        if not content or not content.strip():
            raise UpstreamModelError(f"{self.provider} returned an empty response")
        return content

    def list_models(self) -> list[str]:
        """Return model ids visible to the configured credential."""
        client = self._sdk_client()
        try:
            page = client.models.list()
        except (OpenAIError, anthropic.AnthropicError) as exc:
            raise UpstreamModelError(f"{self.provider} model listing failed: {exc}") from exc
        return sorted(item.id for item in page)

    def _sdk_client(self) -> Any:
        api_key = self.require_credential()
        if self._client is None:
            timeout = self.settings.model_timeout_seconds
            if self.provider == "anthropic":
                self._client = anthropic.Anthropic(api_key=api_key, timeout=timeout, max_retries=0)
            else:
                self._client = OpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        return self._client

    def _generate_openai(self, client: Any, prompt: str, max_tokens: int) -> str:
        try:
            response = client.chat.completions.create(
                model=self.model,
                temperature=self.settings.openai_temperature,
                max_completion_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except OpenAIError as exc:
            raise UpstreamModelError(f"OpenAI request failed: {exc}") from exc

        try:
            return response.choices[0].message.content or ""
        except (AttributeError, IndexError, TypeError) as exc:
            raise UpstreamModelError("Unexpected OpenAI response shape") from exc

    def _generate_anthropic(self, client: Any, prompt: str, max_tokens: int) -> str:
        try:
            response = client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            )
        except anthropic.AnthropicError as exc:
            raise UpstreamModelError(f"Anthropic request failed: {exc}") from exc

        parts = [block.text for block in response.content if getattr(block, "type", None) == "text"]
        return "".join(parts)


def build_model_client(settings: Settings) -> ModelClient:
    return ModelClient(settings)
