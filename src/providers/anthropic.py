"""Anthropic Claude provider using anthropic SDK with native async."""

import asyncio
import logging
import time

import anthropic as anthropic_sdk

from config.config_loader import BackendConfig
from src.providers.base import CapabilityClient, ProviderError

logger = logging.getLogger(__name__)


class AnthropicProvider(CapabilityClient):
    """Anthropic Claude backend; the persona is sent as the system prompt."""

    def __init__(self, config: BackendConfig) -> None:
        super().__init__(config)
        self._client: anthropic_sdk.AsyncAnthropic | None = None
        if config.api_key:
            self._client = anthropic_sdk.AsyncAnthropic(api_key=config.api_key)

    async def _complete(self, persona: str, message: str) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.messages.create(
                    model=self._config.model,
                    max_tokens=self._config.max_tokens,
                    temperature=self._config.temperature,
                    system=persona,
                    messages=[{"role": "user", "content": message}],
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        text_blocks = [b.text for b in response.content or [] if b.type == "text"]
        if not text_blocks:
            raise ProviderError(self._config.name, "No text blocks in response")

        token_count: int | None = None
        if response.usage:
            token_count = response.usage.input_tokens + response.usage.output_tokens

        logger.info("%s completion: %.2fs, %s tokens", self._config.name, latency, token_count)
        return "\n".join(text_blocks)
