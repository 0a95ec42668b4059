"""OpenAI provider using openai SDK with native async. Also serves xAI via base_url."""

import asyncio
import logging
import time

from openai import AsyncOpenAI

from config.config_loader import BackendConfig
from src.providers.base import CapabilityClient, ProviderError

logger = logging.getLogger(__name__)


class OpenAIProvider(CapabilityClient):
    """OpenAI (or OpenAI-compatible) chat completions backend."""

    def __init__(self, config: BackendConfig) -> None:
        super().__init__(config)
        self._client: AsyncOpenAI | None = None
        if config.sdk == "xai" and not config.base_url:
            raise ProviderError(config.name, "base_url is required for xAI provider")
        if config.api_key:
            self._client = AsyncOpenAI(api_key=config.api_key, base_url=config.base_url)

    async def _complete(self, persona: str, message: str) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._config.model,
                    messages=[
                        {"role": "system", "content": persona},
                        {"role": "user", "content": message},
                    ],
                    temperature=self._config.temperature,
                    max_tokens=self._config.max_tokens,
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        choice = response.choices[0] if response.choices else None
        if not choice or not choice.message.content:
            raise ProviderError(self._config.name, "Empty response content")

        logger.info(
            "%s completion: %.2fs, %s tokens",
            self._config.name,
            latency,
            response.usage.total_tokens if response.usage else None,
        )
        return choice.message.content
