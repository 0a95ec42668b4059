"""Gemini provider using google-genai SDK with native async."""

import asyncio
import logging
import time

from google import genai
from google.genai import types as genai_types

from config.config_loader import BackendConfig
from src.providers.base import CapabilityClient, ProviderError

logger = logging.getLogger(__name__)


class GeminiProvider(CapabilityClient):
    """Google Gemini backend; the persona is sent as system_instruction."""

    def __init__(self, config: BackendConfig) -> None:
        super().__init__(config)
        self._client: genai.Client | None = None
        if config.api_key:
            self._client = genai.Client(api_key=config.api_key)

    async def _complete(self, persona: str, message: str) -> str:
        start = time.monotonic()
        try:
            response = await asyncio.wait_for(
                self._client.aio.models.generate_content(
                    model=self._config.model,
                    contents=message,
                    config=genai_types.GenerateContentConfig(
                        system_instruction=persona,
                        temperature=self._config.temperature,
                        max_output_tokens=self._config.max_tokens,
                    ),
                ),
                timeout=self._config.timeout_sec,
            )
        except TimeoutError as exc:
            raise ProviderError(self._config.name, f"Request timed out after {self._config.timeout_sec}s") from exc
        except Exception as exc:
            raise ProviderError(self._config.name, f"API call failed: {exc}") from exc

        latency = time.monotonic() - start

        if not response.text:
            raise ProviderError(self._config.name, "Empty response text")

        token_count: int | None = None
        if response.usage_metadata:
            token_count = response.usage_metadata.total_token_count

        logger.info("%s completion: %.2fs, %s tokens", self._config.name, latency, token_count)
        return response.text
