"""Abstract base for all capability clients (upstream model backends)."""

from abc import ABC, abstractmethod

from config.config_loader import BackendConfig

NOT_CONFIGURED_MESSAGE = (
    "Capability not configured: no API key is set for the research backend. "
    "Add the key to .env to enable live research."
)


class ProviderError(Exception):
    """Raised when a provider call fails."""

    def __init__(self, provider_name: str, message: str) -> None:
        self.provider_name = provider_name
        super().__init__(f"[{provider_name}] {message}")


class CapabilityClient(ABC):
    """One upstream model backend: persona + user message in, text out.

    The API key is injected through BackendConfig; clients never read the
    environment. Without a key, complete() answers with NOT_CONFIGURED_MESSAGE
    instead of raising.
    """

    def __init__(self, config: BackendConfig) -> None:
        self._config = config

    def name(self) -> str:
        """Return the short backend name (e.g. 'openai', 'claude')."""
        return self._config.name

    def model_string(self) -> str:
        """Return the actual model identifier string."""
        return self._config.model

    @property
    def configured(self) -> bool:
        return bool(self._config.api_key)

    async def complete(self, persona: str, message: str) -> str:
        """Send one persona instruction and one user message, return the reply text.

        Raises:
            ProviderError: On API failure, timeout, or empty response.
        """
        if not self.configured:
            return NOT_CONFIGURED_MESSAGE
        return await self._complete(persona, message)

    @abstractmethod
    async def _complete(self, persona: str, message: str) -> str:
        """Backend-specific call. Only invoked when an API key is present."""
        ...
