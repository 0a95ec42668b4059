"""Shared pytest fixtures."""

from unittest.mock import AsyncMock

import pytest

from config.config_loader import BackendConfig, PromptsConfig
from src.models import Engine, SubQuestion
from src.providers.base import CapabilityClient


def make_backend_config(name: str = "mock", api_key: str | None = "test-key") -> BackendConfig:
    return BackendConfig(
        name=name,
        sdk="openai",
        model="mock-model",
        api_key_env="TEST_API_KEY",
        max_tokens=1024,
        temperature=0.7,
        timeout_sec=30,
        api_key=api_key,
    )


class MockClient(CapabilityClient):
    """Test double CapabilityClient.

    Only the backend call (_complete) is mocked, so the base class's
    not-configured handling still runs.
    """

    def __init__(
        self,
        client_name: str = "mock",
        response_content: str = "Mock response",
        api_key: str | None = "test-key",
    ) -> None:
        super().__init__(make_backend_config(client_name, api_key))
        self._response_content = response_content
        # Shadow the class method with an AsyncMock at the instance level.
        self._complete = AsyncMock(return_value=response_content)  # type: ignore[method-assign]

    async def _complete(self, persona: str, message: str) -> str:  # type: ignore[override]
        """Default implementation; replaced by AsyncMock in __init__."""
        return self._response_content


@pytest.fixture
def sample_prompts_config() -> PromptsConfig:
    return PromptsConfig(
        decompose="Split this question into sub-questions. Return a JSON array.",
        synthesis=(
            "MAIN QUESTION: {question}\n\nSUB-QUESTIONS:\n{sub_questions}\n\n"
            "TOOL RESPONSES:\n{engine_responses}\n\nReturn JSON."
        ),
        synthesis_request="Generate the master report now.",
    )


@pytest.fixture
def sample_question() -> str:
    return "What causes tidal locking?"


@pytest.fixture
def sample_sub_questions() -> list[SubQuestion]:
    return [
        SubQuestion("How do tidal forces act on a rotating body?", "Mechanism"),
        SubQuestion("How long does synchronization take?", "Timescale"),
    ]


@pytest.fixture
def mock_client() -> MockClient:
    return MockClient()


@pytest.fixture
def two_engines() -> list[Engine]:
    return [
        Engine("A", "You are engine A.", MockClient("a", "Response from A")),
        Engine("B", "You are engine B.", MockClient("b", "Response from B")),
    ]
