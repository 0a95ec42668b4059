"""Load settings.yaml into typed dataclasses. Resolves API keys at startup."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

_SETTINGS_PATH = Path(__file__).parent / "settings.yaml"


@dataclass
class BackendConfig:
    name: str
    sdk: str
    model: str
    api_key_env: str
    max_tokens: int
    temperature: float
    timeout_sec: int
    api_key: str | None = None
    base_url: str | None = None


@dataclass
class EngineConfig:
    id: str
    persona: str
    backend: str | None = None  # None -> defaults.capability


@dataclass
class PromptsConfig:
    decompose: str
    synthesis: str
    synthesis_request: str = "Generate the master report now."


@dataclass
class DefaultsConfig:
    capability: str


@dataclass
class AppConfig:
    defaults: DefaultsConfig
    backends: dict[str, BackendConfig]
    engines: list[EngineConfig]
    prompts: PromptsConfig
    available_backends: set[str] = field(default_factory=set)


def _load_engines(raw_engines: list[dict], backends: dict[str, BackendConfig]) -> list[EngineConfig]:
    if not raw_engines:
        raise ValueError("At least one engine must be configured")

    engines: list[EngineConfig] = []
    seen: set[str] = set()
    for engine_raw in raw_engines:
        engine = EngineConfig(
            id=str(engine_raw["id"]),
            persona=str(engine_raw["persona"]).strip(),
            backend=engine_raw.get("backend"),
        )
        if engine.id in seen:
            raise ValueError(f"Duplicate engine id: {engine.id}")
        if engine.backend is not None and engine.backend not in backends:
            raise ValueError(f"Engine '{engine.id}' references unknown backend '{engine.backend}'")
        seen.add(engine.id)
        engines.append(engine)
    return engines


def load_config(settings_path: Path = _SETTINGS_PATH) -> AppConfig:
    """Load and validate configuration from settings.yaml.

    Raises FileNotFoundError if settings file missing, ValueError if the
    engine set or the default capability is invalid.
    A missing API key is not an error: the backend is kept with api_key=None
    and its client answers with the not-configured notice.
    """
    if not settings_path.exists():
        raise FileNotFoundError(f"Settings file not found: {settings_path}")

    with settings_path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)

    defaults = DefaultsConfig(capability=str(raw["defaults"]["capability"]))

    prompts_raw = raw["prompts"]
    prompts = PromptsConfig(
        decompose=prompts_raw["decompose"],
        synthesis=prompts_raw["synthesis"],
        synthesis_request=prompts_raw.get("synthesis_request", PromptsConfig.synthesis_request),
    )

    backends: dict[str, BackendConfig] = {}
    available_backends: set[str] = set()

    for backend_name, backend_raw in raw["backends"].items():
        api_key = os.environ.get(backend_raw["api_key_env"], "").strip() or None
        backends[backend_name] = BackendConfig(
            name=backend_name,
            sdk=backend_raw["sdk"],
            model=backend_raw["model"],
            api_key_env=backend_raw["api_key_env"],
            max_tokens=int(backend_raw["max_tokens"]),
            temperature=float(backend_raw.get("temperature", 0.7)),
            timeout_sec=int(backend_raw["timeout_sec"]),
            api_key=api_key,
            base_url=backend_raw.get("base_url"),
        )
        if api_key:
            available_backends.add(backend_name)
            logger.info("Backend available: %s", backend_name)
        else:
            logger.info(
                "Backend not configured (no API key): %s — set %s in .env",
                backend_name,
                backend_raw["api_key_env"],
            )

    if defaults.capability not in backends:
        raise ValueError(f"Default capability '{defaults.capability}' is not a configured backend")

    engines = _load_engines(raw.get("engines") or [], backends)

    return AppConfig(
        defaults=defaults,
        backends=backends,
        engines=engines,
        prompts=prompts,
        available_backends=available_backends,
    )
