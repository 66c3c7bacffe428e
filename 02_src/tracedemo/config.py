"""Project-level configuration and path helpers."""

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Mapping

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

DEFAULT_TEMPO_ENDPOINT = "tempo:4317"
DEFAULT_RECEIVER_ENDPOINT = "http://localhost:8081"

logger = logging.getLogger(__name__)


class Variant(str, Enum):
    """Which of the demo programs this process plays."""

    APP = "app"
    SENDER = "sender"
    RECEIVER = "receiver"


@dataclass(frozen=True)
class VariantProfile:
    """Static defaults for a variant."""

    service_name: str
    port: int
    serve_http: bool
    generator_paths: tuple[str, ...] = ()
    text_prefix: str = ""


ALL_PATHS = ("/", "/health", "/slow", "/error")

PROFILES: dict[Variant, VariantProfile] = {
    Variant.APP: VariantProfile(
        service_name="monitoring-test-app",
        port=8080,
        serve_http=True,
        generator_paths=ALL_PATHS,
    ),
    Variant.SENDER: VariantProfile(
        service_name="monitoring-test-sender",
        port=8080,
        serve_http=False,
        generator_paths=("/", "/health"),
    ),
    Variant.RECEIVER: VariantProfile(
        service_name="monitoring-test-receiver",
        port=8081,
        serve_http=True,
        text_prefix="Receiver: ",
    ),
}


@dataclass(frozen=True)
class Settings:
    """Configuration read once at process start."""

    variant: Variant
    service_name: str
    environment: str
    tempo_endpoint: str
    api_host: str
    api_port: int
    serve_http: bool
    generator_target: str | None
    generator_paths: tuple[str, ...]
    generator_interval: float
    error_rate: float
    slow_min_ms: int
    slow_max_ms: int
    random_seed: int | None
    text_prefix: str = ""

    @property
    def generator_enabled(self) -> bool:
        return bool(self.generator_target and self.generator_paths)


def load_settings(
    variant: str | Variant | None = None,
    env: Mapping[str, str] | None = None,
) -> Settings:
    """Build Settings from environment variables, falling back to variant defaults."""
    if env is None:
        env = os.environ

    variant = Variant(variant or env.get("SERVICE_VARIANT") or Variant.APP.value)
    profile = PROFILES[variant]

    api_port = int(env.get("API_PORT") or profile.port)

    if variant is Variant.APP:
        generator_target: str | None = f"http://localhost:{api_port}"
    elif variant is Variant.SENDER:
        generator_target = env.get("RECEIVER_ENDPOINT")
        if not generator_target:
            generator_target = DEFAULT_RECEIVER_ENDPOINT
            logger.warning(
                "RECEIVER_ENDPOINT is not set, using default %s", DEFAULT_RECEIVER_ENDPOINT
            )
    else:
        generator_target = None

    seed = env.get("RANDOM_SEED")

    return Settings(
        variant=variant,
        service_name=profile.service_name,
        environment=env.get("DEPLOYMENT_ENVIRONMENT") or "dev",
        tempo_endpoint=env.get("TEMPO_ENDPOINT") or DEFAULT_TEMPO_ENDPOINT,
        api_host=env.get("API_HOST") or "0.0.0.0",
        api_port=api_port,
        serve_http=profile.serve_http,
        generator_target=generator_target,
        generator_paths=profile.generator_paths,
        generator_interval=float(env.get("GENERATOR_INTERVAL") or 5.0),
        error_rate=float(env.get("ERROR_RATE") or 0.2),
        slow_min_ms=int(env.get("SLOW_MIN_MS") or 100),
        slow_max_ms=int(env.get("SLOW_MAX_MS") or 2000),
        random_seed=int(seed) if seed else None,
        text_prefix=profile.text_prefix,
    )
