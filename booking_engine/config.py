"""
Centralized configuration with environment variable overrides.

Backend endpoints, fallback behaviour and booking defaults are
configurable here. Nothing is hardcoded in the wizard or the backend client.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from booking_engine.logging_context import configure_logging

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_FALLBACK_SLOTS = "09:00,10:00,11:00,13:00,14:00,15:00,16:00,17:00"


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_float(env_var: str, default: str) -> float:
    """Parse a float from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return float(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid float for {env_var}: {raw!r}"
        ) from None


def _csv_tuple(env_var: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(env_var, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class BusinessConfig:
    """Salon-specific settings loaded from environment or defaults."""

    name: str = os.getenv("BUSINESS_NAME", "Salon")
    default_service_duration: int = _safe_int("DEFAULT_SERVICE_DURATION", "60")
    placeholder_image: str = os.getenv("PLACEHOLDER_IMAGE", "/placeholder.png")


@dataclass(frozen=True)
class BackendConfig:
    """Scheduling backend endpoints and graceful-degradation settings."""

    base_url: str = os.getenv("BACKEND_BASE_URL", "http://localhost:3000")
    timeout_sec: float = _safe_float("BACKEND_TIMEOUT_SEC", "10.0")
    fallback_slots: tuple[str, ...] = _csv_tuple("FALLBACK_SLOTS", DEFAULT_FALLBACK_SLOTS)
    simulated_success_delay_sec: float = _safe_float("SIMULATED_SUCCESS_DELAY_SEC", "1.5")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    if config.business.default_service_duration < 1:
        raise ValueError(
            "DEFAULT_SERVICE_DURATION must be >= 1, "
            f"got {config.business.default_service_duration}"
        )
    if not config.backend.base_url.startswith(("http://", "https://")):
        raise ValueError(
            f"BACKEND_BASE_URL must be an http(s) URL, got {config.backend.base_url!r}"
        )
    if config.backend.timeout_sec <= 0:
        raise ValueError(
            f"BACKEND_TIMEOUT_SEC must be > 0, got {config.backend.timeout_sec}"
        )
    if config.backend.simulated_success_delay_sec < 0:
        raise ValueError(
            "SIMULATED_SUCCESS_DELAY_SEC must be >= 0, "
            f"got {config.backend.simulated_success_delay_sec}"
        )

    for slot in config.backend.fallback_slots:
        hour, _, minute = slot.partition(":")
        if not (hour.isdigit() and minute.isdigit() and len(minute) == 2):
            raise ValueError(f"FALLBACK_SLOTS entries must be HH:MM, got {slot!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    configure_logging(config.log_level)
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
