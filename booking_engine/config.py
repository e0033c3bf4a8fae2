"""
Centralized configuration with environment variable overrides.

Scheduling bounds, defaults, and server settings are configurable here.
Nothing is hardcoded in the scheduling or API logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

from booking_engine.logging_context import install_request_id_filter

load_dotenv()

logger = logging.getLogger(__name__)


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _split_csv(env_var: str, default: str) -> tuple[str, ...]:
    raw = os.getenv(env_var, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class SchedulingConfig:
    """Provider scheduling defaults and validation bounds."""

    default_service_duration: int = _safe_int("DEFAULT_SERVICE_DURATION", "60")
    default_min_advance_hours: int = _safe_int("DEFAULT_MIN_ADVANCE_HOURS", "24")
    default_max_daily_orders: int = _safe_int("DEFAULT_MAX_DAILY_ORDERS", "5")
    max_daily_orders_limit: int = _safe_int("MAX_DAILY_ORDERS_LIMIT", "50")
    min_service_duration: int = _safe_int("MIN_SERVICE_DURATION", "15")
    max_service_duration: int = _safe_int("MAX_SERVICE_DURATION", "480")
    min_advance_hours: int = _safe_int("MIN_ADVANCE_HOURS", "1")
    max_advance_hours: int = _safe_int("MAX_ADVANCE_HOURS", "168")
    max_query_days: int = _safe_int("MAX_QUERY_DAYS", "31")
    default_day_start: str = os.getenv("DEFAULT_DAY_START", "09:00")
    default_day_end: str = os.getenv("DEFAULT_DAY_END", "18:00")
    timezone: str = os.getenv("SCHEDULE_TIMEZONE", "Europe/London")


@dataclass(frozen=True)
class ServerConfig:
    """HTTP server settings."""

    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _safe_int("PORT", "8000")
    cors_origins: tuple[str, ...] = _split_csv(
        "CORS_ORIGINS", "http://localhost:5173,http://localhost:8000"
    )


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "provider-booking-engine")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    sched = config.scheduling
    if not 1 <= sched.min_service_duration <= sched.max_service_duration:
        raise ValueError(
            "MIN_SERVICE_DURATION must be >= 1 and <= MAX_SERVICE_DURATION, "
            f"got {sched.min_service_duration}"
        )
    if not sched.min_service_duration <= sched.default_service_duration <= sched.max_service_duration:
        raise ValueError(
            "DEFAULT_SERVICE_DURATION must be between "
            f"{sched.min_service_duration} and {sched.max_service_duration}, "
            f"got {sched.default_service_duration}"
        )
    if not 0 <= sched.min_advance_hours <= sched.max_advance_hours:
        raise ValueError(
            "MIN_ADVANCE_HOURS must be >= 0 and <= MAX_ADVANCE_HOURS, "
            f"got {sched.min_advance_hours}"
        )
    if not sched.min_advance_hours <= sched.default_min_advance_hours <= sched.max_advance_hours:
        raise ValueError(
            "DEFAULT_MIN_ADVANCE_HOURS must be between "
            f"{sched.min_advance_hours} and {sched.max_advance_hours}, "
            f"got {sched.default_min_advance_hours}"
        )
    if not 1 <= sched.default_max_daily_orders <= sched.max_daily_orders_limit:
        raise ValueError(
            f"DEFAULT_MAX_DAILY_ORDERS must be between 1 and {sched.max_daily_orders_limit}, "
            f"got {sched.default_max_daily_orders}"
        )
    if sched.max_query_days < 1:
        raise ValueError(f"MAX_QUERY_DAYS must be >= 1, got {sched.max_query_days}")

    for name, value in [
        ("DEFAULT_DAY_START", sched.default_day_start),
        ("DEFAULT_DAY_END", sched.default_day_end),
    ]:
        parts = value.split(":")
        if len(parts) != 2 or not all(p.isdigit() for p in parts):
            raise ValueError(f"{name} must be in HH:MM format, got {value!r}")
    if sched.default_day_start >= sched.default_day_end:
        raise ValueError(
            "DEFAULT_DAY_START must be before DEFAULT_DAY_END, "
            f"got {sched.default_day_start} - {sched.default_day_end}"
        )

    if not 1 <= config.server.port <= 65535:
        raise ValueError(f"PORT must be between 1 and 65535, got {config.server.port}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    install_request_id_filter()
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config


# Singleton instance
settings = load_config()
