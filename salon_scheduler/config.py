"""
Centralized configuration with environment variable overrides.

Working-hours seed values, booking policy flags, and storage settings
are configurable here. Nothing is hardcoded in scheduling or tool logic
apart from the Sunday-closed business rule.
"""

import logging
import os
import re
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}
STORAGE_BACKENDS = ("memory", "json")


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    normalized = raw.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean for {env_var}: {raw!r}")


@dataclass(frozen=True)
class BusinessConfig:
    """Business identity used in logs and CLI headers."""

    name: str = os.getenv("SALON_NAME", "Centro Terapêutico")


@dataclass(frozen=True)
class ScheduleConfig:
    """Seed values for the weekly working-hours template."""

    open_time: str = os.getenv("SCHEDULE_OPEN_TIME", "08:00")
    close_time: str = os.getenv("SCHEDULE_CLOSE_TIME", "18:00")
    slot_duration: int = _safe_int("SCHEDULE_SLOT_DURATION", "30")
    break_start: str = os.getenv("SCHEDULE_BREAK_START", "12:00")
    break_end: str = os.getenv("SCHEDULE_BREAK_END", "13:00")
    generation_horizon_days: int = _safe_int("GENERATION_HORIZON_DAYS", "30")


@dataclass(frozen=True)
class BookingConfig:
    """Booking policy switches. Defaults preserve the historical behaviour."""

    release_slot_on_cancel: bool = _safe_bool("RELEASE_SLOT_ON_CANCEL", "false")
    require_slot: bool = _safe_bool("REQUIRE_SLOT_FOR_BOOKING", "false")


@dataclass(frozen=True)
class StorageConfig:
    """Where persisted collections live."""

    backend: str = os.getenv("STORAGE_BACKEND", "memory")
    data_dir: str = os.getenv("DATA_DIR", "./data")
    key_prefix: str = os.getenv("STORAGE_KEY_PREFIX", "therapyCenter_")


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    business: BusinessConfig = field(default_factory=BusinessConfig)
    schedule: ScheduleConfig = field(default_factory=ScheduleConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    schedule = config.schedule
    for name, value in [
        ("SCHEDULE_OPEN_TIME", schedule.open_time),
        ("SCHEDULE_CLOSE_TIME", schedule.close_time),
        ("SCHEDULE_BREAK_START", schedule.break_start),
        ("SCHEDULE_BREAK_END", schedule.break_end),
    ]:
        if value and not _HHMM.match(value):
            raise ValueError(f"{name} must be HH:MM, got {value!r}")

    if schedule.open_time >= schedule.close_time:
        raise ValueError(
            "SCHEDULE_OPEN_TIME must be before SCHEDULE_CLOSE_TIME, "
            f"got {schedule.open_time} >= {schedule.close_time}"
        )
    if bool(schedule.break_start) != bool(schedule.break_end):
        raise ValueError("SCHEDULE_BREAK_START and SCHEDULE_BREAK_END must be set together")
    if schedule.break_start and schedule.break_start >= schedule.break_end:
        raise ValueError(
            "SCHEDULE_BREAK_START must be before SCHEDULE_BREAK_END, "
            f"got {schedule.break_start} >= {schedule.break_end}"
        )
    if schedule.slot_duration < 1:
        raise ValueError(
            f"SCHEDULE_SLOT_DURATION must be >= 1, got {schedule.slot_duration}"
        )
    if schedule.generation_horizon_days < 1:
        raise ValueError(
            f"GENERATION_HORIZON_DAYS must be >= 1, got {schedule.generation_horizon_days}"
        )
    if config.storage.backend not in STORAGE_BACKENDS:
        raise ValueError(
            f"STORAGE_BACKEND must be one of {STORAGE_BACKENDS}, got {config.storage.backend!r}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.business.name)
    return config


# Singleton instance
settings = load_config()
