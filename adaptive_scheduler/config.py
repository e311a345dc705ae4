# adaptive_scheduler/config.py
import os
import sys
from dataclasses import dataclass, field, fields
from typing import Dict, Optional

from dotenv import load_dotenv
from loguru import logger

from .errors import InvalidInputError
from .models import MIN_ACTIVITY_DURATION, Priority

ENV_PREFIX = "ADAPTIVE_"


@dataclass
class EngineConfig:
    base_score: int = 100
    time_of_day_bonus: int = 20
    priority_bonus: Dict[Priority, int] = field(default_factory=lambda: {
        Priority.HIGH: 30,
        Priority.MEDIUM: 15,
        Priority.LOW: 0,
    })
    recency_points_per_day: int = 2
    recency_cap: int = 30             # reached at 15 days
    never_scheduled_bonus: int = 30
    recency_reason_above: int = 20
    duration_fit_weight: int = 25
    duration_fit_reason_above: int = 20
    balance_bonus: int = 15
    balance_threshold: int = 2        # bonus while recent count < threshold
    balance_window_days: int = 7
    top_n: int = 5
    min_adapted_duration: int = MIN_ACTIVITY_DURATION
    min_free_slot_minutes: int = 15
    log_level: str = "INFO"


def load_config(env_file: Optional[str] = ".env") -> EngineConfig:
    """
    Build an EngineConfig from ADAPTIVE_* environment variables.

    e.g. ADAPTIVE_TOP_N=3, ADAPTIVE_MIN_ADAPTED_DURATION=10, ADAPTIVE_LOG_LEVEL=DEBUG.
    Priority bonuses are not overridable from the environment.
    """
    if env_file:
        load_dotenv(dotenv_path=env_file)

    overrides = {}
    for f in fields(EngineConfig):
        if f.name == "priority_bonus":
            continue
        raw = os.getenv(ENV_PREFIX + f.name.upper())
        if raw is None:
            continue
        if f.name == "log_level":
            overrides[f.name] = raw.upper()
            continue
        try:
            overrides[f.name] = int(raw)
        except ValueError:
            raise InvalidInputError(
                f"{ENV_PREFIX}{f.name.upper()} must be an integer, got {raw!r}"
            ) from None

    config = EngineConfig(**overrides)
    if config.top_n <= 0:
        raise InvalidInputError("top_n must be positive")
    if config.min_adapted_duration <= 0:
        raise InvalidInputError("min_adapted_duration must be positive")
    return config


def configure_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a stderr sink at `level`."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="{time:HH:mm:ss} | {level: <7} | {name}:{function} - {message}",
    )
