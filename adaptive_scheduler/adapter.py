# adaptive_scheduler/adapter.py
from typing import Optional

from loguru import logger

from .config import EngineConfig
from .errors import AdaptationInfeasibleError, InvalidInputError
from .models import Activity, AdaptationResult


def adapt(activity: Activity,
          available_duration: int,
          config: Optional[EngineConfig] = None) -> AdaptationResult:
    """
    Shrink `activity` to `available_duration` minutes.

    Already fitting is a no-op result (adapted=False), not an error.
    Raises AdaptationInfeasibleError below config.min_adapted_duration and
    InvalidInputError for a non-positive or non-integer duration.
    """
    config = config or EngineConfig()
    if (isinstance(available_duration, bool) or not isinstance(available_duration, int)
            or available_duration <= 0):
        raise InvalidInputError(
            f"available duration must be a positive integer of minutes, got {available_duration!r}"
        )

    if activity.duration <= available_duration:
        return AdaptationResult(
            adapted=False,
            original=activity,
            activity=activity,
            message="Activity already fits within available time",
        )

    if available_duration < config.min_adapted_duration:
        logger.info(f"Refusing to adapt '{activity.title}' to {available_duration} min "
                    f"(floor {config.min_adapted_duration})")
        raise AdaptationInfeasibleError(available_duration, config.min_adapted_duration)

    adapted = activity.with_duration(
        available_duration,
        f"Adapted to fit {available_duration} minutes of available time",
    )
    logger.debug(f"Adapted '{activity.title}' {activity.duration} -> {available_duration} min")
    return AdaptationResult(
        adapted=True,
        original=activity,
        activity=adapted,
        message=f"Activity adapted from {activity.duration} to {available_duration} minutes",
    )
