# adaptive_scheduler/errors.py


class EngineError(ValueError):
    """Base class for rejections raised by the suggestion engine."""


class InvalidInputError(EngineError):
    """Malformed interval, activity or configuration value."""


class AdaptationInfeasibleError(EngineError):
    """The available time is below the minimum an activity can shrink to."""

    def __init__(self, available_duration: int, minimum: int):
        self.available_duration = available_duration
        self.minimum = minimum
        super().__init__(
            f"Cannot adapt activity to {available_duration} minutes "
            f"(minimum is {minimum} minutes)"
        )
