# adaptive_scheduler/models.py
from dataclasses import dataclass, field, asdict, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

import pandas as pd

from .errors import InvalidInputError
from .time_of_day import TimeOfDay, minutes_between, nominal_start, to_timestamp

MIN_ACTIVITY_DURATION = 5    # minutes
MAX_ACTIVITY_DURATION = 240  # minutes


class ActivityType(str, Enum):
    EXERCISE = "Exercise"
    LEARNING = "Learning"
    ENTERTAINMENT = "Entertainment"
    SOCIAL = "Social"
    FAMILY = "Family"
    RELAXATION = "Relaxation"
    HOBBY = "Hobby"
    WORK = "Work"
    CHORES = "Chores"
    OTHER = "Other"


class Priority(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class SlotSource(str, Enum):
    MANUAL = "manual"
    GOOGLE_CALENDAR = "google_calendar"
    CALENDAR = "calendar"  # detected from busy periods


def parse_enum(enum_cls, value, field_name: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise InvalidInputError(
            f"{field_name}: {value!r} is not one of {allowed}"
        ) from None


def _check_minutes(value, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidInputError(f"{field_name} must be a positive integer of minutes, got {value!r}")
    return value


@dataclass
class CompletionEntry:
    date: datetime
    duration: Optional[int] = None
    completed: bool = True


@dataclass
class Activity:
    id: str
    title: str
    type: ActivityType
    duration: int                                   # minutes
    preferred_time_of_day: TimeOfDay = TimeOfDay.ANY
    priority: Priority = Priority.MEDIUM
    last_scheduled: Optional[datetime] = None       # None = never scheduled
    completion_history: List[CompletionEntry] = field(default_factory=list)
    original_duration: Optional[int] = None         # set on adapted copies
    adaptation_reason: Optional[str] = None

    def __post_init__(self):
        if not self.id or not self.title:
            raise InvalidInputError("activity id and title are required")
        self.type = parse_enum(ActivityType, self.type, "type")
        self.preferred_time_of_day = parse_enum(
            TimeOfDay, self.preferred_time_of_day, "preferredTimeOfDay"
        )
        self.priority = parse_enum(Priority, self.priority, "priority")
        self.duration = _check_minutes(self.duration, "duration")

    @classmethod
    def from_record(cls, record: Dict[str, Any],
                    prefs: Optional["UserPrefs"] = None) -> "Activity":
        """
        Build an Activity from a stored/posted record (camelCase keys).

        Applies the creation-time range check on duration that the web layer
        enforces before anything reaches the ranker. With `prefs`, a record
        without duration or preferredTimeOfDay takes the user's defaults.
        """
        record = dict(record)
        if prefs is not None:
            if record.get("duration") is None:
                record["duration"] = prefs.default_activity_duration
            if not record.get("preferredTimeOfDay"):
                record["preferredTimeOfDay"] = prefs.preferred_time_of_day

        missing = [k for k in ("title", "type", "duration") if record.get(k) in (None, "")]
        activity_id = record.get("id")
        if activity_id is None:
            activity_id = record.get("_id")
        if activity_id is None:
            missing.insert(0, "id")
        if missing:
            raise InvalidInputError(f"activity record missing: {', '.join(missing)}")

        duration = record["duration"]
        if isinstance(duration, float) and duration.is_integer():
            duration = int(duration)
        _check_minutes(duration, "duration")
        if not MIN_ACTIVITY_DURATION <= duration <= MAX_ACTIVITY_DURATION:
            raise InvalidInputError(
                f"duration must be between {MIN_ACTIVITY_DURATION} and "
                f"{MAX_ACTIVITY_DURATION} minutes, got {duration}"
            )

        last = record.get("lastScheduled")
        history = [
            CompletionEntry(
                date=pd.Timestamp(h["date"]),
                duration=h.get("duration"),
                completed=h.get("completed", True),
            )
            for h in record.get("completionHistory") or []
        ]
        return cls(
            id=str(activity_id),
            title=record["title"],
            type=record["type"],
            duration=duration,
            preferred_time_of_day=record.get("preferredTimeOfDay") or TimeOfDay.ANY,
            priority=record.get("priority") or Priority.MEDIUM,
            last_scheduled=pd.Timestamp(last) if last is not None else None,
            completion_history=history,
            original_duration=record.get("originalDuration"),
            adaptation_reason=record.get("adaptationReason"),
        )

    def to_record(self) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "title": self.title,
            "type": self.type.value,
            "duration": self.duration,
            "preferredTimeOfDay": self.preferred_time_of_day.value,
            "priority": self.priority.value,
            "lastScheduled": self.last_scheduled,
            "completionHistory": [asdict(h) for h in self.completion_history],
        }
        if self.original_duration is not None:
            out["originalDuration"] = self.original_duration
            out["adaptationReason"] = self.adaptation_reason
        return out

    def with_duration(self, duration: int, reason: str) -> "Activity":
        return replace(
            self,
            duration=duration,
            original_duration=self.duration,
            adaptation_reason=reason,
            completion_history=list(self.completion_history),
        )


@dataclass
class FreeTimeInterval:
    start: datetime
    end: datetime
    duration: int  # minutes
    source: SlotSource = SlotSource.MANUAL

    def __post_init__(self):
        self.source = parse_enum(SlotSource, self.source, "source")
        self.duration = _check_minutes(self.duration, "interval duration")
        if to_timestamp(self.end, like=pd.Timestamp(self.start)) <= pd.Timestamp(self.start):
            raise InvalidInputError("End time must be after start time")

    @classmethod
    def from_bounds(cls, start: datetime, end: datetime,
                    source: SlotSource = SlotSource.MANUAL) -> "FreeTimeInterval":
        start = pd.Timestamp(start)
        end = to_timestamp(end, like=start)
        duration = minutes_between(start, end)
        if duration <= 0:
            raise InvalidInputError("End time must be after start time")
        return cls(start=start, end=end, duration=duration, source=source)

    @classmethod
    def from_duration(cls, duration: int,
                      time_of_day: Optional[TimeOfDay] = None,
                      now: Optional[datetime] = None) -> "FreeTimeInterval":
        """Nominal interval for callers that only know how long they have."""
        _check_minutes(duration, "interval duration")
        if time_of_day is not None:
            time_of_day = parse_enum(TimeOfDay, time_of_day, "timeOfDay")
        now = pd.Timestamp.now() if now is None else pd.Timestamp(now)
        start = nominal_start(time_of_day, now)
        return cls(start=start, end=start + pd.Timedelta(minutes=duration),
                   duration=duration)


@dataclass
class UserPrefs:
    balance_priorities: bool = True
    default_activity_duration: int = 30          # minutes
    preferred_time_of_day: TimeOfDay = TimeOfDay.ANY
    tz: str = "America/New_York"


@dataclass
class Suggestion:
    activity: Activity
    score: int
    reason: str

    def to_record(self) -> Dict[str, Any]:
        # shape stored on the free-time slot
        return {"activity": self.activity.id, "score": self.score, "reason": self.reason}


@dataclass
class AdaptationResult:
    adapted: bool
    original: Activity
    activity: Activity  # == original when no adaptation was needed
    message: str
