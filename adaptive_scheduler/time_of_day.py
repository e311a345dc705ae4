# adaptive_scheduler/time_of_day.py
import math
from datetime import datetime
from enum import Enum
from typing import Optional

import pandas as pd


class TimeOfDay(str, Enum):
    MORNING = "Morning"
    AFTERNOON = "Afternoon"
    EVENING = "Evening"
    ANY = "Any"


# Bucket boundaries, [start, end) in 24h
MORNING_HOURS = (5, 12)
AFTERNOON_HOURS = (12, 17)

# Start hours used when only a duration (and maybe a bucket) is known
NOMINAL_START_HOURS = {
    TimeOfDay.MORNING: 9,
    TimeOfDay.AFTERNOON: 14,
    TimeOfDay.EVENING: 19,
}


def to_timestamp(value, like: Optional[pd.Timestamp] = None) -> pd.Timestamp:
    """
    Coerce a datetime/str/Timestamp into a pandas Timestamp.

    If `like` is given, naive values are localized to its timezone (and aware
    values converted to it) so the two can be subtracted safely. On a DST
    change the repeated hour reads as its first (daylight) occurrence and the
    skipped hour is shifted forward to the first valid instant.
    """
    ts = pd.Timestamp(value)
    if like is None:
        return ts
    if like.tzinfo is not None:
        if ts.tzinfo is None:
            return ts.tz_localize(like.tz, ambiguous=True, nonexistent="shift_forward")
        return ts.tz_convert(like.tz)
    if ts.tzinfo is not None:
        return ts.tz_convert(None)
    return ts


def bucket_for(ts: datetime) -> TimeOfDay:
    """Morning / Afternoon / Evening from the wall-clock hour of `ts`. Never Any."""
    hour = pd.Timestamp(ts).hour
    if MORNING_HOURS[0] <= hour < MORNING_HOURS[1]:
        return TimeOfDay.MORNING
    if AFTERNOON_HOURS[0] <= hour < AFTERNOON_HOURS[1]:
        return TimeOfDay.AFTERNOON
    return TimeOfDay.EVENING


def matches(preferred: TimeOfDay, bucket: TimeOfDay) -> bool:
    return preferred == TimeOfDay.ANY or preferred == bucket


def nominal_start(time_of_day: Optional[TimeOfDay], now: datetime) -> pd.Timestamp:
    """Same day as `now`, moved to the representative hour of the bucket."""
    now = pd.Timestamp(now)
    if time_of_day is None or TimeOfDay(time_of_day) == TimeOfDay.ANY:
        return now
    hour = NOMINAL_START_HOURS[TimeOfDay(time_of_day)]
    return now.replace(hour=hour, minute=0, second=0, microsecond=0, nanosecond=0)


def round_half_up(x: float) -> int:
    # round() would use banker's rounding on .5
    return int(math.floor(x + 0.5))


def minutes_between(start: datetime, end: datetime) -> int:
    start = pd.Timestamp(start)
    end = to_timestamp(end, like=start)
    return round_half_up((end - start).total_seconds() / 60.0)
