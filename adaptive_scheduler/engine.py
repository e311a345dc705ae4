# adaptive_scheduler/engine.py
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

import pandas as pd

from .adapter import adapt
from .config import EngineConfig
from .free_time import BusyPeriod, find_free_slots
from .models import Activity, AdaptationResult, FreeTimeInterval, Suggestion, UserPrefs
from .ranker import rank
from .time_of_day import TimeOfDay


def suggest_for_interval(interval: FreeTimeInterval,
                         activities: List[Activity],
                         prefs: UserPrefs,
                         now: Optional[datetime] = None,
                         config: Optional[EngineConfig] = None) -> List[Suggestion]:
    return rank(interval, activities, prefs, now=now, config=config)


def suggest_for_duration(duration: int,
                         activities: List[Activity],
                         prefs: UserPrefs,
                         time_of_day: Optional[TimeOfDay] = None,
                         now: Optional[datetime] = None,
                         config: Optional[EngineConfig] = None) -> List[Suggestion]:
    """
    Suggestions when only the length of the free time is known.

    The interval starts at `now`, or at the bucket's nominal hour on the same
    day when `time_of_day` is given.
    """
    now = pd.Timestamp.now() if now is None else pd.Timestamp(now)
    interval = FreeTimeInterval.from_duration(duration, time_of_day=time_of_day, now=now)
    return rank(interval, activities, prefs, now=now, config=config)


def suggest_for_calendar(window_start: datetime,
                         window_end: datetime,
                         busy_periods: Iterable[BusyPeriod],
                         activities: List[Activity],
                         prefs: UserPrefs,
                         min_duration: Optional[int] = None,
                         now: Optional[datetime] = None,
                         config: Optional[EngineConfig] = None,
                         ) -> List[Tuple[FreeTimeInterval, List[Suggestion]]]:
    """
    Detect free slots in a calendar window and rank the catalog for each.

    Returns (slot, suggestions) pairs in chronological order.
    """
    config = config or EngineConfig()
    if min_duration is None:
        min_duration = config.min_free_slot_minutes

    slots = find_free_slots(window_start, window_end, busy_periods, min_duration)
    return [
        (slot, rank(slot, activities, prefs, now=now, config=config))
        for slot in slots
    ]


def adapt_activity(activity: Activity,
                   available_duration: int,
                   config: Optional[EngineConfig] = None) -> AdaptationResult:
    return adapt(activity, available_duration, config=config)
