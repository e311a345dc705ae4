# adaptive_scheduler/free_time.py
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Tuple, Union

import pandas as pd
from loguru import logger

from .errors import InvalidInputError
from .models import FreeTimeInterval, SlotSource
from .time_of_day import minutes_between, to_timestamp

BusyPeriod = Union[Tuple[Any, Any], Mapping[str, Any]]


def busy_frame(busy_periods: Iterable[BusyPeriod], like: pd.Timestamp) -> pd.DataFrame:
    """Normalize (start, end) tuples or {"start", "end"} dicts into a sorted frame."""
    rows = []
    for p in busy_periods:
        if isinstance(p, Mapping):
            s, e = p["start"], p["end"]
        else:
            s, e = p
        rows.append({"start": to_timestamp(s, like=like), "end": to_timestamp(e, like=like)})
    if not rows:
        return pd.DataFrame(columns=["start", "end"])
    return pd.DataFrame(rows).sort_values("start", kind="stable").reset_index(drop=True)


def find_free_slots(start: datetime,
                    end: datetime,
                    busy_periods: Iterable[BusyPeriod],
                    min_duration: int = 15) -> List[FreeTimeInterval]:
    """
    Gaps between busy periods inside [start, end).

    Overlapping or nested busy periods only ever push the cursor forward.
    Gaps shorter than `min_duration` minutes are dropped.
    """
    start = pd.Timestamp(start)
    end = to_timestamp(end, like=start)
    if end <= start:
        raise InvalidInputError("window end must be after window start")

    busy = busy_frame(busy_periods, like=start)
    slots: List[FreeTimeInterval] = []
    cursor = start

    def emit(gap_start: pd.Timestamp, gap_end: pd.Timestamp):
        duration = minutes_between(gap_start, gap_end)
        if duration >= min_duration and duration > 0:
            slots.append(FreeTimeInterval(start=gap_start, end=gap_end,
                                          duration=duration, source=SlotSource.CALENDAR))

    for _, r in busy.iterrows():
        if r["start"] > cursor:
            emit(cursor, min(r["start"], end))
        if r["end"] > cursor:
            cursor = r["end"]
        if cursor >= end:
            break

    if cursor < end:
        emit(cursor, end)

    logger.debug(f"Found {len(slots)} free slots >= {min_duration} min "
                 f"between {start} and {end} ({len(busy)} busy periods)")
    return slots
