# adaptive_scheduler/ranker.py
"""
Score a catalog of activities against one free-time interval.

Every factor has the same signature and returns (points, reason phrase or None).
Factors run in FACTORS order; the phrases of the ones that fired are joined
with ". " in that same order.
"""
import math
from datetime import datetime
from typing import Callable, Dict, List, Optional, Tuple

import pandas as pd
from loguru import logger

from .config import EngineConfig
from .models import Activity, FreeTimeInterval, Suggestion, UserPrefs
from .time_of_day import bucket_for, matches, round_half_up, to_timestamp

FactorResult = Tuple[int, Optional[str]]
HistoryIndex = Dict[str, int]  # activity type value -> recent completions

DAY = pd.Timedelta(days=1)


def build_history_index(activities: List[Activity],
                        now: pd.Timestamp,
                        window_days: int = 7) -> HistoryIndex:
    """
    Completed entries per activity type within the trailing window.

    The cutoff is inclusive: an entry dated exactly `window_days` ago counts.
    Every type present in the catalog gets a key, even with zero completions.
    """
    cutoff = now - pd.Timedelta(days=window_days)
    rows = [
        {
            "type": a.type.value,
            "date": to_timestamp(h.date, like=now),
            "completed": bool(h.completed),
        }
        for a in activities
        for h in a.completion_history
    ]
    index = {a.type.value: 0 for a in activities}
    if not rows:
        return index

    hist = pd.DataFrame(rows)
    recent = hist[hist["completed"] & (hist["date"] >= cutoff)]
    index.update({t: int(n) for t, n in recent.groupby("type").size().items()})
    return index


# ---- scoring factors ----

def time_of_day_factor(activity: Activity, interval: FreeTimeInterval, prefs: UserPrefs,
                       history: HistoryIndex, now: pd.Timestamp,
                       config: EngineConfig) -> FactorResult:
    bucket = bucket_for(interval.start)
    if matches(activity.preferred_time_of_day, bucket):
        return config.time_of_day_bonus, f"Matches preferred time of day ({bucket.value})"
    return 0, None


def priority_factor(activity: Activity, interval: FreeTimeInterval, prefs: UserPrefs,
                    history: HistoryIndex, now: pd.Timestamp,
                    config: EngineConfig) -> FactorResult:
    points = config.priority_bonus.get(activity.priority, 0)
    if points > 0:
        return points, f"{activity.priority.value} priority activity"
    return 0, None


def recency_factor(activity: Activity, interval: FreeTimeInterval, prefs: UserPrefs,
                   history: HistoryIndex, now: pd.Timestamp,
                   config: EngineConfig) -> FactorResult:
    if activity.last_scheduled is None:
        return config.never_scheduled_bonus, "Never done before"

    last = to_timestamp(activity.last_scheduled, like=now)
    days = math.floor((now - last) / DAY)
    # scheduled in the future counts as "just done"
    points = max(0, min(days * config.recency_points_per_day, config.recency_cap))
    if points > config.recency_reason_above:
        return points, "Not done in a while"
    return points, None


def duration_fit_factor(activity: Activity, interval: FreeTimeInterval, prefs: UserPrefs,
                        history: HistoryIndex, now: pd.Timestamp,
                        config: EngineConfig) -> FactorResult:
    points = round_half_up(activity.duration / interval.duration * config.duration_fit_weight)
    if points > config.duration_fit_reason_above:
        return points, "Makes good use of available time"
    return points, None


def balance_factor(activity: Activity, interval: FreeTimeInterval, prefs: UserPrefs,
                   history: HistoryIndex, now: pd.Timestamp,
                   config: EngineConfig) -> FactorResult:
    if not prefs.balance_priorities:
        return 0, None
    if history.get(activity.type.value, 0) < config.balance_threshold:
        return (config.balance_bonus,
                f"Balances activity types ({activity.type.value} is underrepresented)")
    return 0, None


Factor = Callable[..., FactorResult]

FACTORS: List[Factor] = [
    time_of_day_factor,
    priority_factor,
    recency_factor,
    duration_fit_factor,
    balance_factor,
]


def score_activity(activity: Activity,
                   interval: FreeTimeInterval,
                   prefs: UserPrefs,
                   history: HistoryIndex,
                   now: pd.Timestamp,
                   config: EngineConfig) -> Suggestion:
    score = config.base_score
    reasons = []
    for factor in FACTORS:
        points, phrase = factor(activity, interval, prefs, history, now, config)
        score += points
        if phrase:
            reasons.append(phrase)
    return Suggestion(activity=activity, score=score, reason=". ".join(reasons))


def rank(interval: FreeTimeInterval,
         activities: List[Activity],
         prefs: UserPrefs,
         now: Optional[datetime] = None,
         config: Optional[EngineConfig] = None) -> List[Suggestion]:
    """
    Top suggestions for `interval`, best first.

    Activities longer than the interval are dropped. Equal scores keep their
    catalog order. An empty or fully ineligible catalog gives [].
    """
    config = config or EngineConfig()
    start = pd.Timestamp(interval.start)
    now = pd.Timestamp.now(tz=start.tz) if now is None else to_timestamp(now, like=start)

    eligible = [a for a in activities if a.duration <= interval.duration]
    if not eligible:
        logger.debug(f"No activity fits {interval.duration} min interval "
                     f"({len(activities)} in catalog)")
        return []

    # balance counts look at the whole catalog, not just what fits
    history = build_history_index(activities, now, config.balance_window_days)

    scored = [score_activity(a, interval, prefs, history, now, config) for a in eligible]

    order = pd.Series([s.score for s in scored]).sort_values(
        ascending=False, kind="stable"
    ).index
    ranked = [scored[i] for i in order[:config.top_n]]

    logger.debug(
        f"Ranked {len(eligible)}/{len(activities)} eligible activities for "
        f"{interval.duration} min {bucket_for(start).value} slot; "
        f"top={[(s.activity.title, s.score) for s in ranked]}"
    )
    return ranked


def suggestions_frame(suggestions: List[Suggestion]) -> pd.DataFrame:
    """Flatten suggestions for tables and charts."""
    columns = ["id", "title", "type", "duration", "priority", "score", "reason"]
    if not suggestions:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([{
        "id": s.activity.id,
        "title": s.activity.title,
        "type": s.activity.type.value,
        "duration": s.activity.duration,
        "priority": s.activity.priority.value,
        "score": s.score,
        "reason": s.reason,
    } for s in suggestions], columns=columns)
