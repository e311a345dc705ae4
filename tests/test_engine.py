import pandas as pd

from adaptive_scheduler.config import EngineConfig
from adaptive_scheduler.engine import (
    adapt_activity, suggest_for_calendar, suggest_for_duration, suggest_for_interval,
)
from adaptive_scheduler.models import FreeTimeInterval, UserPrefs

PREFS = UserPrefs(balance_priorities=False)


def test_suggest_for_duration_uses_nominal_bucket(now, make_activity):
    morning = make_activity(title="Yoga", preferred_time_of_day="Morning")
    evening = make_activity(title="Movie", preferred_time_of_day="Evening")

    out = suggest_for_duration(60, [morning, evening], PREFS, time_of_day="Evening", now=now)
    assert out[0].activity.title == "Movie"
    assert "(Evening)" in out[0].reason

    out = suggest_for_duration(60, [evening, morning], PREFS, time_of_day="Morning", now=now)
    assert out[0].activity.title == "Yoga"


def test_suggest_for_duration_defaults_to_now(now, make_activity):
    # fixture now is 09:30 -> Morning
    morning = make_activity(title="Yoga", preferred_time_of_day="Morning")
    out = suggest_for_duration(30, [morning], PREFS, now=now)
    assert "(Morning)" in out[0].reason


def test_suggest_for_interval(now, make_activity):
    interval = FreeTimeInterval.from_bounds(now, now + pd.Timedelta(minutes=20))
    a = make_activity(duration=20)
    b = make_activity(duration=25)
    assert [s.activity for s in suggest_for_interval(interval, [a, b], PREFS, now=now)] == [a]


def test_suggest_for_calendar_ranks_each_slot(now, make_activity):
    day = now.normalize()
    busy = [(day + pd.Timedelta(hours=10), day + pd.Timedelta(hours=13, minutes=40))]
    short = make_activity(title="Stretch", duration=15)
    long_ = make_activity(title="Hike", duration=120)

    results = suggest_for_calendar(
        day + pd.Timedelta(hours=9), day + pd.Timedelta(hours=16),
        busy, [short, long_], PREFS, now=now,
    )

    assert [slot.duration for slot, _ in results] == [60, 140]
    assert [s.activity.title for s in results[0][1]] == ["Stretch"]
    assert [s.activity.title for s in results[1][1]] == ["Hike", "Stretch"]


def test_suggest_for_calendar_min_duration_from_config(now, make_activity):
    day = now.normalize()
    busy = [(day + pd.Timedelta(hours=9, minutes=20), day + pd.Timedelta(hours=10))]
    results = suggest_for_calendar(
        day + pd.Timedelta(hours=9), day + pd.Timedelta(hours=11),
        busy, [make_activity(duration=10)], PREFS, now=now,
        config=EngineConfig(min_free_slot_minutes=30),
    )
    assert [slot.duration for slot, _ in results] == [60]


def test_adapt_activity(make_activity):
    result = adapt_activity(make_activity(duration=60), 30)
    assert result.adapted
    assert result.activity.duration == 30
