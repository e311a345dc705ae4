import pandas as pd
import pytest

from adaptive_scheduler.errors import InvalidInputError
from adaptive_scheduler.models import (
    Activity, ActivityType, FreeTimeInterval, Priority, SlotSource, Suggestion, UserPrefs,
)
from adaptive_scheduler.time_of_day import TimeOfDay


def test_activity_coerces_enum_strings(make_activity):
    a = make_activity(type="Exercise", preferred_time_of_day="Morning", priority="High")
    assert a.type is ActivityType.EXERCISE
    assert a.preferred_time_of_day is TimeOfDay.MORNING
    assert a.priority is Priority.HIGH


@pytest.mark.parametrize("field,value", [
    ("type", "Sleeping"),
    ("preferred_time_of_day", "Night"),
    ("priority", "Urgent"),
])
def test_activity_rejects_unknown_enum_values(make_activity, field, value):
    with pytest.raises(InvalidInputError):
        make_activity(**{field: value})


@pytest.mark.parametrize("duration", [0, -10, 12.5, "30", True])
def test_activity_rejects_bad_duration(make_activity, duration):
    with pytest.raises(InvalidInputError):
        make_activity(duration=duration)


def test_from_record_parses_camel_case():
    a = Activity.from_record({
        "_id": "abc123",
        "title": "Morning Yoga",
        "type": "Exercise",
        "duration": 30,
        "preferredTimeOfDay": "Morning",
        "priority": "High",
        "lastScheduled": "2025-10-01T08:00:00Z",
        "completionHistory": [
            {"date": "2025-10-01T08:00:00Z", "duration": 30, "completed": True},
            {"date": "2025-10-02T08:00:00Z", "duration": 20},
        ],
    })
    assert a.id == "abc123"
    assert a.preferred_time_of_day is TimeOfDay.MORNING
    assert a.last_scheduled == pd.Timestamp("2025-10-01T08:00:00Z")
    assert len(a.completion_history) == 2
    assert a.completion_history[1].completed is True


def test_from_record_defaults():
    a = Activity.from_record({"id": 7, "title": "Walk", "type": "Exercise", "duration": 20})
    assert a.id == "7"
    assert a.preferred_time_of_day is TimeOfDay.ANY
    assert a.priority is Priority.MEDIUM
    assert a.last_scheduled is None
    assert a.completion_history == []


@pytest.mark.parametrize("duration", [4, 241])
def test_from_record_enforces_creation_range(duration):
    with pytest.raises(InvalidInputError):
        Activity.from_record({"id": "x", "title": "X", "type": "Other", "duration": duration})


def test_from_record_reports_missing_fields():
    with pytest.raises(InvalidInputError) as exc:
        Activity.from_record({"title": "X"})
    assert "id" in str(exc.value)
    assert "duration" in str(exc.value)


def test_to_record_only_carries_adaptation_fields_when_adapted(make_activity):
    a = make_activity(duration=60)
    assert "originalDuration" not in a.to_record()
    shrunk = a.with_duration(30, "why")
    rec = shrunk.to_record()
    assert rec["duration"] == 30
    assert rec["originalDuration"] == 60
    assert rec["adaptationReason"] == "why"


def test_interval_from_bounds_derives_duration():
    start = pd.Timestamp("2025-11-03 10:00")
    interval = FreeTimeInterval.from_bounds(start, start + pd.Timedelta(minutes=45))
    assert interval.duration == 45
    assert interval.source is SlotSource.MANUAL


def test_interval_from_bounds_rejects_non_positive():
    start = pd.Timestamp("2025-11-03 10:00")
    with pytest.raises(InvalidInputError):
        FreeTimeInterval.from_bounds(start, start)
    with pytest.raises(InvalidInputError):
        FreeTimeInterval.from_bounds(start, start - pd.Timedelta(minutes=5))


def test_interval_rejects_non_positive_duration(now):
    with pytest.raises(InvalidInputError):
        FreeTimeInterval(start=now, end=now, duration=0)
    with pytest.raises(InvalidInputError):
        FreeTimeInterval.from_duration(-5, now=now)


def test_interval_from_duration_synthesizes_start(now):
    interval = FreeTimeInterval.from_duration(60, time_of_day="Evening", now=now)
    assert interval.start.hour == 19
    assert interval.end - interval.start == pd.Timedelta(minutes=60)
    assert FreeTimeInterval.from_duration(30, now=now).start == now


def test_suggestion_record_shape(make_activity):
    s = Suggestion(activity=make_activity(id="a1"), score=150, reason="High priority activity")
    assert s.to_record() == {"activity": "a1", "score": 150, "reason": "High priority activity"}


def test_from_record_accepts_falsy_id():
    a = Activity.from_record({"id": 0, "title": "Walk", "type": "Exercise", "duration": 20})
    assert a.id == "0"
    b = Activity.from_record({"id": None, "_id": 0, "title": "Walk", "type": "Exercise", "duration": 20})
    assert b.id == "0"


def test_from_record_takes_user_defaults():
    prefs = UserPrefs(default_activity_duration=45, preferred_time_of_day=TimeOfDay.EVENING)
    a = Activity.from_record({"id": "x", "title": "Journal", "type": "Relaxation"}, prefs=prefs)
    assert a.duration == 45
    assert a.preferred_time_of_day is TimeOfDay.EVENING

    # explicit values win over the defaults
    b = Activity.from_record({"id": "y", "title": "Run", "type": "Exercise", "duration": 20,
                              "preferredTimeOfDay": "Morning"}, prefs=prefs)
    assert (b.duration, b.preferred_time_of_day) == (20, TimeOfDay.MORNING)


def test_interval_rejects_end_not_after_start(now):
    with pytest.raises(InvalidInputError):
        FreeTimeInterval(start=now, end=now, duration=30)
    with pytest.raises(InvalidInputError):
        FreeTimeInterval(start=now, end=now - pd.Timedelta(minutes=30), duration=30)
    ok = FreeTimeInterval(start=now, end=now + pd.Timedelta(minutes=30), duration=30)
    assert ok.duration == 30
