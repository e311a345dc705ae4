# demo.py
import pandas as pd
import matplotlib.pyplot as plt

from adaptive_scheduler.config import configure_logging, load_config
from adaptive_scheduler.engine import adapt_activity, suggest_for_calendar
from adaptive_scheduler.errors import AdaptationInfeasibleError
from adaptive_scheduler.models import Activity, CompletionEntry, UserPrefs
from adaptive_scheduler.ranker import suggestions_frame


def main():
    config = load_config()
    configure_logging(config.log_level)

    TZ = "America/New_York"
    now = pd.Timestamp("2025-11-03 07:00").tz_localize(TZ)

    prefs = UserPrefs(tz=TZ, balance_priorities=True)

    activities = [
        Activity(
            id="yoga",
            title="Morning Yoga",
            type="Exercise",
            duration=30,
            preferred_time_of_day="Morning",
            priority="High",
            completion_history=[
                CompletionEntry(date=now - pd.Timedelta(days=d), duration=30)
                for d in (1, 2, 4)
            ],
            last_scheduled=now - pd.Timedelta(days=1),
        ),
        Activity(
            id="read",
            title="Read a Book",
            type="Relaxation",
            duration=60,
            preferred_time_of_day="Evening",
            priority="Medium",
        ),
        Activity(
            id="code",
            title="Learn Programming",
            type="Learning",
            duration=45,
            preferred_time_of_day="Afternoon",
            priority="High",
            last_scheduled=now - pd.Timedelta(days=20),
        ),
        Activity(
            id="call",
            title="Call Parents",
            type="Family",
            duration=20,
            preferred_time_of_day="Any",
            priority="Medium",
        ),
        Activity(
            id="guitar",
            title="Guitar Practice",
            type="Hobby",
            duration=90,
            preferred_time_of_day="Evening",
            priority="Low",
            last_scheduled=now - pd.Timedelta(days=6),
        ),
    ]

    busy = [
        {"start": pd.Timestamp("2025-11-03 08:00").tz_localize(TZ),
         "end": pd.Timestamp("2025-11-03 09:10").tz_localize(TZ)},
        {"start": pd.Timestamp("2025-11-03 10:00").tz_localize(TZ),
         "end": pd.Timestamp("2025-11-03 12:30").tz_localize(TZ)},
        {"start": pd.Timestamp("2025-11-03 13:00").tz_localize(TZ),
         "end": pd.Timestamp("2025-11-03 18:00").tz_localize(TZ)},
    ]

    results = suggest_for_calendar(
        window_start=now,
        window_end=pd.Timestamp("2025-11-03 21:00").tz_localize(TZ),
        busy_periods=busy,
        activities=activities,
        prefs=prefs,
        now=now,
        config=config,
    )

    for slot, suggestions in results:
        print(f"=== {slot.start:%H:%M}-{slot.end:%H:%M} ({slot.duration} min) ===")
        print(suggestions_frame(suggestions)[["title", "duration", "score", "reason"]])

    # Guitar doesn't fit the 30 min lunch gap; try shrinking it
    for minutes in (30, 3):
        try:
            result = adapt_activity(activities[-1], minutes, config=config)
            print(result.message)
        except AdaptationInfeasibleError as e:
            print(f"Cannot adapt: {e}")

    # Plot scores for the longest slot
    slot, suggestions = max(results, key=lambda r: r[0].duration)
    df = suggestions_frame(suggestions)
    plt.figure(figsize=(8, 3))
    plt.barh(df["title"], df["score"])
    plt.gca().invert_yaxis()
    plt.title(f"Suggestion scores, {slot.start:%H:%M} ({slot.duration} min)")
    plt.xlabel("Score")
    plt.tight_layout()
    plt.show()


if __name__ == "__main__":
    main()
