import streamlit as st
import pandas as pd
import plotly.express as px
from datetime import datetime

from streamlit_calendar import calendar

from adaptive_scheduler.config import configure_logging, load_config
from adaptive_scheduler.engine import adapt_activity, suggest_for_calendar, suggest_for_duration
from adaptive_scheduler.errors import AdaptationInfeasibleError, EngineError
from adaptive_scheduler.models import (
    Activity, ActivityType, MAX_ACTIVITY_DURATION, MIN_ACTIVITY_DURATION, Priority, UserPrefs,
)
from adaptive_scheduler.ranker import suggestions_frame
from adaptive_scheduler.time_of_day import TimeOfDay

from prometheus_client import start_http_server, Summary, Counter


# ✅ Create metrics only once
if "RANK_TIME" not in st.session_state:
    st.session_state.RANK_TIME = Summary(
        "suggestion_ranking_seconds",
        "Time spent detecting free time and ranking activities",
    )
RANK_TIME = st.session_state.RANK_TIME

if "ADAPT_COUNTER" not in st.session_state:
    st.session_state.ADAPT_COUNTER = Counter(
        "activity_adaptations_total",
        "Adaptation requests by outcome",
        ["outcome"],  # adapted / fits / infeasible
    )
ADAPT_COUNTER = st.session_state.ADAPT_COUNTER


# ✅ Start metrics server and logging only once
if "metrics_started" not in st.session_state:
    config = load_config()
    configure_logging(config.log_level)
    start_http_server(8000)
    st.session_state.config = config
    st.session_state.metrics_started = True
CONFIG = st.session_state.config


def datetime_input(label: str, key: str):
    """
    Replacement for st.datetime_input using date_input + time_input.
    Returns a naive datetime (no timezone).
    """
    col_date, col_time = st.columns(2)
    with col_date:
        d = st.date_input(label + " date", key=key + "_date")
    with col_time:
        t = st.time_input(label + " time", key=key + "_time")
    return datetime.combine(d, t)

# Session State Setup
if "busy_events" not in st.session_state:
    st.session_state.busy_events = []   # list of {"label", "start", "end"}

if "activities" not in st.session_state:
    st.session_state.activities = []    # list[Activity]

if "prefs" not in st.session_state:
    st.session_state.prefs = UserPrefs()

if "day" not in st.session_state:
    st.session_state.day = pd.Timestamp.now(tz=st.session_state.prefs.tz).normalize()

if "results" not in st.session_state:
    st.session_state.results = []       # list of (FreeTimeInterval, list[Suggestion])


# Sidebar: Inputs
st.sidebar.title("Free Time Activity Planner")

st.sidebar.subheader("Day")
day_date = st.sidebar.date_input("Plan for", value=st.session_state.day.date())
st.session_state.day = pd.Timestamp(
    datetime.combine(day_date, datetime.min.time())
).tz_localize(st.session_state.prefs.tz)

# Preferences
st.sidebar.subheader("Preferences")
balance = st.sidebar.checkbox("Balance activity types", value=st.session_state.prefs.balance_priorities)
day_start = st.sidebar.number_input("Day starts at", 0, 23, value=7)
day_end = st.sidebar.number_input("Day ends at", 1, 24, value=22)
min_free = st.sidebar.number_input("Shortest free slot (minutes)", 5, 240,
                                   value=CONFIG.min_free_slot_minutes)
st.session_state.prefs.balance_priorities = balance

# Add Activity
st.sidebar.subheader("Add Activity")
with st.sidebar.form("activity_form"):
    a_title = st.text_input("Title", key="a_title")
    a_type = st.selectbox("Type", [t.value for t in ActivityType])
    a_dur = st.number_input("Duration (minutes)", min_value=MIN_ACTIVITY_DURATION,
                            max_value=MAX_ACTIVITY_DURATION, step=5,
                            value=st.session_state.prefs.default_activity_duration)
    tod_options = [t.value for t in TimeOfDay]
    a_tod = st.selectbox("Preferred time of day", tod_options,
                         index=tod_options.index(st.session_state.prefs.preferred_time_of_day.value))
    a_priority = st.selectbox("Priority", [p.value for p in Priority], index=1)
    add_activity = st.form_submit_button("Add Activity")
    if add_activity:
        try:
            st.session_state.activities.append(Activity.from_record({
                "id": f"a{len(st.session_state.activities)}",
                "title": a_title,
                "type": a_type,
                "duration": int(a_dur),
                "preferredTimeOfDay": a_tod,
                "priority": a_priority,
            }, prefs=st.session_state.prefs))
        except EngineError as e:
            st.sidebar.error(str(e))

# Add Busy Event
st.sidebar.subheader("Add Busy Event")
with st.sidebar.form("busy_form"):
    be_label = st.text_input("Label", key="be_label")
    be_start = datetime_input("Start", key="be_start")
    be_end = datetime_input("End", key="be_end")
    add_busy = st.form_submit_button("Add Busy Event")
    if add_busy:
        if be_label and be_end > be_start:
            TZ = st.session_state.prefs.tz
            st.session_state.busy_events.append({
                "label": be_label,
                "start": pd.Timestamp(be_start).tz_localize(TZ, ambiguous=True, nonexistent="shift_forward"),
                "end": pd.Timestamp(be_end).tz_localize(TZ, ambiguous=True, nonexistent="shift_forward"),
            })
        else:
            st.sidebar.error("Please enter a label and ensure end > start")


# Main: Suggestions
st.title("What should I do with my free time?")

col1, col2 = st.columns(2)
with col1:
    st.markdown("### Busy Events")
    if st.session_state.busy_events:
        st.dataframe(pd.DataFrame(st.session_state.busy_events))
    else:
        st.write("No busy events yet.")

with col2:
    st.markdown("### Activities")
    if st.session_state.activities:
        st.dataframe(pd.DataFrame([{
            "title": a.title,
            "type": a.type.value,
            "duration": a.duration,
            "time of day": a.preferred_time_of_day.value,
            "priority": a.priority.value,
        } for a in st.session_state.activities]))
    else:
        st.write("No activities yet.")


if st.button("Find free time and suggest"):
    day = st.session_state.day
    window_start = day + pd.Timedelta(hours=int(day_start))
    window_end = day + pd.Timedelta(hours=int(day_end))
    try:
        with RANK_TIME.time():
            st.session_state.results = suggest_for_calendar(
                window_start=window_start,
                window_end=window_end,
                busy_periods=st.session_state.busy_events,
                activities=st.session_state.activities,
                prefs=st.session_state.prefs,
                min_duration=int(min_free),
                config=CONFIG,
            )
    except EngineError as e:
        st.error(str(e))


# Calendar view of busy events and detected free slots
if st.session_state.results:
    st.markdown("## Day View")

    events = []
    for be in st.session_state.busy_events:
        events.append({
            "title": be["label"],
            "start": be["start"].isoformat(),
            "end": be["end"].isoformat(),
            "color": "#7f7f7f",  # grey
        })
    for i, (slot, suggestions) in enumerate(st.session_state.results):
        top = suggestions[0].activity.title if suggestions else "Free"
        events.append({
            "title": f"{top} ({slot.duration} min free)",
            "start": pd.Timestamp(slot.start).isoformat(),
            "end": pd.Timestamp(slot.end).isoformat(),
            "id": f"slot{i}",
            "color": "#2ca02c" if suggestions else "#1f77b4",
        })

    cal_options = {
        "initialView": "timeGridDay",
        "initialDate": st.session_state.day.date().isoformat(),
        "slotMinTime": "05:00:00",
        "slotMaxTime": "24:00:00",
        "allDaySlot": False,
        "nowIndicator": True,
    }
    calendar(events=events, options=cal_options, key="calendar")

    st.markdown("### Suggestions per free slot")
    sel = st.selectbox(
        "Free slot:",
        options=list(range(len(st.session_state.results))),
        format_func=lambda i: (
            f"{st.session_state.results[i][0].start:%H:%M}-"
            f"{st.session_state.results[i][0].end:%H:%M} "
            f"({st.session_state.results[i][0].duration} min)"
        ),
    )
    slot, suggestions = st.session_state.results[sel]
    df = suggestions_frame(suggestions)
    if df.empty:
        st.write("Nothing in your catalog fits this slot. Try adapting an activity below.")
    else:
        st.dataframe(df[["title", "type", "duration", "score", "reason"]])
        fig = px.bar(df, x="score", y="title", orientation="h",
                     labels={"score": "Score", "title": "Activity"})
        fig.update_yaxes(autorange="reversed")
        st.plotly_chart(fig, use_container_width=True)
else:
    st.info("Add some activities/busy events and click **Find free time and suggest**.")


# Quick suggestion without a calendar
st.markdown("---")
st.markdown("### I have some time right now")
q_col1, q_col2 = st.columns(2)
with q_col1:
    q_dur = st.number_input("Minutes available", min_value=1, max_value=600, value=30)
with q_col2:
    q_tod = st.selectbox("Time of day", ["Now"] + [t.value for t in TimeOfDay if t != TimeOfDay.ANY])
if st.button("Suggest"):
    try:
        quick = suggest_for_duration(
            int(q_dur),
            st.session_state.activities,
            st.session_state.prefs,
            time_of_day=None if q_tod == "Now" else q_tod,
            now=pd.Timestamp.now(tz=st.session_state.prefs.tz),
            config=CONFIG,
        )
        if quick:
            st.dataframe(suggestions_frame(quick)[["title", "duration", "score", "reason"]])
        else:
            st.write("No activity fits that much time.")
    except EngineError as e:
        st.error(str(e))


# Adapt an activity to a shorter slot
st.markdown("---")
st.markdown("### Short on time?")

if st.session_state.activities:
    idx = st.selectbox(
        "Activity to shrink:",
        options=list(range(len(st.session_state.activities))),
        format_func=lambda i: (
            f"{st.session_state.activities[i].title} "
            f"({st.session_state.activities[i].duration} min)"
        ),
    )
    available = st.number_input("Available minutes", min_value=1, max_value=MAX_ACTIVITY_DURATION, value=15)

    if st.button("Adapt"):
        try:
            result = adapt_activity(st.session_state.activities[idx], int(available), config=CONFIG)
        except AdaptationInfeasibleError as e:
            ADAPT_COUNTER.labels(outcome="infeasible").inc()
            st.error(f"Cannot shrink this activity: {e}")
        except EngineError as e:
            st.error(str(e))
        else:
            if result.adapted:
                ADAPT_COUNTER.labels(outcome="adapted").inc()
                st.success(result.message)
                st.json(result.activity.to_record())
            else:
                ADAPT_COUNTER.labels(outcome="fits").inc()
                st.info(result.message)
else:
    st.write("Add an activity first.")
