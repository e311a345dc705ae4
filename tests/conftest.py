"""Pytest config so that 'adaptive_scheduler' imports from the repo root without installing."""
import os
import sys

import pandas as pd
import pytest

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from adaptive_scheduler.models import Activity  # noqa: E402


@pytest.fixture
def now():
    # a Monday, 09:30 local
    return pd.Timestamp("2025-11-03 09:30").tz_localize("America/New_York")


@pytest.fixture
def make_activity():
    counter = {"n": 0}

    def _make(**kw):
        counter["n"] += 1
        defaults = dict(
            id=f"act{counter['n']}",
            title=f"Activity {counter['n']}",
            type="Other",
            duration=30,
            preferred_time_of_day="Evening",
            priority="Low",
        )
        defaults.update(kw)
        return Activity(**defaults)

    return _make
