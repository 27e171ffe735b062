"""Shared values and builders for FocusNotes tests."""
from __future__ import annotations

from datetime import datetime, timedelta

from homeassistant.util import dt as dt_util

from custom_components.focusnotes.badges import seed_badges
from custom_components.focusnotes.models import Stats, Task

# Wednesday 12 March 2025, 10:00 in the (UTC) default test time zone
NOW = datetime(2025, 3, 12, 10, 0, tzinfo=dt_util.UTC)
TODAY = NOW.date()
YESTERDAY = TODAY - timedelta(days=1)


def fresh_stats(**kwargs) -> Stats:
    """Stats with a seeded badge list and today's boundary already processed."""
    defaults = {
        "badges": seed_badges(),
        "last_end_day": NOW.replace(hour=0, minute=0, second=5).isoformat(),
        "last_closed_date": YESTERDAY.isoformat(),
    }
    defaults.update(kwargs)
    return Stats(**defaults)


def make_task(task_id: str = "task1", **kwargs) -> Task:
    kwargs.setdefault("title", f"Task {task_id}")
    kwargs.setdefault("date", TODAY.isoformat())
    return Task(id=task_id, **kwargs)
