from datetime import datetime, timedelta, timezone

import pytest

from launchlog.services.dashboard_service import (
    HEATMAP_DAYS,
    compute_dashboard,
    compute_insights,
    count_active_applications,
    heatmap_level,
)
from launchlog.types import Job, JobStatus, Task, TaskBoard, TimerSession

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def _session(days_ago, minutes, subject="Algorithms"):
    return TimerSession(id=f"{days_ago}-{minutes}", subject=subject, duration=minutes, date=NOW - timedelta(days=days_ago))


def test_empty_dashboard():
    dashboard = compute_dashboard([], TaskBoard(), [], now=NOW)
    assert dashboard.total_hours == 0
    assert dashboard.completed_tasks == 0
    assert dashboard.active_applications == 0
    assert dashboard.sessions_this_week == 0


def test_dashboard_summary():
    sessions = [_session(0, 45), _session(3, 45), _session(6, 30), _session(8, 60)]
    tasks = TaskBoard(todo=[Task(id="a")], done=[Task(id="b"), Task(id="c")])
    jobs = [Job(id="1"), Job(id="2", status=JobStatus.PLACED)]

    dashboard = compute_dashboard(sessions, tasks, jobs, now=NOW)

    assert dashboard.total_hours == 3
    assert dashboard.completed_tasks == 2
    assert dashboard.active_applications == 1
    # The 8-day-old session falls outside the trailing week
    assert dashboard.sessions_this_week == 3


def test_naive_session_dates_are_treated_as_utc():
    session = TimerSession(id="n", duration=10, date=datetime(2026, 10, 18, 12, 0))
    assert compute_dashboard([session], TaskBoard(), [], now=NOW).sessions_this_week == 1


@pytest.mark.parametrize(
    "statuses, expected",
    [
        ([], 0),
        (["Applied", "Interview"], 2),
        (["Rejected", "Placed"], 0),
        (["Applied", "Rejected", "Interview", "Placed", "Applied"], 3),
    ],
)
def test_active_applications_exclude_rejected_and_placed(statuses, expected):
    jobs = [Job(id=str(i), status=status) for i, status in enumerate(statuses)]
    assert count_active_applications(jobs) == expected


@pytest.mark.parametrize("minutes, level", [(0, 0), (1, 1), (29, 1), (30, 2), (59, 2), (60, 3), (119, 3), (120, 4), (600, 4)])
def test_heatmap_levels(minutes, level):
    assert heatmap_level(minutes) == level


def test_insights():
    sessions = [
        _session(0, 45),
        _session(0, 30, subject="System Design"),
        _session(2, 90),
        _session(40, 57),
        TimerSession(id="blank", subject="", duration=15, date=NOW),
    ]
    jobs = [Job(id="1", status=JobStatus.INTERVIEW), Job(id="2"), Job(id="3", status=JobStatus.INTERVIEW)]

    insights = compute_insights(sessions, jobs, now=NOW)

    assert insights["totalHours"] == 3  # 237 minutes
    assert insights["daysFocused"] == 3
    assert insights["applications"] == 3
    assert insights["interviews"] == 2
    assert insights["hoursBySubject"] == {"Algorithms": 3.2, "System Design": 0.5}

    activity = insights["activity"]
    assert len(activity) == HEATMAP_DAYS
    assert activity[-1] == {"date": "2026-10-19", "minutes": 90, "level": 3}
    assert activity[-3] == {"date": "2026-10-17", "minutes": 90, "level": 3}
    assert activity[0]["date"] == "2026-09-22"
    # Sessions older than the window don't appear
    assert sum(day["minutes"] for day in activity) == 180


def test_activity_buckets_sessions_by_utc_day():
    plus_five = timezone(timedelta(hours=5))
    # Early morning in UTC+5 is still the previous evening in UTC
    session = TimerSession(id="tz", subject="SQL", duration=40, date=datetime(2026, 10, 19, 2, 0, tzinfo=plus_five))

    insights = compute_insights([session], [], now=NOW)

    assert insights["activity"][-2] == {"date": "2026-10-18", "minutes": 40, "level": 2}
    assert insights["activity"][-1]["minutes"] == 0
    assert insights["daysFocused"] == 1
