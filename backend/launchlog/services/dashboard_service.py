"""
Numbers derived from an owner's sessions, board and jobs.

compute_dashboard is what the client sends to PUT /api/dashboard; the server
stores it verbatim and never recomputes it. compute_insights backs the focus
overview (subject split, days focused, activity heatmap).
"""

from collections import OrderedDict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from launchlog.types import (
    CLOSED_JOB_STATUSES,
    DashboardData,
    Job,
    JobStatus,
    TaskBoard,
    TimerSession,
)

HEATMAP_DAYS = 28


def _aware(value: datetime) -> datetime:
    # Sessions without an offset are taken as UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _now(now: Optional[datetime]) -> datetime:
    return _aware(now) if now else datetime.now(timezone.utc)


def count_active_applications(jobs: Iterable[Job]) -> int:
    """Jobs still in play - everything except Rejected and Placed"""
    return sum(1 for job in jobs if job.status not in CLOSED_JOB_STATUSES)


def compute_dashboard(
    sessions: List[TimerSession],
    tasks: TaskBoard,
    jobs: List[Job],
    now: Optional[datetime] = None,
) -> DashboardData:
    week_ago = _now(now) - timedelta(days=7)
    return DashboardData(
        total_hours=sum(session.duration or 0 for session in sessions) / 60,
        completed_tasks=len(tasks.done),
        active_applications=count_active_applications(jobs),
        sessions_this_week=sum(1 for session in sessions if _aware(session.date) >= week_ago),
    )


def heatmap_level(minutes: int) -> int:
    if minutes <= 0:
        return 0
    if minutes < 30:
        return 1
    if minutes < 60:
        return 2
    if minutes < 120:
        return 3
    return 4


def compute_insights(
    sessions: List[TimerSession],
    jobs: List[Job],
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    today = _now(now).astimezone(timezone.utc).date()

    minutes_by_day: Dict[str, int] = {}
    minutes_by_subject: Dict[str, int] = {}
    for session in sessions:
        # Bucketed by UTC day, matching the ISO dates the web client shows
        day = _aware(session.date).astimezone(timezone.utc).date().isoformat()
        minutes_by_day[day] = minutes_by_day.get(day, 0) + (session.duration or 0)
        if session.subject and session.duration:
            minutes_by_subject[session.subject] = minutes_by_subject.get(session.subject, 0) + session.duration

    heatmap = OrderedDict()
    for offset in range(HEATMAP_DAYS - 1, -1, -1):
        day = (today - timedelta(days=offset)).isoformat()
        minutes = minutes_by_day.get(day, 0)
        heatmap[day] = {"minutes": minutes, "level": heatmap_level(minutes)}

    total_minutes = sum(session.duration or 0 for session in sessions)
    return {
        "totalHours": total_minutes // 60,
        "daysFocused": len(minutes_by_day),
        "applications": len(jobs),
        "interviews": sum(1 for job in jobs if job.status == JobStatus.INTERVIEW),
        "hoursBySubject": {subject: round(minutes / 60, 1) for subject, minutes in minutes_by_subject.items()},
        "activity": [{"date": day, **cell} for day, cell in heatmap.items()],
    }
