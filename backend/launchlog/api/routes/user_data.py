"""
Aggregate routes: sessions, board, jobs, dashboard, reset.

Writes answer {"success": true} or {"success": true, "fallback": true} when
the in-memory mirror had to serve them. Storage errors are never returned.
"""

import logging
from fastapi import APIRouter, Depends
from pydantic import Field
from launchlog.api.dependencies import get_current_identity, get_owner_id, get_store
from launchlog.services.dashboard_service import compute_insights
from launchlog.storage.resilient_store import ResilientStore
from launchlog.types import CamelModel, DashboardData, Identity, Job, TaskBoard, TimerSession

logger = logging.getLogger(__name__)

router = APIRouter(tags=["user-data"])


class TimerSessionBody(CamelModel):
    session: TimerSession


class TasksBody(CamelModel):
    tasks: TaskBoard


class JobBody(CamelModel):
    job: Job


class JobUpdateBody(CamelModel):
    updated_job: Job = Field(alias="updatedJob")


class DashboardBody(CamelModel):
    dashboard_data: DashboardData = Field(alias="dashboardData")


@router.get("/user-data")
def get_user_data(
    identity: Identity = Depends(get_current_identity),
    store: ResilientStore = Depends(get_store),
):
    """Everything stored for the caller, or an empty default"""
    return store.get_aggregate(identity.user_id).value.to_json()


@router.post("/timer-sessions")
def save_timer_session(
    body: TimerSessionBody,
    owner_id: str = Depends(get_owner_id),
    store: ResilientStore = Depends(get_store),
):
    return store.append_timer_session(owner_id, body.session).envelope()


@router.put("/tasks")
def update_tasks(
    body: TasksBody,
    owner_id: str = Depends(get_owner_id),
    store: ResilientStore = Depends(get_store),
):
    return store.replace_tasks(owner_id, body.tasks).envelope()


@router.post("/jobs")
def save_job(
    body: JobBody,
    owner_id: str = Depends(get_owner_id),
    store: ResilientStore = Depends(get_store),
):
    return store.append_job(owner_id, body.job).envelope()


@router.put("/jobs/{job_id}")
def update_job(
    job_id: str,
    body: JobUpdateBody,
    owner_id: str = Depends(get_owner_id),
    store: ResilientStore = Depends(get_store),
):
    """Replace a job by id. Unknown ids change nothing and still succeed."""
    result = store.replace_job(owner_id, job_id, body.updated_job)
    if not result.value:
        logger.info(f"update_job: no job {job_id} for owner {owner_id}")
    return result.envelope()


@router.delete("/jobs/{job_id}")
def delete_job(
    job_id: str,
    owner_id: str = Depends(get_owner_id),
    store: ResilientStore = Depends(get_store),
):
    """Remove a job by id. Unknown ids change nothing and still succeed."""
    result = store.remove_job(owner_id, job_id)
    if not result.value:
        logger.info(f"delete_job: no job {job_id} for owner {owner_id}")
    return result.envelope()


@router.put("/dashboard")
def update_dashboard(
    body: DashboardBody,
    owner_id: str = Depends(get_owner_id),
    store: ResilientStore = Depends(get_store),
):
    # Stored as sent - the client computes the summary
    return store.replace_dashboard(owner_id, body.dashboard_data).envelope()


@router.get("/insights")
def get_insights(
    owner_id: str = Depends(get_owner_id),
    store: ResilientStore = Depends(get_store),
):
    aggregate = store.get_aggregate(owner_id).value
    return compute_insights(aggregate.timer_sessions, aggregate.jobs)


@router.delete("/reset")
def reset_all_data(
    owner_id: str = Depends(get_owner_id),
    store: ResilientStore = Depends(get_store),
):
    """Drop the owner's aggregate everywhere. Safe to repeat."""
    return store.reset(owner_id).envelope()
