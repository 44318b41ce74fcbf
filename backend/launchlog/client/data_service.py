"""
Client-side data access: the one object views read from and write through.

The API is the source of truth. Each mutation is applied to local state right
away, the dashboard summary is recomputed, a snapshot is written to local
storage, and the mutation is queued in a persisted outbox. flush() replays
the outbox in order:

- success: the entry is removed;
- unreachable server, 5xx, or 401/403: replay stops and the rest is kept;
- any other 4xx: the server will never accept it, so it is dropped.

load() flushes first. With an empty outbox the server copy wins; with
entries still pending (or the server down) the local snapshot is kept, since
it already contains the unsent changes.
"""

import logging
import uuid
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from launchlog.client.api import ApiError, ApiService
from launchlog.client.local_storage import LocalStorage
from launchlog.services.dashboard_service import compute_dashboard
from launchlog.types import Job, JobStatus, Task, TaskBoard, TaskColumn, TimerSession, UserDataAggregate

logger = logging.getLogger(__name__)

SNAPSHOT_KEY = "launchlog.snapshot"
OUTBOX_KEY = "launchlog.outbox"
LOCAL_OWNER = "local"

JOB_SORTS = ("dateDesc", "dateAsc", "company", "status")

_DISPATCH: Dict[str, Callable[[ApiService, Dict[str, Any]], Any]] = {
    "timer_session": lambda api, p: api.save_timer_session(p["session"]),
    "tasks": lambda api, p: api.update_tasks(p["tasks"]),
    "job": lambda api, p: api.save_job(p["job"]),
    "job_update": lambda api, p: api.update_job(p["jobId"], p["updatedJob"]),
    "job_delete": lambda api, p: api.delete_job(p["jobId"]),
    "dashboard": lambda api, p: api.update_dashboard(p["dashboardData"]),
    "reset": lambda api, p: api.reset_all_data(),
}


class DataService:
    def __init__(
        self,
        api: ApiService,
        storage: LocalStorage,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.api = api
        self.storage = storage
        self.clock = clock or (lambda: datetime.now().astimezone())
        self.error: Optional[str] = None
        self._data = self._read_snapshot()

    # -- State --------------------------------------------------------------

    @property
    def data(self) -> UserDataAggregate:
        return self._data.model_copy(deep=True)

    @property
    def pending(self) -> List[Dict[str, Any]]:
        return self.storage.get_json(OUTBOX_KEY, [])

    def _read_snapshot(self) -> UserDataAggregate:
        raw = self.storage.get_json(SNAPSHOT_KEY)
        if not raw:
            return UserDataAggregate(user_id=LOCAL_OWNER)
        try:
            return UserDataAggregate.model_validate(raw)
        except ValueError as e:
            logger.warning(f"Failed to load local snapshot: {e}")
            return UserDataAggregate(user_id=LOCAL_OWNER)

    def _with_dashboard(self, data: UserDataAggregate) -> UserDataAggregate:
        data.dashboard_data = compute_dashboard(data.timer_sessions, data.tasks, data.jobs, now=self.clock())
        return data

    def _commit(self, data: UserDataAggregate) -> None:
        self._data = data
        self.storage.set_json(SNAPSHOT_KEY, data.to_json())

    # -- Outbox -------------------------------------------------------------

    def _enqueue(self, op: str, payload: Dict[str, Any]) -> None:
        outbox = self.pending
        outbox.append({"op": op, "payload": payload})
        # Only the newest summary matters, and it already covers every earlier change
        outbox = [entry for entry in outbox if entry["op"] != "dashboard"]
        outbox.append({"op": "dashboard", "payload": {"dashboardData": self._data.dashboard_data.to_json()}})
        self.storage.set_json(OUTBOX_KEY, outbox)

    def flush(self) -> bool:
        """Replay queued mutations in order. True when nothing is left pending."""
        outbox = self.pending
        while outbox:
            entry = outbox[0]
            try:
                _DISPATCH[entry["op"]](self.api, entry["payload"])
            except ApiError as e:
                if not e.is_permanent:
                    self.error = f"Offline - {len(outbox)} change(s) waiting to sync"
                    self.storage.set_json(OUTBOX_KEY, outbox)
                    return False
                logger.warning(f"Server rejected queued {entry['op']}: {e.message}; dropping it")
                self.error = f"A change was rejected by the server: {e.message}"
            outbox.pop(0)
            self.storage.set_json(OUTBOX_KEY, outbox)
        return True

    def _mutate(self, data: UserDataAggregate, op: str, payload: Dict[str, Any]) -> bool:
        self._commit(self._with_dashboard(data))
        self._enqueue(op, payload)
        return self.flush()

    # -- Loading ------------------------------------------------------------

    def load(self) -> UserDataAggregate:
        synced = self.flush()
        if synced:
            try:
                remote = UserDataAggregate.model_validate(self.api.get_user_data())
            except ApiError as e:
                logger.error(f"Failed to load user data: {e.message}")
                self.error = "Failed to load user data"
            else:
                self.error = None
                self._commit(remote)
                return self.data

        # Server unreachable or behind us: rebuild from the local snapshot
        self._commit(self._with_dashboard(self._read_snapshot()))
        return self.data

    # -- Mutations ----------------------------------------------------------

    def save_timer_session(self, session: TimerSession) -> bool:
        data = self.data
        data.timer_sessions.append(session)
        return self._mutate(data, "timer_session", {"session": session.to_json()})

    def update_tasks(self, tasks: TaskBoard) -> bool:
        data = self.data
        data.tasks = tasks.model_copy(deep=True)
        return self._mutate(data, "tasks", {"tasks": tasks.to_json()})

    def add_task(self, title: str, description: str = "", due_date: str = "") -> Task:
        now = self.clock()
        task = Task(
            id=uuid.uuid4().hex,
            title=title,
            description=description,
            due_date=due_date,
            created_at=now.isoformat(),
        )
        board = self._data.tasks.model_copy(deep=True)
        board.todo.append(task)
        self.update_tasks(board)
        return task

    def move_task(self, task_id: str, target: TaskColumn) -> bool:
        return self.update_tasks(self._data.tasks.move_task(task_id, target))

    def delete_task(self, task_id: str) -> bool:
        return self.update_tasks(self._data.tasks.remove_task(task_id))

    def save_job(self, job: Job) -> bool:
        data = self.data
        data.jobs.append(job)
        return self._mutate(data, "job", {"job": job.to_json()})

    def update_job(self, job_id: str, updated_job: Job) -> bool:
        data = self.data
        data.jobs = [updated_job if job.id == job_id else job for job in data.jobs]
        return self._mutate(data, "job_update", {"jobId": job_id, "updatedJob": updated_job.to_json()})

    def delete_job(self, job_id: str) -> bool:
        data = self.data
        data.jobs = [job for job in data.jobs if job.id != job_id]
        return self._mutate(data, "job_delete", {"jobId": job_id})

    def reset_all_data(self) -> bool:
        """Wipe local state and queue the server reset ahead of anything done afterwards"""
        # Queued changes would resurrect data the user asked to wipe
        self.storage.remove_item(SNAPSHOT_KEY)
        self.storage.set_json(OUTBOX_KEY, [{"op": "reset", "payload": {}}])
        self._data = UserDataAggregate(user_id=self._data.user_id)
        if not self.flush():
            logger.error("Failed to reset data on the server; will retry on next sync")
            return False
        self.error = None
        return True

    # -- Views --------------------------------------------------------------

    def list_jobs(self, status: str = "All", sort_by: str = "dateDesc") -> List[Job]:
        """Jobs filtered by status ("All" for every job) and sorted for display"""
        if sort_by not in JOB_SORTS:
            raise ValueError(f"Unknown sort {sort_by!r}; expected one of {JOB_SORTS}")
        jobs = self._data.jobs
        if status != "All":
            jobs = [job for job in jobs if job.status == JobStatus(status)]

        if sort_by == "company":
            key, reverse = (lambda job: job.company.lower()), False
        elif sort_by == "status":
            key, reverse = (lambda job: job.status.value), False
        else:
            key, reverse = (lambda job: job.date_applied or ""), sort_by == "dateDesc"
        return [job.model_copy(deep=True) for job in sorted(jobs, key=key, reverse=reverse)]
