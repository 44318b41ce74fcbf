import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from launchlog.core.errors import DuplicateUserError
from launchlog.storage.base import UserDataStore, default_aggregate
from launchlog.types import (
    DashboardData,
    Job,
    TaskBoard,
    TimerSession,
    UserAccount,
    UserDataAggregate,
    UserRole,
)


class MemoryUserDataStore(UserDataStore):
    """Process-local mirror of the durable store.

    Used when the database is down or not configured. Nothing is evicted and
    nothing survives a restart. Reads hand out deep copies so callers can't
    mutate the mirror behind its back.
    """

    def __init__(self) -> None:
        self._aggregates: Dict[str, UserDataAggregate] = {}
        self._users: Dict[str, UserAccount] = {}

    def _materialize(self, user_id: str) -> UserDataAggregate:
        if user_id not in self._aggregates:
            self._aggregates[user_id] = default_aggregate(user_id)
        return self._aggregates[user_id]

    def get_aggregate(self, user_id: str) -> UserDataAggregate:
        aggregate = self._aggregates.get(user_id)
        if aggregate is None:
            return default_aggregate(user_id)
        return aggregate.model_copy(deep=True)

    def append_timer_session(self, user_id: str, session: TimerSession) -> None:
        self._materialize(user_id).timer_sessions.append(session.model_copy(deep=True))

    def replace_tasks(self, user_id: str, tasks: TaskBoard) -> None:
        self._materialize(user_id).tasks = tasks.model_copy(deep=True)

    def append_job(self, user_id: str, job: Job) -> None:
        self._materialize(user_id).jobs.append(job.model_copy(deep=True))

    def replace_job(self, user_id: str, job_id: str, job: Job) -> bool:
        aggregate = self._aggregates.get(user_id)
        if aggregate is None:
            return False
        for index, existing in enumerate(aggregate.jobs):
            if existing.id == job_id:
                aggregate.jobs[index] = job.model_copy(deep=True)
                return True
        return False

    def remove_job(self, user_id: str, job_id: str) -> bool:
        aggregate = self._aggregates.get(user_id)
        if aggregate is None:
            return False
        remaining = [job for job in aggregate.jobs if job.id != job_id]
        removed = len(remaining) != len(aggregate.jobs)
        aggregate.jobs = remaining
        return removed

    def replace_dashboard(self, user_id: str, dashboard: DashboardData) -> None:
        self._materialize(user_id).dashboard_data = dashboard.model_copy(deep=True)

    def delete_aggregate(self, user_id: str) -> bool:
        return self._aggregates.pop(user_id, None) is not None

    def list_aggregates(self) -> List[UserDataAggregate]:
        return [aggregate.model_copy(deep=True) for aggregate in self._aggregates.values()]

    def get_user_by_email(self, email: str) -> Optional[UserAccount]:
        for user in self._users.values():
            if user.email == email:
                return user.model_copy()
        return None

    def get_user_by_id(self, user_id: str) -> Optional[UserAccount]:
        user = self._users.get(user_id)
        return user.model_copy() if user else None

    def create_user(self, email: str, hashed_password: str, name: str, role: UserRole = UserRole.USER) -> UserAccount:
        if self.get_user_by_email(email) is not None:
            raise DuplicateUserError()
        user = UserAccount(
            id=uuid.uuid4().hex,
            email=email,
            name=name,
            hashed_password=hashed_password,
            role=role,
            created_at=datetime.now(timezone.utc),
        )
        self._users[user.id] = user
        return user.model_copy()

    def list_users(self) -> List[UserAccount]:
        return sorted(
            (user.model_copy() for user in self._users.values()),
            key=lambda user: user.created_at,
            reverse=True,
        )

    def delete_user(self, user_id: str) -> bool:
        return self._users.pop(user_id, None) is not None
