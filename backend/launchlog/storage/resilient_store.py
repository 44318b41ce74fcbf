"""
Resilient store - one place where durable failures turn into fallback writes.

Every operation first goes to the durable store (when one connected at
startup). If it raises BackendUnavailableError, the same call is replayed on
the in-memory mirror and the result is flagged as a fallback. Callers only
ever see the flag; they never see the storage error.

The connected flag is decided once at startup and never flipped here: a
durable failure mid-run is absorbed per call, and recovery is only noticed
on the next process start.
"""

import logging
from dataclasses import dataclass
from typing import Any, Generic, List, Optional, TypeVar

from launchlog.core.errors import BackendUnavailableError
from launchlog.storage.base import UserDataStore
from launchlog.storage.memory_store import MemoryUserDataStore
from launchlog.types import (
    DashboardData,
    Job,
    TaskBoard,
    TimerSession,
    UserAccount,
    UserDataAggregate,
    UserRole,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class StoreResult(Generic[T]):
    value: T
    fallback: bool = False

    def envelope(self) -> dict:
        """Response body for a write: {"success": true} plus "fallback" when degraded"""
        body = {"success": True}
        if self.fallback:
            body["fallback"] = True
        return body


class ResilientStore:
    def __init__(self, durable: Optional[UserDataStore] = None, mirror: Optional[MemoryUserDataStore] = None):
        self.durable = durable
        self.mirror = mirror or MemoryUserDataStore()

    @property
    def connected(self) -> bool:
        return self.durable is not None

    @property
    def mode(self) -> str:
        return "durable" if self.connected else "fallback"

    def _call(self, operation: str, *args: Any) -> StoreResult:
        if self.durable is not None:
            try:
                return StoreResult(getattr(self.durable, operation)(*args))
            except BackendUnavailableError as e:
                logger.warning(f"{operation} failed on durable store ({e.message}); using in-memory fallback")
        return StoreResult(getattr(self.mirror, operation)(*args), fallback=True)

    # -- Aggregates ---------------------------------------------------------

    def get_aggregate(self, user_id: str) -> StoreResult[UserDataAggregate]:
        return self._call("get_aggregate", user_id)

    def append_timer_session(self, user_id: str, session: TimerSession) -> StoreResult[None]:
        return self._call("append_timer_session", user_id, session)

    def replace_tasks(self, user_id: str, tasks: TaskBoard) -> StoreResult[None]:
        return self._call("replace_tasks", user_id, tasks)

    def append_job(self, user_id: str, job: Job) -> StoreResult[None]:
        return self._call("append_job", user_id, job)

    def replace_job(self, user_id: str, job_id: str, job: Job) -> StoreResult[bool]:
        return self._call("replace_job", user_id, job_id, job)

    def remove_job(self, user_id: str, job_id: str) -> StoreResult[bool]:
        return self._call("remove_job", user_id, job_id)

    def replace_dashboard(self, user_id: str, dashboard: DashboardData) -> StoreResult[None]:
        return self._call("replace_dashboard", user_id, dashboard)

    def list_aggregates(self) -> StoreResult[List[UserDataAggregate]]:
        return self._call("list_aggregates")

    def reset(self, user_id: str) -> StoreResult[bool]:
        """Drop the owner's aggregate from the mirror and, when connected, the durable store"""
        mirrored = self.mirror.delete_aggregate(user_id)
        if self.durable is None:
            return StoreResult(mirrored, fallback=True)
        try:
            return StoreResult(self.durable.delete_aggregate(user_id) or mirrored)
        except BackendUnavailableError as e:
            logger.warning(f"reset failed on durable store ({e.message}); only the in-memory copy was cleared")
            return StoreResult(mirrored, fallback=True)

    # -- Accounts -----------------------------------------------------------

    def get_user_by_email(self, email: str) -> StoreResult[Optional[UserAccount]]:
        return self._call("get_user_by_email", email)

    def get_user_by_id(self, user_id: str) -> StoreResult[Optional[UserAccount]]:
        return self._call("get_user_by_id", user_id)

    def create_user(self, email: str, hashed_password: str, name: str, role: UserRole = UserRole.USER) -> StoreResult[UserAccount]:
        return self._call("create_user", email, hashed_password, name, role)

    def list_users(self) -> StoreResult[List[UserAccount]]:
        return self._call("list_users")

    def delete_user(self, user_id: str) -> StoreResult[bool]:
        return self._call("delete_user", user_id)
