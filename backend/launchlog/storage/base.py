from abc import ABC, abstractmethod
from typing import List, Optional

from launchlog.types import (
    DashboardData,
    Job,
    TaskBoard,
    TimerSession,
    UserAccount,
    UserDataAggregate,
    UserRole,
)


def default_aggregate(user_id: str) -> UserDataAggregate:
    """Empty lists and a zeroed dashboard - what a brand new owner sees"""
    return UserDataAggregate(user_id=user_id)


class UserDataStore(ABC):
    """
    Persistence contract shared by the durable store and the in-memory mirror.

    Aggregate writes are upserts: the first write for an owner creates the
    aggregate. replace_job and remove_job never create one - on an unknown
    owner or job id they change nothing and return False.
    """

    # -- Aggregates ---------------------------------------------------------

    @abstractmethod
    def get_aggregate(self, user_id: str) -> UserDataAggregate:
        """Stored aggregate, or an unsaved default when none exists"""

    @abstractmethod
    def append_timer_session(self, user_id: str, session: TimerSession) -> None:
        pass

    @abstractmethod
    def replace_tasks(self, user_id: str, tasks: TaskBoard) -> None:
        pass

    @abstractmethod
    def append_job(self, user_id: str, job: Job) -> None:
        pass

    @abstractmethod
    def replace_job(self, user_id: str, job_id: str, job: Job) -> bool:
        pass

    @abstractmethod
    def remove_job(self, user_id: str, job_id: str) -> bool:
        pass

    @abstractmethod
    def replace_dashboard(self, user_id: str, dashboard: DashboardData) -> None:
        pass

    @abstractmethod
    def delete_aggregate(self, user_id: str) -> bool:
        pass

    @abstractmethod
    def list_aggregates(self) -> List[UserDataAggregate]:
        pass

    # -- Accounts -----------------------------------------------------------

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[UserAccount]:
        pass

    @abstractmethod
    def get_user_by_id(self, user_id: str) -> Optional[UserAccount]:
        pass

    @abstractmethod
    def create_user(self, email: str, hashed_password: str, name: str, role: UserRole = UserRole.USER) -> UserAccount:
        """Insert an account; raises DuplicateUserError if the email is taken"""

    @abstractmethod
    def list_users(self) -> List[UserAccount]:
        pass

    @abstractmethod
    def delete_user(self, user_id: str) -> bool:
        pass
