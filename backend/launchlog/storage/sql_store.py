import logging
import uuid
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from launchlog.core.errors import BackendUnavailableError, DuplicateUserError
from launchlog.models.user import User
from launchlog.models.user_data import UserData
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

logger = logging.getLogger(__name__)


class SqlUserDataStore(UserDataStore):
    """Durable store on SQLAlchemy.

    One session per operation. Any SQLAlchemyError is re-raised as
    BackendUnavailableError so the resilient store can fall back; the only
    exception is a unique-email violation, which is a DuplicateUserError.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        db = self.session_factory()
        try:
            yield db
            db.commit()
        except SQLAlchemyError as e:
            # Rollback prevents partial state if the transaction was partially applied
            db.rollback()
            raise BackendUnavailableError(f"Database error: {e.__class__.__name__}") from e
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _to_aggregate(row: UserData) -> UserDataAggregate:
        return UserDataAggregate.model_validate({
            "userId": row.user_id,
            "timerSessions": row.timer_sessions or [],
            "tasks": row.tasks or {},
            "jobs": row.jobs or [],
            "dashboardData": row.dashboard_data or {},
        })

    @staticmethod
    def _to_account(row: User) -> UserAccount:
        return UserAccount(
            id=row.id,
            email=row.email,
            name=row.name,
            hashed_password=row.hashed_password,
            role=row.role,
            created_at=row.created_at,
        )

    @staticmethod
    def _upsert(db: Session, user_id: str) -> UserData:
        row = db.get(UserData, user_id)
        if row is None:
            empty = default_aggregate(user_id).to_json()
            row = UserData(
                user_id=user_id,
                timer_sessions=empty["timerSessions"],
                tasks=empty["tasks"],
                jobs=empty["jobs"],
                dashboard_data=empty["dashboardData"],
            )
            db.add(row)
        return row

    # JSON columns only register a change on reassignment, so every mutation
    # below builds a new list/dict instead of editing in place.

    def get_aggregate(self, user_id: str) -> UserDataAggregate:
        with self._session() as db:
            row = db.get(UserData, user_id)
            if row is None:
                return default_aggregate(user_id)
            return self._to_aggregate(row)

    def append_timer_session(self, user_id: str, session: TimerSession) -> None:
        with self._session() as db:
            row = self._upsert(db, user_id)
            row.timer_sessions = [*(row.timer_sessions or []), session.to_json()]

    def replace_tasks(self, user_id: str, tasks: TaskBoard) -> None:
        with self._session() as db:
            row = self._upsert(db, user_id)
            row.tasks = tasks.to_json()

    def append_job(self, user_id: str, job: Job) -> None:
        with self._session() as db:
            row = self._upsert(db, user_id)
            row.jobs = [*(row.jobs or []), job.to_json()]

    def replace_job(self, user_id: str, job_id: str, job: Job) -> bool:
        with self._session() as db:
            row = db.get(UserData, user_id)
            if row is None:
                return False
            jobs = list(row.jobs or [])
            for index, existing in enumerate(jobs):
                if existing.get("id") == job_id:
                    jobs[index] = job.to_json()
                    row.jobs = jobs
                    return True
            return False

    def remove_job(self, user_id: str, job_id: str) -> bool:
        with self._session() as db:
            row = db.get(UserData, user_id)
            if row is None:
                return False
            jobs = row.jobs or []
            remaining = [existing for existing in jobs if existing.get("id") != job_id]
            if len(remaining) == len(jobs):
                return False
            row.jobs = remaining
            return True

    def replace_dashboard(self, user_id: str, dashboard: DashboardData) -> None:
        with self._session() as db:
            row = self._upsert(db, user_id)
            row.dashboard_data = dashboard.to_json()

    def delete_aggregate(self, user_id: str) -> bool:
        with self._session() as db:
            row = db.get(UserData, user_id)
            if row is None:
                return False
            db.delete(row)
            return True

    def list_aggregates(self) -> List[UserDataAggregate]:
        with self._session() as db:
            return [self._to_aggregate(row) for row in db.query(UserData).all()]

    def get_user_by_email(self, email: str) -> Optional[UserAccount]:
        with self._session() as db:
            row = db.query(User).filter(User.email == email).first()
            return self._to_account(row) if row else None

    def get_user_by_id(self, user_id: str) -> Optional[UserAccount]:
        with self._session() as db:
            row = db.get(User, user_id)
            return self._to_account(row) if row else None

    def create_user(self, email: str, hashed_password: str, name: str, role: UserRole = UserRole.USER) -> UserAccount:
        db = self.session_factory()
        try:
            row = User(
                id=uuid.uuid4().hex,
                email=email,
                hashed_password=hashed_password,
                name=name,
                role=UserRole(role).value,
            )
            db.add(row)
            db.commit()
            # Refresh to load server-generated created_at
            db.refresh(row)
            return self._to_account(row)
        except IntegrityError:
            # Two registrations raced past the existence check; the unique index caught it
            db.rollback()
            raise DuplicateUserError()
        except SQLAlchemyError as e:
            db.rollback()
            raise BackendUnavailableError(f"Database error: {e.__class__.__name__}") from e
        finally:
            db.close()

    def list_users(self) -> List[UserAccount]:
        with self._session() as db:
            rows = db.query(User).order_by(User.created_at.desc()).all()
            return [self._to_account(row) for row in rows]

    def delete_user(self, user_id: str) -> bool:
        with self._session() as db:
            row = db.get(User, user_id)
            if row is None:
                return False
            db.delete(row)
            return True
