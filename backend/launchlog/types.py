"""
Shared data shapes for LaunchLog.

JSON on the wire uses camelCase (userId, timerSessions, dateApplied ...);
Python code uses the snake_case attribute names. Unknown extra fields sent by
the client are kept as-is so the server stores what it was given.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_json(self) -> Dict[str, Any]:
        """JSON-compatible dict with wire (camelCase) keys"""
        return self.model_dump(mode="json", by_alias=True)


def _millis_id() -> str:
    return str(int(datetime.now().timestamp() * 1000))


class TimerSession(CamelModel):
    # Clients that don't send an id get one the way the web timer makes them
    id: str = Field(default_factory=_millis_id)
    subject: str = ""
    duration: int = 0  # minutes
    date: datetime

    @classmethod
    def from_elapsed(cls, subject: str, elapsed_seconds: float, now: Optional[datetime] = None) -> Optional["TimerSession"]:
        """
        Build a session from a finished timer run.

        Runs shorter than a minute are not worth recording and return None.
        Duration is rounded to whole minutes.
        """
        if elapsed_seconds < 60:
            return None
        now = now or datetime.now().astimezone()
        return cls(
            id=str(int(now.timestamp() * 1000)),
            subject=subject,
            duration=round(elapsed_seconds / 60),
            date=now,
        )


class Task(CamelModel):
    id: str
    title: str = ""
    description: str = ""
    due_date: Optional[str] = None
    created_at: Optional[str] = None


class TaskColumn(str, Enum):
    TODO = "todo"
    DOING = "doing"
    DONE = "done"


class TaskBoard(CamelModel):
    """
    The three kanban lists. A task sits in exactly one of them.

    Accepts the web client's "inProgress"/"completed" names on input and
    always emits "doing"/"done".
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    todo: List[Task] = Field(default_factory=list)
    doing: List[Task] = Field(default_factory=list, validation_alias=AliasChoices("doing", "inProgress"))
    done: List[Task] = Field(default_factory=list, validation_alias=AliasChoices("done", "completed"))

    def column(self, column: TaskColumn) -> List[Task]:
        return getattr(self, TaskColumn(column).value)

    def find(self, task_id: str) -> Optional[TaskColumn]:
        for column in TaskColumn:
            if any(task.id == task_id for task in self.column(column)):
                return column
        return None

    def move_task(self, task_id: str, target: TaskColumn) -> "TaskBoard":
        """Return a new board with the task removed from its list and appended to target"""
        target = TaskColumn(target)
        source = self.find(task_id)
        board = self.model_copy(deep=True)
        if source is None or source == target:
            return board
        remaining = []
        moved = None
        for task in board.column(source):
            if moved is None and task.id == task_id:
                moved = task
            else:
                remaining.append(task)
        setattr(board, source.value, remaining)
        board.column(target).append(moved)
        return board

    def remove_task(self, task_id: str) -> "TaskBoard":
        board = self.model_copy(deep=True)
        for column in TaskColumn:
            setattr(board, column.value, [task for task in board.column(column) if task.id != task_id])
        return board

    def total(self) -> int:
        return len(self.todo) + len(self.doing) + len(self.done)


class JobStatus(str, Enum):
    APPLIED = "Applied"
    INTERVIEW = "Interview"
    REJECTED = "Rejected"
    PLACED = "Placed"


# Applications that are finished one way or another
CLOSED_JOB_STATUSES = frozenset({JobStatus.REJECTED, JobStatus.PLACED})


class Job(CamelModel):
    id: str
    title: str = ""
    company: str = ""
    date_applied: Optional[str] = None
    status: JobStatus = JobStatus.APPLIED
    notes: str = ""
    created_at: Optional[str] = None


class DashboardData(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    total_hours: float = 0.0
    completed_tasks: int = 0
    active_applications: int = 0
    sessions_this_week: int = 0


class UserDataAggregate(CamelModel):
    """Everything one owner has stored: sessions, board, jobs, dashboard summary"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    user_id: str
    timer_sessions: List[TimerSession] = Field(default_factory=list)
    tasks: TaskBoard = Field(default_factory=TaskBoard)
    jobs: List[Job] = Field(default_factory=list)
    dashboard_data: DashboardData = Field(default_factory=DashboardData)


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserAccount(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    id: str
    email: str
    name: str
    hashed_password: str
    role: UserRole = UserRole.USER
    created_at: Optional[datetime] = None

    def public(self) -> Dict[str, str]:
        """Fields safe to hand back to a client"""
        return {"id": self.id, "email": self.email, "name": self.name}


class Identity(BaseModel):
    """Claims carried by a verified session token"""

    user_id: str
    email: Optional[str] = None
    name: Optional[str] = None
