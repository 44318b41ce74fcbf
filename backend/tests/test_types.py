from datetime import datetime, timezone

from launchlog.types import Job, Task, TaskBoard, TaskColumn, TimerSession, UserDataAggregate


def _board():
    return TaskBoard(
        todo=[Task(id="t1", title="Read"), Task(id="t2", title="Write")],
        doing=[Task(id="t3", title="Review")],
    )


def test_move_task_removes_from_source_and_appends_to_target():
    board = _board()
    moved = board.move_task("t1", TaskColumn.DONE)

    assert [t.id for t in moved.todo] == ["t2"]
    assert [t.id for t in moved.doing] == ["t3"]
    assert [t.id for t in moved.done] == ["t1"]
    # Original board is untouched
    assert [t.id for t in board.todo] == ["t1", "t2"]


def test_move_task_to_same_column_or_unknown_id_changes_nothing():
    board = _board()
    assert board.move_task("t3", "doing") == board
    assert board.move_task("missing", TaskColumn.TODO) == board


def test_remove_task():
    board = _board().remove_task("t3")
    assert board.doing == []
    assert board.total() == 2


def test_board_accepts_web_client_names_and_emits_canonical_ones():
    board = TaskBoard.model_validate({"todo": [], "inProgress": [{"id": "a"}], "completed": [{"id": "b"}]})
    assert set(board.to_json()) == {"todo", "doing", "done"}
    assert board.find("a") == TaskColumn.DOING
    assert board.find("b") == TaskColumn.DONE


def test_wire_names_are_camel_case():
    aggregate = UserDataAggregate(user_id="u1", jobs=[Job(id="j1", date_applied="2026-10-01")])
    body = aggregate.to_json()
    assert set(body) == {"userId", "timerSessions", "tasks", "jobs", "dashboardData"}
    assert body["jobs"][0]["dateApplied"] == "2026-10-01"
    assert body["jobs"][0]["status"] == "Applied"


def test_session_from_elapsed():
    now = datetime(2026, 10, 19, 9, 0, tzinfo=timezone.utc)

    assert TimerSession.from_elapsed("Algorithms", 59, now=now) is None

    session = TimerSession.from_elapsed("Algorithms", 25 * 60 + 40, now=now)
    assert session.duration == 26
    assert session.subject == "Algorithms"
    assert session.date == now
    assert session.id == str(int(now.timestamp() * 1000))
