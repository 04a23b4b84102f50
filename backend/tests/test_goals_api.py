from __future__ import annotations

from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event, text
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from hustle.api.routes import goals as goals_routes
from hustle.db.deps import get_db
from hustle.db.models.goal import Goal
from hustle.db.models.task import Task
from hustle.main import app


@pytest.fixture()
def client():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragma(dbapi_connection, connection_record):  # pragma: no cover - sqlite setup
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    Goal.__table__.create(bind=engine)
    Task.__table__.create(bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client, TestingSessionLocal
    app.dependency_overrides.clear()


def _create_goal(test_client: TestClient, user_id: str, **overrides) -> dict:
    payload = {
        "user_id": user_id,
        "title": "  Build a personal website  ",
        "start_date": "2099-01-01",
        "deadline": "2099-01-08",
        "priority": "high",
    }
    payload.update(overrides)
    response = test_client.post("/goals", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def test_create_goal_persists_row(client):
    test_client, session_factory = client
    user_id = str(uuid4())

    data = _create_goal(test_client, user_id)

    assert data["title"] == "Build a personal website"
    assert data["user_id"] == user_id
    assert data["request_id"]
    with session_factory() as db:
        goal = db.get(Goal, data["id"])
        assert goal is not None
        assert goal.deadline.isoformat() == "2099-01-08"


def test_create_goal_rejects_short_title(client):
    test_client, _ = client

    response = test_client.post("/goals", json={"user_id": "u", "title": " a ", "deadline": "2099-01-08"})

    assert response.status_code == 422


def test_seed_plan_inserts_today_and_streak_tasks(client):
    test_client, session_factory = client
    user_id = str(uuid4())
    goal = _create_goal(test_client, user_id)

    response = test_client.post(f"/goals/{goal['id']}/plan", json={"user_id": user_id})

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["blueprint"] == "coding"
    assert data["inserted_streak"] == 16
    assert data["inserted_today"] == 3
    assert data["streak_chunks"] == 1
    with session_factory() as db:
        tasks = db.query(Task).filter(Task.goal_id == goal["id"]).all()
        assert len(tasks) == 19
        assert all(task.user_id == user_id for task in tasks)
        assert {task.priority for task in tasks} == {"high"}
        stored = db.get(Goal, goal["id"])
        assert stored.metadata_json["plan_v1"]["status"] == "seeded"
        assert stored.metadata_json["plan_v1"]["inserted_streak"] == 16


def test_seed_plan_with_client_planner(client):
    test_client, session_factory = client
    user_id = str(uuid4())
    goal = _create_goal(test_client, user_id, title="Run a marathon")

    response = test_client.post(f"/goals/{goal['id']}/plan", json={"user_id": user_id, "planner": "client"})

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["blueprint"] == "client"
    # Fitness habits: two per day for eight days.
    assert data["inserted_streak"] == 16
    with session_factory() as db:
        assert db.query(Task).filter(Task.source == "client_planner_v1").count() == (
            data["inserted_streak"] + data["inserted_today"]
        )


def test_seed_plan_unknown_goal_returns_404(client):
    test_client, _ = client

    response = test_client.post("/goals/missing/plan", json={"user_id": "someone"})

    assert response.status_code == 404


def test_seed_plan_for_other_user_returns_403(client):
    test_client, session_factory = client
    goal = _create_goal(test_client, str(uuid4()))

    response = test_client.post(f"/goals/{goal['id']}/plan", json={"user_id": "intruder"})

    assert response.status_code == 403
    with session_factory() as db:
        assert db.query(Task).count() == 0


def test_plan_preview_does_not_write(client):
    test_client, session_factory = client

    response = test_client.post(
        "/goals/plan/preview",
        json={"title": "Learn Spanish for my business", "start_date": "2099-01-01", "deadline": "2099-01-14"},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["blueprint"] == "language"
    assert data["days"] == 14
    assert len(data["streaks"]) == 3
    assert data["schedule"][0]["date"] == "2099-01-01"
    assert data["schedule"][0]["title"].startswith("Kickoff:")
    assert all(entry["date"] <= "2099-01-14" for entry in data["schedule"])
    with session_factory() as db:
        assert db.query(Task).count() == 0


def test_offline_preview_reports_clean_plan(client):
    test_client, _ = client

    response = test_client.post(
        "/goals/plan/offline-preview",
        json={"title": "Grow my business", "start_date": "2099-02-01", "deadline": "2099-02-10"},
    )

    assert response.status_code == 200, response.text
    data = response.json()
    assert data["category"] == "business"
    assert len(data["plan"]["daily_plan"]) == 10
    assert data["streak_rows"] == 10
    assert data["validation_errors"] == []
    assert data["total_xp"] > 0


def _create_table(session_factory, ddl: str) -> None:
    with session_factory() as db:
        db.execute(text(ddl))
        db.commit()


def test_seed_plan_without_date_column_marks_goal_failed(client, monkeypatch):
    test_client, session_factory = client
    _create_table(session_factory, "CREATE TABLE bare_tasks (id INTEGER PRIMARY KEY, user_id TEXT, title TEXT)")
    monkeypatch.setattr(goals_routes.settings, "tasks_table", "bare_tasks")
    user_id = str(uuid4())
    goal = _create_goal(test_client, user_id)

    response = test_client.post(f"/goals/{goal['id']}/plan", json={"user_id": user_id})

    assert response.status_code == 500
    assert response.json()["detail"].startswith("Task storage is not compatible")
    with session_factory() as db:
        stored = db.get(Goal, goal["id"])
        assert stored.metadata_json["plan_v1"]["status"] == "failed"
        count = db.execute(text("SELECT count(*) FROM bare_tasks")).scalar()
        assert count == 0


def test_seed_plan_reports_partial_insert(client, monkeypatch):
    test_client, session_factory = client
    # Streak rows (is_streak = 1) violate the check; today rows go through.
    _create_table(
        session_factory,
        "CREATE TABLE strict_tasks (id INTEGER PRIMARY KEY, user_id TEXT, goal_id TEXT, title TEXT, "
        "description TEXT, xp_value INTEGER, due_date TEXT, is_streak BOOLEAN CHECK (is_streak = 0))",
    )
    monkeypatch.setattr(goals_routes.settings, "tasks_table", "strict_tasks")
    user_id = str(uuid4())
    goal = _create_goal(test_client, user_id)

    response = test_client.post(f"/goals/{goal['id']}/plan", json={"user_id": user_id})

    assert response.status_code == 500
    assert response.json()["detail"] == {
        "message": "Failed to seed plan tasks",
        "stage": "streak",
        "chunks_committed": 0,
        "rows_committed": 0,
    }
    assert "INSERT" not in response.text
    with session_factory() as db:
        stored = db.get(Goal, goal["id"])
        assert stored is not None
        plan_status = stored.metadata_json["plan_v1"]
        assert plan_status["status"] == "partial"
        assert plan_status["stage"] == "streak"
        assert "INSERT" not in plan_status["error"]
        assert user_id not in plan_status["error"]
        today_count = db.execute(text("SELECT count(*) FROM strict_tasks")).scalar()
        assert today_count == 3
