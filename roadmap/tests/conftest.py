"""
Test configuration and fixtures for the roadmap test suite.
"""
from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker

from roadmap.app.db.database import get_db
from roadmap.app.db.models import ProjectModel
from roadmap.main import app

SCHEMA = [
    """
    CREATE TABLE changelog_projects (
        id INTEGER PRIMARY KEY,
        name VARCHAR(255) NOT NULL,
        status VARCHAR(50) DEFAULT 'In Development',
        start_date DATE,
        end_date DATE,
        date_label VARCHAR(50) DEFAULT 'Target Launch',
        start_milestone VARCHAR(50) DEFAULT 'Requested',
        end_milestone VARCHAR(50) DEFAULT 'Live'
    )
    """,
    """
    CREATE TABLE project_task_groups (
        id INTEGER PRIMARY KEY,
        project_id INTEGER REFERENCES changelog_projects(id) ON DELETE CASCADE,
        name VARCHAR(255) NOT NULL,
        milestone VARCHAR(50) NOT NULL,
        sort_order INTEGER DEFAULT 0,
        start_date DATE,
        end_date DATE,
        estimated_hours NUMERIC(6,1)
    )
    """,
    """
    CREATE TABLE project_tasks (
        id INTEGER PRIMARY KEY,
        task_group_id INTEGER REFERENCES project_task_groups(id) ON DELETE CASCADE,
        name VARCHAR(255) NOT NULL,
        done BOOLEAN DEFAULT 0,
        sort_order INTEGER DEFAULT 0,
        estimated_hours NUMERIC(6,1)
    )
    """,
    """
    CREATE TABLE project_milestones (
        id INTEGER PRIMARY KEY,
        project_id INTEGER REFERENCES changelog_projects(id) ON DELETE CASCADE,
        name VARCHAR(255) NOT NULL,
        target_date DATE NOT NULL,
        icon VARCHAR(10) DEFAULT '◆',
        sort_order INTEGER DEFAULT 0
    )
    """,
]

SEED = [
    ("""INSERT INTO changelog_projects (id, name, status, start_date, end_date, start_milestone, end_milestone)
        VALUES (1, 'Portal', 'In Development', '2025-01-01', '2025-01-10', 'Planning', 'Live')""", {}),
    ("""INSERT INTO changelog_projects (id, name, status) VALUES (2, 'Intake', 'Requested')""", {}),
    # inserted out of order to check sort_order is honored
    ("""INSERT INTO project_task_groups (id, project_id, name, milestone, sort_order)
        VALUES (11, 1, 'Build', 'Dev', 1)""", {}),
    ("""INSERT INTO project_task_groups (id, project_id, name, milestone, sort_order, estimated_hours)
        VALUES (10, 1, 'Design', 'Planning', 0, NULL)""", {}),
    ("""INSERT INTO project_tasks (task_group_id, name, done, sort_order) VALUES (10, 'Wireframes', 1, 0)""", {}),
    ("""INSERT INTO project_tasks (task_group_id, name, done, sort_order) VALUES (10, 'Review', 0, 1)""", {}),
    ("""INSERT INTO project_tasks (task_group_id, name, done, sort_order, estimated_hours)
        VALUES (11, 'API', 0, 0, 12.5)""", {}),
    ("""INSERT INTO project_milestones (project_id, name, target_date, icon, sort_order)
        VALUES (1, 'Beta launch', '2025-01-08', '🚀', 0)""", {}),
]


@pytest.fixture
def db_engine(tmp_path):
    """A seeded SQLite database with the roadmap tables."""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'test.db'}", echo=False, connect_args={"check_same_thread": False}
    )
    with engine.begin() as conn:
        for ddl in SCHEMA:
            conn.execute(text(ddl))
        for stmt, params in SEED:
            conn.execute(text(stmt), params)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_engine):
    """Test client whose get_db dependency points at the seeded database."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def today():
    """Fixed clock for schedules that fall back to the current date."""
    return date(2025, 3, 5)


@pytest.fixture
def make_project():
    """Build a ProjectModel from the camelCase wire shape."""
    def _make(**fields):
        payload = {"id": 1, "name": "Project", "status": "Dev", "taskGroups": []}
        payload.update(fields)
        return ProjectModel.model_validate(payload)
    return _make
