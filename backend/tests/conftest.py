import os

# The app builds its engine at import time; keep the lifespan bootstrap off Postgres.
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tutorgrid.api.deps import get_db
from tutorgrid.db.base import Base
from tutorgrid.main import app
from tutorgrid.services.directory import students, teachers
from tutorgrid.services.time_grid import seed_time_slots

MONDAY = date(2024, 1, 1)


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    with factory() as session:
        seed_time_slots(session, start="08:00", end="22:00", minutes=30)
    yield factory
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def make_teacher(db):
    def _make(name: str, on_date: date = MONDAY, availability: list[int] | None = None, **extra):
        values = {"name": name, "date": on_date, "availability": availability if availability is not None else [3, 4], **extra}
        return teachers.create(db, values)

    return _make


@pytest.fixture()
def make_student(db):
    def _make(name: str, on_date: date = MONDAY, availability: list[int] | None = None, **extra):
        values = {"name": name, "date": on_date, "availability": availability if availability is not None else [3, 4], **extra}
        return students.create(db, values)

    return _make
