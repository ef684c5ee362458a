import os

# Settings are cached on first import; point the app's own engine at SQLite before that.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import app.models  # noqa: F401
from app.api.deps import get_db
from app.core.security import create_access_token
from app.db.base import Base
from app.main import app
from app.models.school_class import SchoolClass
from app.models.subject import Subject
from app.models.teacher import Teacher
from app.models.user import User, UserRole


@pytest.fixture()
def session_factory():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def snapshot_session_factory(tmp_path):
    """File-backed SQLite in WAL mode where a transaction starts at its first read.

    Each open transaction reads from a fixed snapshot, like Postgres under
    REPEATABLE READ, and every session gets its own connection.
    """
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'timetable.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )

    @event.listens_for(engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA journal_mode=WAL")

    @event.listens_for(engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


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


def seed_school(db) -> SimpleNamespace:
    """Users, teachers, classes and subjects shared by the scheduling tests."""
    admin = User(name="Admin User", email="admin@example.com", role=UserRole.admin)
    student = User(name="Student User", email="student@example.com", role=UserRole.student)
    teacher_user = User(name="Tara Teacher", email="tara@example.com", role=UserRole.teacher)
    db.add_all([admin, student, teacher_user])
    db.flush()

    teacher_t = Teacher(name="Tara Teacher", email="tara.t@example.com", department="Maths", user_id=teacher_user.id)
    teacher_x = Teacher(name="Xavier Teacher", email="xavier@example.com", department="Languages")
    teacher_y = Teacher(name="Yara Teacher", email="yara@example.com", department="Humanities")
    class_a = SchoolClass(name="Class A", room_number="101")
    class_b = SchoolClass(name="Class B", room_number="102")
    math = Subject(name="Mathematics", code="MATH")
    science = Subject(name="Science", code="SCI")
    english = Subject(name="English", code="ENG")
    history = Subject(name="History", code="HIST")
    db.add_all([teacher_t, teacher_x, teacher_y, class_a, class_b, math, science, english, history])
    db.commit()

    return SimpleNamespace(
        admin=admin,
        student=student,
        teacher_user=teacher_user,
        teacher_t=teacher_t.id,
        teacher_x=teacher_x.id,
        teacher_y=teacher_y.id,
        class_a=class_a.id,
        class_b=class_b.id,
        math=math.id,
        science=science.id,
        english=english.id,
        history=history.id,
    )


@pytest.fixture()
def school(db):
    return seed_school(db)


@pytest.fixture()
def snapshot_school(snapshot_session_factory):
    session = snapshot_session_factory()
    try:
        yield seed_school(session)
    finally:
        session.close()


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def admin_headers(school):
    return auth_headers(school.admin)


@pytest.fixture()
def student_headers(school):
    return auth_headers(school.student)
