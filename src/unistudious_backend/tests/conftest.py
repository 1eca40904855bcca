"""
Pytest configuration and fixtures for all tests.

Every test runs against a fresh in-memory SQLite database that replaces the
``get_db`` dependency of the application.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("TOKEN_SECRET", "YWFhYWFhYWFhYWFhYWFhYWFhYWFhYWFhYWFhYWFhYWE=")
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-key")
os.environ.setdefault("ADMIN_EMAIL", "admin@unistudious.org")
os.environ.setdefault("ADMIN_PASSWORD", "admin-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from unistudious_backend.database import build_engine, get_db
from unistudious_backend.interface.tokens import encrypt_secret
from unistudious_backend.model import Base
from unistudious_backend.model.auth import User
from unistudious_backend.model.course import Course
from unistudious_backend.server import app
from unistudious_backend.services.enrollment import db_add_students
from unistudious_backend.tests.fixtures import DEFAULT_PASSWORD


@pytest.fixture
def engine():
    """Create a database engine with the full schema."""
    engine = build_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def session(engine):
    """Create a new database session for a test."""
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(engine):
    """TestClient whose requests use the test database."""
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ============================================================================
# Factories
# ============================================================================

@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def factory(role: str = "student", **kwargs) -> User:
        counter["n"] += 1
        n = counter["n"]

        values = {
            "given_name": f"Given{n}",
            "family_name": f"Family{n}",
            "username": f"{role}{n}",
            "email": f"{role}{n}@unistudious.org",
            "password": encrypt_secret(kwargs.pop("plain_password", DEFAULT_PASSWORD)),
            "role": role,
        }
        if role == "student":
            values["school_level"] = "1st year"
        if role == "professor":
            values["speciality"] = "Mathematics"
        values.update(kwargs)

        user = User(**values)
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return factory


@pytest.fixture
def make_course(session):

    def factory(teacher: User, students: list = None, **kwargs) -> Course:
        course = Course(name=kwargs.pop("name", "Algebra"), teacher_id=teacher.id, **kwargs)
        session.add(course)
        session.flush()
        db_add_students(course.id, [s.id for s in students or []], session)
        session.commit()
        session.refresh(course)
        return course

    return factory


@pytest.fixture
def admin(make_user):
    return make_user("admin", username="admin", email="root@unistudious.org")


@pytest.fixture
def professor(make_user):
    return make_user("professor")


@pytest.fixture
def other_professor(make_user):
    return make_user("professor")


@pytest.fixture
def student(make_user):
    return make_user("student")


@pytest.fixture
def other_student(make_user):
    return make_user("student")
