import os

# Keep the module-level engine off disk and hashing cheap before the app is imported
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from main import app
from app.config.database import Base, get_db
from app.features.access.roles import RoleName
from app.features.auth.service import create_user_token
from app.models.task import Task
from app.models.user import User
from app.utils.security import TokenService, get_password_hash, get_token_service
from seed_db import seed_permissions, seed_role_permissions, seed_roles

TEST_SECRET = "test-secret"
DEFAULT_PASSWORD = "password123"


@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def roles(db_session):
    seeded = seed_roles(db_session)
    permissions = seed_permissions(db_session)
    seed_role_permissions(db_session, seeded, permissions)
    db_session.commit()
    return seeded


@pytest.fixture
def token_service():
    return TokenService(TEST_SECRET, expires_delta=timedelta(hours=1))


@pytest.fixture
def make_user(db_session, roles):
    counter = {"n": 0}

    def _make_user(role: RoleName, email: str = None, name: str = None) -> User:
        counter["n"] += 1
        user = User(
            name=name or f"{role.value} {counter['n']}",
            email=email or f"{role.name.lower()}{counter['n']}@example.com",
            hashed_password=get_password_hash(DEFAULT_PASSWORD, rounds=4),
            role_id=roles[role.value].id,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_task(db_session):
    def _make_task(assignee: User, title: str = "Write report", priority: str = "medium", status: str = "pending") -> Task:
        task = Task(title=title, priority=priority, status=status, assigned_to=assignee.id)
        db_session.add(task)
        db_session.commit()
        db_session.refresh(task)
        return task

    return _make_task


@pytest.fixture
def auth_headers(token_service):
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_user_token(user, token_service)}"}

    return _auth_headers


@pytest.fixture
def client(db_session, token_service):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_token_service] = lambda: token_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
