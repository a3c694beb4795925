import os
import uuid
from datetime import datetime

import pytest

# Set required environment variables BEFORE importing app code
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.session import get_db
from app.db.models.user import UserRole
from app.db.crud.users import create_user
from app.db.models.skill import Skill
from app.core.auth_guard import create_access_token

# Setup In-Memory DB
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class RecordingNotifier:
    """Stand-in for NotificationService that keeps every call in memory."""

    def __init__(self, fail: bool = False):
        self.calls = []
        self.fail = fail

    def notify(self, db, user_id, event, payload=None):
        if self.fail:
            raise RuntimeError("notification backend down")
        self.calls.append((user_id, event, payload or {}))
        return True

    def events_for(self, user_id):
        return [event for uid, event, _ in self.calls if uid == user_id]


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def skills(db):
    catalog = {}
    for slug, name in [("go", "Go"), ("python", "Python"), ("rust", "Rust"), ("react", "React")]:
        skill = Skill(slug=slug, name=name)
        db.add(skill)
        catalog[slug] = skill
    db.commit()
    return catalog


@pytest.fixture
def make_user(db, skills):
    def _make_user(
        user_id=None,
        teaches=(),
        learns=(),
        onboarded=True,
        **fields
    ):
        user_id = user_id or f"user-{uuid.uuid4().hex[:8]}"
        return create_user(
            db,
            name=fields.pop("name", user_id.title()),
            email=fields.pop("email", f"{user_id}@example.com"),
            mentor_skills=[skills[slug] for slug in teaches],
            mentee_skills=[skills[slug] for slug in learns],
            id=user_id,
            onboarding_completed_at=datetime.utcnow() if onboarded else None,
            **fields
        )
    return _make_user


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def failing_notifier():
    return RecordingNotifier(fail=True)


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app)
    yield c
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}
    return _headers


@pytest.fixture
def admin(make_user):
    return make_user("admin", role=UserRole.ADMIN)
