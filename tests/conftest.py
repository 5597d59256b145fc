import json
import uuid
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db, get_session_factory
from app.main import app
from app.models import Job, User
from app.services.authz import current_user
from app.services.errors import QueueUnavailable
from app.services.queue_backend import QueueState, get_queue
from app.services.tokens import utcnow_naive


class FakeQueue:
    """Stands in for the Celery adapter; records what the service asked for."""

    def __init__(self):
        self.sent = []
        self.revoked = []
        self.states = {}
        self.down = False

    def enqueue(self, job_type, payload, queue_id=None):
        if self.down:
            raise QueueUnavailable("broker down")
        self.sent.append((job_type, payload, queue_id))
        return queue_id or str(uuid.uuid4())

    def fetch_state(self, queue_id):
        if self.down:
            raise QueueUnavailable("broker down")
        return self.states.get(queue_id, QueueState(state="PENDING"))

    def request_cancel(self, queue_id):
        if self.down:
            raise QueueUnavailable("broker down")
        self.revoked.append(queue_id)
        return bool(queue_id)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def queue():
    return FakeQueue()


def make_user(db, email, role="member"):
    user = User(email=email, password_hash="x", role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_job(
    db,
    user,
    status="pending",
    job_type="MATERIAL_ENHANCE",
    payload=None,
    created_at=None,
    updated_at=None,
    queue_id=None,
):
    now = utcnow_naive()
    job = Job(
        user_id=user.id,
        type=job_type,
        status=status,
        payload=payload if payload is not None else {"novelId": "n1", "materialName": "Sword"},
        queue_id=queue_id,
        created_at=created_at or now,
        updated_at=updated_at or created_at or now,
    )
    db.add(job)
    db.commit()
    db.refresh(job)
    return job


def parse_frame(frame):
    lines = frame.strip().split("\n")
    event = lines[0].split(": ", 1)[1]
    data = json.loads(lines[1].split(": ", 1)[1])
    return event, data


@pytest.fixture
def alice(db):
    return make_user(db, "alice@example.com")


@pytest.fixture
def bob(db):
    return make_user(db, "bob@example.com")


@pytest.fixture
def admin(db):
    return make_user(db, "admin@example.com", role="admin")


def identity(user):
    return SimpleNamespace(id=user.id, role=user.role, is_admin=user.role == "admin")


@pytest.fixture
def client(session_factory, queue):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_queue] = lambda: queue
    app.dependency_overrides[get_session_factory] = lambda: session_factory

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture
def act_as():
    def _act_as(user):
        who = identity(user)
        app.dependency_overrides[current_user] = lambda: who
        return who

    return _act_as
