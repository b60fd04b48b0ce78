from __future__ import annotations

import os
import uuid
from datetime import datetime, timedelta

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["CRON_SECRET"] = "test-cron-secret"
os.environ["DEBUG"] = "false"

import anyio  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.ext.asyncio import create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from reserves.db.database import Database  # noqa: E402
from reserves.main import create_app  # noqa: E402
from reserves.models import (  # noqa: E402
    Equipment,
    Event,
    EventType,
    Policy,
    Training,
    User,
    UserPosition,
    UserRole,
)


@pytest.fixture()
def database(tmp_path):
    # NullPool: every anyio.run() gets its own event loop, so connections
    # must not outlive a single call.
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'reserves.db'}",
        poolclass=NullPool,
    )
    database = Database(engine)
    anyio.run(database.create_all)
    try:
        yield database
    finally:
        anyio.run(database.dispose)


@pytest.fixture()
def run(database):
    """Run ``fn(session, *args, **kwargs)`` in a fresh session and return its result."""

    def _run(fn, *args, **kwargs):
        async def _inner():
            async with database.session() as session:
                return await fn(session, *args, **kwargs)

        return anyio.run(_inner)

    return _run


def _add(model, **fields):
    async def _create(session):
        instance = model(**fields)
        session.add(instance)
        await session.commit()
        await session.refresh(instance)
        return instance

    return _create


@pytest.fixture()
def make_user(run):
    def _make(**overrides) -> User:
        fields = {
            "email": f"{uuid.uuid4().hex[:10]}@example.com",
            "first_name": "Pat",
            "last_name": "Jones",
            "role": UserRole.MEMBER,
            "position": UserPosition.RESERVE,
            "is_active": True,
        }
        fields.update(overrides)
        return run(_add(User, **fields))

    return _make


@pytest.fixture()
def make_event(run):
    def _make(starts_at: datetime, **overrides) -> Event:
        fields = {
            "name": "Downtown Patrol",
            "event_type": EventType.PATROL,
            "location": "Main St",
            "starts_at": starts_at,
            "ends_at": starts_at + timedelta(hours=4),
        }
        fields.update(overrides)
        return run(_add(Event, **fields))

    return _make


@pytest.fixture()
def make_training(run):
    def _make(starts_at: datetime, **overrides) -> Training:
        fields = {
            "name": "CPR Recertification",
            "location": "Room B",
            "training_type": "first_aid",
            "instructor": "Sgt. Alvarez",
            "starts_at": starts_at,
            "ends_at": starts_at + timedelta(hours=3),
        }
        fields.update(overrides)
        return run(_add(Training, **fields))

    return _make


@pytest.fixture()
def make_policy(run):
    def _make(effective_date: datetime, **overrides) -> Policy:
        fields = {
            "name": "Use of Force",
            "policy_type": "operations",
            "policy_number": f"OPS-{uuid.uuid4().hex[:6]}",
            "policy_url": "https://example.org/policies/ops.pdf",
            "effective_date": effective_date,
            "is_active": True,
        }
        fields.update(overrides)
        return run(_add(Policy, **fields))

    return _make


@pytest.fixture()
def make_equipment(run):
    def _make(**overrides) -> Equipment:
        fields = {"name": "Radio #12", "serial_number": "MTR-0012"}
        fields.update(overrides)
        return run(_add(Equipment, **fields))

    return _make


@pytest.fixture()
def client(database):
    app = create_app(database=database)
    with TestClient(app) as test_client:
        yield test_client
