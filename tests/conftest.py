"""Shared fixtures: an isolated SQLite store per test and an API client."""

import os
import tempfile

# Settings are read once at import time
os.environ.setdefault("DB_URL", f"sqlite+aiosqlite:///{os.path.join(tempfile.gettempdir(), 'cleaning_tracker_test.db')}")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import date, datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

from components.core.database import DatabaseManager
from components.core.init_db import get_db
from components.client.models import Client
from components.report.models import Report, WorkDay, WorkDayAssignment
from components.user.models import User
from components.worker.models import Worker
from restapi.router import create_app


@pytest.fixture
async def db_manager(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    manager = DatabaseManager(engine=engine)
    await manager.create_tables()
    yield manager
    await engine.dispose()


@pytest.fixture
async def session(db_manager):
    async with db_manager.get_db() as session:
        yield session


@pytest.fixture
def preferences_path(tmp_path):
    return tmp_path / "preferences.json"


@pytest.fixture
def app(db_manager, preferences_path):
    application = create_app(preferences_path=str(preferences_path))

    async def override_get_db():
        async with db_manager.get_db() as session:
            yield session

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture
async def client(app):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


async def register(client: AsyncClient, login: str = "owner", password: str = "secret123") -> dict:
    """Register an account and send its token on every following request."""
    response = await client.post("/auth/register", json={"login": login, "password": password})
    assert response.status_code == 200, response.text
    body = response.json()
    client.headers["Authorization"] = f"Bearer {body['access_token']}"
    return body


@pytest.fixture
async def auth_client(client):
    await register(client)
    return client


# Direct store helpers for repository-level tests

@pytest.fixture
async def user(session):
    account = User(login="owner", password="salt:hash", registration_date=date(2024, 1, 1))
    session.add(account)
    await session.commit()
    return account


async def add_worker(session, user_id, name, is_primary=False, created_at=None):
    worker = Worker(
        user_id=user_id,
        name=name,
        is_primary=is_primary,
        created_at=created_at or datetime(2024, 1, 1),
    )
    session.add(worker)
    await session.commit()
    return worker


async def add_assignments(session, user_id, worker_id, count, amount=10):
    """Log ``count`` unpaid days fully assigned to one worker."""
    client = Client(user_id=user_id, name=f"Client for {worker_id}", hourly_rate=20)
    session.add(client)
    await session.flush()

    report = Report(user_id=user_id, client_id=client.id, client_name=client.name, date=date(2024, 1, 1))
    for day in range(count):
        work_day = WorkDay(date=date(2024, 1, day + 1), hours=amount / 20, amount=amount)
        work_day.assignments.append(WorkDayAssignment(worker_id=worker_id, amount=amount, hours=amount / 20))
        report.work_days.append(work_day)
    session.add(report)
    await session.commit()
    return report


@pytest.fixture
async def office(auth_client):
    """An office client at 20/h, the primary worker and a helper."""
    client_id = (await auth_client.post("/clients/", json={"name": "Office", "hourly_rate": 20})).json()["id"]
    primary_id = (await auth_client.get("/workers/")).json()[0]["id"]
    helper_id = (await auth_client.post("/workers/", json={"name": "Lidia"})).json()["id"]
    return auth_client, client_id, primary_id, helper_id


async def create_shared_report(api, client_id, primary_id, helper_id):
    """One 5 hour day (100) split 60/40, half paid."""
    response = await api.post("/reports/", json={
        "client_id": client_id,
        "date": "2024-03-01",
        "work_days": [{
            "date": "2024-03-01",
            "hours": 5,
            "payment_status": "partial",
            "day_paid_amount": 50,
            "assignments": [
                {"worker_id": primary_id, "amount": 60},
                {"worker_id": helper_id, "amount": 40},
            ],
        }],
    })
    assert response.status_code == 201, response.text
    return response.json()
