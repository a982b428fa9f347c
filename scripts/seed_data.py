"""Script to seed demo data into the database."""

from datetime import date, timedelta
import asyncio
import os
import sys

# Allow running from the project root without installing
sys.path.append(os.getcwd())

from components.core.init_db import create_schema, get_db
from components.core.logging_config import setup_logging
from components.client.repository import ClientRepository
from components.client.schemas import ClientCreate
from components.report.repository import ReportRepository
from components.report.schemas import AssignmentIn, ReportCreate, WorkDayCreate
from components.user.repository import UserRepository
from components.user.schemas import UserCreate
from components.worker.repository import WorkerRepository
from components.worker.schemas import WorkerCreate

DEMO_LOGIN = "demo"
DEMO_PASSWORD = "password123"


async def seed_data():
    """Seed a demo account with clients, workers and a few reports."""
    await create_schema()

    async for db in get_db():
        users = UserRepository(db)
        if await users.exists(DEMO_LOGIN):
            print(f"Account {DEMO_LOGIN!r} already exists, nothing to do")
            return

        user = await users.create(UserCreate(login=DEMO_LOGIN, password=DEMO_PASSWORD))
        workers = WorkerRepository(db, user.id)
        me = await workers.ensure_primary(user.login)
        helper = await workers.create(WorkerCreate(name="Lidia", color="#10b981"))

        clients = ClientRepository(db, user.id)
        office = await clients.create(ClientCreate(name="Office on Main St", hourly_rate=20))
        flat = await clients.create(ClientCreate(name="Flat 12", hourly_rate=25))

        reports = ReportRepository(db, user.id, primary_worker_name=user.login)
        start = date.today().replace(day=1)

        # Office: shared days, the first one paid in part
        await reports.create(ReportCreate(
            client_id=office.id,
            date=start,
            work_days=[
                WorkDayCreate(
                    date=start,
                    hours=5,
                    payment_status="partial",
                    day_paid_amount=50,
                    assignments=[
                        AssignmentIn(worker_id=me.id, amount=60),
                        AssignmentIn(worker_id=helper.id, amount=40),
                    ],
                ),
                WorkDayCreate(date=start + timedelta(days=7), amount=50, note="Windows only"),
            ],
        ))

        # Flat: paid in full
        await reports.create(ReportCreate(
            client_id=flat.id,
            date=start + timedelta(days=2),
            work_days=[
                WorkDayCreate(date=start + timedelta(days=2), hours=2.5, payment_status="paid"),
                WorkDayCreate(date=start + timedelta(days=9), hours=3, payment_status="paid"),
            ],
        ))

        # Planned visit with no time logged yet
        await reports.create(ReportCreate(
            client_id=flat.id,
            date=start + timedelta(days=16),
            work_days=[WorkDayCreate(date=start + timedelta(days=16), is_planned=True)],
        ))

        print(f"Seeded account {DEMO_LOGIN!r} (password {DEMO_PASSWORD!r})")


if __name__ == "__main__":
    setup_logging()
    asyncio.run(seed_data())
