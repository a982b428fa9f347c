"""Repository for worker operations."""

import logging
import random
from typing import Dict, List, Optional, Sequence
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.exceptions import ValidationFailedError
from components.worker.models import Worker
from components.worker import schemas
from components.report.models import WorkDayAssignment

logger = logging.getLogger(__name__)

WORKER_COLORS = ["#3b82f6", "#ef4444", "#10b981", "#f59e0b", "#8b5cf6", "#ec4899"]
PRIMARY_COLOR = WORKER_COLORS[0]


class WorkerRepository:
    """Repository for worker operations, scoped to one account."""

    def __init__(self, session: AsyncSession, user_id: int):
        """Initialize repository with database session and account id."""
        self.session = session
        self.user_id = user_id

    async def get_all(self) -> List[Worker]:
        """Get the account's workers, oldest first."""
        result = await self.session.execute(
            select(Worker)
            .where(Worker.user_id == self.user_id)
            .order_by(Worker.created_at, Worker.id)
        )
        return list(result.scalars().all())

    async def get_by_id(self, worker_id: int) -> Optional[Worker]:
        """Get worker by ID."""
        result = await self.session.execute(
            select(Worker).where(Worker.id == worker_id, Worker.user_id == self.user_id)
        )
        return result.scalar_one_or_none()

    async def get_primary(self) -> Optional[Worker]:
        """Get the account's primary worker, the oldest one if several are flagged."""
        result = await self.session.execute(
            select(Worker)
            .where(Worker.user_id == self.user_id, Worker.is_primary.is_(True))
            .order_by(Worker.created_at, Worker.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str) -> List[Worker]:
        """Get workers whose name matches case-insensitively, oldest first.

        Matching uses Python case folding so non-ASCII names compare the same
        on every database backend.
        """
        wanted = name.strip().casefold()
        return [worker for worker in await self.get_all() if worker.name.strip().casefold() == wanted]

    async def ensure_primary(self, name: str) -> Worker:
        """Return the primary worker, creating it on first use."""
        primary = await self.get_primary()
        if primary:
            return primary

        primary = Worker(
            user_id=self.user_id,
            name=name,
            color=PRIMARY_COLOR,
            is_primary=True,
        )
        self.session.add(primary)
        await self.session.commit()
        await self.session.refresh(primary)
        logger.info("Created primary worker %s for account %s", primary.id, self.user_id)
        return primary

    async def create(self, worker: schemas.WorkerCreate) -> Worker:
        """Create a new, non-primary worker."""
        db_worker = Worker(
            user_id=self.user_id,
            name=worker.name.strip(),
            color=worker.color or random.choice(WORKER_COLORS),
            is_primary=False,
        )
        self.session.add(db_worker)
        await self.session.commit()
        await self.session.refresh(db_worker)
        return db_worker

    async def update(self, worker_id: int, worker: schemas.WorkerUpdate) -> Optional[Worker]:
        """Update worker by ID."""
        db_worker = await self.get_by_id(worker_id)
        if not db_worker:
            return None

        if worker.name is not None:
            db_worker.name = worker.name.strip()
        if worker.color is not None:
            db_worker.color = worker.color

        await self.session.commit()
        await self.session.refresh(db_worker)
        return db_worker

    async def delete(self, worker_id: int) -> bool:
        """Delete worker by ID.

        Historical assignments are kept: they lose the worker reference but
        remember the worker's name.
        """
        db_worker = await self.get_by_id(worker_id)
        if not db_worker:
            return False
        if db_worker.is_primary:
            raise ValidationFailedError("The primary worker cannot be deleted")

        await self.session.execute(
            update(WorkDayAssignment)
            .where(WorkDayAssignment.worker_id == worker_id)
            .values(worker_id=None, deleted_worker_name=db_worker.name)
        )
        await self.session.delete(db_worker)
        await self.session.commit()
        return True

    async def count_assignments_by_worker(self, worker_ids: Sequence[int]) -> Dict[int, int]:
        """Assignment counts for several workers in one query."""
        if not worker_ids:
            return {}
        result = await self.session.execute(
            select(WorkDayAssignment.worker_id, func.count(WorkDayAssignment.id))
            .where(WorkDayAssignment.worker_id.in_(worker_ids))
            .group_by(WorkDayAssignment.worker_id)
        )
        counts = {worker_id: 0 for worker_id in worker_ids}
        counts.update({worker_id: count for worker_id, count in result.all()})
        return counts

    async def reassign_assignments(self, from_worker_id: int, to_worker_id: int) -> int:
        """Point every assignment of one worker at another. Does not commit."""
        result = await self.session.execute(
            update(WorkDayAssignment)
            .where(WorkDayAssignment.worker_id == from_worker_id)
            .values(worker_id=to_worker_id)
        )
        return result.rowcount or 0

    async def get_with_assignments(self) -> List[schemas.WorkerWithAssignments]:
        """All workers together with their assignment counts."""
        workers = await self.get_all()
        counts = await self.count_assignments_by_worker([worker.id for worker in workers])
        return [
            schemas.WorkerWithAssignments(
                **schemas.Worker.model_validate(worker).model_dump(),
                assignments_count=counts.get(worker.id, 0),
            )
            for worker in workers
        ]

    async def make_primary(self, worker: Worker) -> Worker:
        """Force ``is_primary`` on a worker; used after merges."""
        worker.is_primary = True
        await self.session.commit()
        await self.session.refresh(worker)
        return worker


def sort_workers(
    workers: Sequence[Worker],
    recent_worker_ids: Sequence[int] = (),
    last_added_worker_id: Optional[int] = None,
) -> List[Worker]:
    """Order workers for pickers.

    Primary first, then the most recently added worker, then workers in the
    order they were last used, then everyone else in creation order.
    """
    recent_rank = {worker_id: rank for rank, worker_id in enumerate(recent_worker_ids)}

    def key(indexed):
        position, worker = indexed
        if worker.is_primary:
            return (0, 0, position)
        if last_added_worker_id is not None and worker.id == last_added_worker_id:
            return (1, 0, position)
        if worker.id in recent_rank:
            return (2, recent_rank[worker.id], position)
        return (3, 0, position)

    return [worker for _, worker in sorted(enumerate(workers), key=key)]
