"""Merging of worker records that share a name.

Duplicates appear when the same person is added more than once. The merge
keeps one survivor, moves every assignment of the other records onto it and
deletes the others. By default each duplicate is merged in its own
transaction: a failure is logged and the merge continues with the next one,
so an interrupted run can leave some duplicates in place. Running it again
picks up where it stopped.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Sequence

from sqlalchemy.exc import SQLAlchemyError

from components.core.exceptions import StoreOperationError
from components.worker.models import Worker
from components.worker.repository import WorkerRepository
from components.worker import schemas

logger = logging.getLogger(__name__)


@dataclass
class Candidate:
    """A worker matching the name, with its assignment count."""
    worker: Worker
    worker_id: int
    assignments_count: int


def survivor_key(candidate: Candidate):
    """Sort key: primary first, then most assignments, then oldest."""
    created_at = candidate.worker.created_at or datetime.max
    return (not candidate.worker.is_primary, -candidate.assignments_count, created_at, candidate.worker_id)


def select_survivor(candidates: Sequence[Candidate]) -> Candidate:
    """Pick the record that outlives the merge."""
    if not candidates:
        raise ValueError("No candidates to choose from")
    return min(candidates, key=survivor_key)


class WorkerDeduplicator:
    """Collapses same-named workers of one account into a single record."""

    def __init__(self, repository: WorkerRepository):
        self.repository = repository
        self.session = repository.session

    async def load_candidates(self, name: str) -> List[Candidate]:
        workers = await self.repository.get_by_name(name)
        counts = await self.repository.count_assignments_by_worker([worker.id for worker in workers])
        return [
            Candidate(worker=worker, worker_id=worker.id, assignments_count=counts.get(worker.id, 0))
            for worker in workers
        ]

    async def deduplicate(self, name: str, atomic: bool = False) -> schemas.DeduplicationResult:
        """Merge every worker named ``name`` (case-insensitive) into one.

        With ``atomic`` the whole merge runs in one transaction and any
        failure rolls it back and raises ``StoreOperationError``.
        """
        candidates = await self.load_candidates(name)

        if not candidates:
            logger.info("No workers named %r for account %s", name, self.repository.user_id)
            return schemas.DeduplicationResult(
                success=False,
                message=f'No workers named "{name}" found',
            )

        if len(candidates) == 1:
            keeper = candidates[0].worker
            return schemas.DeduplicationResult(
                success=True,
                message=f'No duplicates found, worker {keeper.id} is the keeper',
                survivor=schemas.Worker.model_validate(keeper),
            )

        keep = select_survivor(candidates)
        survivor = keep.worker
        losers = [candidate for candidate in candidates if candidate.worker_id != keep.worker_id]
        logger.info(
            "Merging %d duplicate(s) of %r into worker %s (primary=%s, assignments=%d)",
            len(losers), name, keep.worker_id, survivor.is_primary, keep.assignments_count,
        )

        if atomic:
            merged, moved, failed = await self._merge_atomic(keep, losers)
        else:
            merged, moved, failed = await self._merge_each(keep, losers)

        survivor = await self.repository.make_primary(survivor)

        message = f"Merged {merged} duplicate(s) into worker {survivor.id}, moved {moved} assignment(s)"
        if failed:
            message += f"; {len(failed)} duplicate(s) could not be merged"
        return schemas.DeduplicationResult(
            success=not failed,
            message=message,
            survivor=schemas.Worker.model_validate(survivor),
            merged_count=merged,
            moved_assignments=moved,
            failed_worker_ids=failed,
        )

    async def _merge_one(self, keep: Candidate, loser: Candidate) -> int:
        moved = 0
        if loser.assignments_count > 0:
            moved = await self.repository.reassign_assignments(loser.worker_id, keep.worker_id)
            logger.info("Moved %d assignment(s) from worker %s to %s", moved, loser.worker_id, keep.worker_id)
        await self.session.delete(loser.worker)
        return moved

    async def _merge_each(self, keep: Candidate, losers: Sequence[Candidate]):
        merged, moved, failed = 0, 0, []
        for loser in losers:
            try:
                count = await self._merge_one(keep, loser)
                await self.session.commit()
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error("Failed to merge worker %s into %s: %s", loser.worker_id, keep.worker_id, e)
                failed.append(loser.worker_id)
                continue
            merged += 1
            moved += count
            logger.info("Deleted duplicate worker %s", loser.worker_id)
        return merged, moved, failed

    async def _merge_atomic(self, keep: Candidate, losers: Sequence[Candidate]):
        moved = 0
        try:
            for loser in losers:
                moved += await self._merge_one(keep, loser)
            keep.worker.is_primary = True
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error("Atomic merge into worker %s rolled back: %s", keep.worker_id, e)
            raise StoreOperationError(f"Merging duplicates of worker {keep.worker_id} failed") from e
        return len(losers), moved, []
