from datetime import datetime

import pytest
from sqlalchemy import select
from sqlalchemy.exc import OperationalError

from components.report.models import WorkDayAssignment
from components.worker.deduplication import Candidate, WorkerDeduplicator, select_survivor
from components.worker.models import Worker
from components.worker.repository import WorkerRepository

from conftest import add_assignments, add_worker


async def worker_ids(session, user_id):
    result = await session.execute(select(Worker.id).where(Worker.user_id == user_id).order_by(Worker.id))
    return list(result.scalars().all())


async def assignment_owners(session):
    result = await session.execute(select(WorkDayAssignment.worker_id))
    return set(result.scalars().all())


def candidate(worker_id, is_primary=False, count=0, created_at=datetime(2024, 1, 1)):
    worker = Worker(id=worker_id, name="Lidia", is_primary=is_primary, created_at=created_at)
    return Candidate(worker=worker, worker_id=worker_id, assignments_count=count)


def test_primary_beats_assignment_count():
    chosen = select_survivor([
        candidate(1, is_primary=True, count=2, created_at=datetime(2024, 3, 1)),
        candidate(2, count=10),
        candidate(3, count=0, created_at=datetime(2022, 1, 1)),
    ])
    assert chosen.worker_id == 1


def test_most_assignments_beats_age():
    chosen = select_survivor([
        candidate(1, count=1, created_at=datetime(2023, 1, 1)),
        candidate(2, count=5, created_at=datetime(2024, 1, 1)),
    ])
    assert chosen.worker_id == 2


def test_oldest_wins_a_tie():
    chosen = select_survivor([
        candidate(1, created_at=datetime(2024, 6, 1)),
        candidate(2, created_at=datetime(2024, 1, 1)),
    ])
    assert chosen.worker_id == 2


def test_select_survivor_needs_candidates():
    with pytest.raises(ValueError):
        select_survivor([])


async def test_merge_moves_assignments_to_primary(session, user):
    busy = await add_worker(session, user.id, "Lidia", created_at=datetime(2024, 1, 1))
    primary = await add_worker(session, user.id, "lidia", is_primary=True, created_at=datetime(2024, 2, 1))
    other = await add_worker(session, user.id, "Someone else")
    busy_id, primary_id, other_id = busy.id, primary.id, other.id
    await add_assignments(session, user.id, busy_id, 10)

    result = await WorkerDeduplicator(WorkerRepository(session, user.id)).deduplicate("LIDIA")

    assert result.success
    assert result.survivor.id == primary_id
    assert result.survivor.is_primary
    assert result.merged_count == 1
    assert result.moved_assignments == 10
    assert await worker_ids(session, user.id) == sorted([primary_id, other_id])
    assert await assignment_owners(session) == {primary_id}


async def test_merge_without_primary_keeps_busiest_and_flags_it(session, user):
    old = await add_worker(session, user.id, "Lidia", created_at=datetime(2023, 1, 1))
    busy = await add_worker(session, user.id, "Lidia ", created_at=datetime(2024, 1, 1))
    old_id, busy_id = old.id, busy.id
    await add_assignments(session, user.id, old_id, 1)
    await add_assignments(session, user.id, busy_id, 3)

    result = await WorkerDeduplicator(WorkerRepository(session, user.id)).deduplicate("lidia")

    assert result.survivor.id == busy_id
    assert result.survivor.is_primary
    assert await worker_ids(session, user.id) == [busy_id]
    assert await assignment_owners(session) == {busy_id}


async def test_running_twice_is_a_no_op(session, user):
    await add_worker(session, user.id, "Lidia")
    await add_worker(session, user.id, "Lidia")
    deduplicator = WorkerDeduplicator(WorkerRepository(session, user.id))

    first = await deduplicator.deduplicate("Lidia")
    ids_after_first = await worker_ids(session, user.id)
    second = await deduplicator.deduplicate("Lidia")

    assert second.success
    assert second.survivor.id == first.survivor.id
    assert second.merged_count == 0
    assert "No duplicates" in second.message
    assert await worker_ids(session, user.id) == ids_after_first


async def test_unknown_name_reports_failure(session, user):
    await add_worker(session, user.id, "Lidia")

    result = await WorkerDeduplicator(WorkerRepository(session, user.id)).deduplicate("Olena")

    assert not result.success
    assert result.survivor is None
    assert len(await worker_ids(session, user.id)) == 1


async def test_atomic_merge(session, user):
    first = await add_worker(session, user.id, "Лідія", created_at=datetime(2023, 1, 1))
    second = await add_worker(session, user.id, "ЛІДІЯ", created_at=datetime(2024, 1, 1))
    first_id, second_id = first.id, second.id
    await add_assignments(session, user.id, second_id, 2)

    result = await WorkerDeduplicator(WorkerRepository(session, user.id)).deduplicate("лідія", atomic=True)

    assert result.success
    assert result.survivor.id == second_id
    assert await worker_ids(session, user.id) == [second_id]
    assert first_id not in await assignment_owners(session)


async def test_failed_duplicate_is_skipped_and_reported(session, user, monkeypatch):
    keep = await add_worker(session, user.id, "X", is_primary=True, created_at=datetime(2023, 1, 1))
    bad = await add_worker(session, user.id, "X", created_at=datetime(2024, 1, 1))
    good = await add_worker(session, user.id, "x", created_at=datetime(2024, 2, 1))
    keep_id, bad_id, good_id = keep.id, bad.id, good.id
    await add_assignments(session, user.id, bad_id, 2)
    await add_assignments(session, user.id, good_id, 3)

    repository = WorkerRepository(session, user.id)
    reassign = repository.reassign_assignments

    async def reassign_or_fail(from_worker_id, to_worker_id):
        if from_worker_id == bad_id:
            raise OperationalError("UPDATE work_day_assignments", {}, Exception("database is locked"))
        return await reassign(from_worker_id, to_worker_id)

    monkeypatch.setattr(repository, "reassign_assignments", reassign_or_fail)

    result = await WorkerDeduplicator(repository).deduplicate("X")

    assert not result.success
    assert result.survivor.id == keep_id
    assert result.failed_worker_ids == [bad_id]
    assert result.merged_count == 1
    assert result.moved_assignments == 3
    assert await worker_ids(session, user.id) == [keep_id, bad_id]
    counts = await WorkerRepository(session, user.id).count_assignments_by_worker([keep_id, bad_id, good_id])
    assert counts == {keep_id: 3, bad_id: 2, good_id: 0}
