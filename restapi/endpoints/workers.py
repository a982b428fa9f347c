"""Worker endpoints for the API."""

from typing import List
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import Message
from components.preferences.context import AppContext
from components.user.models import User
from components.worker.deduplication import WorkerDeduplicator
from components.worker.repository import WorkerRepository, sort_workers
from components.worker import schemas
from restapi.deps import get_app_context
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/workers",
    tags=["workers"],
    responses={404: {"description": "Not found"}},
)


@router.get("/", response_model=List[schemas.WorkerWithAssignments])
async def read_workers(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the account's workers with their assignment counts.

    The primary worker is created on first access if it is missing.
    """
    repo = WorkerRepository(db, current_user.id)
    await repo.ensure_primary(current_user.login)
    return await repo.get_with_assignments()


@router.get("/sorted", response_model=List[schemas.Worker])
async def read_sorted_workers(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """Get workers in picker order: primary, last added, recently used, rest."""
    repo = WorkerRepository(db, current_user.id)
    await repo.ensure_primary(current_user.login)
    prefs = context.get(current_user.id)
    return sort_workers(await repo.get_all(), prefs.recent_worker_ids, prefs.last_added_worker_id)


@router.post("/", response_model=schemas.Worker, status_code=201)
async def create_worker(
    worker: schemas.WorkerCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """Create a new worker."""
    db_worker = await WorkerRepository(db, current_user.id).create(worker)
    context.mark_added(current_user.id, db_worker.id)
    return db_worker


@router.put("/{worker_id}", response_model=schemas.Worker)
async def update_worker(
    worker_id: int,
    worker: schemas.WorkerUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Rename or recolour a worker."""
    updated = await WorkerRepository(db, current_user.id).update(worker_id, worker)
    if not updated:
        raise HTTPException(status_code=404, detail="Worker not found")
    return updated


@router.delete("/{worker_id}", response_model=Message)
async def delete_worker(
    worker_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """Delete a worker; its past assignments keep the worker's name."""
    if not await WorkerRepository(db, current_user.id).delete(worker_id):
        raise HTTPException(status_code=404, detail="Worker not found")
    context.forget_worker(current_user.id, worker_id)
    return {"message": "Worker deleted successfully"}


@router.post("/deduplicate", response_model=schemas.DeduplicationResult)
async def deduplicate_workers(
    request: schemas.DeduplicationRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """
    Merge workers sharing a name (case-insensitive) into one.

    The survivor is the primary worker if one matches, otherwise the one with
    most assignments, otherwise the oldest. Assignments of the others move to
    the survivor before they are deleted.
    """
    repo = WorkerRepository(db, current_user.id)
    before = {worker.id for worker in await repo.get_by_name(request.name)}
    result = await WorkerDeduplicator(repo).deduplicate(request.name, atomic=request.atomic)

    after = {worker.id for worker in await repo.get_by_name(request.name)}
    for worker_id in before - after:
        context.forget_worker(current_user.id, worker_id)
    return result
