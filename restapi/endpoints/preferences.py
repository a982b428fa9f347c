"""Preference endpoints: the selected worker filter and recent workers."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.preferences.context import AppContext, WorkerPreferences
from components.preferences import schemas
from components.user.models import User
from components.worker.repository import WorkerRepository
from restapi.deps import get_app_context
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/preferences",
    tags=["preferences"],
)


@router.get("/", response_model=WorkerPreferences)
async def read_preferences(
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """Get the account's worker preferences."""
    return context.get(current_user.id)


@router.put("/", response_model=WorkerPreferences)
async def update_preferences(
    update: schemas.PreferencesUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """Select the worker the lists and dashboard are filtered by. Null means all."""
    if update.selected_worker_id is not None:
        worker = await WorkerRepository(db, current_user.id).get_by_id(update.selected_worker_id)
        if not worker:
            raise HTTPException(status_code=404, detail="Worker not found")
    return context.select_worker(current_user.id, update.selected_worker_id)
