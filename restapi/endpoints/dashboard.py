"""Dashboard endpoints for the API."""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.dashboard.repository import DashboardRepository
from components.dashboard import schemas
from components.preferences.context import AppContext
from components.user.models import User
from components.worker.repository import WorkerRepository
from restapi.deps import get_app_context
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/dashboard",
    tags=["dashboard"],
    responses={404: {"description": "Not found"}},
)


@router.get("/summary", response_model=schemas.DashboardSummary)
async def get_summary(
    period: schemas.Period = "month",
    reference: Optional[date] = None,
    client_id: Optional[int] = None,
    worker_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """
    Get dashboard statistics.

    The period counts back from ``reference`` (today by default). Without a
    ``worker_id`` the account's selected worker filter applies.
    """
    if worker_id is None:
        worker_id = context.get(current_user.id).selected_worker_id
    return await DashboardRepository(db, current_user.id).get_summary(
        period=period, reference=reference, client_id=client_id, worker_id=worker_id
    )


@router.get("/worker-debts/{worker_id}", response_model=schemas.WorkerDebts)
async def get_worker_debts(
    worker_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """What every client still owes one worker."""
    if not await WorkerRepository(db, current_user.id).get_by_id(worker_id):
        raise HTTPException(status_code=404, detail="Worker not found")
    return await DashboardRepository(db, current_user.id).get_worker_debts(worker_id)
