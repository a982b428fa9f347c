"""Work day endpoints: edits, worker split and payments."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from components.core.init_db import get_db
from components.core.schemas import Message
from components.preferences.context import AppContext
from components.report.repository import ReportRepository
from components.report import schemas
from components.user.models import User
from restapi.deps import get_app_context
from restapi.endpoints.auth import get_current_user

router = APIRouter(
    prefix="/work-days",
    tags=["work-days"],
    responses={404: {"description": "Not found"}},
)


def _repository(db: AsyncSession, user: User) -> ReportRepository:
    return ReportRepository(db, user.id, primary_worker_name=user.login)


def _found(work_day):
    if work_day is None:
        raise HTTPException(status_code=404, detail="Work day not found")
    return work_day


@router.get("/{work_day_id}", response_model=schemas.WorkDay)
async def read_work_day(
    work_day_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a work day with its assignments."""
    return _found(await _repository(db, current_user).get_work_day(work_day_id))


@router.put("/{work_day_id}", response_model=schemas.WorkDay)
async def update_work_day(
    work_day_id: int,
    work_day: schemas.WorkDayUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Edit a work day. Changing hours or amount rescales its assignments."""
    return _found(await _repository(db, current_user).update_work_day(work_day_id, work_day))


@router.delete("/{work_day_id}", response_model=Message)
async def delete_work_day(
    work_day_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a work day."""
    if not await _repository(db, current_user).delete_work_day(work_day_id):
        raise HTTPException(status_code=404, detail="Work day not found")
    return {"message": "Work day deleted successfully"}


@router.put("/{work_day_id}/assignments", response_model=schemas.WorkDay)
async def set_assignments(
    work_day_id: int,
    update: schemas.AssignmentsUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """Replace the worker split. Amounts must add up to the day's amount."""
    work_day, assigned = await _repository(db, current_user).set_assignments(work_day_id, update.assignments)
    _found(work_day)
    context.mark_used(current_user.id, assigned)
    return work_day


@router.post("/{work_day_id}/payment-status", response_model=schemas.WorkDay)
async def set_payment_status(
    work_day_id: int,
    update: schemas.PaymentStatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Set a work day to paid, partial or unpaid."""
    return _found(await _repository(db, current_user).set_payment_status(work_day_id, update.payment_status))


@router.post("/{work_day_id}/partial-payment", response_model=schemas.WorkDay)
async def apply_partial_payment(
    work_day_id: int,
    payment: schemas.PartialPayment,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Record a payment towards a work day. Reaching the total marks it paid."""
    return _found(await _repository(db, current_user).apply_partial_payment(work_day_id, payment.amount))


@router.get("/{work_day_id}/paid-amount", response_model=schemas.DayPaidAmount)
async def read_paid_amount(
    work_day_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get the amount paid so far on a work day."""
    amount = await _repository(db, current_user).get_day_paid_amount(work_day_id)
    return {"day_paid_amount": _found(amount)}


@router.put("/{work_day_id}/paid-amount", response_model=schemas.WorkDay)
async def set_paid_amount(
    work_day_id: int,
    update: schemas.DayPaidAmount,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Overwrite the amount paid so far on a work day."""
    return _found(await _repository(db, current_user).set_day_paid_amount(work_day_id, update.day_paid_amount))
