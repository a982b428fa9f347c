"""Report endpoints for the API."""

from typing import List, Optional
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
    prefix="/reports",
    tags=["reports"],
    responses={404: {"description": "Not found"}},
)


def _repository(db: AsyncSession, user: User) -> ReportRepository:
    return ReportRepository(db, user.id, primary_worker_name=user.login)


@router.get("/", response_model=List[schemas.Report])
async def read_reports(
    client_id: Optional[int] = None,
    worker_id: Optional[int] = None,
    unpaid_only: bool = False,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """
    Get reports, newest first.

    Without an explicit ``worker_id`` the account's selected worker filter
    applies. Totals are recomputed for that worker's share.
    """
    if worker_id is None:
        worker_id = context.get(current_user.id).selected_worker_id
    return await _repository(db, current_user).get_scoped(
        client_id=client_id, worker_id=worker_id, unpaid_only=unpaid_only
    )


@router.post("/", response_model=schemas.Report, status_code=201)
async def create_report(
    report: schemas.ReportCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """
    Create a report for a client with any number of work days.

    Each work day takes hours or an amount; the other one is derived from the
    client's hourly rate. Days without assignments go to the primary worker.
    """
    db_report, assigned = await _repository(db, current_user).create(report)
    if db_report is None:
        raise HTTPException(status_code=404, detail="Client not found")
    context.mark_used(current_user.id, assigned)
    return db_report


@router.get("/{report_id}", response_model=schemas.Report)
async def read_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Get a specific report by ID."""
    report = await _repository(db, current_user).get_by_id(report_id)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.put("/{report_id}", response_model=schemas.Report)
async def update_report(
    report_id: int,
    report: schemas.ReportUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Update a report's date or status."""
    updated = await _repository(db, current_user).update(report_id, report)
    if not updated:
        raise HTTPException(status_code=404, detail="Report not found")
    return updated


@router.post("/{report_id}/complete", response_model=schemas.Report)
async def complete_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Mark a report completed. Every work day must be paid."""
    report = await _repository(db, current_user).complete(report_id)
    if not report:
        raise HTTPException(status_code=404, detail="Report not found")
    return report


@router.delete("/{report_id}", response_model=Message)
async def delete_report(
    report_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a report with its work days."""
    if not await _repository(db, current_user).delete(report_id):
        raise HTTPException(status_code=404, detail="Report not found")
    return {"message": "Report deleted successfully"}


@router.post("/{report_id}/work-days", response_model=schemas.Report, status_code=201)
async def add_work_day(
    report_id: int,
    work_day: schemas.WorkDayCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    context: AppContext = Depends(get_app_context),
):
    """Log another work day on a report."""
    report, assigned = await _repository(db, current_user).add_work_day(report_id, work_day)
    if report is None:
        raise HTTPException(status_code=404, detail="Report not found")
    context.mark_used(current_user.id, assigned)
    return report
