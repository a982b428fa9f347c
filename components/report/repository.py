"""Repository for report, work day and assignment operations."""

import logging
from typing import List, Optional, Sequence, Tuple
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from components.client.models import Client
from components.core.exceptions import ValidationFailedError
from components.report.models import Report, WorkDay, WorkDayAssignment
from components.report import aggregation, schemas, timeformat
from components.worker.models import Worker
from components.worker.repository import WorkerRepository

logger = logging.getLogger(__name__)

# Tolerance when checking that assignment amounts add up to the day amount
SPLIT_TOLERANCE = 0.01


def refresh_rollups(report: Report) -> Report:
    """Recompute a report's stored totals from its work days."""
    summary = aggregation.summarize_work_days(report.work_days)
    report.total_hours = summary.total_hours
    report.total_earned = summary.total_earned
    report.paid_amount = summary.total_paid
    report.remaining_amount = summary.total_remaining
    report.payment_status = summary.payment_status
    return report


def resolve_hours_and_amount(hours: Optional[float], amount: Optional[float], hourly_rate: float) -> Tuple[float, float]:
    """Fill in whichever of hours or amount was not entered.

    A directly entered amount wins over hours and is back-solved into hours
    rounded to the minute.
    """
    if amount is not None:
        return timeformat.hours_for_amount(amount, hourly_rate), amount
    if hours is not None:
        return hours, timeformat.amount_for_hours(hours, hourly_rate)
    return 0.0, 0.0


class ReportRepository:
    """Repository for report operations, scoped to one account."""

    def __init__(self, session: AsyncSession, user_id: int, primary_worker_name: str = "Me"):
        """Initialize repository with database session and account id.

        ``primary_worker_name`` names the primary worker if one has to be
        created to take an unassigned work day.
        """
        self.session = session
        self.user_id = user_id
        self.primary_worker_name = primary_worker_name
        self.workers = WorkerRepository(session, user_id)

    def _report_query(self):
        return (
            select(Report)
            .where(Report.user_id == self.user_id)
            .options(selectinload(Report.work_days).selectinload(WorkDay.assignments))
            .execution_options(populate_existing=True)
        )

    async def get_all(self, client_id: Optional[int] = None) -> List[Report]:
        """Get reports with work days and assignments, newest first."""
        query = self._report_query()
        if client_id is not None:
            query = query.where(Report.client_id == client_id)
        result = await self.session.execute(query.order_by(Report.date.desc(), Report.id.desc()))
        return list(result.scalars().all())

    async def get_scoped(
        self,
        client_id: Optional[int] = None,
        worker_id: Optional[int] = aggregation.ALL_WORKERS,
        unpaid_only: bool = False,
    ) -> List[schemas.Report]:
        """Reports as seen through the worker filter.

        With a ``worker_id`` the totals cover only that worker's shares and
        reports the worker never worked on are left out. ``unpaid_only``
        keeps reports that still have something outstanding.
        """
        scoped = []
        for report in await self.get_all(client_id=client_id):
            summary = aggregation.summarize_work_days(report.work_days, worker_id)
            if worker_id is not aggregation.ALL_WORKERS and not any(
                aggregation.find_assignment(day, worker_id) for day in report.work_days
            ):
                continue
            if unpaid_only and summary.payment_status == aggregation.PAID:
                continue
            scoped.append(
                schemas.Report.model_validate(report).model_copy(update={
                    "total_hours": summary.total_hours,
                    "total_earned": summary.total_earned,
                    "paid_amount": summary.total_paid,
                    "remaining_amount": summary.total_remaining,
                    "payment_status": summary.payment_status,
                })
            )
        return scoped

    async def get_by_id(self, report_id: int) -> Optional[Report]:
        """Get report by ID."""
        result = await self.session.execute(self._report_query().where(Report.id == report_id))
        return result.scalar_one_or_none()

    async def _get_client(self, client_id: int) -> Optional[Client]:
        result = await self.session.execute(
            select(Client).where(Client.id == client_id, Client.user_id == self.user_id)
        )
        return result.scalar_one_or_none()

    async def create(self, report_in: schemas.ReportCreate) -> Tuple[Optional[Report], List[int]]:
        """Create a report with its work days.

        Returns the report (None when the client is unknown) and the ids of
        the workers assigned on its days.
        """
        client = await self._get_client(report_in.client_id)
        if not client:
            return None, []

        report = Report(
            user_id=self.user_id,
            client_id=client.id,
            client_name=client.name,
            date=report_in.date,
            status="in_progress",
        )
        assigned: List[int] = []
        for day_in in report_in.work_days:
            work_day = await self._build_work_day(day_in, float(client.hourly_rate))
            report.work_days.append(work_day)
            assigned.extend(a.worker_id for a in work_day.assignments)
        refresh_rollups(report)

        self.session.add(report)
        await self.session.commit()
        logger.info("Created report %s for client %s with %d work day(s)", report.id, client.id, len(report_in.work_days))
        return await self.get_by_id(report.id), assigned

    async def add_work_day(self, report_id: int, day_in: schemas.WorkDayCreate) -> Tuple[Optional[Report], List[int]]:
        """Log one more work day on an existing report."""
        report = await self.get_by_id(report_id)
        if not report:
            return None, []
        client = await self._get_client(report.client_id)

        work_day = await self._build_work_day(day_in, float(client.hourly_rate))
        report.work_days.append(work_day)
        refresh_rollups(report)

        await self.session.commit()
        return await self.get_by_id(report_id), [a.worker_id for a in work_day.assignments]

    async def update(self, report_id: int, report_in: schemas.ReportUpdate) -> Optional[Report]:
        """Update report date or status."""
        report = await self.get_by_id(report_id)
        if not report:
            return None

        if report_in.date is not None:
            report.date = report_in.date
        if report_in.status == "completed":
            self._check_completable(report)
        if report_in.status is not None:
            report.status = report_in.status
        refresh_rollups(report)

        await self.session.commit()
        return await self.get_by_id(report_id)

    async def complete(self, report_id: int) -> Optional[Report]:
        """Mark a fully paid report as completed."""
        return await self.update(report_id, schemas.ReportUpdate(status="completed"))

    def _check_completable(self, report: Report) -> None:
        refresh_rollups(report)
        if float(report.remaining_amount) > SPLIT_TOLERANCE:
            raise ValidationFailedError("A report with an outstanding balance cannot be completed")
        if any(day.payment_status != aggregation.PAID for day in report.work_days):
            raise ValidationFailedError("Not every work day of the report is paid")

    async def delete(self, report_id: int) -> bool:
        """Delete report by ID."""
        report = await self.get_by_id(report_id)
        if not report:
            return False

        await self.session.delete(report)
        await self.session.commit()
        return True

    # Work days

    async def get_work_day(self, work_day_id: int) -> Optional[WorkDay]:
        """Get a work day of the account with its assignments."""
        result = await self.session.execute(
            select(WorkDay)
            .join(Report, WorkDay.report_id == Report.id)
            .where(WorkDay.id == work_day_id, Report.user_id == self.user_id)
            .options(selectinload(WorkDay.assignments))
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _load_day(self, work_day_id: int) -> Tuple[Optional[WorkDay], Optional[Report]]:
        work_day = await self.get_work_day(work_day_id)
        if not work_day:
            return None, None
        report = await self.get_by_id(work_day.report_id)
        # The report load brings the same day instance back from the identity map
        work_day = next(day for day in report.work_days if day.id == work_day_id)
        return work_day, report

    async def _save_day(self, work_day: WorkDay, report: Report) -> WorkDay:
        refresh_rollups(report)
        await self.session.commit()
        return await self.get_work_day(work_day.id)

    async def update_work_day(self, work_day_id: int, day_in: schemas.WorkDayUpdate) -> Optional[WorkDay]:
        """Edit date, time or amount, and note of a work day.

        The amount follows the client's current rate; assignments are scaled
        to keep summing to the day amount.
        """
        work_day, report = await self._load_day(work_day_id)
        if not work_day:
            return None

        if day_in.date is not None:
            work_day.date = day_in.date
        if day_in.note is not None:
            work_day.note = day_in.note or None
        if day_in.is_planned is not None:
            work_day.is_planned = day_in.is_planned

        if day_in.hours is not None or day_in.amount is not None:
            client = await self._get_client(report.client_id)
            old_amount = float(work_day.amount or 0)
            hours, amount = resolve_hours_and_amount(day_in.hours, day_in.amount, float(client.hourly_rate))
            work_day.hours = hours
            work_day.amount = amount
            work_day.is_planned = False
            await self._rescale_assignments(work_day, old_amount)

        return await self._save_day(work_day, report)

    async def delete_work_day(self, work_day_id: int) -> bool:
        """Delete a work day and refresh its report's totals."""
        work_day, report = await self._load_day(work_day_id)
        if not work_day:
            return False

        report.work_days.remove(work_day)
        refresh_rollups(report)
        await self.session.commit()
        return True

    async def set_assignments(self, work_day_id: int, items: Sequence[schemas.AssignmentIn]) -> Tuple[Optional[WorkDay], List[int]]:
        """Replace the worker split of a work day. An empty list clears it."""
        work_day, report = await self._load_day(work_day_id)
        if not work_day:
            return None, []

        work_day.assignments = await self._build_assignments(
            float(work_day.hours or 0), float(work_day.amount or 0), items
        )
        return await self._save_day(work_day, report), [item.worker_id for item in items]

    async def set_payment_status(self, work_day_id: int, status: str) -> Optional[WorkDay]:
        """Switch a work day's payment status.

        Unpaid clears the partial-paid amount, partial keeps it and paid
        leaves it as recorded.
        """
        work_day, report = await self._load_day(work_day_id)
        if not work_day:
            return None

        work_day.payment_status = status
        if status == aggregation.UNPAID:
            work_day.day_paid_amount = 0
        return await self._save_day(work_day, report)

    async def apply_partial_payment(self, work_day_id: int, amount: float) -> Optional[WorkDay]:
        """Add a payment to a work day's running paid amount."""
        work_day, report = await self._load_day(work_day_id)
        if not work_day:
            return None

        day_amount = float(work_day.amount or 0)
        new_total = float(work_day.day_paid_amount or 0) + amount
        if new_total > day_amount + SPLIT_TOLERANCE:
            raise ValidationFailedError("The paid amount cannot exceed the work day's total")

        work_day.day_paid_amount = new_total
        work_day.payment_status = aggregation.PAID if new_total >= day_amount - SPLIT_TOLERANCE else aggregation.PARTIAL
        return await self._save_day(work_day, report)

    async def get_day_paid_amount(self, work_day_id: int) -> Optional[float]:
        work_day = await self.get_work_day(work_day_id)
        if not work_day:
            return None
        return float(work_day.day_paid_amount or 0)

    async def set_day_paid_amount(self, work_day_id: int, amount: float) -> Optional[WorkDay]:
        work_day, report = await self._load_day(work_day_id)
        if not work_day:
            return None
        if amount > float(work_day.amount or 0) + SPLIT_TOLERANCE:
            raise ValidationFailedError("The paid amount cannot exceed the work day's total")

        work_day.day_paid_amount = amount
        return await self._save_day(work_day, report)

    # Helpers

    async def _build_work_day(self, day_in: schemas.WorkDayCreate, hourly_rate: float) -> WorkDay:
        if day_in.is_planned and day_in.hours is None and day_in.amount is None:
            hours, amount = 0.0, 0.0
        else:
            hours, amount = resolve_hours_and_amount(day_in.hours, day_in.amount, hourly_rate)

        paid = day_in.day_paid_amount if day_in.payment_status == aggregation.PARTIAL else 0
        if paid > amount + SPLIT_TOLERANCE:
            raise ValidationFailedError("The paid amount cannot exceed the work day's total")

        work_day = WorkDay(
            date=day_in.date,
            hours=hours,
            amount=amount,
            payment_status=day_in.payment_status,
            day_paid_amount=paid,
            note=day_in.note or None,
            is_planned=day_in.is_planned,
        )

        if day_in.assignments is not None:
            work_day.assignments = await self._build_assignments(hours, amount, day_in.assignments)
        elif amount > 0:
            primary = await self.workers.ensure_primary(self.primary_worker_name)
            work_day.assignments = [WorkDayAssignment(worker_id=primary.id, amount=amount, hours=hours)]
        return work_day

    async def _build_assignments(
        self, day_hours: float, day_amount: float, items: Sequence[schemas.AssignmentIn]
    ) -> List[WorkDayAssignment]:
        """Validate a payment split and turn it into assignment rows."""
        if not items:
            return []

        worker_ids = [item.worker_id for item in items]
        if len(set(worker_ids)) != len(worker_ids):
            raise ValidationFailedError("A worker can only be assigned once per work day")

        result = await self.session.execute(
            select(Worker.id).where(Worker.id.in_(worker_ids), Worker.user_id == self.user_id)
        )
        known = set(result.scalars().all())
        unknown = [worker_id for worker_id in worker_ids if worker_id not in known]
        if unknown:
            raise ValidationFailedError(f"Unknown worker(s): {unknown}")

        if any(item.amount <= 0 for item in items):
            raise ValidationFailedError("Every assigned worker needs an amount above zero")
        total = sum(item.amount for item in items)
        if abs(total - day_amount) > SPLIT_TOLERANCE:
            raise ValidationFailedError(
                f"Assigned amounts add up to {total:.2f} but the work day totals {day_amount:.2f}"
            )

        return [
            WorkDayAssignment(
                worker_id=item.worker_id,
                amount=item.amount,
                hours=day_hours * item.amount / day_amount if day_amount > 0 else 0,
            )
            for item in items
        ]

    async def _rescale_assignments(self, work_day: WorkDay, old_amount: float) -> None:
        new_amount = float(work_day.amount or 0)
        new_hours = float(work_day.hours or 0)
        assignments = list(work_day.assignments)

        if not assignments:
            if new_amount > 0:
                primary = await self.workers.ensure_primary(self.primary_worker_name)
                work_day.assignments = [WorkDayAssignment(worker_id=primary.id, amount=new_amount, hours=new_hours)]
            return

        if old_amount <= 0:
            # Nothing to scale from; split evenly
            shares = [1 / len(assignments)] * len(assignments)
        else:
            shares = [float(a.amount or 0) / old_amount for a in assignments]

        for assignment, share in zip(assignments, shares):
            assignment.amount = round(new_amount * share, 2)
            assignment.hours = new_hours * share
        # Keep the split exact after rounding
        drift = round(new_amount - sum(float(a.amount) for a in assignments), 2)
        assignments[0].amount = float(assignments[0].amount) + drift
