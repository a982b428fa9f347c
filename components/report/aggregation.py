"""Payment aggregation over reports, work days and worker assignments.

Everything here is a pure function of its inputs. Work days may be ORM rows
or response schemas; only these attributes are read:

- work day: ``hours``, ``amount``, ``payment_status``, ``day_paid_amount``,
  ``assignments``, ``date``, ``note``
- assignment: ``worker_id``, ``hours``, ``amount``

Missing, negative and non-finite numbers count as zero so a single bad row
never poisons a total.
"""

import math
from typing import Dict, Iterable, List, Mapping, Optional

from components.report import schemas

PAID = "paid"
PARTIAL = "partial"
UNPAID = "unpaid"

# Worker filter value meaning "every worker"
ALL_WORKERS = None


def as_amount(value) -> float:
    """Coerce a stored number to a finite, non-negative float."""
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number) or number < 0:
        return 0.0
    return number


def derive_status(total_paid: float, total_earned: float) -> str:
    """Payment status implied by the paid/earned ratio."""
    if total_earned > 0 and math.isclose(total_paid, total_earned, abs_tol=0.005):
        return PAID
    if 0 < total_paid < total_earned:
        return PARTIAL
    return UNPAID


def find_assignment(work_day, worker_id: int):
    """Return the work day's assignment for a worker, if any."""
    for assignment in work_day.assignments or []:
        if assignment.worker_id == worker_id:
            return assignment
    return None


def day_paid(work_day) -> float:
    """Amount paid so far for the whole day."""
    status = work_day.payment_status
    if status == PAID:
        return as_amount(work_day.amount)
    if status == PARTIAL:
        return as_amount(work_day.day_paid_amount)
    return 0.0


def worker_paid(work_day, assignment) -> float:
    """The part of the day's payment that belongs to one assignment.

    A partial payment is split in proportion to the worker's share of the
    day's total amount.
    """
    worker_amount = as_amount(assignment.amount)
    status = work_day.payment_status
    if status == PAID:
        return worker_amount
    if status == PARTIAL:
        day_amount = as_amount(work_day.amount)
        if day_amount == 0:
            return 0.0
        return (worker_amount / day_amount) * as_amount(work_day.day_paid_amount)
    return 0.0


def summarize_work_days(work_days: Iterable, worker_id: Optional[int] = ALL_WORKERS) -> schemas.PaymentSummary:
    """Total hours, earned, paid and remaining over the given work days.

    With a ``worker_id`` only days carrying an assignment for that worker
    count, and only the worker's share of each.
    """
    total_hours = 0.0
    total_earned = 0.0
    total_paid = 0.0

    for work_day in work_days or []:
        if worker_id is ALL_WORKERS:
            total_hours += as_amount(work_day.hours)
            total_earned += as_amount(work_day.amount)
            total_paid += day_paid(work_day)
            continue

        assignment = find_assignment(work_day, worker_id)
        if assignment is None:
            continue
        total_hours += as_amount(assignment.hours)
        total_earned += as_amount(assignment.amount)
        total_paid += worker_paid(work_day, assignment)

    return schemas.PaymentSummary(
        total_hours=total_hours,
        total_earned=total_earned,
        total_paid=total_paid,
        total_remaining=total_earned - total_paid,
        payment_status=derive_status(total_paid, total_earned),
    )


def summarize_reports(reports: Iterable, worker_id: Optional[int] = ALL_WORKERS) -> schemas.PaymentSummary:
    """Fold the work days of several reports into one summary."""
    work_days = [day for report in reports or [] for day in report.work_days or []]
    return summarize_work_days(work_days, worker_id)


def worker_client_debts(
    reports: Iterable,
    hourly_rates: Mapping[int, float],
    worker_id: int,
) -> List[schemas.ClientDebt]:
    """What each client still owes one worker, largest debt first.

    Only unpaid and partial days with a non-zero share for the worker count.
    For partial days the unpaid hours are the worker's hours minus the hours
    covered by the worker's share of the payment at the client's rate; with
    no known rate they are reported as zero.
    """
    debts: Dict[int, schemas.ClientDebt] = {}

    for report in reports or []:
        for work_day in report.work_days or []:
            status = work_day.payment_status
            if status not in (UNPAID, PARTIAL):
                continue

            assignment = find_assignment(work_day, worker_id)
            if assignment is None:
                continue

            worker_amount = as_amount(assignment.amount)
            worker_hours = as_amount(assignment.hours)
            if worker_amount == 0:
                continue

            if status == UNPAID:
                unpaid_amount = worker_amount
                unpaid_hours = worker_hours
            else:
                share = worker_paid(work_day, assignment)
                unpaid_amount = worker_amount - share
                rate = as_amount(hourly_rates.get(report.client_id))
                unpaid_hours = worker_hours - share / rate if rate > 0 else 0.0

            if unpaid_amount <= 0:
                continue

            debt = debts.get(report.client_id)
            if debt is None:
                debt = schemas.ClientDebt(
                    client_id=report.client_id,
                    client_name=report.client_name,
                    total_unpaid_amount=0,
                    total_unpaid_hours=0,
                    work_days=[],
                )
                debts[report.client_id] = debt

            debt.total_unpaid_amount += unpaid_amount
            debt.total_unpaid_hours += unpaid_hours
            debt.work_days.append(
                schemas.DebtDay(
                    date=work_day.date,
                    hours=unpaid_hours,
                    amount=unpaid_amount,
                    note=work_day.note,
                )
            )

    result = [debt for debt in debts.values() if debt.total_unpaid_amount > 0]
    for debt in result:
        debt.work_days.sort(key=lambda day: day.date, reverse=True)
    result.sort(key=lambda debt: debt.total_unpaid_amount, reverse=True)
    return result
