"""Repository for dashboard statistics."""

from datetime import date
from typing import List, Optional

import pandas as pd
from sqlalchemy.ext.asyncio import AsyncSession

from components.client.repository import ClientRepository
from components.dashboard import schemas
from components.report import aggregation
from components.report.repository import ReportRepository

COLUMNS = ["client_id", "client_name", "hours", "earned", "paid", "remaining"]


def period_start(period: str, reference: date) -> Optional[date]:
    """First day covered by a dashboard period."""
    if period == "month":
        return date(reference.year, reference.month, 1)
    if period == "year":
        return date(reference.year, 1, 1)
    return None


def period_end(period: str, reference: date) -> Optional[date]:
    """First day after a dashboard period."""
    if period == "month":
        if reference.month == 12:
            return date(reference.year + 1, 1, 1)
        return date(reference.year, reference.month + 1, 1)
    if period == "year":
        return date(reference.year + 1, 1, 1)
    return None


class DashboardRepository:
    """Repository for dashboard statistics, scoped to one account."""

    def __init__(self, session: AsyncSession, user_id: int):
        """Initialize repository with database session and account id."""
        self.session = session
        self.user_id = user_id
        self.reports = ReportRepository(session, user_id)
        self.clients = ClientRepository(session, user_id)

    async def _report_frame(self, start: Optional[date], end: Optional[date], client_id: Optional[int], worker_id: Optional[int]) -> pd.DataFrame:
        """One row per report with totals recomputed from its work days."""
        reports = await self.reports.get_all(client_id=client_id)
        rows = []
        for report in reports:
            if start is not None and report.date < start:
                continue
            if end is not None and report.date >= end:
                continue
            if worker_id is not None and not any(
                aggregation.find_assignment(day, worker_id) for day in report.work_days
            ):
                continue
            summary = aggregation.summarize_work_days(report.work_days, worker_id)
            rows.append({
                "client_id": report.client_id,
                "client_name": report.client_name,
                "hours": summary.total_hours,
                "earned": summary.total_earned,
                "paid": summary.total_paid,
                "remaining": summary.total_remaining,
            })
        return pd.DataFrame(rows, columns=COLUMNS)

    async def get_summary(
        self,
        period: str = "month",
        reference: Optional[date] = None,
        client_id: Optional[int] = None,
        worker_id: Optional[int] = None,
    ) -> schemas.DashboardSummary:
        """
        Get dashboard statistics for a period.

        Returns:
        - Total earned, paid, remaining and hours
        - Clients ranked by earnings
        - Clients with an outstanding balance, largest first
        """
        reference = reference or date.today()
        start = period_start(period, reference)
        df = await self._report_frame(start, period_end(period, reference), client_id, worker_id)

        leaderboard: List[schemas.ClientEarnings] = []
        debts: List[schemas.ClientRemaining] = []
        if not df.empty:
            by_client = (
                df.groupby("client_id", sort=False)
                .agg(client_name=("client_name", "last"), earned=("earned", "sum"), hours=("hours", "sum"))
                .reset_index()
                .sort_values("earned", ascending=False, kind="stable")
            )
            leaderboard = [
                schemas.ClientEarnings(
                    client_id=int(row.client_id),
                    client_name=row.client_name,
                    earned=float(row.earned),
                    hours=float(row.hours),
                )
                for row in by_client.itertuples(index=False)
            ]

            owing = df[df["remaining"] > 0]
            if not owing.empty:
                by_debt = (
                    owing.groupby("client_id", sort=False)
                    .agg(client_name=("client_name", "last"), remaining=("remaining", "sum"))
                    .reset_index()
                    .sort_values("remaining", ascending=False, kind="stable")
                )
                debts = [
                    schemas.ClientRemaining(
                        client_id=int(row.client_id),
                        client_name=row.client_name,
                        remaining=float(row.remaining),
                    )
                    for row in by_debt.itertuples(index=False)
                ]

        return schemas.DashboardSummary(
            period=period,
            period_start=start,
            client_id=client_id,
            worker_id=worker_id,
            total_earned=float(df["earned"].sum()),
            total_paid=float(df["paid"].sum()),
            total_remaining=float(df["remaining"].sum()),
            total_hours=float(df["hours"].sum()),
            client_leaderboard=leaderboard,
            debts=debts,
        )

    async def get_worker_debts(self, worker_id: int) -> schemas.WorkerDebts:
        """Per-client unpaid amounts and hours for one worker."""
        reports = await self.reports.get_all()
        rates = {client.id: float(client.hourly_rate) for client in await self.clients.get_all()}
        clients = aggregation.worker_client_debts(reports, rates, worker_id)
        return schemas.WorkerDebts(
            worker_id=worker_id,
            total_unpaid_amount=sum(debt.total_unpaid_amount for debt in clients),
            total_unpaid_hours=sum(debt.total_unpaid_hours for debt in clients),
            clients=clients,
        )
