"""Pydantic schemas for dashboard statistics."""

from datetime import date
from typing import List, Literal, Optional
from pydantic import BaseModel

from components.report.schemas import ClientDebt

Period = Literal["month", "year", "all"]


class ClientEarnings(BaseModel):
    """Leaderboard row: what one client brought in."""
    client_id: int
    client_name: str
    earned: float
    hours: float


class ClientRemaining(BaseModel):
    """Debt row: what one client still owes."""
    client_id: int
    client_name: str
    remaining: float


class DashboardSummary(BaseModel):
    """Schema for dashboard KPIs and breakdowns."""
    period: Period
    period_start: Optional[date] = None
    client_id: Optional[int] = None
    worker_id: Optional[int] = None
    total_earned: float
    total_paid: float
    total_remaining: float
    total_hours: float
    client_leaderboard: List[ClientEarnings]
    debts: List[ClientRemaining]


class WorkerDebts(BaseModel):
    """Schema for everything owed to one worker."""
    worker_id: int
    total_unpaid_amount: float
    total_unpaid_hours: float
    clients: List[ClientDebt]
