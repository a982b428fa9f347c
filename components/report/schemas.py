"""Pydantic schemas for report, work day and assignment data."""

import datetime as dt
from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from components.report import timeformat

PaymentStatus = Literal["paid", "partial", "unpaid"]
ReportStatus = Literal["in_progress", "completed"]


def parse_picked_hours(value):
    """Accept ``"H:MM"`` from the time picker, snapped to ten minutes."""
    if isinstance(value, str) and ":" in value:
        return timeformat.round_to_ten_minutes(timeformat.hours_to_decimal(value))
    return value


class AssignmentIn(BaseModel):
    """A worker's share of a work day, as submitted."""
    worker_id: int
    amount: float


class Assignment(BaseModel):
    """Schema for assignment response."""
    id: int
    worker_id: Optional[int] = None
    deleted_worker_name: Optional[str] = None
    amount: float
    hours: float

    class Config:
        from_attributes = True


class WorkDayCreate(BaseModel):
    """Schema for logging a work day.

    Either ``hours`` or ``amount`` may be given. Hours are priced at the
    client's rate; an amount is back-solved into hours. Planned days carry
    neither.
    """
    date: date
    hours: Optional[float] = Field(None, ge=0)
    amount: Optional[float] = Field(None, ge=0)
    payment_status: PaymentStatus = "unpaid"
    day_paid_amount: float = Field(0, ge=0)
    note: Optional[str] = None
    is_planned: bool = False
    assignments: Optional[List[AssignmentIn]] = None

    @field_validator("hours", mode="before")
    @classmethod
    def parse_hours(cls, value):
        return parse_picked_hours(value)

    @model_validator(mode="after")
    def check_hours_or_amount(self):
        if not self.is_planned and self.hours is None and self.amount is None:
            raise ValueError("Either hours or amount is required for a non-planned work day")
        return self


class WorkDayUpdate(BaseModel):
    """Schema for partial work day update."""
    date: Optional[dt.date] = None
    hours: Optional[float] = Field(None, ge=0)
    amount: Optional[float] = Field(None, ge=0)
    note: Optional[str] = None
    is_planned: Optional[bool] = None

    @field_validator("hours", mode="before")
    @classmethod
    def parse_hours(cls, value):
        return parse_picked_hours(value)


class WorkDay(BaseModel):
    """Schema for work day response."""
    id: int
    report_id: int
    date: date
    hours: float
    amount: float
    payment_status: PaymentStatus
    day_paid_amount: float
    note: Optional[str] = None
    is_planned: bool
    assignments: List[Assignment] = []

    @computed_field
    @property
    def hours_display(self) -> str:
        return timeformat.decimal_to_hours(self.hours)

    class Config:
        from_attributes = True


class AssignmentsUpdate(BaseModel):
    """Replacement set of assignments for one work day."""
    assignments: List[AssignmentIn]


class PaymentStatusUpdate(BaseModel):
    """Schema for switching a work day's payment status."""
    payment_status: PaymentStatus


class PartialPayment(BaseModel):
    """Schema for recording a partial payment on a work day."""
    amount: float = Field(..., gt=0)


class DayPaidAmount(BaseModel):
    """Schema for the running paid amount of a work day."""
    day_paid_amount: float = Field(..., ge=0)


class ReportCreate(BaseModel):
    """Schema for report creation."""
    client_id: int
    date: date
    work_days: List[WorkDayCreate] = []


class ReportUpdate(BaseModel):
    """Schema for partial report update."""
    date: Optional[dt.date] = None
    status: Optional[ReportStatus] = None


class Report(BaseModel):
    """Schema for report response."""
    id: int
    client_id: int
    client_name: str
    date: date
    status: ReportStatus
    payment_status: PaymentStatus
    total_hours: float
    total_earned: float
    paid_amount: float
    remaining_amount: float
    created_at: datetime
    work_days: List[WorkDay] = []

    class Config:
        from_attributes = True


class PaymentSummary(BaseModel):
    """Totals over a set of work days."""
    total_hours: float = 0
    total_earned: float = 0
    total_paid: float = 0
    total_remaining: float = 0
    payment_status: PaymentStatus = "unpaid"


class DebtDay(BaseModel):
    """One unpaid (or partly unpaid) day in a worker's debt list."""
    date: date
    hours: float
    amount: float
    note: Optional[str] = None


class ClientDebt(BaseModel):
    """What one client still owes one worker."""
    client_id: int
    client_name: str
    total_unpaid_amount: float
    total_unpaid_hours: float
    work_days: List[DebtDay]
