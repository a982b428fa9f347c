"""Report, work day and assignment models for the database."""

from datetime import datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from components.core.database import Base


class Report(Base):
    """A client+date grouping of logged work with rollup totals."""
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False, index=True)
    client_name = Column(String(255), nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default="in_progress")  # in_progress|completed

    # Rollups, recomputed from work days on every change
    payment_status = Column(String(16), nullable=False, default="unpaid")  # paid|partial|unpaid
    total_hours = Column(Numeric(10, 4), nullable=False, default=0)
    total_earned = Column(Numeric(10, 2), nullable=False, default=0)
    paid_amount = Column(Numeric(10, 2), nullable=False, default=0)
    remaining_amount = Column(Numeric(10, 2), nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    client = relationship("Client", back_populates="reports")
    work_days = relationship(
        "WorkDay",
        back_populates="report",
        cascade="all, delete-orphan",
        order_by="WorkDay.date",
    )


class WorkDay(Base):
    """One day's logged work within a report."""
    __tablename__ = "work_days"

    id = Column(Integer, primary_key=True, index=True)
    report_id = Column(Integer, ForeignKey("reports.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    hours = Column(Numeric(10, 4), nullable=False, default=0)
    amount = Column(Numeric(10, 2), nullable=False, default=0)
    payment_status = Column(String(16), nullable=False, default="unpaid")
    day_paid_amount = Column(Numeric(10, 2), nullable=False, default=0)
    note = Column(Text, nullable=True)
    is_planned = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    # Relationships
    report = relationship("Report", back_populates="work_days")
    assignments = relationship(
        "WorkDayAssignment",
        back_populates="work_day",
        cascade="all, delete-orphan",
        order_by="WorkDayAssignment.id",
    )


class WorkDayAssignment(Base):
    """The share of a work day attributed to one worker."""
    __tablename__ = "work_day_assignments"

    id = Column(Integer, primary_key=True, index=True)
    work_day_id = Column(Integer, ForeignKey("work_days.id", ondelete="CASCADE"), nullable=False, index=True)
    # Left dangling when the worker is deleted; the name survives below
    worker_id = Column(Integer, ForeignKey("workers.id", ondelete="SET NULL"), nullable=True, index=True)
    deleted_worker_name = Column(String(100), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False, default=0)
    hours = Column(Numeric(10, 4), nullable=False, default=0)

    # Relationships
    work_day = relationship("WorkDay", back_populates="assignments")
