"""Pydantic schemas for worker data validation."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class WorkerBase(BaseModel):
    """Base worker schema."""
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)


class WorkerCreate(WorkerBase):
    """Schema for worker creation."""
    pass


class WorkerUpdate(BaseModel):
    """Schema for partial worker update."""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=COLOR_PATTERN)


class Worker(BaseModel):
    """Schema for worker response."""
    id: int
    name: str
    color: str
    is_primary: bool
    created_at: datetime

    class Config:
        from_attributes = True


class WorkerWithAssignments(Worker):
    """Worker together with the number of assignments referencing it."""
    assignments_count: int


class DeduplicationRequest(BaseModel):
    """Schema for a duplicate-merge request."""
    name: str = Field(..., min_length=1)
    atomic: bool = False


class DeduplicationResult(BaseModel):
    """Outcome of merging workers that share a name."""
    success: bool
    message: str
    survivor: Optional[Worker] = None
    merged_count: int = 0
    moved_assignments: int = 0
    failed_worker_ids: List[int] = []
