"""Pydantic schemas for client data validation."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class ClientBase(BaseModel):
    """Base client schema."""
    name: str = Field(..., min_length=1, max_length=255)
    hourly_rate: float = Field(..., ge=0)


class ClientCreate(ClientBase):
    """Schema for client creation."""
    pass


class ClientUpdate(BaseModel):
    """Schema for partial client update."""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    hourly_rate: Optional[float] = Field(None, ge=0)


class Client(ClientBase):
    """Schema for client response."""
    id: int
    created_at: datetime

    class Config:
        from_attributes = True
