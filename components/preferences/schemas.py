"""Pydantic schemas for preference requests."""

from typing import Optional
from pydantic import BaseModel


class PreferencesUpdate(BaseModel):
    """Schema for changing the selected worker filter (null selects all)."""
    selected_worker_id: Optional[int] = None
