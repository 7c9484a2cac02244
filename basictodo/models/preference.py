"""Reminder preference model for BasicTodo."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from basictodo.models.constants import (
    MIN_LEAD_TIME_MIN,
    MAX_LEAD_TIME_MIN,
    DEFAULT_LEAD_TIME_MIN,
    DEFAULT_TEMPLATE_ID,
    EMAIL_TEMPLATE_MAX_LENGTH,
)


class Preference(BaseModel):
    """Per-user reminder preferences (one row per user)."""

    id: str = Field(..., description="Preference row identifier")
    user_id: str = Field(..., description="Owning user ID")
    lead_time_minutes: int = Field(
        DEFAULT_LEAD_TIME_MIN, ge=MIN_LEAD_TIME_MIN, le=MAX_LEAD_TIME_MIN,
        description="Minutes before a task is due at which the reminder fires",
    )
    reminder_enabled: bool = Field(True, description="Whether reminder emails are sent")
    template_id: str = Field(DEFAULT_TEMPLATE_ID, description="Email template reference")
    email_template: Optional[str] = Field(None, description="Custom email template body")
    created_at: datetime
    updated_at: datetime


class PreferenceUpdate(BaseModel):
    """Partial update of reminder preferences."""

    lead_time_minutes: Optional[int] = Field(None, ge=MIN_LEAD_TIME_MIN, le=MAX_LEAD_TIME_MIN)
    reminder_enabled: Optional[bool] = None
    template_id: Optional[str] = Field(None, min_length=1)
    email_template: Optional[str] = Field(None, min_length=1, max_length=EMAIL_TEMPLATE_MAX_LENGTH)

    class Config:
        """Pydantic configuration."""
        extra = "forbid"
