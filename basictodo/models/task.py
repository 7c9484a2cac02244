"""Task data model for BasicTodo."""

from datetime import datetime, timezone
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field, field_validator

from basictodo.models.constants import TITLE_MAX_LENGTH, MIN_DURATION_MIN, MAX_DURATION_MIN


class TaskStatus(str, Enum):
    """Task status enumeration."""
    PENDING = "pending"
    DONE = "done"


class TaskPriority(str, Enum):
    """Task priority enumeration."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskCategory(str, Enum):
    """Task category enumeration."""
    PERSONAL = "personal"
    WORK = "work"
    HEALTH = "health"
    FINANCE = "finance"
    EDUCATION = "education"
    SHOPPING = "shopping"
    OTHER = "other"


def ensure_utc(value: Optional[datetime], tz=timezone.utc) -> Optional[datetime]:
    """Return an aware UTC datetime.

    Naive values are interpreted in ``tz`` (UTC unless the caller's timezone is given).
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=tz)
    return value.astimezone(timezone.utc)


def normalize_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    """Trim tags and drop blanks and duplicates (first occurrence wins)."""
    if tags is None:
        return None
    seen = set()
    out: List[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.add(tag)
            out.append(tag)
    return out


def _validate_title(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not value:
        raise ValueError("Task title is required")
    return value


class Task(BaseModel):
    """Canonical Task model."""

    id: str = Field(..., description="Unique task identifier (UUID v4)")
    user_id: str = Field(..., description="User ID who owns this task")
    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH, description="Task title")
    description: Optional[str] = Field(None, description="Detailed description of the task")
    notes: Optional[str] = Field(None, description="Additional notes about the task")
    due_at: Optional[datetime] = Field(None, description="Due date and time (UTC)")
    status: TaskStatus = Field(TaskStatus.PENDING, description="Task status")
    priority: Optional[TaskPriority] = Field(None, description="Task priority level")
    category: Optional[TaskCategory] = Field(None, description="Task category")
    tags: List[str] = Field(default_factory=list, description="Tags for the task")
    estimated_duration_minutes: Optional[int] = Field(None, description="Estimated duration in minutes")
    created_at: datetime = Field(..., description="Task creation timestamp")
    updated_at: datetime = Field(..., description="Task last update timestamp")
    last_reminder_sent: Optional[datetime] = Field(None, description="When the last reminder email went out")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class TaskCreate(BaseModel):
    """Fields accepted when creating a task."""

    title: str = Field(..., max_length=TITLE_MAX_LENGTH, description="The title of the task")
    description: Optional[str] = Field(None, description="Optional detailed description of the task")
    due_at: Optional[datetime] = Field(None, description="Optional due date and time in ISO format")
    priority: Optional[TaskPriority] = Field(None, description="Task priority level")
    category: Optional[TaskCategory] = Field(None, description="Task category")
    tags: Optional[List[str]] = Field(None, description="Optional tags for the task")
    estimated_duration_minutes: Optional[int] = Field(
        None, ge=MIN_DURATION_MIN, le=MAX_DURATION_MIN, description="Estimated duration in minutes"
    )
    notes: Optional[str] = Field(None, description="Additional notes about the task")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        extra = "forbid"

    @field_validator("title")
    @classmethod
    def _validate_title(cls, v):
        return _validate_title(v)

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, v):
        return normalize_tags(v)


class TaskUpdate(BaseModel):
    """Partial update of a task. Only fields explicitly set are applied."""

    title: Optional[str] = Field(None, max_length=TITLE_MAX_LENGTH, description="New title for the task")
    description: Optional[str] = Field(None, description="New detailed description of the task")
    status: Optional[TaskStatus] = Field(None, description="New status for the task")
    due_at: Optional[datetime] = Field(None, description="New due date and time in ISO format")
    priority: Optional[TaskPriority] = Field(None, description="New task priority level")
    category: Optional[TaskCategory] = Field(None, description="New task category")
    tags: Optional[List[str]] = Field(None, description="New tags for the task")
    estimated_duration_minutes: Optional[int] = Field(
        None, ge=MIN_DURATION_MIN, le=MAX_DURATION_MIN, description="New estimated duration in minutes"
    )
    notes: Optional[str] = Field(None, description="New additional notes about the task")

    class Config:
        """Pydantic configuration."""
        use_enum_values = True
        extra = "forbid"

    @field_validator("title")
    @classmethod
    def _validate_title(cls, v):
        if v is None:
            raise ValueError("title cannot be null")
        return _validate_title(v)

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, v):
        return normalize_tags(v)

    @field_validator("status")
    @classmethod
    def _status_not_null(cls, v):
        # Status is a required column; it can be changed but not cleared.
        if v is None:
            raise ValueError("status cannot be null")
        return v
