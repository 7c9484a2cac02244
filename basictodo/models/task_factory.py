"""Task creation factory for BasicTodo.

This module centralizes task creation logic so that every code path
(REST endpoint or assistant operation) applies the same defaults.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional, Dict, Any

from basictodo.models.task import Task, TaskCreate, TaskStatus, ensure_utc


def create_task_defaults() -> Dict[str, Any]:
    """Get default task values as a dictionary.

    Optional attributes stay unset; only status and tags have concrete defaults.
    """
    return {
        "status": TaskStatus.PENDING,
        "description": None,
        "notes": None,
        "due_at": None,
        "priority": None,
        "category": None,
        "tags": [],
        "estimated_duration_minutes": None,
        "last_reminder_sent": None,
    }


def create_task_base(user_id: str, fields: TaskCreate, now: Optional[datetime] = None) -> Task:
    """Create a new pending task owned by ``user_id``.

    Args:
        user_id: User ID who owns this task (required)
        fields: Validated creation fields
        now: Creation timestamp (defaults to current UTC time)

    Returns:
        Task object with defaults applied
    """
    now = ensure_utc(now) if now else datetime.now(timezone.utc)
    defaults = create_task_defaults()
    provided = fields.model_dump(exclude_none=True)

    return Task(
        id=str(uuid.uuid4()),
        user_id=user_id,
        title=fields.title,
        # Status is never taken from the caller on creation.
        status=defaults["status"],
        description=provided.get("description", defaults["description"]),
        notes=provided.get("notes", defaults["notes"]),
        due_at=ensure_utc(fields.due_at) if fields.due_at else defaults["due_at"],
        priority=provided.get("priority", defaults["priority"]),
        category=provided.get("category", defaults["category"]),
        tags=provided.get("tags", defaults["tags"]),
        estimated_duration_minutes=provided.get(
            "estimated_duration_minutes", defaults["estimated_duration_minutes"]
        ),
        created_at=now,
        updated_at=now,
        last_reminder_sent=defaults["last_reminder_sent"],
    )
