"""Repository layer for task database operations.

A ``TaskRepository`` is bound to one authenticated user. Every query it issues is
filtered by that user's id, so callers never pass (or see) another user's rows.
"""

import logging
from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import asc, desc
from sqlalchemy.exc import SQLAlchemyError

from basictodo.models.task import Task, TaskCreate, TaskUpdate, TaskStatus, ensure_utc
from basictodo.models.task_factory import create_task_base
from basictodo.models.constants import ORDERABLE_FIELDS, DEFAULT_ORDER_BY, DEFAULT_PAGE_SIZE
from basictodo.database.models import TaskDB, enum_to_value, to_db_datetime, utc_now

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Task store call failed (connection, constraint, transport...)."""


class TaskRepository:
    """Repository for Task database operations, scoped to a single user."""

    def __init__(self, db: Session, user_id: str):
        self.db = db
        self.user_id = user_id

    def _query(self):
        return self.db.query(TaskDB).filter(TaskDB.user_id == self.user_id)

    def _get_row(self, task_id: str) -> Optional[TaskDB]:
        try:
            return self._query().filter(TaskDB.id == task_id).first()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load task {task_id}: {type(e).__name__}: {str(e)}")
            raise StoreError(f"Failed to get task: {e}") from e

    def list(
        self,
        status: Optional[TaskStatus] = None,
        order_by: str = DEFAULT_ORDER_BY,
        descending: bool = True,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Task]:
        """List the user's tasks (newest first by default).

        Args:
            status: Only return tasks with this status
            order_by: One of created_at, updated_at, due_at
            descending: Sort direction
            limit: Maximum number of tasks to return
            offset: Number of tasks to skip (page size defaults when limit is unset)
        """
        if order_by not in ORDERABLE_FIELDS:
            raise ValueError(f"Cannot order tasks by {order_by!r}")

        column = getattr(TaskDB, order_by)
        ordering = desc(column) if descending else asc(column)
        if order_by == "due_at":
            # Tasks without a due date go last in both directions.
            ordering = ordering.nulls_last()

        query = self._query()
        if status is not None:
            query = query.filter(TaskDB.status == enum_to_value(status))
        query = query.order_by(ordering, desc(TaskDB.id))
        if offset:
            query = query.offset(offset).limit(limit or DEFAULT_PAGE_SIZE)
        elif limit:
            query = query.limit(limit)

        try:
            return [task_db.to_pydantic() for task_db in query.all()]
        except SQLAlchemyError as e:
            logger.error(f"Failed to list tasks for user {self.user_id}: {type(e).__name__}: {str(e)}")
            raise StoreError(f"Failed to list tasks: {e}") from e

    def get(self, task_id: str) -> Optional[Task]:
        """Get task by ID. Returns None if the user has no such task."""
        task_db = self._get_row(task_id)
        return task_db.to_pydantic() if task_db else None

    def create(self, fields: TaskCreate) -> Task:
        """Create a new pending task owned by the bound user."""
        task = create_task_base(self.user_id, fields)
        try:
            task_db = TaskDB.from_pydantic(task)
            self.db.add(task_db)
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Created task {task.id}: {task.title[:50]}")
            return task_db.to_pydantic()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to create task {task.id}: {type(e).__name__}: {str(e)}")
            raise StoreError(f"Failed to create task: {e}") from e

    def update(self, task_id: str, changes: TaskUpdate) -> Optional[Task]:
        """Apply the explicitly-set fields of ``changes``.

        Always refreshes updated_at. Returns None if the user has no such task.
        """
        task_db = self._get_row(task_id)
        if not task_db:
            return None

        for field, value in changes.model_dump(exclude_unset=True).items():
            if field == "due_at":
                value = to_db_datetime(ensure_utc(value))
            elif field in ("status", "priority", "category"):
                value = enum_to_value(value)
            elif field == "tags":
                value = list(value or [])
            setattr(task_db, field, value)
        task_db.updated_at = max(utc_now(), task_db.created_at)

        try:
            self.db.commit()
            self.db.refresh(task_db)
            logger.debug(f"Updated task {task_id}: {task_db.title[:50]}")
            return task_db.to_pydantic()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to update task {task_id}: {type(e).__name__}: {str(e)}")
            raise StoreError(f"Failed to update task: {e}") from e

    def delete(self, task_id: str) -> bool:
        """Delete a task by ID. Returns False if the user has no such task."""
        task_db = self._get_row(task_id)
        if not task_db:
            return False

        try:
            self.db.delete(task_db)
            self.db.commit()
            logger.debug(f"Deleted task {task_id}")
            return True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to delete task {task_id}: {type(e).__name__}: {str(e)}")
            raise StoreError(f"Failed to delete task: {e}") from e

    def mark_reminder_sent(self, task_id: str, when: datetime) -> Optional[Task]:
        """Record when a reminder email went out (used by the reminder job)."""
        task_db = self._get_row(task_id)
        if not task_db:
            return None

        task_db.last_reminder_sent = to_db_datetime(ensure_utc(when))
        try:
            self.db.commit()
            self.db.refresh(task_db)
            return task_db.to_pydantic()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Failed to mark reminder for task {task_id}: {type(e).__name__}: {str(e)}")
            raise StoreError(f"Failed to update task: {e}") from e
