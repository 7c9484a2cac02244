"""Pure in-memory task predicates relative to the current time.

All functions take ``now`` explicitly; nothing here reads the clock or the store.
"""

from datetime import datetime, time, timedelta, tzinfo
from enum import Enum
from typing import Iterable, List, Optional, Tuple
from pydantic import BaseModel

from basictodo.models.task import Task, TaskStatus, ensure_utc


class DueFilter(str, Enum):
    """Classification of a task's due date relative to now."""
    TODAY = "today"
    OVERDUE = "overdue"
    UPCOMING = "upcoming"


class TaskStats(BaseModel):
    """Counts used for the assistant context and the stats endpoint."""

    total: int = 0
    pending: int = 0
    done: int = 0
    due_today: int = 0
    overdue: int = 0


def local_day_bounds(now: datetime, tz: tzinfo) -> Tuple[datetime, datetime]:
    """Start (inclusive) and end (exclusive) of ``now``'s calendar day in ``tz``."""
    local_date = ensure_utc(now).astimezone(tz).date()
    start = datetime.combine(local_date, time.min, tzinfo=tz)
    end = datetime.combine(local_date + timedelta(days=1), time.min, tzinfo=tz)
    return start, end


def _is_done(task: Task) -> bool:
    return task.status == TaskStatus.DONE


def is_due_today(task: Task, now: datetime, tz: tzinfo) -> bool:
    if task.due_at is None:
        return False
    start, end = local_day_bounds(now, tz)
    return start <= ensure_utc(task.due_at) < end


def is_overdue(task: Task, now: datetime) -> bool:
    if task.due_at is None or _is_done(task):
        return False
    return ensure_utc(task.due_at) < ensure_utc(now)


def is_upcoming(task: Task, now: datetime) -> bool:
    if task.due_at is None or _is_done(task):
        return False
    return ensure_utc(task.due_at) > ensure_utc(now)


def matches_search(task: Task, term: str) -> bool:
    """Case-insensitive substring match over title or description."""
    needle = term.lower()
    if needle in task.title.lower():
        return True
    return bool(task.description) and needle in task.description.lower()


def filter_tasks(
    tasks: Iterable[Task],
    now: datetime,
    tz: tzinfo,
    due_filter: Optional[DueFilter] = None,
    search: Optional[str] = None,
) -> List[Task]:
    """Apply the due filter and search to an already-fetched task list, keeping order."""
    result = list(tasks)
    if due_filter == DueFilter.TODAY:
        result = [t for t in result if is_due_today(t, now, tz)]
    elif due_filter == DueFilter.OVERDUE:
        result = [t for t in result if is_overdue(t, now)]
    elif due_filter == DueFilter.UPCOMING:
        result = [t for t in result if is_upcoming(t, now)]

    if search:
        result = [t for t in result if matches_search(t, search)]
    return result


def summarize_tasks(tasks: Iterable[Task], now: datetime, tz: tzinfo) -> TaskStats:
    """Count total/pending/done/due-today/overdue tasks."""
    stats = TaskStats()
    for task in tasks:
        stats.total += 1
        if _is_done(task):
            stats.done += 1
        else:
            stats.pending += 1
        if is_due_today(task, now, tz):
            stats.due_today += 1
        if is_overdue(task, now):
            stats.overdue += 1
    return stats
