"""Tests for due-date filters and task summaries."""

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from basictodo.assistant.filters import (
    DueFilter,
    filter_tasks,
    is_due_today,
    is_overdue,
    is_upcoming,
    local_day_bounds,
    summarize_tasks,
)
from basictodo.models.task import Task, TaskStatus


@pytest.fixture
def make_task(test_user_id, fixed_now):
    """Build a Task without touching the database."""
    def _make(title="Task", due_at=None, status=TaskStatus.PENDING, description=None):
        return Task(
            id=str(uuid.uuid4()),
            user_id=test_user_id,
            title=title,
            description=description,
            due_at=due_at,
            status=status,
            created_at=fixed_now - timedelta(days=1),
            updated_at=fixed_now - timedelta(days=1),
        )
    return _make


class TestDueFilters:
    """Test today/overdue/upcoming classification."""

    def test_local_day_bounds_follow_timezone(self, fixed_now, new_york):
        start, end = local_day_bounds(fixed_now, new_york)

        assert start == datetime(2025, 1, 20, 5, 0, tzinfo=timezone.utc)
        assert end == datetime(2025, 1, 21, 5, 0, tzinfo=timezone.utc)

    def test_due_today_uses_local_calendar_day(self, make_task, fixed_now, new_york):
        """23:30 in New York is tomorrow in UTC but still today for the caller."""
        late_evening = make_task(due_at=datetime(2025, 1, 21, 4, 30, tzinfo=timezone.utc))

        assert is_due_today(late_evening, fixed_now, new_york) is True
        assert is_due_today(late_evening, fixed_now, timezone.utc) is False

    def test_due_today_counts_completed_tasks(self, make_task, fixed_now):
        done = make_task(due_at=fixed_now + timedelta(hours=1), status=TaskStatus.DONE)
        assert is_due_today(done, fixed_now, timezone.utc) is True

    def test_overdue_excludes_done_and_undated(self, make_task, fixed_now):
        past = fixed_now - timedelta(hours=1)

        assert is_overdue(make_task(due_at=past), fixed_now) is True
        assert is_overdue(make_task(due_at=past, status=TaskStatus.DONE), fixed_now) is False
        assert is_overdue(make_task(), fixed_now) is False

    def test_due_exactly_now_is_neither_overdue_nor_upcoming(self, make_task, fixed_now):
        task = make_task(due_at=fixed_now)

        assert is_overdue(task, fixed_now) is False
        assert is_upcoming(task, fixed_now) is False

    def test_upcoming_excludes_done(self, make_task, fixed_now):
        future = fixed_now + timedelta(days=3)

        assert is_upcoming(make_task(due_at=future), fixed_now) is True
        assert is_upcoming(make_task(due_at=future, status=TaskStatus.DONE), fixed_now) is False


class TestFilterTasks:
    """Test combined filtering over a fetched task list."""

    def test_filter_keeps_input_order(self, make_task, fixed_now):
        tasks = [
            make_task("b", due_at=fixed_now - timedelta(days=2)),
            make_task("a", due_at=fixed_now - timedelta(days=1)),
            make_task("c", due_at=fixed_now + timedelta(days=1)),
        ]

        overdue = filter_tasks(tasks, fixed_now, timezone.utc, due_filter=DueFilter.OVERDUE)
        assert [t.title for t in overdue] == ["b", "a"]

    def test_search_matches_title_or_description_case_insensitive(self, make_task, fixed_now):
        tasks = [
            make_task("Buy MILK"),
            make_task("Groceries", description="milk and eggs"),
            make_task("Call bank"),
        ]

        found = filter_tasks(tasks, fixed_now, timezone.utc, search="milk")
        assert [t.title for t in found] == ["Buy MILK", "Groceries"]

    def test_search_and_due_filter_combine(self, make_task, fixed_now):
        tasks = [
            make_task("Pay rent", due_at=fixed_now - timedelta(hours=2)),
            make_task("Pay phone bill", due_at=fixed_now + timedelta(days=2)),
        ]

        found = filter_tasks(tasks, fixed_now, timezone.utc, due_filter=DueFilter.UPCOMING, search="pay")
        assert [t.title for t in found] == ["Pay phone bill"]

    def test_no_filters_returns_everything(self, make_task, fixed_now):
        tasks = [make_task("one"), make_task("two")]
        assert filter_tasks(tasks, fixed_now, timezone.utc) == tasks


class TestSummarizeTasks:
    """Test context counts."""

    def test_counts(self, make_task, fixed_now):
        tasks = [
            make_task("overdue", due_at=fixed_now - timedelta(hours=1)),
            make_task("later today", due_at=fixed_now + timedelta(hours=2)),
            make_task("done today", due_at=fixed_now + timedelta(hours=3), status=TaskStatus.DONE),
            make_task("undated"),
        ]

        stats = summarize_tasks(tasks, fixed_now, timezone.utc)

        assert stats.total == 4
        assert stats.pending == 3
        assert stats.done == 1
        assert stats.due_today == 3
        assert stats.overdue == 1

    def test_empty(self, fixed_now):
        stats = summarize_tasks([], fixed_now, timezone.utc)
        assert stats.total == 0
        assert stats.overdue == 0
