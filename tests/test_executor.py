"""Tests for the operation executor."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

from basictodo.assistant.executor import OperationExecutor
from basictodo.database.repository import StoreError, TaskRepository
from basictodo.models.chat import OperationInvocation
from basictodo.models.task import TaskCreate, TaskStatus


def _call(name, arguments=None, call_id=None):
    return OperationInvocation(id=call_id or f"call_{name}", name=name, arguments=arguments or {})


@pytest.fixture
def executor(task_repository):
    return OperationExecutor(task_repository)


class TestExecutorValidation:
    """Invocations that never reach the store."""

    def test_unknown_operation(self, executor, task_repository, fixed_now):
        report = executor.execute([_call("fly_to_the_moon", {"speed": 9000})], fixed_now, timezone.utc)

        assert report.attempted == 1
        result = report.results[0]
        assert result.success is False
        assert result.tool == "fly_to_the_moon"
        assert result.error == "Unknown operation: fly_to_the_moon"
        assert task_repository.list() == []

    def test_missing_required_argument(self, executor, task_repository, fixed_now):
        report = executor.execute([_call("create_task", {"description": "no title"})], fixed_now, timezone.utc)

        result = report.results[0]
        assert result.success is False
        assert result.error.startswith("Invalid arguments for create_task:")
        assert "title" in result.error
        assert task_repository.list() == []

    def test_malformed_arguments(self, executor, fixed_now):
        report = executor.execute([_call("create_task", "{\"title\": ")], fixed_now, timezone.utc)

        assert report.results[0].success is False
        assert report.results[0].error.startswith("Invalid arguments for create_task")

    def test_out_of_range_duration(self, executor, fixed_now):
        report = executor.execute(
            [_call("create_task", {"title": "Nap", "estimated_duration_minutes": 5000})],
            fixed_now,
            timezone.utc,
        )
        assert report.results[0].success is False
        assert "estimated_duration_minutes" in report.results[0].error


class TestExecutorOperations:
    """Invocations applied to a real store."""

    def test_create_task_defaults(self, executor, task_repository, fixed_now, test_user_id):
        report = executor.execute([_call("create_task", {"title": "Buy milk"})], fixed_now, timezone.utc)

        result = report.results[0]
        assert result.success is True
        assert result.data["title"] == "Buy milk"
        assert result.data["status"] == "pending"
        assert result.data["user_id"] == test_user_id
        assert result.data["priority"] is None
        assert result.data["tags"] == []

    def test_create_then_read_back(self, executor, task_repository, fixed_now):
        report = executor.execute(
            [_call("create_task", {"title": "Dentist", "priority": "high", "category": "health"})],
            fixed_now,
            timezone.utc,
        )

        stored = task_repository.get(report.results[0].data["id"])
        assert stored.title == "Dentist"
        assert stored.priority == "high"
        assert stored.category == "health"

    def test_naive_due_date_uses_caller_timezone(self, executor, task_repository, fixed_now, new_york):
        report = executor.execute(
            [_call("create_task", {"title": "Meeting", "due_at": "2025-01-21T15:00:00"})],
            fixed_now,
            new_york,
        )

        stored = task_repository.get(report.results[0].data["id"])
        assert stored.due_at == datetime(2025, 1, 21, 20, 0, tzinfo=timezone.utc)

    def test_update_task(self, executor, task_repository, fixed_now):
        task = task_repository.create(TaskCreate(title="Report", description="draft"))

        report = executor.execute(
            [_call("update_task", {"task_id": task.id, "status": "done"})], fixed_now, timezone.utc
        )

        assert report.results[0].success is True
        stored = task_repository.get(task.id)
        assert stored.status == TaskStatus.DONE
        assert stored.description == "draft"

    def test_update_missing_task(self, executor, fixed_now):
        report = executor.execute(
            [_call("update_task", {"task_id": "nope", "title": "x"})], fixed_now, timezone.utc
        )

        assert report.results[0].success is False
        assert report.results[0].error == "Task not found: nope"

    def test_update_other_users_task_is_not_found(self, executor, other_task_repository, fixed_now):
        theirs = other_task_repository.create(TaskCreate(title="Theirs"))

        report = executor.execute(
            [_call("update_task", {"task_id": theirs.id, "title": "Mine now"})], fixed_now, timezone.utc
        )

        assert report.results[0].success is False
        assert other_task_repository.get(theirs.id).title == "Theirs"

    def test_delete_task(self, executor, task_repository, fixed_now):
        task = task_repository.create(TaskCreate(title="Old"))

        report = executor.execute([_call("delete_task", {"task_id": task.id})], fixed_now, timezone.utc)

        assert report.results[0].data == {"deleted": True, "task_id": task.id}
        assert task_repository.get(task.id) is None

    def test_delete_missing_task(self, executor, fixed_now):
        report = executor.execute([_call("delete_task", {"task_id": "gone"})], fixed_now, timezone.utc)
        assert report.results[0].error == "Task not found: gone"

    def test_list_tasks_overdue(self, executor, task_repository, fixed_now):
        late = task_repository.create(TaskCreate(title="Late", due_at=fixed_now - timedelta(hours=3)))
        task_repository.create(TaskCreate(title="Future", due_at=fixed_now + timedelta(days=1)))
        task_repository.create(TaskCreate(title="Undated"))

        report = executor.execute([_call("list_tasks", {"due_filter": "overdue"})], fixed_now, timezone.utc)

        assert [t["id"] for t in report.results[0].data] == [late.id]

    def test_list_tasks_search_and_status(self, executor, task_repository, fixed_now):
        done = task_repository.create(TaskCreate(title="Buy milk"))
        executor.execute([_call("update_task", {"task_id": done.id, "status": "done"})], fixed_now, timezone.utc)
        task_repository.create(TaskCreate(title="Buy bread"))

        report = executor.execute(
            [_call("list_tasks", {"status": "done", "search": "BUY"})], fixed_now, timezone.utc
        )
        assert [t["title"] for t in report.results[0].data] == ["Buy milk"]


class TestExecutorSequencing:
    """Ordering and failure isolation across invocations."""

    def test_results_follow_invocation_order_and_failures_do_not_abort(self, executor, task_repository, fixed_now):
        invocations = [
            _call("create_task", {"title": "First"}, call_id="a"),
            _call("update_task", {"task_id": "missing", "title": "x"}, call_id="b"),
            _call("unknown_op", {}, call_id="c"),
            _call("create_task", {"title": "Second"}, call_id="d"),
        ]

        report = executor.execute(invocations, fixed_now, timezone.utc)

        assert report.attempted == 4
        assert [r.id for r in report.results] == ["a", "b", "c", "d"]
        assert [r.success for r in report.results] == [True, False, False, True]
        assert sorted(t.title for t in task_repository.list()) == ["First", "Second"]

    def test_later_invocation_sees_earlier_effect(self, executor, task_repository, fixed_now):
        report = executor.execute(
            [
                _call("create_task", {"title": "Walk dog"}),
                _call("list_tasks", {"search": "dog"}),
            ],
            fixed_now,
            timezone.utc,
        )
        assert [t["title"] for t in report.results[1].data] == ["Walk dog"]

    def test_created_task_lists_back_unchanged(self, executor, fixed_now, new_york):
        arguments = {
            "title": "Quarterly taxes",
            "description": "File estimated payment",
            "due_at": "2025-04-15T17:00:00",
            "priority": "urgent",
            "category": "finance",
            "tags": ["irs", "money"],
            "estimated_duration_minutes": 90,
            "notes": "Use last year's worksheet",
        }

        report = executor.execute(
            [_call("create_task", arguments), _call("list_tasks", {})], fixed_now, new_york
        )

        created, listed = report.results
        assert created.success is True
        assert listed.data == [created.data]
        assert created.data["tags"] == ["irs", "money"]
        assert created.data["estimated_duration_minutes"] == 90

    def test_empty_invocation_list(self, executor, fixed_now):
        report = executor.execute([], fixed_now, timezone.utc)
        assert report.attempted == 0
        assert report.results == []


class TestExecutorStoreFailures:
    """Store errors become per-invocation failures."""

    def test_store_error(self, fixed_now):
        store = MagicMock(spec=TaskRepository)
        store.create.side_effect = StoreError("Failed to create task: database is locked")

        report = OperationExecutor(store).execute([_call("create_task", {"title": "x"})], fixed_now, timezone.utc)

        assert report.results[0].success is False
        assert report.results[0].error == "Failed to create task: database is locked"

    def test_unexpected_error(self, fixed_now):
        store = MagicMock(spec=TaskRepository)
        store.list.side_effect = RuntimeError("boom")

        report = OperationExecutor(store).execute(
            [_call("list_tasks"), _call("delete_task", {"task_id": "t1"})], fixed_now, timezone.utc
        )

        assert report.results[0].error == "Unexpected error executing list_tasks"
        assert report.results[1].success is True
