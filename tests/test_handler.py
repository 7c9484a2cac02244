"""Tests for the assistant request handler."""

from datetime import timezone

import pytest

from basictodo.assistant.adapter import TaskAssistant
from basictodo.assistant.handler import AssistantRequestHandler
from basictodo.assistant.prompts import FALLBACK_MESSAGE
from basictodo.integrations.openai_client import ModelReply, RawToolCall, UpstreamModelError
from basictodo.models.chat import ChatRequest
from basictodo.models.task import TaskCreate


@pytest.fixture
def handler(task_repository, model_client, fixed_now):
    return AssistantRequestHandler(
        task_repository,
        TaskAssistant(model_client),
        clock=lambda: fixed_now,
        default_timezone="UTC",
    )


class TestAssistantRequestHandler:
    """End-to-end handling with a mocked model and a real store."""

    def test_reply_without_operations(self, handler, model_client):
        model_client.complete.return_value = ModelReply(content="Nothing to do.")

        response = handler.handle(ChatRequest(message="Hello"))

        assert response.response == "Nothing to do."
        assert response.tool_results == []
        assert response.executed_tools == 0

    def test_operations_are_applied(self, handler, model_client, task_repository):
        existing = task_repository.create(TaskCreate(title="Laundry"))
        model_client.complete.return_value = ModelReply(
            content="Marked laundry done and added groceries.",
            tool_calls=[
                RawToolCall(id="c1", name="update_task", arguments=f'{{"task_id": "{existing.id}", "status": "done"}}'),
                RawToolCall(id="c2", name="create_task", arguments='{"title": "Groceries"}'),
            ],
        )

        response = handler.handle(ChatRequest(message="Laundry is done, add groceries"))

        assert response.executed_tools == 2
        assert [r.success for r in response.tool_results] == [True, True]
        assert task_repository.get(existing.id).status == "done"
        assert {t.title for t in task_repository.list()} == {"Laundry", "Groceries"}

    def test_context_reflects_store(self, handler, model_client, task_repository):
        task = task_repository.create(TaskCreate(title="Visible in prompt"))

        handler.handle(ChatRequest(message="What do I have?"))

        system_prompt = model_client.complete.call_args.args[0][0]["content"]
        assert task.id in system_prompt
        assert "- Total tasks: 1" in system_prompt

    def test_request_timezone_is_used(self, handler, model_client, task_repository):
        model_client.complete.return_value = ModelReply(
            content="",
            tool_calls=[RawToolCall(id="c1", name="create_task", arguments='{"title": "Call", "due_at": "2025-01-21T09:00:00"}')],
        )

        response = handler.handle(ChatRequest(message="Call at 9 tomorrow", timezone="America/New_York"))

        stored = task_repository.get(response.tool_results[0].data["id"])
        assert stored.due_at.astimezone(timezone.utc).hour == 14

    def test_model_failure_returns_fallback(self, handler, model_client, task_repository):
        model_client.complete.side_effect = UpstreamModelError("Model API error: 503")

        response = handler.handle(ChatRequest(message="Add milk"))

        assert response.response == FALLBACK_MESSAGE
        assert response.executed_tools == 0
        assert task_repository.list() == []

    def test_response_serializes_with_camel_case_keys(self, handler, model_client):
        model_client.complete.return_value = ModelReply(content="Hi")

        body = handler.handle(ChatRequest(message="Hi")).model_dump(by_alias=True)

        assert set(body) == {"response", "toolResults", "executedTools"}
