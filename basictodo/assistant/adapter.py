"""Language-model adapter for the task assistant.

Builds the context prompt, sends one function-calling request and turns the
reply into a message plus a list of proposed invocations. Nothing here touches
the task store.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Any, Dict, Iterable, List, Optional, Sequence

from basictodo.assistant.catalog import tool_descriptors
from basictodo.assistant.filters import summarize_tasks
from basictodo.assistant.prompts import (
    ACTIONS_ONLY_MESSAGE,
    EMPTY_REPLY_MESSAGE,
    FALLBACK_MESSAGE,
    NO_TASKS_LINE,
    SYSTEM_PROMPT_TEMPLATE,
)
from basictodo.integrations.openai_client import OpenAIClient, RawToolCall, UpstreamModelError
from basictodo.models.chat import ChatTurn, OperationInvocation
from basictodo.models.constants import PROMPT_TASK_LIMIT
from basictodo.models.task import Task, ensure_utc

logger = logging.getLogger(__name__)


@dataclass
class AssistantReply:
    """Reply text plus the invocations the model proposed, in model order."""

    message: str
    invocations: List[OperationInvocation] = field(default_factory=list)


def _zone_name(tz: tzinfo) -> str:
    return getattr(tz, "key", None) or str(tz)


def _format_task_line(task: Task, tz: tzinfo) -> str:
    due = "no due date"
    if task.due_at is not None:
        due = ensure_utc(task.due_at).astimezone(tz).isoformat(timespec="minutes")
    return f"- {task.id} | {task.title} | {task.status} | {due}"


def build_system_prompt(tasks: Sequence[Task], now: datetime, tz: tzinfo) -> str:
    """Render the system prompt for the caller's current task set.

    Args:
        tasks: The caller's tasks, most recent first
        now: Request time
        tz: Caller's timezone

    Returns:
        System prompt text with context counts and a short task listing
    """
    stats = summarize_tasks(tasks, now, tz)
    listed = [_format_task_line(task, tz) for task in list(tasks)[:PROMPT_TASK_LIMIT]]
    return SYSTEM_PROMPT_TEMPLATE.format(
        total=stats.total,
        pending=stats.pending,
        done=stats.done,
        due_today=stats.due_today,
        overdue=stats.overdue,
        now=ensure_utc(now).astimezone(tz).isoformat(timespec="seconds"),
        timezone=_zone_name(tz),
        task_list="\n".join(listed) if listed else NO_TASKS_LINE,
    )


def parse_tool_arguments(raw: str) -> Any:
    """Decode a tool call's JSON arguments.

    Empty input is an empty bag. Malformed JSON is returned unchanged so the
    executor reports it as invalid arguments for that single invocation.
    """
    if not raw or not raw.strip():
        return {}
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Model returned tool arguments that are not valid JSON")
        return raw


def to_invocation(call: RawToolCall) -> OperationInvocation:
    return OperationInvocation(id=call.id, name=call.name, arguments=parse_tool_arguments(call.arguments))


class TaskAssistant:
    """Asks the language model what to do with a user message."""

    def __init__(self, client: OpenAIClient, tools: Optional[List[Dict[str, Any]]] = None):
        """Initialize the assistant.

        Args:
            client: Model client (anything with a ``complete(messages, tools)`` method)
            tools: Function descriptors to offer. Defaults to the full operation catalog.
        """
        self.client = client
        self.tools = tools if tools is not None else tool_descriptors()

    def build_messages(
        self,
        message: str,
        tasks: Sequence[Task],
        now: datetime,
        tz: tzinfo,
        history: Iterable[ChatTurn] = (),
    ) -> List[Dict[str, str]]:
        messages = [{"role": "system", "content": build_system_prompt(tasks, now, tz)}]
        for turn in history:
            messages.append({"role": turn.role, "content": turn.content})
        messages.append({"role": "user", "content": message})
        return messages

    def propose(
        self,
        message: str,
        tasks: Sequence[Task],
        now: datetime,
        tz: tzinfo,
        history: Iterable[ChatTurn] = (),
    ) -> AssistantReply:
        """Send the message with context and return the model's proposal.

        Never raises: any model failure yields the fallback message and no
        invocations.
        """
        messages = self.build_messages(message, tasks, now, tz, history)
        try:
            reply = self.client.complete(messages, self.tools)
        except UpstreamModelError as e:
            logger.warning(f"Task assistant unavailable: {str(e)}")
            return AssistantReply(message=FALLBACK_MESSAGE)
        except Exception as e:
            logger.error(f"Unexpected model client failure: {type(e).__name__}")
            return AssistantReply(message=FALLBACK_MESSAGE)

        invocations = [to_invocation(call) for call in reply.tool_calls]
        text = (reply.content or "").strip()
        if not text:
            text = ACTIONS_ONLY_MESSAGE if invocations else EMPTY_REPLY_MESSAGE
        logger.info(f"Task assistant proposed {len(invocations)} operation(s)")
        return AssistantReply(message=text, invocations=invocations)
