"""Request handler for the assistant endpoint.

Reads the caller's tasks, asks the model what to do, applies the proposed
operations and assembles the response. Holds no state between requests.
"""

import os
import logging
from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional
from zoneinfo import ZoneInfo
from dotenv import load_dotenv

from basictodo.assistant.adapter import TaskAssistant
from basictodo.assistant.executor import OperationExecutor
from basictodo.database.repository import TaskRepository
from basictodo.models.chat import ChatRequest, ChatResponse

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Timezone used when the caller does not send one
DEFAULT_TIMEZONE = os.getenv("DEFAULT_TIMEZONE", "UTC")


def utc_clock() -> datetime:
    return datetime.now(timezone.utc)


class AssistantRequestHandler:
    """Handles one assistant chat request for an authenticated user."""

    def __init__(
        self,
        store: TaskRepository,
        assistant: TaskAssistant,
        clock: Callable[[], datetime] = utc_clock,
        default_timezone: Optional[str] = None,
    ):
        """Initialize the handler.

        Args:
            store: Task repository bound to the authenticated user
            assistant: Model adapter
            clock: Returns the current time (aware UTC)
            default_timezone: IANA name used when the request has none. Defaults to DEFAULT_TIMEZONE.
        """
        self.store = store
        self.assistant = assistant
        self.clock = clock
        self.default_timezone = default_timezone or DEFAULT_TIMEZONE
        self.executor = OperationExecutor(store)

    def resolve_timezone(self, name: Optional[str]) -> tzinfo:
        return ZoneInfo(name or self.default_timezone)

    def handle(self, request: ChatRequest) -> ChatResponse:
        """Run one assistant round-trip.

        Raises:
            StoreError: If the caller's tasks cannot be read
        """
        now = self.clock()
        tz = self.resolve_timezone(request.timezone)

        tasks = self.store.list()
        reply = self.assistant.propose(request.message, tasks, now, tz, history=request.history)
        report = self.executor.execute(reply.invocations, now, tz)

        failed = sum(1 for result in report.results if not result.success)
        if failed:
            logger.info(f"Assistant request for user {self.store.user_id}: {failed}/{report.attempted} operation(s) failed")

        return ChatResponse(
            response=reply.message,
            tool_results=report.results,
            executed_tools=report.attempted,
        )
