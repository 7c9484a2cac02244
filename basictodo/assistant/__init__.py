"""Task assistant for BasicTodo."""

from basictodo.assistant.catalog import CATALOG, Operation, OperationContext, get_operation, tool_descriptors
from basictodo.assistant.adapter import TaskAssistant, AssistantReply
from basictodo.assistant.executor import OperationExecutor, ExecutionReport
from basictodo.assistant.handler import AssistantRequestHandler
from basictodo.assistant.filters import DueFilter, TaskStats, filter_tasks, summarize_tasks

__all__ = [
    "CATALOG",
    "Operation",
    "OperationContext",
    "get_operation",
    "tool_descriptors",
    "TaskAssistant",
    "AssistantReply",
    "OperationExecutor",
    "ExecutionReport",
    "AssistantRequestHandler",
    "DueFilter",
    "TaskStats",
    "filter_tasks",
    "summarize_tasks",
]
