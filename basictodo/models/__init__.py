"""Data models for BasicTodo."""

from basictodo.models.task import Task, TaskCreate, TaskUpdate, TaskStatus, TaskPriority, TaskCategory
from basictodo.models.preference import Preference, PreferenceUpdate
from basictodo.models.user import User
from basictodo.models.chat import (
    ChatRole,
    ChatTurn,
    ChatRequest,
    ChatResponse,
    OperationInvocation,
    OperationResult,
)

__all__ = [
    "Task",
    "TaskCreate",
    "TaskUpdate",
    "TaskStatus",
    "TaskPriority",
    "TaskCategory",
    "Preference",
    "PreferenceUpdate",
    "User",
    "ChatRole",
    "ChatTurn",
    "ChatRequest",
    "ChatResponse",
    "OperationInvocation",
    "OperationResult",
]
