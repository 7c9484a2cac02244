"""Assistant chat request/response models for BasicTodo."""

from enum import Enum
from typing import Any, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from pydantic import BaseModel, Field, field_validator

from basictodo.models.constants import MESSAGE_MAX_LENGTH, MAX_HISTORY_TURNS


class ChatRole(str, Enum):
    """Role of a conversation turn."""
    USER = "user"
    ASSISTANT = "assistant"


class ChatTurn(BaseModel):
    """One earlier turn the caller resends for context (never persisted)."""

    role: ChatRole
    content: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH)

    class Config:
        """Pydantic configuration."""
        use_enum_values = True


class ChatRequest(BaseModel):
    """Inbound assistant request body."""

    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH, description="User message")
    history: List[ChatTurn] = Field(
        default_factory=list, max_length=MAX_HISTORY_TURNS, description="Earlier turns, oldest first"
    )
    timezone: Optional[str] = Field(
        None, description="Caller's IANA timezone, used for 'today' and naive due dates"
    )

    @field_validator("message")
    @classmethod
    def _validate_message(cls, v):
        if not v.strip():
            raise ValueError("Message is required")
        return v

    @field_validator("timezone")
    @classmethod
    def _validate_timezone(cls, v):
        if v is None:
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"Unknown timezone: {v}")
        return v


class OperationInvocation(BaseModel):
    """A call proposed by the model. ``arguments`` is untrusted and unvalidated."""

    id: str = Field(..., description="Correlation id supplied by the model")
    name: str = Field(..., description="Operation name as proposed by the model")
    arguments: Any = Field(default_factory=dict, description="Raw argument bag")


class OperationResult(BaseModel):
    """Outcome of one invocation."""

    id: str = Field(..., description="Correlation id of the invocation")
    tool: str = Field(..., description="Operation name")
    success: bool
    data: Any = None
    error: Optional[str] = None


class ChatResponse(BaseModel):
    """Assistant endpoint response body."""

    response: str
    tool_results: List[OperationResult] = Field(default_factory=list, alias="toolResults")
    executed_tools: int = Field(0, alias="executedTools")

    class Config:
        """Pydantic configuration."""
        populate_by_name = True
