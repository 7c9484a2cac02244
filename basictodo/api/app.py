"""FastAPI web application for BasicTodo."""

import logging
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from basictodo.assistant.adapter import TaskAssistant
from basictodo.assistant.filters import TaskStats, summarize_tasks
from basictodo.assistant.handler import AssistantRequestHandler, DEFAULT_TIMEZONE, utc_clock
from basictodo.auth.dependencies import get_current_user
from basictodo.database.database import get_db, init_db
from basictodo.database.preference_repository import PreferenceRepository
from basictodo.database.repository import StoreError, TaskRepository
from basictodo.integrations.openai_client import OpenAIClient
from basictodo.models.chat import ChatRequest, ChatResponse
from basictodo.models.constants import DEFAULT_ORDER_BY
from basictodo.models.preference import Preference, PreferenceUpdate
from basictodo.models.task import Task, TaskCreate, TaskStatus, TaskUpdate
from basictodo.models.user import User

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="BasicTodo API",
    description="Task management with a conversational assistant",
    version="0.1.0",
    lifespan=lifespan,
)


# Response models
class TaskResponse(BaseModel):
    """Response wrapping a single task."""
    task: Task


class TaskListResponse(BaseModel):
    """Response for task listing."""
    tasks: List[Task]
    count: int


class PreferenceResponse(BaseModel):
    """Response wrapping the caller's reminder preferences."""
    preferences: Preference


# Error rendering: every error body is {"error": ...}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    details = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": "Invalid request format", "details": details},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    # Covers failures raised from dependencies, before any route body runs.
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {type(exc).__name__}: {str(exc)}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


# Dependencies
def get_task_repository(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TaskRepository:
    """Task store bound to the authenticated user."""
    return TaskRepository(db, current_user.id)


def get_preference_repository(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PreferenceRepository:
    return PreferenceRepository(db, current_user.id)


@lru_cache(maxsize=1)
def get_model_client() -> OpenAIClient:
    """Model client configured from the environment (one per process)."""
    return OpenAIClient()


def get_assistant_handler(
    store: TaskRepository = Depends(get_task_repository),
    client: OpenAIClient = Depends(get_model_client),
) -> AssistantRequestHandler:
    return AssistantRequestHandler(store, TaskAssistant(client), clock=utc_clock)


def _resolve_timezone(name: Optional[str]):
    try:
        return ZoneInfo(name or DEFAULT_TIMEZONE)
    except (ZoneInfoNotFoundError, ValueError):
        raise HTTPException(status_code=400, detail=f"Unknown timezone: {name}")


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.post("/ai-agent", response_model=ChatResponse)
def ai_agent(
    request: ChatRequest,
    handler: AssistantRequestHandler = Depends(get_assistant_handler),
):
    """Interpret a chat message, apply the operations the model chose and reply."""
    try:
        return handler.handle(request)
    except Exception as e:
        logger.error(f"AI agent request failed: {type(e).__name__}: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error")


@app.get("/tasks", response_model=TaskListResponse)
def list_tasks(
    status_filter: Optional[TaskStatus] = Query(None, alias="status"),
    order_by: str = Query(DEFAULT_ORDER_BY),
    direction: str = Query("desc", pattern="^(asc|desc)$"),
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
    store: TaskRepository = Depends(get_task_repository),
):
    """List the caller's tasks."""
    try:
        tasks = store.list(
            status=status_filter,
            order_by=order_by,
            descending=direction == "desc",
            limit=limit,
            offset=offset,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to list tasks: {str(e)}")
    return TaskListResponse(tasks=tasks, count=len(tasks))


@app.get("/tasks/stats", response_model=TaskStats)
def task_stats(
    timezone: Optional[str] = Query(None, description="IANA timezone for 'due today'"),
    store: TaskRepository = Depends(get_task_repository),
):
    """Counts of the caller's tasks (total, pending, done, due today, overdue)."""
    tz = _resolve_timezone(timezone)
    try:
        tasks = store.list()
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to load tasks: {str(e)}")
    return summarize_tasks(tasks, utc_clock(), tz)


@app.post("/tasks", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    fields: TaskCreate,
    store: TaskRepository = Depends(get_task_repository),
):
    """Create a task for the caller."""
    try:
        task = store.create(fields)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to create task: {str(e)}")
    return TaskResponse(task=task)


@app.get("/tasks/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, store: TaskRepository = Depends(get_task_repository)):
    """Get one of the caller's tasks."""
    try:
        task = store.get(task_id)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to get task: {str(e)}")
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return TaskResponse(task=task)


@app.put("/tasks/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    changes: TaskUpdate,
    store: TaskRepository = Depends(get_task_repository),
):
    """Partially update one of the caller's tasks."""
    try:
        task = store.update(task_id, changes)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to update task: {str(e)}")
    if task is None:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return TaskResponse(task=task)


@app.delete("/tasks/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: str, store: TaskRepository = Depends(get_task_repository)):
    """Delete one of the caller's tasks."""
    try:
        deleted = store.delete(task_id)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to delete task: {str(e)}")
    if not deleted:
        raise HTTPException(status_code=404, detail=f"Task not found: {task_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@app.get("/preferences", response_model=PreferenceResponse)
def get_preferences(store: PreferenceRepository = Depends(get_preference_repository)):
    """Get the caller's reminder preferences."""
    try:
        preferences = store.get()
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to load preferences: {str(e)}")
    if preferences is None:
        raise HTTPException(status_code=404, detail="Preferences not found")
    return PreferenceResponse(preferences=preferences)


@app.put("/preferences", response_model=PreferenceResponse)
def update_preferences(
    changes: PreferenceUpdate,
    store: PreferenceRepository = Depends(get_preference_repository),
):
    """Update the caller's reminder preferences."""
    try:
        preferences = store.update(changes)
    except StoreError as e:
        raise HTTPException(status_code=500, detail=f"Failed to update preferences: {str(e)}")
    if preferences is None:
        raise HTTPException(status_code=404, detail="Preferences not found")
    return PreferenceResponse(preferences=preferences)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
