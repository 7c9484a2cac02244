"""Operation catalog for the task assistant.

The catalog is the single registry of actions the language model may request.
Each operation pairs a Pydantic argument model (the authoritative parameter
schema, also rendered as the function descriptor sent to the model) with the
function that runs it against the caller's task store.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, Field, field_validator

from basictodo.assistant.errors import TaskNotFoundError, UnknownOperationError
from basictodo.assistant.filters import DueFilter, filter_tasks
from basictodo.database.repository import TaskRepository
from basictodo.models.task import TaskCreate, TaskUpdate, TaskStatus, ensure_utc


# Argument models -----------------------------------------------------------

class CreateTaskArgs(TaskCreate):
    """Arguments of create_task. Status is always pending on creation."""


class UpdateTaskArgs(TaskUpdate):
    """Arguments of update_task: the task id plus any mutable field."""

    task_id: str = Field(..., min_length=1, description="The ID of the task to update")


class DeleteTaskArgs(BaseModel):
    """Arguments of delete_task."""

    task_id: str = Field(..., min_length=1, description="The ID of the task to delete")

    class Config:
        """Pydantic configuration."""
        extra = "forbid"


class ListTasksArgs(BaseModel):
    """Arguments of list_tasks. All filters are optional."""

    status: Optional[TaskStatus] = Field(None, description="Filter tasks by status")
    search: Optional[str] = Field(None, description="Search tasks by title or description")
    due_filter: Optional[DueFilter] = Field(None, description="Filter tasks by due date")

    class Config:
        """Pydantic configuration."""
        extra = "forbid"

    @field_validator("search")
    @classmethod
    def _blank_search_is_none(cls, v):
        if v is None:
            return None
        return v.strip() or None


# Execution ----------------------------------------------------------------

@dataclass(frozen=True)
class OperationContext:
    """What an operation may touch: the caller's store and the request clock."""

    store: TaskRepository
    now: datetime
    tz: tzinfo


def _dump_task(task) -> Dict[str, Any]:
    return task.model_dump(mode="json")


def _run_create_task(ctx: OperationContext, args: CreateTaskArgs):
    fields = TaskCreate(**args.model_dump(exclude_none=True, exclude={"due_at"}),
                        due_at=ensure_utc(args.due_at, ctx.tz))
    return _dump_task(ctx.store.create(fields))


def _run_update_task(ctx: OperationContext, args: UpdateTaskArgs):
    values = args.model_dump(exclude_unset=True, exclude={"task_id"})
    if values.get("due_at") is not None:
        values["due_at"] = ensure_utc(values["due_at"], ctx.tz)
    task = ctx.store.update(args.task_id, TaskUpdate(**values))
    if task is None:
        raise TaskNotFoundError(args.task_id)
    return _dump_task(task)


def _run_delete_task(ctx: OperationContext, args: DeleteTaskArgs):
    if not ctx.store.delete(args.task_id):
        raise TaskNotFoundError(args.task_id)
    return {"deleted": True, "task_id": args.task_id}


def _run_list_tasks(ctx: OperationContext, args: ListTasksArgs):
    tasks = ctx.store.list(status=args.status)
    tasks = filter_tasks(tasks, ctx.now, ctx.tz, due_filter=args.due_filter, search=args.search)
    return [_dump_task(task) for task in tasks]


# Registry -----------------------------------------------------------------

@dataclass(frozen=True)
class Operation:
    """One callable action."""

    name: str
    description: str
    arguments: Type[BaseModel]
    run: Callable[[OperationContext, Any], Any]

    def parse_arguments(self, raw: Any) -> BaseModel:
        """Validate and narrow an untrusted argument bag. Raises pydantic.ValidationError."""
        return self.arguments.model_validate(raw)

    def descriptor(self) -> Dict[str, Any]:
        """OpenAI function-tool descriptor for this operation."""
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": _inline_schema(self.arguments.model_json_schema()),
            },
        }


def _inline_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten a Pydantic JSON schema into the plain form function-calling APIs expect.

    Resolves ``$ref``s against ``$defs``, collapses ``Optional[X]`` unions to ``X``
    and drops titles and null defaults.
    """
    defs = schema.get("$defs", {})

    def resolve(node):
        if isinstance(node, list):
            return [resolve(item) for item in node]
        if not isinstance(node, dict):
            return node
        if "$ref" in node:
            target = copy.deepcopy(defs[node["$ref"].split("/")[-1]])
            extra = {k: v for k, v in node.items() if k != "$ref"}
            return resolve({**target, **extra})
        out = {}
        for key, value in node.items():
            if key in ("$defs", "title"):
                continue
            if key == "default" and value is None:
                continue
            if key == "properties":
                # Property names are data, not schema keywords.
                out[key] = {name: resolve(prop) for name, prop in value.items()}
            else:
                out[key] = resolve(value)
        variants = out.get("anyOf")
        if variants is not None:
            non_null = [v for v in variants if v.get("type") != "null"]
            if len(non_null) == 1:
                del out["anyOf"]
                out = {**non_null[0], **out}
        return out

    flat = resolve(schema)
    flat.setdefault("required", [])
    return flat


CATALOG: Dict[str, Operation] = {
    op.name: op
    for op in (
        Operation(
            name="create_task",
            description="Create a new task for the user",
            arguments=CreateTaskArgs,
            run=_run_create_task,
        ),
        Operation(
            name="update_task",
            description="Update an existing task (title, description, status, due date, priority, "
                        "category, tags, estimated duration, notes)",
            arguments=UpdateTaskArgs,
            run=_run_update_task,
        ),
        Operation(
            name="delete_task",
            description="Delete a task",
            arguments=DeleteTaskArgs,
            run=_run_delete_task,
        ),
        Operation(
            name="list_tasks",
            description="List tasks with optional filters",
            arguments=ListTasksArgs,
            run=_run_list_tasks,
        ),
    )
}


def get_operation(name: str, catalog: Optional[Dict[str, Operation]] = None) -> Operation:
    """Look up an operation by name. Raises UnknownOperationError."""
    registry = CATALOG if catalog is None else catalog
    try:
        return registry[name]
    except (KeyError, TypeError):
        raise UnknownOperationError(str(name))


def tool_descriptors(catalog: Optional[Dict[str, Operation]] = None) -> List[Dict[str, Any]]:
    """All operations as function-tool descriptors, in registry order."""
    registry = CATALOG if catalog is None else catalog
    return [op.descriptor() for op in registry.values()]
