"""Assistant-level errors.

These never escape a request: the executor folds each of them into a failed
OperationResult.
"""


class OperationError(Exception):
    """Base class for per-invocation failures."""


class UnknownOperationError(OperationError):
    """The model proposed an operation that is not in the catalog."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown operation: {name}")


class TaskNotFoundError(OperationError):
    """The referenced task does not exist for the current user."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")
