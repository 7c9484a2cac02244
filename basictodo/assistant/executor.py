"""Validates and applies operations proposed by the model.

Each invocation is handled on its own: a failure is recorded in its result and
the remaining invocations still run.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from typing import Dict, Iterable, List, Optional

from pydantic import ValidationError

from basictodo.assistant.catalog import CATALOG, Operation, OperationContext, get_operation
from basictodo.assistant.errors import OperationError
from basictodo.database.repository import StoreError, TaskRepository
from basictodo.models.chat import OperationInvocation, OperationResult

logger = logging.getLogger(__name__)


@dataclass
class ExecutionReport:
    """Results in invocation order, plus how many invocations were attempted."""

    results: List[OperationResult] = field(default_factory=list)
    attempted: int = 0


def format_validation_error(error: ValidationError) -> str:
    """One line per failing field, e.g. ``title: Field required``."""
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ())) or "arguments"
        parts.append(f"{location}: {item.get('msg', 'invalid value')}")
    return "; ".join(parts)


class OperationExecutor:
    """Runs invocations against one user's task store."""

    def __init__(self, store: TaskRepository, catalog: Optional[Dict[str, Operation]] = None):
        self.store = store
        self.catalog = CATALOG if catalog is None else catalog

    def execute(
        self,
        invocations: Iterable[OperationInvocation],
        now: datetime,
        tz: tzinfo,
    ) -> ExecutionReport:
        """Execute invocations sequentially, in the order given."""
        context = OperationContext(store=self.store, now=now, tz=tz)
        report = ExecutionReport()
        for invocation in invocations:
            report.attempted += 1
            report.results.append(self._execute_one(invocation, context))
        return report

    def _execute_one(self, invocation: OperationInvocation, context: OperationContext) -> OperationResult:
        name = invocation.name
        try:
            operation = get_operation(name, self.catalog)
        except OperationError as e:
            logger.warning(f"Rejected invocation {invocation.id}: {str(e)}")
            return self._failure(invocation, str(e))

        try:
            arguments = operation.parse_arguments(invocation.arguments)
        except ValidationError as e:
            message = f"Invalid arguments for {name}: {format_validation_error(e)}"
            logger.warning(f"Rejected invocation {invocation.id}: {message}")
            return self._failure(invocation, message)

        try:
            data = operation.run(context, arguments)
        except (OperationError, StoreError) as e:
            logger.warning(f"Operation {name} failed: {str(e)}")
            return self._failure(invocation, str(e))
        except Exception as e:
            logger.error(f"Unexpected error executing {name}: {type(e).__name__}: {str(e)}")
            return self._failure(invocation, f"Unexpected error executing {name}")

        logger.debug(f"Operation {name} succeeded for invocation {invocation.id}")
        return OperationResult(id=invocation.id, tool=name, success=True, data=data)

    @staticmethod
    def _failure(invocation: OperationInvocation, message: str) -> OperationResult:
        return OperationResult(id=invocation.id, tool=invocation.name, success=False, error=message)
