"""Domain exceptions for the workflow engine.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. The API
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class WorkflowEngineException(Exception):
    """Base exception for all workflow engine errors.

    Every engine failure carries a machine-readable code so callers can
    distinguish error kinds without parsing messages.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id, cycle).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON error body returned by the API."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(WorkflowEngineException):
    """Raised when input validation fails (e.g. invalid range or duplicate)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        **details_extra: Any,
    ) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
            **details_extra: Optional keys merged into details.
        """
        details: dict[str, Any] = {"field": field} if field else {}
        details.update(details_extra)
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(WorkflowEngineException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'task', 'approval_chain').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class CycleDetectedException(WorkflowEngineException):
    """Raised when a blocking dependency would close a cycle."""

    def __init__(self, task_id: str, cycle: list[str]) -> None:
        """Initialize with the task being updated and the offending path.

        Args:
            task_id: Task whose dependency set was being replaced.
            cycle: Task ids along the cycle, starting and ending at task_id.
        """
        super().__init__(
            f"Circular dependency detected for task {task_id}: {' -> '.join(cycle)}",
            "CYCLE_DETECTED",
            {"task_id": task_id, "cycle": cycle},
        )


class TaskBlockedException(WorkflowEngineException):
    """Raised when a task cannot start because blocking dependencies are not done."""

    def __init__(self, task_id: str, blocked_by: list[str]) -> None:
        super().__init__(
            f"Task {task_id} is blocked by {len(blocked_by)} unfinished task(s)",
            "TASK_BLOCKED",
            {"task_id": task_id, "blocked_by": blocked_by},
        )


class NotCurrentApproverException(WorkflowEngineException):
    """Raised when someone other than the current step's approver acts on a chain."""

    def __init__(self, task_id: str, approver_id: str, expected_approver_id: str) -> None:
        """Initialize with the acting and expected approvers.

        Args:
            task_id: Task the approval chain belongs to.
            approver_id: User who attempted the action.
            expected_approver_id: Approver of the current step.
        """
        super().__init__(
            f"User {approver_id} is not the current approver for task {task_id}",
            "NOT_CURRENT_APPROVER",
            {
                "task_id": task_id,
                "approver_id": approver_id,
                "expected_approver_id": expected_approver_id,
            },
        )


class ChainNotPendingException(WorkflowEngineException):
    """Raised when acting on an approval chain that already reached a terminal status."""

    def __init__(self, task_id: str, status: str) -> None:
        super().__init__(
            f"Approval chain for task {task_id} is already {status}",
            "CHAIN_NOT_PENDING",
            {"task_id": task_id, "status": status},
        )


class NoRuleConfiguredException(WorkflowEngineException):
    """Raised when no SLA rule matches a task and defaults were not requested."""

    def __init__(self, priority: str, scope: str | None = None) -> None:
        """Initialize with the priority (and optional scope) that had no rule.

        Args:
            priority: Task priority that was looked up.
            scope: Case id tried before the global rule, if any.
        """
        super().__init__(
            f"No SLA rule configured for priority {priority}",
            "NO_RULE_CONFIGURED",
            {"priority": priority, "scope": scope},
        )


class ConflictRetryException(WorkflowEngineException):
    """Raised when a concurrent request won a versioned update (optimistic lock)."""

    def __init__(self, entity_type: str, entity_id: str | None = None) -> None:
        super().__init__(
            f"{entity_type} was updated by another request; retry.",
            "CONFLICT_RETRY",
            {"entity_type": entity_type, "entity_id": entity_id},
        )
