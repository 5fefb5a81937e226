"""Shared enumerations for the workflow engine.

Used by domain rules, persistence models, schemas and API filters. Values
are the wire/storage strings.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class TaskStatus(_ValuesMixin, str, Enum):
    """Task lifecycle status."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    DONE = "done"


class TaskPriority(_ValuesMixin, str, Enum):
    """Task priority; selects the SLA rule."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class DependencyType(_ValuesMixin, str, Enum):
    """Blocking dependencies gate start; informational ones never do."""

    BLOCKING = "blocking"
    INFORMATIONAL = "informational"


class SLAState(_ValuesMixin, str, Enum):
    """SLA classification of a task at a point in time."""

    ON_TRACK = "on_track"
    WARNING = "warning"
    BREACHED = "breached"


class ApprovalStatus(_ValuesMixin, str, Enum):
    """Status of an approval chain or of one of its steps."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalAction(_ValuesMixin, str, Enum):
    """Decision an approver can take on the current step."""

    APPROVE = "approve"
    REJECT = "reject"


class CompletionRule(_ValuesMixin, str, Enum):
    """When a parallel group counts as complete."""

    ALL = "all"
    ANY = "any"
    PERCENTAGE = "percentage"


class NotificationType(_ValuesMixin, str, Enum):
    """Kinds of notification events produced by the engine."""

    TASK_ASSIGNED = "task_assigned"
    SLA_WARNING = "sla_warning"
    SLA_BREACH = "sla_breach"
    APPROVAL_REQUIRED = "approval_required"
    APPROVAL_COMPLETED = "approval_completed"
    STAGE_COMPLETED = "stage_completed"


class NotificationPriority(_ValuesMixin, str, Enum):
    """Delivery priority of a notification."""

    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    URGENT = "urgent"


class AuditEntityType(_ValuesMixin, str, Enum):
    """Entity kinds recorded in the audit trail."""

    TASK = "task"
    STAGE = "stage"
    WORKFLOW = "workflow"
    APPROVAL_CHAIN = "approval_chain"
    PARALLEL_GROUP = "parallel_group"
    SLA_RULE = "sla_rule"
    DEPENDENCY = "dependency"
    TIME_ENTRY = "time_entry"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action names written by engine operations."""

    TASK_CREATED = "task_created"
    STATUS_CHANGED = "status_changed"
    TASK_ARCHIVED = "task_archived"
    STAGE_CREATED = "stage_created"
    DEPENDENCIES_SET = "dependencies_set"
    SLA_RULE_SET = "sla_rule_set"
    SLA_RULE_DELETED = "sla_rule_deleted"
    SLA_STATE_CHANGED = "sla_state_changed"
    APPROVAL_CHAIN_CREATED = "approval_chain_created"
    APPROVAL_STEP_APPROVED = "approval_step_approved"
    APPROVAL_CHAIN_APPROVED = "approval_chain_approved"
    APPROVAL_CHAIN_REJECTED = "approval_chain_rejected"
    PARALLEL_GROUP_CREATED = "parallel_group_created"
    PARALLEL_MEMBER_REMOVED = "parallel_member_removed"
    TASK_REASSIGNED = "task_reassigned"
    TIME_ENTRY_STARTED = "time_entry_started"
    TIME_ENTRY_STOPPED = "time_entry_stopped"
    CONDITIONAL_RULE_ADDED = "conditional_rule_added"
    CONDITIONAL_RULE_TRIGGERED = "conditional_rule_triggered"
    STAGE_SKIPPED = "stage_skipped"
    PRIORITY_CHANGED = "priority_changed"


class ConditionOperator(_ValuesMixin, str, Enum):
    """Comparison applied to one context field by a conditional rule."""

    EQUALS = "equals"
    CONTAINS = "contains"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"


class ConditionalAction(_ValuesMixin, str, Enum):
    """What a conditional rule does to its stage when the condition holds."""

    SKIP_STAGE = "skip_stage"
    ADD_TASK = "add_task"
    ASSIGN_TO = "assign_to"
    SET_PRIORITY = "set_priority"
    NOTIFY = "notify"
