"""Persistence models: ORM entities and mixins."""

from caseflow.infrastructure.persistence.models.approval import ApprovalChain, ApprovalStep
from caseflow.infrastructure.persistence.models.audit_log import AuditLog
from caseflow.infrastructure.persistence.models.conditional_rule import ConditionalRule
from caseflow.infrastructure.persistence.models.dependency import TaskDependency
from caseflow.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    CuidMixin,
    TimestampMixin,
)
from caseflow.infrastructure.persistence.models.notification import Notification
from caseflow.infrastructure.persistence.models.parallel_group import ParallelTaskGroup
from caseflow.infrastructure.persistence.models.sla_rule import SLARule
from caseflow.infrastructure.persistence.models.task import Stage, Task
from caseflow.infrastructure.persistence.models.time_entry import TaskTimeEntry

__all__ = [
    "ApprovalChain",
    "ApprovalStep",
    "AuditLog",
    "ConditionalRule",
    "CreatedAtMixin",
    "CuidMixin",
    "Notification",
    "ParallelTaskGroup",
    "SLARule",
    "Stage",
    "Task",
    "TaskDependency",
    "TaskTimeEntry",
    "TimestampMixin",
]
