"""Persistence repositories: SQLAlchemy implementations of application ports."""

from caseflow.infrastructure.persistence.repositories.approval_repo import ApprovalRepository
from caseflow.infrastructure.persistence.repositories.audit_log_repo import AuditLogRepository
from caseflow.infrastructure.persistence.repositories.conditional_rule_repo import (
    ConditionalRuleRepository,
)
from caseflow.infrastructure.persistence.repositories.dependency_repo import DependencyRepository
from caseflow.infrastructure.persistence.repositories.notification_repo import (
    NotificationRepository,
)
from caseflow.infrastructure.persistence.repositories.parallel_group_repo import (
    ParallelGroupRepository,
)
from caseflow.infrastructure.persistence.repositories.sla_rule_repo import SLARuleRepository
from caseflow.infrastructure.persistence.repositories.task_repo import (
    StageRepository,
    TaskRepository,
)
from caseflow.infrastructure.persistence.repositories.time_entry_repo import (
    TimeEntryRepository,
)

__all__ = [
    "ApprovalRepository",
    "AuditLogRepository",
    "ConditionalRuleRepository",
    "DependencyRepository",
    "NotificationRepository",
    "ParallelGroupRepository",
    "SLARuleRepository",
    "StageRepository",
    "TaskRepository",
    "TimeEntryRepository",
]
