"""Application use cases: engine services composed from repository ports."""

from caseflow.application.use_cases.analytics import AnalyticsService
from caseflow.application.use_cases.approvals import ApprovalService
from caseflow.application.use_cases.audit import AuditTrailService
from caseflow.application.use_cases.conditions import ConditionalRuleService
from caseflow.application.use_cases.dependencies import DependencyService
from caseflow.application.use_cases.notifications import NotificationService
from caseflow.application.use_cases.parallel import ParallelGroupService
from caseflow.application.use_cases.reassignment import ReassignmentService
from caseflow.application.use_cases.sla import SLAService
from caseflow.application.use_cases.tasks import TaskService
from caseflow.application.use_cases.time_tracking import TimeTrackingService

__all__ = [
    "AnalyticsService",
    "ApprovalService",
    "AuditTrailService",
    "ConditionalRuleService",
    "DependencyService",
    "NotificationService",
    "ParallelGroupService",
    "ReassignmentService",
    "SLAService",
    "TaskService",
    "TimeTrackingService",
]
