"""Application interfaces (ports): repository and service protocols.

Define contracts for infrastructure implementations (DIP).
No runtime imports from caseflow.infrastructure or caseflow.api.
"""

from caseflow.application.interfaces.repositories import (
    IApprovalRepository,
    IAuditLogRepository,
    IDependencyRepository,
    INotificationRepository,
    IParallelGroupRepository,
    ISLARuleRepository,
    IStageRepository,
    ITaskRepository,
    ITimeEntryRepository,
)
from caseflow.application.interfaces.services import (
    ICacheService,
    INotificationSink,
    IUnitOfWork,
)

__all__ = [
    "IApprovalRepository",
    "IAuditLogRepository",
    "ICacheService",
    "IDependencyRepository",
    "INotificationRepository",
    "INotificationSink",
    "IParallelGroupRepository",
    "ISLARuleRepository",
    "IStageRepository",
    "ITaskRepository",
    "ITimeEntryRepository",
    "IUnitOfWork",
]
