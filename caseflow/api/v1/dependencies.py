"""Presentation-layer dependency injection (composition root).

Builds repositories and engine services per request from the request's
database session. Read routes get a plain session (get_db); write routes get
a session inside a transaction (get_db_transactional) that commits when the
route returns and rolls back on error. Routes depend only on these
dependencies, never on infrastructure directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from caseflow.application.use_cases import (
    AnalyticsService,
    ApprovalService,
    AuditTrailService,
    ConditionalRuleService,
    DependencyService,
    NotificationService,
    ParallelGroupService,
    ReassignmentService,
    SLAService,
    TaskService,
    TimeTrackingService,
)
from caseflow.application.interfaces.services import ICacheService, INotificationSink
from caseflow.core.config import Settings, get_settings
from caseflow.infrastructure.cache.keys import analytics_key
from caseflow.infrastructure.persistence.database import get_db, get_db_transactional
from caseflow.infrastructure.persistence.repositories import (
    ApprovalRepository,
    AuditLogRepository,
    ConditionalRuleRepository,
    DependencyRepository,
    NotificationRepository,
    ParallelGroupRepository,
    SLARuleRepository,
    StageRepository,
    TaskRepository,
    TimeEntryRepository,
)
from caseflow.infrastructure.persistence.transactions import SqlAlchemyUnitOfWork
from caseflow.shared.context import get_current_actor_id


@dataclass(frozen=True)
class EngineServices:
    """All engine services bound to one database session."""

    tasks: TaskService
    dependencies: DependencyService
    sla: SLAService
    approvals: ApprovalService
    parallel: ParallelGroupService
    reassignment: ReassignmentService
    time: TimeTrackingService
    notifications: NotificationService
    audit: AuditTrailService
    analytics: AnalyticsService
    conditions: ConditionalRuleService


def compose_services(
    db: AsyncSession,
    *,
    settings: Settings | None = None,
    sink: INotificationSink | None = None,
    cache: ICacheService | None = None,
) -> EngineServices:
    """Wire every engine service onto the given session.

    Used by the request dependencies below and directly by tests and
    background jobs that own their session.
    """
    settings = settings or get_settings()
    uow = SqlAlchemyUnitOfWork(db)
    task_repo = TaskRepository(db)
    stage_repo = StageRepository(db)
    time_repo = TimeEntryRepository(db)

    audit = AuditTrailService(AuditLogRepository(db))
    notifications = NotificationService(NotificationRepository(db), sink=sink)
    dependencies = DependencyService(task_repo, DependencyRepository(db), uow, audit)
    parallel = ParallelGroupService(
        task_repo, stage_repo, ParallelGroupRepository(db), audit, notifications
    )
    sla = SLAService(task_repo, SLARuleRepository(db), uow, audit, notifications)
    tasks = TaskService(task_repo, stage_repo, dependencies, parallel, audit, notifications)
    reassignment = ReassignmentService(
        task_repo, uow, audit, notifications,
        max_retries=settings.conflict_max_retries,
    )
    return EngineServices(
        tasks=tasks,
        dependencies=dependencies,
        sla=sla,
        approvals=ApprovalService(
            task_repo, ApprovalRepository(db), audit, notifications
        ),
        parallel=parallel,
        reassignment=reassignment,
        time=TimeTrackingService(task_repo, time_repo, audit),
        notifications=notifications,
        audit=audit,
        analytics=AnalyticsService(
            task_repo,
            stage_repo,
            time_repo,
            dependencies,
            sla,
            cache=cache,
            key_builder=analytics_key,
            cache_ttl=settings.cache_ttl_analytics,
            overload_threshold=settings.overloaded_user_threshold,
            slowest_stages_limit=settings.slowest_stages_limit,
            timeline_days=settings.timeline_days,
        ),
        conditions=ConditionalRuleService(
            ConditionalRuleRepository(db),
            stage_repo,
            task_repo,
            tasks,
            reassignment,
            audit,
            notifications,
        ),
    )


def _app_state(request: Request, name: str):
    return getattr(request.app.state, name, None)


async def get_services(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> EngineServices:
    """Engine services for read routes."""
    return compose_services(
        db,
        sink=_app_state(request, "notification_sink"),
        cache=_app_state(request, "cache"),
    )


async def get_services_for_write(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_transactional)],
) -> EngineServices:
    """Engine services for write routes (one transaction per request)."""
    return compose_services(
        db,
        sink=_app_state(request, "notification_sink"),
        cache=_app_state(request, "cache"),
    )


def get_actor(request: Request) -> str:
    """Acting user: the actor header (bound by middleware), else the configured default."""
    settings = get_settings()
    actor = get_current_actor_id() or request.headers.get(settings.actor_header_name, "").strip()
    return actor or settings.default_actor_id


ReadServices = Annotated[EngineServices, Depends(get_services)]
WriteServices = Annotated[EngineServices, Depends(get_services_for_write)]
Actor = Annotated[str, Depends(get_actor)]
