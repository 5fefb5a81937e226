"""Analytics API schemas."""

from pydantic import BaseModel, ConfigDict


class StageProgressResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stage_id: str
    stage_name: str
    total: int
    completed: int
    percentage: int


class TimelinePointResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    date: str
    created: int
    completed: int


class WorkflowMetricsResponse(BaseModel):
    """Task counts, SLA figures, stage progress and the daily timeline."""

    model_config = ConfigDict(from_attributes=True)

    scope: str | None
    total_tasks: int
    completed_tasks: int
    tasks_by_status: dict[str, int]
    tasks_by_priority: dict[str, int]
    tasks_by_assignee: dict[str, int]
    overdue_tasks: int
    sla_breaches: int
    average_completion_time: float | None
    average_cycle_time: float | None
    tracked_hours: float
    stage_progress: list[StageProgressResponse]
    timeline_data: list[TimelinePointResponse]


class TaskVelocityResponse(BaseModel):
    """Tasks completed per day over the window."""

    model_config = ConfigDict(from_attributes=True)

    scope: str | None
    window_days: int
    completed_in_window: int
    tasks_per_day: float


class StageDurationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    stage_id: str
    stage_name: str
    average_days: float
    completed_tasks: int


class BlockedTaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    task_id: str
    title: str
    blocked_by: list[str]


class OverloadedUserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: str
    open_tasks: int


class BottleneckAnalysisResponse(BaseModel):
    """Slowest stages, blocked tasks and overloaded users."""

    model_config = ConfigDict(from_attributes=True)

    scope: str | None
    overload_threshold: int
    slowest_stages: list[StageDurationResponse]
    blocked_tasks: list[BlockedTaskResponse]
    overloaded_users: list[OverloadedUserResponse]
