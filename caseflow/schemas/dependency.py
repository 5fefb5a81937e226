"""Task dependency API schemas."""

from pydantic import BaseModel, ConfigDict, Field


class DependencySetRequest(BaseModel):
    """Replace one dependency set (blocking or informational) of a task."""

    depends_on: list[str] = Field(default_factory=list, max_length=500)
    type: str = "blocking"


class TaskDependenciesResponse(BaseModel):
    """Both dependency sets of a task."""

    model_config = ConfigDict(from_attributes=True)

    task_id: str
    blocking: list[str]
    informational: list[str]


class CanStartResponse(BaseModel):
    """Whether a task may start; blocked_by lists unmet blocking prerequisites."""

    model_config = ConfigDict(from_attributes=True)

    task_id: str
    can_start: bool
    blocked_by: list[str]
    informational: list[str]
