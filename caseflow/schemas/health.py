"""Bodies returned by the liveness and readiness checks."""

from typing import Literal

from pydantic import BaseModel

ComponentState = Literal["ok", "unavailable", "disabled"]


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
    version: str | None = None


class ReadinessResponse(BaseModel):
    """``cache`` never affects ``status``: analytics run uncached without Redis."""

    status: Literal["ok", "not_ready"] = "ok"
    database: ComponentState = "ok"
    cache: ComponentState = "disabled"
