"""SLA thresholds and task classification.

Pure functions; the SLA rule engine resolves the rule and supplies the
clock.
"""

from dataclasses import dataclass
from datetime import datetime

from caseflow.core.constants import DEFAULT_SLA_THRESHOLDS
from caseflow.domain.exceptions import ValidationException
from caseflow.shared.enums import SLAState
from caseflow.shared.utils.datetime import hours_between


@dataclass(frozen=True)
class SLAThresholds:
    """Warning and breach thresholds in hours. Validated on construction."""

    warning_hours: float
    breach_hours: float

    def __post_init__(self) -> None:
        if self.warning_hours < 0:
            raise ValidationException(
                "Warning threshold cannot be negative",
                field="warning_threshold_hours",
            )
        if self.warning_hours >= self.breach_hours:
            raise ValidationException(
                "Warning threshold must be less than breach threshold",
                field="warning_threshold_hours",
                warning_threshold_hours=self.warning_hours,
                breach_threshold_hours=self.breach_hours,
            )

    @classmethod
    def default_for(cls, priority: str) -> "SLAThresholds":
        """Built-in thresholds for a priority."""
        warning, breach = DEFAULT_SLA_THRESHOLDS[priority]
        return cls(warning_hours=warning, breach_hours=breach)


@dataclass(frozen=True)
class SLAClassification:
    """Result of classifying a task against thresholds."""

    state: SLAState
    elapsed_hours: float
    hours_remaining: float | None = None
    hours_overdue: float | None = None


def elapsed_hours(
    created_at: datetime,
    started_at: datetime | None,
    now: datetime,
) -> float:
    """Hours since the effective start (started_at if set, else created_at)."""
    return max(0.0, hours_between(started_at or created_at, now))


def classify(
    elapsed: float,
    thresholds: SLAThresholds,
    is_done: bool = False,
) -> SLAClassification:
    """Classify elapsed hours against thresholds.

    A done task is always on track. Otherwise: below warning is on track,
    between warning and breach is a warning with hours remaining, and at or
    past breach is breached with hours overdue.
    """
    if is_done:
        return SLAClassification(state=SLAState.ON_TRACK, elapsed_hours=elapsed)
    if elapsed < thresholds.warning_hours:
        return SLAClassification(
            state=SLAState.ON_TRACK,
            elapsed_hours=elapsed,
            hours_remaining=thresholds.breach_hours - elapsed,
        )
    if elapsed < thresholds.breach_hours:
        return SLAClassification(
            state=SLAState.WARNING,
            elapsed_hours=elapsed,
            hours_remaining=thresholds.breach_hours - elapsed,
        )
    return SLAClassification(
        state=SLAState.BREACHED,
        elapsed_hours=elapsed,
        hours_overdue=elapsed - thresholds.breach_hours,
    )
