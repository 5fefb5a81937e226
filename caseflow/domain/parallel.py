"""Parallel task group completion rules."""

from collections.abc import Sequence
from dataclasses import dataclass

from caseflow.core.constants import MIN_PARALLEL_GROUP_SIZE
from caseflow.domain.exceptions import ValidationException
from caseflow.shared.enums import CompletionRule, TaskStatus


@dataclass(frozen=True)
class ParallelGroupStatus:
    """Completion snapshot of a parallel group."""

    completed_count: int
    total_count: int
    percentage: float
    is_complete: bool


def validate_group(
    task_ids: Sequence[str],
    rule: CompletionRule,
    threshold: int | None,
) -> int | None:
    """Check membership size and threshold; return the threshold to store.

    Percentage groups need 1 <= threshold <= 100. Other rules do not use a
    threshold, so any value given is dropped.
    """
    if len(task_ids) < MIN_PARALLEL_GROUP_SIZE:
        raise ValidationException(
            f"A parallel group needs at least {MIN_PARALLEL_GROUP_SIZE} distinct tasks",
            field="task_ids",
        )
    if rule != CompletionRule.PERCENTAGE:
        return None
    if threshold is None or not 1 <= threshold <= 100:
        raise ValidationException(
            "Percentage groups need a completion threshold between 1 and 100",
            field="completion_threshold",
        )
    return threshold


def evaluate(
    rule: CompletionRule,
    threshold: int | None,
    member_statuses: Sequence[str],
) -> ParallelGroupStatus:
    """Evaluate a group from its members' statuses. Pure and idempotent."""
    total = len(member_statuses)
    completed = sum(1 for s in member_statuses if s == TaskStatus.DONE.value)
    percentage = round(completed / total * 100, 1) if total else 0.0
    if total == 0:
        is_complete = False
    elif rule == CompletionRule.ALL:
        is_complete = completed == total
    elif rule == CompletionRule.ANY:
        is_complete = completed >= 1
    else:
        # Integer comparison; completed/total*100 >= threshold without float error.
        is_complete = completed * 100 >= (threshold or 100) * total
    return ParallelGroupStatus(
        completed_count=completed,
        total_count=total,
        percentage=percentage,
        is_complete=is_complete,
    )
