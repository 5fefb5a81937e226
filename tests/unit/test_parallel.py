"""Tests for parallel group validation and completion rules."""

import pytest

from caseflow.domain.exceptions import ValidationException
from caseflow.domain.parallel import evaluate, validate_group
from caseflow.shared.enums import CompletionRule


def test_group_needs_two_tasks() -> None:
    with pytest.raises(ValidationException):
        validate_group(["a"], CompletionRule.ALL, None)


@pytest.mark.parametrize("threshold", [None, 0, 101])
def test_percentage_needs_threshold_in_range(threshold: int | None) -> None:
    with pytest.raises(ValidationException) as exc_info:
        validate_group(["a", "b"], CompletionRule.PERCENTAGE, threshold)
    assert exc_info.value.details["field"] == "completion_threshold"


def test_threshold_dropped_for_non_percentage_rules() -> None:
    assert validate_group(["a", "b"], CompletionRule.ANY, 50) is None
    assert validate_group(["a", "b"], CompletionRule.PERCENTAGE, 50) == 50


def test_all_rule() -> None:
    assert not evaluate(CompletionRule.ALL, None, ["done", "pending"]).is_complete
    assert evaluate(CompletionRule.ALL, None, ["done", "done"]).is_complete


def test_any_rule() -> None:
    assert not evaluate(CompletionRule.ANY, None, ["pending", "review"]).is_complete
    assert evaluate(CompletionRule.ANY, None, ["pending", "done"]).is_complete


def test_percentage_rule_boundary_is_inclusive() -> None:
    """2 of 3 done is 66.7%; a 66 threshold completes, 67 does not."""
    statuses = ["done", "done", "pending"]
    assert evaluate(CompletionRule.PERCENTAGE, 66, statuses).is_complete
    assert not evaluate(CompletionRule.PERCENTAGE, 67, statuses).is_complete


def test_percentage_exact_half() -> None:
    result = evaluate(CompletionRule.PERCENTAGE, 50, ["done", "pending"])
    assert result.is_complete
    assert result.percentage == 50.0


def test_counts_and_rounded_percentage() -> None:
    result = evaluate(CompletionRule.ALL, None, ["done", "pending", "pending"])
    assert result.completed_count == 1
    assert result.total_count == 3
    assert result.percentage == 33.3


def test_empty_group_is_never_complete() -> None:
    result = evaluate(CompletionRule.ANY, None, [])
    assert not result.is_complete
    assert result.percentage == 0.0
