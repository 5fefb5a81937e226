"""Tests for conditional rule evaluation and payload validation."""

import pytest

from caseflow.domain.conditions import (
    DEFAULT_NOTIFY_TITLE,
    evaluate_condition,
    matches,
    parse_action,
    parse_operator,
    validate_action,
    validate_condition,
)
from caseflow.domain.exceptions import ValidationException
from caseflow.shared.enums import ConditionalAction, ConditionOperator

Op = ConditionOperator
Act = ConditionalAction


@pytest.mark.parametrize(
    ("operator", "expected", "actual", "result"),
    [
        (Op.EQUALS, "urgent", "urgent", True),
        (Op.EQUALS, "urgent", "Urgent", False),
        (Op.EQUALS, 5, 5, True),
        (Op.EQUALS, None, None, True),
        (Op.CONTAINS, "FRAUD", "possible fraud claim", True),
        (Op.CONTAINS, "fraud", "routine", False),
        (Op.CONTAINS, "x", None, False),
        (Op.GREATER_THAN, 1000, 1500, True),
        (Op.GREATER_THAN, 1000, "1500.5", True),
        (Op.GREATER_THAN, 1000, 1000, False),
        (Op.LESS_THAN, 10, 3, True),
        (Op.LESS_THAN, 10, "n/a", False),
        (Op.LESS_THAN, 10, None, False),
        (Op.IS_EMPTY, None, None, True),
        (Op.IS_EMPTY, None, "", True),
        (Op.IS_EMPTY, None, 0, False),
        (Op.IS_NOT_EMPTY, None, "x", True),
        (Op.IS_NOT_EMPTY, None, "", False),
    ],
)
def test_evaluate_condition(operator, expected, actual, result: bool) -> None:
    assert evaluate_condition(operator, expected, actual) is result


def test_boolean_is_not_a_number() -> None:
    assert evaluate_condition(Op.GREATER_THAN, 0, True) is False


def test_missing_field_compares_as_none() -> None:
    context = {"amount": 50}
    assert matches("region", Op.IS_EMPTY, None, context)
    assert not matches("region", Op.EQUALS, "EU", context)
    assert matches("amount", Op.LESS_THAN, 100, context)


def test_unknown_operator_and_action() -> None:
    with pytest.raises(ValidationException) as exc_info:
        parse_operator("between")
    assert exc_info.value.details["field"] == "operator"
    with pytest.raises(ValidationException) as exc_info:
        parse_action("escalate")
    assert exc_info.value.details["field"] == "then_action"


def test_condition_value_checks() -> None:
    assert validate_condition(Op.IS_EMPTY, "ignored") is None
    assert validate_condition(Op.GREATER_THAN, "12") == "12"
    with pytest.raises(ValidationException):
        validate_condition(Op.LESS_THAN, "soon")
    with pytest.raises(ValidationException):
        validate_condition(Op.CONTAINS, "")


def test_add_task_template_is_normalized() -> None:
    template = validate_action(Act.ADD_TASK, {"title": "  Fraud review ", "description": "Check"})
    assert template == {"title": "Fraud review", "priority": "medium", "description": "Check"}

    with pytest.raises(ValidationException) as exc_info:
        validate_action(Act.ADD_TASK, {"description": "no title"})
    assert exc_info.value.details["field"] == "then_value.title"

    with pytest.raises(ValidationException):
        validate_action(Act.ADD_TASK, {"title": "x", "priority": "asap"})


def test_string_actions() -> None:
    assert validate_action(Act.ASSIGN_TO, " alice ") == "alice"
    assert validate_action(Act.SET_PRIORITY, "critical") == "critical"
    assert validate_action(Act.SKIP_STAGE, {"anything": 1}) is None
    with pytest.raises(ValidationException):
        validate_action(Act.ASSIGN_TO, "")
    with pytest.raises(ValidationException):
        validate_action(Act.SET_PRIORITY, "urgent")


def test_notify_payload() -> None:
    assert validate_action(Act.NOTIFY, {"user_id": "lead", "message": "Large claim"}) == {
        "user_id": "lead",
        "message": "Large claim",
        "title": DEFAULT_NOTIFY_TITLE,
    }
    with pytest.raises(ValidationException):
        validate_action(Act.NOTIFY, "lead")
    with pytest.raises(ValidationException):
        validate_action(Act.NOTIFY, {"user_id": "lead"})
