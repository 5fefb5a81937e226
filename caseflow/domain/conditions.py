"""Conditional branching: rule validation and condition evaluation.

A rule tests one field of a caller-supplied context and, when the test
holds, names an action to run against the rule's stage. Everything here is
pure; the service applies the actions.
"""

from collections.abc import Mapping
from typing import Any

from caseflow.domain.exceptions import ValidationException
from caseflow.shared.enums import ConditionalAction, ConditionOperator, TaskPriority

DEFAULT_NOTIFY_TITLE = "Stage notification"

_VALUELESS = frozenset({ConditionOperator.IS_EMPTY, ConditionOperator.IS_NOT_EMPTY})
_NUMERIC = frozenset({ConditionOperator.GREATER_THAN, ConditionOperator.LESS_THAN})


def parse_operator(value: str) -> ConditionOperator:
    try:
        return ConditionOperator(value)
    except ValueError as e:
        raise ValidationException(
            f"Unknown condition operator {value!r}; expected one of {ConditionOperator.values()}",
            field="operator",
        ) from e


def parse_action(value: str) -> ConditionalAction:
    try:
        return ConditionalAction(value)
    except ValueError as e:
        raise ValidationException(
            f"Unknown conditional action {value!r}; expected one of {ConditionalAction.values()}",
            field="then_action",
        ) from e


def _as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _is_empty(value: Any) -> bool:
    return value is None or value == ""


def validate_condition(operator: ConditionOperator, value: Any) -> Any:
    """Return the comparison value to store for ``operator``.

    Emptiness tests ignore the value and store None. Numeric comparisons
    need a value that reads as a number.
    """
    if operator in _VALUELESS:
        return None
    if operator in _NUMERIC and _as_number(value) is None:
        raise ValidationException(
            f"Operator {operator.value} needs a numeric value", field="value"
        )
    if operator == ConditionOperator.CONTAINS and _is_empty(value):
        raise ValidationException("Operator contains needs a value", field="value")
    return value


def _required_text(source: Mapping[str, Any], key: str, field: str) -> str:
    text = source.get(key)
    if not isinstance(text, str) or not text.strip():
        raise ValidationException(f"{key} is required for this action", field=field)
    return text.strip()


def _priority(value: Any) -> str:
    try:
        return TaskPriority(value).value
    except ValueError as e:
        raise ValidationException(
            f"Unknown priority {value!r}; expected one of {TaskPriority.values()}",
            field="then_value",
        ) from e


def validate_action(action: ConditionalAction, then_value: Any) -> Any:
    """Check and normalize the payload an action runs with.

    skip_stage:    no payload (None is stored).
    add_task:      {"title", "description"?, "priority"?, "assigned_to_user_id"?}
    assign_to:     the new owner's user id.
    set_priority:  one of the task priorities.
    notify:        {"user_id", "message", "title"?}

    Raises:
        ValidationException: Payload missing or malformed for the action.
    """
    if action == ConditionalAction.SKIP_STAGE:
        return None
    if action in (ConditionalAction.ASSIGN_TO, ConditionalAction.SET_PRIORITY):
        if not isinstance(then_value, str) or not then_value.strip():
            raise ValidationException(
                f"Action {action.value} needs a non-empty string value", field="then_value"
            )
        if action == ConditionalAction.SET_PRIORITY:
            return _priority(then_value.strip())
        return then_value.strip()
    if not isinstance(then_value, Mapping):
        raise ValidationException(
            f"Action {action.value} needs an object value", field="then_value"
        )
    if action == ConditionalAction.ADD_TASK:
        template: dict[str, Any] = {
            "title": _required_text(then_value, "title", "then_value.title"),
            "priority": _priority(then_value.get("priority") or TaskPriority.MEDIUM.value),
        }
        for optional in ("description", "assigned_to_user_id"):
            if then_value.get(optional):
                template[optional] = str(then_value[optional])
        return template
    return {
        "user_id": _required_text(then_value, "user_id", "then_value.user_id"),
        "message": _required_text(then_value, "message", "then_value.message"),
        "title": str(then_value.get("title") or DEFAULT_NOTIFY_TITLE),
    }


def evaluate_condition(
    operator: ConditionOperator, expected: Any, actual: Any
) -> bool:
    """Whether ``actual`` (the context field, None when missing) satisfies the rule.

    contains is a case-insensitive substring test on the string forms.
    Numeric comparisons are False when either side is not a number.
    """
    if operator == ConditionOperator.EQUALS:
        return actual == expected
    if operator == ConditionOperator.CONTAINS:
        if actual is None:
            return False
        return str(expected).lower() in str(actual).lower()
    if operator in _NUMERIC:
        left, right = _as_number(actual), _as_number(expected)
        if left is None or right is None:
            return False
        return left > right if operator == ConditionOperator.GREATER_THAN else left < right
    if operator == ConditionOperator.IS_EMPTY:
        return _is_empty(actual)
    return not _is_empty(actual)


def matches(
    field: str, operator: ConditionOperator, expected: Any, context: Mapping[str, Any]
) -> bool:
    """Evaluate a rule's condition against a context mapping."""
    return evaluate_condition(operator, expected, context.get(field))
