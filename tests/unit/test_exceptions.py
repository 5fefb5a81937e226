"""Tests for engine exceptions (error_code, message, details) and HTTP mapping."""

from caseflow.core.exception_handlers import status_for
from caseflow.domain.exceptions import (
    ChainNotPendingException,
    ConflictRetryException,
    CycleDetectedException,
    NoRuleConfiguredException,
    NotCurrentApproverException,
    ResourceNotFoundException,
    TaskBlockedException,
    ValidationException,
    WorkflowEngineException,
)


def test_base_exception_default_error_code() -> None:
    exc = WorkflowEngineException("Something failed")
    assert exc.error_code == "WorkflowEngineException"
    assert exc.details == {}


def test_to_dict_shape() -> None:
    exc = ResourceNotFoundException("task", "t1")
    assert exc.to_dict() == {
        "error": "RESOURCE_NOT_FOUND",
        "message": "task not found: t1",
        "details": {"resource_type": "task", "resource_id": "t1"},
    }


def test_validation_exception_field_and_extra_details() -> None:
    exc = ValidationException("bad", field="priority", allowed=["low"])
    assert exc.details == {"field": "priority", "allowed": ["low"]}


def test_cycle_detected_carries_path() -> None:
    exc = CycleDetectedException("A", ["A", "B", "A"])
    assert exc.error_code == "CYCLE_DETECTED"
    assert exc.details["cycle"] == ["A", "B", "A"]
    assert "A -> B -> A" in exc.message


def test_http_status_mapping() -> None:
    assert status_for(ValidationException("x")) == 400
    assert status_for(ResourceNotFoundException("task", "t")) == 404
    assert status_for(CycleDetectedException("a", ["a", "a"])) == 409
    assert status_for(TaskBlockedException("a", ["b"])) == 409
    assert status_for(NotCurrentApproverException("t", "u2", "u1")) == 403
    assert status_for(ChainNotPendingException("t", "approved")) == 409
    assert status_for(NoRuleConfiguredException("high")) == 404
    assert status_for(ConflictRetryException("task", "t")) == 409
    assert status_for(WorkflowEngineException("other")) == 400
