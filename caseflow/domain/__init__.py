"""Domain layer: engine rules and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

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

__all__ = [
    "ChainNotPendingException",
    "ConflictRetryException",
    "CycleDetectedException",
    "NoRuleConfiguredException",
    "NotCurrentApproverException",
    "ResourceNotFoundException",
    "TaskBlockedException",
    "ValidationException",
    "WorkflowEngineException",
]
