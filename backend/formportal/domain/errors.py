"""Domain Errors - Centralized Exception Hierarchy"""
from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base domain error - all errors extend this"""

    error_code: str = "DOMAIN_ERROR"
    http_status: int = 400

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code:
            self.error_code = error_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to API response dict"""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details
            }
        }


# Authentication
class AuthenticationError(DomainError):
    """Acting staff identity missing"""
    error_code = "AUTHENTICATION_ERROR"
    http_status = 401


# Validation Errors
class ValidationError(DomainError):
    """Input validation failed"""
    error_code = "VALIDATION_ERROR"
    http_status = 400


class MissingReasonError(ValidationError):
    """Rejection attempted without a reason"""
    error_code = "MISSING_REASON"


class IneligibleApproverError(ValidationError):
    """Staff member cannot act on the given approval type"""
    error_code = "INELIGIBLE_APPROVER"


class AssigneeRequiredError(ValidationError):
    """A lecturer or dean step would be left without an approver"""
    error_code = "ASSIGNEE_REQUIRED"


# Not Found Errors
class NotFoundError(DomainError):
    """Resource not found"""
    error_code = "NOT_FOUND"
    http_status = 404


class SubmissionNotFoundError(NotFoundError):
    """Submission not found"""
    error_code = "SUBMISSION_NOT_FOUND"


class StepNotFoundError(NotFoundError):
    """Approval step not found in the submission's chain"""
    error_code = "STEP_NOT_FOUND"


class FormTypeNotFoundError(NotFoundError):
    """Form type not found or inactive"""
    error_code = "FORM_TYPE_NOT_FOUND"


# Conflict Errors
class ConflictError(DomainError):
    """Resource conflict (e.g., concurrent modification)"""
    error_code = "CONFLICT"
    http_status = 409


class ConcurrencyError(ConflictError):
    """Optimistic concurrency conflict - reload the chain and retry"""
    error_code = "CONCURRENCY_CONFLICT"


class InvalidStateError(ConflictError):
    """Action not valid for current state"""
    error_code = "INVALID_STATE"


class NotReadyError(InvalidStateError):
    """Step is already decided or blocked by a predecessor"""
    error_code = "STEP_NOT_READY"


class SubmissionClosedError(InvalidStateError):
    """Submission already reached a terminal status"""
    error_code = "SUBMISSION_CLOSED"


class AlreadyExistsError(ConflictError):
    """Resource already exists"""
    error_code = "ALREADY_EXISTS"


# Engine Errors
class EngineError(DomainError):
    """Workflow engine error"""
    error_code = "ENGINE_ERROR"
    http_status = 500


class MalformedChainError(EngineError):
    """Stored approval chain violates its structural invariants"""
    error_code = "MALFORMED_CHAIN"
