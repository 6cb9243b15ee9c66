"""Domain Enumerations - All status and type definitions"""
from enum import Enum


class SubmissionStatus(str, Enum):
    """Submission-level status derived from its approval steps"""
    SUBMITTED = "SUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class StepStatus(str, Enum):
    """Decision state of a single approval step"""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ApprovalType(str, Enum):
    """Role that must act on an approval step"""
    LECTURER = "lecturer"
    DEAN = "dean"
    REGISTRAR = "registrar"
    ACCOUNTS_RECEIVABLE = "accounts_receivable"


class DriftKind(str, Enum):
    """Inconsistencies found by the reconciliation job"""
    STATUS_MISMATCH = "STATUS_MISMATCH"  # Stored status differs from derived status
    MISSING_COMPLETED_AT = "MISSING_COMPLETED_AT"
    UNEXPECTED_COMPLETED_AT = "UNEXPECTED_COMPLETED_AT"  # Open submission with completed_at
    MISSING_REJECTION_REASON = "MISSING_REJECTION_REASON"
    MALFORMED_CHAIN = "MALFORMED_CHAIN"


# Terminal statuses (no further transitions)
TERMINAL_SUBMISSION_STATUSES = {SubmissionStatus.APPROVED, SubmissionStatus.REJECTED}

# Fixed position of each role in a chain built from a form type
APPROVAL_TYPE_ORDER = (
    ApprovalType.LECTURER,
    ApprovalType.DEAN,
    ApprovalType.REGISTRAR,
    ApprovalType.ACCOUNTS_RECEIVABLE,
)

# Roles a student may pick by name when submitting
STUDENT_SELECTABLE_TYPES = {ApprovalType.LECTURER, ApprovalType.DEAN}
