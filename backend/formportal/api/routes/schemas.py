"""
Submission and Approval Schemas

Request and response models for the submission, approval and staff endpoints.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from ...domain.models import ApprovalChain, ApprovalStep, QueueItem, StaffMember
from ...domain.enums import SubmissionStatus


# =============================================================================
# Submission Schemas
# =============================================================================

class SubmitRequest(BaseModel):
    """Request to submit a form for approval"""
    student_id: str = Field(..., min_length=1)
    form_type_id: str = Field(..., min_length=1)
    form_data: Dict[str, Any] = Field(default_factory=dict)
    initial_assignee_id: Optional[str] = Field(
        None, description="Lecturer or dean picked by the student; required when the first step is one of those roles"
    )
    notes: Optional[str] = Field(None, max_length=5000)


class SubmissionResponse(BaseModel):
    """A submission with its approval steps in sequence order"""
    submission_id: str
    reference_number: str
    student_id: str
    form_type_id: str
    form_type_name: str
    form_data: Dict[str, Any]
    notes: Optional[str] = None
    status: SubmissionStatus
    submitted_at: datetime
    completed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    version: int
    steps: List[ApprovalStep]

    @classmethod
    def from_chain(cls, chain: ApprovalChain) -> "SubmissionResponse":
        steps = sorted(chain.steps, key=lambda s: s.sequence_order)
        return cls(**chain.submission.model_dump(), steps=steps)


class SubmissionListResponse(BaseModel):
    """Response for submission list"""
    items: List[SubmissionResponse]


class ReadyStepsResponse(BaseModel):
    """Steps that may be acted on right now (zero or one)"""
    submission_id: str
    items: List[ApprovalStep]


# =============================================================================
# Decision Schemas
# =============================================================================

class ApproveRequest(BaseModel):
    """Request to approve a step"""
    comments: Optional[str] = Field(None, max_length=2000)
    next_assignee_id: Optional[str] = Field(
        None, description="Staff member for the next unassigned step; required when that step is a lecturer or dean step"
    )
    expected_version: Optional[int] = Field(None, ge=1)


class RejectRequest(BaseModel):
    """Request to reject a step; the reason is required"""
    reason: Optional[str] = Field(None, max_length=2000)
    expected_version: Optional[int] = Field(None, ge=1)


# =============================================================================
# Queue Schemas
# =============================================================================

class QueueResponse(BaseModel):
    """Approver queue or decision history"""
    items: List[QueueItem]


# =============================================================================
# Staff Schemas
# =============================================================================

class StaffInfo(BaseModel):
    """Staff member shown in approver pickers"""
    staff_id: str
    display_name: str
    role: str
    department: Optional[str] = None

    @classmethod
    def from_member(cls, member: StaffMember) -> "StaffInfo":
        return cls(
            staff_id=member.staff_id,
            display_name=member.display_name,
            role=member.role,
            department=member.department,
        )


class StaffListResponse(BaseModel):
    items: List[StaffInfo]
