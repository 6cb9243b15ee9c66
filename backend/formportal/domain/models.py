"""Domain Models - Pydantic schemas for all entities"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field, ConfigDict

from .enums import (
    SubmissionStatus, StepStatus, ApprovalType, DriftKind, APPROVAL_TYPE_ORDER
)


# ============================================================================
# Approval Chain
# ============================================================================

class ApprovalStep(BaseModel):
    """One role's decision point within a submission's approval chain"""
    model_config = ConfigDict(extra="ignore")

    step_id: str = Field(..., description="Unique step ID")
    approval_type: ApprovalType = Field(..., description="Role that must act on this step")
    sequence_order: int = Field(..., description="Position in the chain, unique per submission")
    assigned_approver_id: Optional[str] = Field(None, description="Staff ID, assigned lazily for some steps")
    status: StepStatus = Field(default=StepStatus.PENDING)
    comments: Optional[str] = None
    rejection_reason: Optional[str] = None
    decided_at: Optional[datetime] = None
    decided_by: Optional[str] = Field(None, description="Staff ID that approved or rejected")


class Submission(BaseModel):
    """A student's form submission (aggregate root of the approval chain)"""
    model_config = ConfigDict(extra="ignore")

    submission_id: str = Field(..., description="Unique submission ID")
    reference_number: str = Field(..., description="Human-readable reference, immutable")
    student_id: str
    form_type_id: str
    form_type_name: str
    form_data: Dict[str, Any] = Field(default_factory=dict)
    notes: Optional[str] = None
    status: SubmissionStatus = Field(default=SubmissionStatus.SUBMITTED)
    submitted_at: datetime
    completed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    version: int = Field(default=1, description="Optimistic concurrency token")


class ApprovalChain(BaseModel):
    """A submission together with its approval steps, as loaded from the store"""

    submission: Submission
    steps: List[ApprovalStep]

    @property
    def version(self) -> int:
        return self.submission.version


class DecisionResult(BaseModel):
    """Outcome of an approve/reject transition over a step snapshot"""

    updated_steps: List[ApprovalStep]
    submission_status: SubmissionStatus
    completed_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    decided_step_id: str
    reassigned_step_id: Optional[str] = Field(None, description="Step that received next_assignee_id")


# ============================================================================
# Configuration Collaborators
# ============================================================================

class FormType(BaseModel):
    """Form type with its required approval roles"""
    model_config = ConfigDict(extra="ignore")

    form_type_id: str
    name: str
    description: Optional[str] = None
    due_date: Optional[str] = Field(None, description="Display due date, e.g. 'Rolling'")
    requires_lecturer_approval: bool = False
    requires_dean_approval: bool = False
    requires_registrar_approval: bool = True
    requires_accounts_receivable_approval: bool = False
    is_active: bool = True

    def required_approval_types(self) -> List[ApprovalType]:
        """Required roles in chain order"""
        flags = {
            ApprovalType.LECTURER: self.requires_lecturer_approval,
            ApprovalType.DEAN: self.requires_dean_approval,
            ApprovalType.REGISTRAR: self.requires_registrar_approval,
            ApprovalType.ACCOUNTS_RECEIVABLE: self.requires_accounts_receivable_approval,
        }
        return [approval_type for approval_type in APPROVAL_TYPE_ORDER if flags[approval_type]]


class StaffMember(BaseModel):
    """Staff directory record"""
    model_config = ConfigDict(extra="ignore")

    staff_id: str
    first_name: str
    last_name: str
    role: str = Field(..., description="Free-text role, e.g. 'Senior Lecturer', 'Dean of Science'")
    department: Optional[str] = None
    is_active: bool = True

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


# ============================================================================
# Read Models
# ============================================================================

class QueueItem(BaseModel):
    """A ready step surfaced in an approver's queue"""

    submission_id: str
    reference_number: str
    student_id: str
    form_type_name: str
    submitted_at: datetime
    version: int
    step: ApprovalStep


class DriftReport(BaseModel):
    """Stored submission state that disagrees with its steps"""

    submission_id: str
    reference_number: str
    version: int
    stored_status: Optional[SubmissionStatus] = Field(None, description="None when the stored value is not a known status")
    derived_status: Optional[SubmissionStatus] = None
    kinds: List[DriftKind] = Field(default_factory=list)
    detail: Optional[str] = None
