"""
Submission Routes

- Submit a form and build its approval chain
- Read submissions and their ready step
- Approve / reject the ready step
"""

from fastapi import APIRouter, Depends, Query, status

from ..deps import get_correlation_id_dep, get_staff_id_dep, get_submission_service
from ...services.submission_service import SubmissionService
from ...utils.logger import get_logger
from .schemas import (
    SubmitRequest, SubmissionResponse, SubmissionListResponse, ReadyStepsResponse,
    ApproveRequest, RejectRequest
)

logger = get_logger(__name__)
router = APIRouter()


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit(
    request: SubmitRequest,
    service: SubmissionService = Depends(get_submission_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """
    Submit a form.

    One PENDING step is created per role the form type requires, in the
    order lecturer, dean, registrar, accounts receivable.
    """
    chain = service.submit(
        student_id=request.student_id,
        form_type_id=request.form_type_id,
        form_data=request.form_data,
        initial_assignee_id=request.initial_assignee_id,
        notes=request.notes,
    )
    return SubmissionResponse.from_chain(chain)


@router.get("", response_model=SubmissionListResponse)
async def list_submissions(
    student_id: str = Query(..., min_length=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=200),
    service: SubmissionService = Depends(get_submission_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """A student's submissions, newest first"""
    chains = service.list_for_student(student_id, skip=skip, limit=limit)
    return SubmissionListResponse(items=[SubmissionResponse.from_chain(c) for c in chains])


@router.get("/{submission_id}", response_model=SubmissionResponse)
async def get_submission(
    submission_id: str,
    service: SubmissionService = Depends(get_submission_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    return SubmissionResponse.from_chain(service.get_chain(submission_id))


@router.get("/{submission_id}/ready-steps", response_model=ReadyStepsResponse)
async def get_ready_steps(
    submission_id: str,
    service: SubmissionService = Depends(get_submission_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """The step that may be acted on now; empty once the submission is decided"""
    return ReadyStepsResponse(
        submission_id=submission_id,
        items=service.get_ready_steps(submission_id)
    )


@router.post("/{submission_id}/steps/{step_id}/approve", response_model=SubmissionResponse)
async def approve(
    submission_id: str,
    step_id: str,
    request: ApproveRequest,
    staff_id: str = Depends(get_staff_id_dep),
    service: SubmissionService = Depends(get_submission_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """
    Approve the ready step.

    Returns 409 STEP_NOT_READY when the step is not the ready one and 409
    CONCURRENCY_CONFLICT when the submission changed since it was read.
    """
    chain = service.approve(
        submission_id=submission_id,
        step_id=step_id,
        decided_by=staff_id,
        comments=request.comments,
        next_assignee_id=request.next_assignee_id,
        expected_version=request.expected_version,
    )
    return SubmissionResponse.from_chain(chain)


@router.post("/{submission_id}/steps/{step_id}/reject", response_model=SubmissionResponse)
async def reject(
    submission_id: str,
    step_id: str,
    request: RejectRequest,
    staff_id: str = Depends(get_staff_id_dep),
    service: SubmissionService = Depends(get_submission_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """
    Reject the ready step, which rejects the whole submission.

    A blank reason returns 400 MISSING_REASON.
    """
    chain = service.reject(
        submission_id=submission_id,
        step_id=step_id,
        decided_by=staff_id,
        reason=request.reason,
        expected_version=request.expected_version,
    )
    return SubmissionResponse.from_chain(chain)
