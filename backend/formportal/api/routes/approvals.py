"""Approval Queue Routes - What the acting staff member can decide now, and what they decided"""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..deps import get_correlation_id_dep, get_staff_id_dep, get_submission_service
from ...domain.enums import ApprovalType
from ...services.submission_service import SubmissionService
from ...utils.logger import get_logger
from .schemas import QueueResponse

logger = get_logger(__name__)
router = APIRouter()

# Registrar and accounts receivable steps are worked from a shared role queue
ROLE_QUEUE_TYPES = {ApprovalType.REGISTRAR, ApprovalType.ACCOUNTS_RECEIVABLE}


@router.get("/queue", response_model=QueueResponse)
async def get_queue(
    approval_type: Optional[ApprovalType] = Query(None),
    staff_id: str = Depends(get_staff_id_dep),
    service: SubmissionService = Depends(get_submission_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """
    Ready steps for the acting staff member, oldest submission first.

    Lecturer and dean queues (or no approval_type) show steps assigned to the
    caller. Registrar and accounts receivable queues show every ready step of
    that role.
    """
    if approval_type in ROLE_QUEUE_TYPES:
        items = service.approver_queue(approval_type=approval_type)
    else:
        items = service.approver_queue(staff_id=staff_id, approval_type=approval_type)
    return QueueResponse(items=items)


@router.get("/history", response_model=QueueResponse)
async def get_history(
    limit: int = Query(100, ge=1, le=500),
    staff_id: str = Depends(get_staff_id_dep),
    service: SubmissionService = Depends(get_submission_service),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """Steps the acting staff member approved or rejected"""
    return QueueResponse(items=service.history(staff_id, limit=limit))
