"""Staff Routes - Eligible approver lookup for assignment pickers"""
from typing import Optional
from fastapi import APIRouter, Depends, Query

from ..deps import get_correlation_id_dep, get_staff_directory
from ...domain.enums import ApprovalType
from ...services.directory_service import StaffDirectory
from .schemas import StaffInfo, StaffListResponse

router = APIRouter()


@router.get("/eligible", response_model=StaffListResponse)
async def list_eligible(
    approval_type: ApprovalType = Query(...),
    department: Optional[str] = Query(None),
    directory: StaffDirectory = Depends(get_staff_directory),
    correlation_id: str = Depends(get_correlation_id_dep)
):
    """Active staff whose role can act on the given approval type"""
    members = directory.list_eligible(approval_type, department=department)
    return StaffListResponse(items=[StaffInfo.from_member(m) for m in members])
