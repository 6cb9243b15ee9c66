"""API Routes module"""
from fastapi import APIRouter

from .submissions import router as submissions_router
from .approvals import router as approvals_router
from .staff import router as staff_router

# Main API router
api_router = APIRouter()

api_router.include_router(submissions_router, prefix="/submissions", tags=["Submissions"])
api_router.include_router(approvals_router, prefix="/approvals", tags=["Approvals"])
api_router.include_router(staff_router, prefix="/staff", tags=["Staff"])

__all__ = ["api_router"]
