"""API Dependencies - Common dependencies for routes"""
from typing import Optional
from fastapi import Header

from ..domain.errors import AuthenticationError
from ..services.submission_service import SubmissionService
from ..services.directory_service import StaffDirectory
from ..utils.logger import set_correlation_id
from ..utils.idgen import generate_correlation_id


async def get_correlation_id_dep(
    x_correlation_id: Optional[str] = Header(None, alias="X-Correlation-Id")
) -> str:
    """
    Get or generate correlation ID for request tracing

    If client provides X-Correlation-Id, use it.
    Otherwise generate a new one.
    """
    correlation_id = x_correlation_id or generate_correlation_id()
    set_correlation_id(correlation_id)
    return correlation_id


async def get_staff_id_dep(
    x_staff_id: Optional[str] = Header(None, alias="X-Staff-Id")
) -> str:
    """
    Acting staff member, set by the gateway in front of the API

    Raises:
        AuthenticationError: 401 if the header is missing or blank
    """
    if not x_staff_id or not x_staff_id.strip():
        raise AuthenticationError("X-Staff-Id header is missing")
    return x_staff_id.strip()


def get_submission_service() -> SubmissionService:
    return SubmissionService()


def get_staff_directory() -> StaffDirectory:
    return StaffDirectory()
