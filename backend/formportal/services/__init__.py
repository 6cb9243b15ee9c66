"""Service modules - Business logic layer"""
from .directory_service import StaffDirectory
from .submission_service import SubmissionService
from .reconciliation_service import ReconciliationService

__all__ = [
    "StaffDirectory",
    "SubmissionService",
    "ReconciliationService",
]
