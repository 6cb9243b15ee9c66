"""Repository modules - Data access layer"""
from .mongo_client import get_database, get_collection
from .submission_repo import SubmissionRepository
from .staff_repo import StaffRepository
from .form_type_repo import FormTypeRepository

__all__ = [
    "get_database",
    "get_collection",
    "SubmissionRepository",
    "StaffRepository",
    "FormTypeRepository",
]
