"""Staff Repository - Read access to the staff directory"""
from typing import Any, Dict, List, Optional
from pymongo.collection import Collection
from pymongo import ASCENDING

from .mongo_client import get_collection, STAFF
from ..domain.models import StaffMember
from ..utils.logger import get_logger

logger = get_logger(__name__)


class StaffRepository:
    """Repository for staff records"""

    def __init__(self, staff: Optional[Collection] = None):
        self._staff: Collection = staff if staff is not None else get_collection(STAFF)

    def get_staff(self, staff_id: str) -> Optional[StaffMember]:
        """Get staff member by ID"""
        doc = self._staff.find_one({"staff_id": staff_id})
        if doc:
            doc.pop("_id", None)
            return StaffMember.model_validate(doc)
        return None

    def list_active(self, department: Optional[str] = None) -> List[StaffMember]:
        """Active staff ordered by department then last name"""
        query: Dict[str, Any] = {"is_active": True}
        if department:
            query["department"] = department

        cursor = self._staff.find(query).sort([("department", ASCENDING), ("last_name", ASCENDING)])
        members = []
        for doc in cursor:
            doc.pop("_id", None)
            members.append(StaffMember.model_validate(doc))
        return members

    def upsert_staff(self, member: StaffMember) -> StaffMember:
        """Insert or replace a staff record (used by seeding scripts)"""
        doc = member.model_dump()
        self._staff.replace_one({"staff_id": member.staff_id}, {**doc, "_id": member.staff_id}, upsert=True)
        logger.info(f"Upserted staff member {member.staff_id}", extra={"staff_id": member.staff_id})
        return member
