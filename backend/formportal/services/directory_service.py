"""Directory Service - Approver eligibility lookups against the staff directory"""
from typing import Callable, Dict, List, Optional

from ..domain.models import StaffMember
from ..domain.enums import ApprovalType
from ..repositories.staff_repo import StaffRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _role_contains(*fragments: str) -> Callable[[str], bool]:
    """Case-insensitive substring match, e.g. 'Senior Lecturer' is a lecturer"""
    def matches(role: str) -> bool:
        normalized = role.lower().replace("_", " ")
        return any(fragment in normalized for fragment in fragments)
    return matches


# Staff roles are free text; these predicates decide which roles may act on
# each approval type.
ROLE_MATCHERS: Dict[ApprovalType, Callable[[str], bool]] = {
    ApprovalType.LECTURER: _role_contains("lecturer", "teacher"),
    ApprovalType.DEAN: _role_contains("dean"),
    ApprovalType.REGISTRAR: _role_contains("registrar"),
    ApprovalType.ACCOUNTS_RECEIVABLE: _role_contains("accounts receivable"),
}


class StaffDirectory:
    """
    Staff directory used to validate approver assignments

    The workflow engine never consults the directory; callers check a
    staff member here before handing them to the engine as an assignee.
    """

    def __init__(self, staff_repo: Optional[StaffRepository] = None):
        self.staff_repo = staff_repo or StaffRepository()

    def role_matches(self, role: str, approval_type: ApprovalType) -> bool:
        return ROLE_MATCHERS[approval_type](role or "")

    def is_eligible(self, staff_id: str, approval_type: ApprovalType) -> bool:
        """True if the staff member exists, is active and holds a matching role"""
        member = self.staff_repo.get_staff(staff_id)
        if member is None:
            logger.info(f"Staff {staff_id} not found", extra={"staff_id": staff_id})
            return False
        if not member.is_active:
            return False
        return self.role_matches(member.role, approval_type)

    def list_eligible(
        self,
        approval_type: ApprovalType,
        department: Optional[str] = None
    ) -> List[StaffMember]:
        """
        Active staff who can act on the approval type

        Used to populate approver pickers (e.g. a lecturer choosing which
        dean reviews next). Ordered by department then last name.
        """
        return [
            member for member in self.staff_repo.list_active(department=department)
            if self.role_matches(member.role, approval_type)
        ]
