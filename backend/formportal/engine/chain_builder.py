"""Chain Builder - Materialize the initial approval steps for a submission"""
from typing import List, Optional

from ..domain.models import ApprovalStep, FormType
from ..domain.enums import StepStatus, STUDENT_SELECTABLE_TYPES
from ..domain.errors import AssigneeRequiredError, ValidationError
from ..utils.idgen import generate_step_id


def build_approval_chain(
    form_type: FormType,
    initial_assignee_id: Optional[str] = None
) -> List[ApprovalStep]:
    """
    Create one PENDING step per role the form type requires

    Steps follow the fixed role order (lecturer, dean, registrar, accounts
    receivable) and are numbered 1..n. When the first role is lecturer or
    dean the student must name that approver; every other step is assigned
    later, either by the preceding approver or by role-based queues.

    Raises:
        ValidationError: form type requires no approval, or the first role
            cannot be picked by the student
        AssigneeRequiredError: first role is lecturer or dean and no
            approver was named
    """
    approval_types = form_type.required_approval_types()
    if not approval_types:
        raise ValidationError(
            f"Form type {form_type.form_type_id} requires no approvals",
            details={"form_type_id": form_type.form_type_id}
        )

    first_type = approval_types[0]
    if first_type in STUDENT_SELECTABLE_TYPES and not initial_assignee_id:
        # Lecturer and dean queues only list steps assigned to the caller
        raise AssigneeRequiredError(
            f"Select a {first_type.value} to review this form",
            details={"approval_type": first_type.value}
        )
    if initial_assignee_id and first_type not in STUDENT_SELECTABLE_TYPES:
        raise ValidationError(
            f"The first {first_type.value} approver cannot be chosen at submission",
            details={"approval_type": first_type.value}
        )

    return [
        ApprovalStep(
            step_id=generate_step_id(),
            approval_type=approval_type,
            sequence_order=index,
            assigned_approver_id=initial_assignee_id if index == 1 else None,
            status=StepStatus.PENDING,
        )
        for index, approval_type in enumerate(approval_types, start=1)
    ]
