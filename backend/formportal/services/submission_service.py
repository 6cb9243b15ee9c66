"""Submission Service - Business logic around submissions and approval decisions"""
from typing import Any, Dict, List, Optional

from ..domain.models import (
    ApprovalChain, ApprovalStep, DecisionResult, QueueItem, Submission
)
from ..domain.enums import (
    ApprovalType, SubmissionStatus, STUDENT_SELECTABLE_TYPES, TERMINAL_SUBMISSION_STATUSES
)
from ..domain.errors import (
    AssigneeRequiredError, ConcurrencyError, IneligibleApproverError, MalformedChainError,
    SubmissionClosedError
)
from ..engine.approval_engine import ApprovalWorkflowEngine
from ..engine.chain_builder import build_approval_chain
from ..repositories.submission_repo import SubmissionRepository
from ..repositories.form_type_repo import FormTypeRepository
from .directory_service import StaffDirectory
from ..utils.idgen import generate_submission_id
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SubmissionService:
    """
    Service for submission operations

    Every decision follows the same discipline: load a fresh chain, run the
    pure engine over it, then persist with a version check so a concurrent
    decision on the same submission surfaces as ConcurrencyError.
    """

    def __init__(
        self,
        submission_repo: Optional[SubmissionRepository] = None,
        form_type_repo: Optional[FormTypeRepository] = None,
        directory: Optional[StaffDirectory] = None,
        engine: Optional[ApprovalWorkflowEngine] = None
    ):
        self.submission_repo = submission_repo or SubmissionRepository()
        self.form_type_repo = form_type_repo or FormTypeRepository()
        self.directory = directory or StaffDirectory()
        self.engine = engine or ApprovalWorkflowEngine()

    # =========================================================================
    # Submission
    # =========================================================================

    def submit(
        self,
        student_id: str,
        form_type_id: str,
        form_data: Dict[str, Any],
        initial_assignee_id: Optional[str] = None,
        notes: Optional[str] = None
    ) -> ApprovalChain:
        """Create a submission and its approval chain from the form type"""
        form_type = self.form_type_repo.get_active_or_raise(form_type_id)
        steps = build_approval_chain(form_type, initial_assignee_id)

        if initial_assignee_id:
            self._ensure_eligible(initial_assignee_id, steps[0].approval_type)

        now = utc_now()
        submission = Submission(
            submission_id=generate_submission_id(),
            reference_number=self.submission_repo.next_reference_number(now.year),
            student_id=student_id,
            form_type_id=form_type.form_type_id,
            form_type_name=form_type.name,
            form_data=form_data,
            notes=notes,
            status=SubmissionStatus.SUBMITTED,
            submitted_at=now,
        )
        return self.submission_repo.create_chain(submission, steps)

    def get_chain(self, submission_id: str) -> ApprovalChain:
        return self.submission_repo.load_chain(submission_id)

    def list_for_student(self, student_id: str, skip: int = 0, limit: int = 50) -> List[ApprovalChain]:
        return self.submission_repo.list_for_student(student_id, skip=skip, limit=limit)

    def get_ready_steps(self, submission_id: str) -> List[ApprovalStep]:
        chain = self.submission_repo.load_chain(submission_id)
        return self.engine.compute_ready_steps(chain.steps)

    # =========================================================================
    # Decisions
    # =========================================================================

    def approve(
        self,
        submission_id: str,
        step_id: str,
        decided_by: str,
        comments: Optional[str] = None,
        next_assignee_id: Optional[str] = None,
        expected_version: Optional[int] = None
    ) -> ApprovalChain:
        """
        Approve the ready step of a submission

        next_assignee_id is checked against the role of the step that will
        receive it before anything is saved. It is required when that step is
        a lecturer or dean step, which only reaches its approver by
        assignment.
        """
        chain = self.submission_repo.load_chain(submission_id)
        self._check_version(chain, expected_version)

        result = self.engine.approve_step(
            chain.steps,
            step_id,
            decided_by=decided_by,
            comments=comments,
            next_assignee_id=next_assignee_id,
        )

        receiver = self.engine.find_reassignment_target(chain.steps, step_id)
        if receiver is not None:
            if not next_assignee_id and receiver.approval_type in STUDENT_SELECTABLE_TYPES:
                raise AssigneeRequiredError(
                    f"Select a {receiver.approval_type.value} for the next approval step",
                    details={"step_id": receiver.step_id, "approval_type": receiver.approval_type.value}
                )
            if next_assignee_id:
                self._ensure_eligible(next_assignee_id, receiver.approval_type)

        return self._persist(chain, result)

    def reject(
        self,
        submission_id: str,
        step_id: str,
        decided_by: str,
        reason: Optional[str],
        expected_version: Optional[int] = None
    ) -> ApprovalChain:
        """Reject the ready step, which rejects the whole submission"""
        chain = self.submission_repo.load_chain(submission_id)
        self._check_version(chain, expected_version)

        result = self.engine.reject_step(chain.steps, step_id, decided_by=decided_by, reason=reason)
        return self._persist(chain, result)

    # =========================================================================
    # Queues
    # =========================================================================

    def approver_queue(
        self,
        staff_id: Optional[str] = None,
        approval_type: Optional[ApprovalType] = None
    ) -> List[QueueItem]:
        """
        Ready steps across open submissions, oldest submission first

        Lecturer and dean queues filter by assignee; registrar and accounts
        receivable queues filter by role. Both filters may be combined.
        """
        items: List[QueueItem] = []
        chains = self.submission_repo.list_open_with_pending_step(
            assigned_approver_id=staff_id,
            approval_type=approval_type
        )

        for chain in chains:
            try:
                ready = self.engine.compute_ready_steps(chain.steps)
            except MalformedChainError as e:
                logger.error(
                    f"Skipping malformed chain in queue: {e.message}",
                    extra={"submission_id": chain.submission.submission_id, "error_code": e.error_code}
                )
                continue

            for step in ready:
                if staff_id and step.assigned_approver_id != staff_id:
                    continue
                if approval_type and step.approval_type != approval_type:
                    continue
                items.append(self._queue_item(chain, step))

        return items

    def history(self, staff_id: str, limit: int = 100) -> List[QueueItem]:
        """Steps the staff member has decided, newest submission first"""
        items = []
        for chain in self.submission_repo.list_decided_by(staff_id, limit=limit):
            for step in chain.steps:
                if step.decided_by == staff_id:
                    items.append(self._queue_item(chain, step))
        return items

    # =========================================================================
    # Helpers
    # =========================================================================

    def _check_version(self, chain: ApprovalChain, expected_version: Optional[int]) -> None:
        if expected_version is not None and expected_version != chain.version:
            raise ConcurrencyError(
                f"Submission {chain.submission.submission_id} was modified. Please refresh and try again.",
                details={"expected_version": expected_version, "current_version": chain.version}
            )

    def _ensure_eligible(self, staff_id: str, approval_type: ApprovalType) -> None:
        if not self.directory.is_eligible(staff_id, approval_type):
            raise IneligibleApproverError(
                f"Staff member {staff_id} cannot approve {approval_type.value} steps",
                details={"staff_id": staff_id, "approval_type": approval_type.value}
            )

    def _persist(self, chain: ApprovalChain, result: DecisionResult) -> ApprovalChain:
        submission = chain.submission
        if submission.status in TERMINAL_SUBMISSION_STATUSES:
            # Steps still had a ready step, so stored status has drifted
            raise SubmissionClosedError(
                f"Submission {submission.submission_id} is already {submission.status.value}",
                details={"status": submission.status.value}
            )

        saved = self.submission_repo.save_decision(
            submission.submission_id,
            result.updated_steps,
            result.submission_status,
            completed_at=result.completed_at,
            rejection_reason=result.rejection_reason,
            expected_version=chain.version,
        )

        logger.info(
            f"Submission {submission.reference_number} is {result.submission_status.value}",
            extra={
                "submission_id": submission.submission_id,
                "step_id": result.decided_step_id,
                "status": result.submission_status.value,
            }
        )
        return saved

    def _queue_item(self, chain: ApprovalChain, step: ApprovalStep) -> QueueItem:
        submission = chain.submission
        return QueueItem(
            submission_id=submission.submission_id,
            reference_number=submission.reference_number,
            student_id=submission.student_id,
            form_type_name=submission.form_type_name,
            submitted_at=submission.submitted_at,
            version=submission.version,
            step=step,
        )
