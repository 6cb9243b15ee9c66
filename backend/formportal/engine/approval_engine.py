"""
Approval Workflow Engine - Sequential multi-party approval state machine

Given a snapshot of a submission's approval steps, the engine answers
"which step may act now" and applies approve/reject decisions, returning a
new snapshot plus the derived submission status. It never performs I/O and
never mutates its input: callers load the chain, run an operation, and
persist the result with a version check (see SubmissionRepository).

Readiness rule: a step is ready when it is PENDING and every step with a
smaller sequence_order is APPROVED. A rejection anywhere terminates the whole
submission and leaves later steps PENDING forever.
"""

from datetime import datetime
from typing import Callable, List, Optional, Sequence

from ..domain.models import ApprovalStep, DecisionResult
from ..domain.enums import SubmissionStatus, StepStatus
from ..domain.errors import (
    MalformedChainError, MissingReasonError, NotReadyError, StepNotFoundError
)
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ApprovalWorkflowEngine:
    """
    Pure state machine over one submission's approval steps

    Operations:
    - compute_ready_steps: steps an approver queue should surface
    - approve_step: approve the ready step, optionally routing the next one
    - reject_step: reject the ready step and terminate the submission
    - derive_submission_status: re-derive submission status from steps
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now):
        self._clock = clock

    # =========================================================================
    # Queries
    # =========================================================================

    def ordered_steps(self, steps: Sequence[ApprovalStep]) -> List[ApprovalStep]:
        """
        Return steps sorted by sequence_order after structural validation

        Raises:
            MalformedChainError: empty chain or duplicate sequence_order
        """
        if not steps:
            raise MalformedChainError("Approval chain has no steps")

        seen = {}
        for step in steps:
            if step.sequence_order in seen:
                raise MalformedChainError(
                    f"Duplicate sequence_order {step.sequence_order}",
                    details={
                        "sequence_order": step.sequence_order,
                        "step_ids": [seen[step.sequence_order], step.step_id]
                    }
                )
            seen[step.sequence_order] = step.step_id

        return sorted(steps, key=lambda s: s.sequence_order)

    def compute_ready_steps(self, steps: Sequence[ApprovalStep]) -> List[ApprovalStep]:
        """
        Steps that may be decided right now

        Empty when the chain is blocked, complete or rejected; otherwise the
        single lowest-order PENDING step whose predecessors are all APPROVED.
        """
        ready: List[ApprovalStep] = []
        all_approved_so_far = True

        for step in self.ordered_steps(steps):
            if not all_approved_so_far:
                break
            if step.status == StepStatus.PENDING:
                ready.append(step)
            if step.status != StepStatus.APPROVED:
                all_approved_so_far = False

        if len(ready) > 1:
            raise MalformedChainError(
                "More than one step is ready",
                details={"step_ids": [s.step_id for s in ready]}
            )
        return ready

    def derive_submission_status(self, steps: Sequence[ApprovalStep]) -> SubmissionStatus:
        """REJECTED if any step rejected, APPROVED if all approved, else SUBMITTED"""
        if not steps:
            raise MalformedChainError("Approval chain has no steps")

        if any(step.status == StepStatus.REJECTED for step in steps):
            return SubmissionStatus.REJECTED
        if all(step.status == StepStatus.APPROVED for step in steps):
            return SubmissionStatus.APPROVED
        return SubmissionStatus.SUBMITTED

    def find_reassignment_target(
        self,
        steps: Sequence[ApprovalStep],
        step_id: str
    ) -> Optional[ApprovalStep]:
        """
        The step that would receive next_assignee_id when step_id is approved

        That is the lowest-order step after step_id with no assigned approver.
        """
        ordered = self.ordered_steps(steps)
        current = self._find_step(ordered, step_id)
        for step in ordered:
            if step.sequence_order > current.sequence_order and step.assigned_approver_id is None:
                return step
        return None

    # =========================================================================
    # Transitions
    # =========================================================================

    def approve_step(
        self,
        steps: Sequence[ApprovalStep],
        step_id: str,
        decided_by: str,
        comments: Optional[str] = None,
        next_assignee_id: Optional[str] = None
    ) -> DecisionResult:
        """
        Approve the ready step

        Args:
            steps: Full step snapshot of one submission
            step_id: Step being approved
            decided_by: Staff ID performing the approval
            comments: Optional approver comments
            next_assignee_id: Staff ID to assign to the next unassigned step

        Returns:
            DecisionResult with the new snapshot and derived submission status

        Raises:
            StepNotFoundError: step_id not in the snapshot
            NotReadyError: step already decided or blocked by a predecessor
            MalformedChainError: snapshot violates chain invariants
        """
        ordered = self.ordered_steps(steps)
        target = self._ensure_ready(ordered, step_id)
        now = self._clock()
        self._log_override(target, decided_by)

        reassigned_step_id: Optional[str] = None
        if next_assignee_id:
            receiver = self.find_reassignment_target(ordered, step_id)
            reassigned_step_id = receiver.step_id if receiver else None

        updated: List[ApprovalStep] = []
        for step in ordered:
            if step.step_id == step_id:
                step = step.model_copy(update={
                    "status": StepStatus.APPROVED,
                    "decided_at": now,
                    "decided_by": decided_by,
                    "comments": comments,
                })
            elif step.step_id == reassigned_step_id:
                step = step.model_copy(update={"assigned_approver_id": next_assignee_id})
            updated.append(step)

        if next_assignee_id and reassigned_step_id is None:
            logger.info(
                "No unassigned step after approved step; next assignee ignored",
                extra={"step_id": step_id, "staff_id": next_assignee_id}
            )

        status = self.derive_submission_status(updated)
        completed_at = now if status == SubmissionStatus.APPROVED else None

        logger.info(
            f"Approved step {step_id} ({target.approval_type.value})",
            extra={"step_id": step_id, "staff_id": decided_by, "action": "approve", "status": status.value}
        )

        return DecisionResult(
            updated_steps=updated,
            submission_status=status,
            completed_at=completed_at,
            decided_step_id=step_id,
            reassigned_step_id=reassigned_step_id,
        )

    def reject_step(
        self,
        steps: Sequence[ApprovalStep],
        step_id: str,
        decided_by: str,
        reason: Optional[str]
    ) -> DecisionResult:
        """
        Reject the ready step, terminating the submission

        Raises:
            MissingReasonError: reason empty or blank
            StepNotFoundError: step_id not in the snapshot
            NotReadyError: step already decided or blocked by a predecessor
        """
        if not reason or not reason.strip():
            raise MissingReasonError(
                "A rejection reason is required",
                details={"step_id": step_id}
            )
        reason = reason.strip()

        ordered = self.ordered_steps(steps)
        target = self._ensure_ready(ordered, step_id)
        now = self._clock()
        self._log_override(target, decided_by)

        updated = [
            step.model_copy(update={
                "status": StepStatus.REJECTED,
                "decided_at": now,
                "decided_by": decided_by,
                "rejection_reason": reason,
            }) if step.step_id == step_id else step
            for step in ordered
        ]

        logger.info(
            f"Rejected step {step_id} ({target.approval_type.value})",
            extra={"step_id": step_id, "staff_id": decided_by, "action": "reject", "status": SubmissionStatus.REJECTED.value}
        )

        return DecisionResult(
            updated_steps=updated,
            submission_status=SubmissionStatus.REJECTED,
            completed_at=now,
            rejection_reason=reason,
            decided_step_id=step_id,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _find_step(self, steps: Sequence[ApprovalStep], step_id: str) -> ApprovalStep:
        for step in steps:
            if step.step_id == step_id:
                return step
        raise StepNotFoundError(f"Step {step_id} not found in chain", details={"step_id": step_id})

    def _ensure_ready(self, ordered: List[ApprovalStep], step_id: str) -> ApprovalStep:
        target = self._find_step(ordered, step_id)
        ready = self.compute_ready_steps(ordered)
        if not any(step.step_id == step_id for step in ready):
            raise NotReadyError(
                f"Step {step_id} is not currently actionable",
                details={
                    "step_id": step_id,
                    "status": target.status.value,
                    "ready_step_ids": [step.step_id for step in ready]
                }
            )
        return target

    def _log_override(self, step: ApprovalStep, decided_by: str) -> None:
        """Deciding someone else's step is allowed but always logged"""
        if step.assigned_approver_id and step.assigned_approver_id != decided_by:
            logger.warning(
                f"Step {step.step_id} decided by {decided_by}, assigned to {step.assigned_approver_id}",
                extra={"step_id": step.step_id, "staff_id": decided_by, "action": "override"}
            )
