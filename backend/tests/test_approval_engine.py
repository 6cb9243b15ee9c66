"""Tests for the approval chain state machine"""
import logging
from datetime import datetime, timedelta, timezone
from itertools import count

import pytest

from formportal.domain.enums import ApprovalType, StepStatus, SubmissionStatus
from formportal.domain.errors import (
    MalformedChainError, MissingReasonError, NotReadyError, StepNotFoundError
)
from formportal.engine.approval_engine import ApprovalWorkflowEngine


def ids(steps):
    return [s.step_id for s in steps]


# =============================================================================
# compute_ready_steps
# =============================================================================

class TestComputeReadySteps:

    def test_first_pending_step_is_ready(self, engine, three_step_chain):
        assert ids(engine.compute_ready_steps(three_step_chain)) == ["S1"]

    def test_ready_step_follows_approved_prefix(self, engine, make_step):
        steps = [
            make_step(1, StepStatus.APPROVED),
            make_step(2, StepStatus.APPROVED),
            make_step(3),
            make_step(4),
        ]
        assert ids(engine.compute_ready_steps(steps)) == ["S3"]

    def test_input_order_does_not_matter(self, engine, make_step):
        steps = [make_step(3), make_step(1, StepStatus.APPROVED), make_step(2)]
        assert ids(engine.compute_ready_steps(steps)) == ["S2"]

    def test_gaps_in_sequence_order_are_allowed(self, engine, make_step):
        steps = [make_step(10, StepStatus.APPROVED), make_step(20), make_step(30)]
        assert ids(engine.compute_ready_steps(steps)) == ["S20"]

    @pytest.mark.parametrize("rejected_order", [1, 2, 3])
    def test_rejected_chain_has_no_ready_step(self, engine, make_step, rejected_order):
        steps = []
        for order in (1, 2, 3):
            if order < rejected_order:
                status = StepStatus.APPROVED
            elif order == rejected_order:
                status = StepStatus.REJECTED
            else:
                status = StepStatus.PENDING
            steps.append(make_step(order, status))

        assert engine.compute_ready_steps(steps) == []
        assert engine.derive_submission_status(steps) == SubmissionStatus.REJECTED

    def test_fully_approved_chain_has_no_ready_step(self, engine, make_step):
        steps = [make_step(order, StepStatus.APPROVED) for order in (1, 2, 3)]
        assert engine.compute_ready_steps(steps) == []
        assert engine.derive_submission_status(steps) == SubmissionStatus.APPROVED

    def test_duplicate_sequence_order_is_malformed(self, engine, make_step):
        steps = [make_step(1, step_id="A"), make_step(1, step_id="B")]
        with pytest.raises(MalformedChainError) as exc_info:
            engine.compute_ready_steps(steps)
        assert exc_info.value.details["step_ids"] == ["A", "B"]

    def test_empty_chain_is_malformed(self, engine):
        with pytest.raises(MalformedChainError):
            engine.compute_ready_steps([])


# =============================================================================
# derive_submission_status
# =============================================================================

class TestDeriveSubmissionStatus:

    def test_open_chain_is_submitted(self, engine, make_step):
        steps = [make_step(1, StepStatus.APPROVED), make_step(2)]
        assert engine.derive_submission_status(steps) == SubmissionStatus.SUBMITTED

    def test_rejection_wins_over_everything(self, engine, make_step):
        steps = [make_step(1, StepStatus.APPROVED), make_step(2, StepStatus.REJECTED), make_step(3)]
        assert engine.derive_submission_status(steps) == SubmissionStatus.REJECTED

    def test_empty_chain_is_malformed(self, engine):
        with pytest.raises(MalformedChainError):
            engine.derive_submission_status([])


# =============================================================================
# approve_step
# =============================================================================

class TestApproveStep:

    def test_lecturer_picks_dean(self, engine, make_step, fixed_now):
        steps = [
            make_step(1, approval_type=ApprovalType.LECTURER, assignee="L1"),
            make_step(2, approval_type=ApprovalType.DEAN),
        ]
        result = engine.approve_step(steps, "S1", decided_by="L1", comments="Fine", next_assignee_id="D1")

        first, second = result.updated_steps
        assert first.status == StepStatus.APPROVED
        assert first.decided_by == "L1"
        assert first.decided_at == fixed_now
        assert first.comments == "Fine"
        assert second.assigned_approver_id == "D1"
        assert result.reassigned_step_id == "S2"
        assert ids(engine.compute_ready_steps(result.updated_steps)) == ["S2"]
        assert result.submission_status == SubmissionStatus.SUBMITTED
        assert result.completed_at is None

    def test_input_snapshot_is_not_mutated(self, engine, three_step_chain):
        before = [s.model_copy() for s in three_step_chain]
        engine.approve_step(three_step_chain, "S1", decided_by="L1", next_assignee_id="D1")
        assert three_step_chain == before

    def test_three_approvals_complete_once(self, make_step):
        times = (datetime(2026, 3, 1, tzinfo=timezone.utc) + timedelta(hours=n) for n in count())
        engine = ApprovalWorkflowEngine(clock=lambda: next(times))
        steps = [make_step(1), make_step(2), make_step(3)]

        completions = []
        for step_id in ("S1", "S2", "S3"):
            result = engine.approve_step(steps, step_id, decided_by="R1")
            steps = result.updated_steps
            completions.append(result.completed_at)

        assert result.submission_status == SubmissionStatus.APPROVED
        assert completions[:2] == [None, None]
        assert completions[2] == steps[2].decided_at
        assert completions[2] == datetime(2026, 3, 1, 2, tzinfo=timezone.utc)
        assert engine.compute_ready_steps(steps) == []

    def test_blocked_step_is_not_ready(self, engine, three_step_chain):
        with pytest.raises(NotReadyError) as exc_info:
            engine.approve_step(three_step_chain, "S2", decided_by="D1")
        assert exc_info.value.details["ready_step_ids"] == ["S1"]

    def test_second_approve_fails(self, engine, three_step_chain):
        steps = engine.approve_step(three_step_chain, "S1", decided_by="L1").updated_steps
        with pytest.raises(NotReadyError):
            engine.approve_step(steps, "S1", decided_by="L1")

    def test_approve_after_rejection_fails(self, engine, three_step_chain):
        steps = engine.reject_step(three_step_chain, "S1", decided_by="L1", reason="No").updated_steps
        with pytest.raises(NotReadyError):
            engine.approve_step(steps, "S2", decided_by="D1")

    def test_unknown_step(self, engine, three_step_chain):
        with pytest.raises(StepNotFoundError):
            engine.approve_step(three_step_chain, "NOPE", decided_by="L1")

    def test_next_assignee_skips_already_assigned_steps(self, engine, make_step):
        steps = [make_step(1), make_step(2, assignee="D1"), make_step(3)]
        result = engine.approve_step(steps, "S1", decided_by="L1", next_assignee_id="R9")

        assert result.updated_steps[1].assigned_approver_id == "D1"
        assert result.updated_steps[2].assigned_approver_id == "R9"
        assert result.reassigned_step_id == "S3"

    def test_next_assignee_ignored_without_unassigned_successor(self, engine, make_step):
        steps = [make_step(1), make_step(2, assignee="D1")]
        result = engine.approve_step(steps, "S1", decided_by="L1", next_assignee_id="D2")

        assert result.reassigned_step_id is None
        assert result.updated_steps[1].assigned_approver_id == "D1"

    def test_find_reassignment_target(self, engine, make_step):
        steps = [make_step(1), make_step(2, assignee="D1"), make_step(3)]
        assert engine.find_reassignment_target(steps, "S1").step_id == "S3"
        assert engine.find_reassignment_target(steps, "S3") is None

    def test_decision_by_other_staff_is_logged(self, engine, three_step_chain, caplog):
        with caplog.at_level(logging.WARNING, logger="formportal.engine.approval_engine"):
            result = engine.approve_step(three_step_chain, "S1", decided_by="L2")

        assert result.updated_steps[0].decided_by == "L2"
        assert any("assigned to L1" in r.getMessage() for r in caplog.records)


# =============================================================================
# reject_step
# =============================================================================

class TestRejectStep:

    def test_rejection_terminates_submission(self, engine, make_step, fixed_now):
        steps = [
            make_step(1, approval_type=ApprovalType.LECTURER),
            make_step(2, approval_type=ApprovalType.DEAN),
        ]
        result = engine.reject_step(steps, "S1", decided_by="L1", reason="Incomplete transcript")

        first, second = result.updated_steps
        assert first.status == StepStatus.REJECTED
        assert first.rejection_reason == "Incomplete transcript"
        assert second.status == StepStatus.PENDING
        assert result.submission_status == SubmissionStatus.REJECTED
        assert result.rejection_reason == "Incomplete transcript"
        assert result.completed_at == fixed_now
        assert engine.compute_ready_steps(result.updated_steps) == []

    @pytest.mark.parametrize("reason", ["", "   ", None])
    def test_blank_reason_is_refused(self, engine, three_step_chain, reason):
        before = [s.model_copy() for s in three_step_chain]
        with pytest.raises(MissingReasonError):
            engine.reject_step(three_step_chain, "S1", decided_by="L1", reason=reason)
        assert three_step_chain == before

    def test_reason_is_trimmed(self, engine, three_step_chain):
        result = engine.reject_step(three_step_chain, "S1", decided_by="L1", reason="  Late  ")
        assert result.rejection_reason == "Late"

    def test_blocked_step_cannot_be_rejected(self, engine, three_step_chain):
        with pytest.raises(NotReadyError):
            engine.reject_step(three_step_chain, "S3", decided_by="R1", reason="No")
