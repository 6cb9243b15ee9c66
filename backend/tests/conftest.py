"""
Pytest Configuration and Fixtures

This file contains shared fixtures and configuration for all tests.
No MongoDB is needed: repositories receive MagicMock collections.
"""

import os
import tempfile

# Settings are read at import time; keep log files out of the working tree
os.environ.setdefault("LOGS_PATH", tempfile.mkdtemp(prefix="formportal-logs-"))
os.environ.setdefault("SCHEDULER_ENABLED", "false")

from datetime import datetime, timezone
from typing import Callable, List, Optional
from unittest.mock import MagicMock

import pytest

from formportal.domain.models import ApprovalChain, ApprovalStep, FormType, StaffMember, Submission
from formportal.domain.enums import ApprovalType, StepStatus, SubmissionStatus
from formportal.engine.approval_engine import ApprovalWorkflowEngine


FIXED_NOW = datetime(2026, 3, 14, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def engine() -> ApprovalWorkflowEngine:
    """Engine with a frozen clock"""
    return ApprovalWorkflowEngine(clock=lambda: FIXED_NOW)


@pytest.fixture
def make_step() -> Callable[..., ApprovalStep]:
    """Build a step; step_id defaults to S<order>"""
    def _make(
        order: int,
        status: StepStatus = StepStatus.PENDING,
        approval_type: ApprovalType = ApprovalType.REGISTRAR,
        assignee: Optional[str] = None,
        step_id: Optional[str] = None,
        **kwargs
    ) -> ApprovalStep:
        return ApprovalStep(
            step_id=step_id or f"S{order}",
            approval_type=approval_type,
            sequence_order=order,
            assigned_approver_id=assignee,
            status=status,
            **kwargs
        )
    return _make


@pytest.fixture
def three_step_chain(make_step) -> List[ApprovalStep]:
    """Lecturer (assigned to L1) -> dean (unassigned) -> registrar"""
    return [
        make_step(1, approval_type=ApprovalType.LECTURER, assignee="L1"),
        make_step(2, approval_type=ApprovalType.DEAN),
        make_step(3, approval_type=ApprovalType.REGISTRAR),
    ]


@pytest.fixture
def make_submission() -> Callable[..., Submission]:
    def _make(**overrides) -> Submission:
        data = dict(
            submission_id="SUB-1",
            reference_number="FRM-2026-000001",
            student_id="STU-1",
            form_type_id="withdrawal",
            form_type_name="Withdrawal Form",
            status=SubmissionStatus.SUBMITTED,
            submitted_at=datetime(2026, 3, 1, tzinfo=timezone.utc),
            version=1,
        )
        data.update(overrides)
        return Submission(**data)
    return _make


@pytest.fixture
def make_chain(make_submission) -> Callable[..., ApprovalChain]:
    def _make(steps: List[ApprovalStep], **submission_overrides) -> ApprovalChain:
        return ApprovalChain(submission=make_submission(**submission_overrides), steps=steps)
    return _make


@pytest.fixture
def withdrawal_form() -> FormType:
    return FormType(
        form_type_id="withdrawal",
        name="Withdrawal Form",
        requires_lecturer_approval=True,
        requires_dean_approval=True,
        requires_registrar_approval=True,
    )


@pytest.fixture
def staff_members() -> List[StaffMember]:
    return [
        StaffMember(staff_id="L1", first_name="Grace", last_name="Hopper", role="Senior Lecturer", department="CS"),
        StaffMember(staff_id="T1", first_name="Ann", last_name="Teach", role="Teacher", department="CS"),
        StaffMember(staff_id="D1", first_name="Ada", last_name="Lovelace", role="Dean of Science", department="CS"),
        StaffMember(staff_id="R1", first_name="Ed", last_name="Dijkstra", role="Registrar"),
        StaffMember(staff_id="A1", first_name="Barbara", last_name="Liskov", role="accounts_receivable"),
        StaffMember(staff_id="X1", first_name="Old", last_name="Dean", role="Dean", is_active=False),
    ]


@pytest.fixture
def mock_collection() -> MagicMock:
    """Stand-in for a pymongo Collection"""
    return MagicMock(name="collection")
