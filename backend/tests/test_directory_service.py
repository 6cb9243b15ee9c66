"""Tests for approver eligibility"""
from unittest.mock import MagicMock

import pytest

from formportal.domain.enums import ApprovalType
from formportal.services.directory_service import StaffDirectory


@pytest.fixture
def staff_repo(staff_members):
    by_id = {m.staff_id: m for m in staff_members}
    repo = MagicMock()
    repo.get_staff.side_effect = by_id.get
    repo.list_active.return_value = [m for m in staff_members if m.is_active]
    return repo


@pytest.fixture
def directory(staff_repo):
    return StaffDirectory(staff_repo=staff_repo)


@pytest.mark.parametrize("staff_id,approval_type,expected", [
    ("L1", ApprovalType.LECTURER, True),
    ("T1", ApprovalType.LECTURER, True),
    ("L1", ApprovalType.DEAN, False),
    ("D1", ApprovalType.DEAN, True),
    ("R1", ApprovalType.REGISTRAR, True),
    ("R1", ApprovalType.ACCOUNTS_RECEIVABLE, False),
    ("A1", ApprovalType.ACCOUNTS_RECEIVABLE, True),
    ("X1", ApprovalType.DEAN, False),
    ("nobody", ApprovalType.REGISTRAR, False),
])
def test_is_eligible(directory, staff_id, approval_type, expected):
    assert directory.is_eligible(staff_id, approval_type) is expected


def test_role_matching_ignores_case_and_underscores(directory):
    assert directory.role_matches("Accounts Receivable Officer", ApprovalType.ACCOUNTS_RECEIVABLE)
    assert directory.role_matches("ACCOUNTS_RECEIVABLE", ApprovalType.ACCOUNTS_RECEIVABLE)
    assert directory.role_matches("associate dean", ApprovalType.DEAN)
    assert not directory.role_matches("", ApprovalType.REGISTRAR)


def test_list_eligible_filters_by_role(directory, staff_repo):
    members = directory.list_eligible(ApprovalType.LECTURER, department="CS")

    assert [m.staff_id for m in members] == ["L1", "T1"]
    staff_repo.list_active.assert_called_once_with(department="CS")

