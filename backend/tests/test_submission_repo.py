"""Tests for the submission store, with MagicMock in place of pymongo collections"""
from unittest.mock import MagicMock

import pytest
from pymongo.errors import DuplicateKeyError

from formportal.domain.enums import StepStatus, SubmissionStatus, ApprovalType
from formportal.domain.errors import AlreadyExistsError, ConcurrencyError, SubmissionNotFoundError
from formportal.repositories.submission_repo import SubmissionRepository


@pytest.fixture
def submissions():
    return MagicMock(name="form_submissions")


@pytest.fixture
def counters():
    return MagicMock(name="counters")


@pytest.fixture
def repo(submissions, counters):
    return SubmissionRepository(submissions=submissions, counters=counters)


@pytest.fixture
def stored_doc(make_submission, three_step_chain):
    doc = make_submission().model_dump()
    doc["_id"] = doc["submission_id"]
    doc["steps"] = [s.model_dump() for s in three_step_chain]
    return doc


def test_reference_number_uses_yearly_counter(repo, counters):
    counters.find_one_and_update.return_value = {"_id": "reference_number:2026", "seq": 42}

    assert repo.next_reference_number(2026) == "FRM-2026-000042"
    query, update = counters.find_one_and_update.call_args.args
    assert query == {"_id": "reference_number:2026"}
    assert update == {"$inc": {"seq": 1}}
    assert counters.find_one_and_update.call_args.kwargs["upsert"] is True


def test_create_chain_embeds_steps(repo, submissions, make_submission, three_step_chain):
    submission = make_submission()
    chain = repo.create_chain(submission, three_step_chain)

    doc = submissions.insert_one.call_args.args[0]
    assert doc["_id"] == "SUB-1"
    assert [s["step_id"] for s in doc["steps"]] == ["S1", "S2", "S3"]
    assert chain.version == 1


def test_create_chain_duplicate(repo, submissions, make_submission, three_step_chain):
    submissions.insert_one.side_effect = DuplicateKeyError("dup")
    with pytest.raises(AlreadyExistsError):
        repo.create_chain(make_submission(), three_step_chain)


def test_load_chain(repo, submissions, stored_doc):
    submissions.find_one.return_value = stored_doc

    chain = repo.load_chain("SUB-1")

    assert chain.submission.reference_number == "FRM-2026-000001"
    assert [s.approval_type for s in chain.steps] == [
        ApprovalType.LECTURER, ApprovalType.DEAN, ApprovalType.REGISTRAR
    ]


def test_load_chain_missing(repo, submissions):
    submissions.find_one.return_value = None
    with pytest.raises(SubmissionNotFoundError):
        repo.load_chain("SUB-404")


def test_save_decision_is_version_checked(repo, submissions, stored_doc, three_step_chain, fixed_now):
    saved = dict(stored_doc, status="REJECTED", version=3)
    submissions.find_one_and_update.return_value = saved
    steps = [three_step_chain[0].model_copy(update={"status": StepStatus.REJECTED})] + three_step_chain[1:]

    chain = repo.save_decision(
        "SUB-1", steps, SubmissionStatus.REJECTED,
        completed_at=fixed_now, rejection_reason="Late", expected_version=2
    )

    query, update = submissions.find_one_and_update.call_args.args
    assert query == {"submission_id": "SUB-1", "version": 2}
    fields = update["$set"]
    assert fields["status"] == "REJECTED"
    assert fields["version"] == 3
    assert fields["completed_at"] == fixed_now
    assert fields["rejection_reason"] == "Late"
    assert fields["steps"][0]["status"] == StepStatus.REJECTED
    assert chain.version == 3


def test_save_decision_conflict(repo, submissions, three_step_chain):
    submissions.find_one_and_update.return_value = None
    submissions.find_one.return_value = {"_id": "SUB-1"}

    with pytest.raises(ConcurrencyError) as exc_info:
        repo.save_decision("SUB-1", three_step_chain, SubmissionStatus.SUBMITTED, expected_version=1)
    assert exc_info.value.http_status == 409


def test_save_decision_missing_submission(repo, submissions, three_step_chain):
    submissions.find_one_and_update.return_value = None
    submissions.find_one.return_value = None

    with pytest.raises(SubmissionNotFoundError):
        repo.save_decision("SUB-404", three_step_chain, SubmissionStatus.SUBMITTED, expected_version=1)


def test_pending_step_query(repo, submissions, stored_doc):
    submissions.find.return_value.sort.return_value = [stored_doc]

    chains = repo.list_open_with_pending_step(assigned_approver_id="L1", approval_type=ApprovalType.LECTURER)

    query = submissions.find.call_args.args[0]
    assert query == {
        "status": "SUBMITTED",
        "steps": {"$elemMatch": {"status": "PENDING", "assigned_approver_id": "L1", "approval_type": "lecturer"}},
    }
    assert len(chains) == 1
