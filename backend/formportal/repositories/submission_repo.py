"""Submission Repository - Data access for submissions and their approval chains"""
from typing import Any, Dict, Iterator, List, Optional
from datetime import datetime
from pymongo.collection import Collection
from pymongo import ASCENDING, DESCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError

from .mongo_client import get_collection, SUBMISSIONS, COUNTERS
from ..config.settings import settings
from ..domain.models import ApprovalChain, ApprovalStep, Submission
from ..domain.enums import SubmissionStatus, StepStatus, ApprovalType
from ..domain.errors import AlreadyExistsError, ConcurrencyError, SubmissionNotFoundError
from ..utils.idgen import format_reference_number
from ..utils.time import utc_now
from ..utils.logger import get_logger

logger = get_logger(__name__)


class SubmissionRepository:
    """
    Submission store

    A submission document embeds its approval steps, so a decision (step
    changes plus derived submission status) is written by a single
    version-checked update and is atomic by construction.
    """

    def __init__(
        self,
        submissions: Optional[Collection] = None,
        counters: Optional[Collection] = None
    ):
        self._submissions: Collection = submissions if submissions is not None else get_collection(SUBMISSIONS)
        self._counters: Collection = counters if counters is not None else get_collection(COUNTERS)

    # =========================================================================
    # Creation
    # =========================================================================

    def next_reference_number(self, year: int) -> str:
        """Allocate the next reference number for the given year"""
        counter = self._counters.find_one_and_update(
            {"_id": f"reference_number:{year}"},
            {"$inc": {"seq": 1}},
            upsert=True,
            return_document=ReturnDocument.AFTER
        )
        return format_reference_number(settings.reference_number_prefix, year, counter["seq"])

    def create_chain(self, submission: Submission, steps: List[ApprovalStep]) -> ApprovalChain:
        """Insert a submission together with its initial approval steps"""
        doc = self._to_document(submission, steps)
        doc["_id"] = submission.submission_id

        try:
            self._submissions.insert_one(doc)
        except DuplicateKeyError:
            raise AlreadyExistsError(
                f"Submission {submission.submission_id} already exists",
                details={"reference_number": submission.reference_number}
            )

        logger.info(
            f"Created submission {submission.reference_number} with {len(steps)} approval steps",
            extra={"submission_id": submission.submission_id, "reference_number": submission.reference_number}
        )
        return ApprovalChain(submission=submission, steps=steps)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_chain(self, submission_id: str) -> Optional[ApprovalChain]:
        """Get submission and steps by ID"""
        doc = self._submissions.find_one({"submission_id": submission_id})
        if doc:
            return self._from_document(doc)
        return None

    def load_chain(self, submission_id: str) -> ApprovalChain:
        """Get submission and steps by ID or raise error"""
        chain = self.get_chain(submission_id)
        if not chain:
            raise SubmissionNotFoundError(f"Submission {submission_id} not found")
        return chain

    def list_for_student(self, student_id: str, skip: int = 0, limit: int = 50) -> List[ApprovalChain]:
        """A student's submissions, newest first"""
        cursor = (
            self._submissions.find({"student_id": student_id})
            .sort("submitted_at", DESCENDING)
            .skip(skip)
            .limit(limit)
        )
        return [self._from_document(doc) for doc in cursor]

    def list_open_with_pending_step(
        self,
        assigned_approver_id: Optional[str] = None,
        approval_type: Optional[ApprovalType] = None
    ) -> List[ApprovalChain]:
        """
        Open submissions having a PENDING step matching the filters

        Readiness is not evaluated here; the caller applies the engine's
        readiness rule to each returned chain.
        """
        step_match: Dict[str, Any] = {"status": StepStatus.PENDING.value}
        if assigned_approver_id:
            step_match["assigned_approver_id"] = assigned_approver_id
        if approval_type:
            step_match["approval_type"] = approval_type.value

        query = {
            "status": SubmissionStatus.SUBMITTED.value,
            "steps": {"$elemMatch": step_match},
        }
        cursor = self._submissions.find(query).sort("submitted_at", ASCENDING)
        return [self._from_document(doc) for doc in cursor]

    def list_decided_by(self, staff_id: str, limit: int = 100) -> List[ApprovalChain]:
        """Submissions with at least one step decided by the staff member"""
        cursor = (
            self._submissions.find({"steps.decided_by": staff_id})
            .sort("submitted_at", DESCENDING)
            .limit(limit)
        )
        return [self._from_document(doc) for doc in cursor]

    def iter_documents(self, submitted_since: Optional[datetime] = None) -> Iterator[Dict[str, Any]]:
        """Raw documents for reconciliation, oldest first"""
        query: Dict[str, Any] = {}
        if submitted_since:
            query["submitted_at"] = {"$gte": submitted_since}
        for doc in self._submissions.find(query).sort("submitted_at", ASCENDING):
            doc.pop("_id", None)
            yield doc

    # =========================================================================
    # Decisions
    # =========================================================================

    def save_decision(
        self,
        submission_id: str,
        updated_steps: List[ApprovalStep],
        new_status: SubmissionStatus,
        completed_at: Optional[datetime] = None,
        rejection_reason: Optional[str] = None,
        *,
        expected_version: int
    ) -> ApprovalChain:
        """
        Persist a decision atomically with optimistic concurrency

        Steps, status and terminal fields are written in one update that only
        matches while the stored version equals expected_version.

        Raises:
            ConcurrencyError: another decision was saved since the chain was read
            SubmissionNotFoundError: submission does not exist
        """
        updates: Dict[str, Any] = {
            "steps": [step.model_dump() for step in updated_steps],
            "status": new_status.value,
            "completed_at": completed_at,
            "rejection_reason": rejection_reason,
            "version": expected_version + 1,
            "updated_at": utc_now(),
        }

        result = self._submissions.find_one_and_update(
            {"submission_id": submission_id, "version": expected_version},
            {"$set": updates},
            return_document=ReturnDocument.AFTER
        )

        if result is None:
            exists = self._submissions.find_one({"submission_id": submission_id}, {"_id": 1})
            if exists:
                raise ConcurrencyError(
                    f"Submission {submission_id} was modified. Please refresh and try again.",
                    details={"expected_version": expected_version}
                )
            raise SubmissionNotFoundError(f"Submission {submission_id} not found")

        logger.info(
            f"Saved decision for submission {submission_id}",
            extra={"submission_id": submission_id, "status": new_status.value}
        )
        return self._from_document(result)

    # =========================================================================
    # Mapping
    # =========================================================================

    def _to_document(self, submission: Submission, steps: List[ApprovalStep]) -> Dict[str, Any]:
        # Don't use mode="json" - it converts datetime to strings, breaking MongoDB sorting
        doc = submission.model_dump()
        doc["steps"] = [step.model_dump() for step in steps]
        return doc

    def _from_document(self, doc: Dict[str, Any]) -> ApprovalChain:
        doc = dict(doc)
        doc.pop("_id", None)
        steps = [ApprovalStep.model_validate(step) for step in doc.pop("steps", [])]
        return ApprovalChain(submission=Submission.model_validate(doc), steps=steps)
