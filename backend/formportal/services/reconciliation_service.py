"""Reconciliation Service - Detect and repair drift between submissions and their steps"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..domain.models import ApprovalChain, ApprovalStep, DriftReport, Submission
from ..domain.enums import DriftKind, StepStatus, SubmissionStatus, TERMINAL_SUBMISSION_STATUSES
from ..domain.errors import ConcurrencyError, MalformedChainError
from ..engine.approval_engine import ApprovalWorkflowEngine
from ..repositories.submission_repo import SubmissionRepository
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ReconciliationService:
    """
    Compare each stored submission status with the status derived from its
    steps. Older data was written as two separate updates (step row, then
    submission row), so the two can disagree.
    """

    def __init__(
        self,
        submission_repo: Optional[SubmissionRepository] = None,
        engine: Optional[ApprovalWorkflowEngine] = None
    ):
        self.submission_repo = submission_repo or SubmissionRepository()
        self.engine = engine or ApprovalWorkflowEngine()

    def inspect(self, chain: ApprovalChain) -> Optional[DriftReport]:
        """Return a DriftReport when the chain is inconsistent, else None"""
        submission = chain.submission
        report = DriftReport(
            submission_id=submission.submission_id,
            reference_number=submission.reference_number,
            version=submission.version,
            stored_status=submission.status,
        )

        try:
            self.engine.compute_ready_steps(chain.steps)
            derived = self.engine.derive_submission_status(chain.steps)
        except MalformedChainError as e:
            report.kinds.append(DriftKind.MALFORMED_CHAIN)
            report.detail = e.message
            return report

        report.derived_status = derived
        if submission.status != derived:
            report.kinds.append(DriftKind.STATUS_MISMATCH)
        if derived in TERMINAL_SUBMISSION_STATUSES and submission.completed_at is None:
            report.kinds.append(DriftKind.MISSING_COMPLETED_AT)
        if derived == SubmissionStatus.SUBMITTED and submission.completed_at is not None:
            report.kinds.append(DriftKind.UNEXPECTED_COMPLETED_AT)
        if derived == SubmissionStatus.REJECTED and not submission.rejection_reason:
            report.kinds.append(DriftKind.MISSING_REJECTION_REASON)

        return report if report.kinds else None

    def find_drift(self, submitted_since: Optional[datetime] = None) -> List[DriftReport]:
        reports = []
        for doc in self.submission_repo.iter_documents(submitted_since=submitted_since):
            report = self._inspect_document(doc)
            if report:
                logger.warning(
                    f"Drift on {report.reference_number}: {', '.join(k.value for k in report.kinds)}",
                    extra={
                        "submission_id": report.submission_id,
                        "status": report.stored_status.value if report.stored_status else None
                    }
                )
                reports.append(report)
        return reports

    def repair(self, report: DriftReport) -> bool:
        """
        Rewrite submission status and terminal fields from the steps

        Malformed chains are left alone for manual investigation. Returns
        False when skipped or when the submission changed since inspection.
        """
        if DriftKind.MALFORMED_CHAIN in report.kinds:
            return False

        chain = self.submission_repo.load_chain(report.submission_id)
        if chain.version != report.version:
            logger.info(f"Submission {report.submission_id} changed since inspection, skipping repair")
            return False

        derived = self.engine.derive_submission_status(chain.steps)
        completed_at, rejection_reason = self._terminal_fields(chain, derived)

        try:
            self.submission_repo.save_decision(
                report.submission_id,
                chain.steps,
                derived,
                completed_at=completed_at,
                rejection_reason=rejection_reason,
                expected_version=chain.version,
            )
        except ConcurrencyError:
            logger.warning(
                f"Concurrent update while repairing {report.submission_id}",
                extra={"submission_id": report.submission_id}
            )
            return False

        logger.info(
            f"Repaired submission {report.reference_number} -> {derived.value}",
            extra={"submission_id": report.submission_id, "action": "repair", "status": derived.value}
        )
        return True

    def run(self, auto_repair: bool = False, submitted_since: Optional[datetime] = None) -> Dict[str, Any]:
        """Scan for drift and optionally repair it; returns a summary"""
        reports = self.find_drift(submitted_since=submitted_since)
        repaired = 0
        if auto_repair:
            repaired = sum(1 for report in reports if self.repair(report))

        summary = {
            "drifted": len(reports),
            "repaired": repaired,
            "malformed": sum(1 for r in reports if DriftKind.MALFORMED_CHAIN in r.kinds),
            "reports": [r.model_dump(mode="json") for r in reports],
        }
        logger.info(f"Reconciliation finished: {summary['drifted']} drifted, {repaired} repaired")
        return summary

    # =========================================================================
    # Helpers
    # =========================================================================

    def _inspect_document(self, doc: Dict[str, Any]) -> Optional[DriftReport]:
        steps_raw = doc.get("steps", [])
        submission_raw = {k: v for k, v in doc.items() if k != "steps"}
        try:
            chain = ApprovalChain(
                submission=Submission.model_validate(submission_raw),
                steps=[ApprovalStep.model_validate(step) for step in steps_raw],
            )
        except PydanticValidationError as e:
            logger.error(f"Unreadable submission document {doc.get('submission_id')}: {e}")
            version = doc.get("version")
            return DriftReport(
                submission_id=str(doc.get("submission_id")),
                reference_number=str(doc.get("reference_number")),
                version=version if isinstance(version, int) else 0,
                stored_status=self._known_status(doc.get("status")),
                kinds=[DriftKind.MALFORMED_CHAIN],
                detail=f"Document failed validation (stored status {doc.get('status')!r})",
            )
        return self.inspect(chain)

    def _known_status(self, value: Any) -> Optional[SubmissionStatus]:
        try:
            return SubmissionStatus(value)
        except ValueError:
            return None

    def _terminal_fields(self, chain: ApprovalChain, derived: SubmissionStatus):
        if derived == SubmissionStatus.SUBMITTED:
            return None, None

        submission = chain.submission
        if derived == SubmissionStatus.REJECTED:
            rejected = next(s for s in chain.steps if s.status == StepStatus.REJECTED)
            return (
                submission.completed_at or rejected.decided_at,
                submission.rejection_reason or rejected.rejection_reason,
            )

        decided = [s.decided_at for s in chain.steps if s.decided_at is not None]
        return submission.completed_at or (max(decided) if decided else None), None
