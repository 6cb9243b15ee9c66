"""Reconciliation Scheduler - Periodic drift detection between submissions and steps

Runs ReconciliationService on an interval inside the API process. Repairs
only happen when reconciliation_auto_repair is enabled; otherwise drift is
reported in the logs for investigation.
"""
from typing import Any, Dict, Optional
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from pymongo.errors import PyMongoError

from ..config.settings import settings
from ..services.reconciliation_service import ReconciliationService
from ..utils.logger import get_logger, set_correlation_id
from ..utils.idgen import generate_correlation_id

logger = get_logger(__name__)


class ReconciliationScheduler:
    """APScheduler wrapper owning the reconciliation job"""

    JOB_ID = "reconcile_submissions"

    def __init__(self, service: Optional[ReconciliationService] = None):
        self.scheduler: Optional[AsyncIOScheduler] = None
        self._service = service
        self._is_running = False
        self.last_summary: Optional[Dict[str, Any]] = None

    @property
    def service(self) -> ReconciliationService:
        if self._service is None:
            self._service = ReconciliationService()
        return self._service

    def start(self) -> None:
        """Start the scheduler"""
        if self._is_running:
            logger.warning("Scheduler already running")
            return

        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.reconcile,
            trigger=IntervalTrigger(minutes=settings.reconciliation_interval_minutes),
            id=self.JOB_ID,
            name="Reconcile submission status with approval steps",
            replace_existing=True,
            max_instances=1
        )
        self.scheduler.start()
        self._is_running = True
        logger.info(f"Reconciliation scheduler started (every {settings.reconciliation_interval_minutes}m)")

    def stop(self) -> None:
        """Stop the scheduler"""
        if self.scheduler:
            self.scheduler.shutdown()
            self._is_running = False
            logger.info("Reconciliation scheduler stopped")

    @property
    def is_running(self) -> bool:
        return self._is_running

    def reconcile(self) -> Optional[Dict[str, Any]]:
        """Single reconciliation pass; store errors are logged, not raised"""
        set_correlation_id(generate_correlation_id())
        try:
            self.last_summary = self.service.run(auto_repair=settings.reconciliation_auto_repair)
        except PyMongoError as e:
            logger.error(f"Reconciliation pass failed: {e}", exc_info=True)
            return None
        return self.last_summary


# Global scheduler instance
_scheduler: Optional[ReconciliationScheduler] = None


def get_scheduler() -> ReconciliationScheduler:
    """Get or create scheduler instance"""
    global _scheduler
    if _scheduler is None:
        _scheduler = ReconciliationScheduler()
    return _scheduler


def start_scheduler() -> None:
    """Start the global scheduler"""
    get_scheduler().start()


def stop_scheduler() -> None:
    """Stop the global scheduler"""
    global _scheduler
    if _scheduler:
        _scheduler.stop()
        _scheduler = None
