"""
Reconciliation scheduler

Runs a reconciliation pass on a fixed interval with APScheduler. Each pass
gets a fresh service built from the current DB handle; nothing is carried
over between passes.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from motor.motor_asyncio import AsyncIOMotorDatabase

from pickem.core.config import Settings
from pickem.services.odds_client import OddsApiClient, OddsClientError
from pickem.services.reconciliation_service import ReconciliationReport, ReconciliationService

logger = logging.getLogger(__name__)

RECONCILE_JOB_ID = "reconcile_current_week"


class SchedulerService:
    """Manages the periodic reconciliation job"""

    def __init__(
        self,
        settings: Settings,
        get_db: Callable[[], AsyncIOMotorDatabase],
        odds_client: Optional[OddsApiClient] = None,
    ):
        self.settings = settings
        self.get_db = get_db
        self.odds_client = odds_client or OddsApiClient(settings)
        self.scheduler = AsyncIOScheduler(timezone="UTC")
        self.is_running = False
        self.stats = {
            "last_run": None,
            "total_runs": 0,
            "successful_runs": 0,
            "failed_runs": 0,
            "last_error": None,
        }

    def start(self):
        """Start the scheduler (needs a running event loop)"""
        if self.is_running:
            return

        self.scheduler.add_job(
            func=self.run_once,
            trigger=IntervalTrigger(seconds=self.settings.reconcile_interval_seconds),
            id=RECONCILE_JOB_ID,
            name="Reconcile current week",
            max_instances=1,
            coalesce=True,
            misfire_grace_time=30,
            replace_existing=True,
        )
        self.scheduler.start()
        self.is_running = True
        logger.info(
            f"Scheduler started, reconciling every {self.settings.reconcile_interval_seconds}s"
        )

    async def shutdown(self):
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Scheduler stopped")
        await self.odds_client.aclose()

    async def run_once(self) -> Optional[ReconciliationReport]:
        """
        One scheduled tick.

        Errors are logged, never raised: the next tick simply tries again.
        A pass running past the timeout is abandoned.
        """
        self.stats["last_run"] = datetime.now(timezone.utc)
        self.stats["total_runs"] += 1

        service = ReconciliationService(self.get_db(), self.odds_client, self.settings)
        try:
            report = await asyncio.wait_for(
                service.run_pass(),
                timeout=self.settings.reconcile_timeout_seconds,
            )
        except asyncio.TimeoutError:
            self._record_failure(f"pass exceeded {self.settings.reconcile_timeout_seconds}s")
            return None
        except OddsClientError as e:
            self._record_failure(str(e))
            return None
        except Exception as e:
            logger.exception("Reconciliation pass crashed")
            self._record_failure(str(e))
            return None

        if report.aborted:
            self._record_failure(report.abort_reason)
        else:
            self.stats["successful_runs"] += 1
        return report

    def _record_failure(self, reason: Optional[str]):
        self.stats["failed_runs"] += 1
        self.stats["last_error"] = reason
        logger.error(f"Reconciliation pass failed: {reason}")
