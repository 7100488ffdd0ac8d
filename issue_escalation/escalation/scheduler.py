"""Escalation scheduler for running the daily escalation pass."""

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from issue_escalation.config import settings
from issue_escalation.escalation.engine import EscalationPassRunner, PassSummary
from issue_escalation.utils.logging import get_logger, CorrelationContextManager

logger = get_logger(__name__)

JOB_ID = "escalation_pass"


class EscalationScheduler:
    """Scheduler that triggers escalation passes on a cron cadence."""

    def __init__(
        self,
        runner: Optional[EscalationPassRunner] = None,
        cron: Optional[str] = None,
        timezone: Optional[str] = None
    ):
        self.scheduler = AsyncIOScheduler(timezone=timezone or settings.ESCALATION_TIMEZONE)
        self.runner = runner or EscalationPassRunner.from_settings()
        self.cron = cron or settings.ESCALATION_PASS_CRON
        self.timezone = timezone or settings.ESCALATION_TIMEZONE
        self.is_running = False

    async def start(self) -> None:
        """Start the escalation scheduler."""
        if self.is_running:
            logger.warning("Escalation scheduler already running")
            return

        if not settings.ENABLE_ESCALATION:
            logger.info("Escalation disabled, scheduler not started")
            return

        try:
            # One pass at a time; a missed run is coalesced into the next
            self.scheduler.add_job(
                self._run_pass,
                trigger=CronTrigger.from_crontab(self.cron, timezone=self.timezone),
                id=JOB_ID,
                name="Escalation Pass",
                max_instances=1,
                coalesce=True,
                misfire_grace_time=300,
                replace_existing=True
            )

            self.scheduler.start()
            self.is_running = True

            logger.info("Escalation scheduler started", cron=self.cron, timezone=self.timezone)

        except Exception as e:
            logger.error("Error starting escalation scheduler", error=str(e))
            raise

    async def stop(self) -> None:
        """Stop the escalation scheduler and release the runner's transport."""
        try:
            if self.is_running:
                self.scheduler.shutdown(wait=False)
                self.is_running = False
                logger.info("Escalation scheduler stopped")

        except Exception as e:
            logger.error("Error stopping escalation scheduler", error=str(e))

        finally:
            self.runner.close()

    async def _run_pass(self) -> None:
        """Scheduled job body; errors are logged and retried on the next trigger."""
        with CorrelationContextManager() as correlation_id:
            try:
                summary = await self.runner.run_pass()
                logger.info(
                    "Scheduled escalation pass finished",
                    correlation_id=correlation_id,
                    **summary.to_dict()
                )
            except Exception as e:
                logger.error("Scheduled escalation pass failed", error=str(e), exc_info=True)

    def get_job_status(self) -> dict:
        """Get status of the scheduled pass."""
        if not self.is_running:
            return {"status": "stopped", "pass_running": self.runner.is_running, "jobs": []}

        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger)
            })

        return {
            "status": "running",
            "pass_running": self.runner.is_running,
            "jobs": jobs
        }

    async def trigger_pass(self) -> PassSummary:
        """Manually run an escalation pass; store read errors propagate."""
        with CorrelationContextManager() as correlation_id:
            summary = await self.runner.run_pass()
            logger.info(
                "Manual escalation pass triggered",
                correlation_id=correlation_id,
                count=summary.notified
            )
            return summary
