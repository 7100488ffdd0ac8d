"""Operations API for the issue escalation worker."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, HTTPException

from issue_escalation.config import settings
from issue_escalation.escalation.errors import StoreReadError
from issue_escalation.escalation.scheduler import EscalationScheduler
from issue_escalation.models.database import create_tables
from issue_escalation.utils.logging import setup_logging, get_logger

# Setup logging
setup_logging()
logger = get_logger(__name__)

escalation_scheduler: Optional[EscalationScheduler] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    global escalation_scheduler

    logger.info("Starting issue escalation worker")

    try:
        await create_tables()
        logger.info("Database tables created/verified")

        escalation_scheduler = EscalationScheduler()
        await escalation_scheduler.start()

    except Exception as e:
        logger.error("Failed to start application", error=str(e))
        raise

    yield

    logger.info("Shutting down issue escalation worker")

    try:
        if escalation_scheduler:
            await escalation_scheduler.stop()
    except Exception as e:
        logger.error("Error during shutdown", error=str(e))


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Scheduled escalation of overdue issues",
    lifespan=lifespan,
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None
)


def get_scheduler() -> EscalationScheduler:
    if escalation_scheduler is None:
        raise HTTPException(status_code=503, detail="Escalation scheduler not initialized")
    return escalation_scheduler


@app.get("/health")
async def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT
    }


@app.get(f"{settings.API_V1_STR}/escalations/status")
async def escalation_status(scheduler: EscalationScheduler = Depends(get_scheduler)):
    """Status of the scheduled escalation pass."""
    return scheduler.get_job_status()


@app.post(f"{settings.API_V1_STR}/escalations/run")
async def run_escalation_pass(scheduler: EscalationScheduler = Depends(get_scheduler)):
    """Run one escalation pass now and return its counters."""
    if scheduler.runner.is_running:
        raise HTTPException(status_code=409, detail="An escalation pass is already running")

    try:
        summary = await scheduler.trigger_pass()
    except StoreReadError as e:
        logger.error("Manual escalation pass aborted", error=str(e))
        raise HTTPException(status_code=502, detail=str(e))

    return {
        "message": "Escalation pass completed",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        **summary.to_dict()
    }


if __name__ == "__main__":
    uvicorn.run(
        "issue_escalation.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        log_config=None
    )
