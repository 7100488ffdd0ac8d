"""Escalation pass worker job."""

import asyncio
import sys
from typing import Optional

from issue_escalation.escalation.engine import EscalationPassRunner
from issue_escalation.utils.logging import setup_logging, get_logger, CorrelationContextManager

# Setup logging
setup_logging()
logger = get_logger(__name__)


async def main(runner: Optional[EscalationPassRunner] = None) -> int:
    """Run a single escalation pass; returns the process exit code."""
    with CorrelationContextManager() as correlation_id:
        owns_runner = runner is None
        try:
            logger.info("Starting escalation worker job", correlation_id=correlation_id)

            if owns_runner:
                runner = EscalationPassRunner.from_settings()
            notified_count = await runner.run()

            logger.info(
                "Escalation worker job completed",
                correlation_id=correlation_id,
                notified_count=notified_count
            )
            return 0

        except Exception as e:
            logger.error("Escalation worker job failed", error=str(e), exc_info=True)
            return 1

        finally:
            if owns_runner and runner is not None:
                runner.close()


if __name__ == "__main__":
    exit_code = asyncio.run(main())
    sys.exit(exit_code)
