"""SMTP email connector for sending escalation notifications."""

import asyncio
import smtplib
import ssl
import time
from concurrent.futures import ThreadPoolExecutor
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import List, Optional

from issue_escalation.config import settings
from issue_escalation.escalation.notification import EscalationNotification
from issue_escalation.utils.logging import get_logger, log_external_api_call

logger = get_logger(__name__)


class SMTPEmailConnector:
    """SMTP connector implementing the notification transport.

    Each ``send`` opens its own connection; a failed send is reported as
    ``False`` and never retried here.
    """

    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        username: Optional[str] = None,
        password: Optional[str] = None,
        from_email: Optional[str] = None,
        use_ssl: Optional[bool] = None,
        timeout: Optional[float] = None
    ):
        self.host = host or settings.SMTP_HOST
        self.port = port or settings.SMTP_PORT
        self.username = username if username is not None else settings.SMTP_USER
        self.password = password if password is not None else settings.SMTP_PASS
        self.from_email = from_email or settings.SMTP_FROM or self.username
        self.use_ssl = settings.SMTP_USE_SSL if use_ssl is None else use_ssl
        self.timeout = timeout or settings.SMTP_TIMEOUT_SECONDS
        self.executor = ThreadPoolExecutor(max_workers=2)

    def build_message(self, notification: EscalationNotification) -> MIMEMultipart:
        """Build the MIME message: an HTML part plus a calendar request."""
        msg = MIMEMultipart("alternative")
        msg["Subject"] = notification.subject
        msg["From"] = self.from_email
        msg["To"] = notification.to
        if notification.cc:
            msg["Cc"] = ",".join(notification.cc)

        msg.attach(MIMEText(notification.html_body, "html", "utf-8"))

        calendar_part = MIMEText(notification.calendar_attachment, "calendar", "utf-8")
        calendar_part.set_param("method", "REQUEST")
        msg.attach(calendar_part)

        return msg

    async def send(self, notification: EscalationNotification) -> bool:
        """Send one escalation notification."""
        msg = self.build_message(notification)
        recipients: List[str] = [notification.to] + list(notification.cc)

        def _send() -> None:
            with self._connect() as server:
                if self.username:
                    server.login(self.username, self.password)
                server.sendmail(self.from_email, recipients, msg.as_string())

        start = time.monotonic()
        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(self.executor, _send)
            success = True
            error = None
        except (smtplib.SMTPException, OSError) as e:
            success = False
            error = str(e)

        log_external_api_call(
            logger,
            "smtp",
            "send_escalation",
            success,
            (time.monotonic() - start) * 1000,
            to=notification.to,
            cc_count=len(notification.cc),
            subject=notification.subject[:50],
            error=error
        )
        return success

    def _connect(self) -> smtplib.SMTP:
        if self.use_ssl:
            return smtplib.SMTP_SSL(
                self.host,
                self.port,
                timeout=self.timeout,
                context=ssl.create_default_context()
            )

        server = smtplib.SMTP(self.host, self.port, timeout=self.timeout)
        try:
            server.starttls(context=ssl.create_default_context())
        except (smtplib.SMTPException, OSError):
            server.close()
            raise
        return server

    async def check_connection(self) -> bool:
        """Check SMTP connection."""
        def _check() -> None:
            with self._connect() as server:
                if self.username:
                    server.login(self.username, self.password)
                server.noop()

        try:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(self.executor, _check)
            logger.info("SMTP connection test successful")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP connection test failed", error=str(e))
            return False

    def close(self) -> None:
        """Shut down the worker threads used for blocking SMTP calls."""
        self.executor.shutdown(wait=False)
