"""Unit tests for the SMTP connector."""

import smtplib

import pytest

from issue_escalation.connectors.email_smtp import SMTPEmailConnector
from issue_escalation.escalation.notification import EscalationNotification


class FakeSMTP:
    """Stands in for smtplib.SMTP_SSL and records what was sent."""

    instances = []
    fail_with = None

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.logged_in = None
        self.sent = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        return False

    def login(self, username, password):
        self.logged_in = (username, password)

    def sendmail(self, from_addr, to_addrs, msg):
        if FakeSMTP.fail_with:
            raise FakeSMTP.fail_with
        self.sent.append((from_addr, to_addrs, msg))

    def noop(self):
        return (250, b"OK")


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_with = None
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP)
    return FakeSMTP


@pytest.fixture
def connector():
    return SMTPEmailConnector(
        host="smtp.example.com",
        port=465,
        username="mailer@example.com",
        password="secret",
        from_email="mailer@example.com",
        use_ssl=True
    )


@pytest.fixture
def notification():
    return EscalationNotification(
        to="first@example.com",
        subject="🚨 Escalation Alert: Issue ISS-001",
        html_body="<p>Escalation</p>",
        calendar_attachment="BEGIN:VCALENDAR\nEND:VCALENDAR",
        cc=["inspector@example.com"],
    )


class TestSMTPEmailConnector:

    def test_build_message(self, connector, notification):
        msg = connector.build_message(notification)

        assert msg.get_content_type() == "multipart/alternative"
        assert msg["To"] == "first@example.com"
        assert msg["Cc"] == "inspector@example.com"
        assert msg["From"] == "mailer@example.com"

        html_part, calendar_part = msg.get_payload()
        assert html_part.get_content_type() == "text/html"
        assert calendar_part.get_content_type() == "text/calendar"
        assert calendar_part.get_param("method") == "REQUEST"
        assert "BEGIN:VCALENDAR" in calendar_part.get_payload(decode=True).decode("utf-8")

    def test_no_cc_header_without_cc(self, connector, notification):
        notification.cc = []

        assert connector.build_message(notification)["Cc"] is None

    async def test_send_success(self, connector, notification, fake_smtp):
        assert await connector.send(notification) is True

        server = fake_smtp.instances[0]
        assert (server.host, server.port) == ("smtp.example.com", 465)
        assert server.logged_in == ("mailer@example.com", "secret")
        from_addr, to_addrs, _ = server.sent[0]
        assert from_addr == "mailer@example.com"
        assert to_addrs == ["first@example.com", "inspector@example.com"]

    async def test_send_failure_returns_false(self, connector, notification, fake_smtp):
        fake_smtp.fail_with = smtplib.SMTPRecipientsRefused({"first@example.com": (550, b"No such user")})

        assert await connector.send(notification) is False

    async def test_connection_error_returns_false(self, connector, notification, fake_smtp):
        fake_smtp.fail_with = ConnectionResetError("reset by peer")

        assert await connector.send(notification) is False

    async def test_check_connection(self, connector, fake_smtp):
        assert await connector.check_connection() is True

    async def test_failed_starttls_closes_connection(self, notification, monkeypatch):
        class FakePlainSMTP:
            instances = []

            def __init__(self, host, port, timeout=None):
                self.closed = False
                FakePlainSMTP.instances.append(self)

            def starttls(self, context=None):
                raise smtplib.SMTPNotSupportedError("STARTTLS extension not supported by server.")

            def close(self):
                self.closed = True

        monkeypatch.setattr(smtplib, "SMTP", FakePlainSMTP)
        connector = SMTPEmailConnector(
            host="smtp.example.com",
            port=587,
            username="mailer@example.com",
            password="secret",
            from_email="mailer@example.com",
            use_ssl=False
        )

        assert await connector.send(notification) is False
        assert FakePlainSMTP.instances[0].closed is True

    def test_close_shuts_down_executor(self, connector):
        connector.close()

        with pytest.raises(RuntimeError):
            connector.executor.submit(lambda: None)
