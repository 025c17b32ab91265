"""
Mailer and notification dispatch tests.

SMTP is replaced with fakes; nothing touches the network.
"""

import smtplib

import pytest

from warehouse.mailer import Mailer, MailDeliveryError
from warehouse.services import notification_service


class FakeSMTP:
    instances = []

    def __init__(self, host, port):
        self.host = host
        self.port = port
        self.sent = []
        self.started_tls = False
        self.logged_in = None
        self.closed = False
        FakeSMTP.instances.append(self)

    def starttls(self):
        self.started_tls = True

    def login(self, username, password):
        self.logged_in = (username, password)

    def sendmail(self, sender, recipients, body):
        self.sent.append((sender, recipients, body))

    def quit(self):
        self.closed = True


@pytest.fixture
def live_mailer():
    mailer = Mailer()
    mailer.suppress = False
    mailer.smtp_host = "smtp.test"
    mailer.smtp_port = 2525
    mailer.username = "warehouse"
    mailer.password = "secret"
    mailer.sender = "alerts@warehouse.test"
    FakeSMTP.instances.clear()
    return mailer


class TestMailer:

    def test_sends_over_smtp(self, live_mailer, monkeypatch):
        monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)

        live_mailer.send(["owner@example.com"], "Hello", "plain body", "<p>html body</p>")

        server = FakeSMTP.instances[0]
        assert (server.host, server.port) == ("smtp.test", 2525)
        assert server.started_tls
        assert server.logged_in == ("warehouse", "secret")
        assert server.closed
        sender, recipients, body = server.sent[0]
        assert sender == "alerts@warehouse.test"
        assert recipients == ["owner@example.com"]
        assert "Subject: Hello" in body
        assert live_mailer.outbox == []

    def test_connection_failure_raises(self, live_mailer, monkeypatch):
        def refuse(host, port):
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr(smtplib, "SMTP", refuse)

        with pytest.raises(MailDeliveryError):
            live_mailer.send(["owner@example.com"], "Hello", "body")

    def test_auth_failure_raises(self, live_mailer, monkeypatch):
        class RejectingSMTP(FakeSMTP):
            def login(self, username, password):
                raise smtplib.SMTPAuthenticationError(535, b"bad credentials")

        monkeypatch.setattr(smtplib, "SMTP", RejectingSMTP)

        with pytest.raises(MailDeliveryError, match="authentication"):
            live_mailer.send(["owner@example.com"], "Hello", "body")
        assert FakeSMTP.instances[0].closed

    def test_suppressed_mailer_collects_outbox(self, monkeypatch):
        def explode(*args, **kwargs):
            raise AssertionError("SMTP must not be used when suppressed")

        monkeypatch.setattr(smtplib, "SMTP", explode)
        mailer = Mailer()

        mailer.send(["owner@example.com"], "Hello", "body")

        assert [m.subject for m in mailer.outbox] == ["Hello"]

    def test_suppressed_outbox_keeps_only_newest(self):
        mailer = Mailer()
        mailer.outbox_limit = 3

        for n in range(5):
            mailer.send(["owner@example.com"], f"Message {n}", "body")

        assert [m.subject for m in mailer.outbox] == ["Message 2", "Message 3", "Message 4"]

    def test_init_app_reads_config(self, app, monkeypatch):
        monkeypatch.setitem(app.extensions, "mailer", app.extensions["mailer"])
        mailer = Mailer()
        mailer.init_app(app)

        assert mailer.suppress is True
        assert mailer.outbox_limit == app.config["MAIL_OUTBOX_LIMIT"]
        assert app.extensions["mailer"] is mailer


class TestNotify:

    def test_returns_true_on_success(self, app):
        calls = []
        assert notification_service.notify(calls.append, "payload") is True
        assert calls == ["payload"]

    def test_swallows_and_logs_failure(self, app, caplog):
        def broken(*args):
            raise MailDeliveryError("SMTP authentication failed")

        assert notification_service.notify(broken, "payload") is False
        assert "broken" in caplog.text
