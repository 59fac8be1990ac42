import smtplib

import pytest

from app.core.config import Settings
from app.core.errors import MailDeliveryError
from app.services import mailer as mailer_module
from app.services.mailer import (
    MailMessage,
    SmtpMailer,
    reset_confirmation_message,
    reset_instructions_message,
)


class FakeSMTP:
    instances = []

    def __init__(self, host, port):
        self.host = host
        self.port = port
        self.calls = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def ehlo(self):
        self.calls.append("ehlo")

    def starttls(self):
        self.calls.append("starttls")

    def login(self, user, password):
        self.calls.append(("login", user, password))

    def sendmail(self, sender, recipients, body):
        self.calls.append(("sendmail", sender, recipients, body))


class BrokenSMTP(FakeSMTP):
    def login(self, user, password):
        raise smtplib.SMTPAuthenticationError(535, b"bad credentials")


@pytest.fixture(autouse=True)
def _reset_fake():
    FakeSMTP.instances = []


def _mailer(**kwargs):
    options = dict(server="smtp.example.com", port=587, username="bot@example.com", password="pw")
    options.update(kwargs)
    return SmtpMailer(**options)


def test_send_uses_tls_and_login(monkeypatch):
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)

    _mailer().send(MailMessage(to="ada@example.com", subject="Hi", text="Hello"))

    smtp = FakeSMTP.instances[0]
    assert (smtp.host, smtp.port) == ("smtp.example.com", 587)
    assert "starttls" in smtp.calls
    assert ("login", "bot@example.com", "pw") in smtp.calls
    _, sender, recipients, body = smtp.calls[-1]
    assert sender == "bot@example.com"
    assert recipients == ["ada@example.com"]
    assert "Subject: Hi" in body


def test_send_without_tls(monkeypatch):
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", FakeSMTP)
    _mailer(use_tls=False, sender="noreply@example.com").send(
        MailMessage(to="ada@example.com", subject="Hi", text="Hello")
    )
    smtp = FakeSMTP.instances[0]
    assert "starttls" not in smtp.calls
    assert smtp.calls[-1][1] == "noreply@example.com"


def test_smtp_failure_raises_mail_delivery_error(monkeypatch):
    monkeypatch.setattr(mailer_module.smtplib, "SMTP", BrokenSMTP)
    with pytest.raises(MailDeliveryError):
        _mailer().send(MailMessage(to="ada@example.com", subject="Hi", text="Hello"))


def test_unconfigured_server_raises():
    with pytest.raises(MailDeliveryError):
        _mailer(server="").send(MailMessage(to="ada@example.com", subject="Hi", text="Hello"))


def test_from_settings():
    settings = Settings(
        smtp_server="smtp.gmail.com",
        smtp_port=465,
        mail_username="me@gmail.com",
        mail_password="secret",
        mail_from="",
    )
    mailer = SmtpMailer.from_settings(settings)
    assert mailer.server == "smtp.gmail.com"
    assert mailer.port == 465
    assert mailer.sender == "me@gmail.com"


def test_reset_messages():
    link = "http://localhost/reset/abc/"
    instructions = reset_instructions_message("ada@example.com", link)
    assert instructions.subject == "Password Reset"
    assert link in instructions.text

    confirmation = reset_confirmation_message("ada@example.com", "ada")
    assert confirmation.subject == "Password is successfully reset"
    assert "ada@example.com" in confirmation.text
    assert "username ada" in confirmation.text
