"""
Outbound mail for the password reset flow.

``SmtpMailer.send`` is synchronous (smtplib); the auth controller calls it
through a worker thread. Delivery failures raise ``MailDeliveryError`` so the
request fails instead of pretending the email went out.
"""
import logging
import smtplib
from dataclasses import dataclass
from email.mime.text import MIMEText
from typing import Protocol

from app.core.config import Settings
from app.core.errors import MailDeliveryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    text: str
    sender: str = ""


class Mailer(Protocol):
    def send(self, message: MailMessage) -> None: ...


def reset_instructions_message(to_email: str, reset_link: str) -> MailMessage:
    text = f"""
You are receiving this because you (or someone else) have requested the reset of the password for your account.

Please click on the following link, or paste it into your browser to complete the process (the link expires in 1 hour):

{reset_link}

If you did not request this, please ignore this email and your password will remain unchanged.
    """.strip()
    return MailMessage(to=to_email, subject="Password Reset", text=text)


def reset_confirmation_message(to_email: str, username: str) -> MailMessage:
    text = (
        f"This is a confirmation that the password for your account {to_email} "
        f"with username {username} has successfully been reset."
    )
    return MailMessage(to=to_email, subject="Password is successfully reset", text=text)


class SmtpMailer:
    def __init__(
        self,
        server: str,
        port: int,
        username: str,
        password: str,
        sender: str = "",
        use_tls: bool = True,
    ):
        self.server = server
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender or username
        self.use_tls = use_tls

    @classmethod
    def from_settings(cls, settings: Settings) -> "SmtpMailer":
        return cls(
            server=settings.smtp_server,
            port=settings.smtp_port,
            username=settings.mail_username,
            password=settings.mail_password,
            sender=settings.mail_from,
            use_tls=settings.smtp_use_tls,
        )

    def _build(self, message: MailMessage) -> MIMEText:
        msg = MIMEText(message.text, "plain", "utf-8")
        msg["Subject"] = message.subject
        msg["From"] = message.sender or self.sender
        msg["To"] = message.to
        return msg

    def send(self, message: MailMessage) -> None:
        if not self.server:
            raise MailDeliveryError("SMTP server is not configured")

        msg = self._build(message)
        try:
            with smtplib.SMTP(self.server, self.port) as server:
                server.ehlo()
                if self.use_tls:
                    server.starttls()
                    server.ehlo()
                if self.username:
                    server.login(self.username, self.password)
                server.sendmail(msg["From"], [message.to], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send %r to %s: %s", message.subject, message.to, e)
            raise MailDeliveryError(f"could not send mail to {message.to}") from e

        logger.info("Mail %r sent to %s", message.subject, message.to)
