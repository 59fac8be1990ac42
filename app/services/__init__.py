from app.services.auth import AuthController
from app.services.mailer import Mailer, MailMessage, SmtpMailer
from app.services.sessions import InMemorySessionStore, SessionData, SessionStore
from app.services.tokens import ResetToken, ResetTokenIssuer

__all__ = [
    "AuthController",
    "Mailer",
    "MailMessage",
    "SmtpMailer",
    "InMemorySessionStore",
    "SessionData",
    "SessionStore",
    "ResetToken",
    "ResetTokenIssuer",
]
