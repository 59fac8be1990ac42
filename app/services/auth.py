"""Auth controller: registration, login, logout and the two-step password reset.

Every flow is a fixed sequence of steps; the first failing step raises an
``AuthError`` subclass and the rest of the sequence does not run. Routers
translate those into an error flash plus a redirect. Store and mailer
failures surface as ``InfrastructureError``.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from fastapi.concurrency import run_in_threadpool

from app.core.errors import (
    EmailTakenError,
    IncorrectPasswordError,
    InvalidEmailError,
    InvalidOrExpiredTokenError,
    MissingFieldError,
    PasswordMismatchError,
    UnknownEmailError,
)
from app.core.logging import mask_token
from app.core.security import PasswordHasher
from app.core.validation import is_valid_email, normalize_email, passwords_match
from app.models.user import User
from app.repositories.users import AuthOutcome, CreateOutcome, UserStore
from app.services.mailer import Mailer, reset_confirmation_message, reset_instructions_message
from app.services.sessions import SessionData
from app.services.tokens import ResetTokenIssuer, utcnow

logger = logging.getLogger(__name__)


class AuthController:
    def __init__(
        self,
        store: UserStore,
        hasher: PasswordHasher,
        token_issuer: ResetTokenIssuer,
        mailer: Mailer,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.hasher = hasher
        self.token_issuer = token_issuer
        self.mailer = mailer
        self.clock = clock

    # ---------- registration / login ----------

    async def register(self, username: str, email: str, password: str, confirm_password: str) -> User:
        """Create an account. Does not log the new user in."""
        if not passwords_match(password, confirm_password):
            raise PasswordMismatchError()
        if not is_valid_email(email):
            raise InvalidEmailError()
        if not username.strip():
            raise MissingFieldError("username")
        if not password:
            raise MissingFieldError("password")

        result = await self.store.create(username.strip(), normalize_email(email), password)
        if result.outcome is CreateOutcome.EMAIL_TAKEN:
            logger.info("Signup rejected, email already registered: %s", normalize_email(email))
            raise EmailTakenError()

        logger.info("User registered: id=%s", result.user.id)
        return result.user

    async def login(
        self,
        session: SessionData,
        email: str,
        password: str,
        confirm_password: str,
    ) -> User:
        """Authenticate and bind the user to ``session``.

        Credentials are checked first; the form checks that follow take
        priority over the credential outcome when reporting the failure.
        """
        result = await self.store.authenticate(normalize_email(email), password)

        if not passwords_match(password, confirm_password):
            raise PasswordMismatchError()
        if not is_valid_email(email):
            raise InvalidEmailError()
        if result.outcome is AuthOutcome.WRONG_PASSWORD:
            logger.info("Login failed (wrong password) for %s", normalize_email(email))
            raise IncorrectPasswordError()
        if result.outcome is AuthOutcome.UNKNOWN_EMAIL:
            logger.info("Login failed (unknown email) for %s", normalize_email(email))
            raise UnknownEmailError()

        session.user_id = result.user.id
        logger.info("User logged in: id=%s", result.user.id)
        return result.user

    def logout(self, session: SessionData) -> None:
        if session.user_id is not None:
            logger.info("User logged out: id=%s", session.user_id)
        session.user_id = None

    # ---------- password reset ----------

    async def request_reset(self, email: str, base_url: str) -> User:
        """Issue a reset token for ``email`` and mail the reset link.

        The token is persisted before the mail goes out, and a new request
        overwrites any token still pending for the user.
        """
        token = self.token_issuer.issue(self.clock())

        user = await self.store.find_by_email(normalize_email(email))
        if user is None:
            raise UnknownEmailError("No account with that email address exists")

        user.set_reset_token(token.value, token.expires)
        await self.store.save(user)
        logger.info("Reset token %s issued for user id=%s", mask_token(token.value), user.id)

        link = f"{base_url.rstrip('/')}/reset/{token.value}/"
        await run_in_threadpool(self.mailer.send, reset_instructions_message(user.email, link))
        return user

    async def validate_reset_token(self, token: str) -> User:
        user = await self.store.find_by_reset_token(token, self.clock())
        if user is None:
            raise InvalidOrExpiredTokenError()
        return user

    async def complete_reset(self, token: str, password: str, confirm_password: str) -> User:
        """Set a new password through a valid token; the token is spent in the same write."""
        user = await self.validate_reset_token(token)

        if not passwords_match(password, confirm_password):
            raise PasswordMismatchError("Password and Confirm Password must match")
        if not password:
            raise MissingFieldError("password")

        user.hashed_password = await run_in_threadpool(self.hasher.hash, password)
        user.clear_reset_token()
        await self.store.save(user)
        logger.info("Password reset completed for user id=%s", user.id)

        await run_in_threadpool(self.mailer.send, reset_confirmation_message(user.email, user.username))
        return user
