"""Credential store: user lookup, creation and persistence.

Routers and the auth controller depend on the ``UserStore`` protocol; the
SQLAlchemy implementation below is the production one and tests swap in an
in-memory double.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import StoreError
from app.core.security import PasswordHasher
from app.models.user import User

logger = logging.getLogger(__name__)


class CreateOutcome(enum.Enum):
    OK = "ok"
    EMAIL_TAKEN = "email_taken"


class AuthOutcome(enum.Enum):
    OK = "ok"
    UNKNOWN_EMAIL = "unknown_email"
    WRONG_PASSWORD = "wrong_password"


@dataclass(frozen=True)
class CreateResult:
    outcome: CreateOutcome
    user: User | None = None


@dataclass(frozen=True)
class AuthResult:
    outcome: AuthOutcome
    user: User | None = None


class UserStore(Protocol):
    async def find_by_email(self, email: str) -> User | None: ...

    async def find_by_reset_token(self, token: str, now: datetime) -> User | None:
        """Return the user whose token matches and whose expiry is after ``now``."""
        ...

    async def create(self, username: str, email: str, password: str) -> CreateResult: ...

    async def authenticate(self, email: str, password: str) -> AuthResult: ...

    async def save(self, user: User) -> None: ...


class SqlAlchemyUserStore:
    """UserStore backed by an AsyncSession; one instance per request."""

    def __init__(self, db: AsyncSession, hasher: PasswordHasher):
        self.db = db
        self.hasher = hasher

    async def find_by_email(self, email: str) -> User | None:
        try:
            result = await self.db.execute(select(User).where(User.email == email))
        except SQLAlchemyError as exc:
            raise StoreError(f"user lookup failed: {exc}") from exc
        return result.scalar_one_or_none()

    async def find_by_reset_token(self, token: str, now: datetime) -> User | None:
        if not token:
            return None
        try:
            result = await self.db.execute(
                select(User).where(
                    User.reset_password_token == token,
                    User.reset_password_expires > now,
                )
            )
        except SQLAlchemyError as exc:
            raise StoreError(f"reset token lookup failed: {exc}") from exc
        return result.scalar_one_or_none()

    async def create(self, username: str, email: str, password: str) -> CreateResult:
        if await self.find_by_email(email) is not None:
            return CreateResult(CreateOutcome.EMAIL_TAKEN)

        hashed = await run_in_threadpool(self.hasher.hash, password)
        user = User(username=username, email=email, hashed_password=hashed)
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # lost a race with a concurrent signup for the same email
            await self.db.rollback()
            return CreateResult(CreateOutcome.EMAIL_TAKEN)
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise StoreError(f"user create failed: {exc}") from exc
        await self.db.refresh(user)
        return CreateResult(CreateOutcome.OK, user)

    async def authenticate(self, email: str, password: str) -> AuthResult:
        user = await self.find_by_email(email)
        if user is None:
            return AuthResult(AuthOutcome.UNKNOWN_EMAIL)
        ok = await run_in_threadpool(self.hasher.verify, password, user.hashed_password)
        if not ok:
            return AuthResult(AuthOutcome.WRONG_PASSWORD)
        return AuthResult(AuthOutcome.OK, user)

    async def save(self, user: User) -> None:
        self.db.add(user)
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            await self.db.rollback()
            raise StoreError(f"user save failed: {exc}") from exc
