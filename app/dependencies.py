"""FastAPI dependencies wiring the auth controller to its collaborators.

Each collaborator has its own provider so tests can replace it with
``app.dependency_overrides``.
"""
from collections.abc import Callable
from datetime import datetime
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.security import PasswordHasher
from app.db.session import get_db
from app.repositories.users import SqlAlchemyUserStore, UserStore
from app.services.auth import AuthController
from app.services.mailer import Mailer
from app.services.sessions import SessionData
from app.services.tokens import ResetTokenIssuer, utcnow


class LoginRequired(Exception):
    """Raised by the access gate; handled as a redirect to the login form."""


def get_session(request: Request) -> SessionData:
    return request.state.session


def get_password_hasher(request: Request) -> PasswordHasher:
    return request.app.state.password_hasher


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


def get_clock() -> Callable[[], datetime]:
    return utcnow


def get_token_issuer() -> ResetTokenIssuer:
    settings = get_settings()
    return ResetTokenIssuer(settings.reset_token_bytes, settings.reset_token_ttl_seconds)


def get_user_store(
    db: Annotated[AsyncSession, Depends(get_db)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
) -> UserStore:
    return SqlAlchemyUserStore(db, hasher)


def get_auth_controller(
    store: Annotated[UserStore, Depends(get_user_store)],
    hasher: Annotated[PasswordHasher, Depends(get_password_hasher)],
    token_issuer: Annotated[ResetTokenIssuer, Depends(get_token_issuer)],
    mailer: Annotated[Mailer, Depends(get_mailer)],
    clock: Annotated[Callable[[], datetime], Depends(get_clock)],
) -> AuthController:
    return AuthController(store, hasher, token_issuer, mailer, clock)


def require_user(session: Annotated[SessionData, Depends(get_session)]) -> int:
    """Access gate for protected pages: the session must carry a user id."""
    if not session.is_authenticated:
        raise LoginRequired()
    return session.user_id
