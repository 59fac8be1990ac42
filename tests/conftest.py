import os
import tempfile
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Settings are read at import time of app.db.session / app.main
_TMP = Path(tempfile.mkdtemp(prefix="auth-app-tests-"))
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_TMP / 'default.db'}")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("SMTP_SERVER", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import async_sessionmaker

from app.core.security import PasswordHasher
from app.db.base import Base
from app.db.session import get_db, make_engine
from app.dependencies import get_clock, get_mailer
from app.main import app
from app.models.user import User
from app.repositories.users import AuthOutcome, AuthResult, CreateOutcome, CreateResult
from app.services.auth import AuthController
from app.services.mailer import MailMessage
from app.services.tokens import ResetTokenIssuer


class FrozenClock:
    def __init__(self, now: datetime | None = None):
        self.now = now or datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingMailer:
    def __init__(self, fail: Exception | None = None):
        self.sent: list[MailMessage] = []
        self.fail = fail

    def send(self, message: MailMessage) -> None:
        self.sent.append(message)
        if self.fail is not None:
            raise self.fail


class InMemoryUserStore:
    """UserStore double keeping users in a dict keyed by email."""

    def __init__(self, hasher: PasswordHasher):
        self.hasher = hasher
        self.users: dict[str, User] = {}
        self.saves = 0
        self._next_id = 1

    async def find_by_email(self, email):
        return self.users.get(email)

    async def find_by_reset_token(self, token, now):
        for user in self.users.values():
            if (
                token
                and user.reset_password_token == token
                and user.reset_password_expires is not None
                and user.reset_password_expires > now
            ):
                return user
        return None

    async def create(self, username, email, password):
        if email in self.users:
            return CreateResult(CreateOutcome.EMAIL_TAKEN)
        user = User(id=self._next_id, username=username, email=email, hashed_password=self.hasher.hash(password))
        self._next_id += 1
        self.users[email] = user
        return CreateResult(CreateOutcome.OK, user)

    async def authenticate(self, email, password):
        user = self.users.get(email)
        if user is None:
            return AuthResult(AuthOutcome.UNKNOWN_EMAIL)
        if not self.hasher.verify(password, user.hashed_password):
            return AuthResult(AuthOutcome.WRONG_PASSWORD)
        return AuthResult(AuthOutcome.OK, user)

    async def save(self, user):
        self.saves += 1
        self.users[user.email] = user


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def hasher() -> PasswordHasher:
    return PasswordHasher(["pbkdf2_sha256"])


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def store(hasher) -> InMemoryUserStore:
    return InMemoryUserStore(hasher)


@pytest.fixture
def controller(store, hasher, mailer, clock) -> AuthController:
    return AuthController(store, hasher, ResetTokenIssuer(20, 3600), mailer, clock)


async def _create_tables(engine):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def client(tmp_path, mailer, clock):
    """TestClient on a fresh SQLite file with the mailer and clock replaced."""
    engine = make_engine(f"sqlite+aiosqlite:///{tmp_path / 'app.db'}")
    session_factory = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as db:
            yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_clock] = lambda: clock

    with TestClient(app) as c:
        c.portal.call(_create_tables, engine)
        yield c
        c.portal.call(engine.dispose)

    app.dependency_overrides.clear()
