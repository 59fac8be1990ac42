"""Reset token issuing: random hex token plus its expiry."""
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ResetToken:
    value: str
    expires: datetime


class ResetTokenIssuer:
    def __init__(self, nbytes: int = 20, ttl_seconds: int = 3600):
        self.nbytes = nbytes
        self.ttl = timedelta(seconds=ttl_seconds)

    def issue(self, now: datetime) -> ResetToken:
        return ResetToken(value=secrets.token_hex(self.nbytes), expires=now + self.ttl)
