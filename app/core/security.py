"""Password hashing and session cookie signing."""
import base64
import hmac
import hashlib

from passlib.context import CryptContext

from app.core.config import get_settings


class PasswordHasher:
    """Thin wrapper over a passlib context so the controller can take a test double."""

    def __init__(self, schemes: list[str] | None = None):
        self._context = CryptContext(
            schemes=schemes or get_settings().password_schemes,
            deprecated="auto",
        )

    def hash(self, password: str) -> str:
        return self._context.hash(password)

    def verify(self, password: str, hashed: str | None) -> bool:
        if not hashed:
            return False
        try:
            return self._context.verify(password, hashed)
        except ValueError:
            # unknown or malformed hash
            return False


# Session cookie: base64(session_id).hmac
def _signature(payload: bytes) -> str:
    secret = get_settings().secret_key
    return hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()


def sign_session_id(session_id: str) -> str:
    """Create the cookie value for a server-side session id."""
    payload = session_id.encode("utf-8")
    return base64.urlsafe_b64encode(payload).decode("ascii").rstrip("=") + "." + _signature(payload)


def unsign_session_id(value: str | None) -> str | None:
    """Return the session id if the cookie signature is valid; None otherwise."""
    if not value or "." not in value:
        return None
    try:
        encoded, sig = value.rsplit(".", 1)
        pad = 4 - len(encoded) % 4
        if pad != 4:
            encoded += "=" * pad
        payload = base64.urlsafe_b64decode(encoded)
        if not hmac.compare_digest(_signature(payload), sig):
            return None
        return payload.decode("utf-8") or None
    except (ValueError, UnicodeDecodeError):
        return None
