"""Form input checks shared by the auth flows."""
import re

# word chars with optional [.-] separated groups, @, same shape for the host,
# then one or more 2-3 char labels. The separator is mandatory inside a group,
# which accepts the same strings as an optional one without the backtracking.
EMAIL_RE = re.compile(r"^\w+([.-]\w+)*@\w+([.-]\w+)*(\.\w{2,3})+$", re.ASCII)


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str | None) -> bool:
    return EMAIL_RE.fullmatch(str(email or "").lower()) is not None


def passwords_match(password: str, confirm_password: str) -> bool:
    return password == confirm_password
