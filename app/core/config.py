"""Application configuration from environment."""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """App settings loaded from env / .env."""

    app_name: str = "Auth App"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite+aiosqlite:///./auth_app.db"

    # Signs the session id cookie
    secret_key: str = "change-me-in-production-use-env"

    # Server-side session, id held in a signed cookie
    session_cookie_name: str = "auth_session"
    session_cookie_max_age: int = 60 * 60 * 24 * 14  # 14 days

    # Password hashing (passlib schemes, first one is used for new hashes)
    password_schemes: list[str] = ["pbkdf2_sha256"]

    # Password reset
    reset_token_bytes: int = 20
    reset_token_ttl_seconds: int = 60 * 60  # 1 hour

    # Outbound mail
    smtp_server: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_use_tls: bool = True
    mail_username: str = ""
    mail_password: str = ""
    mail_from: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache
def get_settings() -> Settings:
    return Settings()


# Base path for templates/static (parent of app/)
BASE_DIR = Path(__file__).resolve().parent.parent.parent
