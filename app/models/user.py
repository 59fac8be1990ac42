"""User model: login identity, credential material and the pending reset token."""
from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func

from app.db.session import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=True)

    # Set together on a reset request, cleared together when the reset completes
    reset_password_token = Column(String(128), nullable=True, index=True)
    reset_password_expires = Column(DateTime(timezone=True), nullable=True)

    def set_reset_token(self, token: str, expires) -> None:
        self.reset_password_token = token
        self.reset_password_expires = expires

    def clear_reset_token(self) -> None:
        self.reset_password_token = None
        self.reset_password_expires = None

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email!r})>"
