"""
Authentication models for SeNiko.

This module defines the SQLAlchemy model for user records.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Uuid

from seniko.base_microservice import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """User record created at registration and read at login."""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    username = Column(String(255), nullable=False)
    email = Column(String(320), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"User(id={self.id!s}, username={self.username!r}, email={self.email!r})"
