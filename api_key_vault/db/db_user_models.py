"""
User account model.

Owners of stored API keys. Only an Argon2 hash of the login password is kept.
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from .db_base import TimestampMixin, UUIDMixin
from .db_config import Base


class User(Base, UUIDMixin, TimestampMixin):
    """Account that owns API keys."""

    __tablename__ = "users"

    email = Column(String(320), nullable=False, unique=True, index=True)
    name = Column(String(255), nullable=True)
    password_hash = Column(String(255), nullable=False)

    api_keys = relationship(
        "ApiKey", back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
