"""
Stored API key models.

Just the data structure - encryption, ownership and audit rules live in the
service layer. ``ApiKey.key_value`` only ever holds codec output.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Table, Text
from sqlalchemy.orm import relationship

from ..enums import KeyEnvironment
from .db_base import TimestampMixin, UUIDMixin, utc_now
from .db_config import Base

api_key_tags = Table(
    "api_key_tags",
    Base.metadata,
    Column("api_key_id", String(36), ForeignKey("api_keys.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", String(36), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)


class ApiKey(Base, UUIDMixin, TimestampMixin):
    """A third-party API credential owned by one user."""

    __tablename__ = "api_keys"

    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    key_value = Column(Text, nullable=False)  # Encrypted token, never plaintext
    service = Column(String(100), nullable=False)
    environment = Column(String(50), nullable=False, default=KeyEnvironment.PRODUCTION.value)
    is_active = Column(Boolean, nullable=False, default=True)
    last_used = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="api_keys")
    tags = relationship("Tag", secondary=api_key_tags, back_populates="api_keys", lazy="selectin")
    usage = relationship(
        "ApiKeyUsage",
        back_populates="api_key",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_api_keys_owner_created", "user_id", "created_at"),)

    def __repr__(self) -> str:
        # key_value intentionally omitted
        return f"<ApiKey(id={self.id}, service={self.service}, is_active={self.is_active})>"


class Tag(Base, UUIDMixin):
    """Free-form label shared across keys."""

    __tablename__ = "tags"

    name = Column(String(50), nullable=False, unique=True)
    color = Column(String(7), nullable=False)

    api_keys = relationship("ApiKey", secondary=api_key_tags, back_populates="tags")


class ApiKeyUsage(Base, UUIDMixin):
    """Audit entry: one row per reveal attempt on a located key."""

    __tablename__ = "api_key_usage"

    api_key_id = Column(
        String(36), ForeignKey("api_keys.id", ondelete="CASCADE"), nullable=False, index=True
    )
    endpoint = Column(String(50), nullable=False)
    success = Column(Boolean, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    api_key = relationship("ApiKey", back_populates="usage")
