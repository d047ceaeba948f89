"""
Repository for stored API keys.

Every lookup is scoped by owner: a key that exists but belongs to someone
else is indistinguishable from a key that does not exist.
"""

import random
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import and_, func, select
from sqlalchemy import update as sql_update
from sqlalchemy.orm import Session

from ..constants import TAG_COLORS
from ..db.db_api_key_models import ApiKey, ApiKeyUsage, Tag
from ..db.db_base import utc_now
from .base_repository import BaseRepository


class ApiKeyRepository(BaseRepository[ApiKey]):
    """Owner-scoped persistence for ApiKey rows and their tags."""

    def __init__(self, session: Session):
        super().__init__(session, ApiKey)

    def find_owned(
        self, api_key_id: str, owner_id: str, for_update: bool = False
    ) -> Optional[ApiKey]:
        """
        Get a key by id only if it belongs to ``owner_id``.

        Args:
            api_key_id: Key ID
            owner_id: Caller's user ID
            for_update: Lock the row for a read-modify-write in this transaction

        Returns:
            ApiKey or None if missing or owned by someone else
        """
        with self._session_operation("find_owned", api_key_id, is_read_only=True):
            stmt = select(ApiKey).where(and_(ApiKey.id == api_key_id, ApiKey.user_id == owner_id))
            if for_update:
                stmt = stmt.with_for_update()
            return self.session.execute(stmt).scalars().first()

    def list_owned(self, owner_id: str) -> List[ApiKey]:
        """All keys for an owner, newest first."""
        with self._session_operation("list_owned", is_read_only=True):
            stmt = (
                select(ApiKey)
                .where(ApiKey.user_id == owner_id)
                .order_by(ApiKey.created_at.desc())
            )
            return list(self.session.execute(stmt).scalars().all())

    def create(self, owner_id: str, data: Dict[str, Any], tag_names: Iterable[str] = ()) -> ApiKey:
        """
        Insert a new key row.

        Args:
            owner_id: Owning user ID
            data: Column values; ``key_value`` must already be encoded
            tag_names: Tags to connect or create

        Returns:
            The flushed ApiKey
        """
        with self._session_operation("create"):
            api_key = ApiKey(user_id=owner_id, **data)
            api_key.tags = self._resolve_tags(tag_names)
            self.session.add(api_key)
        return api_key

    def update(
        self,
        api_key: ApiKey,
        changes: Dict[str, Any],
        tag_names: Optional[Iterable[str]] = None,
    ) -> ApiKey:
        """
        Apply column changes to a key loaded by find_owned(for_update=True).

        Columns absent from ``changes`` are left untouched; ``tag_names=None``
        keeps the current tags while a list replaces them.
        """
        with self._session_operation("update", api_key.id):
            for column, value in changes.items():
                setattr(api_key, column, value)
            if tag_names is not None:
                api_key.tags = self._resolve_tags(tag_names)
            api_key.updated_at = utc_now()
        return api_key

    def touch_last_used(self, api_key_id: str) -> None:
        """Stamp ``last_used`` on a key with the current time."""
        with self._session_operation("touch_last_used", api_key_id):
            self.session.execute(
                sql_update(ApiKey).where(ApiKey.id == api_key_id).values(last_used=utc_now())
            )

    def delete(self, api_key: ApiKey) -> None:
        """Delete a key; its audit entries and tag links cascade."""
        with self._session_operation("delete", api_key.id):
            self.session.delete(api_key)

    def usage_count(self, api_key_id: str) -> int:
        """Number of audit entries recorded for a key."""
        with self._session_operation("usage_count", api_key_id, is_read_only=True):
            stmt = select(func.count(ApiKeyUsage.id)).where(ApiKeyUsage.api_key_id == api_key_id)
            return self.session.execute(stmt).scalar_one()

    def _resolve_tags(self, tag_names: Iterable[str]) -> List[Tag]:
        """Connect-or-create tags by trimmed name, preserving first-seen order."""
        names: List[str] = []
        for raw in tag_names:
            name = (raw or "").strip()
            if name and name not in names:
                names.append(name)
        if not names:
            return []

        existing = {
            tag.name: tag
            for tag in self.session.execute(select(Tag).where(Tag.name.in_(names))).scalars()
        }
        tags = []
        for name in names:
            tag = existing.get(name)
            if tag is None:
                tag = Tag(name=name, color=random.choice(TAG_COLORS))
                self.session.add(tag)
            tags.append(tag)
        return tags
