"""
Repository for the reveal audit trail.
"""

from typing import List

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..db.db_api_key_models import ApiKeyUsage
from .base_repository import BaseRepository


class ApiKeyUsageRepository(BaseRepository[ApiKeyUsage]):
    """Append-only access to ApiKeyUsage rows."""

    def __init__(self, session: Session):
        super().__init__(session, ApiKeyUsage)

    def append(self, api_key_id: str, endpoint: str, success: bool) -> ApiKeyUsage:
        """Insert and flush one audit entry."""
        with self._session_operation("append", api_key_id):
            entry = ApiKeyUsage(api_key_id=api_key_id, endpoint=endpoint, success=success)
            self.session.add(entry)
        return entry

    def list_for_key(self, api_key_id: str) -> List[ApiKeyUsage]:
        """Audit entries for a key, newest first."""
        with self._session_operation("list_for_key", api_key_id, is_read_only=True):
            stmt = (
                select(ApiKeyUsage)
                .where(ApiKeyUsage.api_key_id == api_key_id)
                .order_by(ApiKeyUsage.created_at.desc())
            )
            return list(self.session.execute(stmt).scalars().all())
