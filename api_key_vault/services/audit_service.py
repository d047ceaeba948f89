"""
Reveal bookkeeping: the audit trail and the last-used stamp.

Both are written through a session of their own and committed there, so a
caller that rolls back its request transaction after a failed reveal keeps the
audit entry. Recording is best-effort from the caller's point of view: a failed
append is logged as an AuditWriteError and never interrupts the operation
being audited.
"""

from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional

from sqlalchemy.orm import Session

from ..config import get_config
from ..db.db_config import get_db_manager
from ..exceptions import AuditWriteError
from ..repositories.api_key_repository import ApiKeyRepository
from ..repositories.api_key_usage_repository import ApiKeyUsageRepository
from ..schemas.api_key_schemas import AuditEntryRead
from ..utils.logger import get_logger


class AuditService:
    """
    Appends and reads ApiKeyUsage entries.

    Reads go through the caller's session. Writes open a session from
    ``session_factory`` (the global DatabaseManager's by default), commit it
    and close it before returning.
    """

    def __init__(self, session: Session, session_factory: Optional[Callable[[], Session]] = None):
        self.session = session
        self.session_factory = session_factory
        self.repository = ApiKeyUsageRepository(session)
        self.logger = get_logger()

    @contextmanager
    def _own_transaction(self) -> Iterator[Session]:
        factory = self.session_factory or get_db_manager().new_session
        session = factory()
        try:
            yield session
            session.commit()
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def record_attempt(self, api_key_id: str, operation: str, success: bool) -> bool:
        """
        Append and commit one audit entry.

        Args:
            api_key_id: Key the attempt was made against
            operation: Operation label, e.g. "decrypt"
            success: Whether the attempt succeeded

        Returns:
            True if the entry was written, False if recording failed or is disabled
        """
        if not get_config().features.enable_audit_logging:
            return False

        try:
            with self._own_transaction() as session:
                ApiKeyUsageRepository(session).append(api_key_id, operation, success)
        except Exception as e:
            # Constructing the error logs it; the audited operation carries on
            AuditWriteError(
                api_key_id=api_key_id,
                operation=operation,
                success=success,
                error_type=type(e).__name__,
                cause=e,
            )
            return False

        self.logger.info(
            "Audit entry recorded",
            extra={"api_key_id": api_key_id, "operation": operation, "success": success},
        )
        return True

    def touch_last_used(self, api_key_id: str) -> None:
        """
        Stamp and commit ``last_used`` on a key.

        Raises:
            RepositoryError: If the update fails
        """
        with self._own_transaction() as session:
            ApiKeyRepository(session).touch_last_used(api_key_id)

    def list_entries(self, api_key_id: str) -> List[AuditEntryRead]:
        """Audit entries for a key, newest first. Ownership is the caller's concern."""
        return [AuditEntryRead.model_validate(e) for e in self.repository.list_for_key(api_key_id)]
