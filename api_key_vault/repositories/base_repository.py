"""
Base repository implementation with common functionality for all repositories.

Repositories receive a session and never commit or roll back: transaction
boundaries belong to the caller.
"""

from contextlib import contextmanager
from typing import Any, Generic, NoReturn, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..exceptions import BaseError, ErrorCode, RepositoryError, duplicate
from ..utils.logger import get_logger

T = TypeVar("T")


class BaseRepository(Generic[T]):
    """Base repository with common functionality for all repositories."""

    def __init__(self, session: Session, entity_class: Type[T]):
        """
        Initialize the base repository.

        Args:
            session: SQLAlchemy session for database operations
            entity_class: SQLAlchemy model class this repository handles
        """
        self.session = session
        self.entity_class = entity_class
        self.entity_name = entity_class.__name__
        self.logger = get_logger()

    def _handle_db_error(
        self,
        e: Exception,
        operation_name: str,
        entity_id: Optional[str] = None,
        **context: Any,
    ) -> NoReturn:
        """
        Map database errors to RepositoryError with appropriate codes.

        Raises:
            RepositoryError: With appropriate error code and context
        """
        # Already one of ours - preserve the error code
        if isinstance(e, BaseError):
            raise e

        error_context = {
            "operation_name": operation_name,
            "entity_type": self.entity_name,
            **context,
        }
        if entity_id:
            error_context["entity_id"] = entity_id

        if isinstance(e, IntegrityError):
            error_message = str(e.orig).lower() if hasattr(e, "orig") else str(e).lower()

            if "foreign key constraint" in error_message:
                raise RepositoryError(
                    f"Invalid reference in {self.entity_name}",
                    error_code=ErrorCode.CONSTRAINT_VIOLATION,
                    cause=e,
                    **error_context,
                ) from e

            elif "unique constraint" in error_message or "duplicate" in error_message:
                raise duplicate(resource_type=self.entity_name, cause=e, **error_context) from e

            else:
                raise RepositoryError(
                    f"Database constraint violation for {self.entity_name}",
                    error_code=ErrorCode.CONSTRAINT_VIOLATION,
                    cause=e,
                    **error_context,
                ) from e

        elif isinstance(e, SQLAlchemyError):
            raise RepositoryError(
                f"Database error for {self.entity_name}",
                error_code=ErrorCode.DATABASE_ERROR,
                cause=e,
                **error_context,
            ) from e

        raise RepositoryError(
            f"Unexpected error for {self.entity_name}",
            error_code=ErrorCode.INTERNAL_ERROR,
            cause=e,
            **error_context,
        ) from e

    @contextmanager
    def _session_operation(
        self, operation_name: str, entity_id: Optional[str] = None, is_read_only: bool = False
    ):
        """
        Run an operation on the caller's session with error mapping.

        Write operations are flushed so constraint violations surface here.

        Args:
            operation_name: Name of the operation for error reporting
            entity_id: Optional ID of the entity being operated on
            is_read_only: If True, skip flush

        Yields:
            The existing session

        Raises:
            RepositoryError: If there's a database error
        """
        try:
            yield self.session
            if not is_read_only:
                self.session.flush()
        except Exception as e:
            self._handle_db_error(e, operation_name, entity_id)
