"""
Service for user accounts: registration and login-password verification.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..config import get_config
from ..context.operation_context import operation
from ..db.db_user_models import User
from ..exceptions import (
    AuthenticationError,
    ErrorCode,
    ValidationError,
    duplicate,
    not_found,
    validation_failed,
)
from ..schemas.user_schemas import UserRead
from ..utils.logger import get_logger
from ..utils.password_utils import hash_password, placeholder_password_hash, verify_password


def _normalize_email(email: Optional[str]) -> str:
    return email.strip().lower() if isinstance(email, str) else ""


class UserService:
    """Registers users and checks their login passwords."""

    def __init__(self, session: Session):
        self.session = session
        self.logger = get_logger()

    def _find_by_email(self, email: str) -> Optional[User]:
        return self.session.execute(select(User).where(User.email == email)).scalars().first()

    @operation()
    def register_user(self, email: str, password: str, name: Optional[str] = None) -> UserRead:
        """
        Create a user with a hashed password.

        Args:
            email: Login email, stored trimmed and lower-cased
            password: Plaintext password, at least min_password_length characters
            name: Optional display name

        Returns:
            The new user

        Raises:
            ValidationError: If the email or password is invalid
            RepositoryError: If the email is already registered (409)
        """
        clean_email = _normalize_email(email)
        if not clean_email:
            raise ValidationError(
                "email is required", field="email", error_code=ErrorCode.MISSING_REQUIRED
            )
        if "@" not in clean_email:
            raise validation_failed("email", "must be a valid email address")

        min_length = get_config().security.min_password_length
        if not isinstance(password, str) or len(password) < min_length:
            raise validation_failed("password", f"must be at least {min_length} characters")

        if self._find_by_email(clean_email) is not None:
            raise duplicate(resource_type="User", email=clean_email)

        user = User(
            email=clean_email,
            name=(name or "").strip() or None,
            password_hash=hash_password(password),
        )
        self.session.add(user)
        try:
            self.session.flush()
        except IntegrityError as e:
            raise duplicate(resource_type="User", cause=e, email=clean_email) from e

        self.logger.info("User registered", extra={"user_id": user.id})
        return UserRead.model_validate(user)

    @operation()
    def authenticate(self, email: str, password: str) -> UserRead:
        """
        Verify an email/password pair.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong
        """
        user = self._find_by_email(_normalize_email(email))
        # Unknown emails still pay for one argon2 verify
        password_hash = user.password_hash if user is not None else placeholder_password_hash()
        verified = verify_password(password or "", password_hash)
        if user is None or not verified:
            raise AuthenticationError()

        self.logger.info("User authenticated", extra={"user_id": user.id})
        return UserRead.model_validate(user)

    @operation()
    def get_user_by_email(self, email: str) -> UserRead:
        """Look up a user by email; raises a 404 RepositoryError if unknown."""
        clean_email = _normalize_email(email)
        user = self._find_by_email(clean_email)
        if user is None:
            raise not_found("User", email=clean_email)
        return UserRead.model_validate(user)
