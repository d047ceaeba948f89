"""
Tests for UserService.
"""

from unittest.mock import patch

import pytest
from sqlalchemy import select

from api_key_vault.db.db_user_models import User
from api_key_vault.exceptions import (
    AuthenticationError,
    ErrorCode,
    RepositoryError,
    ValidationError,
)


class TestRegisterUser:
    """Test register_user."""

    def test_register_hashes_password(self, user_service, db_session):
        user = user_service.register_user("  Alice@Example.COM ", "hunter22", name=" Alice ")

        assert user.email == "alice@example.com"
        assert user.name == "Alice"
        stored = db_session.execute(select(User).where(User.id == user.id)).scalar_one()
        assert stored.password_hash.startswith("$argon2id$")
        assert "hunter22" not in stored.password_hash

    def test_read_model_has_no_hash(self, user_service):
        user = user_service.register_user("bob@example.com", "hunter22")
        assert "password_hash" not in user.model_dump()

    @pytest.mark.parametrize(
        "email,password,field",
        [
            ("", "hunter22", "email"),
            ("not-an-email", "hunter22", "email"),
            ("carol@example.com", "12345", "password"),
            ("carol@example.com", None, "password"),
        ],
    )
    def test_invalid_input(self, user_service, email, password, field):
        with pytest.raises(ValidationError) as exc_info:
            user_service.register_user(email, password)

        assert exc_info.value.context["field"] == field

    def test_duplicate_email(self, user_service):
        user_service.register_user("dave@example.com", "hunter22")

        with pytest.raises(RepositoryError) as exc_info:
            user_service.register_user("DAVE@example.com", "another-password")

        assert exc_info.value.status_code == 409
        assert exc_info.value.error_code == ErrorCode.DUPLICATE


class TestAuthenticate:
    """Test authenticate."""

    def test_correct_password(self, user_service):
        registered = user_service.register_user("erin@example.com", "hunter22")

        assert user_service.authenticate("ERIN@example.com", "hunter22").id == registered.id

    def test_wrong_password_and_unknown_email_look_identical(self, user_service):
        user_service.register_user("frank@example.com", "hunter22")

        with pytest.raises(AuthenticationError) as wrong:
            user_service.authenticate("frank@example.com", "wrong-password")
        with pytest.raises(AuthenticationError) as unknown:
            user_service.authenticate("nobody@example.com", "hunter22")

        assert wrong.value.status_code == 401
        assert wrong.value.message == unknown.value.message

    def test_unknown_email_still_runs_password_verify(self, user_service):
        with patch(
            "api_key_vault.services.user_service.verify_password", return_value=True
        ) as mock_verify:
            with pytest.raises(AuthenticationError):
                user_service.authenticate("nobody@example.com", "hunter22")

        mock_verify.assert_called_once()
        password, password_hash = mock_verify.call_args.args
        assert password == "hunter22"
        assert password_hash.startswith("$argon2id$")


class TestGetUserByEmail:
    """Test get_user_by_email."""

    def test_found(self, user_service):
        registered = user_service.register_user("grace@example.com", "hunter22")
        assert user_service.get_user_by_email("Grace@Example.com").id == registered.id

    def test_not_found(self, user_service):
        with pytest.raises(RepositoryError) as exc_info:
            user_service.get_user_by_email("nobody@example.com")

        assert exc_info.value.status_code == 404
        assert exc_info.value.error_code == ErrorCode.NOT_FOUND
