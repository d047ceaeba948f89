"""
Unit tests for the exception system.

Tests all exception classes, factory functions, and correlation handling.
"""

from unittest.mock import patch

import pytest

from api_key_vault.exceptions import (
    AuditWriteError,
    AuthenticationError,
    BaseError,
    CodecError,
    CredentialInactiveError,
    CredentialNotFoundError,
    ErrorCode,
    RepositoryError,
    ServiceError,
    ValidationError,
    clear_correlation_id,
    duplicate,
    get_correlation_id,
    not_found,
    set_correlation_id,
    validation_failed,
)


class TestBaseError:
    """Test BaseError class."""

    def test_basic_error_creation(self):
        error = BaseError("Test error message")

        assert error.message == "Test error message"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.status_code == 500
        assert error.cause is None
        assert error.error_id is not None
        assert error.context["error_id"] == error.error_id

    def test_error_with_cause(self):
        original = ValueError("Original error")
        error = BaseError("Wrapped error", cause=original)

        assert error.cause is original
        assert error.context["cause"]["type"] == "ValueError"
        assert error.context["cause"]["message"] == "Original error"

    def test_to_dict_hides_cause_by_default(self):
        error = BaseError("Wrapped", cause=ValueError("inner"), api_key_id="k-1")
        result = error.to_dict()

        assert result["error"]["message"] == "Wrapped"
        assert result["error"]["code"] == ErrorCode.INTERNAL_ERROR.value
        assert result["error"]["context"] == {"api_key_id": "k-1"}
        assert "cause" not in result["error"]

    def test_to_dict_with_cause(self):
        error = BaseError("Wrapped", cause=ValueError("inner"))
        result = error.to_dict(include_cause=True)

        assert result["error"]["cause"] == {"type": "ValueError", "message": "inner"}

    def test_add_context_is_fluent(self):
        error = BaseError("Test")
        assert error.add_context(step="decode") is error
        assert error.context["step"] == "decode"

    def test_error_chain(self):
        root = ValueError("root")
        middle = RepositoryError("middle", cause=root)
        top = ServiceError("top", cause=middle)

        assert top.error_chain == [top, middle, root]

    def test_logs_on_construction(self):
        with patch("api_key_vault.utils.logger.get_logger") as mock_get_logger:
            BaseError("Server side", status_code=500)
            BaseError("Client side", status_code=404)

        logger = mock_get_logger.return_value
        logger.error.assert_called_once()
        logger.warning.assert_called_once()


class TestLayerErrors:
    """Test layer-specific errors."""

    def test_service_error_records_operation(self):
        error = ServiceError("failed", operation="hash_password")
        assert error.context["operation"] == "hash_password"
        assert error.status_code == 500

    def test_validation_error_records_field(self):
        error = ValidationError("bad", field="name", error_code=ErrorCode.MISSING_REQUIRED)
        assert error.context["field"] == "name"
        assert error.status_code == 400
        assert error.error_code == ErrorCode.MISSING_REQUIRED


class TestFactories:
    """Test the factory functions."""

    def test_not_found(self):
        error = not_found("User", email="a@b.c")

        assert error.status_code == 404
        assert error.error_code == ErrorCode.NOT_FOUND
        assert "email=a@b.c" in error.message

    def test_duplicate(self):
        error = duplicate("User", email="a@b.c")

        assert error.status_code == 409
        assert error.error_code == ErrorCode.DUPLICATE

    def test_validation_failed_does_not_record_value(self):
        error = validation_failed("key_value", "must be at least 8 characters")

        assert error.error_code == ErrorCode.VALIDATION_FAILED
        assert error.context["field"] == "key_value"
        assert error.context["reason"] == "must be at least 8 characters"
        assert "value" not in error.context


class TestCredentialErrors:
    """Test credential-specific errors."""

    @pytest.mark.parametrize(
        "error_cls,status_code,error_code,message",
        [
            (CredentialNotFoundError, 404, ErrorCode.NOT_FOUND, "API key not found"),
            (CredentialInactiveError, 403, ErrorCode.PERMISSION_DENIED, "API key is inactive"),
            (CodecError, 500, ErrorCode.CRYPTO_ERROR, "Failed to decrypt API key"),
            (AuditWriteError, 500, ErrorCode.DATABASE_ERROR, "Failed to record audit entry"),
            (AuthenticationError, 401, ErrorCode.AUTHENTICATION_FAILED, "Invalid email or password"),
        ],
    )
    def test_defaults(self, error_cls, status_code, error_code, message):
        error = error_cls()

        assert isinstance(error, BaseError)
        assert error.status_code == status_code
        assert error.error_code == error_code
        assert error.message == message


class TestCorrelationId:
    """Test correlation ID helpers."""

    def teardown_method(self):
        clear_correlation_id()

    def test_set_get_clear(self):
        set_correlation_id("corr-1")
        assert get_correlation_id() == "corr-1"

        clear_correlation_id()
        assert get_correlation_id() is None

    def test_errors_pick_up_correlation_id(self):
        set_correlation_id("corr-2")
        error = BaseError("Test")

        assert error.context["correlation_id"] == "corr-2"
        assert error.to_dict()["error"]["correlation_id"] == "corr-2"
