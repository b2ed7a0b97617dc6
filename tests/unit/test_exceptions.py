"""
Unit tests for the exception system.

Tests the exception classes, factory functions and correlation ids.
"""

from unittest.mock import patch

from api_key_core.exceptions import (
    BaseError,
    ConfigurationError,
    ErrorCode,
    UnsupportedBackendError,
    ValidationError,
    get_correlation_id,
    missing_setting,
    reset_correlation_id,
    set_correlation_id,
)


class TestBaseError:
    """Test BaseError class."""

    def test_basic_error_creation(self):
        error = BaseError("Test error message")

        assert error.message == "Test error message"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.status_code == 500
        assert error.cause is None
        assert error.context["error_id"] == error.error_id
        assert error.timestamp is not None

    def test_error_with_cause(self):
        original_error = ValueError("Original error")
        error = BaseError("Wrapped error", cause=original_error)

        assert error.context["cause"]["type"] == "ValueError"
        assert error.error_chain == [error, original_error]

    def test_error_with_correlation_id(self):
        token = set_correlation_id("corr-123")
        try:
            error = BaseError("Test error")
            assert error.context["correlation_id"] == "corr-123"
            assert error.to_dict()["error"]["correlation_id"] == "corr-123"
        finally:
            reset_correlation_id(token)

        assert get_correlation_id() is None

    def test_to_dict(self):
        error = BaseError(
            "Test error", error_code=ErrorCode.VALIDATION_FAILED, status_code=400, field="owner"
        )
        result = error.to_dict()

        assert result["error"]["code"] == "2000"
        assert result["error"]["message"] == "Test error"
        assert result["error"]["context"] == {"field": "owner"}

    def test_to_dict_with_cause(self):
        error = BaseError("Wrapped", cause=RuntimeError("boom"))
        result = error.to_dict(include_cause=True)

        assert result["error"]["cause"] == {"type": "RuntimeError", "message": "boom"}

    def test_add_context(self):
        error = BaseError("Test").add_context(backend="mysql")
        assert error.context["backend"] == "mysql"


class TestErrorLogging:
    """Test automatic logging by status code."""

    def test_server_errors_logged_as_error(self):
        with patch("api_key_core.utils.logger.get_logger") as mock_get_logger:
            BaseError("boom", status_code=500)
        mock_get_logger.return_value.error.assert_called_once()

    def test_client_errors_logged_as_warning(self):
        with patch("api_key_core.utils.logger.get_logger") as mock_get_logger:
            ValidationError("bad input")
        mock_get_logger.return_value.warning.assert_called_once()


class TestErrorSubclasses:
    """Test specialized errors."""

    def test_validation_error(self):
        error = ValidationError("bad", field="owner")
        assert error.status_code == 400
        assert error.context["field"] == "owner"

    def test_configuration_error(self):
        error = ConfigurationError("bad config", setting="user")
        assert error.error_code == ErrorCode.CONFIGURATION_ERROR
        assert error.context["setting"] == "user"

    def test_unsupported_backend_error(self):
        error = UnsupportedBackendError("nope", backend="oracle")
        assert error.error_code == ErrorCode.UNSUPPORTED_BACKEND
        assert error.context["backend"] == "oracle"


class TestFactories:
    """Test error factory functions."""

    def test_missing_setting(self):
        error = missing_setting("password", "MySQL")
        assert isinstance(error, ConfigurationError)
        assert error.error_code == ErrorCode.MISSING_REQUIRED
        assert error.message == "Missing required MySQL setting: password"
        assert error.context["backend"] == "MySQL"
