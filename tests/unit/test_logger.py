"""
Unit tests for logger utilities.

Tests ContextAwareLogger, the key owner filter, configure/get logger and
AzureQueueHandler.
"""

import json
import logging
import sys
from unittest.mock import MagicMock, Mock, patch

import pytest

from api_key_core.context.api_key_context import api_key_identity
from api_key_core.exceptions import ConfigurationError
from api_key_core.utils import logger as logger_module
from api_key_core.utils.logger import (
    ApiKeyContextFilter,
    AzureQueueHandler,
    ContextAwareLogger,
    configure_logging,
    get_logger,
    reset_logging,
)


def make_record(msg="Test message", level=logging.INFO, **extra):
    record = logging.LogRecord(
        name="api_key_core.test",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestContextAwareLogger:
    """Test ContextAwareLogger functionality."""

    def setup_method(self):
        self.mock_logger = Mock(spec=logging.Logger)
        self.context_logger = ContextAwareLogger(self.mock_logger)

    def test_set_level(self):
        self.context_logger.set_level(logging.DEBUG)
        self.mock_logger.setLevel.assert_called_once_with(logging.DEBUG)

    def test_log_without_extras(self):
        self.context_logger.info("Store initialized")
        self.mock_logger.info.assert_called_once_with("Store initialized", extra={})

    def test_log_with_extras(self):
        """Extras are appended pipe-delimited and still passed through."""
        extra = {"backend": "mysql", "key_hash": "a665a459"}
        self.context_logger.error("Upsert failed", extra=extra)

        self.mock_logger.error.assert_called_once_with(
            "Upsert failed | backend=mysql | key_hash=a665a459", extra=extra
        )

    @pytest.mark.parametrize("level", ["debug", "info", "warning", "error", "exception"])
    def test_level_methods(self, level):
        getattr(self.context_logger, level)("msg")
        getattr(self.mock_logger, level).assert_called_once_with("msg", extra={})


class TestApiKeyContextFilter:
    """Test the key owner log filter."""

    def test_adds_owner_inside_request(self):
        record = make_record()
        with api_key_identity("alice", 0):
            assert ApiKeyContextFilter().filter(record) is True
        assert record.api_key_owner == "alice"

    def test_no_owner_outside_request(self):
        record = make_record()
        assert ApiKeyContextFilter().filter(record) is True
        assert not hasattr(record, "api_key_owner")


class TestConfigureLogging:
    """Test configure_logging / get_logger / reset_logging."""

    def test_configure_sets_package_logger(self):
        configured = configure_logging("gateway", log_level="DEBUG", enable_queue=False)

        assert isinstance(configured, ContextAwareLogger)
        assert configured.logger.name == "api_key_core.gateway"
        assert configured.logger.level == logging.DEBUG
        assert get_logger() is configured

    def test_configure_replaces_handlers(self):
        configure_logging("gateway", enable_queue=False)
        configured = configure_logging("gateway", enable_queue=False)

        assert len(configured.logger.handlers) == 1
        handler = configured.logger.handlers[0]
        assert isinstance(handler, logging.StreamHandler)
        assert any(isinstance(f, ApiKeyContextFilter) for f in handler.filters)

    def test_configure_with_queue(self):
        azure_modules = {
            "azure": MagicMock(),
            "azure.storage": MagicMock(),
            "azure.storage.queue": MagicMock(),
        }
        with patch.dict(sys.modules, azure_modules), patch.object(
            logger_module, "AzureQueueHandler"
        ) as mock_handler_cls:
            mock_handler_cls.return_value = MagicMock(spec=logging.Handler, level=logging.INFO)
            configure_logging(
                "gateway", enable_queue=True, queue_name="audit", connection_string="conn"
            )

        mock_handler_cls.assert_called_once_with(
            queue_name="audit", connection_string="conn", batch_size=10
        )

    def test_queue_without_azure_package(self):
        """Queue logging fails at configuration time when the extra is missing."""
        with patch.dict(sys.modules, {"azure.storage.queue": None}):
            with pytest.raises(ConfigurationError) as exc_info:
                configure_logging("gateway", enable_queue=True, connection_string="conn")

        assert exc_info.value.context["setting"] == "enable_logs_queue"

    def test_get_logger_fallback(self):
        fallback = get_logger(log_level="WARNING")
        assert fallback.logger.name == "api_key_core"
        assert fallback.logger.level == logging.WARNING

    def test_reset_logging(self):
        configured = configure_logging("gateway", enable_queue=False)
        reset_logging()
        assert get_logger() is not configured


class TestAzureQueueHandler:
    """Test AzureQueueHandler buffering and entry format."""

    def test_missing_connection_string(self, monkeypatch):
        monkeypatch.delenv("AzureWebJobsStorage", raising=False)
        with patch.object(sys, "stderr") as mock_stderr:
            handler = AzureQueueHandler(connection_string=None)

        assert handler.connection_string is None
        mock_stderr.write.assert_called_with("Azure Storage connection string not provided\n")
        assert handler._ensure_queue_exists() is False

    def test_build_entry(self, monkeypatch):
        monkeypatch.delenv("AzureWebJobsStorage", raising=False)
        handler = AzureQueueHandler()
        record = make_record("Key stored", backend="sqlite", api_key_owner="alice")

        entry = handler.build_entry(record)

        assert entry["level"] == "INFO"
        assert entry["message"] == "Key stored"
        assert entry["logger"] == "api_key_core.test"
        assert entry["api_key_owner"] == "alice"
        assert entry["context"] == {"backend": "sqlite"}
        assert "exception" not in entry

    def test_build_entry_with_exception(self, monkeypatch):
        monkeypatch.delenv("AzureWebJobsStorage", raising=False)
        handler = AzureQueueHandler()
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record("failed")
            record.exc_info = sys.exc_info()

        entry = handler.build_entry(record)

        assert entry["exception"]["type"] == "RuntimeError"
        assert entry["exception"]["message"] == "boom"

    def test_emit_buffers_until_batch_size(self, monkeypatch):
        monkeypatch.delenv("AzureWebJobsStorage", raising=False)
        handler = AzureQueueHandler(batch_size=3)

        with patch.object(handler, "flush") as mock_flush:
            handler.emit(make_record("one"))
            handler.emit(make_record("two"))
            mock_flush.assert_not_called()
            handler.emit(make_record("three"))
            mock_flush.assert_called_once()

    def test_buffer_is_capped_while_sending_fails(self, monkeypatch):
        monkeypatch.delenv("AzureWebJobsStorage", raising=False)
        handler = AzureQueueHandler(batch_size=2, max_buffered=3)

        for name in ("one", "two", "three", "four", "five"):
            handler.emit(make_record(name))

        assert [entry["message"] for entry in handler.log_buffer] == ["three", "four", "five"]

    def test_buffer_cap_not_below_batch_size(self, monkeypatch):
        monkeypatch.delenv("AzureWebJobsStorage", raising=False)
        handler = AzureQueueHandler(batch_size=10, max_buffered=2)
        assert handler.max_buffered == 10

    def test_flush_without_connection_keeps_buffer(self, monkeypatch):
        monkeypatch.delenv("AzureWebJobsStorage", raising=False)
        handler = AzureQueueHandler()
        handler.emit(make_record())

        handler.flush()

        assert len(handler.log_buffer) == 1

    def test_flush_sends_messages(self):
        pytest.importorskip("azure.storage.queue")
        with patch("azure.storage.queue.QueueServiceClient") as mock_service:
            mock_service.from_connection_string.return_value.list_queues.return_value = []
            handler = AzureQueueHandler(queue_name="logs", connection_string="conn")
            mock_service.from_connection_string.return_value.create_queue.assert_called_once_with(
                "logs"
            )

        handler.emit(make_record("first"))
        with patch("azure.storage.queue.QueueClient") as mock_client_cls:
            handler.flush()

        mock_client_cls.from_connection_string.assert_called_once_with(
            conn_str="conn", queue_name="logs"
        )
        sent = mock_client_cls.from_connection_string.return_value.send_message.call_args[0][0]
        assert json.loads(sent)["message"] == "first"
        assert handler.log_buffer == []
