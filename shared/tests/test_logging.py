"""Tests for structured logging helpers."""

import contextvars
import io
import json
import logging

import pytest
import structlog

from shared.utils.logging import (
    CORRELATION_ID_HEADER,
    REDACTED,
    add_correlation_id,
    configure_logging,
    correlation_headers,
    get_correlation_id,
    get_logger,
    redact_secrets,
    set_correlation_id,
)


@pytest.fixture
def restore_logging():
    """Undo configure_logging side effects after a test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.NOTSET)
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()


class TestCorrelationId:
    """Tests for correlation ID context."""

    def test_set_explicit_id(self):
        assert set_correlation_id("abc") == "abc"
        assert get_correlation_id() == "abc"

    def test_set_generates_id(self):
        cid = set_correlation_id()

        assert cid
        assert get_correlation_id() == cid

    def test_headers_carry_id(self):
        set_correlation_id("req-1")

        assert correlation_headers() == {CORRELATION_ID_HEADER: "req-1"}

    def test_headers_empty_without_id(self):
        headers = contextvars.Context().run(correlation_headers)

        assert headers == {}

    def test_processor_adds_id(self):
        set_correlation_id("req-3")

        event = add_correlation_id(None, "info", {"event": "upload_started"})

        assert event["correlation_id"] == "req-3"


class TestRedactSecrets:
    """Tests for the secret-masking processor."""

    def test_masks_signed_values(self):
        event = redact_secrets(
            None,
            "info",
            {"event": "credentials_fetched", "signature": "sig1", "policy": "cG9saWN5"},
        )

        assert event["signature"] == REDACTED
        assert event["policy"] == REDACTED
        assert event["event"] == "credentials_fetched"

    def test_leaves_other_keys(self):
        event = {"event": "upload_started", "object_key": "k1"}

        assert redact_secrets(None, "info", dict(event)) == event


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_configure_binds_service(self, restore_logging):
        configure_logging("yep-storage-test", log_level="DEBUG", json_format=False)

        context = structlog.contextvars.get_contextvars()
        assert context["service"] == "yep-storage-test"

    def test_events_written_to_stream(self, restore_logging):
        """Test JSON events reach the given stream with secrets masked."""
        stream = io.StringIO()
        configure_logging("yep-storage-test", json_format=True, stream=stream)
        set_correlation_id("req-9")

        get_logger("tests").info("credentials_fetched", signature="sig1")

        event = json.loads(stream.getvalue().strip().splitlines()[-1])
        assert event["event"] == "credentials_fetched"
        assert event["signature"] == REDACTED
        assert event["correlation_id"] == "req-9"
        assert event["service"] == "yep-storage-test"

    @pytest.mark.parametrize(
        "log_level,expected",
        [("INFO", logging.WARNING), ("DEBUG", logging.DEBUG)],
    )
    def test_httpx_request_logs_quieted(self, restore_logging, log_level, expected):
        configure_logging("yep-storage-test", log_level=log_level, stream=io.StringIO())

        assert logging.getLogger("httpx").level == expected

    def test_get_logger(self):
        logger = get_logger("tests")

        assert hasattr(logger, "info")
