"""
Unit Tests: Monitoring

Tests for logging configuration, structured fields and owner tagging.
"""

import json
import logging
import sys

import pytest

from filevault.monitoring.logging import (
    JSONFormatter,
    OwnerFilter,
    configure_logging,
    current_owner_id,
    get_logger,
    owner_context,
)


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way pytest set it up."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers = handlers
    root.setLevel(level)


def make_record(message: str = "Stored file", **attrs) -> logging.LogRecord:
    record = logging.LogRecord("filevault.test", logging.INFO, __file__, 10, message, None, None)
    for key, value in attrs.items():
        setattr(record, key, value)
    return record


# =============================================================================
# Configuration Tests
# =============================================================================

class TestConfigureLogging:
    """Test configure_logging()."""

    def test_single_stderr_handler(self, restore_root_logger):
        """Test existing handlers are replaced by one stderr handler."""
        configure_logging(level="warning")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr

    def test_json_format(self, restore_root_logger):
        """Test the json format installs JSONFormatter."""
        configure_logging(format_type="json")
        assert isinstance(logging.getLogger().handlers[0].formatter, JSONFormatter)

    def test_unknown_level_defaults_to_info(self, restore_root_logger):
        """Test an unrecognised level name falls back to INFO."""
        configure_logging(level="chatty")
        assert logging.getLogger().level == logging.INFO


# =============================================================================
# Structured Logger Tests
# =============================================================================

class TestStructuredLogger:
    """Test keyword fields and owner tagging."""

    def test_get_logger(self):
        """Test getting named logger."""
        assert get_logger("filevault.data.storage.local").name == "filevault.data.storage.local"

    def test_structured_fields(self, caplog):
        """Test keyword arguments are attached as extra_fields."""
        logger = get_logger("filevault.test")

        with caplog.at_level(logging.INFO, logger="filevault.test"):
            logger.info("Stored file", category="credential", encrypted=True)

        record = caplog.records[-1]
        assert record.getMessage() == "Stored file"
        assert record.extra_fields == {"category": "credential", "encrypted": True}
        assert not hasattr(record, "owner_id")

    def test_owner_tag(self, caplog):
        """Test records logged inside owner_context carry the owner id."""
        logger = get_logger("filevault.test")

        with caplog.at_level(logging.INFO, logger="filevault.test"):
            with owner_context("client-42"):
                logger.warning("Delete failed")

        assert caplog.records[-1].owner_id == "client-42"

    def test_owner_context_nests_and_resets(self):
        """Test the previous owner is restored on exit, even after an error."""
        with owner_context("outer"):
            with pytest.raises(OSError):
                with owner_context("inner"):
                    assert current_owner_id() == "inner"
                    raise OSError("disk full")
            assert current_owner_id() == "outer"

        assert current_owner_id() is None


# =============================================================================
# Formatter Tests
# =============================================================================

class TestFormatting:
    """Test JSONFormatter and OwnerFilter."""

    def test_json_formatter(self):
        """Test JSON output includes owner and extra fields."""
        record = make_record(owner_id="client-42", extra_fields={"encrypted": True})

        data = json.loads(JSONFormatter().format(record))

        assert data["message"] == "Stored file"
        assert data["level"] == "INFO"
        assert data["logger"] == "filevault.test"
        assert data["owner_id"] == "client-42"
        assert data["extra"] == {"encrypted": True}
        assert data["timestamp"].endswith("Z")

    def test_json_formatter_without_owner(self):
        """Test records outside an owner context omit the owner key."""
        data = json.loads(JSONFormatter().format(make_record()))
        assert "owner_id" not in data
        assert "extra" not in data

    def test_json_formatter_exception(self):
        """Test exceptions are serialized."""
        try:
            raise OSError("disk full")
        except OSError:
            record = logging.LogRecord("filevault.test", logging.ERROR, __file__, 1, "write failed", None, sys.exc_info())

        data = json.loads(JSONFormatter().format(record))
        assert data["exception"]["type"] == "OSError"
        assert data["exception"]["message"] == "disk full"

    def test_owner_filter(self):
        """Test the text placeholder is the owner id, or '-' without one."""
        tagged = make_record(owner_id="client-1")
        untagged = make_record()

        assert OwnerFilter().filter(tagged) is True
        assert OwnerFilter().filter(untagged) is True
        assert tagged.owner == "client-1"
        assert untagged.owner == "-"
