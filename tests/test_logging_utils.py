"""Tests for structured logging helpers."""

import io
import json
import logging

from journal_timeline.logging_utils import (
    StructuredJsonFormatter,
    TimelineLoggerAdapter,
    configure_structured_logging,
    get_timeline_logger,
)


def make_record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="journal_timeline.controller",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Loaded %d events",
        args=(3,),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


class TestStructuredJsonFormatter:
    """Tests for the JSON formatter."""

    def test_core_fields(self):
        """Level, logger and rendered message are emitted."""
        data = json.loads(StructuredJsonFormatter().format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "journal_timeline.controller"
        assert data["message"] == "Loaded 3 events"
        assert "timestamp" in data

    def test_extra_fields(self):
        """Extra context is included; unserializable values are stringified."""
        data = json.loads(
            StructuredJsonFormatter().format(make_record(timeline_id="tl-1", when=object()))
        )

        assert data["timeline_id"] == "tl-1"
        assert isinstance(data["when"], str)


class TestConfigureStructuredLogging:
    """Tests for handler installation."""

    def test_replaces_handlers(self):
        """Configuring twice leaves a single JSON handler."""
        stream = io.StringIO()
        configure_structured_logging(logger_name="journal_timeline.test_cfg", stream=stream)
        log = configure_structured_logging(
            logger_name="journal_timeline.test_cfg", stream=stream
        )

        log.info("ready", extra={"zoom": "day"})

        assert len(log.handlers) == 1
        data = json.loads(stream.getvalue().strip())
        assert data["message"] == "ready"
        assert data["zoom"] == "day"


class TestTimelineLoggerAdapter:
    """Tests for the context adapter."""

    def test_logger_name(self):
        """Component loggers live under the package namespace."""
        assert get_timeline_logger("pagination").name == "journal_timeline.pagination"

    def test_context_merged(self, caplog):
        """Adapter context is added alongside per-call extras."""
        adapter = TimelineLoggerAdapter(
            get_timeline_logger("controller"), {"timeline_id": "tl-1", "zoom": "month"}
        )

        with caplog.at_level(logging.INFO, logger="journal_timeline"):
            adapter.info("Loading", extra={"reset": True})

        (record,) = caplog.records
        assert record.timeline_id == "tl-1"
        assert record.zoom == "month"
        assert record.reset is True
