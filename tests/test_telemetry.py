# =============================================================================
# tests/test_telemetry.py - Logging and Seq Sink Tests
# =============================================================================
# Uses httpx.MockTransport so no Seq server is needed.
#
# Run with: pytest tests/test_telemetry.py -v
# =============================================================================

import json
import logging
import sys

import httpx

import app.telemetry as telemetry
from app.telemetry import SeqHandler, TelemetrySink, configure_logging


def recording_client(events, status_code=201):
    def handle(request: httpx.Request) -> httpx.Response:
        events.append((request, json.loads(request.content)))
        return httpx.Response(status_code)

    return httpx.Client(transport=httpx.MockTransport(handle))


def make_record(message="Catalog item 7 deleted", level=logging.INFO, exc_info=None):
    return logging.LogRecord(
        name="app.routers.catalog_items",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=exc_info,
    )


class TestSeqHandler:
    def test_posts_clef_event(self):
        events = []
        handler = SeqHandler(
            "http://seq.local:5341/",
            api_key="secret",
            client=recording_client(events),
        )

        handler.emit(make_record())

        request, event = events[0]
        assert str(request.url) == "http://seq.local:5341/ingest/clef"
        assert request.headers["X-Seq-ApiKey"] == "secret"
        assert request.headers["Content-Type"] == "application/vnd.serilog.clef"
        assert event["@m"] == "Catalog item 7 deleted"
        assert event["@l"] == "Information"
        assert event["SourceContext"] == "app.routers.catalog_items"
        assert "@t" in event

    def test_exception_is_attached(self):
        handler = SeqHandler("http://seq.local:5341", client=recording_client([]))
        try:
            raise ValueError("bad")
        except ValueError:
            record = make_record(level=logging.ERROR, exc_info=sys.exc_info())

        event = handler.to_clef(record)

        assert event["@l"] == "Error"
        assert "ValueError: bad" in event["@x"]

    def test_delivery_errors_go_to_handle_error(self, monkeypatch):
        handled = []
        handler = SeqHandler("http://seq.local:5341", client=recording_client([], status_code=500))
        monkeypatch.setattr(handler, "handleError", lambda record: handled.append(record))

        handler.emit(make_record())

        assert len(handled) == 1


class TestConfigureLogging:
    def test_disabled_sink(self, settings):
        sink = configure_logging(settings)

        assert not sink.enabled
        sink.stop()

    def test_enabled_sink_ships_and_detaches(self, settings, monkeypatch):
        events = []

        class RecordingSeqHandler(SeqHandler):
            def __init__(self, server_url, api_key=None):
                super().__init__(server_url, api_key=api_key, client=recording_client(events))

        monkeypatch.setattr(telemetry, "SeqHandler", RecordingSeqHandler)
        settings = settings.model_copy(
            update={"SEQ": settings.SEQ.model_copy(update={"enabled": True})}
        )

        sink = configure_logging(settings)
        assert sink.enabled
        queue_handler = sink.queue_handler
        assert queue_handler in logging.getLogger().handlers

        logging.getLogger("tests.telemetry").warning("shipped to seq")
        logging.getLogger("httpx").warning("never shipped")
        sink.stop()

        messages = [event["@m"] for _, event in events]
        assert "shipped to seq" in messages
        assert "never shipped" not in messages
        assert queue_handler not in logging.getLogger().handlers
        assert not sink.enabled

    def test_queued_exception_keeps_traceback_field(self, settings, monkeypatch):
        """Tracebacks reach Seq as @x, not folded into the message."""
        events = []

        class RecordingSeqHandler(SeqHandler):
            def __init__(self, server_url, api_key=None):
                super().__init__(server_url, api_key=api_key, client=recording_client(events))

        monkeypatch.setattr(telemetry, "SeqHandler", RecordingSeqHandler)
        settings = settings.model_copy(
            update={"SEQ": settings.SEQ.model_copy(update={"enabled": True})}
        )

        sink = configure_logging(settings)
        try:
            raise ValueError("boom")
        except ValueError:
            logging.getLogger("tests.telemetry").exception("Unhandled error on %s", "/api/catalog-items")
        sink.stop()

        event = next(event for _, event in events if event["@l"] == "Error")
        assert event["@m"] == "Unhandled error on /api/catalog-items"
        assert "Traceback" in event["@x"]
        assert "ValueError: boom" in event["@x"]

    def test_stop_without_listener(self):
        TelemetrySink().stop()
