# =============================================================================
# app/telemetry.py - Logging and Seq Telemetry
# =============================================================================
# Configures the root logger for the process and, when enabled, ships every
# record to a Seq server as CLEF (compact log event format) over HTTP.
#
# Shipping happens on a background thread: request handlers only put the
# record on a queue (QueueHandler) and a QueueListener posts it with httpx,
# so a slow or unreachable Seq never stalls a request.
#
# Usage:
#   sink = configure_logging(settings)
#   ...
#   sink.stop()   # flush on shutdown
# =============================================================================

from __future__ import annotations

import copy
import json
import logging
import queue
from datetime import datetime, timezone
from logging.handlers import QueueHandler, QueueListener

import httpx

from app.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Records from the HTTP client itself must not be shipped, or every post
# would log another record to post.
_EXCLUDED_LOGGERS = ("httpx", "httpcore")

_SEQ_LEVELS = {
    logging.DEBUG: "Debug",
    logging.INFO: "Information",
    logging.WARNING: "Warning",
    logging.ERROR: "Error",
    logging.CRITICAL: "Fatal",
}


class _ExcludeLoggers(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        return not record.name.startswith(_EXCLUDED_LOGGERS)


class ClefQueueHandler(QueueHandler):
    """
    Queue handler that keeps the traceback apart from the message.

    The stock QueueHandler folds the formatted traceback into `msg`. Here the
    message is rendered on its own and the traceback is kept as `exc_text`,
    so the Seq event can carry it in `@x`.
    """

    def prepare(self, record: logging.LogRecord) -> logging.LogRecord:
        record = copy.copy(record)
        record.msg = record.getMessage()
        record.args = None
        if record.exc_info and not record.exc_text:
            record.exc_text = logging.Formatter().formatException(record.exc_info)
        record.exc_info = None
        return record


class SeqHandler(logging.Handler):
    """Posts log records to Seq's CLEF ingestion endpoint."""

    def __init__(
        self,
        server_url: str,
        api_key: str | None = None,
        application: str = "PublicApi",
        client: httpx.Client | None = None,
    ):
        super().__init__()
        self.url = f"{server_url.rstrip('/')}/ingest/clef"
        self.application = application
        headers = {"Content-Type": "application/vnd.serilog.clef"}
        if api_key:
            headers["X-Seq-ApiKey"] = api_key
        self._client = client or httpx.Client(timeout=5.0)
        self._headers = headers

    def to_clef(self, record: logging.LogRecord) -> dict:
        event = {
            "@t": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "@m": record.getMessage(),
            "@l": _SEQ_LEVELS.get(record.levelno, record.levelname),
            "SourceContext": record.name,
            "Application": self.application,
        }
        if record.exc_info:
            event["@x"] = logging.Formatter().formatException(record.exc_info)
        elif record.exc_text:
            event["@x"] = record.exc_text
        return event

    def emit(self, record: logging.LogRecord) -> None:
        try:
            body = json.dumps(self.to_clef(record), default=str)
            response = self._client.post(self.url, content=body, headers=self._headers)
            response.raise_for_status()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        try:
            self._client.close()
        finally:
            super().close()


class TelemetrySink:
    """Owns the queue listener feeding Seq; `stop()` flushes and detaches it."""

    def __init__(
        self,
        queue_handler: QueueHandler | None = None,
        listener: QueueListener | None = None,
    ):
        self.queue_handler = queue_handler
        self.listener = listener

    @property
    def enabled(self) -> bool:
        return self.listener is not None

    def stop(self) -> None:
        if self.listener is None:
            return
        self.listener.stop()
        for handler in self.listener.handlers:
            handler.close()
        logging.getLogger().removeHandler(self.queue_handler)
        self.listener = None
        self.queue_handler = None


def configure_logging(settings: Settings) -> TelemetrySink:
    """
    Configure process logging and the Seq sink.

    The console handler is only added if the root logger has none yet, so
    calling this more than once (tests) does not duplicate output.
    """
    level = logging.DEBUG if settings.DEBUG else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)
    logging.getLogger().setLevel(level)

    if not settings.SEQ.enabled:
        return TelemetrySink()

    seq_handler = SeqHandler(settings.SEQ.server_url, api_key=settings.SEQ.api_key)
    records: queue.Queue = queue.Queue(-1)
    queue_handler = ClefQueueHandler(records)
    queue_handler.addFilter(_ExcludeLoggers())
    listener = QueueListener(records, seq_handler, respect_handler_level=True)

    logging.getLogger().addHandler(queue_handler)
    listener.start()
    logging.getLogger(__name__).info(f"Shipping logs to Seq at {settings.SEQ.server_url}")
    return TelemetrySink(queue_handler, listener)
