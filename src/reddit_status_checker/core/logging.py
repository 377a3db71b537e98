"""
Purpose: Centralized logging configuration with structured output and secret redaction.
Constraints: Logging only; no business logic.
"""

# Imports
import json
import logging
import os
import re
import sys
import threading
from datetime import datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from reddit_status_checker.core.metrics import get_metrics

_REDACTED = "[redacted]"

_TOKEN_PATTERNS = [
    re.compile(r"\bpat[A-Za-z0-9]{14}\.[A-Za-z0-9]{32,}\b"),
    re.compile(r"\bkey[A-Za-z0-9]{14}\b"),
    re.compile(r"(?i)\bBearer\s+[A-Za-z0-9._\-]+"),
]

# user:password@ inside any URL, including proxy URLs
_URL_CREDENTIALS = re.compile(r"(?P<scheme>[a-z][a-z0-9+.\-]*://)[^/\s:@]+:[^/\s@]+@", re.IGNORECASE)

_EXTRA_FIELDS = ("event", "details", "record_id")


def _redact_text(text: str) -> str:
    if not text:
        return text
    redacted = _URL_CREDENTIALS.sub(lambda m: f"{m.group('scheme')}{_REDACTED}@", text)
    for pattern in _TOKEN_PATTERNS:
        redacted = pattern.sub(_REDACTED, redacted)
    return redacted


def _redact_obj(value):
    if isinstance(value, str):
        return _redact_text(value)
    if isinstance(value, dict):
        return {k: _redact_obj(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_redact_obj(v) for v in value]
    return value


def _flag(name: str, default: str = "1") -> bool:
    return os.getenv(name, default).lower() not in ("0", "false", "no")


# Public API
class UnifiedLogger:
    """Configures the root logger once and hands out named loggers."""

    _lock = threading.Lock()
    _global_initialized = False
    _sentry_initialized = False

    def __init__(self, name: str = "reddit_status_checker", log_level: Optional[str] = None):
        self.name = name
        if log_level is None:
            log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        level = getattr(logging, log_level, logging.INFO)

        with self._lock:
            self.logger = logging.getLogger(name)
            self.logger.setLevel(level)
            if not UnifiedLogger._global_initialized:
                logs_dir = self.logs_dir()
                logs_dir.mkdir(parents=True, exist_ok=True)
                timestamp = datetime.now().strftime("%Y%m%d")
                self._ensure_root_logger(logs_dir, timestamp, level)
                self._maybe_init_sentry()
                UnifiedLogger._global_initialized = True
                self.logger.info("Logger initialized. Log dir: %s", logs_dir)
            self.logger.propagate = True

    @staticmethod
    def logs_dir() -> Path:
        return Path(os.getenv("LOG_DIR", "logs"))

    def get_logger(self) -> logging.Logger:
        return self.logger

    def log_event(
        self,
        event: str,
        details: Dict[str, Any],
        level: str = "INFO",
        record_id: Optional[str] = None,
    ) -> None:
        """Log a checker event with structured details for the JSON log."""
        log_level = getattr(logging, level.upper(), logging.INFO)
        extra = {"event": event, "details": details}
        if record_id:
            extra["record_id"] = record_id
        self.logger.log(log_level, "EVENT: %s", event, extra=extra)

    def log_metrics_snapshot(self) -> None:
        """Append the current metrics snapshot to logs/metrics.jsonl."""
        try:
            get_metrics().write_snapshot(self.logs_dir() / "metrics.jsonl")
        except OSError as exc:
            self.logger.warning("Could not write metrics snapshot: %s", exc)

    def _ensure_root_logger(self, logs_dir: Path, timestamp: str, level: int) -> None:
        if not _flag("ENABLE_ROOT_LOGGER"):
            return
        root_logger = logging.getLogger()
        if root_logger.handlers:
            return

        file_handler = RotatingFileHandler(
            logs_dir / f"checker_{timestamp}.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(_RedactingFormatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s"
        ))

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(
            getattr(logging, os.getenv("CONSOLE_LOG_LEVEL", "INFO").upper(), logging.INFO)
        )
        console_handler.setFormatter(_RedactingFormatter("%(asctime)s - %(levelname)s - %(message)s"))
        console_handler.addFilter(_skip_structured_events)

        root_logger.setLevel(level)
        root_logger.addHandler(file_handler)
        root_logger.addHandler(console_handler)

        if _flag("ENABLE_JSON_LOGGING"):
            json_handler = RotatingFileHandler(
                logs_dir / f"checker_json_{timestamp}.log",
                maxBytes=5 * 1024 * 1024,
                backupCount=3,
                encoding="utf-8",
            )
            json_handler.setLevel(level)
            json_handler.setFormatter(_RedactingJsonFormatter())
            root_logger.addHandler(json_handler)
        if _flag("METRICS_ENABLED"):
            root_logger.addHandler(_MetricsHandler())

    def _maybe_init_sentry(self) -> None:
        if UnifiedLogger._sentry_initialized:
            return
        dsn = os.getenv("SENTRY_DSN", "").strip()
        if not dsn:
            return
        import sentry_sdk
        from sentry_sdk.integrations.logging import LoggingIntegration

        sentry_sdk.init(
            dsn=dsn,
            environment=os.getenv("SENTRY_ENVIRONMENT", "production"),
            release=os.getenv("SENTRY_RELEASE"),
            traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
            integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        )
        UnifiedLogger._sentry_initialized = True


def _skip_structured_events(record: logging.LogRecord) -> bool:
    # operators read the progress lines; EVENT records are for the JSON log
    return not getattr(record, "event", None)


class _MetricsHandler(logging.Handler):
    """Count log records by level and by checker event."""

    def emit(self, record: logging.LogRecord) -> None:
        metrics = get_metrics()
        metrics.record(f"log.{record.levelname.lower()}", success=record.levelno < logging.ERROR)
        event = getattr(record, "event", None)
        if event:
            metrics.record(f"event.{event}", success=record.levelno < logging.ERROR)


class _RedactingFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return _redact_text(super().format(record))


class _RedactingJsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _redact_text(record.getMessage()),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        for name in _EXTRA_FIELDS:
            if hasattr(record, name):
                log_obj[name] = _redact_obj(getattr(record, name))
        if record.exc_info:
            log_obj["exception"] = _redact_text(self.formatException(record.exc_info))
        return json.dumps(log_obj, default=str)
