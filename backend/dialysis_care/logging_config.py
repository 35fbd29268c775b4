"""
Logging setup for the API process.

Console output only. ``LOG_FORMAT=json`` switches to one JSON object per line;
keys that carry credentials are masked before they reach any handler.
"""

import json
import logging
import logging.config
from datetime import datetime, timezone

SENSITIVE_FIELDS = {"password", "password_hash", "token", "secret", "api_key", "api_secret", "authorization"}

# Attributes every LogRecord has; anything else came from ``extra=``.
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _extra_fields(record: logging.LogRecord) -> dict:
    return {k: v for k, v in vars(record).items() if k not in _RECORD_ATTRS}


class SensitiveDataFilter(logging.Filter):
    """Mask credential-like values passed through ``extra``."""

    def filter(self, record):
        for key in _extra_fields(record):
            if key.lower() in SENSITIVE_FIELDS:
                setattr(record, key, "***")
        return True


class JSONFormatter(logging.Formatter):
    def format(self, record):
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(_extra_fields(record))
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_data, default=str)


def configure_logging(level: str = "INFO", fmt: str = "verbose") -> None:
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "sensitive": {"()": SensitiveDataFilter},
        },
        "formatters": {
            "verbose": {
                "format": "{levelname} {asctime} {name} {message}",
                "style": "{",
            },
            "json": {"()": JSONFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json" if fmt == "json" else "verbose",
                "filters": ["sensitive"],
            },
        },
        "root": {"handlers": ["console"], "level": level.upper()},
        "loggers": {
            "uvicorn.access": {"level": "WARNING"},
            "sqlalchemy.engine": {"level": "WARNING"},
        },
    })
