"""Structured JSON logging formatter for compliance audit logs."""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = ("operation", "spa_id", "imported", "skipped", "record_count")


class JSONFormatter(logging.Formatter):
    """Output log records as single-line JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "timestamp": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_obj["exception"] = self.formatException(record.exc_info)
        for name in EXTRA_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                log_obj[name] = value
        return json.dumps(log_obj, default=str)
