"""Structured logging for bankledger.

Every ledger, card, goal and notification event is logged under the
``bankledger`` logger. The CLI attaches one JSON handler to it; library use
leaves handler setup to the host application.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

LOGGER_NAME = "bankledger"

# Attributes log_action puts on a record, in output order
ACTION_FIELDS = ("user_id", "action", "resource", "extra")


class JSONFormatter(logging.Formatter):
    """Render a record as one JSON object per line."""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in ACTION_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level: str = "WARNING", logger_name: str = LOGGER_NAME) -> logging.Logger:
    """Send bankledger logs to stderr as JSON lines.

    Calling it again replaces the previous handler, so repeated CLI
    invocations in one process never duplicate output.
    """
    logger = logging.getLogger(logger_name)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False
    return logger


def log_action(logger: logging.Logger, level: str, message: str,
               user_id: Optional[str] = None, action: Optional[str] = None,
               resource: Optional[str] = None, extra: Optional[dict] = None) -> None:
    """Log message with the acting user, the operation and the row it touched.

    ``resource`` is written as ``<table-ish>:<id>``, e.g. ``account:3``.
    """
    fields = dict(zip(ACTION_FIELDS, (user_id, action, resource, extra)))
    logger.log(
        logging.getLevelName(level.upper()),
        message,
        extra={k: v for k, v in fields.items() if v is not None},
    )
