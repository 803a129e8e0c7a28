"""
Structured Logging Configuration Module

Portal actions (backend writes, simulated transfers, document generation) are
logged as one JSON object per line. Context such as the acting user and the
table touched travels on the record as attributes set through ``log_action``.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

SERVICE_NAME = "bank_portal"

# Record attributes copied into the JSON line when present
CONTEXT_FIELDS = ("user_id", "action", "resource", "details")

PLAIN_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, carrying the portal context fields"""

    def format(self, record):
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "service": SERVICE_NAME,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = SERVICE_NAME,
                  log_format: str = "json") -> logging.Logger:
    """
    Configure the portal logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ...)
        logger_name: Parent logger of the portal modules
        log_format: "json" for structured lines, "text" for a plain console format

    Returns:
        The configured portal logger
    """
    logger = logging.getLogger(logger_name)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter() if log_format == "json" else logging.Formatter(PLAIN_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


def log_action(logger: logging.Logger, level: str, message: str,
               user_id: Optional[str] = None, action: Optional[str] = None,
               resource: Optional[str] = None, extra: Optional[Dict[str, Any]] = None):
    """
    Log a portal action with its context.

    ``extra`` is attached to the record as ``details`` so it can never clash
    with the attributes logging itself reserves.
    """
    context = {
        "user_id": user_id,
        "action": action,
        "resource": resource,
        "details": extra or None,
    }
    logger.log(
        logging.getLevelName(level.upper()),
        message,
        extra={k: v for k, v in context.items() if v is not None},
    )
