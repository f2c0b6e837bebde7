"""MovieCatalog Logging Configuration.

Two output modes: ``structured`` (one JSON object per line) and ``dev``
(human-readable). Both pass through ``CredentialRedactionFilter`` so raw
JWTs and Authorization header values never reach a log sink.
"""

import json
import logging
import re
import sys
from typing import Literal

DEV_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# header.payload.signature, each part base64url; JWT headers always start "eyJ"
JWT_PATTERN = re.compile(r"eyJ[\w-]*\.[\w-]+\.[\w-]*")
AUTH_HEADER_PATTERN = re.compile(r"\b(Bearer|Basic)\s+[\w.+/=-]+", re.IGNORECASE)

# Request context a caller may attach via ``extra=``
CONTEXT_FIELDS = ("method", "path", "status_code", "user_id")


def redact_credentials(message: str) -> str:
    """Mask bearer/basic credentials and bare JWTs in ``message``."""
    message = AUTH_HEADER_PATTERN.sub(lambda m: f"{m.group(1)} [REDACTED]", message)
    return JWT_PATTERN.sub("[REDACTED_JWT]", message)


class CredentialRedactionFilter(logging.Filter):
    """Rewrite each record's message with credentials masked."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        redacted = redact_credentials(message)
        if redacted != message:
            record.msg = redacted
            record.args = None
        return True


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter.

    Serialises every record with json.dumps() so quotes, backslashes and
    newlines in messages never produce malformed lines. Request context
    passed through ``extra=`` is emitted as top-level keys.
    """

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%dT%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value
        if record.exc_info and record.exc_info[0] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging(
    level: str = "INFO",
    format_type: Literal["structured", "dev"] = "dev",
) -> None:
    """
    Configure application logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: Log format - 'structured' for JSON, 'dev' for readable
    """
    numeric_level = getattr(logging, level.upper())
    handler = logging.StreamHandler(sys.stdout)
    if format_type == "structured":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEV_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(CredentialRedactionFilter())

    logging.root.handlers = [handler]
    logging.root.setLevel(numeric_level)

    for logger_name in ["uvicorn", "uvicorn.error", "uvicorn.access"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.DEBUG if numeric_level == logging.DEBUG else logging.WARNING
    )

    logging.getLogger("moviecatalog").info(
        f"Logging configured: level={level}, format={format_type}"
    )


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the moviecatalog prefix."""
    return logging.getLogger(f"moviecatalog.{name}")
