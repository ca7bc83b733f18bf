"""Logging setup for ab-ledger.

Log lines go to stderr so the scripts can write their reports to stdout.
Ledger entities are tagged through ``extra``::

    logger.info("Deleted customer %s", cid, extra={"customer_id": cid})

Both formatters pick those ids up from the record.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any

from ab_ledger.serialization import serialize_value

ENTITY_FIELDS = ("customer_id", "transaction_id", "labour_id", "payment_id")

STANDARD_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def entity_ids(record: logging.LogRecord) -> dict[str, str]:
    """Ledger ids attached to ``record``, in :data:`ENTITY_FIELDS` order."""
    ids = {}
    for name in ENTITY_FIELDS:
        value = getattr(record, name, None)
        if value is not None:
            ids[name] = str(value)
    return ids


def _json_default(value: Any) -> Any:
    converted = serialize_value(value)
    return str(value) if converted is value else converted


class LedgerFormatter(logging.Formatter):
    """Plain-text formatter that appends ``key=value`` entity tags."""

    def __init__(self) -> None:
        super().__init__(fmt=STANDARD_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        ids = entity_ids(record)
        if not ids:
            return line
        tags = " ".join(f"{k}={v}" for k, v in ids.items())
        head, sep, tail = line.partition("\n")
        return f"{head} [{tags}]{sep}{tail}"


class JsonFormatter(logging.Formatter):
    """One JSON object per record; amounts and dates rendered as in documents."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(entity_ids(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Free-form fields passed via ``extra={"extra": {...}}``
        if isinstance(getattr(record, "extra", None), dict):
            log_data.update(record.extra)

        return json.dumps(log_data, default=_json_default)


def setup_logging(
    level: str = "INFO",
    format_type: str = "standard",
    stream: IO[str] | None = None,
) -> None:
    """Configure logging for ab-ledger.

    Parameters
    ----------
    level : str
        Log level name; unknown names fall back to INFO.
    format_type : str
        ``"json"`` for :class:`JsonFormatter`, anything else for
        :class:`LedgerFormatter`.
    stream : file-like, optional
        Destination of log lines. Defaults to ``sys.stderr``.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    formatter: logging.Formatter = JsonFormatter() if format_type == "json" else LedgerFormatter()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(log_level)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    logging.getLogger("ab_ledger").setLevel(log_level)
    logging.getLogger("psycopg").setLevel(logging.WARNING)
    logging.getLogger("faker").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
