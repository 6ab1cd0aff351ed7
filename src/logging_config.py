"""Logging setup: leveled records with ``extra`` context rendered as key=value pairs."""

from __future__ import annotations

import logging

# Attributes every LogRecord has; anything else on a record came from ``extra``.
_STANDARD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class KeyValueFormatter(logging.Formatter):
    """Append ``extra`` fields to the message so degraded stages can be queried."""

    def formatMessage(self, record: logging.LogRecord) -> str:
        message = super().formatMessage(record)
        context = {k: v for k, v in vars(record).items() if k not in _STANDARD_ATTRS}
        if not context:
            return message
        pairs = " ".join(f"{key}={value!r}" for key, value in sorted(context.items()))
        return f"{message} {pairs}"


def configure_logging(level: str = "INFO") -> None:
    """Install the key=value formatter on the root logger (no-op if already configured)."""
    handler = logging.StreamHandler()
    handler.setFormatter(KeyValueFormatter(LOG_FORMAT))
    logging.basicConfig(level=level.upper(), handlers=[handler])
