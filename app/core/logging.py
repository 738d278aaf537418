"""Logging configuration.

Installs a single root handler whose level and format come from settings.
Modules log through ``logging.getLogger(__name__)``.
"""

import json
import logging
from datetime import datetime, timezone

from app.core.config import LogFormatEnum, Settings

SIMPLE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: Settings) -> None:
    """Configure the root logger from application settings."""
    handler = logging.StreamHandler()
    if config.log_format == LogFormatEnum.json:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(config.log_level.value)

    # SQL echo is controlled by the debug flag, not the root level
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if config.debug else logging.WARNING
    )
